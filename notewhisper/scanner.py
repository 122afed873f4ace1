"""Scan notes for audio embeds, transcribe them and write the results back."""

from __future__ import annotations

import logging
import threading
from pathlib import PurePosixPath
from typing import List, Optional, Protocol, Tuple

from .config import ConfigError
from .extractor import extract_references
from .models import (
    AudioReference,
    DocumentReport,
    RecordingStatus,
    ResolvedAsset,
    ScanSummary,
    Settings,
    TranscriptionResult,
)
from .remote import RemoteError
from .resolver import PathResolver, ResolutionError
from .rewriter import rewrite_document
from .status import Notifier, StatusBar
from .transcode import TranscodeError, transcode_to_mp3
from .vault import Vault

# Failures that cost one reference, never the batch.
SKIPPABLE_ERRORS: Tuple[type, ...] = (ResolutionError, OSError, TranscodeError, RemoteError, ConfigError)
UNREADABLE_NOTE_ERRORS: Tuple[type, ...] = (OSError, UnicodeDecodeError)


class Transcriber(Protocol):
    def transcribe(self, data: bytes, filename: str) -> str:
        ...


class Analyzer(Protocol):
    def analyze(self, transcript: str) -> str:
        ...


class Scanner:
    """Drive extraction, resolution, transcription, analysis and rewriting.

    Documents and references are processed one at a time. Only one scan may
    run at once; a scan requested while another is in flight returns ``None``.
    """

    def __init__(
        self,
        settings: Settings,
        vault: Vault,
        transcriber: Transcriber,
        analyzer: Optional[Analyzer],
        status: StatusBar,
        notifier: Notifier,
        resolver: Optional[PathResolver] = None,
    ) -> None:
        self.settings = settings
        self.vault = vault
        self.transcriber = transcriber
        self.analyzer = analyzer
        self.status = status
        self.notifier = notifier
        self.resolver = resolver or PathResolver(vault, settings.attachments_folder)
        self._in_flight = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._in_flight.locked()

    def scan_document(self, path: str) -> Optional[DocumentReport]:
        """Transcribe the audio embedded in a single note."""

        if not self._in_flight.acquire(blocking=False):
            logging.info("Scan of %s rejected: another scan is running", path)
            self.notifier.notify("A scan is already running.")
            return None
        try:
            self.status.update_status(RecordingStatus.PROCESSING)
            self.vault.refresh()
            try:
                report = self._process_document(path)
            except UNREADABLE_NOTE_ERRORS as exc:
                logging.exception("Could not read note %s", path)
                self.notifier.notify(f"Could not read note {path}: {exc}")
                return DocumentReport(path=path)
            if report is None:
                self.notifier.notify("No audio files found in the current note.")
                return DocumentReport(path=path)
            self.notifier.notify(_summary_message(ScanSummary(documents=[report])))
            return report
        finally:
            self.status.update_status(RecordingStatus.IDLE)
            self._in_flight.release()

    def scan_folder(self, folder: Optional[str] = None) -> Optional[ScanSummary]:
        """Transcribe the audio embedded in every note under ``folder``."""

        if not self._in_flight.acquire(blocking=False):
            logging.info("Batch scan rejected: another scan is running")
            return None
        folder = self.settings.scan_folder if folder is None else folder
        summary = ScanSummary()
        try:
            self.status.update_status(RecordingStatus.PROCESSING)
            self.vault.refresh()
            for path in self.vault.markdown_files(folder):
                try:
                    report = self._process_document(path)
                except UNREADABLE_NOTE_ERRORS:
                    logging.exception("Could not process note %s", path)
                    continue
                if report is not None:
                    summary.documents.append(report)

            if not summary.documents:
                self.notifier.notify("No audio files found to transcribe.")
            else:
                self.notifier.notify(_summary_message(summary))
            return summary
        finally:
            self.status.update_status(RecordingStatus.IDLE)
            self._in_flight.release()

    def _process_document(self, path: str) -> Optional[DocumentReport]:
        text = self.vault.read_text(path)
        references = extract_references(text)
        if not references:
            return None

        logging.info("Found %d audio reference(s) in %s", len(references), path)
        report = DocumentReport(path=path, found=len(references))
        results: List[TranscriptionResult] = []
        for reference in references:
            try:
                results.append(self._transcribe_reference(reference, path))
            except SKIPPABLE_ERRORS as exc:
                logging.warning("Skipping %s in %s: %s", reference.markup, path, exc)
                report.skipped.append(reference.raw)
                report.errors.append(str(exc))

        report.transcribed = len(results)
        if results:
            updated = rewrite_document(text, results)
            if updated != text:
                self.vault.write_text(path, updated)
                report.changed = True
        return report

    def _transcribe_reference(self, reference: AudioReference, source_path: str) -> TranscriptionResult:
        asset_path = self.resolver.resolve(reference.path, source_path)
        data = self.vault.read_bytes(asset_path)
        asset = ResolvedAsset(
            reference=reference,
            path=asset_path,
            data=data,
            created_at=self.vault.created_at(asset_path),
        )

        upload, filename = data, PurePosixPath(asset_path).name
        if self.settings.transcode_audio:
            upload, filename = transcode_to_mp3(data, filename, self.settings.ffmpeg_path)

        transcript = self.transcriber.transcribe(upload, filename)
        if not transcript:
            logging.warning("Empty transcript for %s", asset_path)
        return TranscriptionResult(asset=asset, transcript=transcript, analysis=self._analyze(transcript, asset_path))

    def _analyze(self, transcript: str, asset_path: str) -> str:
        if self.analyzer is None or not self.settings.analyze_transcripts or not transcript:
            return ""
        try:
            return self.analyzer.analyze(transcript)
        except (RemoteError, ConfigError) as exc:
            logging.warning("Analysis failed for %s; keeping transcript only: %s", asset_path, exc)
            return ""


def _summary_message(summary: ScanSummary) -> str:
    notes = len(summary.documents)
    message = (
        f"Transcribed {summary.transcribed} of {summary.found} audio file(s) "
        f"in {notes} note{'s' if notes != 1 else ''}."
    )
    if summary.skipped:
        message += f" {summary.skipped} skipped (last error: {summary.errors[-1]})."
    return message
