"""Lifecycle and commands tying the components together."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import httpx
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .analyzer import AnalysisClient
from .audio_handler import AudioHandler
from .extractor import AUDIO_EXTENSIONS
from .models import DocumentReport, RecordingStatus, ScanSummary, Settings
from .scanner import Scanner
from .scheduling import Debouncer, Scheduler, ThreadingScheduler
from .status import LogNotifier, Notifier, StatusBar
from .transcriber import TranscriptionClient
from .vault import Vault

WATCHED_SUFFIXES = (".md",) + AUDIO_EXTENSIONS


@dataclass
class PluginContext:
    """Everything the plugin needs from its host."""

    settings: Settings
    vault: Vault
    scheduler: Scheduler = field(default_factory=ThreadingScheduler)
    notifier: Notifier = field(default_factory=LogNotifier)
    http_client: Optional[httpx.Client] = None
    recorder_factory: Optional[Callable[[], object]] = None


class _ChangeHandler(FileSystemEventHandler):
    def __init__(
        self,
        on_change: Callable[[], None],
        ignore: Callable[[str], bool] = lambda path: False,
    ) -> None:
        self._on_change = on_change
        self._ignore = ignore

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed", "closed_no_write"):
            return
        paths = [str(p) for p in (event.src_path, getattr(event, "dest_path", "")) if p]
        changed = [p for p in paths if p.lower().endswith(WATCHED_SUFFIXES) and not self._ignore(p)]
        if changed:
            self._on_change()


class NoteWhisperPlugin:
    """Build the pipeline from a :class:`PluginContext` and expose its commands."""

    def __init__(self) -> None:
        self.context: Optional[PluginContext] = None
        self.status = StatusBar()
        self.scanner: Optional[Scanner] = None
        self.audio_handler: Optional[AudioHandler] = None
        self.debouncer: Optional[Debouncer] = None
        self._transcriber: Optional[TranscriptionClient] = None
        self._analyzer: Optional[AnalysisClient] = None
        self._recorder = None
        self._observer = None

    def start(self, context: PluginContext) -> None:
        self.context = context
        settings = context.settings
        self._transcriber = TranscriptionClient(settings, client=context.http_client)
        self._analyzer = AnalysisClient(settings, client=context.http_client)
        self.scanner = Scanner(
            settings,
            context.vault,
            self._transcriber,
            self._analyzer,
            self.status,
            context.notifier,
        )
        self.audio_handler = AudioHandler(settings, context.vault, self._transcriber, context.notifier)
        self.debouncer = Debouncer(context.scheduler, settings.debounce_seconds, self._debounced_scan)
        logging.debug("Plugin started for vault %s", context.vault.root)

    def stop(self) -> None:
        if self.debouncer is not None:
            self.debouncer.cancel()
        self.stop_watching()
        if self._recorder is not None and getattr(self._recorder, "recording", False):
            self._recorder.stop()
        for client in (self._transcriber, self._analyzer):
            if client is not None:
                client.close()
        self.status.remove()
        logging.debug("Plugin stopped")

    def _require_started(self) -> PluginContext:
        if self.context is None or self.scanner is None:
            raise RuntimeError("Plugin has not been started.")
        return self.context

    def scan_active_document(self, path: str) -> Optional[DocumentReport]:
        self._require_started()
        return self.scanner.scan_document(path)

    def scan_all(self) -> Optional[ScanSummary]:
        context = self._require_started()
        summary = self.scanner.scan_folder()
        if summary is None:
            context.notifier.notify("A scan is already running.")
        return summary

    def on_file_change(self) -> None:
        self._require_started()
        self.debouncer.trigger()

    def on_workspace_ready(self) -> None:
        context = self._require_started()
        if context.settings.scan_on_startup:
            self.debouncer.trigger()

    def _debounced_scan(self) -> None:
        if self.scanner.scan_folder() is None:
            logging.debug("Scan still running; re-arming the debounce timer")
            self.debouncer.trigger()

    def change_handler(self) -> FileSystemEventHandler:
        """Event handler that feeds the debouncer, ignoring echoes of our own writes."""

        context = self._require_started()
        return _ChangeHandler(self.on_file_change, ignore=context.vault.recently_written)

    def start_watching(self) -> None:
        context = self._require_started()
        if self._observer is not None:
            return
        folder = context.settings.scan_folder
        target = context.vault.absolute(folder) if folder else context.vault.root
        observer = Observer()
        observer.schedule(self.change_handler(), str(target), recursive=True)
        observer.start()
        self._observer = observer
        logging.info("Watching %s for changes", target)
        self.on_workspace_ready()

    def stop_watching(self) -> None:
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None

    def upload_audio_file(self, audio: Path, active_note: Optional[str] = None) -> Optional[str]:
        self._require_started()
        return self.audio_handler.send_audio_data(audio.read_bytes(), audio.name, active_note)

    def toggle_recording(self, active_note: Optional[str] = None) -> Optional[str]:
        """Start recording when idle; otherwise stop and transcribe."""

        context = self._require_started()
        if self.status.status is not RecordingStatus.RECORDING:
            if self._recorder is None:
                self._recorder = self._make_recorder()
            self._recorder.start()
            self.status.update_status(RecordingStatus.RECORDING)
            return None

        self.status.update_status(RecordingStatus.PROCESSING)
        try:
            data = self._recorder.stop()
            extension = getattr(self._recorder, "extension", "wav")
            filename = f"{datetime.now().isoformat().replace(':', '-').replace('.', '-')}.{extension}"
            return self.audio_handler.send_audio_data(data, filename, active_note)
        except RuntimeError as exc:
            logging.warning("Recording failed: %s", exc)
            context.notifier.notify(f"Recording error: {exc}")
            return None
        finally:
            self.status.update_status(RecordingStatus.IDLE)

    def _make_recorder(self):
        if self.context.recorder_factory is not None:
            return self.context.recorder_factory()
        from .recorder import AudioRecorder

        return AudioRecorder()
