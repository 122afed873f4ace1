"""Dataclasses describing settings and scan objects for notewhisper."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PurePosixPath
from typing import List, Optional

PROCESSED_MARKER = "#transcribed"
DEFAULT_TRANSCRIPTION_URL = "https://api.openai.com/v1/audio/transcriptions"
DEFAULT_ANALYSIS_URL = "https://api.openai.com/v1/chat/completions"


@dataclass(slots=True)
class Settings:
    """User configuration stored on disk."""

    api_key: str = ""
    model: str = "whisper-1"
    language: str = "en"
    prompt: str = ""
    api_url: str = DEFAULT_TRANSCRIPTION_URL
    auth_header: str = ""
    save_audio_file: bool = False
    save_audio_file_path: str = ""
    create_new_file_after_recording: bool = False
    create_new_file_after_recording_path: str = ""
    debug_mode: bool = False
    vault_path: Optional[str] = None
    analysis_url: str = DEFAULT_ANALYSIS_URL
    analysis_model: str = "gpt-4o-mini"
    analyze_transcripts: bool = True
    attachments_folder: str = "Attachments"
    scan_folder: str = ""
    debounce_seconds: float = 5.0
    scan_on_startup: bool = False
    transcode_audio: bool = True
    ffmpeg_path: str = "ffmpeg"
    api_timeout: float = 120.0
    verify_ssl: bool = True


class RecordingStatus(enum.Enum):
    IDLE = "idle"
    RECORDING = "recording"
    PROCESSING = "processing"


@dataclass(slots=True, frozen=True)
class AudioReference:
    """An embedded audio token found in note text.

    ``raw`` is the text between the double brackets, alias and fragment
    included; ``path`` is what remains once those are stripped.
    """

    raw: str
    path: str

    @property
    def basename(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def markup(self) -> str:
        return f"![[{self.raw}]]"


@dataclass(slots=True)
class ResolvedAsset:
    """A reference bound to a vault path and the bytes read from it."""

    reference: AudioReference
    path: str
    data: bytes
    created_at: datetime


@dataclass(slots=True)
class TranscriptionResult:
    asset: ResolvedAsset
    transcript: str
    analysis: str = ""

    @property
    def reference(self) -> AudioReference:
        return self.asset.reference


@dataclass(slots=True)
class DocumentReport:
    """Outcome of processing one note."""

    path: str
    found: int = 0
    transcribed: int = 0
    skipped: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    changed: bool = False


@dataclass(slots=True)
class ScanSummary:
    """Outcome of a scan over one or more notes."""

    documents: List[DocumentReport] = field(default_factory=list)

    @property
    def found(self) -> int:
        return sum(report.found for report in self.documents)

    @property
    def transcribed(self) -> int:
        return sum(report.transcribed for report in self.documents)

    @property
    def skipped(self) -> int:
        return sum(len(report.skipped) for report in self.documents)

    @property
    def errors(self) -> List[str]:
        return [error for report in self.documents for error in report.errors]

    @property
    def changed_documents(self) -> List[str]:
        return [report.path for report in self.documents if report.changed]
