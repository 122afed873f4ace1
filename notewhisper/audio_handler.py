"""Turn recorded or uploaded audio into note text."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import PurePosixPath
from typing import Optional

from .config import ConfigError
from .models import Settings
from .remote import RemoteError
from .rewriter import format_transcribed_block
from .scanner import Transcriber
from .status import Notifier
from .transcode import TranscodeError, transcode_to_mp3
from .vault import Vault


def _join(folder: str, name: str) -> str:
    folder = folder.strip("/\\")
    return f"{folder}/{name}" if folder else name


class AudioHandler:
    """Save, transcribe and place a single piece of audio."""

    def __init__(self, settings: Settings, vault: Vault, transcriber: Transcriber, notifier: Notifier) -> None:
        self.settings = settings
        self.vault = vault
        self.transcriber = transcriber
        self.notifier = notifier

    def send_audio_data(self, data: bytes, filename: str, active_note: Optional[str] = None) -> Optional[str]:
        """Transcribe ``data`` and return the text, or ``None`` on failure.

        Depending on settings the audio is kept in the vault and the text
        lands in a new note; otherwise it is appended to ``active_note`` when
        one is given.
        """

        if not data:
            self.notifier.notify("There was no audio data to transcribe.")
            return None

        audio_path: Optional[str] = None
        if self.settings.save_audio_file:
            audio_path = _join(self.settings.save_audio_file_path, filename)
            try:
                self.vault.write_bytes(audio_path, data)
            except OSError as exc:
                logging.exception("Failed to save audio file %s", audio_path)
                self.notifier.notify(f"Error saving audio file: {exc}")
                return None

        try:
            upload, upload_name = data, filename
            if self.settings.transcode_audio:
                upload, upload_name = transcode_to_mp3(data, filename, self.settings.ffmpeg_path)
            text = self.transcriber.transcribe(upload, upload_name)
        except (ConfigError, RemoteError, TranscodeError) as exc:
            logging.warning("Transcription of %s failed: %s", filename, exc)
            self.notifier.notify(f"Error parsing audio: {exc}")
            return None

        try:
            if self.settings.create_new_file_after_recording:
                note_path = _join(
                    self.settings.create_new_file_after_recording_path,
                    f"{PurePosixPath(filename).stem}.md",
                )
                content = text + "\n"
                if audio_path is not None:
                    content = format_transcribed_block(f"![[{audio_path}]]", datetime.now(), text)
                self.vault.write_text(note_path, content)
                self.notifier.notify(f"Transcription saved to {note_path}.")
            elif active_note is not None:
                existing = self.vault.read_text(active_note) if self.vault.exists(active_note) else ""
                separator = "" if not existing or existing.endswith("\n") else "\n"
                self.vault.write_text(active_note, f"{existing}{separator}{text}\n")
                self.notifier.notify(f"Transcription added to {active_note}.")
            else:
                self.notifier.notify("Transcription complete.")
        except OSError as exc:
            logging.exception("Failed to write transcription for %s", filename)
            self.notifier.notify(f"Error writing transcription: {exc}")
            return None
        return text
