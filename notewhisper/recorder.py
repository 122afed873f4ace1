"""Microphone capture."""

from __future__ import annotations

import io
import logging
from typing import Optional


class AudioRecorder:
    """Capture the default microphone for the start/stop recording command.

    ``stop()`` returns the take as WAV bytes, ready to hand to
    ``AudioHandler.send_audio_data`` for saving into the vault and uploading.
    """

    mime_type = "audio/wav"
    extension = "wav"

    def __init__(self, samplerate: int = 16000, channels: int = 1) -> None:
        try:
            import numpy as np
            import sounddevice as sd  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError(
                "The `sounddevice` package is required for recording. Install notewhisper[record]."
            ) from exc

        self._np = np
        self._sd = sd
        self._samplerate = samplerate
        self._channels = channels
        self._stream: Optional[sd.InputStream] = None
        self._frames: list = []

    @property
    def recording(self) -> bool:
        return self._stream is not None

    def start(self) -> None:
        if self._stream is not None:
            return

        self._frames = []
        self._stream = self._sd.InputStream(
            samplerate=self._samplerate,
            channels=self._channels,
            dtype="float32",
            callback=self._callback,
        )
        self._stream.start()

    def stop(self) -> bytes:
        if self._stream is None:
            raise RuntimeError("Recording is not active.")

        self._stream.stop()
        self._stream.close()
        self._stream = None

        if not self._frames:
            raise RuntimeError("No audio was captured.")

        audio = self._np.concatenate(self._frames, axis=0)

        try:
            import soundfile as sf  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError(
                "The `soundfile` package is required to write audio files. Install notewhisper[record]."
            ) from exc

        buffer = io.BytesIO()
        sf.write(buffer, audio, self._samplerate, format="WAV")
        return buffer.getvalue()

    def _callback(self, indata, frames, time, status) -> None:  # type: ignore[override]
        if status:
            logging.debug("Recorder status: %s", status)
        self._frames.append(indata.copy())
