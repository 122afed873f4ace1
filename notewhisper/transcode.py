"""Shrink audio with ffmpeg before uploading it."""

from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path, PurePosixPath
from typing import Tuple


class TranscodeError(RuntimeError):
    """Raised when ffmpeg is missing or fails."""


def transcode_to_mp3(data: bytes, filename: str, ffmpeg_path: str = "ffmpeg") -> Tuple[bytes, str]:
    """Return ``data`` re-encoded as 64 kbit/s mp3 and the matching file name."""

    source_name = PurePosixPath(filename).name or "audio"
    target_name = f"{PurePosixPath(source_name).stem}.mp3"
    with tempfile.TemporaryDirectory(prefix="notewhisper-") as tmp:
        input_path = Path(tmp) / f"input{PurePosixPath(source_name).suffix}"
        output_path = Path(tmp) / "output.mp3"
        input_path.write_bytes(data)
        command = [
            ffmpeg_path,
            "-hide_banner",
            "-loglevel",
            "error",
            "-y",
            "-i",
            str(input_path),
            "-codec:a",
            "libmp3lame",
            "-b:a",
            "64k",
            "-f",
            "mp3",
            str(output_path),
        ]
        logging.debug("Running %s", " ".join(command))
        try:
            result = subprocess.run(command, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise TranscodeError(f"Could not run ffmpeg at {ffmpeg_path!r}: {exc}") from exc
        if result.returncode != 0:
            raise TranscodeError(f"ffmpeg failed for {source_name}: {result.stderr.strip()}")
        return output_path.read_bytes(), target_name
