import subprocess
from pathlib import Path

from notewhisper import transcode
from notewhisper.transcode import TranscodeError, transcode_to_mp3


def test_transcode_runs_ffmpeg_and_returns_mp3(monkeypatch):
    seen = {}

    def fake_run(command, capture_output, text, check):
        seen["command"] = command
        assert Path(command[command.index("-i") + 1]).read_bytes() == b"m4a-bytes"
        Path(command[-1]).write_bytes(b"mp3-bytes")
        return subprocess.CompletedProcess(command, 0, "", "")

    monkeypatch.setattr(transcode.subprocess, "run", fake_run)

    data, name = transcode_to_mp3(b"m4a-bytes", "Attachments/memo.m4a", ffmpeg_path="/opt/ffmpeg")
    assert (data, name) == (b"mp3-bytes", "memo.mp3")
    assert seen["command"][0] == "/opt/ffmpeg"
    assert "libmp3lame" in seen["command"]
    assert "64k" in seen["command"]


def test_transcode_failures(monkeypatch):
    def failing_run(command, capture_output, text, check):
        return subprocess.CompletedProcess(command, 1, "", "Invalid data found")

    monkeypatch.setattr(transcode.subprocess, "run", failing_run)
    try:
        transcode_to_mp3(b"x", "a.m4a")
    except TranscodeError as exc:
        assert "Invalid data found" in str(exc)
    else:
        raise AssertionError("Expected TranscodeError")

    def missing_binary(command, capture_output, text, check):
        raise FileNotFoundError(command[0])

    monkeypatch.setattr(transcode.subprocess, "run", missing_binary)
    try:
        transcode_to_mp3(b"x", "a.m4a", ffmpeg_path="nope")
    except TranscodeError as exc:
        assert "nope" in str(exc)
    else:
        raise AssertionError("Expected TranscodeError")
