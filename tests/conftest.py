"""Shared fakes for notewhisper tests."""

from datetime import datetime

import pytest

from notewhisper.models import Settings
from notewhisper.vault import Vault


class FakeTranscriber:
    def __init__(self, text="hello", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def transcribe(self, data, filename):
        self.calls.append((data, filename))
        if self.error is not None:
            raise self.error
        return self.text


class FakeAnalyzer:
    def __init__(self, text="- [ ] follow up", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def analyze(self, transcript):
        self.calls.append(transcript)
        if self.error is not None:
            raise self.error
        return self.text


class RecordingNotifier:
    def __init__(self):
        self.messages = []

    def notify(self, message):
        self.messages.append(message)


class FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    def __init__(self):
        self.timers = []

    def call_later(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self):
        return [t for t in self.timers if not t.cancelled]

    def fire(self):
        for timer in self.active:
            timer.cancelled = True
            timer.callback()


@pytest.fixture
def settings():
    return Settings(api_key="sk-test", transcode_audio=False)


@pytest.fixture
def vault(tmp_path):
    return Vault(tmp_path)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def fixed_created(monkeypatch):
    created = datetime(2024, 5, 1, 9, 30)
    monkeypatch.setattr(Vault, "created_at", lambda self, path: created)
    return created


def write(vault, path, content):
    target = vault.absolute(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        target.write_bytes(content)
    else:
        target.write_text(content)
