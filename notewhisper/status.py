"""Status indicator and user notices."""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Protocol

from .models import RecordingStatus

StatusListener = Callable[[RecordingStatus], None]


class Notifier(Protocol):
    """Surface a short message to the user."""

    def notify(self, message: str) -> None:
        ...


class LogNotifier:
    """Notifier used when nothing interactive is attached."""

    def notify(self, message: str) -> None:
        logging.info("Notice: %s", message)


class StatusBar:
    """Track whether we are idle, recording or processing."""

    def __init__(self) -> None:
        self._status = RecordingStatus.IDLE
        self._listeners: List[StatusListener] = []
        self._lock = threading.Lock()

    @property
    def status(self) -> RecordingStatus:
        return self._status

    def subscribe(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    def update_status(self, status: RecordingStatus) -> None:
        with self._lock:
            if status is self._status:
                return
            logging.debug("Status %s -> %s", self._status.value, status.value)
            self._status = status
        for listener in list(self._listeners):
            listener(status)

    def remove(self) -> None:
        self._listeners.clear()
