from __future__ import annotations
import threading
from typing import Callable, List

from hkpstore.logger import get_logger
from hkpstore.models import KeyChange

log = get_logger("hkpstore.storage.notify")

Listener = Callable[[KeyChange], None]


class NotificationBus:
    """
    In-process fan-out of key change events.

    Delivery is synchronous, in registration order, and serialized by a
    single lock. A failing listener is logged and skipped; it never reaches
    the caller that triggered the change.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def notify(self, change: KeyChange) -> None:
        with self._lock:
            for listener in self._listeners:
                try:
                    listener(change)
                except Exception:
                    log.exception(f"[NOTIFY] listener {listener!r} failed on {change.kind} event")

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)
