"""Periodic ticker driving the elapsed-time counter."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ThreadingTicker:
    """Calls ``callback`` every ``interval_s`` on a daemon thread.

    ``start`` cancels any running loop before scheduling a new one, so at
    most one loop is live. ``stop`` only signals the loop and never joins:
    the callback may be blocked on a lock held by the caller of ``stop``.
    """

    def __init__(self, interval_s: float = 1.0) -> None:
        self.interval_s = interval_s
        self._lock = threading.Lock()
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        with self._lock:
            return self._stop_event is not None and not self._stop_event.is_set()

    def start(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if self._stop_event is not None:
                self._stop_event.set()
            stop_event = threading.Event()
            self._stop_event = stop_event
            self._thread = threading.Thread(
                target=self._run,
                args=(stop_event, callback),
                name="elapsed-ticker",
                daemon=True,
            )
            self._thread.start()

    def stop(self) -> None:
        with self._lock:
            if self._stop_event is not None:
                self._stop_event.set()
            self._stop_event = None
            self._thread = None

    def _run(self, stop_event: threading.Event, callback: Callable[[], None]) -> None:
        while not stop_event.wait(self.interval_s):
            try:
                callback()
            except Exception:
                logger.exception("ticker callback failed")
