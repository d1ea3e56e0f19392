"""Background timers for the periodic laundry scan and reminder check."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

LOGGER = logging.getLogger(__name__)


class RepeatingTimer:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread.

    Callbacks only read state and publish derived output. An exception in one
    tick is logged and the next tick still runs.
    """

    def __init__(self, name: str, interval: float, callback: Callable[[], None]) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.interval = interval
        self.callback = callback
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=f"timer:{self.name}", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.callback()
            except Exception:
                LOGGER.exception("Timer callback failed", extra={"timer": self.name})

    def cancel(self, timeout: float = 2.0) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        self._thread = None


__all__ = ["RepeatingTimer"]
