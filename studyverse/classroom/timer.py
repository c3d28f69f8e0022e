"""
Countdown timer sources for focus sessions.

A timer factory takes (interval_seconds, callback) and returns a started
TimerHandle. The caller owns the handle and must cancel it on every exit
path; a cancelled handle never fires again.
"""

import logging
import threading
from typing import Callable, Optional, Protocol


logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...

    @property
    def active(self) -> bool:
        ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


class RepeatingTimer:
    """
    Call a function every `interval` seconds on a daemon thread.

    cancel() may be called from any thread, including from inside the
    callback itself.
    """

    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = float(interval)
        self.callback = callback
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def start_new(cls, interval: float, callback: Callable[[], None]) -> "RepeatingTimer":
        """Create and start a timer. Usable as a TimerFactory."""
        timer = cls(interval, callback)
        timer.start()
        return timer

    @property
    def active(self) -> bool:
        return self._thread is not None and not self._stopped.is_set()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._loop, daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        self._stopped.set()
        thread = self._thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=self.interval + 1.0)

    def _loop(self) -> None:
        while not self._stopped.wait(self.interval):
            try:
                self.callback()
            except Exception:
                logger.exception("Timer callback failed; stopping timer")
                self._stopped.set()
