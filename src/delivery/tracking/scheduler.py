# scheduler.py
# Cancellable repeating task used for live-location polling.

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PollScheduler:
    """
    Runs a callback every ``interval_s`` seconds on a daemon thread.

    The first call happens one interval after start(); the session performs
    its immediate fetch itself. cancel() returns at once: no further tick is
    started afterwards, a tick already running is left to finish.

    Args:
        interval_s: Seconds between ticks.
        name:       Thread name, useful in logs.
    """

    def __init__(self, interval_s: float, name: str = "poll") -> None:
        self.interval_s = interval_s
        self.name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and not self._stop.is_set()

    def start(self, callback: Callable[[], None]) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._run, args=(callback,), name=self.name, daemon=True,
        )
        self._thread.start()
        logger.debug(f"[{self.name}] polling every {self.interval_s}s")

    def cancel(self) -> None:
        """Stop scheduling ticks. Safe to call repeatedly and from inside a tick."""
        if self._stop.is_set():
            return
        self._stop.set()
        logger.debug(f"[{self.name}] cancelled")

    def join(self, timeout: Optional[float] = None) -> None:
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self, callback: Callable[[], None]) -> None:
        while not self._stop.wait(self.interval_s):
            try:
                callback()
            except Exception:
                logger.exception(f"[{self.name}] tick failed")
