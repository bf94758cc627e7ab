from __future__ import annotations

import threading
from typing import Callable, Optional


# PUBLIC_INTERFACE
class Debouncer:
    """Coalesce rapid triggers into one callback after a quiet period.

    Every ``trigger`` cancels the pending timer and starts a new one, so the
    callback runs once ``delay_secs`` after the last trigger. Timers are
    daemon threads and may fire after the owning session has closed.

    ``timer_factory`` defaults to ``threading.Timer``; tests pass a fake with
    the same ``(interval, function)`` constructor and ``start``/``cancel``.
    """

    def __init__(
        self,
        delay_secs: float,
        callback: Callable[[], None],
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self.delay_secs = delay_secs
        self._callback = callback
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def trigger(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            generation = self._generation
            timer = self._timer_factory(self.delay_secs, lambda: self._fire(generation))
            timer.daemon = True
            self._timer = timer
        timer.start()

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A timer cancelled after it started running must not fire
            if generation != self._generation or self._timer is None:
                return
            self._timer = None
        self._callback()

    def flush(self) -> bool:
        """Run a pending callback now; returns False if nothing was pending."""
        with self._lock:
            timer, self._timer = self._timer, None
            self._generation += 1
        if timer is None:
            return False
        timer.cancel()
        self._callback()
        return True

    def cancel(self) -> None:
        with self._lock:
            timer, self._timer = self._timer, None
            self._generation += 1
        if timer is not None:
            timer.cancel()
