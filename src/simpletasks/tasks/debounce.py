"""Debounced rescans triggered by external change notifications."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from enum import StrEnum
from typing import Protocol

logger = logging.getLogger(__name__)


class _Timer(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], _Timer]


def _daemon_timer(delay: float, fn: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay, fn)
    timer.daemon = True
    return timer


class DebounceState(StrEnum):
    IDLE = "idle"
    PENDING = "pending"


class RescanDebouncer:
    """Collapse bursts of change notifications into one callback.

    Each `on_external_change()` (re)arms a timer `delay` seconds out, replacing
    any pending one. The callback runs once the notifications stop for `delay`
    seconds, or immediately on `flush()`.
    """

    def __init__(
        self,
        callback: Callable[[], object],
        delay: float = 1.0,
        timer_factory: TimerFactory = _daemon_timer,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._callback = callback
        self._delay = delay
        self._timer_factory = timer_factory
        self._clock = clock
        self._lock = threading.Lock()
        self._timer: _Timer | None = None
        self._deadline: float | None = None
        self._generation = 0

    @property
    def state(self) -> DebounceState:
        return DebounceState.IDLE if self._timer is None else DebounceState.PENDING

    @property
    def deadline(self) -> float | None:
        """Clock time the pending rescan fires at, or None when idle."""
        return self._deadline

    def on_external_change(self) -> None:
        """Record a change; (re)schedule the rescan after the quiet window."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            generation = self._generation
            timer = self._timer_factory(self._delay, lambda: self._fire(generation))
            self._timer = timer
            self._deadline = self._clock() + self._delay
            timer.start()
        logger.debug("Rescan scheduled in %.2fs", self._delay)

    def cancel_pending(self) -> bool:
        """Drop the pending rescan. Returns False if there was none."""
        with self._lock:
            return self._clear() is not None

    def flush(self) -> bool:
        """Run a pending rescan now. Returns False if there was none."""
        with self._lock:
            timer = self._clear()
        if timer is None:
            return False
        self._callback()
        return True

    def _clear(self) -> _Timer | None:
        timer = self._timer
        if timer is not None:
            timer.cancel()
        self._timer = None
        self._deadline = None
        return timer

    def _fire(self, generation: int) -> None:
        with self._lock:
            # Superseded by a newer notification, or cancelled.
            if self._timer is None or generation != self._generation:
                return
            self._timer = None
            self._deadline = None
        logger.debug("Quiet window elapsed, rescanning")
        self._callback()
