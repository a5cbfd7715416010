"""Trailing-edge debounce for bursty events (container resize)."""

from __future__ import annotations

import threading
from typing import Any, Callable


class Debouncer:
    """Run ``func`` once, ``wait_ms`` after the last call.

    Each ``call`` cancels the pending run and schedules a new one with the
    latest arguments, so a burst collapses into a single invocation.
    ``timer_factory`` defaults to ``threading.Timer``; tests inject a fake.
    """

    def __init__(
        self,
        func: Callable[..., Any],
        wait_ms: int = 250,
        timer_factory: Callable[..., Any] = threading.Timer,
    ) -> None:
        self._func = func
        self._wait = wait_ms / 1000.0
        self._timer_factory = timer_factory
        self._timer = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def call(self, *args, **kwargs) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._timer = self._timer_factory(
                self._wait, self._fire, args=(self._generation, args, kwargs)
            )
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def flush(self) -> None:
        """Run the pending invocation now, if any."""
        with self._lock:
            timer, self._timer = self._timer, None
            self._generation += 1
        if timer is not None:
            timer.cancel()
            _, args, kwargs = timer.args
            self._func(*args, **kwargs)

    def _fire(self, generation: int, args: tuple, kwargs: dict) -> None:
        with self._lock:
            # a newer call or cancel superseded this timer
            if generation != self._generation:
                return
            self._timer = None
        self._func(*args, **kwargs)
