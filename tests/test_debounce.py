"""Tests for the trailing-edge Debouncer, driven by a manual timer."""

from unittest.mock import MagicMock

import pytest

from coinnovation.utils.debounce import Debouncer


class ManualTimer:
    """threading.Timer look-alike that only fires when told to."""

    created: list["ManualTimer"] = []

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False
        ManualTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args, **self.kwargs)


@pytest.fixture(autouse=True)
def _reset_timers():
    ManualTimer.created = []
    yield
    ManualTimer.created = []


class TestDebouncer:

    def test_burst_collapses_to_last_call(self):
        func = MagicMock()
        debouncer = Debouncer(func, wait_ms=250, timer_factory=ManualTimer)
        for width in (800, 900, 1000):
            debouncer.call(width)
        assert func.call_count == 0
        assert [t.cancelled for t in ManualTimer.created] == [True, True, False]
        ManualTimer.created[-1].fire()
        func.assert_called_once_with(1000)
        assert not debouncer.pending

    def test_wait_converted_to_seconds(self):
        debouncer = Debouncer(MagicMock(), wait_ms=250, timer_factory=ManualTimer)
        debouncer.call()
        timer = ManualTimer.created[0]
        assert timer.interval == 0.25
        assert timer.daemon is True
        assert timer.started is True

    def test_superseded_timer_does_not_fire(self):
        func = MagicMock()
        debouncer = Debouncer(func, timer_factory=ManualTimer)
        debouncer.call(1)
        debouncer.call(2)
        # a cancelled timer that still runs must be ignored
        ManualTimer.created[0].fire()
        assert func.call_count == 0
        ManualTimer.created[1].fire()
        func.assert_called_once_with(2)

    def test_cancel_drops_pending_call(self):
        func = MagicMock()
        debouncer = Debouncer(func, timer_factory=ManualTimer)
        debouncer.call(1)
        debouncer.cancel()
        assert not debouncer.pending
        ManualTimer.created[0].fire()
        func.assert_not_called()

    def test_flush_runs_pending_now(self):
        func = MagicMock()
        debouncer = Debouncer(func, timer_factory=ManualTimer)
        debouncer.call(1200, reason="resize")
        debouncer.flush()
        func.assert_called_once_with(1200, reason="resize")
        assert not debouncer.pending
        # the flushed timer is stale
        ManualTimer.created[0].fire()
        assert func.call_count == 1

    def test_flush_without_pending_is_noop(self):
        func = MagicMock()
        Debouncer(func, timer_factory=ManualTimer).flush()
        func.assert_not_called()
