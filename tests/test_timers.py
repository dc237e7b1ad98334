"""Tests for the one-shot timer and the simulated scheduler."""

import pytest

from cwkey.timers import ManualScheduler, OneShotTimer


class TestManualScheduler:
    """Test ManualScheduler class."""

    def test_fires_in_deadline_order(self, sched):
        fired = []
        sched.call_later(30, lambda: fired.append(('b', sched.now())))
        sched.call_later(10, lambda: fired.append(('a', sched.now())))
        sched.advance(50)
        assert fired == [('a', 10), ('b', 30)]
        assert sched.now() == 50

    def test_not_due_yet(self, sched):
        fired = []
        sched.call_later(30, lambda: fired.append(1))
        sched.advance(29)
        assert fired == []
        assert sched.pending() == 1

    def test_cancel_after_fire_leaves_nothing(self, sched):
        h = sched.call_later(10, lambda: None)
        sched.advance(10)
        sched.cancel(h)
        assert sched._cancelled == set()
        assert sched.pending() == 0

    def test_cancel(self, sched):
        fired = []
        h = sched.call_later(10, lambda: fired.append(1))
        sched.cancel(h)
        sched.advance(100)
        assert fired == []
        assert sched.pending() == 0

    def test_callback_can_reschedule_within_window(self, sched):
        fired = []

        def tick():
            fired.append(sched.now())
            if len(fired) < 3:
                sched.call_later(10, tick)

        sched.call_later(10, tick)
        sched.advance(100)
        assert fired == [10, 20, 30]


class TestOneShotTimer:
    """Test OneShotTimer class."""

    def test_last_armed_wins(self, sched):
        fired = []
        t = OneShotTimer(sched, lambda: fired.append(sched.now()))
        t.arm(50)
        t.arm(80)
        sched.advance(100)
        assert fired == [80]

    def test_pending_flag(self, sched):
        t = OneShotTimer(sched, lambda: None)
        assert not t.pending
        t.arm(10)
        assert t.pending
        sched.advance(10)
        assert not t.pending

    def test_cancel(self, sched):
        fired = []
        t = OneShotTimer(sched, lambda: fired.append(1))
        t.arm(10)
        t.cancel()
        sched.advance(20)
        assert fired == []
        assert not t.pending

    def test_rearm_from_callback(self, sched):
        fired = []
        t = OneShotTimer(sched)

        def cb():
            fired.append(sched.now())
            if len(fired) < 2:
                t.arm(5, cb)

        t.arm(5, cb)
        sched.advance(20)
        assert fired == [5, 10]

    def test_no_callback(self, sched):
        with pytest.raises(ValueError):
            OneShotTimer(sched).arm(10)
