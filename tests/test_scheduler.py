import pytest

from element_games.scheduler import Scheduler


class TestScheduler:
    """Explicit timer queue driven by run_due()."""

    def test_call_later_when_not_due_then_does_not_fire(self, clock):
        fired = []
        s = Scheduler(clock)
        s.call_later(1.0, lambda: fired.append("a"))
        clock.advance(0.5)
        assert s.run_due() == 0
        assert fired == []
        assert len(s) == 1

    def test_call_later_when_due_then_fires_once(self, clock):
        fired = []
        s = Scheduler(clock)
        s.call_later(1.0, lambda: fired.append("a"))
        clock.advance(1.0)
        assert s.run_due() == 1
        clock.advance(5.0)
        assert s.run_due() == 0
        assert fired == ["a"]
        assert len(s) == 0

    def test_run_due_when_several_due_then_fires_in_due_order(self, clock):
        fired = []
        s = Scheduler(clock)
        s.call_later(2.0, lambda: fired.append("late"))
        s.call_later(1.0, lambda: fired.append("early"))
        s.call_later(1.0, lambda: fired.append("early-2"))
        clock.advance(3.0)
        s.run_due()
        assert fired == ["early", "early-2", "late"]

    def test_call_every_when_behind_then_fires_once_per_interval(self, clock):
        ticks = []
        s = Scheduler(clock)
        s.call_every(1.0, lambda: ticks.append(clock()))
        clock.advance(3.5)
        assert s.run_due() == 3
        clock.advance(0.5)
        assert s.run_due() == 1
        assert len(ticks) == 4

    def test_call_every_when_interval_not_positive_then_raises(self, clock):
        with pytest.raises(ValueError):
            Scheduler(clock).call_every(0, lambda: None)

    def test_cancel_when_pending_then_never_fires(self, clock):
        fired = []
        s = Scheduler(clock)
        event = s.call_later(1.0, lambda: fired.append("a"))
        s.cancel(event)
        s.cancel(None)
        clock.advance(2.0)
        s.run_due()
        assert fired == []
        assert event.cancelled

    def test_cancel_all_when_called_from_callback_then_stops_remaining(self, clock):
        fired = []
        s = Scheduler(clock)

        def stop():
            fired.append("stop")
            s.cancel_all()

        s.call_later(1.0, stop)
        s.call_later(1.5, lambda: fired.append("after"))
        clock.advance(2.0)
        s.run_due()
        assert fired == ["stop"]
        assert len(s) == 0
