"""Tests for the scheduling primitives."""

import threading

import pytest

from twisterfidget.core import LedBus, LoopScheduler, ManualScheduler, Timeline, TimerGroup
from twisterfidget.core.timers import absolute_steps


@pytest.mark.unit
class TestManualScheduler:
    """Test the virtual clock scheduler."""

    def test_call_later_fires_at_deadline(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(100, lambda: fired.append(scheduler.now()))

        scheduler.advance(99)
        assert fired == []
        scheduler.advance(1)
        assert fired == [100]

    def test_equal_deadlines_run_in_scheduling_order(self):
        scheduler = ManualScheduler()
        order = []
        scheduler.call_later(10, lambda: order.append("a"))
        scheduler.call_later(10, lambda: order.append("b"))
        scheduler.call_later(5, lambda: order.append("c"))

        scheduler.advance(10)
        assert order == ["c", "a", "b"]

    def test_call_every_repeats_until_cancelled(self):
        scheduler = ManualScheduler()
        ticks = []
        handle = scheduler.call_every(50, lambda: ticks.append(scheduler.now()))

        scheduler.advance(200)
        assert ticks == [50, 100, 150, 200]

        handle.cancel()
        scheduler.advance(200)
        assert len(ticks) == 4
        assert scheduler.pending == 0

    def test_call_every_rejects_non_positive_interval(self):
        scheduler = ManualScheduler()
        with pytest.raises(ValueError):
            scheduler.call_every(0, lambda: None)

    def test_cancelled_timer_never_runs(self):
        scheduler = ManualScheduler()
        fired = []
        handle = scheduler.call_later(10, lambda: fired.append(1))
        handle.cancel()
        handle.cancel()

        scheduler.advance(20)
        assert fired == []
        assert handle.cancelled

    def test_callback_error_is_contained(self):
        scheduler = ManualScheduler()
        fired = []

        def boom():
            raise RuntimeError("boom")

        scheduler.call_later(10, boom)
        scheduler.call_later(10, lambda: fired.append(1))

        scheduler.advance(10)
        assert fired == [1]

    def test_timer_scheduled_from_callback_runs_in_same_advance(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(10, lambda: scheduler.call_later(10, lambda: fired.append(scheduler.now())))

        scheduler.advance(25)
        assert fired == [20]
        assert scheduler.now() == 25

    def test_post_runs_on_run_pending(self):
        scheduler = ManualScheduler(start_ms=500)
        fired = []
        scheduler.post(lambda: fired.append(scheduler.now()))

        scheduler.run_pending()
        assert fired == [500]


@pytest.mark.integration
class TestLoopScheduler:
    """Test the threaded scheduler."""

    def test_post_runs_on_loop_thread(self):
        done = threading.Event()
        seen = {}

        def record():
            seen["thread"] = threading.current_thread().name
            done.set()

        with LoopScheduler(name="test-loop") as scheduler:
            scheduler.post(record)
            assert done.wait(timeout=2.0)

        assert seen["thread"] == "test-loop"

    def test_call_later_waits(self):
        done = threading.Event()
        with LoopScheduler() as scheduler:
            start = scheduler.now()
            scheduler.call_later(30, done.set)
            assert done.wait(timeout=2.0)
            assert scheduler.now() - start >= 30

    def test_stop_drops_pending_timers(self):
        fired = []
        scheduler = LoopScheduler()
        scheduler.start()
        scheduler.call_later(10_000, lambda: fired.append(1))
        scheduler.stop()

        assert not scheduler.is_running
        assert fired == []


@pytest.mark.unit
class TestTimerGroup:
    """Test per-mode timer bookkeeping."""

    def test_close_cancels_everything(self):
        scheduler = ManualScheduler()
        group = TimerGroup("test")
        group.open(scheduler)
        fired = []
        group.call_later(10, lambda: fired.append("once"))
        group.call_every(5, lambda: fired.append("tick"))
        assert len(group) == 2

        group.close()
        scheduler.advance(100)
        assert fired == []
        assert len(group) == 0
        assert scheduler.pending == 0

    def test_closed_group_refuses_timers(self):
        scheduler = ManualScheduler()
        group = TimerGroup("test")
        group.open(scheduler)
        group.close()

        assert group.call_later(10, lambda: None) is None
        assert group.call_every(10, lambda: None) is None
        assert scheduler.pending == 0

    def test_one_shot_forgets_itself_after_firing(self):
        scheduler = ManualScheduler()
        group = TimerGroup("test")
        group.open(scheduler)
        group.call_later(10, lambda: None)

        scheduler.advance(10)
        assert len(group) == 0

    def test_cancel_accepts_none(self):
        group = TimerGroup("test")
        group.cancel(None)


@pytest.mark.unit
class TestTimeline:
    """Test the sequential step player."""

    @pytest.fixture
    def group(self):
        scheduler = ManualScheduler()
        group = TimerGroup("timeline")
        group.open(scheduler)
        return scheduler, group

    def test_steps_are_relative(self, group):
        scheduler, timers = group
        log = []
        timeline = Timeline(timers)
        timeline.play(
            [
                (100, lambda: log.append(("a", scheduler.now()))),
                (50, lambda: log.append(("b", scheduler.now()))),
                (0, lambda: log.append(("c", scheduler.now()))),
            ],
            on_complete=lambda: log.append(("done", scheduler.now())),
        )

        scheduler.advance(1000)
        assert log == [("a", 100), ("b", 150), ("c", 150), ("done", 150)]
        assert not timeline.running

    def test_only_one_timer_pending(self, group):
        scheduler, timers = group
        timeline = Timeline(timers)
        timeline.play([(10, lambda: None)] * 5)

        assert len(timers) == 1
        assert timeline.running

    def test_cancel_stops_remaining_steps(self, group):
        scheduler, timers = group
        log = []
        timeline = Timeline(timers)
        timeline.play([(10, lambda: log.append(1)), (10, lambda: log.append(2))], on_complete=lambda: log.append("done"))

        scheduler.advance(10)
        timeline.cancel()
        scheduler.advance(100)
        assert log == [1]

    def test_replay_from_action_abandons_old_sequence(self, group):
        scheduler, timers = group
        log = []
        timeline = Timeline(timers)

        def restart():
            log.append("restart")
            timeline.play([(5, lambda: log.append("new"))])

        timeline.play([(10, restart), (10, lambda: log.append("old"))])
        scheduler.advance(100)
        assert log == ["restart", "new"]

    def test_absolute_steps_sorts_and_converts(self):
        a, b, c = (lambda: None), (lambda: None), (lambda: None)
        steps = absolute_steps([(300, c), (100, a), (100, b)])

        assert [delay for delay, _ in steps] == [100, 0, 200]
        assert [action for _, action in steps] == [a, b, c]


@pytest.mark.unit
class TestLedBus:
    """Test LED value validation."""

    def test_values_are_floored_and_clamped(self, sink):
        bus = LedBus(sink)
        bus.set(0, 63.9)
        bus.set(1, 500)
        bus.set(2, -3)

        assert sink.writes == [(0, 63), (1, 127), (2, 0)]

    def test_out_of_range_control_is_dropped(self, sink):
        bus = LedBus(sink)
        bus.set(16, 50)
        bus.set(-1, 50)

        assert sink.writes == []

    def test_clear_all_and_fill(self, sink):
        bus = LedBus(sink)
        bus.fill(100, controls=[3, 4])
        assert sink.state == {3: 100, 4: 100}

        bus.clear_all()
        assert len(sink.writes) == 2 + 16
        assert sink.lit() == set()
