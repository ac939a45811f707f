"""Tests for the select, linking and animation modes."""

import math

import pytest

from twisterfidget.modes import (
    ChaseMode,
    FibonacciMode,
    MirrorMode,
    ModeSelectMode,
    NormalLinkingMode,
    PulseMode,
    RainbowMode,
    RandomMode,
    RippleMode,
    WaveMode,
)
from twisterfidget.modes.ambient import normalized_fibonacci
from twisterfidget.modes.mirror import point_symmetric_pairs
from twisterfidget.modes.ripple import ripple_neighbors
from twisterfidget.modes.select import MODE_COLORS, color_name


@pytest.mark.unit
class TestModeSelect:
    """Test the mode selection screen."""

    def test_only_registered_modes_are_offered(self, activate, sink):
        mode = ModeSelectMode()
        activate(mode, available={"mode_select", "simon", "chase"})

        assert mode.entries == {0: "simon", 1: "chase"}
        assert sink.value(0) == MODE_COLORS["simon"]
        assert sink.value(1) == MODE_COLORS["chase"]
        assert sink.value(2) == 0

    def test_press_switches_with_trigger(self, activate):
        mode = ModeSelectMode()
        switches = activate(mode, available={"chase", "ripple"})

        assert mode.handle_press(5) is True
        assert switches == [("ripple", 5)]

    def test_press_on_unlit_knob_is_ignored(self, activate):
        mode = ModeSelectMode()
        switches = activate(mode, available={"chase"})

        assert mode.handle_press(12) is False
        assert switches == []

    def test_deactivate_clears_entries(self, activate, sink):
        mode = ModeSelectMode()
        activate(mode, available={"chase"})
        mode.deactivate()

        assert sink.value(1) == 0
        assert mode.entries == {}

    def test_color_names(self):
        assert color_name(0) == "White"
        assert color_name(4) == "Red"
        assert color_name(127) == "Bright White"


@pytest.mark.unit
class TestNormalLinking:
    """Test rings following knobs and knob linking."""

    def test_turn_updates_own_ring_and_is_not_consumed(self, activate, sink):
        mode = NormalLinkingMode()
        activate(mode)

        assert mode.handle_turn(3, 90) is False
        assert sink.value(3) == 90

    def test_link_round_trip(self, activate, sink):
        mode = NormalLinkingMode()
        activate(mode)

        mode.handle_turn(0, 64)
        mode.handle_press(0)
        assert mode.pending_source == 0
        assert sink.value(0) == 127

        mode.handle_press(1)
        assert mode.pending_source is None
        assert mode.destinations_of(0) == [1]
        assert sink.value(1) == 64
        assert sink.value(0) == 64

        mode.handle_turn(0, 10)
        assert sink.value(0) == 10
        assert sink.value(1) == 10

    def test_source_flash_restores_knob_value(self, activate, sink, scheduler):
        mode = NormalLinkingMode()
        activate(mode)
        mode.handle_turn(2, 40)
        mode.handle_press(2)

        scheduler.advance(200)
        assert sink.value(2) == 40
        assert mode.pending_source == 2

    def test_pressing_source_again_cancels(self, activate, sink):
        mode = NormalLinkingMode()
        activate(mode)
        mode.handle_turn(4, 20)
        mode.handle_press(4)
        mode.handle_press(4)

        assert mode.pending_source is None
        assert mode.links == {}
        assert sink.value(4) == 20
        assert mode.pending_timers == 0

    def test_destination_has_single_source(self, activate):
        mode = NormalLinkingMode()
        activate(mode)
        mode.link(0, 2)
        mode.link(1, 2)

        assert mode.destinations_of(0) == []
        assert mode.destinations_of(1) == [2]

    def test_reactivation_forgets_links(self, activate):
        mode = NormalLinkingMode()
        activate(mode)
        mode.link(0, 1)
        mode.deactivate()
        activate(mode)

        assert mode.links == {}


@pytest.mark.unit
class TestMirror:
    """Test mirrored pairs."""

    def test_default_pairs_are_point_symmetric(self):
        pairs = point_symmetric_pairs()
        assert len(pairs) == 8
        assert (0, 15) in pairs
        assert (7, 8) in pairs

    def test_partner_shows_inverted_value(self, activate, sink):
        mode = MirrorMode()
        activate(mode)

        mode.handle_turn(0, 100)
        assert sink.value(15) == 27

        mode.handle_turn(15, 27)
        assert sink.value(0) == 100

    def test_initial_paint(self, activate, sink):
        activate(MirrorMode())
        assert sink.value(3) == 0
        assert sink.value(12) == 127

    def test_self_pair_rejected(self):
        with pytest.raises(ValueError):
            MirrorMode(pairs=[(2, 2)])

    def test_unpaired_knob_not_consumed(self, activate):
        mode = MirrorMode(pairs=[(0, 1)])
        activate(mode)
        assert mode.handle_turn(5, 10) is False


@pytest.mark.unit
class TestChase:
    """Test the chasing light."""

    def test_light_moves_one_step_per_tick(self, activate, sink, scheduler):
        activate(ChaseMode())

        scheduler.advance(150)
        assert sink.lit() == {0}
        scheduler.advance(150)
        assert sink.lit() == {1}

    def test_turn_sets_speed(self, activate, sink, scheduler):
        mode = ChaseMode()
        activate(mode)

        mode.handle_turn(0, 127)
        assert mode.speed_ms == 50
        scheduler.advance(50)
        assert sink.lit() == {0}

        mode.handle_turn(0, 0)
        assert mode.speed_ms == 500

    def test_small_speed_change_ignored(self, activate):
        mode = ChaseMode()
        activate(mode)
        before = mode.speed_ms

        # value 99 maps to about 149ms
        mode.handle_turn(0, 99)
        assert mode.speed_ms == before

    def test_press_reverses(self, activate, sink, scheduler):
        mode = ChaseMode()
        activate(mode)
        scheduler.advance(300)
        assert sink.lit() == {1}

        mode.handle_press(7)
        scheduler.advance(150)
        assert sink.lit() == {0}
        scheduler.advance(150)
        assert sink.lit() == {15}

    def test_single_timer(self, activate):
        mode = ChaseMode()
        activate(mode)
        mode.handle_turn(0, 127)
        mode.handle_turn(0, 0)
        assert mode.pending_timers == 1


@pytest.mark.unit
class TestAmbientModes:
    """Test rainbow, wave, random, fibonacci and pulse."""

    def test_rainbow_gradient_and_offset(self, activate, sink):
        mode = RainbowMode()
        activate(mode)
        assert sink.value(0) == 0
        assert sink.value(1) == math.floor(1 / 16 * 127)

        mode.handle_turn(4, 127)
        assert mode.offset == 15
        assert sink.value(0) == math.floor(15 / 16 * 127)

    def test_rainbow_has_no_timers(self, activate):
        mode = RainbowMode()
        activate(mode)
        assert mode.pending_timers == 0

    def test_wave_ticks(self, activate, sink, scheduler):
        mode = WaveMode()
        activate(mode)

        scheduler.advance(50)
        assert sink.value(0) == 63
        assert mode.phase == pytest.approx(0.1)
        assert all(0 <= sink.value(c) <= 127 for c in range(16))

    def test_random_freeze(self, activate, sink, scheduler, rng):
        mode = RandomMode(rng=rng)
        activate(mode)
        scheduler.advance(200)
        assert len(sink.writes) > 16

        mode.handle_press(0)
        sink.reset()
        scheduler.advance(1000)
        assert sink.writes == []

        mode.handle_press(0)
        scheduler.advance(200)
        assert len(sink.writes) == 16

    def test_random_speed(self, activate):
        mode = RandomMode()
        activate(mode)
        mode.handle_turn(0, 0)
        assert mode.speed_ms == 1000

    def test_normalized_fibonacci(self):
        values = normalized_fibonacci()
        assert len(values) == 20
        assert values[0] == 0
        assert values[-1] == 127
        assert values == sorted(values)
        assert normalized_fibonacci(1) == [0]

    def test_fibonacci_scrolls(self, activate, sink, scheduler):
        mode = FibonacciMode()
        activate(mode)
        values = normalized_fibonacci()

        scheduler.advance(300)
        assert sink.value(15) == values[15]
        scheduler.advance(300)
        assert sink.value(15) == values[16]

    def test_pulse_uses_trigger(self, activate, sink, scheduler):
        mode = PulseMode()
        activate(mode, trigger=6)

        scheduler.advance(50)
        assert sink.value(6) == 5
        assert sink.lit() == {6}

    def test_pulse_defaults_to_control_zero(self, activate):
        mode = PulseMode()
        activate(mode)
        assert mode.control == 0

    def test_pulse_bounces(self, activate, scheduler):
        mode = PulseMode()
        activate(mode, trigger=1)

        scheduler.advance(50 * 26)
        assert mode.value == 127
        assert mode.direction == -1


@pytest.mark.unit
class TestRipple:
    """Test the ripple from the selecting knob."""

    def test_neighbors_order(self):
        assert ripple_neighbors(5) == [1, 4, 6, 9, 0, 2, 8, 10]
        assert ripple_neighbors(0) == [1, 4, 3, 5]
        assert ripple_neighbors(15) == [11, 14, 10, 12]

    def test_ripple_timeline(self, activate, sink, scheduler):
        mode = RippleMode()
        activate(mode, trigger=5)
        assert sink.value(5) == 127

        scheduler.advance(100)
        assert sink.value(1) == 127
        scheduler.advance(150)
        assert sink.value(1) == 0
        assert sink.value(4) == 127

        scheduler.advance(800)
        assert sink.lit() == set()
        assert mode.pending_timers == 0

    def test_only_center_controls(self, activate):
        mode = RippleMode()
        activate(mode, trigger=5)

        assert mode.handle_turn(6, 127) is False
        assert mode.handle_press(6) is False
        assert mode.handle_turn(5, 127) is True
        assert mode.speed_ms == 300

    def test_press_replays(self, activate, sink, scheduler):
        mode = RippleMode()
        activate(mode, trigger=5)
        scheduler.advance(2000)

        mode.handle_press(5)
        assert sink.value(5) == 127
        assert mode.pending_timers == 1
