"""Tests for the Simon memory game."""

import random

import pytest

from twisterfidget.modes import Difficulty, GameState, MemoryGameMode
from twisterfidget.modes.memory_game import neighbor_candidates


def advance_until(scheduler, mode, state, limit_ms=60_000, step_ms=10):
    """Advance the virtual clock until the game reaches `state`."""
    waited = 0
    while mode.state is not state:
        assert waited < limit_ms, f"game stuck in {mode.state}, expected {state}"
        scheduler.advance(step_ms)
        waited += step_ms


def wrong_control(mode):
    expected = mode.sequence[mode.user_position]
    return (expected + 1) % 16


@pytest.fixture
def game(activate, scheduler):
    mode = MemoryGameMode(rng=random.Random(42))
    activate(mode)
    return mode


@pytest.mark.unit
class TestNeighborCandidates:
    """Test the grid adjacency table."""

    def test_corner_easy(self):
        assert neighbor_candidates(0, Difficulty.EASY) == [1, 4]

    def test_center_hard_includes_diagonals(self):
        assert neighbor_candidates(5, Difficulty.HARD) == [4, 6, 1, 9, 0, 2, 8, 10]

    def test_corner_expert_wraps(self):
        assert neighbor_candidates(0, Difficulty.EXPERT) == [1, 4, 5, 3, 12]

    def test_medium_matches_easy(self):
        for control in range(16):
            assert neighbor_candidates(control, Difficulty.MEDIUM) == neighbor_candidates(control, Difficulty.EASY)

    def test_candidates_are_valid_controls(self):
        for difficulty in Difficulty:
            for control in range(16):
                candidates = neighbor_candidates(control, difficulty)
                assert candidates
                assert all(0 <= c < 16 for c in candidates)
                assert len(candidates) == len(set(candidates))


@pytest.mark.unit
class TestDifficulty:
    """Test difficulty selection."""

    @pytest.mark.parametrize(
        "value, expected",
        [(0, Difficulty.EASY), (31, Difficulty.EASY), (40, Difficulty.MEDIUM), (70, Difficulty.HARD), (127, Difficulty.EXPERT)],
    )
    def test_from_knob(self, value, expected):
        assert Difficulty.from_knob(value) is expected

    def test_turn_in_idle_sets_difficulty(self, game, sink):
        game.handle_turn(0, 127)

        assert game.difficulty is Difficulty.EXPERT
        assert sink.value(3) == 127
        assert sink.value(0) == 20

    def test_turn_outside_idle_is_ignored(self, game, scheduler):
        game.start_game()
        game.handle_turn(0, 127)
        assert game.difficulty is Difficulty.EASY


@pytest.mark.unit
class TestGameFlow:
    """Test the state machine."""

    def test_starts_idle(self, game):
        assert game.state is GameState.IDLE
        assert game.sequence == ()

    def test_press_starts_countdown_then_sequence(self, game, scheduler):
        game.handle_press(7)
        assert game.state is GameState.LEVEL_COMPLETE

        advance_until(scheduler, game, GameState.DISPLAYING_SEQUENCE)
        assert len(game.sequence) == 1

        advance_until(scheduler, game, GameState.WAITING_FOR_INPUT)
        assert game.user_position == 0

    def test_start_knob_turn_starts_game(self, game):
        game.handle_turn(15, 50)
        assert game.state is GameState.IDLE
        game.handle_turn(15, 101)
        assert game.state is GameState.LEVEL_COMPLETE

    def test_sequence_grows_by_one_per_level(self, game, scheduler):
        game.handle_press(0)
        lengths = []

        for _ in range(6):
            advance_until(scheduler, game, GameState.WAITING_FOR_INPUT)
            lengths.append(len(game.sequence))
            for control in game.sequence:
                game.handle_press(control)
            assert game.state is GameState.LEVEL_COMPLETE

        assert lengths == [1, 2, 3, 4, 5, 6]
        assert game.high_score == 6

    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_steps_follow_neighbor_walk(self, activate, scheduler, difficulty):
        mode = MemoryGameMode(rng=random.Random(7))
        activate(mode)
        mode.set_difficulty(difficulty)
        mode.start_game()

        for _ in range(40):
            mode.add_step()

        sequence = mode.sequence
        for k in range(1, len(sequence)):
            recent = sequence[max(0, k - 3):k]
            allowed = [c for c in neighbor_candidates(sequence[k - 1], difficulty) if c not in recent]
            if allowed:
                assert sequence[k] in allowed
            else:
                assert 0 <= sequence[k] < 16

    def test_presses_during_playback_are_absorbed(self, game, scheduler):
        game.handle_press(0)
        advance_until(scheduler, game, GameState.DISPLAYING_SEQUENCE)

        assert game.handle_press(wrong_control(game)) is True
        assert game.mistakes == 0
        assert game.state is GameState.DISPLAYING_SEQUENCE


@pytest.mark.unit
class TestMistakes:
    """Test mistake counting per difficulty."""

    def test_easy_allows_two_mistakes(self, game, scheduler):
        assert game.difficulty.mistakes_allowed == 2
        game.handle_press(0)

        for expected_mistakes in (1, 2):
            advance_until(scheduler, game, GameState.WAITING_FOR_INPUT)
            game.handle_press(wrong_control(game))
            assert game.mistakes == expected_mistakes
            assert game.state is GameState.DISPLAYING_SEQUENCE

        advance_until(scheduler, game, GameState.WAITING_FOR_INPUT)
        game.handle_press(wrong_control(game))
        assert game.state is GameState.GAME_OVER

    def test_mistake_replays_same_sequence(self, game, scheduler):
        game.handle_press(0)
        advance_until(scheduler, game, GameState.WAITING_FOR_INPUT)
        before = game.sequence

        game.handle_press(wrong_control(game))
        advance_until(scheduler, game, GameState.WAITING_FOR_INPUT)

        assert game.sequence == before

    def test_hard_ends_on_first_mistake(self, game, scheduler):
        game.set_difficulty(Difficulty.HARD)
        game.handle_press(0)
        advance_until(scheduler, game, GameState.WAITING_FOR_INPUT)

        game.handle_press(wrong_control(game))
        assert game.state is GameState.GAME_OVER

    def test_game_over_press_returns_to_idle(self, game, scheduler, sink):
        game.set_difficulty(Difficulty.HARD)
        game.handle_press(0)
        advance_until(scheduler, game, GameState.WAITING_FOR_INPUT)
        game.handle_press(wrong_control(game))
        scheduler.advance(5000)

        game.handle_press(9)
        assert game.state is GameState.IDLE
        assert sink.value(15) == 64

    def test_high_score_survives_reactivation(self, game, scheduler, activate):
        game.handle_press(0)
        advance_until(scheduler, game, GameState.WAITING_FOR_INPUT)
        for control in game.sequence:
            game.handle_press(control)
        advance_until(scheduler, game, GameState.WAITING_FOR_INPUT)
        assert game.high_score == 2

        game.deactivate()
        activate(game)

        assert game.high_score == 2
        assert game.score == 0
        assert game.state is GameState.IDLE
