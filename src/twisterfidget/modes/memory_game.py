"""
Simon-style memory game on the 4x4 grid.

States:
    IDLE -> (countdown) -> DISPLAYING_SEQUENCE -> WAITING_FOR_INPUT
    WAITING_FOR_INPUT -> LEVEL_COMPLETE -> DISPLAYING_SEQUENCE (one step longer)
    WAITING_FOR_INPUT -> GAME_OVER -> IDLE (on any press)

In IDLE, knob 0 selects the difficulty and any press (or knob 15 turned
past 100) starts a game. Each level adds one step chosen near the previous
one on the grid, so sequences form a random walk instead of jumping around.
"""

import logging
import random
from enum import Enum
from typing import Optional

from twisterfidget.constants import ALL_CONTROLS, GRID_WIDTH, MAX_LED_VALUE, NUM_CONTROLS
from twisterfidget.core.timers import Timeline

from .base import Mode

logger = logging.getLogger(__name__)


class GameState(Enum):
    IDLE = "idle"
    DISPLAYING_SEQUENCE = "displaying_sequence"
    WAITING_FOR_INPUT = "waiting_for_input"
    LEVEL_COMPLETE = "level_complete"
    GAME_OVER = "game_over"


class Difficulty(Enum):
    """Difficulty levels as (label, speed multiplier, mistakes allowed)."""

    EASY = ("Easy", 1.0, 2)
    MEDIUM = ("Medium", 1.5, 1)
    HARD = ("Hard", 2.0, 0)
    EXPERT = ("Expert", 3.0, 0)

    def __init__(self, label: str, speed_multiplier: float, mistakes_allowed: int):
        self.label = label
        self.speed_multiplier = speed_multiplier
        self.mistakes_allowed = mistakes_allowed

    @classmethod
    def from_knob(cls, value: int) -> "Difficulty":
        levels = list(cls)
        index = min(len(levels) - 1, value // (128 // len(levels)))
        return levels[index]


PALETTE = (127, 64, 32, 96, 16, 48, 80, 112)
SPIRAL_ORDER = (5, 6, 9, 10, 1, 2, 4, 7, 8, 11, 13, 14, 0, 3, 12, 15)
OUTER_RING = (0, 1, 2, 3, 12, 13, 14, 15, 4, 7, 8, 11)
INNER_RING = (5, 6, 9, 10)
COUNTDOWN_PATTERNS = {
    3: (0, 1, 2, 3, 7, 11, 12, 13, 14, 15),
    2: (0, 1, 2, 3, 7, 8, 9, 10, 12, 13, 14, 15),
    1: (1, 5, 9, 13),
}

DIFFICULTY_KNOB = 0
START_KNOB = 15
START_THRESHOLD = 100
RECENT_STEPS_EXCLUDED = 3

SEQUENCE_LEAD_MS = 500
STEP_SHOW_MS = 500
STEP_PAUSE_MS = 200
CORRECT_FLASH_MS = 150
IDLE_HINT_DELAY_MS = 3000
HINT_TICK_MS = 30
COUNTDOWN_STEP_MS = 800


def neighbor_candidates(last: int, difficulty: Difficulty) -> list[int]:
    """
    Controls reachable from `last` on the 4-wide grid.

    Every difficulty allows the 4-neighbors. HARD and EXPERT add the
    diagonals; EXPERT also wraps around the grid edges. Duplicates are
    removed keeping the first occurrence.
    """
    col = last % GRID_WIDTH
    bottom_row = NUM_CONTROLS - GRID_WIDTH
    options = []

    if col > 0:
        options.append(last - 1)
    if col < GRID_WIDTH - 1:
        options.append(last + 1)
    if last >= GRID_WIDTH:
        options.append(last - GRID_WIDTH)
    if last < bottom_row:
        options.append(last + GRID_WIDTH)

    if difficulty in (Difficulty.HARD, Difficulty.EXPERT):
        if col > 0 and last >= GRID_WIDTH:
            options.append(last - 5)
        if col < GRID_WIDTH - 1 and last >= GRID_WIDTH:
            options.append(last - 3)
        if col > 0 and last < bottom_row:
            options.append(last + 3)
        if col < GRID_WIDTH - 1 and last < bottom_row:
            options.append(last + 5)

        if difficulty is Difficulty.EXPERT:
            if col == 0:
                options.append(last + 3)
            if col == GRID_WIDTH - 1:
                options.append(last - 3)
            if last < GRID_WIDTH:
                options.append(last + 12)
            if last >= bottom_row:
                options.append(last - 12)

    return list(dict.fromkeys(options))


class MemoryGameMode(Mode):
    """Repeat a growing light sequence; mistakes are limited by difficulty."""

    name = "simon"
    description = "Memory game: repeat the growing sequence"

    def __init__(self, rng: Optional[random.Random] = None):
        super().__init__()
        self._rng = rng or random.Random()
        self._display = Timeline(self.timers)
        self._hint = None
        self.high_score = 0
        self._reset()

    def _reset(self) -> None:
        self._sequence: list[int] = []
        self._user_position = 0
        self._state = GameState.IDLE
        self._difficulty = Difficulty.EASY
        self._score = 0
        self._mistakes = 0
        self._hint = None
        self._knob_values = [0] * NUM_CONTROLS

    # =================================================================
    # Read-only state
    # =================================================================

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def difficulty(self) -> Difficulty:
        return self._difficulty

    @property
    def sequence(self) -> tuple[int, ...]:
        return tuple(self._sequence)

    @property
    def user_position(self) -> int:
        return self._user_position

    @property
    def mistakes(self) -> int:
        return self._mistakes

    @property
    def score(self) -> int:
        return self._score

    # =================================================================
    # Lifecycle
    # =================================================================

    def on_activate(self, trigger: Optional[int]) -> None:
        self._reset()
        self.clear_leds()
        logger.info("Simon game activated")
        self._show_welcome()

    def on_deactivate(self) -> None:
        super().on_deactivate()
        self._reset()

    # =================================================================
    # Input
    # =================================================================

    def handle_turn(self, control: int, value: int) -> bool:
        self._knob_values[control] = value

        if self._state is GameState.IDLE:
            if control == DIFFICULTY_KNOB:
                self.set_difficulty(Difficulty.from_knob(value))
            elif control == START_KNOB and value > START_THRESHOLD:
                self.start_game()
        elif self._state is GameState.WAITING_FOR_INPUT:
            self.set_led(control, value)

        return True

    def handle_press(self, control: int) -> bool:
        if self._state is GameState.IDLE:
            self.start_game()
        elif self._state is GameState.WAITING_FOR_INPUT:
            self._check_press(control)
        elif self._state is GameState.GAME_OVER:
            self._state = GameState.IDLE
            self._display.cancel()
            self._show_difficulty()
        # Presses during playback, countdown or level-complete are absorbed
        return True

    def set_difficulty(self, difficulty: Difficulty) -> None:
        if difficulty is self._difficulty:
            return
        self._difficulty = difficulty
        logger.info(
            f"Simon difficulty {difficulty.label} "
            f"(speed {difficulty.speed_multiplier}x, mistakes allowed {difficulty.mistakes_allowed})"
        )
        self._show_difficulty()

    # =================================================================
    # Game flow
    # =================================================================

    def start_game(self) -> None:
        self._sequence = []
        self._user_position = 0
        self._state = GameState.LEVEL_COMPLETE
        self._score = 0
        self._mistakes = 0
        self._cancel_hint()
        logger.info(f"Starting Simon game ({self._difficulty.label})")

        steps = []
        for index, count in enumerate((3, 2, 1)):
            delay = 0 if index == 0 else COUNTDOWN_STEP_MS
            steps.append((delay, lambda count=count: self._show_countdown(count)))
        steps.append((COUNTDOWN_STEP_MS, self.add_step))
        self._display.play(steps)

    def next_step(self) -> int:
        """Pick the next control for the sequence."""
        if not self._sequence:
            return self._rng.randrange(NUM_CONTROLS)

        recent = self._sequence[-RECENT_STEPS_EXCLUDED:]
        options = [c for c in neighbor_candidates(self._sequence[-1], self._difficulty) if c not in recent]
        if options:
            return self._rng.choice(options)
        return self._rng.randrange(NUM_CONTROLS)

    def add_step(self) -> None:
        step = self.next_step()
        self._sequence.append(step)
        self._user_position = 0
        self._state = GameState.DISPLAYING_SEQUENCE
        self._score = len(self._sequence)
        self.high_score = max(self.high_score, self._score)
        logger.info(f"Simon step {len(self._sequence)}: control {step}")
        self._display_sequence()

    def _display_sequence(self) -> None:
        self.clear_leds()
        show_ms = STEP_SHOW_MS / self._difficulty.speed_multiplier
        pause_ms = STEP_PAUSE_MS / self._difficulty.speed_multiplier

        steps = []
        for index, control in enumerate(self._sequence):
            color = PALETTE[control % len(PALETTE)]
            steps.append((SEQUENCE_LEAD_MS if index == 0 else pause_ms, lambda c=control, v=color: self.set_led(c, v)))
            steps.append((show_ms, lambda c=control: self.set_led(c, 0)))
        steps.append((pause_ms, self._await_input))
        self._display.play(steps)

    def _await_input(self) -> None:
        self._state = GameState.WAITING_FOR_INPUT
        logger.info(f"Your turn: repeat {len(self._sequence)} step(s)")

    def _check_press(self, control: int) -> None:
        expected = self._sequence[self._user_position]

        if control == expected:
            self.set_led(control, PALETTE[control % len(PALETTE)])
            self.call_later(CORRECT_FLASH_MS, lambda: self._end_flash(control))
            self._user_position += 1

            if self._user_position >= len(self._sequence):
                logger.info(f"Sequence complete, score {self._score}")
                self._state = GameState.LEVEL_COMPLETE
                self._show_level_complete()
            return

        self._mistakes += 1
        if self._mistakes > self._difficulty.mistakes_allowed:
            logger.info(f"Simon game over, score {self._score} (high score {self.high_score})")
            self._state = GameState.GAME_OVER
            self._show_game_over()
            return

        logger.info(f"Wrong button, mistakes {self._mistakes}/{self._difficulty.mistakes_allowed + 1}")
        # Block input until the sequence has been shown again
        self._state = GameState.DISPLAYING_SEQUENCE
        self._show_error(control, expected)

    def _end_flash(self, control: int) -> None:
        if self._state is GameState.WAITING_FOR_INPUT:
            self.set_led(control, 0)

    # =================================================================
    # Animations
    # =================================================================

    def _show_welcome(self) -> None:
        steps = []
        for control in ALL_CONTROLS:
            color = PALETTE[control % len(PALETTE)]
            steps.append((0 if control == 0 else 100, lambda c=control, v=color: self.set_led(c, v)))
        steps.append((300, self._show_difficulty))
        self._display.play(steps)

    def _show_difficulty(self) -> None:
        self.clear_leds()
        current = list(Difficulty).index(self._difficulty)
        for index in range(len(Difficulty)):
            self.set_led(index, MAX_LED_VALUE if index == current else 20)
        self.set_led(START_KNOB, 64)

        self._cancel_hint()
        self._hint = self.call_later(IDLE_HINT_DELAY_MS, self._pulse_start_hint)

    def _pulse_start_hint(self) -> None:
        if self._state is not GameState.IDLE:
            return

        brightness = 20
        direction = 5
        pulses = 0

        def tick() -> None:
            nonlocal brightness, direction, pulses
            if self._state is not GameState.IDLE or pulses >= 3:
                self._cancel_hint()
                return

            brightness += direction
            if brightness >= MAX_LED_VALUE:
                brightness = MAX_LED_VALUE
                direction = -5
            elif brightness <= 20:
                brightness = 20
                direction = 5
                pulses += 1
            self.set_led(START_KNOB, brightness)

        self._hint = self.call_every(HINT_TICK_MS, tick)
        tick()

    def _cancel_hint(self) -> None:
        self.cancel_timer(self._hint)
        self._hint = None

    def _show_countdown(self, count: int) -> None:
        self.clear_leds()
        for control in COUNTDOWN_PATTERNS[count]:
            self.set_led(control, MAX_LED_VALUE)

    def _show_level_complete(self) -> None:
        self.clear_leds()
        steps = []
        for index, control in enumerate(SPIRAL_ORDER):
            color = PALETTE[index % len(PALETTE)]
            steps.append((0 if index == 0 else 50, lambda c=control, v=color: self.set_led(c, v)))
        steps.append((350, self.clear_leds))
        steps.append((500, self.add_step))
        self._display.play(steps)

    def _show_error(self, wrong: int, expected: int) -> None:
        steps = [
            (0, lambda: self.set_led(wrong, MAX_LED_VALUE)),
            (200, lambda: self.set_led(wrong, 0)),
            (200, lambda: self.set_led(wrong, MAX_LED_VALUE)),
            (200, lambda: self.set_led(wrong, 0)),
            (200, lambda: self.set_led(expected, MAX_LED_VALUE)),
            (800, lambda: self.set_led(expected, 0)),
            (500, self._display_sequence),
        ]
        self._display.play(steps)

    def _show_game_over(self) -> None:
        steps = []
        delay = 0
        for ring in (OUTER_RING, INNER_RING):
            for brightness in range(MAX_LED_VALUE, 0, -10):
                steps.append((delay, lambda r=ring, b=brightness: self._paint(r, b)))
                delay = 50
            steps.append((50, lambda r=ring: self._paint(r, 0)))
            delay = 0
        steps.append((0, self.clear_leds))
        steps.append((500, self._show_score))
        self._display.play(steps)

    def _paint(self, controls, value: int) -> None:
        for control in controls:
            self.set_led(control, value)

    def _show_score(self) -> None:
        score_bits = format(self._score, "08b")[:8]
        high_bits = format(self.high_score, "08b")[:8]
        for index in range(8):
            if score_bits[index] == "1":
                self.set_led(index, 64)
            if high_bits[index] == "1":
                self.set_led(index + 8, 16)
        logger.info(f"Score {self._score}, high score {self.high_score}. Press any button to continue")
