"""
Binary number games on the lower eight knobs.

SETUP: knobs 12/13/14 pick the game (Counter, Puzzle, Memory), knob 15 sets
the counter speed, and pressing knob 11 or any bit knob starts.

Counter: the bits count up on their own; any press pauses or resumes.
Puzzle: a decimal target flashes on knobs 8-10 (one knob per digit); set
    the bits before the countdown on knob 11 runs out.
Memory: a number is shown in binary, then hidden; re-enter it and press
    knob 11 to submit.

Three lives per game. Any press on the game-over screen returns to SETUP.
"""

import logging
import math
import random
from enum import Enum
from typing import Callable, Optional

from twisterfidget.constants import MAX_LED_VALUE
from twisterfidget.core.timers import Timeline

from .base import Mode

logger = logging.getLogger(__name__)


class BinaryState(Enum):
    SETUP = "setup"
    PLAYING = "playing"
    GAME_OVER = "game_over"


class BinaryGame(Enum):
    COUNTER = "Binary Counter"
    PUZZLE = "Binary Puzzle"
    MEMORY = "Binary Memory"


BIT_KNOBS = tuple(range(8))
HINT_KNOBS = (8, 9, 10, 11)
GAME_KNOBS = (12, 13, 14)
SPEED_KNOB = 15
START_KNOB = 11

MAX_BINARY_VALUE = 255
DEFAULT_INCREMENT_MS = 1000
STARTING_LIVES = 3
PUZZLE_TICK_MS = 100
GAME_OVER_ORDER = (0, 1, 2, 3, 7, 11, 15, 14, 13, 12, 8, 4, 5, 6, 10, 9)


def bits_of(value: int) -> list[bool]:
    """Least significant bit first."""
    return [bool((value >> bit) & 1) for bit in BIT_KNOBS]


def value_of(bits: list[bool]) -> int:
    return sum(1 << index for index, bit in enumerate(bits) if bit)


def increment_speed_for(value: int) -> int:
    """Knob position to counter interval: 2000 ms (left) down to 250 ms (right)."""
    return 2000 - math.floor(value / MAX_LED_VALUE * 1750)


def puzzle_time_limit(level: int) -> int:
    return 10000 - level * 500


def memory_view_time(level: int) -> int:
    return max(3000 - level * 200, 1000)


class BinaryMode(Mode):
    """Counter, puzzle and memory games with shared lives and score."""

    name = "binary"
    description = "Binary counter, conversion puzzle and memory games"

    def __init__(self, rng: Optional[random.Random] = None):
        super().__init__()
        self._rng = rng or random.Random()
        self._animation = Timeline(self.timers)
        self._hint = Timeline(self.timers)
        self.high_score = 0
        self._reset()

    def _reset(self) -> None:
        self.game = BinaryGame.COUNTER
        self.state = BinaryState.SETUP
        self.counter = 0
        self.target = 0
        self.user_bits = [False] * len(BIT_KNOBS)
        self.score = 0
        self.level = 1
        self.lives = STARTING_LIVES
        self.auto_increment = True
        self.increment_ms = DEFAULT_INCREMENT_MS
        self._increment_timer = None
        self._puzzle_timer = None
        self._puzzle_started = 0.0
        self.time_limit = puzzle_time_limit(1)

    # =================================================================
    # Lifecycle
    # =================================================================

    def on_activate(self, trigger: Optional[int]) -> None:
        self._reset()
        self._show_setup()

    def on_deactivate(self) -> None:
        super().on_deactivate()
        self._reset()

    @property
    def busy(self) -> bool:
        """True while a success, timeout, mistake or game-over animation plays."""
        return self._animation.running

    # =================================================================
    # Input
    # =================================================================

    def handle_turn(self, control: int, value: int) -> bool:
        if self.state is BinaryState.SETUP:
            if control in GAME_KNOBS:
                self._select_game(control)
            elif control == SPEED_KNOB:
                self.increment_ms = increment_speed_for(value)
                self.set_led(SPEED_KNOB, value)
                logger.info(f"Binary counter speed {self.increment_ms}ms")
        elif self.state is BinaryState.PLAYING and self.game is not BinaryGame.COUNTER:
            if control in BIT_KNOBS and not self.busy:
                is_on = value > 64
                if self.user_bits[control] != is_on:
                    self._set_bit(control, is_on)
                    if self.game is BinaryGame.PUZZLE:
                        self._check_puzzle()
        return True

    def handle_press(self, control: int) -> bool:
        if self.state is BinaryState.SETUP:
            if control in GAME_KNOBS:
                self._select_game(control)
            elif control == START_KNOB or control in BIT_KNOBS:
                self.start()
        elif self.state is BinaryState.PLAYING:
            self._handle_playing_press(control)
        elif self.state is BinaryState.GAME_OVER:
            self._animation.cancel()
            self.state = BinaryState.SETUP
            self._show_setup()
        return True

    def _handle_playing_press(self, control: int) -> None:
        if self.game is BinaryGame.COUNTER:
            self.auto_increment = not self.auto_increment
            logger.info(f"Binary auto-increment {'on' if self.auto_increment else 'off'}")
            if self.auto_increment:
                self._start_increment()
            else:
                self.cancel_timer(self._increment_timer)
                self._increment_timer = None
            return

        if self.busy:
            return

        if self.game is BinaryGame.MEMORY and control == START_KNOB:
            self._check_memory()
        elif control in BIT_KNOBS:
            self._set_bit(control, not self.user_bits[control])
            if self.game is BinaryGame.PUZZLE:
                self._check_puzzle()

    def _select_game(self, control: int) -> None:
        self.game = list(BinaryGame)[GAME_KNOBS.index(control)]
        self._show_setup()

    def _set_bit(self, bit: int, on: bool) -> None:
        self.user_bits[bit] = on
        self.set_led(bit, MAX_LED_VALUE if on else 0)

    # =================================================================
    # Setup and start
    # =================================================================

    def _show_setup(self) -> None:
        self.clear_leds()
        for index, game in enumerate(BinaryGame):
            self.set_led(GAME_KNOBS[index], MAX_LED_VALUE if game is self.game else 30 + index * 30)
        self.set_led(START_KNOB, 64)
        self.set_led(SPEED_KNOB, math.floor((2000 - self.increment_ms) / 1750 * MAX_LED_VALUE))
        logger.info(f"Binary setup: {self.game.value} selected, press {START_KNOB} to start")

    def start(self) -> None:
        self.clear_leds()
        self.state = BinaryState.PLAYING
        self.counter = 0
        self.user_bits = [False] * len(BIT_KNOBS)
        self.score = 0
        self.level = 1
        self.lives = STARTING_LIVES
        logger.info(f"Starting {self.game.value}")

        if self.game is BinaryGame.COUNTER:
            self._start_counter()
        elif self.game is BinaryGame.PUZZLE:
            self._start_puzzle()
        else:
            self._start_memory()

    def _display_value(self, value: int) -> None:
        for bit, on in enumerate(bits_of(value)):
            self.set_led(bit, MAX_LED_VALUE if on else 0)

    # =================================================================
    # Counter
    # =================================================================

    def _start_counter(self) -> None:
        self.counter = 0
        self._display_value(0)
        if self.auto_increment:
            self._start_increment()

    def _start_increment(self) -> None:
        self.cancel_timer(self._increment_timer)
        self._increment_timer = self.call_every(self.increment_ms, self._increment)

    def _increment(self) -> None:
        self.counter = (self.counter + 1) % (MAX_BINARY_VALUE + 1)
        self._display_value(self.counter)
        logger.debug(f"Binary {self.counter:08b} ({self.counter})")

    # =================================================================
    # Puzzle
    # =================================================================

    def _start_puzzle(self) -> None:
        self.user_bits = [False] * len(BIT_KNOBS)
        self.target = self._rng.randrange(MAX_BINARY_VALUE + 1)
        self.time_limit = puzzle_time_limit(self.level)
        self._display_value(0)
        self._flash_target()
        self._start_puzzle_timer()
        logger.info(f"Puzzle level {self.level}: enter {self.target} in binary within {self.time_limit / 1000:.1f}s")

    def _flash_target(self) -> None:
        for knob in HINT_KNOBS:
            self.set_led(knob, 0)

        digits = [int(d) for d in f"{self.target:03d}"]
        steps = []
        for flash in range(6):
            on = flash % 2 == 0
            steps.append((0 if flash == 0 else 300, lambda on=on: self._paint_digits(digits, on)))
        self._hint.play(steps)

    def _paint_digits(self, digits: list[int], on: bool) -> None:
        for knob, digit in zip(HINT_KNOBS, digits):
            self.set_led(knob, digit * 15 if on else 0)

    def _start_puzzle_timer(self) -> None:
        self._stop_puzzle_timer()
        self._puzzle_started = self.now()
        self._puzzle_timer = self.call_every(PUZZLE_TICK_MS, self._puzzle_tick)

    def _stop_puzzle_timer(self) -> None:
        self.cancel_timer(self._puzzle_timer)
        self._puzzle_timer = None

    def _puzzle_tick(self) -> None:
        remaining = max(0.0, self.time_limit - (self.now() - self._puzzle_started))
        if remaining > 0:
            self.set_led(START_KNOB, math.floor(remaining / self.time_limit * MAX_LED_VALUE))
            return
        self._stop_puzzle_timer()
        self._puzzle_timeout()

    def _check_puzzle(self) -> None:
        if value_of(self.user_bits) != self.target:
            return
        logger.info(f"Correct: {self.target} = {self.target:08b}")
        self._stop_puzzle_timer()
        self._hint.cancel()
        self.score += self.level * 10
        self.level += 1
        self._play_success(self._start_puzzle)

    def _puzzle_timeout(self) -> None:
        logger.info(f"Time's up: {self.target} is {self.target:08b}")
        self._hint.cancel()
        self.lives -= 1
        if self.lives <= 0:
            self._game_over()
            return

        steps = []
        for step in range(6):
            show = step % 2 == 0
            action = (lambda: self._display_value(self.target)) if show else (lambda: self._display_value(0))
            steps.append((0 if step == 0 else 300, action))
        steps.append((300, lambda: self._display_value(self.target)))
        steps.append((1000, self._start_puzzle))
        self._animation.play(steps)

    # =================================================================
    # Memory
    # =================================================================

    def _start_memory(self) -> None:
        upper = min(2 ** self.level - 1, MAX_BINARY_VALUE)
        self.target = self._rng.randint(1, upper)
        self.user_bits = [False] * len(BIT_KNOBS)
        self.clear_leds()
        self.set_led(START_KNOB, 64)
        self._display_value(self.target)
        logger.info(f"Memorize {self.target:08b}")

        view_ms = memory_view_time(self.level)
        self._hint.play([(view_ms, self._hide_memory_target)])

    def _hide_memory_target(self) -> None:
        for knob in BIT_KNOBS:
            self.set_led(knob, MAX_LED_VALUE if self.user_bits[knob] else 0)
        logger.info(f"Enter the number and press {START_KNOB} to submit")

    def _check_memory(self) -> None:
        entered = value_of(self.user_bits)
        self._hint.cancel()

        if entered == self.target:
            logger.info(f"Correct: {self.target} = {self.target:08b}")
            self.score += self.level * 5
            self.level += 1
            self.high_score = max(self.high_score, self.score)
            self._play_success(self._start_memory)
            return

        logger.info(f"Wrong: entered {entered:08b}, expected {self.target:08b}")
        self.lives -= 1
        if self.lives <= 0:
            self._game_over()
            return

        self._display_value(self.target)
        steps = []
        for step in range(6):
            steps.append((0 if step == 0 else 300, lambda on=step % 2 == 0: self._paint_mistakes(on)))
        steps.append((300, self._start_memory))
        self._animation.play(steps)

    def _paint_mistakes(self, on: bool) -> None:
        for knob, correct in enumerate(bits_of(self.target)):
            if correct != self.user_bits[knob]:
                self.set_led(knob, MAX_LED_VALUE if on else 0)
            else:
                self.set_led(knob, 64 if correct else 0)

    # =================================================================
    # Shared animations
    # =================================================================

    def _play_success(self, then: Callable[[], None]) -> None:
        steps = []
        for step in range(8):
            brightness = MAX_LED_VALUE if step % 2 == 0 else 0
            steps.append((0 if step == 0 else 100, lambda b=brightness: self._paint(BIT_KNOBS, b)))
        steps.append((100, then))
        self._animation.play(steps)

    def _game_over(self) -> None:
        self.state = BinaryState.GAME_OVER
        self._stop_puzzle_timer()
        self._hint.cancel()
        self.high_score = max(self.high_score, self.score)
        logger.info(f"Binary game over: score {self.score}, high score {self.high_score}, level {self.level}")

        steps = []
        for index, lit in enumerate(GAME_OVER_ORDER):
            steps.append((0 if index == 0 else 100, lambda lit=lit: self._paint_single(lit)))
        steps.append((100, self._show_final_score))
        self._animation.play(steps)

    def _paint_single(self, lit: int) -> None:
        self.clear_leds()
        self.set_led(lit, MAX_LED_VALUE)

    def _show_final_score(self) -> None:
        self._display_value(self.score)
        self._paint(HINT_KNOBS, 32)
        logger.info("Press any button to return to setup")

    def _paint(self, controls, value: int) -> None:
        for control in controls:
            self.set_led(control, value)
