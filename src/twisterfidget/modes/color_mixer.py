"""Color mixer: blend a color on knobs 0-2, stamp it onto other knobs, animate groups."""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from twisterfidget.animations import ANIMATION_FUNCTIONS, animation_name
from twisterfidget.constants import MAX_LED_VALUE

from .base import Mode

logger = logging.getLogger(__name__)

RED_KNOB = 0
GREEN_KNOB = 1
BLUE_KNOB = 2
TOGGLE_KNOB = 3
SELECTOR_KNOBS = (RED_KNOB, GREEN_KNOB, BLUE_KNOB)
CONTROL_KNOBS = (RED_KNOB, GREEN_KNOB, BLUE_KNOB, TOGGLE_KNOB)

# Config-mode meaning of the selector knobs
EASING_KNOB = 0
STRATEGY_KNOB = 1
DURATION_KNOB = 2

ANIMATION_INTERVAL_MS = 50
DEFAULT_DURATION_MS = 2000
MIN_DURATION_MS = 500
MAX_DURATION_MS = 10000
CONFIG_MODE_LED = 120

STRATEGIES = ("original_to_max", "cycle_hue")


# =================================================================
# Color helpers
# =================================================================

def rgb_to_led_color(r: int, g: int, b: int) -> int:
    """
    Collapse three 0..127 components into one ring color.

    The average is shifted toward the hue range of a strictly dominant
    component (red +0, green +42, blue +85, wrapping at 127).
    """
    avg = (r + g + b) / 3
    if r > g and r > b:
        avg = (avg + 0) % MAX_LED_VALUE
    elif g > r and g > b:
        avg = (avg + 42) % MAX_LED_VALUE
    elif b > r and b > g:
        avg = (avg + 85) % MAX_LED_VALUE
    return math.floor(avg)


def led_value_to_hsl(value: float) -> tuple[float, float, float]:
    """Treat a ring value as a hue angle at full saturation."""
    return (value / MAX_LED_VALUE) * 360, 1.0, 0.5


def hsl_to_led_value(h: float, s: float, l: float) -> int:
    value = _round_half_up((h / 360) * MAX_LED_VALUE) % (MAX_LED_VALUE + 1)
    return _clamp(value, 0, MAX_LED_VALUE)


def _clamp(value, low, high):
    return max(low, min(high, value))


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


# =================================================================
# Animation state
# =================================================================

@dataclass
class AnimationConfig:
    """Per-color animation settings edited in config mode."""

    easing_index: int = 0
    strategy_index: int = 0
    duration: int = DEFAULT_DURATION_MS


@dataclass
class GroupAnimation:
    """A running animation shared by every knob holding one color."""

    easing_index: int
    strategy_index: int
    start_time: float
    duration: int

    def value_at(self, color: int, now: float) -> int:
        elapsed = now - self.start_time
        progress = (elapsed % self.duration) / self.duration
        eased = ANIMATION_FUNCTIONS[self.easing_index](progress, self.duration)

        strategy = STRATEGIES[self.strategy_index]
        if strategy == "original_to_max":
            target = _lerp(color, MAX_LED_VALUE, eased)
        else:
            h, s, l = led_value_to_hsl(color)
            target = hsl_to_led_value((h + eased * 360) % 360, s, l)

        return _clamp(_round_half_up(target), 0, MAX_LED_VALUE)


class ColorMixerMode(Mode):
    """
    Knobs 0/1/2 mix red/green/blue; knob 3 shows the mix.

    Pressing any other knob applies the mixed color to it and starts the
    animation of that color's group. All knobs sharing a color form one
    group and always show the same value. One shared 50 ms tick drives
    every running group and stops itself when nothing animates.

    Pressing knob 3 toggles config mode, where knobs 0/1/2 select easing,
    strategy and duration for the current mixed color.
    """

    name = "color_mixer"
    description = "Mix a color and animate knobs that share it"

    def __init__(self) -> None:
        super().__init__()
        self._reset_state()

    def _reset_state(self) -> None:
        self.red = 0
        self.green = 0
        self.blue = 0
        self.mixed_color = rgb_to_led_color(0, 0, 0)
        self.config_mode = False
        self.configs: dict[int, AnimationConfig] = {}
        self.knob_colors: dict[int, int] = {}
        self.animations: dict[int, GroupAnimation] = {}
        self._loop = None

    # =================================================================
    # Lifecycle
    # =================================================================

    def on_activate(self, trigger: Optional[int]) -> None:
        self._reset_state()
        self.clear_leds()
        self._update_selector_leds()
        self._update_toggle_led()
        logger.info("Color mixer: knobs 0-2 mix, knob 3 toggles config, press 4-15 to apply")

    def on_deactivate(self) -> None:
        super().on_deactivate()
        self._reset_state()

    # =================================================================
    # Config
    # =================================================================

    def config_for(self, color: int) -> AnimationConfig:
        if color not in self.configs:
            self.configs[color] = AnimationConfig()
        return self.configs[color]

    def group(self, color: int) -> list[int]:
        return [knob for knob, knob_color in self.knob_colors.items() if knob_color == color]

    @property
    def loop_running(self) -> bool:
        return self._loop is not None

    # =================================================================
    # LEDs
    # =================================================================

    def _update_selector_leds(self) -> None:
        if self.config_mode:
            config = self.config_for(self.mixed_color)
            self.set_led(EASING_KNOB, math.floor(MAX_LED_VALUE * (config.easing_index / len(ANIMATION_FUNCTIONS))))
            self.set_led(STRATEGY_KNOB, math.floor(MAX_LED_VALUE * (config.strategy_index / len(STRATEGIES))))
            progress = _clamp(
                (config.duration - MIN_DURATION_MS) / (MAX_DURATION_MS - MIN_DURATION_MS), 0, 1
            )
            self.set_led(DURATION_KNOB, math.floor(MAX_LED_VALUE * (1 - progress)))
        else:
            step = MAX_LED_VALUE / 10
            self.set_led(RED_KNOB, 4 + math.floor(self.red / step))
            self.set_led(GREEN_KNOB, 36 + math.floor(self.green / step))
            self.set_led(BLUE_KNOB, 70 + math.floor(self.blue / step))

    def _update_toggle_led(self) -> None:
        if self.config_mode:
            self.set_led(TOGGLE_KNOB, CONFIG_MODE_LED)
        elif not self._is_knob_animated(TOGGLE_KNOB):
            self.set_led(TOGGLE_KNOB, self.mixed_color)

    def _is_knob_animated(self, knob: int) -> bool:
        color = self.knob_colors.get(knob)
        return color is not None and color in self.animations

    # =================================================================
    # Animation loop
    # =================================================================

    def stop_animation(self, color: int) -> None:
        """Stop a group's animation and restore its original color."""
        if self.animations.pop(color, None) is None:
            return
        for knob in self.group(color):
            self.set_led(knob, color)
        logger.info(f"Animation stopped for color group {color}")

    def _start_loop(self) -> None:
        if self._loop is not None:
            return
        self._loop = self.call_every(ANIMATION_INTERVAL_MS, self._tick)
        logger.debug("Color mixer animation loop started")

    def _stop_loop(self) -> None:
        self.cancel_timer(self._loop)
        self._loop = None
        logger.debug("Color mixer animation loop stopped")

    def _tick(self) -> None:
        if not self.animations:
            self._stop_loop()
            return

        now = self.now()
        for color, animation in list(self.animations.items()):
            value = animation.value_at(color, now)
            for knob in self.group(color):
                self.set_led(knob, value)

    # =================================================================
    # Input
    # =================================================================

    def handle_turn(self, control: int, value: int) -> bool:
        if self.config_mode:
            return self._handle_config_turn(control, value)

        if control in SELECTOR_KNOBS:
            if control == RED_KNOB:
                self.red = value
            elif control == GREEN_KNOB:
                self.green = value
            else:
                self.blue = value
            self.mixed_color = rgb_to_led_color(self.red, self.green, self.blue)
            self._update_selector_leds()
            self._update_toggle_led()
            return True

        if control in CONTROL_KNOBS:
            return False

        old_color = self.knob_colors.get(control)
        if old_color is None:
            return False

        self.stop_animation(old_color)
        for knob in self.group(old_color):
            self.knob_colors[knob] = value
            self.set_led(knob, value)
        logger.info(f"Knob {control} moved color group {old_color} to {value}")
        return True

    def _handle_config_turn(self, control: int, value: int) -> bool:
        config = self.config_for(self.mixed_color)
        animation = self.animations.get(self.mixed_color)

        if control == EASING_KNOB:
            config.easing_index = value % len(ANIMATION_FUNCTIONS)
            if animation:
                animation.easing_index = config.easing_index
            logger.info(f"Color {self.mixed_color}: easing {animation_name(config.easing_index)}")
        elif control == STRATEGY_KNOB:
            config.strategy_index = value % len(STRATEGIES)
            if animation:
                animation.strategy_index = config.strategy_index
                animation.start_time = self.now()
            logger.info(f"Color {self.mixed_color}: strategy {STRATEGIES[config.strategy_index]}")
        elif control == DURATION_KNOB:
            duration = _round_half_up(_lerp(MIN_DURATION_MS, MAX_DURATION_MS, value / MAX_LED_VALUE))
            config.duration = _clamp(duration, MIN_DURATION_MS, MAX_DURATION_MS)
            if animation:
                animation.duration = config.duration
            logger.info(f"Color {self.mixed_color}: duration {config.duration}ms")
        else:
            return True

        self._update_selector_leds()
        return True

    def handle_press(self, control: int) -> bool:
        if control == TOGGLE_KNOB:
            self.config_mode = not self.config_mode
            logger.info(f"Color mixer config mode {'on' if self.config_mode else 'off'}")
            self._update_selector_leds()
            self._update_toggle_led()
            return True

        if self.config_mode:
            return False

        if control in SELECTOR_KNOBS:
            if control in (RED_KNOB, BLUE_KNOB):
                self.stop_animation(self.mixed_color)
            return True

        return self.apply_color(control)

    def apply_color(self, control: int) -> bool:
        """Stamp the mixed color on control and (re)start its group animation."""
        color = self.mixed_color
        previous = self.knob_colors.get(control)
        if previous is not None:
            self.stop_animation(previous)

        self.set_led(control, color)
        self.knob_colors[control] = color

        config = self.config_for(color)
        self.animations[color] = GroupAnimation(
            easing_index=config.easing_index,
            strategy_index=config.strategy_index,
            start_time=self.now(),
            duration=config.duration,
        )
        logger.info(
            f"Applied color {color} to knob {control}: "
            f"{animation_name(config.easing_index)} / {STRATEGIES[config.strategy_index]}"
        )
        self._start_loop()
        return True
