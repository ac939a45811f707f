"""
Easing curves for looping LED animations.

Each curve maps progress ``t`` in [0, 1] through one animation period of
``duration`` ms to an intensity factor in [0, 1]. Curves are looked up by
index (knob position) through ANIMATION_FUNCTIONS, so the order of that
list is part of the user-facing behavior.
"""

import math
from typing import Callable

AnimationFunction = Callable[[float, float], float]


def linear(t: float, duration: float) -> float:
    return t


def ease_in_out_quad(t: float, duration: float) -> float:
    t *= 2
    if t < 1:
        return 0.5 * t * t
    t -= 1
    return -0.5 * (t * (t - 2) - 1)


def bounce(t: float, duration: float) -> float:
    """Ball dropping onto the maximum and bouncing three times."""
    if t < 1 / 2.75:
        return 7.5625 * t * t
    if t < 2 / 2.75:
        t -= 1.5 / 2.75
        return 7.5625 * t * t + 0.75
    if t < 2.5 / 2.75:
        t -= 2.25 / 2.75
        return 7.5625 * t * t + 0.9375
    t -= 2.625 / 2.75
    return 7.5625 * t * t + 0.984375


def pulse(t: float, duration: float) -> float:
    """On/off square wave: two pulses per period."""
    return 1.0 if math.floor(t * 4) % 2 == 0 else 0.0


def sine_pulse(t: float, duration: float) -> float:
    return 0.5 * (1 - math.cos(t * 2 * math.pi))


def sawtooth(t: float, duration: float) -> float:
    # Identical to linear within one period; the loop supplies the drop
    return t


def triangle(t: float, duration: float) -> float:
    return 1 - abs(2 * t - 1)


ANIMATION_FUNCTIONS: list[AnimationFunction] = [
    linear,
    ease_in_out_quad,
    bounce,
    pulse,
    sine_pulse,
    sawtooth,
    triangle,
]


def animation_name(index: int) -> str:
    func = ANIMATION_FUNCTIONS[index]
    return func.__name__
