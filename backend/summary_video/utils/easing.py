"""
Easing functions used by text animations and background transitions.

All functions map linear progress in [0, 1] to shaped progress with
f(0) == 0 and f(1) == 1.
"""

import math
from typing import Callable, Dict, Union

from ..models.timeline import Easing


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def linear(t: float) -> float:
    return t


def ease_in(t: float) -> float:
    return t * t


def ease_out(t: float) -> float:
    return 1 - (1 - t) * (1 - t)


def ease_in_out(t: float) -> float:
    if t < 0.5:
        return 2 * t * t
    return 1 - math.pow(-2 * t + 2, 2) / 2


def bounce(t: float) -> float:
    n1 = 7.5625
    d1 = 2.75
    if t < 1 / d1:
        return n1 * t * t
    if t < 2 / d1:
        t -= 1.5 / d1
        return n1 * t * t + 0.75
    if t < 2.5 / d1:
        t -= 2.25 / d1
        return n1 * t * t + 0.9375
    t -= 2.625 / d1
    return n1 * t * t + 0.984375


def elastic(t: float) -> float:
    if t == 0:
        return 0.0
    if t == 1:
        return 1.0
    c4 = (2 * math.pi) / 3
    return -math.pow(2, 10 * t - 10) * math.sin((t * 10 - 10.75) * c4)


EASING_FUNCTIONS: Dict[Easing, Callable[[float], float]] = {
    Easing.LINEAR: linear,
    Easing.EASE_IN: ease_in,
    Easing.EASE_OUT: ease_out,
    Easing.EASE_IN_OUT: ease_in_out,
    Easing.BOUNCE: bounce,
    Easing.ELASTIC: elastic,
}


def ease(easing: Union[Easing, str], t: float) -> float:
    """
    Apply an easing by enum or name to a clamped progress value.

    Unknown names fall back to linear.
    """
    try:
        fn = EASING_FUNCTIONS[Easing(easing)]
    except ValueError:
        fn = linear
    return fn(clamp(t))


def interpolate(start: float, end: float, t: float, easing: Union[Easing, str] = Easing.LINEAR) -> float:
    """Interpolate between two values with the given easing."""
    return start + (end - start) * ease(easing, t)
