"""
Raw reading -> normalized slider value.

Raw readings come from a 10-bit ADC (0-1023). They are mapped onto 0.0-1.0,
trimmed to two decimals and compared against the last reported value with a
noise threshold, so jittery hardware doesn't produce a stream of tiny moves.
"""
from __future__ import annotations
import math
from typing import Optional, Tuple

MAX_RAW_VALUE = 1023

# Marker for a slider whose value hasn't been observed since the last reset
UNOBSERVED: Optional[float] = None


def normalize_scalar(value: float) -> float:
    """Trim a float to 2 points of precision (e.g. 0.15442 -> 0.15). Not clamped."""
    return round(math.floor(value * 100) / 100.0, 2)


def raw_to_scalar(raw: int, invert: bool = False) -> float:
    """
    Map a raw ADC reading to a normalized scalar.

    Readings above MAX_RAW_VALUE are not clamped and produce values above 1.0.
    """
    scalar = normalize_scalar(raw / float(MAX_RAW_VALUE))
    if invert:
        scalar = round(1 - scalar, 2)
    return scalar


def significantly_different(old: Optional[float], new: float, threshold: float) -> bool:
    if old is UNOBSERVED:
        return True
    # rounding cancels float error like 0.52 - 0.50 = 0.020000000000000018
    return round(abs(new - old), 6) > threshold


def evaluate_reading(
    raw: int, previous: Optional[float], threshold: float, invert: bool = False
) -> Tuple[bool, float]:
    """Return (changed, scalar) for one raw reading against the previous value."""
    scalar = raw_to_scalar(raw, invert)
    return significantly_different(previous, scalar, threshold), scalar
