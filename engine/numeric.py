"""
Astrogen - engine/numeric.py
Single-precision arithmetic helpers shared by the star, planet and vein generators.
==================================================================================
Version:     0.1
Stack:       Python 3.11+ | NumPy 2

Values the game stores as 32-bit floats are kept as ``numpy.float32`` scalars.
Under NumPy 2 promotion rules a Python float combined with a ``float32`` stays
``float32``, so expressions read like the formulas they implement.
"""

from __future__ import annotations

import math

import numpy as np

f32 = np.float32

I32_MIN: int = -(2 ** 31)
I32_MAX: int = 2 ** 31 - 1


def round_half_away(x: float) -> float:
    """Round to the nearest integer, ties away from zero."""
    value = float(x)
    if math.isnan(value) or math.isinf(value):
        return value
    a = abs(value)
    r = math.floor(a)
    if a - r >= 0.5:
        r += 1.0
    return math.copysign(r, value)


def to_i32(x: float) -> int:
    """Truncating, saturating float-to-int conversion (NaN becomes 0)."""
    value = float(x)
    if math.isnan(value):
        return 0
    if value >= I32_MAX:
        return I32_MAX
    if value <= I32_MIN:
        return I32_MIN
    return int(value)


def wrap_i32(x: int) -> int:
    """Two's complement wrap of an arbitrary int into the signed 32-bit range."""
    return ((x + 2 ** 31) & 0xFFFFFFFF) - 2 ** 31


def clamp(x, lo, hi):
    if x < lo:
        return lo
    if x > hi:
        return hi
    return x


def ln32(x) -> np.float32:
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.log(f32(x))


def log64(x: float, base: float) -> float:
    """Double precision logarithm in an arbitrary base, ln(x) / ln(base)."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.log(np.float64(x)) / np.log(np.float64(base)))


def pow32(base, exponent) -> np.float32:
    with np.errstate(over="ignore", invalid="ignore"):
        return np.power(f32(base), f32(exponent))
