"""
Astrogen - engine/seed_stream.py
Seed Stream: the deterministic draw source behind every generated star and planet.
==================================================================================
Version:     0.1
Stack:       Python 3.11+

A port of the .NET 3.5 ``System.Random`` subtractive generator. Every
arithmetic step wraps to signed 32-bit like the reference. The order of draws
is part of the output contract: each call advances the state for all later
calls on the same stream.
"""

from __future__ import annotations

import numpy as np

from engine.numeric import f32, wrap_i32

MBIG: int = 2147483647
MSEED: int = 161803398
SAMPLE_SCALE: float = 1.0 / MBIG


class SeedStream:
    """Reproducible stream of uniform draws in [0, 1) for one integer seed."""

    def __init__(self, seed: int):
        self.seed = seed
        self._seed_array = [0] * 56
        self._inext = 0
        self._inextp = 21

        mj = wrap_i32(MSEED - abs(wrap_i32(seed)))
        self._seed_array[55] = mj
        mk = 1
        for i in range(1, 55):
            ii = (21 * i) % 55
            self._seed_array[ii] = mk
            mk = wrap_i32(mj - mk)
            if mk < 0:
                mk = wrap_i32(mk + MBIG)
            mj = self._seed_array[ii]

        for _ in range(1, 5):
            for i in range(1, 56):
                value = wrap_i32(self._seed_array[i] - self._seed_array[1 + (i + 30) % 55])
                if value < 0:
                    value = wrap_i32(value + MBIG)
                self._seed_array[i] = value

    def _internal_sample(self) -> int:
        self._inext += 1
        if self._inext >= 56:
            self._inext = 1
        self._inextp += 1
        if self._inextp >= 56:
            self._inextp = 1
        num = wrap_i32(self._seed_array[self._inext] - self._seed_array[self._inextp])
        if num < 0:
            num = wrap_i32(num + MBIG)
        self._seed_array[self._inext] = num
        return num

    def sample(self) -> float:
        return self._internal_sample() * SAMPLE_SCALE

    def next_f64(self) -> float:
        return self.sample()

    def next_f32(self) -> np.float32:
        return f32(self.sample())

    def next(self) -> int:
        """Raw non-negative integer draw in [0, 2147483647)."""
        return self._internal_sample()

    def next_seed(self) -> int:
        """Draw a value usable as the seed of an independent child stream."""
        return self.next()

    def next_range(self, lo: int, hi: int) -> int:
        return lo + int(self.sample() * (hi - lo))
