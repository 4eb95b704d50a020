"""
Astrogen - world/star.py
Stellar Attribute Engine: mass, age, temperature and orbit scale of one star.
=============================================================================
Version:     0.1
Stack:       Python 3.11+ | NumPy 2

Architecture notes
------------------
- Every draw happens in __init__. Derived attributes are pure functions of the
  captured draws and of each other, so they are computed lazily with
  functools.cached_property: first access stores the value in the instance
  dictionary and later accesses never recompute it.
- Index 0 is the birth star and takes its own branch in several formulas.
- Quantities the game keeps in single precision are numpy.float32.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Dict, List, Tuple

import numpy as np

from engine.data_loader import GameDesc
from engine.enums import SpectrType, StarType, spectr_from_class_factor
from engine.numeric import clamp, f32, ln32, log64, pow32, round_half_away, to_i32
from engine.seed_stream import SeedStream


@dataclass(frozen=True)
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}


def rand_normal(average_value: np.float32, standard_deviation: np.float32, r1: float, r2: float) -> np.float32:
    """Box-Muller sample built from two uniform draws."""
    gauss = math.sqrt(-2.0 * math.log(1.0 - r1)) * math.sin(2.0 * math.pi * r2)
    return f32(average_value) + f32(standard_deviation) * f32(gauss)


_GIANT_AVERAGE_LOW = f32(-1.5)
_GIANT_AVERAGE_HIGH = f32(1.6)
_MASS_LEVEL_SPAN = f32(0.88) + f32(0.98)


class Star:
    """
    A star and its derived physical attributes.
    Construction consumes the seed stream; every property below is memoized.
    """

    def __init__(
        self,
        game_desc: GameDesc,
        index: int,
        seed: int,
        position: Vector3,
        star_type: StarType,
        spectr: SpectrType,
    ):
        if not 0 <= index < game_desc.star_count:
            raise ValueError(f"star index {index} outside galaxy of {game_desc.star_count} stars")
        self.game_desc = game_desc
        self.index = index
        self.seed = seed
        self.position = position
        self.star_type = StarType(star_type)
        self.need_spectr = SpectrType(spectr)
        self.used_theme_ids: List[int] = []

        rand1 = SeedStream(seed)
        self.name_seed = rand1.next_seed()
        rand2 = SeedStream(rand1.next_seed())
        rand1.next_f64()
        self.planets_seed = rand1.next_seed()

        r1 = rand2.next_f64()
        r2 = rand2.next_f64()
        self.age_factor = rand2.next_f64()
        rn = rand2.next_f64()
        rt = rand2.next_f64()
        self.age_num1 = f32(rn * 0.1 + 0.95)
        self.age_num2 = f32(rt * 0.4 + 0.8)
        self.age_num3 = f32(rt * 9.0 + 1.0)
        mass_factor = 0.0 if index == 0 else rand2.next_f64()
        self.lifetime_factor = rand2.next_f64()
        y = rand2.next_f64() * 0.4 - 0.2
        self.radius_factor = 2.0 ** y

        if self.need_spectr == SpectrType.M:
            spectr_factor = f32(-3.0)
        elif self.need_spectr == SpectrType.O:
            spectr_factor = f32(4.65)
        else:
            spectr_factor = f32(0.0)
        self._mass_params: Tuple[float, float, float, float, np.float32] = (
            r1, r2, y, mass_factor, spectr_factor,
        )

        if game_desc.star_count > 1:
            self.level = f32(index) / f32(game_desc.star_count - 1)
        else:
            self.level = f32(0.0)

    def __repr__(self) -> str:
        return f"Star(index={self.index}, type={self.star_type.name}, seed={self.seed})"

    def is_birth(self) -> bool:
        return self.index == 0

    @property
    def astro_id(self) -> int:
        return (self.index + 1) * 100

    # --------------------------------------------------------------------
    # Mass and age
    # --------------------------------------------------------------------

    @cached_property
    def unmodified_mass(self) -> np.float32:
        r1, r2, y, mass_factor, spectr_factor = self._mass_params
        if self.is_birth():
            p1 = clamp(rand_normal(f32(0.0), f32(0.08), r1, r2), f32(-0.2), f32(0.2))
            return pow32(2.0, p1)

        if self.star_type == StarType.WhiteDwarf:
            return f32(1.0 + r2 * 5.0)
        if self.star_type == StarType.NeutronStar:
            return f32(7.0 + r1 * 11.0)
        if self.star_type == StarType.BlackHole:
            return f32(18.0 + r1 * r2 * 30.0)

        if spectr_factor != 0.0:
            num8 = spectr_factor
        else:
            num7 = f32(-0.98) + _MASS_LEVEL_SPAN * clamp(self.level, f32(0.0), f32(1.0))
            if self.star_type == StarType.GiantStar:
                average_value = _GIANT_AVERAGE_LOW if y > -0.08 else _GIANT_AVERAGE_HIGH
                standard_deviation = f32(0.3)
            else:
                average_value = num7 + f32(0.65) if num7 >= 0.0 else num7 - f32(0.65)
                standard_deviation = f32(0.33)
            num = rand_normal(average_value, standard_deviation, r1, r2)
            num8 = clamp(num if num <= 0.0 else num * f32(2.0), f32(-2.4), f32(4.65))
        return pow32(2.0, f32(float(num8) + (mass_factor - 0.5) * 0.2 + 1.0))

    @cached_property
    def resource_coef(self) -> np.float32:
        if self.is_birth():
            return f32(0.6)
        num1 = f32(self.position.magnitude()) / f32(32.0)
        if float(num1) > 1.0:
            num1 = ln32(ln32(ln32(ln32(ln32(num1) + f32(1.0)) + f32(1.0)) + f32(1.0)) + f32(1.0)) + f32(1.0)
        return pow32(7.0, num1) * f32(0.6)

    @cached_property
    def age(self) -> np.float32:
        if self.is_birth():
            return f32(self.age_factor * 0.4 + 0.3)
        if self.star_type == StarType.GiantStar:
            return f32(self.age_factor * 0.04 + 0.96)
        if self.star_type.is_remnant:
            return f32(self.age_factor * 0.4 + 1.0)
        mass = self.unmodified_mass
        if mass >= 0.8:
            return f32(self.age_factor * 0.7 + 0.2)
        if mass >= 0.5:
            return f32(self.age_factor * 0.4 + 0.1)
        return f32(self.age_factor * 0.12 + 0.02)

    @cached_property
    def lifetime(self) -> np.float32:
        mass = self.unmodified_mass
        d = 2.0 + 0.4 * (1.0 - float(mass)) if mass < 2.0 else 5.0
        mass_multiplier = 0.58 if self.star_type == StarType.GiantStar else 0.5
        if self.star_type == StarType.WhiteDwarf:
            lifetime_delta = 10000.0
        elif self.star_type == StarType.NeutronStar:
            lifetime_delta = 1000.0
        else:
            lifetime_delta = 0.0
        lifetime = (
            10000.0
            * 0.1 ** (log64(float(mass) * mass_multiplier, d) + 1.0)
            * (self.lifetime_factor * 0.2 + 0.9)
        ) + lifetime_delta

        if self.is_birth():
            return f32(lifetime)

        age = self.age
        num9 = f32(lifetime) * age
        if num9 > 5000.0:
            num9 = f32((float(ln32(num9 / f32(5000.0))) + 1.0) * 5000.0)
        if num9 > 8000.0:
            inner = ln32(ln32(ln32(num9 / f32(8000.0)) + f32(1.0)) + f32(1.0))
            num9 = f32((float(inner) + 1.0) * 8000.0)
        return num9 / age

    # --------------------------------------------------------------------
    # Temperature and spectral class
    # --------------------------------------------------------------------

    @cached_property
    def temperature_factor(self) -> np.float32:
        aged = float(pow32(clamp(self.age, f32(0.0), f32(1.0)), 20.0))
        return f32(1.0 - aged * 0.5) * self.unmodified_mass

    @cached_property
    def unmodified_temperature(self) -> np.float32:
        f1 = float(self.temperature_factor)
        return f32(f1 ** (0.56 + 0.14 / log64(f1 + 4.0, 5.0)) * 4450.0 + 1300.0)

    @cached_property
    def temperature(self) -> np.float32:
        if self.star_type == StarType.BlackHole:
            return f32(0.0)
        if self.star_type == StarType.NeutronStar:
            return self.age_num3 * f32(1e7)
        if self.star_type == StarType.WhiteDwarf:
            return self.age_num2 * f32(150000.0)
        temperature = self.unmodified_temperature
        if self.star_type == StarType.GiantStar:
            return temperature * self._giant_decay
        return temperature

    @cached_property
    def _giant_decay(self) -> np.float32:
        return f32(1.0) - pow32(self.age, 30.0) * f32(0.5)

    @cached_property
    def class_factor(self) -> float:
        # Computed for remnants too even though their spectrum ignores it.
        temperature = float(self.unmodified_temperature)
        spectr_factor = log64((temperature - 1300.0) / 4500.0, 2.6) - 0.5
        if spectr_factor < 0.0:
            spectr_factor *= 4.0
        return clamp(spectr_factor, -4.0, 2.0)

    @cached_property
    def spectr(self) -> SpectrType:
        class_factor = self.class_factor
        if self.star_type.is_remnant:
            return SpectrType.X
        return spectr_from_class_factor(int(round_half_away(class_factor)))

    @cached_property
    def color(self) -> np.float32:
        if self.star_type in (StarType.BlackHole, StarType.NeutronStar):
            return f32(1.0)
        if self.star_type == StarType.WhiteDwarf:
            return f32(0.7)
        return clamp(f32((self.class_factor + 3.5) * 0.2), f32(0.0), f32(1.0))

    # --------------------------------------------------------------------
    # Luminosity, size and orbits
    # --------------------------------------------------------------------

    @cached_property
    def luminosity(self) -> np.float32:
        base = pow32(self.temperature_factor, 0.7)
        if self.star_type == StarType.BlackHole:
            factor = f32(1.0 / 1000.0) * self.age_num1
        elif self.star_type == StarType.NeutronStar:
            factor = f32(0.1) * self.age_num1
        elif self.star_type == StarType.WhiteDwarf:
            factor = f32(0.04) * self.age_num1
        elif self.star_type == StarType.GiantStar:
            factor = f32(1.6)
        else:
            factor = f32(1.0)
        real = base * factor
        # Displayed value, three decimals
        return f32(round_half_away(pow32(real, 0.33) * f32(1000.0))) / f32(1000.0)

    @cached_property
    def radius(self) -> np.float32:
        mass = float(self.unmodified_mass)
        if self.star_type == StarType.GiantStar:
            num4 = f32(5.0 ** abs(math.log10(mass) - 0.7) * 5.0)
            if num4 > 10.0:
                num4 = (ln32(num4 * f32(0.1)) + f32(1.0)) * f32(10.0)
            return num4 * self.age_num2
        if self.star_type == StarType.NeutronStar:
            factor = f32(0.15)
        elif self.star_type == StarType.WhiteDwarf:
            factor = f32(0.2)
        else:
            factor = f32(1.0)
        return f32(mass ** 0.4 * self.radius_factor) * factor

    @cached_property
    def light_balance_radius(self) -> np.float32:
        if self.star_type == StarType.GiantStar:
            return f32(3.0) * self.habitable_radius
        r = pow32(1.7, f32(self.class_factor) + f32(2.0))
        if self.star_type == StarType.BlackHole:
            factor = f32(0.4) * self.age_num1
        elif self.star_type == StarType.NeutronStar:
            factor = f32(3.0) * self.age_num1
        elif self.star_type == StarType.WhiteDwarf:
            factor = f32(0.2) * self.age_num1
        else:
            factor = f32(1.0)
        return r * factor

    @cached_property
    def habitable_radius(self) -> np.float32:
        if self.star_type in (StarType.BlackHole, StarType.NeutronStar):
            return f32(0.0)
        if self.star_type == StarType.WhiteDwarf:
            factor = f32(0.15) * self.age_num2
        elif self.star_type == StarType.GiantStar:
            factor = f32(9.0)
        else:
            factor = f32(1.0)
        offset = f32(0.2) if self.is_birth() else f32(0.25)
        return (pow32(1.7, f32(self.class_factor) + f32(2.0)) + offset) * factor

    @cached_property
    def mass(self) -> np.float32:
        if self.star_type == StarType.BlackHole:
            return self.unmodified_mass * f32(2.5) * self.age_num2
        if self.star_type in (StarType.NeutronStar, StarType.WhiteDwarf):
            return self.unmodified_mass * f32(0.2) * self.age_num1
        if self.star_type == StarType.GiantStar:
            return self.unmodified_mass * self._giant_decay
        return self.unmodified_mass

    @cached_property
    def orbit_scaler(self) -> np.float32:
        orbit_scaler = pow32(1.35, f32(self.class_factor) + f32(2.0))
        if orbit_scaler < 1.0:
            orbit_scaler = orbit_scaler + (f32(1.0) - orbit_scaler) * f32(0.6)
        if self.star_type == StarType.NeutronStar:
            factor = f32(1.5) * self.age_num1
        elif self.star_type == StarType.GiantStar:
            factor = f32(3.3)
        else:
            factor = f32(1.0)
        return orbit_scaler * factor

    @cached_property
    def dyson_radius(self) -> int:
        scaled = max(self.orbit_scaler * f32(0.28), self.radius * f32(0.045)) * f32(800.0)
        return to_i32(round_half_away(scaled)) * 100

    def to_dict(self) -> Dict[str, Any]:
        """External representation, internal seeds excluded."""
        return {
            "index": self.index,
            "position": self.position.to_dict(),
            "mass": float(self.mass),
            "lifetime": float(self.lifetime),
            "age": float(self.age),
            "temperature": float(self.temperature),
            "type": self.star_type.name,
            "spectr": self.spectr.name,
            "luminosity": float(self.luminosity),
            "radius": float(self.radius),
            "dysonRadius": self.dyson_radius,
        }
