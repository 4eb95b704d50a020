"""
Astrogen - world/planet.py
Planet and Vein records produced by the generators.
===================================================
Version:     0.1
Stack:       Python 3.11+ | NumPy 2
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from engine.data_loader import ThemeProtoDef
from engine.enums import PlanetType, ThemeDistribute, VeinType
from engine.numeric import f32


@dataclass(frozen=True)
class Vein:
    vein_type: VeinType
    min_group: int
    max_group: int
    min_patch: int
    max_patch: int
    min_amount: int
    max_amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "veinType": self.vein_type.name,
            "minGroup": self.min_group,
            "maxGroup": self.max_group,
            "minPatch": self.min_patch,
            "maxPatch": self.max_patch,
            "minAmount": self.min_amount,
            "maxAmount": self.max_amount,
        }



@dataclass
class Planet:
    index: int = 0
    seed: int = 0
    info_seed: int = 0
    theme_seed: int = 0
    orbit_around: int = 0
    orbit_index: int = 0
    number: int = 0
    id: int = 0
    radius: np.float32 = field(default_factory=lambda: f32(200.0))
    scale: np.float32 = field(default_factory=lambda: f32(1.0))
    orbit_radius: np.float32 = field(default_factory=lambda: f32(0.0))
    orbit_inclination: np.float32 = field(default_factory=lambda: f32(0.0))
    orbit_longitude: np.float32 = field(default_factory=lambda: f32(0.0))
    orbital_period: float = 0.0
    orbit_phase: np.float32 = field(default_factory=lambda: f32(0.0))
    obliquity: np.float32 = field(default_factory=lambda: f32(0.0))
    rotation_period: float = 0.0
    rotation_phase: np.float32 = field(default_factory=lambda: f32(0.0))
    sun_distance: np.float32 = field(default_factory=lambda: f32(0.0))
    planet_type: PlanetType = PlanetType.NONE
    habitable_bias: np.float32 = field(default_factory=lambda: f32(0.0))
    temperature_bias: np.float32 = field(default_factory=lambda: f32(0.0))
    luminosity: np.float32 = field(default_factory=lambda: f32(0.0))
    theme_proto: Optional[ThemeProtoDef] = None
    theme_rand1: float = 0.0
    is_birth_star: bool = False
    veins: List[Vein] = field(default_factory=list)
    gases: List[Tuple[int, np.float32]] = field(default_factory=list)

    @property
    def real_radius(self) -> np.float32:
        return self.radius * self.scale

    @property
    def is_gas_giant(self) -> bool:
        return self.planet_type == PlanetType.Gas

    @property
    def is_moon(self) -> bool:
        return self.orbit_around != 0

    @property
    def is_birth(self) -> bool:
        """The player's starting planet: the birth star's Birth-scoped theme."""
        return (
            self.is_birth_star
            and self.theme_proto is not None
            and self.theme_proto.distribute == ThemeDistribute.Birth
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "id": self.id,
            "orbitAround": self.orbit_around,
            "orbitIndex": self.orbit_index,
            "orbitRadius": float(self.orbit_radius),
            "orbitInclination": float(self.orbit_inclination),
            "orbitLongitude": float(self.orbit_longitude),
            "orbitalPeriod": self.orbital_period,
            "orbitPhase": float(self.orbit_phase),
            "obliquity": float(self.obliquity),
            "rotationPeriod": self.rotation_period,
            "rotationPhase": float(self.rotation_phase),
            "sunDistance": float(self.sun_distance),
            "type": self.planet_type.name,
            "habitableBias": float(self.habitable_bias),
            "temperatureBias": float(self.temperature_bias),
            "luminosity": float(self.luminosity),
            "theme": self.theme_proto.id if self.theme_proto is not None else 0,
            "veins": [v.to_dict() for v in self.veins],
            "gases": [[item, float(rate)] for item, rate in self.gases],
        }
