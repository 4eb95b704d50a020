"""
Astrogen - world/galaxy.py
Containers shared across one galaxy's generation pass.
======================================================
Version:     0.1
Stack:       Python 3.11+

The habitable budget is galaxy-wide and mutated as planets are classified.
Stars are visited in index order and, within a star, planets before their
moons in ascending orbit index; the budget must be threaded through in that
order for output to be reproducible.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

from engine.data_loader import GameDesc
from world.planet import Planet
from world.star import Star


@dataclass
class HabitableBudget:
    """Running count of ocean planets handed out so far in the galaxy."""
    habitable_count: int = 0

    def record_habitable(self) -> None:
        self.habitable_count += 1


@dataclass
class StarSystem:
    star: Star
    planets: List[Planet] = field(default_factory=list)

    @property
    def index(self) -> int:
        return self.star.index

    def get_planets(self) -> Iterator[Planet]:
        """Planets orbiting the star directly."""
        return (p for p in self.planets if p.orbit_around == 0)

    def get_satellites(self) -> Iterator[Planet]:
        return (p for p in self.planets if p.orbit_around != 0)

    def to_dict(self) -> Dict[str, Any]:
        data = self.star.to_dict()
        data["planets"] = [p.to_dict() for p in self.planets]
        return data


@dataclass
class Galaxy:
    game_desc: GameDesc
    stars: List[StarSystem] = field(default_factory=list)

    @property
    def star_count(self) -> int:
        return self.game_desc.star_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seed": self.game_desc.galaxy_seed,
            "stars": [s.to_dict() for s in self.stars],
        }
