"""
Astrogen - engine/data_loader.py
Catalog and configuration loaders for TOML seed data powered by Pydantic.
=========================================================================
Version:     0.1
Stack:       Python 3.11+ | Pydantic v2 | tomllib
Status:      Read-only data layer. Generators never mutate what is loaded here.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from engine.enums import CatalogError, PlanetType, ThemeDistribute, parse_enum
from engine.numeric import f32

# ================================================================================
# SCHEMAS
# ================================================================================

class ThemeProtoDef(BaseModel):
    """One entry of the planet theme catalog."""
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    planet_type: PlanetType
    distribute: ThemeDistribute = ThemeDistribute.Default
    temperature: float = 0.0
    # Indexed by vein type - 1
    vein_spot: List[int] = Field(default_factory=list)
    vein_count: List[float] = Field(default_factory=list)
    vein_opacity: List[float] = Field(default_factory=list)
    # Four settings per rare vein: birth chance, chance, escalation, density
    rare_veins: List[int] = Field(default_factory=list)
    rare_settings: List[float] = Field(default_factory=list)
    gas_items: List[int] = Field(default_factory=list)
    gas_speeds: List[float] = Field(default_factory=list)

    @field_validator("planet_type", mode="before")
    @classmethod
    def _parse_planet_type(cls, value: Any) -> PlanetType:
        return parse_enum(PlanetType, value)

    @field_validator("distribute", mode="before")
    @classmethod
    def _parse_distribute(cls, value: Any) -> ThemeDistribute:
        return parse_enum(ThemeDistribute, value)

    @model_validator(mode="after")
    def _check_lengths(self) -> "ThemeProtoDef":
        if len(self.rare_settings) != 4 * len(self.rare_veins):
            raise ValueError(
                f"theme {self.id}: rare_settings needs 4 values per rare vein "
                f"({len(self.rare_veins)} veins, {len(self.rare_settings)} settings)"
            )
        if len(self.gas_items) != len(self.gas_speeds):
            raise ValueError(f"theme {self.id}: gas_items and gas_speeds differ in length")
        if any(not 1 <= v <= 14 for v in self.rare_veins):
            raise ValueError(f"theme {self.id}: rare vein index outside 1..14")
        return self

    def temperature32(self) -> np.float32:
        return f32(self.temperature)


class ThemeCollectionDef(BaseModel):
    model_config = ConfigDict(frozen=True)
    themes: List[ThemeProtoDef]


class GameDesc(BaseModel):
    """Per-galaxy generation settings, consumed read-only by every generator."""
    model_config = ConfigDict(frozen=True)

    galaxy_seed: int = 0
    star_count: int = Field(default=64, ge=1)
    resource_multiplier: float = 1.0
    gas_coef_override: Optional[float] = None
    oil_amount_override: Optional[float] = None

    @property
    def is_infinite_resource(self) -> bool:
        return self.resource_multiplier >= 99.5

    @property
    def is_rare_resource(self) -> bool:
        return self.resource_multiplier <= 0.1001

    @property
    def gas_coef(self) -> np.float32:
        if self.gas_coef_override is not None:
            return f32(self.gas_coef_override)
        return f32(1.0)

    @property
    def oil_amount_multiplier(self) -> np.float32:
        if self.oil_amount_override is not None:
            return f32(self.oil_amount_override)
        if self.is_rare_resource:
            return f32(0.5)
        if self.is_infinite_resource:
            return f32(1.0)
        return f32(self.resource_multiplier)

    @property
    def resource_multiplier32(self) -> np.float32:
        return f32(self.resource_multiplier)

# ================================================================================
# LOADERS & CACHE (JIT)
# ================================================================================

_THEME_CACHE: Optional[List[ThemeProtoDef]] = None
_THEME_INDEX: Dict[int, ThemeProtoDef] = {}

DATA_DIR = Path(__file__).parent.parent / "data"


def _read_toml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_theme_protos(path: Path) -> List[ThemeProtoDef]:
    """Loads a theme catalog file without touching the global cache."""
    collection = ThemeCollectionDef(**_read_toml(path))
    ids = [t.id for t in collection.themes]
    if len(set(ids)) != len(ids):
        raise CatalogError(f"Duplicate theme ids in {path}")
    return collection.themes


def get_theme_protos() -> List[ThemeProtoDef]:
    """Loads the bundled theme catalog. Cached globally."""
    global _THEME_CACHE
    if _THEME_CACHE is not None:
        return _THEME_CACHE

    _THEME_CACHE = load_theme_protos(DATA_DIR / "themes.toml")
    _THEME_INDEX.clear()
    _THEME_INDEX.update({t.id: t for t in _THEME_CACHE})
    return _THEME_CACHE


def get_theme_proto(theme_id: int) -> ThemeProtoDef:
    get_theme_protos()
    if theme_id not in _THEME_INDEX:
        raise CatalogError(f"Theme not found: {theme_id}")
    return _THEME_INDEX[theme_id]


def load_game_desc(path: Path) -> GameDesc:
    """Reads the [game] table of a TOML settings file."""
    data = _read_toml(path)
    return GameDesc(**data.get("game", data))


def load_rule_set(path: Path):
    """Reads the [[rules]] array of a TOML settings file into a RuleSet."""
    from engine.rules import RuleSet

    data = _read_toml(path)
    return RuleSet(**data)
