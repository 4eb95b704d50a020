"""
Astrogen - engine/enums.py
Catalog enumerations for stars, planets, veins and theme distribution.
======================================================================
Version:     0.1
Stack:       Python 3.11+

Numeric values match the game's own tables. Conversions from computed numbers
go through checked lookups; an out-of-range value is a configuration error.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Dict


class CatalogError(ValueError):
    """Raised when a value cannot be mapped onto a known catalog entry."""


class StarType(IntEnum):
    MainSeqStar = 0
    GiantStar = 1
    WhiteDwarf = 2
    NeutronStar = 3
    BlackHole = 4

    @property
    def is_remnant(self) -> bool:
        return self in (StarType.WhiteDwarf, StarType.NeutronStar, StarType.BlackHole)


class SpectrType(IntEnum):
    M = -4
    K = -3
    G = -2
    F = -1
    A = 0
    B = 1
    O = 2
    X = 3


class PlanetType(IntEnum):
    NONE = 0
    Vocano = 1
    Ocean = 2
    Desert = 3
    Ice = 4
    Gas = 5


class VeinType(IntEnum):
    NONE = 0
    Iron = 1
    Copper = 2
    Silicium = 3
    Titanium = 4
    Stone = 5
    Coal = 6
    Oil = 7
    Fireice = 8
    Diamond = 9
    Fractal = 10
    Crysrub = 11
    Grat = 12
    Bamboo = 13
    Mag = 14
    Max = 15


class ThemeDistribute(IntEnum):
    Default = 0
    Birth = 1
    Interstellar = 2
    Rare = 3


_SPECTR_BY_CLASS: Dict[int, SpectrType] = {
    int(s): s for s in SpectrType if s is not SpectrType.X
}

_VEIN_BY_INDEX: Dict[int, VeinType] = {
    int(v): v for v in VeinType if v not in (VeinType.NONE, VeinType.Max)
}


def spectr_from_class_factor(class_index: int) -> SpectrType:
    """Map a rounded class factor (-4..2) onto its spectral class."""
    try:
        return _SPECTR_BY_CLASS[class_index]
    except KeyError:
        raise CatalogError(f"Class factor {class_index} has no spectral class") from None


def vein_type_from_index(index: int) -> VeinType:
    """Map a vein slot index (1..14) onto its vein type."""
    try:
        return _VEIN_BY_INDEX[index]
    except KeyError:
        raise CatalogError(f"Vein slot {index} has no vein type") from None


def parse_enum(enum_cls, value):
    """Accept an enum member, its integer value or its name (as found in TOML)."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls[value]
        except KeyError:
            raise CatalogError(f"Unknown {enum_cls.__name__} name: {value!r}") from None
    try:
        return enum_cls(value)
    except ValueError:
        raise CatalogError(f"Unknown {enum_cls.__name__} value: {value!r}") from None
