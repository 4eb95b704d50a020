"""
Astrogen - world/veins.py
Vein Generator: resource deposits of one themed planet.
=======================================================
Version:     0.1
Stack:       Python 3.11+ | NumPy 2

Slots are indexed by vein type (1..14, slot 0 unused). Compact stars add
guaranteed deposits before the theme's rare veins roll; every escalation loop
reads from the same stream, so the order below is fixed.
"""

from __future__ import annotations

import logging
from typing import Callable, List

import numpy as np

from engine.data_loader import GameDesc
from engine.enums import SpectrType, StarType, VeinType, vein_type_from_index
from engine.numeric import f32, pow32, round_half_away, to_i32
from engine.seed_stream import SeedStream
from world.planet import Planet, Vein
from world.star import Star

logger = logging.getLogger(__name__)

SLOT_COUNT: int = 15
MAX_ESCALATION_ROLLS: int = 11
INFINITE_AMOUNT = f32(1000000000.0)

MAIN_SEQUENCE_POTENTIAL = {
    SpectrType.M: 2.5,
    SpectrType.G: 0.7,
    SpectrType.F: 0.6,
    SpectrType.B: 0.4,
    SpectrType.O: 1.6,
}


def add_until(rand: SeedStream, count: int, threshold: float) -> int:
    """Adds one spawn point per draw below the threshold, at most 11 times."""
    for _ in range(MAX_ESCALATION_ROLLS):
        if rand.next_f64() >= threshold:
            break
        count += 1
    return count


def _guarantee(spots: List[int], counts: List[np.float32], opacities: List[np.float32],
               rand: SeedStream, slot: int, bonus: int, threshold: float,
               count: float, opacity: float) -> None:
    spots[slot] = add_until(rand, spots[slot] + bonus, threshold)
    counts[slot] = f32(count)
    opacities[slot] = f32(opacity)


def vein_potential(star: Star, spots: List[int], counts: List[np.float32],
                   opacities: List[np.float32], rand: SeedStream) -> np.float32:
    """Star-dependent rare-resource exponent; compact stars also seed their guaranteed veins."""
    if star.star_type == StarType.MainSeqStar:
        return f32(MAIN_SEQUENCE_POTENTIAL.get(star.spectr, 1.0))
    if star.star_type == StarType.GiantStar:
        return f32(2.5)
    if star.star_type == StarType.WhiteDwarf:
        _guarantee(spots, counts, opacities, rand, VeinType.Diamond, 2, 0.449999988079071, 0.7, 1.0)
        _guarantee(spots, counts, opacities, rand, VeinType.Fractal, 2, 0.449999988079071, 0.7, 1.0)
        _guarantee(spots, counts, opacities, rand, VeinType.Grat, 1, 0.5, 0.7, 0.3)
        return f32(3.5)
    _guarantee(spots, counts, opacities, rand, VeinType.Mag, 1, 0.649999976158142, 0.7, 0.3)
    return f32(4.5) if star.star_type == StarType.NeutronStar else f32(5.0)


def resource_factor(planet: Planet, star: Star, game_desc: GameDesc) -> np.float32:
    f = star.resource_coef
    if planet.is_birth:
        f = f * f32(0.6666667)
    elif game_desc.is_rare_resource:
        if f > 1.0:
            f = pow32(f, 0.8)
        f = f * f32(0.7)
    return f


def amount_mapper(vein_type: VeinType, game_desc: GameDesc) -> Callable[[int], int]:
    def map_amount(amount: int) -> int:
        x1 = f32(round_half_away(f32(amount) * f32(1.1)))
        if vein_type == VeinType.Oil:
            x2 = x1 * game_desc.oil_amount_multiplier
        elif game_desc.is_infinite_resource:
            x2 = INFINITE_AMOUNT
        else:
            x2 = x1 * game_desc.resource_multiplier32
        return max(to_i32(round_half_away(x2)), 1)
    return map_amount


def generate_veins(planet: Planet, star: Star, game_desc: GameDesc) -> None:
    """Replaces the planet's vein list with freshly generated deposits."""
    rand = SeedStream(planet.seed)
    for _ in range(6):
        rand.next_f64()

    theme = planet.theme_proto

    def _slot(values, i, default):
        return values[i - 1] if 1 <= i <= len(values) else default

    spots = [_slot(theme.vein_spot, i, 0) for i in range(SLOT_COUNT)]
    counts = [f32(_slot(theme.vein_count, i, 0.0)) for i in range(SLOT_COUNT)]
    opacities = [f32(_slot(theme.vein_opacity, i, 0.0)) for i in range(SLOT_COUNT)]

    p = vein_potential(star, spots, counts, opacities, rand)
    f = resource_factor(planet, star, game_desc)

    setting_offset = 0 if star.index == 0 else 1
    for i, rare_vein in enumerate(theme.rare_veins):
        chance = f32(theme.rare_settings[i * 4 + setting_offset])
        escalation = f32(theme.rare_settings[i * 4 + 2])
        density = f32(theme.rare_settings[i * 4 + 3])
        appear = f32(1.0) - pow32(f32(1.0) - chance, p)
        richness = f32(1.0) - pow32(f32(1.0) - density, p)
        if rand.next_f64() < float(appear):
            spots[rare_vein] += 1
            counts[rare_vein] = richness
            opacities[rare_vein] = richness
            spots[rare_vein] = add_until(rand, spots[rare_vein], float(escalation))

    veins: List[Vein] = []
    for index in range(1, SLOT_COUNT):
        group = spots[index]
        if group <= 0:
            continue
        vein_type = vein_type_from_index(index)
        if vein_type == VeinType.Oil:
            min_patch = max_patch = 1
            scale = pow32(f, 0.5)
        else:
            min_patch = to_i32(round_half_away(counts[index] * f32(20.0)))
            max_patch = to_i32(round_half_away(counts[index] * f32(24.0)))
            scale = f

        density = max(to_i32(round_half_away(opacities[index] * f32(100000.0) * scale)), 20)
        spread = int(np.floor(f32(density) * f32(15.0 / 16.0))) if density < 16000 else 15000

        map_amount = amount_mapper(vein_type, game_desc)
        veins.append(
            Vein(
                vein_type=vein_type,
                min_group=group - 1,
                max_group=group + 1,
                min_patch=min_patch,
                max_patch=max_patch,
                min_amount=map_amount(density - spread),
                max_amount=map_amount(density + spread),
            )
        )

    planet.veins = veins
    logger.debug("planet %d: %d vein types, potential=%.2f factor=%.4f",
                 planet.id, len(veins), float(p), float(f))
