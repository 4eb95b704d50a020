"""
Astrogen - world/generator.py
Planet Generator: orbit, rotation, classification and theme of one planet.
=========================================================================
Version:     0.1
Stack:       Python 3.11+ | NumPy 2

Draw order is part of the contract. Each planet reads seventeen doubles and
one raw integer (the theme seed) from a stream seeded by its info seed:
twelve geometry draws, the theme draw, the obliquity/tidal band draw, three
discarded draws, then the theme seed. Reordering any of them changes every
value derived afterwards.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from engine.data_loader import GameDesc, ThemeProtoDef, get_theme_protos
from engine.enums import CatalogError, PlanetType, StarType, ThemeDistribute
from engine.numeric import clamp, f32, ln32, pow32
from engine.seed_stream import SeedStream
from world.galaxy import HabitableBudget
from world.planet import Planet
from world.star import Star

logger = logging.getLogger(__name__)

ORBIT_RADIUS = np.array(
    [0.0, 0.4, 0.7, 1.0, 1.4, 1.9, 2.5, 3.3, 4.3, 5.5, 6.9, 8.4, 10.0, 11.7, 13.5, 15.4, 17.5],
    dtype=np.float32,
)

KEPLER_CONSTANT: float = 39.4784176043574
MOON_REDUCED_MASS: float = 1.08308421068537e-08
STAR_MASS_UNIT: float = 1.35385519905204e-06

# Rotation speed-up of rocky bodies around compact stars
REMNANT_ROTATION = {
    StarType.WhiteDwarf: 0.5,
    StarType.NeutronStar: 0.200000002980232,
    StarType.BlackHole: 0.150000005960464,
}


def create_planet(
    star: Star,
    index: int,
    orbit_around_planet: Optional[Planet],
    orbit_around: int,
    orbit_index: int,
    number: int,
    gas_giant: bool,
    budget: HabitableBudget,
    info_seed: int,
    gen_seed: int,
    used_theme_ids: Optional[List[int]] = None,
    themes: Optional[Sequence[ThemeProtoDef]] = None,
) -> Planet:
    """
    Builds one planet (or moon, when orbit_around_planet is given).
    Mutates the habitable budget and the star's used theme list.
    """
    if used_theme_ids is None:
        used_theme_ids = star.used_theme_ids

    planet = Planet(
        index=index,
        seed=gen_seed,
        info_seed=info_seed,
        orbit_around=orbit_around,
        orbit_index=orbit_index,
        number=number,
        id=star.astro_id + index + 1,
        is_birth_star=star.is_birth(),
    )

    rand = SeedStream(info_seed)
    num3 = rand.next_f64()
    num4 = rand.next_f64()
    num5 = rand.next_f64()
    num6 = rand.next_f64()
    num7 = rand.next_f64()
    num8 = rand.next_f64()
    num9 = rand.next_f64()
    num10 = rand.next_f64()
    num11 = rand.next_f64()
    num12 = rand.next_f64()
    num13 = rand.next_f64()
    num14 = rand.next_f64()
    theme_rand = rand.next_f64()
    num15 = rand.next_f64()
    rand.next_f64()
    rand.next_f64()
    rand.next_f64()
    planet.theme_seed = rand.next()
    planet.theme_rand1 = theme_rand

    # 1. Orbit
    a = pow32(1.2, f32(num3 * (num4 - 0.5) * 0.5))
    if orbit_around_planet is not None:
        f1 = f32(
            (
                (1600.0 * orbit_index + 200.0)
                * float(pow32(star.orbit_scaler, 0.3))
                * float(a + (f32(1.0) - a) * f32(0.5))
                + float(orbit_around_planet.real_radius)
            )
            / 40000.0
        )
    else:
        b = ORBIT_RADIUS[orbit_index] * star.orbit_scaler
        num16 = f32(float(a - f32(1.0)) / float(max(b, f32(1.0))) + 1.0)
        f1 = b * num16

    planet.orbit_radius = f1
    planet.orbit_inclination = f32(num5 * 16.0 - 8.0)
    if orbit_around > 0:
        planet.orbit_inclination = planet.orbit_inclination * f32(2.2)
    planet.orbit_longitude = f32(num6 * 360.0)
    if star.star_type == StarType.NeutronStar:
        if planet.orbit_inclination > 0.0:
            planet.orbit_inclination = planet.orbit_inclination + f32(3.0)
        else:
            planet.orbit_inclination = planet.orbit_inclination - f32(3.0)

    radius = float(f1)
    denominator = MOON_REDUCED_MASS if orbit_around > 0 else STAR_MASS_UNIT * float(star.mass)
    planet.orbital_period = math.sqrt(KEPLER_CONSTANT * radius * radius * radius / denominator)
    planet.orbit_phase = f32(num7 * 360.0)

    # 2. Axial tilt
    if num15 < 0.0399999991059303:
        planet.obliquity = f32(num8 * (num9 - 0.5) * 39.9)
        tilt = f32(70.0)
    elif num15 < 0.100000001490116:
        planet.obliquity = f32(num8 * (num9 - 0.5) * 80.0)
        tilt = f32(30.0)
    else:
        planet.obliquity = f32(num8 * (num9 - 0.5) * 60.0)
        tilt = None
    if tilt is not None:
        if planet.obliquity < 0.0:
            planet.obliquity = planet.obliquity - tilt
        else:
            planet.obliquity = planet.obliquity + tilt

    # 3. Rotation
    planet.rotation_period = (
        (num10 * num11 * 1000.0 + 400.0)
        * (float(pow32(f1, 0.25)) if orbit_around == 0 else 1.0)
        * (0.200000002980232 if gas_giant else 1.0)
    )
    if not gas_giant:
        planet.rotation_period *= REMNANT_ROTATION.get(star.star_type, 1.0)
    planet.rotation_phase = f32(num12 * 360.0)

    if orbit_around_planet is not None:
        planet.sun_distance = orbit_around_planet.orbit_radius
        host_period = orbit_around_planet.orbital_period
    else:
        planet.sun_distance = planet.orbit_radius
        host_period = planet.orbital_period

    planet.rotation_period = 1.0 / (1.0 / host_period + 1.0 / planet.rotation_period)
    if orbit_around == 0 and orbit_index <= 4 and not gas_giant:
        if num15 > 0.959999978542328:
            planet.obliquity = planet.obliquity * f32(0.01)
            planet.rotation_period = planet.orbital_period
        elif num15 > 0.930000007152557:
            planet.obliquity = planet.obliquity * f32(0.1)
            planet.rotation_period = planet.orbital_period * 0.5
        elif num15 > 0.899999976158142:
            planet.obliquity = planet.obliquity * f32(0.2)
            planet.rotation_period = planet.orbital_period * 0.25

    if 0.85 < num15 <= 0.9:
        planet.rotation_period = -planet.rotation_period

    # 4. Classification
    if gas_giant:
        planet.planet_type = PlanetType.Gas
        planet.radius = f32(80.0)
        planet.scale = f32(10.0)
        planet.habitable_bias = f32(100.0)
    else:
        _classify(planet, star, budget, orbit_around, orbit_index, num13, num14)

    planet.luminosity = solar_illumination(star, planet.sun_distance)

    set_planet_theme(planet, star, used_theme_ids, theme_rand, themes)
    logger.debug(
        "star %d planet %d: type=%s theme=%d orbit=%.4f",
        star.index, index, planet.planet_type.name, planet.theme_proto.id, float(planet.orbit_radius),
    )
    return planet


def _classify(
    planet: Planet,
    star: Star,
    budget: HabitableBudget,
    orbit_around: int,
    orbit_index: int,
    num13: float,
    num14: float,
) -> None:
    """Assigns a provisional rocky planet type from the habitable zone and budget."""
    habitable_radius = star.habitable_radius
    allowance = max(math.ceil(f32(star.game_desc.star_count) * f32(0.29)), 11.0)
    remaining_slots = float(allowance) - float(budget.habitable_count)
    remaining_stars = f32(star.game_desc.star_count - star.index)

    sun_distance = planet.sun_distance
    if habitable_radius > 0.0 and sun_distance > 0.0:
        f2 = sun_distance / habitable_radius
        distance_bias = abs(ln32(f2))
    else:
        f2 = f32(1000.0)
        distance_bias = f32(1000.0)

    zone_width = clamp(np.sqrt(habitable_radius), f32(1.0), f32(2.0)) - f32(0.04)
    a = f32(remaining_slots / float(remaining_stars))
    threshold = clamp(a + (f32(0.35) - a) * f32(0.5), f32(0.08), f32(0.8))
    planet.habitable_bias = distance_bias * zone_width
    planet.temperature_bias = f32(1.20000004768372 / float(f2 + f32(0.200000002980232)) - 1.0)
    chance = pow32(clamp(planet.habitable_bias / threshold, f32(0.0), f32(1.1)), threshold * f32(10.0))

    if (num13 > float(chance) and star.index > 0) or (
        orbit_around > 0 and orbit_index == 1 and star.index == 0
    ):
        planet.planet_type = PlanetType.Ocean
        budget.record_habitable()
    elif f2 < f32(0.833333015441895):
        hot = max(float(f2) * 2.5 - 0.850000023841858, 0.15)
        planet.planet_type = PlanetType.Vocano if num14 >= hot else PlanetType.Desert
    elif f2 < f32(1.20000004768372):
        planet.planet_type = PlanetType.Desert
    else:
        cold = 0.899999976158142 / float(f2) - 0.100000001490116
        planet.planet_type = PlanetType.Ice if num14 >= cold else PlanetType.Desert


def solar_illumination(star: Star, sun_distance: np.float32) -> np.float32:
    """Relative light reaching the planet, log-compressed above 1, two decimals."""
    luminosity = pow32(star.light_balance_radius / (sun_distance + f32(0.01)), 0.6)
    if luminosity > 1.0:
        for _ in range(3):
            luminosity = ln32(luminosity) + f32(1.0)
    # ties to even
    return f32(round(float(luminosity * f32(100.0)))) / f32(100.0)


def _theme_matches(theme: ThemeProtoDef, planet: Planet, star: Star) -> bool:
    if star.is_birth() and planet.planet_type == PlanetType.Ocean:
        return theme.distribute == ThemeDistribute.Birth

    theme_temp = float(theme.temperature32())
    temperature_bias = float(planet.temperature_bias)
    if abs(theme_temp) < 0.5 and theme.planet_type == PlanetType.Desert:
        temperature_ok = abs(temperature_bias) < abs(theme_temp) + 0.100000001490116
    else:
        temperature_ok = theme_temp * temperature_bias >= -0.100000001490116
    if theme.planet_type != planet.planet_type or not temperature_ok:
        return False

    if star.is_birth():
        return theme.distribute == ThemeDistribute.Default
    return theme.distribute in (ThemeDistribute.Default, ThemeDistribute.Interstellar)


def select_theme(
    planet: Planet,
    star: Star,
    used_theme_ids: Sequence[int],
    theme_rand: float,
    themes: Optional[Sequence[ThemeProtoDef]] = None,
) -> ThemeProtoDef:
    """
    Picks a theme for the planet. When nothing matches it falls back to an
    unused desert theme, then to any desert theme in the catalog, so any
    catalog holding a desert theme always yields one.
    """
    catalog = list(themes) if themes is not None else get_theme_protos()
    unused = [t for t in catalog if t.id not in used_theme_ids]

    candidates = [t for t in unused if _theme_matches(t, planet, star)]
    if not candidates:
        logger.warning("star %d planet %d: no %s theme left, using an unused desert",
                       star.index, planet.index, planet.planet_type.name)
        candidates = [t for t in unused if t.planet_type == PlanetType.Desert]
    if not candidates:
        logger.warning("star %d planet %d: desert themes exhausted, reusing one",
                       star.index, planet.index)
        candidates = [t for t in catalog if t.planet_type == PlanetType.Desert]
        if not candidates:
            raise CatalogError("Theme catalog has no desert theme to fall back on")

    return candidates[int(theme_rand * len(candidates)) % len(candidates)]


def set_planet_theme(
    planet: Planet,
    star: Star,
    used_theme_ids: List[int],
    theme_rand: float,
    themes: Optional[Sequence[ThemeProtoDef]] = None,
) -> None:
    theme = select_theme(planet, star, used_theme_ids, theme_rand, themes)
    planet.theme_proto = theme
    planet.planet_type = theme.planet_type
    used_theme_ids.append(theme.id)


def generate_gases(planet: Planet, star: Star, game_desc: GameDesc) -> None:
    """Fills the planet's gas list from its theme, one f32 draw per species."""
    gas_coef = game_desc.gas_coef
    rand = SeedStream(planet.theme_seed)
    richness = pow32(star.resource_coef, 0.3)
    theme = planet.theme_proto

    planet.gases = []
    for item, speed in zip(theme.gas_items, theme.gas_speeds):
        rate = f32(speed) * (rand.next_f32() * f32(0.190909147262573) + f32(0.909090876579285)) * gas_coef
        planet.gases.append((item, rate * richness))
