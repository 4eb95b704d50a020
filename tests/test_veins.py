import pytest
import numpy as np
from types import SimpleNamespace

from engine.data_loader import GameDesc, get_theme_proto
from engine.enums import CatalogError, SpectrType, StarType, VeinType, vein_type_from_index
from engine.seed_stream import SeedStream
from world.planet import Planet
from world.star import Star, Vector3
from world.veins import add_until, generate_veins, resource_factor, MAX_ESCALATION_ROLLS

GAME = GameDesc(star_count=64)


def make_star(star_type=StarType.MainSeqStar, index=7, spectr=SpectrType.K, seed=606):
    return Star(GAME, index, seed, Vector3(40.0, 0.0, 0.0), star_type, spectr)


def themed_planet(theme_id=6, seed=1234, is_birth_star=False):
    return Planet(id=801, seed=seed, theme_proto=get_theme_proto(theme_id), is_birth_star=is_birth_star)


def veins_by_type(planet):
    return {v.vein_type: v for v in planet.veins}


class ZeroStream:
    def next_f64(self):
        return 0.0


def test_add_until_caps_at_eleven():
    assert add_until(ZeroStream(), 2, 0.5) == 2 + MAX_ESCALATION_ROLLS

def test_add_until_stops_on_first_miss():
    rand = SeedStream(1)
    first = SeedStream(1).next_f64()
    assert add_until(rand, 0, first) == 0

def test_white_dwarf_guarantees_diamond_and_fractal():
    planet = themed_planet(theme_id=6)
    generate_veins(planet, make_star(StarType.WhiteDwarf), GAME)
    veins = veins_by_type(planet)
    for vein_type in (VeinType.Diamond, VeinType.Fractal):
        assert vein_type in veins
        assert veins[vein_type].min_group >= 1
    assert VeinType.Grat in veins

@pytest.mark.parametrize("star_type", [StarType.NeutronStar, StarType.BlackHole])
def test_collapsed_stars_guarantee_mag(star_type):
    planet = themed_planet(theme_id=11)
    generate_veins(planet, make_star(star_type), GAME)
    veins = veins_by_type(planet)
    assert VeinType.Mag in veins
    assert veins[VeinType.Mag].max_group >= 2

def test_generation_is_deterministic():
    star = make_star()
    a = themed_planet()
    b = themed_planet()
    generate_veins(a, star, GAME)
    generate_veins(b, star, GAME)
    assert a.veins == b.veins

@pytest.mark.parametrize("theme_id", [1, 6, 7, 9, 10, 16, 20])
@pytest.mark.parametrize("star_type", list(StarType))
def test_vein_ranges_are_ordered(theme_id, star_type):
    planet = themed_planet(theme_id=theme_id, seed=theme_id * 97 + int(star_type))
    generate_veins(planet, make_star(star_type), GAME)
    for vein in planet.veins:
        assert vein.min_group <= vein.max_group
        assert vein.min_patch <= vein.max_patch
        assert vein.min_amount <= vein.max_amount
        assert vein.min_amount >= 1

def test_common_veins_follow_theme_spots():
    planet = themed_planet(theme_id=6)
    generate_veins(planet, make_star(), GAME)
    veins = veins_by_type(planet)
    assert veins[VeinType.Stone].min_group == 6 - 1
    assert veins[VeinType.Stone].max_group == 6 + 1
    assert VeinType.Coal not in veins

def test_oil_has_single_patch():
    planet = themed_planet(theme_id=1)
    generate_veins(planet, make_star(), GAME)
    oil = veins_by_type(planet)[VeinType.Oil]
    assert oil.min_patch == oil.max_patch == 1

def test_infinite_resources_saturate_amounts():
    planet = themed_planet(theme_id=6)
    generate_veins(planet, make_star(), GameDesc(star_count=64, resource_multiplier=100.0))
    for vein in planet.veins:
        assert vein.min_amount == vein.max_amount == 1000000000

def test_resource_multiplier_scales_amounts():
    star = make_star()
    normal = themed_planet(theme_id=6)
    doubled = themed_planet(theme_id=6)
    generate_veins(normal, star, GAME)
    generate_veins(doubled, star, GameDesc(star_count=64, resource_multiplier=2.0))
    iron_normal = veins_by_type(normal)[VeinType.Iron]
    iron_doubled = veins_by_type(doubled)[VeinType.Iron]
    assert iron_doubled.max_amount == pytest.approx(2 * iron_normal.max_amount, abs=2)

def test_birth_planet_is_discounted():
    star = SimpleNamespace(resource_coef=np.float32(0.6))
    planet = Planet(theme_proto=get_theme_proto(1), is_birth_star=True)
    assert planet.is_birth
    assert resource_factor(planet, star, GAME) == np.float32(0.6) * np.float32(0.6666667)

def test_rare_resource_mode_compresses_rich_stars():
    star = SimpleNamespace(resource_coef=np.float32(2.0))
    planet = themed_planet()
    rare = GameDesc(star_count=64, resource_multiplier=0.1)
    expected = np.power(np.float32(2.0), np.float32(0.8)) * np.float32(0.7)
    assert resource_factor(planet, star, rare) == expected

def test_vein_slot_lookup_is_checked():
    assert vein_type_from_index(14) == VeinType.Mag
    with pytest.raises(CatalogError):
        vein_type_from_index(0)
    with pytest.raises(CatalogError):
        vein_type_from_index(15)
