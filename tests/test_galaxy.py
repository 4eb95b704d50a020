import json

from engine.data_loader import GameDesc
from engine.enums import PlanetType, SpectrType, StarType
from run import build_preview
from world.galaxy import Galaxy, HabitableBudget, StarSystem

def test_preview_is_reproducible():
    desc = GameDesc(galaxy_seed=7, star_count=32)
    a = build_preview(desc, 1234, 3, StarType.MainSeqStar, SpectrType.G, 4)
    b = build_preview(desc, 1234, 3, StarType.MainSeqStar, SpectrType.G, 4)
    assert json.dumps(a.to_dict()) == json.dumps(b.to_dict())

def test_preview_planets_are_laid_out_in_slots():
    desc = GameDesc(star_count=32)
    system = build_preview(desc, 55, 5, StarType.MainSeqStar, SpectrType.K, 3)
    planets = list(system.get_planets())
    assert len(planets) == 3
    assert [p.orbit_index for p in planets] == [1, 2, 3]
    assert list(system.get_satellites()) == []
    radii = [float(p.orbit_radius) for p in planets]
    assert radii == sorted(radii)
    assert all(p.theme_proto is not None for p in planets)
    assert all(p.planet_type != PlanetType.Gas for p in planets)

def test_galaxy_to_dict():
    desc = GameDesc(galaxy_seed=9, star_count=2)
    systems = [build_preview(desc, 100 + i, i, StarType.MainSeqStar, SpectrType.M, 1) for i in range(2)]
    galaxy = Galaxy(desc, systems)
    data = galaxy.to_dict()
    assert data["seed"] == 9
    assert len(data["stars"]) == 2
    assert len(data["stars"][0]["planets"]) == 1
    json.dumps(data)

def test_habitable_budget():
    budget = HabitableBudget()
    budget.record_habitable()
    budget.record_habitable()
    assert budget.habitable_count == 2
