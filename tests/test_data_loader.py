import numpy as np
import pytest
from pydantic import ValidationError

from engine.data_loader import (
    DATA_DIR, GameDesc, get_theme_proto, get_theme_protos, load_game_desc, load_theme_protos,
)
from engine.enums import CatalogError, PlanetType, ThemeDistribute

def test_load_theme_catalog():
    themes = get_theme_protos()
    ids = [t.id for t in themes]
    assert len(ids) == len(set(ids))
    assert any(t.planet_type == PlanetType.Desert for t in themes)

def test_load_mediterranean():
    theme = get_theme_proto(1)
    assert theme.name == "Mediterranean"
    assert theme.planet_type == PlanetType.Ocean
    assert theme.distribute == ThemeDistribute.Birth
    assert theme.vein_spot[6] == 18

def test_gas_giant_theme_has_gases():
    theme = get_theme_proto(2)
    assert theme.planet_type == PlanetType.Gas
    assert len(theme.gas_items) == len(theme.gas_speeds) > 0
    assert theme.temperature32().dtype == np.float32

def test_unknown_theme():
    with pytest.raises(CatalogError):
        get_theme_proto(9999)

def test_rare_settings_must_match_rare_veins(tmp_path):
    path = tmp_path / "themes.toml"
    path.write_text(
        '[[themes]]\nid = 1\nname = "Broken"\nplanet_type = "Desert"\n'
        "rare_veins = [9]\nrare_settings = [0.0, 1.0]\n"
    )
    with pytest.raises(ValidationError):
        load_theme_protos(path)

def test_unknown_planet_type_is_rejected(tmp_path):
    path = tmp_path / "themes.toml"
    path.write_text('[[themes]]\nid = 1\nname = "Odd"\nplanet_type = "Lava"\n')
    with pytest.raises(ValidationError):
        load_theme_protos(path)

def test_duplicate_theme_ids(tmp_path):
    path = tmp_path / "themes.toml"
    path.write_text(
        '[[themes]]\nid = 3\nname = "A"\nplanet_type = "Ice"\n'
        '[[themes]]\nid = 3\nname = "B"\nplanet_type = "Ice"\n'
    )
    with pytest.raises(CatalogError):
        load_theme_protos(path)

def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_theme_protos(tmp_path / "nope.toml")

def test_load_game_desc():
    desc = load_game_desc(DATA_DIR / "galaxy.toml")
    assert desc.galaxy_seed == 1
    assert desc.star_count == 64
    assert desc.resource_multiplier == 1.0

def test_game_desc_resource_modes():
    assert GameDesc(resource_multiplier=100).is_infinite_resource
    assert GameDesc(resource_multiplier=0.1).is_rare_resource
    normal = GameDesc(resource_multiplier=1.5)
    assert not normal.is_infinite_resource and not normal.is_rare_resource
    assert normal.oil_amount_multiplier == np.float32(1.5)
    assert GameDesc(resource_multiplier=0.1).oil_amount_multiplier == np.float32(0.5)
    assert GameDesc(resource_multiplier=100).oil_amount_multiplier == np.float32(1.0)

def test_game_desc_overrides():
    desc = GameDesc(gas_coef_override=0.5, oil_amount_override=2.0)
    assert desc.gas_coef == np.float32(0.5)
    assert desc.oil_amount_multiplier == np.float32(2.0)
    assert GameDesc().gas_coef == np.float32(1.0)

def test_game_desc_rejects_empty_galaxy():
    with pytest.raises(ValidationError):
        GameDesc(star_count=0)
