"""
Astrogen - run.py
Prints the derived description of one star, and optionally a row of planets, as JSON.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure we can import astrogen packages
project_root = Path(__file__).parent.resolve()
sys.path.insert(0, str(project_root))

from engine.data_loader import GameDesc, load_game_desc
from engine.enums import SpectrType, StarType
from engine.seed_stream import SeedStream
from world.galaxy import HabitableBudget, StarSystem
from world.generator import create_planet, generate_gases
from world.star import Star, Vector3
from world.veins import generate_veins


def build_preview(game_desc: GameDesc, seed: int, index: int, star_type: StarType,
                  spectr: SpectrType, planet_count: int) -> StarSystem:
    """One star with planet_count direct-orbit rocky planets in consecutive slots."""
    star = Star(game_desc, index, seed, Vector3(), star_type, spectr)
    system = StarSystem(star)
    budget = HabitableBudget()
    rand = SeedStream(star.planets_seed)
    for i in range(planet_count):
        info_seed = rand.next_seed()
        gen_seed = rand.next_seed()
        planet = create_planet(star, i, None, 0, i + 1, i + 1, False, budget, info_seed, gen_seed)
        generate_gases(planet, star, game_desc)
        generate_veins(planet, star, game_desc)
        system.planets.append(planet)
    return system


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", type=int, required=True)
    parser.add_argument("--index", type=int, default=0)
    parser.add_argument("--type", default="MainSeqStar", choices=[t.name for t in StarType])
    parser.add_argument("--spectr", default="G", choices=[s.name for s in SpectrType])
    parser.add_argument("--planets", type=int, default=0)
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    game_desc = load_game_desc(args.config) if args.config else GameDesc()
    system = build_preview(
        game_desc, args.seed, args.index, StarType[args.type], SpectrType[args.spectr], args.planets
    )
    print(json.dumps(system.to_dict(), indent=2))


if __name__ == "__main__":
    main()
