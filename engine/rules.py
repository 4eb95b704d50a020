"""
Astrogen - engine/rules.py
Rule Evaluation Engine: designer constraints checked against generated systems.
===============================================================================
Version:     0.1
Stack:       Python 3.11+ | Pydantic v2

Architecture notes
------------------
- Rule variants are plain Pydantic models tagged by ``type``. Behaviour lives
  in RULE_HANDLERS, a table from variant class to (priority, bulk evaluator,
  incremental evaluator). A new rule kind means a new variant plus a table row.
- Lower priority runs first. Ties keep declaration order.
- Bulk evaluators read the finished galaxy and return indices of stars that
  violate the rule, skipping stars already known to be bad.
- Incremental evaluators run when a star's planets are created and return
  True (pass), False (fail) or None (undecided). Outcomes are cached per
  (rule, star) until reset.
- The regeneration loop is bounded. Running out of rounds raises
  GenerationFailed with the indices that never converged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING, Annotated, Any, Callable, Dict, Iterable, List, Literal, Optional,
    Sequence, Set, Tuple, Union,
)

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

from engine.enums import PlanetType, SpectrType, StarType, VeinType, parse_enum
from engine.seed_stream import SeedStream

if TYPE_CHECKING:
    from world.galaxy import Galaxy, StarSystem
    from world.planet import Planet
    from world.star import Star

logger = logging.getLogger(__name__)

MAX_REGENERATION_ROUNDS: int = 32


class GenerationFailed(RuntimeError):
    """Raised when stars keep failing rules after every allowed regeneration."""

    def __init__(self, failing: Sequence[int], rounds: int):
        self.failing = list(failing)
        self.rounds = rounds
        super().__init__(
            f"{len(self.failing)} star(s) still violate rules after {rounds} regeneration rounds: "
            f"{self.failing}"
        )

# ================================================================================
# CONDITIONS
# ================================================================================

class Condition(BaseModel):
    """Numeric predicate; eval() is True when the value satisfies it."""
    model_config = ConfigDict(frozen=True)

    op: Literal["eq", "neq", "lt", "lte", "gt", "gte", "between"]
    value: float
    upper: Optional[float] = None

    @model_validator(mode="after")
    def _check_between(self) -> "Condition":
        if self.op == "between":
            if self.upper is None:
                raise ValueError("'between' needs an upper bound")
            if self.upper < self.value:
                raise ValueError("'between' upper bound is below the lower bound")
        return self

    def eval(self, x: float) -> bool:
        if self.op == "eq":
            return x == self.value
        if self.op == "neq":
            return x != self.value
        if self.op == "lt":
            return x < self.value
        if self.op == "lte":
            return x <= self.value
        if self.op == "gt":
            return x > self.value
        if self.op == "gte":
            return x >= self.value
        return self.value <= x <= self.upper

# ================================================================================
# RULE VARIANTS
# ================================================================================

class PlanetCountRule(BaseModel):
    model_config = ConfigDict(frozen=True)
    type: Literal["planet_count"] = "planet_count"
    exclude_giant: bool = False
    condition: Condition


class SatelliteCountRule(BaseModel):
    model_config = ConfigDict(frozen=True)
    type: Literal["satellite_count"] = "satellite_count"
    condition: Condition


class SpectrRule(BaseModel):
    model_config = ConfigDict(frozen=True)
    type: Literal["spectr"] = "spectr"
    spectr: List[SpectrType] = Field(default_factory=list)
    star_types: List[StarType] = Field(default_factory=list)

    @field_validator("spectr", mode="before")
    @classmethod
    def _parse_spectr(cls, value: Any) -> List[SpectrType]:
        return [parse_enum(SpectrType, v) for v in value]

    @field_validator("star_types", mode="before")
    @classmethod
    def _parse_star_types(cls, value: Any) -> List[StarType]:
        return [parse_enum(StarType, v) for v in value]


class LuminosityRule(BaseModel):
    model_config = ConfigDict(frozen=True)
    type: Literal["luminosity"] = "luminosity"
    condition: Condition


class DysonRadiusRule(BaseModel):
    model_config = ConfigDict(frozen=True)
    type: Literal["dyson_radius"] = "dyson_radius"
    condition: Condition


class ThemeRule(BaseModel):
    """Every listed theme id must appear somewhere in the system."""
    model_config = ConfigDict(frozen=True)
    type: Literal["theme"] = "theme"
    theme_ids: List[int]


class VeinAmountRule(BaseModel):
    """Summed maximum amount of one vein type over the whole system."""
    model_config = ConfigDict(frozen=True)
    type: Literal["vein_amount"] = "vein_amount"
    vein_type: VeinType
    condition: Condition

    @field_validator("vein_type", mode="before")
    @classmethod
    def _parse_vein_type(cls, value: Any) -> VeinType:
        return parse_enum(VeinType, value)


Rule = Annotated[
    Union[
        PlanetCountRule,
        SatelliteCountRule,
        SpectrRule,
        LuminosityRule,
        DysonRadiusRule,
        ThemeRule,
        VeinAmountRule,
    ],
    Field(discriminator="type"),
]

# ================================================================================
# EVALUATORS
# ================================================================================

@dataclass
class Evaluation:
    """Stars under consideration and the ones already known to fail."""
    length: int
    known: Set[int] = field(default_factory=set)

    def get_len(self) -> int:
        return self.length

    def is_known(self, index: int) -> bool:
        return index in self.known

    def mark(self, indices: Iterable[int]) -> None:
        self.known.update(indices)


BulkEvaluator = Callable[[Any, "Galaxy", Evaluation], List[int]]
IncrementalEvaluator = Callable[[Any, "Star", Sequence["Planet"]], Optional[bool]]


def _failing_systems(galaxy: "Galaxy", evaluation: Evaluation,
                     passes: Callable[["StarSystem"], bool]) -> List[int]:
    result: List[int] = []
    for index, system in enumerate(galaxy.stars[: evaluation.get_len()]):
        if evaluation.is_known(index):
            continue
        if not passes(system):
            result.append(index)
    return result


def _eval_planet_count(rule: PlanetCountRule, galaxy: "Galaxy", evaluation: Evaluation) -> List[int]:
    def passes(system: "StarSystem") -> bool:
        planets = system.get_planets()
        if rule.exclude_giant:
            planets = (p for p in planets if p.planet_type != PlanetType.Gas)
        return rule.condition.eval(sum(1 for _ in planets))
    return _failing_systems(galaxy, evaluation, passes)


def _on_satellites_created(rule: SatelliteCountRule, star: "Star",
                           planets: Sequence["Planet"]) -> Optional[bool]:
    count = sum(1 for p in planets if p.orbit_around != 0)
    return rule.condition.eval(count)


def _eval_spectr(rule: SpectrRule, galaxy: "Galaxy", evaluation: Evaluation) -> List[int]:
    def passes(system: "StarSystem") -> bool:
        star = system.star
        if rule.star_types and star.star_type not in rule.star_types:
            return False
        return not rule.spectr or star.spectr in rule.spectr
    return _failing_systems(galaxy, evaluation, passes)


def _eval_luminosity(rule: LuminosityRule, galaxy: "Galaxy", evaluation: Evaluation) -> List[int]:
    return _failing_systems(
        galaxy, evaluation, lambda s: rule.condition.eval(float(s.star.luminosity))
    )


def _eval_dyson_radius(rule: DysonRadiusRule, galaxy: "Galaxy", evaluation: Evaluation) -> List[int]:
    return _failing_systems(
        galaxy, evaluation, lambda s: rule.condition.eval(float(s.star.dyson_radius))
    )


def _eval_theme(rule: ThemeRule, galaxy: "Galaxy", evaluation: Evaluation) -> List[int]:
    required = set(rule.theme_ids)

    def passes(system: "StarSystem") -> bool:
        present = {p.theme_proto.id for p in system.planets if p.theme_proto is not None}
        return required <= present
    return _failing_systems(galaxy, evaluation, passes)


def _eval_vein_amount(rule: VeinAmountRule, galaxy: "Galaxy", evaluation: Evaluation) -> List[int]:
    def passes(system: "StarSystem") -> bool:
        total = sum(
            v.max_amount for p in system.planets for v in p.veins if v.vein_type == rule.vein_type
        )
        return rule.condition.eval(total)
    return _failing_systems(galaxy, evaluation, passes)


@dataclass(frozen=True)
class RuleHandler:
    priority: int
    evaluate: Optional[BulkEvaluator] = None
    on_planets_created: Optional[IncrementalEvaluator] = None


RULE_HANDLERS: Dict[type, RuleHandler] = {
    SpectrRule: RuleHandler(10, evaluate=_eval_spectr),
    LuminosityRule: RuleHandler(10, evaluate=_eval_luminosity),
    DysonRadiusRule: RuleHandler(10, evaluate=_eval_dyson_radius),
    SatelliteCountRule: RuleHandler(20, on_planets_created=_on_satellites_created),
    PlanetCountRule: RuleHandler(30, evaluate=_eval_planet_count),
    ThemeRule: RuleHandler(40, evaluate=_eval_theme),
    VeinAmountRule: RuleHandler(50, evaluate=_eval_vein_amount),
}


def get_priority(rule: BaseModel) -> int:
    return RULE_HANDLERS[type(rule)].priority

# ================================================================================
# RULE SET
# ================================================================================

class RuleSet(BaseModel):
    """
    Ordered collection of rules plus the cached outcomes of incremental rules.
    """
    rules: List[Rule] = Field(default_factory=list)

    _outcomes: Dict[Tuple[int, int], bool] = PrivateAttr(default_factory=dict)

    def ordered(self) -> List[Tuple[int, BaseModel]]:
        """(position, rule) pairs in evaluation order."""
        indexed = list(enumerate(self.rules))
        return sorted(indexed, key=lambda pair: (get_priority(pair[1]), pair[0]))

    def on_planets_created(self, star: "Star", planets: Sequence["Planet"]) -> Optional[bool]:
        """
        Runs every incremental rule that has not decided for this star yet.
        Returns False as soon as one fails, True when all have passed,
        None while any is still undecided.
        """
        decided = True
        for position, rule in self.ordered():
            handler = RULE_HANDLERS[type(rule)]
            if handler.on_planets_created is None:
                continue
            key = (position, star.index)
            if key not in self._outcomes:
                outcome = handler.on_planets_created(rule, star, planets)
                if outcome is None:
                    decided = False
                    continue
                self._outcomes[key] = outcome
            if not self._outcomes[key]:
                return False
        return True if decided else None

    def is_evaluated(self, position: int, star_index: int) -> bool:
        return (position, star_index) in self._outcomes

    def reset(self, star_index: Optional[int] = None) -> None:
        """Forgets cached incremental outcomes for one star, or for all stars."""
        if star_index is None:
            self._outcomes.clear()
            return
        for key in [k for k in self._outcomes if k[1] == star_index]:
            del self._outcomes[key]

    def _incremental_failures(self, position: int, rule: BaseModel, handler: RuleHandler,
                              galaxy: "Galaxy", evaluation: Evaluation) -> List[int]:
        result: List[int] = []
        for index, system in enumerate(galaxy.stars[: evaluation.get_len()]):
            if evaluation.is_known(index):
                continue
            key = (position, index)
            if key not in self._outcomes:
                outcome = handler.on_planets_created(rule, system.star, system.planets)
                if outcome is None:
                    continue
                self._outcomes[key] = outcome
            if not self._outcomes[key]:
                result.append(index)
        return result

    def evaluate(self, galaxy: "Galaxy", evaluation: Optional[Evaluation] = None) -> List[int]:
        """Returns the sorted indices of stars violating at least one rule."""
        if evaluation is None:
            evaluation = Evaluation(length=len(galaxy.stars))
        already_known = set(evaluation.known)

        for position, rule in self.ordered():
            handler = RULE_HANDLERS[type(rule)]
            if handler.evaluate is not None:
                failing = handler.evaluate(rule, galaxy, evaluation)
            else:
                failing = self._incremental_failures(position, rule, handler, galaxy, evaluation)
            if failing:
                logger.debug("rule %d (%s) rejects stars %s", position, rule.type, failing)
            evaluation.mark(failing)

        return sorted(evaluation.known - already_known)

# ================================================================================
# REGENERATION LOOP
# ================================================================================

def derive_retry_seed(seed: int, attempt: int) -> int:
    """Seed for the given regeneration attempt; attempt 0 is the original seed."""
    rand = SeedStream(seed)
    for _ in range(attempt):
        seed = rand.next_seed()
    return seed


def regenerate_until_valid(
    galaxy: "Galaxy",
    rule_set: RuleSet,
    regenerate: Callable[[int, int], "StarSystem"],
    max_rounds: int = MAX_REGENERATION_ROUNDS,
) -> int:
    """
    Evaluates the rules and rebuilds failing stars until none fail.
    ``regenerate(index, attempt)`` must return the replacement system.
    Returns the number of regeneration rounds used.
    """
    failing = rule_set.evaluate(galaxy)
    rounds = 0
    while failing:
        if rounds >= max_rounds:
            logger.error("regeneration gave up after %d rounds; failing stars %s", rounds, failing)
            raise GenerationFailed(failing, rounds)
        rounds += 1
        logger.info("regeneration round %d: rebuilding %d star(s)", rounds, len(failing))
        for index in failing:
            rule_set.reset(index)
            galaxy.stars[index] = regenerate(index, rounds)
        failing = rule_set.evaluate(galaxy)
    return rounds
