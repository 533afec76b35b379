"""Item requirement evaluation.

A fixed set of named requirements describes the gear a run is waiting
for (mercenary and player pieces). The evaluator scans an item collection
once and reports which requirements are satisfied and by which item.

Scan policy:
- Placeholder items (unit id 0) are skipped.
- A requirement satisfied once is never re-evaluated in the same pass;
  the first item in enumeration order wins.
- The mercenary armor and player armor requirements are identical, so an
  item already used for one of them is skipped for the other.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from arpg_pilot.core.logging import get_logger
from arpg_pilot.models import Item, StatKind


logger = get_logger(__name__)


# =============================================================================
# Requirement Definitions
# =============================================================================


class Comparison(StrEnum):
    """How a stat value is compared to its requirement."""

    EXACT = "exact"
    MINIMUM = "minimum"


@dataclass(frozen=True)
class StatCondition:
    """A single stat condition on layer 0 of an item.

    Attributes:
        stat: Stat kind to read.
        value: Required value.
        comparison: Exact match or minimum threshold.
    """

    stat: StatKind
    value: int
    comparison: Comparison = Comparison.EXACT

    def evaluate(self, item: Item) -> tuple[bool, str]:
        found = item.find_stat(self.stat, 0)
        actual = found if found is not None else 0
        if self.comparison == Comparison.MINIMUM:
            passed = found is not None and actual >= self.value
            requirement = f">={self.value}"
        else:
            passed = found is not None and actual == self.value
            requirement = str(self.value)
        return passed, f"{self.stat}: Found={found is not None}, Value={actual} (Req: {requirement})"


@dataclass(frozen=True)
class StatRequirement:
    """Named predicate an item may satisfy.

    Attributes:
        name: Unique requirement key.
        type_code: Exact item type code required.
        conditions: Stat conditions that must all hold.
    """

    name: str
    type_code: str
    conditions: tuple[StatCondition, ...]

    def check(self, item: Item) -> tuple[bool, str]:
        """Evaluate the requirement against one item.

        Returns:
            Tuple of (satisfied, diagnostic).
        """
        if item.type_code != self.type_code:
            return False, f"Type: FAIL (Found: {item.type_code}, Req: {self.type_code})"

        results = [condition.evaluate(item) for condition in self.conditions]
        passed = all(ok for ok, _ in results)
        return passed, "Type: PASS, " + ", ".join(diag for _, diag in results)


MERC_HELM = "MercHelm_Lifesteal_Found"
MERC_WEAPON = "MercWeapon_FCR_MinDmg_Found"
MERC_ARMOR = "MercArmor_FireRes_Energy_Found"
PLAYER_ARMOR = "PlayerArmor_FireRes_Energy_Found"
PLAYER_WEAPON = "PlayerWeapon_Skills_FCR_Found"
PLAYER_HELM = "PlayerHelm_Skill_LightRes_Found"


REQUIRED_CHECKS: tuple[StatRequirement, ...] = (
    StatRequirement(
        MERC_HELM,
        "helmet",
        (StatCondition(StatKind.LIFE_STEAL, 1, Comparison.MINIMUM),),
    ),
    StatRequirement(
        MERC_WEAPON,
        "polearm",
        (
            StatCondition(StatKind.FASTER_CAST_RATE, 35),
            StatCondition(StatKind.MIN_DAMAGE, 9),
        ),
    ),
    StatRequirement(
        MERC_ARMOR,
        "armor",
        (
            StatCondition(StatKind.FIRE_RESIST, 50),
            StatCondition(StatKind.ENERGY, 10),
        ),
    ),
    StatRequirement(
        PLAYER_ARMOR,
        "armor",
        (
            StatCondition(StatKind.FIRE_RESIST, 50),
            StatCondition(StatKind.ENERGY, 10),
        ),
    ),
    StatRequirement(
        PLAYER_WEAPON,
        "sword",
        (
            StatCondition(StatKind.ALL_SKILLS, 2),
            StatCondition(StatKind.FASTER_CAST_RATE, 25, Comparison.MINIMUM),
        ),
    ),
    StatRequirement(
        PLAYER_HELM,
        "helmet",
        (
            StatCondition(StatKind.ALL_SKILLS, 1),
            StatCondition(StatKind.LIGHTNING_RESIST, 35),
        ),
    ),
)
"""The six gear requirements, in evaluation order."""

EXCLUSIVE_PAIRS: tuple[tuple[str, str], ...] = ((MERC_ARMOR, PLAYER_ARMOR),)
"""Requirements that must be satisfied by two distinct items."""


# =============================================================================
# Evaluator
# =============================================================================


@dataclass
class RequirementReport:
    """Satisfaction ledger of one evaluation pass.

    Attributes:
        satisfied: One entry per declared requirement.
        satisfied_by: Unit id of the first matching item, matched requirements only.
    """

    satisfied: dict[str, bool] = field(default_factory=dict)
    satisfied_by: dict[str, int] = field(default_factory=dict)

    @property
    def all_met(self) -> bool:
        return bool(self.satisfied) and all(self.satisfied.values())

    @property
    def missing(self) -> list[str]:
        return [name for name, ok in self.satisfied.items() if not ok]


class ItemRequirementEvaluator:
    """Stateless predicate engine over item collections."""

    def __init__(
        self,
        requirements: Sequence[StatRequirement] = REQUIRED_CHECKS,
        exclusive_pairs: Iterable[tuple[str, str]] = EXCLUSIVE_PAIRS,
    ) -> None:
        self._requirements = tuple(requirements)
        self._opposites: dict[str, str] = {}
        for first, second in exclusive_pairs:
            self._opposites[first] = second
            self._opposites[second] = first

    @property
    def requirements(self) -> tuple[StatRequirement, ...]:
        return self._requirements

    def evaluate(self, items: Iterable[Item]) -> RequirementReport:
        """Scan items once and build the satisfaction ledger.

        Args:
            items: Item collection in enumeration order.

        Returns:
            The requirement report.
        """
        report = RequirementReport(
            satisfied={req.name: False for req in self._requirements},
        )
        items = list(items)
        logger.debug("Starting item stat check", item_count=len(items))

        for item in items:
            logger.debug(
                "Checking item",
                item=item.name,
                unit_id=item.unit_id,
                type_code=item.type_code,
            )
            if item.is_placeholder:
                continue

            for requirement in self._requirements:
                if report.satisfied[requirement.name]:
                    continue

                opposite = self._opposites.get(requirement.name)
                if (
                    opposite is not None
                    and report.satisfied.get(opposite)
                    and report.satisfied_by.get(opposite) == item.unit_id
                ):
                    logger.debug(
                        f"[{requirement.name}]: SKIP",
                        unit_id=item.unit_id,
                        used_for=opposite,
                    )
                    continue

                is_met, diagnostic = requirement.check(item)
                if is_met:
                    report.satisfied[requirement.name] = True
                    report.satisfied_by[requirement.name] = item.unit_id

                logger.debug(
                    f"[{requirement.name}]: {'SUCCESS' if is_met else 'FAIL'}",
                    details=diagnostic,
                )

        logger.debug("Item checks complete", missing=report.missing)
        return report

    def all_requirements_met(self, items: Iterable[Item]) -> bool:
        """True only if every declared requirement is satisfied."""
        report = self.evaluate(items)
        if len(report.satisfied) != len(self._requirements):
            return False
        return report.all_met


def check_all_items_for_stats(items: Iterable[Item]) -> tuple[dict[str, bool], dict[str, int]]:
    """Evaluate the default requirements.

    Returns:
        Tuple of (satisfied, satisfied_by).
    """
    report = ItemRequirementEvaluator().evaluate(items)
    return report.satisfied, report.satisfied_by


def are_all_required_items_found(items: Iterable[Item]) -> bool:
    """Gate used before leaving a farming loop."""
    return ItemRequirementEvaluator().all_requirements_met(items)


__all__ = [
    "Comparison",
    "StatCondition",
    "StatRequirement",
    "REQUIRED_CHECKS",
    "EXCLUSIVE_PAIRS",
    "MERC_HELM",
    "MERC_WEAPON",
    "MERC_ARMOR",
    "PLAYER_ARMOR",
    "PLAYER_WEAPON",
    "PLAYER_HELM",
    "RequirementReport",
    "ItemRequirementEvaluator",
    "check_all_items_for_stats",
    "are_all_required_items_found",
]
