"""Tests for item requirement evaluation."""

from __future__ import annotations

from arpg_pilot.engine.items import (
    MERC_ARMOR,
    MERC_HELM,
    MERC_WEAPON,
    PLAYER_ARMOR,
    PLAYER_HELM,
    PLAYER_WEAPON,
    REQUIRED_CHECKS,
    Comparison,
    ItemRequirementEvaluator,
    StatCondition,
    StatRequirement,
    are_all_required_items_found,
    check_all_items_for_stats,
)
from arpg_pilot.models import Item, StatEntry, StatKind


def _armor(unit_id: int) -> Item:
    return Item(
        unit_id=unit_id,
        type_code="armor",
        stats={StatKind.FIRE_RESIST: 50, StatKind.ENERGY: 10},
    )


def _full_set() -> list[Item]:
    return [
        Item(unit_id=501, type_code="helmet", stats={StatKind.LIFE_STEAL: 2}),
        Item(
            unit_id=502,
            type_code="polearm",
            stats={StatKind.FASTER_CAST_RATE: 35, StatKind.MIN_DAMAGE: 9},
        ),
        _armor(503),
        _armor(504),
        Item(
            unit_id=505,
            type_code="sword",
            stats={StatKind.ALL_SKILLS: 2, StatKind.FASTER_CAST_RATE: 30},
        ),
        Item(
            unit_id=506,
            type_code="helmet",
            stats={StatKind.ALL_SKILLS: 1, StatKind.LIGHTNING_RESIST: 35},
        ),
    ]


class TestStatRequirement:
    """Tests for single requirement checks."""

    def test_type_mismatch_diagnostic(self) -> None:
        """Test that the type code is checked first."""
        requirement = REQUIRED_CHECKS[0]
        ok, diagnostic = requirement.check(Item(unit_id=1, type_code="boots"))

        assert not ok
        assert diagnostic == "Type: FAIL (Found: boots, Req: helmet)"

    def test_exact_condition(self) -> None:
        """Test exact comparisons reject larger values."""
        condition = StatCondition(StatKind.FASTER_CAST_RATE, 35)

        ok_exact, _ = condition.evaluate(
            Item(unit_id=1, type_code="polearm", stats={StatKind.FASTER_CAST_RATE: 35})
        )
        ok_more, diagnostic = condition.evaluate(
            Item(unit_id=1, type_code="polearm", stats={StatKind.FASTER_CAST_RATE: 40})
        )

        assert ok_exact
        assert not ok_more
        assert "Value=40" in diagnostic

    def test_minimum_condition(self) -> None:
        """Test minimum comparisons accept larger values."""
        condition = StatCondition(StatKind.LIFE_STEAL, 1, Comparison.MINIMUM)

        ok, _ = condition.evaluate(Item(unit_id=1, type_code="helmet", stats={StatKind.LIFE_STEAL: 8}))
        missing, diagnostic = condition.evaluate(Item(unit_id=1, type_code="helmet"))

        assert ok
        assert not missing
        assert "Found=False" in diagnostic

    def test_only_layer_zero_counts(self) -> None:
        """Test stats on other layers are ignored."""
        requirement = StatRequirement(
            "skills",
            "sword",
            (StatCondition(StatKind.ALL_SKILLS, 2),),
        )
        item = Item(
            unit_id=9,
            type_code="sword",
            stats=(StatEntry(kind=StatKind.ALL_SKILLS, value=2, layer=1),),
        )

        ok, _ = requirement.check(item)

        assert not ok


class TestItemRequirementEvaluator:
    """Tests for the evaluation pass."""

    def test_lifesteal_helmet_satisfies_merc_helm(self) -> None:
        """Test a helmet with life steal satisfies the mercenary helm."""
        satisfied, satisfied_by = check_all_items_for_stats(
            [Item(unit_id=501, type_code="helmet", stats={StatKind.LIFE_STEAL: 2})]
        )

        assert satisfied[MERC_HELM] is True
        assert satisfied_by[MERC_HELM] == 501
        assert satisfied[PLAYER_HELM] is False

    def test_every_requirement_reported(self) -> None:
        """Test the ledger has one entry per requirement even when empty."""
        satisfied, satisfied_by = check_all_items_for_stats([])

        assert set(satisfied) == {
            MERC_HELM,
            MERC_WEAPON,
            MERC_ARMOR,
            PLAYER_ARMOR,
            PLAYER_WEAPON,
            PLAYER_HELM,
        }
        assert not any(satisfied.values())
        assert satisfied_by == {}

    def test_armor_mutual_exclusion(self) -> None:
        """Test one armor cannot satisfy both armor requirements."""
        satisfied, satisfied_by = check_all_items_for_stats([_armor(700)])

        assert satisfied[MERC_ARMOR] is True
        assert satisfied_by[MERC_ARMOR] == 700
        assert satisfied[PLAYER_ARMOR] is False

    def test_two_armors_satisfy_both(self) -> None:
        """Test two distinct armors satisfy both armor requirements."""
        _, satisfied_by = check_all_items_for_stats([_armor(700), _armor(701)])

        assert satisfied_by[MERC_ARMOR] == 700
        assert satisfied_by[PLAYER_ARMOR] == 701

    def test_first_item_wins(self) -> None:
        """Test the first matching item in enumeration order is kept."""
        items = [
            Item(unit_id=11, type_code="helmet", stats={StatKind.LIFE_STEAL: 1}),
            Item(unit_id=12, type_code="helmet", stats={StatKind.LIFE_STEAL: 9}),
        ]

        _, satisfied_by = check_all_items_for_stats(items)

        assert satisfied_by[MERC_HELM] == 11

    def test_placeholders_are_skipped(self) -> None:
        """Test items with unit id 0 never satisfy anything."""
        satisfied, _ = check_all_items_for_stats(
            [Item(unit_id=0, type_code="helmet", stats={StatKind.LIFE_STEAL: 5})]
        )

        assert satisfied[MERC_HELM] is False

    def test_full_set(self) -> None:
        """Test the gate passes once every piece is found."""
        assert are_all_required_items_found(_full_set())
        assert not are_all_required_items_found(_full_set()[:-1])

    def test_idempotent(self) -> None:
        """Test evaluating the same items twice gives the same ledger."""
        evaluator = ItemRequirementEvaluator()
        items = _full_set()

        first = evaluator.evaluate(items)
        second = evaluator.evaluate(items)

        assert first == second
        assert first.all_met
        assert first.missing == []

    def test_custom_requirements(self) -> None:
        """Test an evaluator over custom requirements without exclusions."""
        requirement = StatRequirement(
            "AnyBoots",
            "boots",
            (StatCondition(StatKind.FIRE_RESIST, 10, Comparison.MINIMUM),),
        )
        evaluator = ItemRequirementEvaluator([requirement], exclusive_pairs=())

        report = evaluator.evaluate(
            [Item(unit_id=3, type_code="boots", stats={StatKind.FIRE_RESIST: 30})]
        )

        assert report.satisfied == {"AnyBoots": True}
        assert evaluator.all_requirements_met(
            [Item(unit_id=3, type_code="boots", stats={StatKind.FIRE_RESIST: 30})]
        )
