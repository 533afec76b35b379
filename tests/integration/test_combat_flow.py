"""Integration tests for combat flow.

Tests complete engagements from the first snapshot to resolution, driven
through the simulated game and the fake clock.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from arpg_pilot.core.config import Settings
from arpg_pilot.engine import (
    CombatContext,
    CombatOutcome,
    EncounterRunner,
    LightningCasterBuild,
    LightningCasterCombat,
    MeleeHybridCombat,
    are_all_required_items_found,
    by_name,
    check_all_items_for_stats,
)
from arpg_pilot.models import (
    Item,
    Monster,
    MonsterType,
    NpcId,
    PlayerState,
    SkillId,
    StatKind,
    WorldState,
    distance_between,
)


ContextFactory = Callable[..., tuple[CombatContext, Any]]


class TestCasterFlow:
    """Test a full caster engagement."""

    def test_repositions_once_cooldown_expires(
        self,
        clock: Any,
        settings: Settings,
        make_context: ContextFactory,
        make_world: Callable[..., WorldState],
        make_monster: Callable[..., Monster],
    ) -> None:
        """Open with Static Field, retreat from a nearby monster, finish with Chain Lightning."""
        countess = make_monster(1, NpcId.COUNTESS, (12, 0), monster_type=MonsterType.SUPER_UNIQUE)
        zombie = make_monster(2, "zombie", (2, 0))
        context, game = make_context(make_world([countess, zombie]), damage=10)

        result = LightningCasterCombat(context).kill_monster_sequence(
            by_name(NpcId.COUNTESS, MonsterType.SUPER_UNIQUE),
            label="countess",
        )

        assert result.outcome == CombatOutcome.TARGET_DEAD
        assert result.target_id == 1
        assert result.attacks == 10

        # Four casts fit inside the reposition cooldown before the first move
        assert [call[0] for call in game.calls[:5]] == ["secondary"] * 4 + ["move"]
        moves = game.calls_of("move")
        assert len(moves) == 1
        assert distance_between(moves[0][1], zombie.position) >= settings.safety.danger_distance

        skills = [call[1] for call in game.calls_of("secondary")]
        assert skills[0] == SkillId.STATIC_FIELD
        assert set(skills[1:]) == {SkillId.CHAIN_LIGHTNING}
        assert game.monster(2).is_alive
        assert clock.sleeps == [settings.combat.tick_interval_seconds] * 10


class TestMeleeBossFlow:
    """Test a melee boss encounter end to end."""

    def test_diablo_after_priority_monster(
        self,
        clock: Any,
        settings: Settings,
        make_context: ContextFactory,
        make_world: Callable[..., WorldState],
        make_player: Callable[..., PlayerState],
        make_monster: Callable[..., Monster],
    ) -> None:
        """Clear the nearby shaman first, then hammer Diablo in long bursts."""
        diablo = make_monster(1, NpcId.DIABLO, (5, 0), monster_type=MonsterType.UNIQUE)
        shaman = make_monster(2, NpcId.FALLEN_SHAMAN, (3, 0), life=50, max_life=50)
        player = make_player(skills={SkillId.BLESSED_HAMMER: 20, SkillId.CONCENTRATION: 5})
        context, game = make_context(make_world([diablo, shaman], player=player), damage=50)

        result = EncounterRunner(MeleeHybridCombat(context)).run("diablo")

        assert result.outcome == CombatOutcome.TARGET_DEAD
        assert result.target_id == 1
        assert result.attacks == 3
        assert [call[:3] for call in game.calls] == [
            ("primary", 2, 5),
            ("random_movement",),
            ("primary", 1, 10),
            ("primary", 1, 10),
        ]
        assert clock.sleeps == [settings.combat.boss_random_movement_pause_seconds] * 3


class TestFarmingGate:
    """Test the checks run before a farming loop is left."""

    def test_ready_to_leave(self, make_world: Callable[..., WorldState]) -> None:
        """Test bindings and gear together decide whether the run is over."""
        gear = [
            Item(unit_id=501, type_code="helmet", stats={StatKind.LIFE_STEAL: 3}),
            Item(
                unit_id=502,
                type_code="polearm",
                stats={StatKind.FASTER_CAST_RATE: 35, StatKind.MIN_DAMAGE: 9},
            ),
            Item(unit_id=503, type_code="armor", stats={StatKind.FIRE_RESIST: 50, StatKind.ENERGY: 10}),
            Item(
                unit_id=505,
                type_code="sword",
                stats={StatKind.ALL_SKILLS: 2, StatKind.FASTER_CAST_RATE: 25},
            ),
            Item(
                unit_id=506,
                type_code="helmet",
                stats={StatKind.ALL_SKILLS: 1, StatKind.LIGHTNING_RESIST: 35},
            ),
        ]
        world = make_world(
            bindings=[
                SkillId.CHAIN_LIGHTNING,
                SkillId.TELEPORT,
                SkillId.TOME_OF_TOWN_PORTAL,
                SkillId.STATIC_FIELD,
                SkillId.CHILLING_ARMOR,
            ],
            inventory=tuple(gear),
        )

        assert LightningCasterBuild().check_key_bindings(world) == []

        # One armor cannot satisfy both the mercenary and the player slot
        satisfied, satisfied_by = check_all_items_for_stats(world.inventory)
        assert not are_all_required_items_found(world.inventory)
        assert [name for name, ok in satisfied.items() if not ok] == ["PlayerArmor_FireRes_Energy_Found"]
        assert satisfied_by["MercArmor_FireRes_Energy_Found"] == 503

        second_armor = Item(
            unit_id=504,
            type_code="armor",
            stats={StatKind.FIRE_RESIST: 50, StatKind.ENERGY: 10},
        )
        assert are_all_required_items_found([*world.inventory, second_armor])
