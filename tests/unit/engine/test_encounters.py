"""Tests for encounter scripts."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from arpg_pilot.core.config import EncounterSettings, Settings
from arpg_pilot.core.constants import ANCIENTS_ARENA
from arpg_pilot.core.exceptions import EncounterTimeoutError, ValidationError
from arpg_pilot.engine.combat import CombatOutcome, LightningCasterCombat, MeleeHybridCombat
from arpg_pilot.engine.encounters import ENCOUNTERS, EncounterKind, EncounterRunner, get_encounter
from arpg_pilot.engine.interfaces import CombatContext
from arpg_pilot.models import (
    Monster,
    MonsterType,
    NpcId,
    PlayerState,
    Position,
    SkillId,
    StatKind,
    WorldState,
)


ContextFactory = Callable[..., tuple[CombatContext, Any]]


def _settings(**encounter: Any) -> Settings:
    return Settings(encounter=EncounterSettings(**encounter))


class TestRegistry:
    """Tests for the encounter registry."""

    def test_all_encounters_registered(self) -> None:
        """Test every supported encounter has an entry."""
        assert set(ENCOUNTERS) == {
            "andariel",
            "duriel",
            "mephisto",
            "izual",
            "diablo",
            "baal",
            "countess",
            "summoner",
            "pindleskin",
            "nihlathak",
            "council",
            "ancients",
        }

    def test_lookup_is_case_insensitive(self) -> None:
        """Test lookups ignore case."""
        assert get_encounter("Andariel").npc == NpcId.ANDARIEL

    def test_unknown_encounter(self) -> None:
        """Test unknown names are validation errors."""
        with pytest.raises(ValidationError) as exc_info:
            get_encounter("cow_king")

        assert exc_info.value.details["invalid_value"] == "cow_king"

    def test_bosses_are_unique_monsters(self) -> None:
        """Test boss entries look up unique monsters."""
        bosses = [e for e in ENCOUNTERS.values() if e.kind == EncounterKind.BOSS]

        assert len(bosses) == 6
        assert all(e.monster_type == MonsterType.UNIQUE for e in bosses)
        assert get_encounter("baal").npc == NpcId.BAAL_CRAB
        assert get_encounter("izual").approach


class TestBossEncounters:
    """Tests for awaited boss encounters."""

    def test_timeout(
        self,
        clock: Any,
        make_context: ContextFactory,
        make_world: Callable[..., WorldState],
    ) -> None:
        """Test a boss that never appears raises after its timeout."""
        settings = _settings(boss_timeouts={"andariel": 2.0}, poll_interval_seconds=0.5)
        context, game = make_context(make_world(), custom_settings=settings)

        with pytest.raises(EncounterTimeoutError) as exc_info:
            EncounterRunner(LightningCasterCombat(context)).run("andariel")

        assert exc_info.value.details["entity"] == "andariel"
        assert exc_info.value.details["timeout_seconds"] == 2.0
        assert game.snapshots == 5
        assert clock.sleeps == [0.5] * 4
        assert game.calls == []

    def test_boss_appears_late(
        self,
        make_context: ContextFactory,
        make_world: Callable[..., WorldState],
        make_monster: Callable[..., Monster],
    ) -> None:
        """Test the runner waits for the boss, then fights it."""
        boss = make_monster(1, NpcId.DURIEL, (15, 0), monster_type=MonsterType.UNIQUE)
        context, game = make_context(make_world([boss]), damage=50)
        game.hidden_polls = 2

        result = EncounterRunner(LightningCasterCombat(context)).run("duriel")

        assert result.outcome == CombatOutcome.TARGET_DEAD
        assert game.monster(1).life == 0
        assert game.calls_of("secondary")[0][1] == SkillId.STATIC_FIELD

    def test_izual_approach(
        self,
        make_context: ContextFactory,
        make_world: Callable[..., WorldState],
        make_player: Callable[..., PlayerState],
        make_monster: Callable[..., Monster],
    ) -> None:
        """Test melee builds walk up to Izual before attacking."""
        izual = make_monster(1, NpcId.IZUAL, (20, 0), monster_type=MonsterType.UNIQUE)
        world = make_world([izual], player=make_player(level=15, skills={SkillId.ZEAL: 1}))
        context, game = make_context(world, damage=100)

        result = EncounterRunner(MeleeHybridCombat(context)).run("izual")

        assert game.calls[0] == ("move", Position(x=20, y=0))
        assert game.calls[1][0] == "primary"
        assert result.outcome == CombatOutcome.TARGET_DEAD


class TestOtherEncounters:
    """Tests for encounters that do not wait."""

    def test_missing_target_is_graceful(
        self,
        clock: Any,
        make_context: ContextFactory,
        make_world: Callable[..., WorldState],
    ) -> None:
        """Test a missing super unique completes without waiting."""
        context, game = make_context(make_world())

        result = EncounterRunner(LightningCasterCombat(context)).run("countess")

        assert result.outcome == CombatOutcome.NO_TARGET
        assert clock.sleeps == []
        assert game.calls == []

    def test_pindleskin_immunity_skip(
        self,
        make_context: ContextFactory,
        make_world: Callable[..., WorldState],
        make_monster: Callable[..., Monster],
    ) -> None:
        """Test Pindleskin is skipped when immune to a configured element."""
        pindle = make_monster(
            1,
            NpcId.PINDLESKIN,
            (15, 0),
            monster_type=MonsterType.SUPER_UNIQUE,
            resists={StatKind.LIGHTNING_RESIST: 110},
        )
        settings = _settings(pindleskin_skip_on_immunities=[StatKind.LIGHTNING_RESIST])
        context, game = make_context(make_world([pindle]), custom_settings=settings)

        result = EncounterRunner(LightningCasterCombat(context)).run("pindleskin")

        assert result.outcome == CombatOutcome.TARGET_IMMUNE
        assert game.calls == []

    def test_council_nearest_first(
        self,
        make_context: ContextFactory,
        make_world: Callable[..., WorldState],
        make_monster: Callable[..., Monster],
    ) -> None:
        """Test Council members are killed nearest first."""
        far = make_monster(1, NpcId.COUNCIL_MEMBER, (18, 0))
        near = make_monster(2, NpcId.COUNCIL_MEMBER_2, (12, 0))
        context, game = make_context(make_world([far, near]), damage=100)

        result = EncounterRunner(LightningCasterCombat(context)).run("council")

        targets = [call[2] for call in game.calls_of("secondary")]
        assert targets == [2, 1]
        assert result.outcome == CombatOutcome.NO_TARGET

    def test_ancients(
        self,
        make_context: ContextFactory,
        make_world: Callable[..., WorldState],
        make_player: Callable[..., PlayerState],
        make_monster: Callable[..., Monster],
    ) -> None:
        """Test each Ancient is fought after moving to the arena."""
        ancients = [
            make_monster(uid, name, (10062 + uid, 12639), monster_type=MonsterType.SUPER_UNIQUE)
            for uid, name in ((1, NpcId.TALIC), (2, NpcId.MADAWC), (3, NpcId.KORLIC))
        ]
        minion = make_monster(4, "zombie", (10062, 12640), monster_type=MonsterType.MINION)
        world = make_world(ancients + [minion], player=make_player(position=ANCIENTS_ARENA, level=15))
        context, game = make_context(world, damage=100)

        result = EncounterRunner(MeleeHybridCombat(context)).run("ancients")

        arena = Position(x=ANCIENTS_ARENA[0], y=ANCIENTS_ARENA[1])
        kinds = [call[0] for call in game.calls]
        assert kinds == ["move", "primary"] * 3
        assert game.calls[0] == ("move", arena)
        assert [call[1] for call in game.calls_of("primary")] == [1, 2, 3]
        assert game.monster(4).is_alive
        assert result.attacks == 3
