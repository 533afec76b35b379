"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the ARPG Pilot test suite: synthetic worlds, a simulated game that
acts as both snapshot provider and input executor, and a fake clock.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import pytest

from arpg_pilot.core.config import Settings
from arpg_pilot.core.exceptions import ActionFailedError
from arpg_pilot.engine.interfaces import AttackOptions, CombatContext, GridPathfinder
from arpg_pilot.models import (
    AreaGeometry,
    KeyBinding,
    Monster,
    MonsterType,
    PlayerState,
    Position,
    SkillId,
    StatKind,
    WorldState,
)


if TYPE_CHECKING:
    from collections.abc import Generator


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from arpg_pilot.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> Settings:
    """Provide default settings independent of the environment."""
    return Settings()


# =============================================================================
# Test Doubles
# =============================================================================


class FakeClock:
    """Clock whose time only moves when the engine sleeps."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class SimulatedGame:
    """Snapshot provider and action executor over one evolving world.

    Attacks deal a fixed amount of damage to their target, moves
    teleport the player, and every call is recorded.

    Attributes:
        world: Current world state.
        damage: Life removed from the target per successful attack.
        fail_attacks: Number of upcoming attacks to reject.
        hidden_polls: Number of upcoming snapshots returned without monsters.
        calls: Recorded executor calls.
        snapshots: Number of snapshots served.
    """

    def __init__(self, world: WorldState, *, damage: int = 50) -> None:
        self.world = world
        self.damage = damage
        self.fail_attacks = 0
        self.hidden_polls = 0
        self.calls: list[tuple[Any, ...]] = []
        self.snapshots = 0

    # SnapshotProvider

    def get_snapshot(self) -> WorldState:
        self.snapshots += 1
        if self.hidden_polls > 0:
            self.hidden_polls -= 1
            return self.world.model_copy(update={"monsters": ()})
        return self.world

    # ActionExecutor

    def primary_attack(self, target_id: int, repetitions: int, options: AttackOptions) -> None:
        self.calls.append(("primary", target_id, repetitions, options))
        self._resolve_attack("primary_attack", target_id)

    def secondary_attack(
        self,
        skill: SkillId,
        target_id: int,
        repetitions: int,
        options: AttackOptions,
    ) -> None:
        self.calls.append(("secondary", skill, target_id, repetitions, options))
        self._resolve_attack("secondary_attack", target_id)

    def move_to(self, position: Position) -> None:
        self.calls.append(("move", position))
        player = self.world.player.model_copy(update={"position": position})
        self.world = self.world.model_copy(update={"player": player})

    def random_movement(self) -> None:
        self.calls.append(("random_movement",))

    # Helpers

    def _resolve_attack(self, action: str, target_id: int) -> None:
        if self.fail_attacks > 0:
            self.fail_attacks -= 1
            raise ActionFailedError("Target unreachable", action=action)

        monsters = []
        for monster in self.world.monsters:
            if monster.unit_id == target_id:
                stats = dict(monster.stats)
                stats[StatKind.LIFE] = max(0, monster.life - self.damage)
                monster = monster.model_copy(update={"stats": stats})
            monsters.append(monster)
        self.world = self.world.model_copy(update={"monsters": tuple(monsters)})

    def kill_player(self) -> None:
        player = self.world.player.model_copy(update={"life": 0})
        self.world = self.world.model_copy(update={"player": player})

    def calls_of(self, kind: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == kind]

    def monster(self, unit_id: int) -> Monster | None:
        return self.world.monster_by_id(unit_id)


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def make_monster() -> Callable[..., Monster]:
    """Provide a monster factory.

    Returns:
        Factory taking unit id, name and position plus optional stats.
    """

    def factory(
        unit_id: int,
        name: str = "zombie",
        position: tuple[int, int] = (0, 0),
        *,
        life: int = 100,
        max_life: int = 100,
        monster_type: MonsterType = MonsterType.NORMAL,
        hostile: bool = True,
        resists: dict[StatKind, int] | None = None,
    ) -> Monster:
        stats = {StatKind.LIFE: life, StatKind.MAX_LIFE: max_life}
        stats.update(resists or {})
        return Monster(
            unit_id=unit_id,
            name=name,
            monster_type=monster_type,
            position=Position(x=position[0], y=position[1]),
            stats=stats,
            hostile=hostile,
        )

    return factory


@pytest.fixture
def make_player() -> Callable[..., PlayerState]:
    """Provide a player factory."""

    def factory(
        position: tuple[int, int] = (0, 0),
        *,
        level: int = 30,
        life: int = 100,
        skills: dict[SkillId, int] | None = None,
    ) -> PlayerState:
        return PlayerState(
            position=Position(x=position[0], y=position[1]),
            level=level,
            life=life,
            max_life=100,
            skills=skills or {},
        )

    return factory


@pytest.fixture
def make_world(make_player: Callable[..., PlayerState]) -> Callable[..., WorldState]:
    """Provide a world factory on open ground."""

    def factory(
        monsters: tuple[Monster, ...] | list[Monster] = (),
        *,
        player: PlayerState | None = None,
        area: AreaGeometry | None = None,
        bindings: list[SkillId] | None = None,
        **kwargs: Any,
    ) -> WorldState:
        return WorldState(
            player=player or make_player(),
            monsters=tuple(monsters),
            area=area or AreaGeometry(),
            key_bindings={
                skill: KeyBinding(skill=skill, key=f"F{index + 1}")
                for index, skill in enumerate(bindings or [])
            },
            **kwargs,
        )

    return factory


@pytest.fixture
def open_pathfinder() -> GridPathfinder:
    """Provide a pathfinder over open ground."""
    return GridPathfinder(AreaGeometry())


@pytest.fixture
def clock() -> FakeClock:
    """Provide a fake clock."""
    return FakeClock()


@pytest.fixture
def make_context(
    settings: Settings,
    open_pathfinder: GridPathfinder,
    clock: FakeClock,
) -> Callable[..., tuple[CombatContext, SimulatedGame]]:
    """Provide a factory wiring a simulated game into a combat context.

    Returns:
        Factory returning (context, simulated game).
    """

    def factory(
        world: WorldState,
        *,
        damage: int = 50,
        custom_settings: Settings | None = None,
    ) -> tuple[CombatContext, SimulatedGame]:
        game = SimulatedGame(world, damage=damage)
        context = CombatContext(
            snapshots=game,
            pathfinder=GridPathfinder(world.area) if world.area.grid is not None else open_pathfinder,
            executor=game,
            settings=custom_settings or settings,
            clock=clock,
            sleep=clock.sleep,
        )
        return context, game

    return factory
