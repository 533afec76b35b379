"""Collaborator contracts consumed by the combat engine.

The engine never reads memory or injects input itself. It is handed a
CombatContext bundling the snapshot provider, the geometric queries and
the input executor, together with settings and time sources, so that
every decision can be exercised against synthetic worlds.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Callable, Protocol, runtime_checkable

from arpg_pilot.core.config import Settings, get_settings
from arpg_pilot.models import AreaGeometry, Position, SkillId, WorldState, distance_between


# =============================================================================
# Attack Options
# =============================================================================


class AttackSlot(StrEnum):
    """Mouse button the skill is fired from."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class AttackOptions:
    """How an attack primitive must be delivered.

    Attributes:
        min_distance: Closest acceptable distance to the target.
        max_distance: Farthest acceptable distance to the target.
        ranged: Keep line of sight and only close in up to max_distance.
        aura: Aura that must be active before attacking.
        stand_still: Hold position while attacking.
    """

    min_distance: int
    max_distance: int
    ranged: bool = False
    aura: SkillId | None = None
    stand_still: bool = False


# =============================================================================
# Protocols
# =============================================================================


@runtime_checkable
class SnapshotProvider(Protocol):
    """Source of consistent world snapshots."""

    def get_snapshot(self) -> WorldState: ...


@runtime_checkable
class Pathfinder(Protocol):
    """Pure geometric queries."""

    def is_walkable(self, position: Position) -> bool: ...

    def line_of_sight(self, origin: Position, destination: Position) -> bool: ...

    def distance(self, origin: Position, destination: Position) -> int: ...


@runtime_checkable
class ActionExecutor(Protocol):
    """Input injection.

    Every method raises ActionFailedError when the game rejects the
    action or the unit is unreachable.
    """

    def primary_attack(self, target_id: int, repetitions: int, options: AttackOptions) -> None: ...

    def secondary_attack(
        self,
        skill: SkillId,
        target_id: int,
        repetitions: int,
        options: AttackOptions,
    ) -> None: ...

    def move_to(self, position: Position) -> None: ...

    def random_movement(self) -> None: ...


# =============================================================================
# Reference Pathfinder
# =============================================================================


class GridPathfinder:
    """Pathfinder backed by an AreaGeometry walkability grid.

    Line of sight walks the Bresenham line between both points and fails
    on the first blocked cell.
    """

    def __init__(self, area: AreaGeometry) -> None:
        self._area = area

    def is_walkable(self, position: Position) -> bool:
        return self._area.is_walkable(position)

    def line_of_sight(self, origin: Position, destination: Position) -> bool:
        x0, y0 = origin.x, origin.y
        x1, y1 = destination.x, destination.y
        dx = abs(x1 - x0)
        dy = -abs(y1 - y0)
        sx = 1 if x0 < x1 else -1
        sy = 1 if y0 < y1 else -1
        err = dx + dy

        while True:
            if not self._area.is_walkable(Position(x=x0, y=y0)):
                return False
            if x0 == x1 and y0 == y1:
                return True
            e2 = 2 * err
            if e2 >= dy:
                err += dy
                x0 += sx
            if e2 <= dx:
                err += dx
                y0 += sy

    def distance(self, origin: Position, destination: Position) -> int:
        return distance_between(origin, destination)


# =============================================================================
# Context
# =============================================================================


@dataclass
class CombatContext:
    """Everything a combat loop needs, passed explicitly.

    Attributes:
        snapshots: World snapshot provider.
        pathfinder: Geometric queries.
        executor: Input injection.
        settings: Application settings.
        clock: Monotonic time source in seconds.
        sleep: Blocking pause.
    """

    snapshots: SnapshotProvider
    pathfinder: Pathfinder
    executor: ActionExecutor
    settings: Settings = field(default_factory=get_settings)
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep


__all__ = [
    "AttackSlot",
    "AttackOptions",
    "SnapshotProvider",
    "Pathfinder",
    "ActionExecutor",
    "GridPathfinder",
    "CombatContext",
]
