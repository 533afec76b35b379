"""Target selectors handed to the combat loops.

A selector is a closure over the current snapshot returning the unit id
to engage, or None when nothing is left to fight.
"""

from __future__ import annotations

from collections.abc import Callable, Collection

from arpg_pilot.engine.interfaces import Pathfinder
from arpg_pilot.models import MonsterType, WorldState


TargetSelector = Callable[[WorldState], int | None]


def by_name(name: str, monster_type: MonsterType | None = None) -> TargetSelector:
    """Select the first monster of a kind, dead or alive."""

    def select(world: WorldState) -> int | None:
        monster = world.find_one(name, monster_type)
        return monster.unit_id if monster is not None else None

    return select


def fixed(unit_id: int) -> TargetSelector:
    """Always select the same unit."""

    def select(world: WorldState) -> int | None:
        return unit_id

    return select


def nearest_of(names: Collection[str], pathfinder: Pathfinder) -> TargetSelector:
    """Select the closest living monster among several kinds."""

    def select(world: WorldState) -> int | None:
        candidates = [m for m in world.enemies() if m.name in names and m.is_alive]
        if not candidates:
            return None
        origin = world.player.position
        closest = min(candidates, key=lambda m: pathfinder.distance(origin, m.position))
        return closest.unit_id

    return select


def nearest_enemy(pathfinder: Pathfinder, *, max_distance: int | None = None) -> TargetSelector:
    """Select the closest living hostile monster, used for clearing packs."""

    def select(world: WorldState) -> int | None:
        origin = world.player.position
        best: tuple[int, int] | None = None
        for monster in world.enemies():
            if not monster.is_alive:
                continue
            distance = pathfinder.distance(origin, monster.position)
            if max_distance is not None and distance > max_distance:
                continue
            if best is None or distance < best[0]:
                best = (distance, monster.unit_id)
        return best[1] if best is not None else None

    return select


__all__ = [
    "TargetSelector",
    "by_name",
    "fixed",
    "nearest_of",
    "nearest_enemy",
]
