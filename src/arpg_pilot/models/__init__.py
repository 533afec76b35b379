"""World snapshot models.

Exports the enumerations and frozen Pydantic models describing one
point-in-time read of the game world.
"""

from __future__ import annotations

from arpg_pilot.models.enums import (
    Archetype,
    ItemLocation,
    MonsterType,
    NpcId,
    SkillId,
    StatKind,
)
from arpg_pilot.models.world import (
    AreaGeometry,
    Item,
    KeyBinding,
    Monster,
    PlayerState,
    Position,
    StatEntry,
    WorldState,
    distance_between,
)


__all__ = [
    # Enums
    "Archetype",
    "ItemLocation",
    "MonsterType",
    "NpcId",
    "SkillId",
    "StatKind",
    # Models
    "AreaGeometry",
    "Item",
    "KeyBinding",
    "Monster",
    "PlayerState",
    "Position",
    "StatEntry",
    "WorldState",
    "distance_between",
]
