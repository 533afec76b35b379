"""Pydantic V2 schemas for point-in-time world snapshots.

A snapshot is produced by the external memory reader once per loop
iteration and is treated as immutable for the whole decision cycle.
Every model here is frozen; the engine never mutates or persists them.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from arpg_pilot.core.constants import IMMUNITY_THRESHOLD, INVALID_UNIT_ID
from arpg_pilot.models.enums import ItemLocation, MonsterType, SkillId, StatKind


# =============================================================================
# Geometry
# =============================================================================


class Position(BaseModel):
    """Integer game-world coordinate."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    x: int
    y: int

    @model_validator(mode="before")
    @classmethod
    def accept_pairs(cls, value: Any) -> Any:
        """Allow ``(x, y)`` pairs wherever a position is expected."""
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return {"x": value[0], "y": value[1]}
        return value

    def offset(self, dx: int, dy: int) -> Position:
        """Return the position shifted by ``(dx, dy)``."""
        return Position(x=self.x + dx, y=self.y + dy)


def distance_between(a: Position, b: Position) -> int:
    """Euclidean distance truncated to an integer, as the game pathfinder reports it."""
    return int(math.sqrt((b.x - a.x) ** 2 + (b.y - a.y) ** 2))


class AreaGeometry(BaseModel):
    """Walkability grid of the current area.

    Attributes:
        name: Area name.
        origin: World coordinate of grid cell ``(0, 0)``.
        grid: Rows of walkable flags indexed ``grid[y][x]``; ``None`` means open ground.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(default="", description="Area name")
    origin: Position = Field(default_factory=lambda: Position(x=0, y=0))
    grid: tuple[tuple[bool, ...], ...] | None = Field(default=None, description="Walkable cells")

    @classmethod
    def from_rows(cls, rows: list[str], *, origin: Position | None = None, name: str = "") -> Self:
        """Build a grid from text rows where ``#`` marks a blocked cell.

        Args:
            rows: One string per grid row.
            origin: World coordinate of the first cell.
            name: Area name.

        Returns:
            The area geometry.
        """
        grid = tuple(tuple(cell != "#" for cell in row) for row in rows)
        return cls(name=name, origin=origin or Position(x=0, y=0), grid=grid)

    def is_inside(self, position: Position) -> bool:
        """Check whether a world position falls on the grid."""
        if self.grid is None:
            return True
        gx = position.x - self.origin.x
        gy = position.y - self.origin.y
        return 0 <= gy < len(self.grid) and 0 <= gx < len(self.grid[gy])

    def is_walkable(self, position: Position) -> bool:
        """Check whether a world position can be stood on."""
        if self.grid is None:
            return True
        if not self.is_inside(position):
            return False
        return self.grid[position.y - self.origin.y][position.x - self.origin.x]


# =============================================================================
# Items
# =============================================================================


class StatEntry(BaseModel):
    """One stat value on a given layer."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: StatKind
    value: int
    layer: int = Field(default=0, ge=0)


class Item(BaseModel):
    """Inventory item snapshot.

    Attributes:
        unit_id: Game instance identifier, ``0`` for placeholders.
        name: Identified name.
        type_code: Category tag such as ``helmet`` or ``polearm``.
        stats: Stat entries across layers.
        location: Where the item sits.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    unit_id: int = Field(ge=0, description="Unit identifier")
    name: str = Field(default="", description="Identified name")
    type_code: str = Field(description="Item type code")
    stats: tuple[StatEntry, ...] = Field(default=(), description="Stat entries")
    location: ItemLocation = Field(default=ItemLocation.INVENTORY)

    @field_validator("stats", mode="before")
    @classmethod
    def expand_stat_mapping(cls, value: Any) -> Any:
        """Accept a plain ``{kind: value}`` mapping as layer-0 stats."""
        if isinstance(value, Mapping):
            return tuple({"kind": kind, "value": val, "layer": 0} for kind, val in value.items())
        return value

    @property
    def is_placeholder(self) -> bool:
        return self.unit_id == INVALID_UNIT_ID

    def find_stat(self, kind: StatKind, layer: int = 0) -> int | None:
        """Look up a stat value.

        Args:
            kind: Stat kind to look up.
            layer: Stat layer, 0 for the base layer.

        Returns:
            The value, or None if the item does not carry the stat.
        """
        for entry in self.stats:
            if entry.kind == kind and entry.layer == layer:
                return entry.value
        return None


# =============================================================================
# Units
# =============================================================================


class Monster(BaseModel):
    """Monster snapshot.

    A monster whose life dropped to zero may still be present in the
    snapshot; callers must check ``is_alive``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    unit_id: int = Field(description="Unit identifier")
    name: str = Field(description="Monster kind")
    monster_type: MonsterType = Field(default=MonsterType.NORMAL)
    position: Position
    stats: dict[StatKind, int] = Field(default_factory=dict)
    hostile: bool = Field(default=True, description="False for pets and allies")

    @property
    def life(self) -> int:
        return self.stats.get(StatKind.LIFE, 0)

    @property
    def max_life(self) -> int:
        return self.stats.get(StatKind.MAX_LIFE, 0)

    @property
    def is_alive(self) -> bool:
        return self.life > 0

    @property
    def life_percent(self) -> float:
        """Remaining life as a percentage, 0 when max life is unknown."""
        if self.max_life <= 0:
            return 0.0
        return self.life / self.max_life * 100

    def is_immune(self, resist: StatKind) -> bool:
        """Check whether a resistance reaches immunity."""
        return self.stats.get(resist, 0) >= IMMUNITY_THRESHOLD


class PlayerState(BaseModel):
    """The controlled character.

    Attributes:
        unit_id: Unit identifier of the player.
        name: Character name.
        position: Current position.
        life: Current life.
        max_life: Maximum life.
        level: Character level.
        skills: Skill level per skill, including item bonuses.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    unit_id: int = Field(default=1)
    name: str = Field(default="")
    position: Position
    life: int = Field(default=100)
    max_life: int = Field(default=100, ge=0)
    level: int = Field(default=1, ge=1, le=99)
    skills: dict[SkillId, int] = Field(default_factory=dict)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def hp_percent(self) -> float:
        if self.max_life <= 0:
            return 0.0
        return self.life / self.max_life * 100

    @property
    def is_dead(self) -> bool:
        return self.hp_percent <= 0

    def skill_level(self, skill: SkillId) -> int:
        return self.skills.get(skill, 0)

    def knows(self, skill: SkillId) -> bool:
        """True if the skill has at least one point."""
        return self.skill_level(skill) > 0


class KeyBinding(BaseModel):
    """Hotkey assigned to a skill."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    skill: SkillId
    key: str


# =============================================================================
# Snapshot
# =============================================================================


class WorldState(BaseModel):
    """Consistent point-in-time read of everything the engine consumes."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    player: PlayerState
    monsters: tuple[Monster, ...] = Field(default=())
    inventory: tuple[Item, ...] = Field(default=())
    area: AreaGeometry = Field(default_factory=AreaGeometry)
    key_bindings: dict[SkillId, KeyBinding] = Field(default_factory=dict)

    def monster_by_id(self, unit_id: int) -> Monster | None:
        for monster in self.monsters:
            if monster.unit_id == unit_id:
                return monster
        return None

    def find_one(self, name: str, monster_type: MonsterType | None = None) -> Monster | None:
        """Find the first monster of a kind, optionally restricted to a classification."""
        for monster in self.monsters:
            if monster.name != name:
                continue
            if monster_type is not None and monster.monster_type != monster_type:
                continue
            return monster
        return None

    def enemies(self, *, elite_only: bool = False) -> list[Monster]:
        """Hostile monsters, dead or alive, in snapshot order."""
        return [
            m
            for m in self.monsters
            if m.hostile and (not elite_only or m.monster_type.is_elite)
        ]

    def key_binding_for(self, skill: SkillId) -> KeyBinding | None:
        return self.key_bindings.get(skill)

    def items_at(self, location: ItemLocation) -> list[Item]:
        return [item for item in self.inventory if item.location == location]


__all__ = [
    "Position",
    "distance_between",
    "AreaGeometry",
    "StatEntry",
    "Item",
    "Monster",
    "PlayerState",
    "KeyBinding",
    "WorldState",
]
