"""Build maintenance per archetype.

Everything the run loop asks a character build outside of combat:
missing hotkeys, buffs to refresh, skills to bind, when to respec and
where stat and skill points go while leveling.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

from arpg_pilot.core.logging import get_logger
from arpg_pilot.models import Archetype, ItemLocation, PlayerState, SkillId, StatKind, WorldState


logger = get_logger(__name__)

TOME_OF_TOWN_PORTAL_ITEM = "TomeOfTownPortal"
"""Inventory item name of the town portal tome."""


@dataclass(frozen=True)
class StatAllocation:
    """Target total for a stat, base points included."""

    stat: StatKind
    points: int


@dataclass(frozen=True)
class SkillBindings:
    """Skill for the primary slot and the skills that need a hotkey."""

    main_skill: SkillId
    bindings: tuple[SkillId, ...]


class CharacterBuild(ABC):
    """Out-of-combat contract shared by every archetype."""

    archetype: ClassVar[Archetype]
    required_key_bindings: ClassVar[tuple[SkillId, ...]] = ()

    def check_key_bindings(self, world: WorldState) -> list[SkillId]:
        """Return the required skills that have no hotkey.

        Args:
            world: Current snapshot.

        Returns:
            Missing skills in declaration order, empty when the build is ready.
        """
        missing = [
            skill for skill in self.required_key_bindings if world.key_binding_for(skill) is None
        ]
        missing.extend(self._extra_missing_bindings(world))
        if missing:
            logger.debug("There are missing required key bindings", bindings=[str(s) for s in missing])
        return missing

    def _extra_missing_bindings(self, world: WorldState) -> list[SkillId]:
        return []

    @abstractmethod
    def buff_skills(self, world: WorldState) -> list[SkillId]:
        """Buffs to cast, limited to skills that have a hotkey."""

    def pre_cta_buff_skills(self, world: WorldState) -> list[SkillId]:
        return []

    def should_reset_skills(self, player: PlayerState) -> bool:
        return False

    def skills_to_bind(self, world: WorldState) -> SkillBindings | None:
        """Skills to put on hotkeys, None when the build binds nothing itself."""
        return None

    def stat_points(self) -> tuple[StatAllocation, ...]:
        return ()

    def skill_points(self, player: PlayerState) -> tuple[SkillId, ...]:
        return ()


# =============================================================================
# Melee Hybrid
# =============================================================================


_HOLY_FIRE_SEQUENCE: tuple[SkillId, ...] = (
    SkillId.MIGHT,
    SkillId.SACRIFICE,
    *(SkillId.RESIST_FIRE,) * 3,
    *(SkillId.HOLY_FIRE,) * 6,
    SkillId.ZEAL,
    *(SkillId.HOLY_FIRE,) * 11,
)

_HAMMER_SEQUENCE: tuple[SkillId, ...] = (
    SkillId.HOLY_BOLT,
    SkillId.BLESSED_HAMMER,
    SkillId.PRAYER,
    SkillId.DEFIANCE,
    SkillId.CLEANSING,
    SkillId.VIGOR,
    SkillId.MIGHT,
    SkillId.BLESSED_AIM,
    SkillId.CONCENTRATION,
    *(SkillId.BLESSED_AIM,) * 6,
    SkillId.BLESSED_HAMMER,
    SkillId.CONCENTRATION,
    SkillId.VIGOR,
    SkillId.BLESSED_HAMMER,
    SkillId.VIGOR,
    *(SkillId.BLESSED_HAMMER,) * 3,
    SkillId.VIGOR,
    *(SkillId.BLESSED_HAMMER,) * 8,
    SkillId.SMITE,
    *(SkillId.BLESSED_HAMMER,) * 5,
    SkillId.CHARGE,
    SkillId.BLESSED_HAMMER,
    *(SkillId.VIGOR,) * 3,
    SkillId.HOLY_SHIELD,
    SkillId.CONCENTRATION,
    *(SkillId.VIGOR,) * 13,
    *(SkillId.CONCENTRATION,) * 15,
    *(SkillId.BLESSED_AIM,) * 12,
)

_MELEE_STAT_TARGETS: tuple[StatAllocation, ...] = (
    StatAllocation(StatKind.VITALITY, 30),
    StatAllocation(StatKind.STRENGTH, 30),
    StatAllocation(StatKind.VITALITY, 35),
    StatAllocation(StatKind.STRENGTH, 35),
    StatAllocation(StatKind.VITALITY, 40),
    StatAllocation(StatKind.STRENGTH, 40),
    StatAllocation(StatKind.VITALITY, 50),
    StatAllocation(StatKind.STRENGTH, 80),
    StatAllocation(StatKind.VITALITY, 100),
    StatAllocation(StatKind.STRENGTH, 95),
    StatAllocation(StatKind.VITALITY, 205),
    StatAllocation(StatKind.DEXTERITY, 100),
    StatAllocation(StatKind.VITALITY, 999),
)

HAMMER_LEVEL = 24
"""Level at which the leveling build respecs from Holy Fire to Blessed Hammer."""


class MeleeHybridBuild(CharacterBuild):
    """Holy Fire leveling build that turns into a Hammerdin at level 24."""

    archetype = Archetype.MELEE_HYBRID

    def buff_skills(self, world: WorldState) -> list[SkillId]:
        warcries = (SkillId.BATTLE_COMMAND, SkillId.SHOUT, SkillId.BATTLE_ORDERS)
        return [skill for skill in warcries if world.key_binding_for(skill) is not None]

    def should_reset_skills(self, player: PlayerState) -> bool:
        if player.level == HAMMER_LEVEL and player.skill_level(SkillId.HOLY_FIRE) > 10:
            logger.info("Resetting skills: level 24 and Holy Fire level > 10")
            return True
        return False

    def skills_to_bind(self, world: WorldState) -> SkillBindings:
        player = world.player
        level = player.level
        bindings: list[SkillId] = []

        if level >= 6:
            bindings.append(SkillId.VIGOR)
        if level >= HAMMER_LEVEL:
            bindings.append(SkillId.BLESSED_HAMMER)
        if player.knows(SkillId.HOLY_SHIELD):
            bindings.append(SkillId.HOLY_SHIELD)

        if player.knows(SkillId.BLESSED_HAMMER) and level >= 18:
            main_skill = SkillId.BLESSED_HAMMER
        elif level < 12:
            main_skill = SkillId.SACRIFICE
        else:
            main_skill = SkillId.ZEAL

        if player.knows(SkillId.BATTLE_COMMAND):
            bindings.append(SkillId.BATTLE_COMMAND)
        if player.knows(SkillId.BATTLE_ORDERS):
            bindings.append(SkillId.BATTLE_ORDERS)

        tomes = [
            item
            for item in world.items_at(ItemLocation.INVENTORY)
            if item.name == TOME_OF_TOWN_PORTAL_ITEM
        ]
        if tomes:
            bindings.append(SkillId.TOME_OF_TOWN_PORTAL)

        # Early auras are bound as soon as they appear in the skill list
        if player.knows(SkillId.CONCENTRATION) and level >= 18:
            bindings.append(SkillId.CONCENTRATION)
        elif level < 6:
            if SkillId.MIGHT in player.skills:
                bindings.append(SkillId.MIGHT)
        elif SkillId.HOLY_FIRE in player.skills:
            bindings.append(SkillId.HOLY_FIRE)

        logger.info("Skills bound", main_skill=main_skill, bindings=[str(s) for s in bindings])
        return SkillBindings(main_skill=main_skill, bindings=tuple(bindings))

    def stat_points(self) -> tuple[StatAllocation, ...]:
        return _MELEE_STAT_TARGETS

    def skill_points(self, player: PlayerState) -> tuple[SkillId, ...]:
        """Allocation order for the current phase of the build."""
        if player.level < HAMMER_LEVEL:
            return _HOLY_FIRE_SEQUENCE
        return _HAMMER_SEQUENCE


# =============================================================================
# Lightning Caster
# =============================================================================


_ARMOR_SKILLS: tuple[SkillId, ...] = (
    SkillId.FROZEN_ARMOR,
    SkillId.SHIVER_ARMOR,
    SkillId.CHILLING_ARMOR,
)


class LightningCasterBuild(CharacterBuild):
    """Teleporting lightning caster."""

    archetype = Archetype.LIGHTNING_CASTER
    required_key_bindings = (
        SkillId.CHAIN_LIGHTNING,
        SkillId.TELEPORT,
        SkillId.TOME_OF_TOWN_PORTAL,
        SkillId.STATIC_FIELD,
    )

    def _extra_missing_bindings(self, world: WorldState) -> list[SkillId]:
        # Any armor will do; report the basic one when none is bound
        if any(world.key_binding_for(armor) is not None for armor in _ARMOR_SKILLS):
            return []
        return [SkillId.FROZEN_ARMOR]

    def buff_skills(self, world: WorldState) -> list[SkillId]:
        buffs = [
            skill
            for skill in (SkillId.ENERGY_SHIELD, SkillId.THUNDER_STORM)
            if world.key_binding_for(skill) is not None
        ]
        for armor in reversed(_ARMOR_SKILLS):
            if world.key_binding_for(armor) is not None:
                buffs.append(armor)
                break
        return buffs


def build_for(archetype: Archetype) -> CharacterBuild:
    """Instantiate the build of an archetype."""
    builds: dict[Archetype, type[CharacterBuild]] = {
        Archetype.MELEE_HYBRID: MeleeHybridBuild,
        Archetype.LIGHTNING_CASTER: LightningCasterBuild,
    }
    return builds[archetype]()


__all__ = [
    "TOME_OF_TOWN_PORTAL_ITEM",
    "HAMMER_LEVEL",
    "StatAllocation",
    "SkillBindings",
    "CharacterBuild",
    "MeleeHybridBuild",
    "LightningCasterBuild",
    "build_for",
]
