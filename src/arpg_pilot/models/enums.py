"""Enumerations shared by the world snapshot models and the combat engine.

Identifiers are string enums so that snapshots produced by an external
memory reader can be validated from plain JSON-like payloads.
"""

from __future__ import annotations

from enum import StrEnum


class StatKind(StrEnum):
    """Stat kinds read from items, monsters and the player unit."""

    LIFE = "life"
    MAX_LIFE = "max_life"
    LEVEL = "level"
    LIFE_STEAL = "life_steal"
    FASTER_CAST_RATE = "faster_cast_rate"
    MIN_DAMAGE = "min_damage"
    ENERGY = "energy"
    STRENGTH = "strength"
    DEXTERITY = "dexterity"
    VITALITY = "vitality"
    ALL_SKILLS = "all_skills"
    FIRE_RESIST = "fire_resist"
    COLD_RESIST = "cold_resist"
    LIGHTNING_RESIST = "lightning_resist"
    POISON_RESIST = "poison_resist"
    MAGIC_RESIST = "magic_resist"
    DAMAGE_RESIST = "damage_resist"


class MonsterType(StrEnum):
    """Monster classification."""

    NORMAL = "normal"
    CHAMPION = "champion"
    MINION = "minion"
    UNIQUE = "unique"
    SUPER_UNIQUE = "super_unique"

    @property
    def is_elite(self) -> bool:
        """Champions, uniques and super uniques."""
        return self in (MonsterType.CHAMPION, MonsterType.UNIQUE, MonsterType.SUPER_UNIQUE)


class ItemLocation(StrEnum):
    """Where an item currently sits."""

    INVENTORY = "inventory"
    STASH = "stash"
    EQUIPPED = "equipped"
    MERCENARY = "mercenary"
    BELT = "belt"
    CUBE = "cube"
    VENDOR = "vendor"
    GROUND = "ground"


class SkillId(StrEnum):
    """Skills referenced by the decision tables and build plans."""

    ATTACK = "attack"
    # Paladin
    MIGHT = "might"
    SACRIFICE = "sacrifice"
    HOLY_FIRE = "holy_fire"
    ZEAL = "zeal"
    CONCENTRATION = "concentration"
    BLESSED_HAMMER = "blessed_hammer"
    BLESSED_AIM = "blessed_aim"
    VIGOR = "vigor"
    HOLY_SHIELD = "holy_shield"
    HOLY_BOLT = "holy_bolt"
    PRAYER = "prayer"
    DEFIANCE = "defiance"
    CLEANSING = "cleansing"
    RESIST_FIRE = "resist_fire"
    SMITE = "smite"
    CHARGE = "charge"
    # Barbarian warcries
    SHOUT = "shout"
    BATTLE_ORDERS = "battle_orders"
    BATTLE_COMMAND = "battle_command"
    # Sorceress
    CHAIN_LIGHTNING = "chain_lightning"
    STATIC_FIELD = "static_field"
    TELEPORT = "teleport"
    FROZEN_ARMOR = "frozen_armor"
    SHIVER_ARMOR = "shiver_armor"
    CHILLING_ARMOR = "chilling_armor"
    ENERGY_SHIELD = "energy_shield"
    THUNDER_STORM = "thunder_storm"
    # Items
    TOME_OF_TOWN_PORTAL = "tome_of_town_portal"


class NpcId(StrEnum):
    """Monster kinds the engine refers to by name."""

    # Act bosses
    ANDARIEL = "andariel"
    DURIEL = "duriel"
    MEPHISTO = "mephisto"
    DIABLO = "diablo"
    BAAL_CRAB = "baal_crab"
    IZUAL = "izual"
    # Super uniques and objectives
    COUNTESS = "dark_stalker"
    SUMMONER = "summoner"
    PINDLESKIN = "defiled_warrior"
    NIHLATHAK = "nihlathak"
    COUNCIL_MEMBER = "council_member"
    COUNCIL_MEMBER_2 = "council_member_2"
    COUNCIL_MEMBER_3 = "council_member_3"
    TALIC = "talic"
    MADAWC = "madawc"
    KORLIC = "korlic"
    # Priority kinds
    FALLEN_SHAMAN = "fallen_shaman"
    MUMMY_GENERATOR = "mummy_generator"
    BAAL_SUBJECT_MUMMY = "baal_subject_mummy"
    FETISH_SHAMAN = "fetish_shaman"
    CARVER_SHAMAN = "carver_shaman"


class Archetype(StrEnum):
    """Character archetypes with a dedicated combat loop."""

    MELEE_HYBRID = "melee_hybrid"
    """Paladin leveling build with Barbarian warcry support."""

    LIGHTNING_CASTER = "lightning_caster"
    """Ranged lightning sorceress."""


__all__ = [
    "StatKind",
    "MonsterType",
    "ItemLocation",
    "SkillId",
    "NpcId",
    "Archetype",
]
