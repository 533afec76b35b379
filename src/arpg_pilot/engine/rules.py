"""Attack primitive decision tables.

Each archetype picks its attack from an ordered table of rules keyed by
character level, known skills and target kind. The first matching rule
wins, which keeps the per-build branching declarative and testable.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace

from arpg_pilot.core.config import CombatSettings
from arpg_pilot.core.constants import PRIMARY_SKILL_BOSSES
from arpg_pilot.core.exceptions import CombatError
from arpg_pilot.engine.interfaces import AttackOptions, AttackSlot
from arpg_pilot.models import Monster, NpcId, PlayerState, SkillId


@dataclass(frozen=True)
class AttackPrimitive:
    """One executable offensive action.

    Attributes:
        name: Label used in logs.
        slot: Mouse button the skill is fired from.
        skill: Skill fired from the secondary slot; None for the bound primary skill.
        repetitions: Clicks per execution.
        options: Distance band, aura precondition and stand-still flag.
        random_movement: Move randomly after attacking.
        pause_seconds: Pause after execution, replaces the tick interval when set.
    """

    name: str
    slot: AttackSlot
    options: AttackOptions
    skill: SkillId | None = None
    repetitions: int = 1
    random_movement: bool = False
    pause_seconds: float | None = None


@dataclass(frozen=True)
class AttackRule:
    """Gate selecting a primitive.

    Attributes:
        primitive: Primitive used when the rule matches.
        min_level: Inclusive lower level bound.
        max_level: Inclusive upper level bound, None for unbounded.
        requires_skill: Skill that must have at least one point.
        target_kinds: Monster kinds the rule applies to, None for any.
    """

    primitive: AttackPrimitive
    min_level: int = 1
    max_level: int | None = None
    requires_skill: SkillId | None = None
    target_kinds: frozenset[str] | None = None

    def matches(self, player: PlayerState, target: Monster) -> bool:
        if player.level < self.min_level:
            return False
        if self.max_level is not None and player.level > self.max_level:
            return False
        if self.requires_skill is not None and not player.knows(self.requires_skill):
            return False
        if self.target_kinds is not None and target.name not in self.target_kinds:
            return False
        return True


def select_primitive(
    rules: Sequence[AttackRule],
    player: PlayerState,
    target: Monster,
) -> AttackPrimitive:
    """Return the primitive of the first matching rule.

    Raises:
        CombatError: If no rule matches.
    """
    for rule in rules:
        if rule.matches(player, target):
            return rule.primitive
    raise CombatError(
        "No attack rule matches the current build",
        target_id=target.unit_id,
        details={"level": player.level},
    )


# =============================================================================
# Melee hybrid (Paladin leveling)
# =============================================================================

_MELEE_CLOSE = AttackOptions(min_distance=1, max_distance=3, aura=SkillId.HOLY_FIRE)
_HAMMER = AttackOptions(min_distance=2, max_distance=7, aura=SkillId.CONCENTRATION)


def melee_rules(settings: CombatSettings) -> tuple[AttackRule, ...]:
    """Leveling table used against regular packs."""
    return (
        AttackRule(
            AttackPrimitive(
                "blessed_hammer",
                AttackSlot.PRIMARY,
                _HAMMER,
                repetitions=5,
                random_movement=True,
                pause_seconds=settings.random_movement_pause_seconds,
            ),
            requires_skill=SkillId.BLESSED_HAMMER,
        ),
        AttackRule(
            AttackPrimitive(
                "might_sacrifice",
                AttackSlot.PRIMARY,
                replace(_MELEE_CLOSE, aura=SkillId.MIGHT),
            ),
            max_level=5,
        ),
        AttackRule(
            AttackPrimitive("holy_fire_sacrifice", AttackSlot.PRIMARY, _MELEE_CLOSE),
            min_level=6,
            max_level=11,
        ),
        AttackRule(AttackPrimitive("holy_fire_zeal", AttackSlot.PRIMARY, _MELEE_CLOSE)),
    )


def melee_boss_rules(settings: CombatSettings) -> tuple[AttackRule, ...]:
    """Table used once a boss is engaged.

    Diablo is hammered in longer bursts without moving away.
    """
    boss_pause = settings.boss_random_movement_pause_seconds
    return (
        AttackRule(
            AttackPrimitive(
                "blessed_hammer_diablo",
                AttackSlot.PRIMARY,
                _HAMMER,
                repetitions=10,
                pause_seconds=boss_pause,
            ),
            requires_skill=SkillId.BLESSED_HAMMER,
            target_kinds=frozenset({NpcId.DIABLO}),
        ),
        AttackRule(
            AttackPrimitive(
                "blessed_hammer",
                AttackSlot.PRIMARY,
                _HAMMER,
                repetitions=5,
                random_movement=True,
                pause_seconds=boss_pause,
            ),
            requires_skill=SkillId.BLESSED_HAMMER,
        ),
        # Zeal is a multi-hit skill, one click is a full sequence
        AttackRule(
            AttackPrimitive("holy_fire_zeal", AttackSlot.PRIMARY, _MELEE_CLOSE),
            requires_skill=SkillId.ZEAL,
        ),
        AttackRule(AttackPrimitive("holy_fire_burst", AttackSlot.PRIMARY, _MELEE_CLOSE, repetitions=5)),
    )


# =============================================================================
# Lightning caster
# =============================================================================


def caster_rules(settings: CombatSettings) -> tuple[AttackRule, ...]:
    band = AttackOptions(
        min_distance=settings.caster_min_distance,
        max_distance=settings.caster_max_distance,
    )
    return (
        AttackRule(
            AttackPrimitive(
                "boss_primary",
                AttackSlot.PRIMARY,
                replace(band, stand_still=True),
            ),
            target_kinds=frozenset(PRIMARY_SKILL_BOSSES),
        ),
        AttackRule(
            AttackPrimitive(
                "chain_lightning",
                AttackSlot.SECONDARY,
                replace(band, ranged=True),
                skill=SkillId.CHAIN_LIGHTNING,
            ),
        ),
    )


def static_field_primitive(settings: CombatSettings) -> AttackPrimitive:
    """Area-denial setup skill cast at close range."""
    return AttackPrimitive(
        "static_field",
        AttackSlot.SECONDARY,
        AttackOptions(
            min_distance=settings.static_min_distance,
            max_distance=settings.static_max_distance,
            ranged=True,
        ),
        skill=SkillId.STATIC_FIELD,
    )


__all__ = [
    "AttackPrimitive",
    "AttackRule",
    "select_primitive",
    "melee_rules",
    "melee_boss_rules",
    "caster_rules",
    "static_field_primitive",
]
