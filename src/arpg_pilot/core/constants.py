"""Application-wide constants for the action RPG autopilot.

This module defines the fixed monster groups and game-rule constants
consumed by the combat loops and encounter scripts.
"""

from __future__ import annotations

from arpg_pilot.models.enums import NpcId


# =============================================================================
# Game Rules
# =============================================================================

IMMUNITY_THRESHOLD = 100
"""A resistance at or above this value makes a monster immune to the element."""

INVALID_UNIT_ID = 0
"""Placeholder identifier for units that are not real game instances."""

# =============================================================================
# Monster Groups
# =============================================================================

PRIORITY_MONSTERS: tuple[NpcId, ...] = (
    NpcId.FALLEN_SHAMAN,
    NpcId.MUMMY_GENERATOR,
    NpcId.BAAL_SUBJECT_MUMMY,
    NpcId.FETISH_SHAMAN,
    NpcId.CARVER_SHAMAN,
)
"""Monster kinds that resurrect or spawn others and are killed first by melee builds."""

PRIMARY_SKILL_BOSSES: frozenset[NpcId] = frozenset(
    {
        NpcId.ANDARIEL,
        NpcId.DURIEL,
        NpcId.MEPHISTO,
        NpcId.DIABLO,
        NpcId.BAAL_CRAB,
        NpcId.IZUAL,
    }
)
"""Act bosses the lightning caster fights with its primary skill, standing still."""

COUNCIL_MEMBERS: frozenset[NpcId] = frozenset(
    {NpcId.COUNCIL_MEMBER, NpcId.COUNCIL_MEMBER_2, NpcId.COUNCIL_MEMBER_3}
)

ANCIENTS_ARENA = (10062, 12639)
"""World coordinate of the Ancients altar."""


__all__ = [
    "IMMUNITY_THRESHOLD",
    "INVALID_UNIT_ID",
    "PRIORITY_MONSTERS",
    "PRIMARY_SKILL_BOSSES",
    "COUNCIL_MEMBERS",
    "ANCIENTS_ARENA",
]
