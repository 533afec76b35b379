"""ARPG Pilot - combat decision engine for an action RPG autopilot.

The engine sits between an external memory reader that produces world
snapshots and an input layer that performs clicks and moves. It decides
which monster to attack, with what skill, from where, and when to back
off; it never reads memory or injects input itself.

ARCHITECTURE:
- Snapshots are immutable Pydantic models read once per iteration
- Decisions are pure functions of a snapshot and explicit engagement state
- Input, geometry and time are injected through a CombatContext

Example:
    >>> from arpg_pilot import CombatContext, EncounterRunner, LightningCasterCombat
    >>>
    >>> ctx = CombatContext(snapshots=reader, pathfinder=pathfinder, executor=executor)
    >>> runner = EncounterRunner(LightningCasterCombat(ctx))
    >>> result = runner.run("andariel")

Modules:
    core: Configuration, logging, constants and exceptions.
    models: World snapshot schemas and enumerations.
    engine: Combat loops, safety search, encounters, builds and gear checks.
"""

from __future__ import annotations

# Core
from arpg_pilot.core.config import Settings, get_settings
from arpg_pilot.core.exceptions import ArpgPilotError, EncounterTimeoutError, PlayerDiedError
from arpg_pilot.core.logging import configure_logging, get_logger

# Snapshot models
from arpg_pilot.models import (
    Archetype,
    Item,
    Monster,
    MonsterType,
    NpcId,
    PlayerState,
    Position,
    SkillId,
    StatKind,
    WorldState,
)

# Engine
from arpg_pilot.engine import (
    CombatContext,
    CombatOutcome,
    CombatResult,
    EncounterRunner,
    LightningCasterCombat,
    MeleeHybridCombat,
    SafetyEvaluator,
    build_for,
    combat_loop_for,
    are_all_required_items_found,
    check_all_items_for_stats,
)


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "ArpgPilotError",
    "EncounterTimeoutError",
    "PlayerDiedError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Archetype",
    "Item",
    "Monster",
    "MonsterType",
    "NpcId",
    "PlayerState",
    "Position",
    "SkillId",
    "StatKind",
    "WorldState",
    # Engine
    "CombatContext",
    "CombatOutcome",
    "CombatResult",
    "EncounterRunner",
    "LightningCasterCombat",
    "MeleeHybridCombat",
    "SafetyEvaluator",
    "build_for",
    "combat_loop_for",
    "are_all_required_items_found",
    "check_all_items_for_stats",
]
