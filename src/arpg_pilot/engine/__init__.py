"""Combat engine for the action RPG autopilot.

This module provides the decision logic the run loop delegates to once a
character is in an area: combat state machines per archetype, the safe
position search, attack decision tables, encounter scripts, build
maintenance and gear requirement checks.

Submodules:
    interfaces: Collaborator protocols and the explicit CombatContext
    safety: Danger detection and safe-position search
    rules: Attack primitive decision tables
    targeting: Target selectors
    combat: Melee hybrid and lightning caster combat loops
    encounters: Boss and objective encounter scripts
    builds: Key bindings, buffs, stat and skill point plans
    items: Gear requirement evaluation

Example:
    >>> from arpg_pilot.engine import CombatContext, LightningCasterCombat, by_name
    >>>
    >>> ctx = CombatContext(snapshots=reader, pathfinder=pathfinder, executor=executor)
    >>> combat = LightningCasterCombat(ctx)
    >>> result = combat.kill_monster_sequence(by_name("summoner"))
    >>> print(result.outcome)
"""

from __future__ import annotations

# =============================================================================
# Collaborators
# =============================================================================
from arpg_pilot.engine.interfaces import (
    ActionExecutor,
    AttackOptions,
    AttackSlot,
    CombatContext,
    GridPathfinder,
    Pathfinder,
    SnapshotProvider,
)

# =============================================================================
# Decision Logic
# =============================================================================
from arpg_pilot.engine.safety import SafetyEvaluator, ScoredPosition
from arpg_pilot.engine.rules import (
    AttackPrimitive,
    AttackRule,
    caster_rules,
    melee_boss_rules,
    melee_rules,
    select_primitive,
    static_field_primitive,
)
from arpg_pilot.engine.targeting import (
    TargetSelector,
    by_name,
    fixed,
    nearest_enemy,
    nearest_of,
)

# =============================================================================
# Combat Loops
# =============================================================================
from arpg_pilot.engine.combat import (
    AttackAction,
    CombatLoop,
    CombatOutcome,
    CombatPhase,
    CombatResult,
    CombatStep,
    Engagement,
    EngagementState,
    LightningCasterCombat,
    MeleeHybridCombat,
    MoveAction,
    TargetKey,
    combat_loop_for,
)
from arpg_pilot.engine.encounters import (
    ENCOUNTERS,
    Encounter,
    EncounterKind,
    EncounterRunner,
    get_encounter,
)

# =============================================================================
# Builds and Gear
# =============================================================================
from arpg_pilot.engine.builds import (
    CharacterBuild,
    LightningCasterBuild,
    MeleeHybridBuild,
    SkillBindings,
    StatAllocation,
    build_for,
)
from arpg_pilot.engine.items import (
    ItemRequirementEvaluator,
    RequirementReport,
    StatRequirement,
    are_all_required_items_found,
    check_all_items_for_stats,
)


__all__ = [
    # Collaborators
    "ActionExecutor",
    "AttackOptions",
    "AttackSlot",
    "CombatContext",
    "GridPathfinder",
    "Pathfinder",
    "SnapshotProvider",
    # Decision logic
    "SafetyEvaluator",
    "ScoredPosition",
    "AttackPrimitive",
    "AttackRule",
    "caster_rules",
    "melee_boss_rules",
    "melee_rules",
    "select_primitive",
    "static_field_primitive",
    "TargetSelector",
    "by_name",
    "fixed",
    "nearest_enemy",
    "nearest_of",
    # Combat loops
    "AttackAction",
    "CombatLoop",
    "CombatOutcome",
    "CombatPhase",
    "CombatResult",
    "CombatStep",
    "Engagement",
    "EngagementState",
    "LightningCasterCombat",
    "MeleeHybridCombat",
    "MoveAction",
    "TargetKey",
    "combat_loop_for",
    "ENCOUNTERS",
    "Encounter",
    "EncounterKind",
    "EncounterRunner",
    "get_encounter",
    # Builds and gear
    "CharacterBuild",
    "LightningCasterBuild",
    "MeleeHybridBuild",
    "SkillBindings",
    "StatAllocation",
    "build_for",
    "ItemRequirementEvaluator",
    "RequirementReport",
    "StatRequirement",
    "are_all_required_items_found",
    "check_all_items_for_stats",
]
