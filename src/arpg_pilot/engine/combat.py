"""Per-archetype combat loops.

Each loop is split into a decision step and a driver:

- ``tick(state, world, engagement, now)`` reads one snapshot and returns the
  next engagement state together with a CombatStep describing what to do.
  It never touches input or time.
- ``run(engagement)`` polls snapshots, ticks, executes the step through the
  ActionExecutor and sleeps between iterations.

Per iteration the order is fixed: player death check, priority scan,
caller selector, pre-battle checks, stall guard, repositioning, attack.

Terminal conditions:
- no target: graceful completion
- target dead or immune: graceful completion
- stall (same target engaged too long): silent completion
- player death: PlayerDiedError
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import ClassVar

from arpg_pilot.core.constants import PRIORITY_MONSTERS
from arpg_pilot.core.exceptions import ActionFailedError, CombatError, PlayerDiedError
from arpg_pilot.core.logging import get_logger, log_context
from arpg_pilot.engine.interfaces import AttackSlot, CombatContext
from arpg_pilot.engine.rules import (
    AttackPrimitive,
    AttackRule,
    caster_rules,
    melee_boss_rules,
    melee_rules,
    select_primitive,
    static_field_primitive,
)
from arpg_pilot.engine.safety import SafetyEvaluator
from arpg_pilot.engine.targeting import TargetSelector, by_name
from arpg_pilot.models import Archetype, Monster, MonsterType, NpcId, Position, StatKind, WorldState


logger = get_logger(__name__)


# =============================================================================
# Loop State
# =============================================================================


class CombatPhase(StrEnum):
    """Where an iteration ended up."""

    SEARCHING = "searching"
    ENGAGING = "engaging"
    REPOSITIONING = "repositioning"
    ATTACKING = "attacking"
    DONE = "done"


class CombatOutcome(StrEnum):
    """Why an engagement ended."""

    NO_TARGET = "no_target"
    TARGET_DEAD = "target_dead"
    TARGET_IMMUNE = "target_immune"
    STALLED = "stalled"
    PLAYER_DIED = "player_died"


@dataclass(frozen=True)
class TargetKey:
    """Identity of an engaged target.

    Unit ids can be reused by the game once a unit despawns, so the
    monster kind is part of the identity.
    """

    unit_id: int
    name: str


@dataclass(frozen=True)
class Engagement:
    """What the caller wants killed and how.

    Attributes:
        selector: Picks the target from each snapshot.
        skip_on_immunities: Resistances that make the target not worth fighting.
        boss: Use the boss decision tables and iteration cap.
        approach_distance: Melee builds close in to this distance before attacking.
        max_iterations: Overrides the archetype stall cap.
        label: Name used in logs.
    """

    selector: TargetSelector
    skip_on_immunities: tuple[StatKind, ...] = ()
    boss: bool = False
    approach_distance: int | None = None
    max_iterations: int | None = None
    label: str = ""


@dataclass(frozen=True)
class EngagementState:
    """Counters carried between iterations.

    Attributes:
        target: Target engaged on the previous iteration.
        iterations: Iterations spent on that target.
        attacks: Successful attacks on that target.
        setup_cast: Whether the area-denial setup skill landed.
        last_reposition_at: Clock value of the last reposition attempt.
    """

    target: TargetKey | None = None
    iterations: int = 0
    attacks: int = 0
    setup_cast: bool = False
    last_reposition_at: float = float("-inf")


@dataclass(frozen=True)
class MoveAction:
    position: Position
    reason: str = ""


@dataclass(frozen=True)
class AttackAction:
    primitive: AttackPrimitive
    target_id: int


@dataclass(frozen=True)
class CombatStep:
    """Decision of one iteration.

    Attributes:
        phase: Phase reached by the iteration.
        target_id: Target of the iteration.
        outcome: Set when the engagement is over.
        movement: Move executed before attacking.
        attack: Attack primitive to execute.
        on_failure: State to continue with when the attack is rejected.
        fallback: Attack fired in the same iteration when ``attack`` is rejected.
        on_fallback: State to continue with when the fallback lands.
    """

    phase: CombatPhase
    target_id: int | None = None
    outcome: CombatOutcome | None = None
    movement: MoveAction | None = None
    attack: AttackAction | None = None
    on_failure: EngagementState | None = None
    fallback: AttackAction | None = None
    on_fallback: EngagementState | None = None

    @property
    def done(self) -> bool:
        return self.outcome is not None


@dataclass(frozen=True)
class CombatResult:
    """Summary returned to encounter scripts."""

    outcome: CombatOutcome
    target_id: int | None = None
    iterations: int = 0
    attacks: int = 0


# =============================================================================
# Base Loop
# =============================================================================


class CombatLoop(ABC):
    """Shared skeleton of the per-archetype state machines.

    Args:
        context: Collaborators, settings and time sources.
    """

    archetype: ClassVar[Archetype]
    priority_monsters: ClassVar[tuple[NpcId, ...]] = ()

    def __init__(self, context: CombatContext) -> None:
        self._context = context
        self._settings = context.settings.combat
        self._safety = SafetyEvaluator(context.settings.safety, context.pathfinder)

    @property
    def context(self) -> CombatContext:
        return self._context

    @property
    def safety(self) -> SafetyEvaluator:
        return self._safety

    # -------------------------------------------------------------------------
    # Decision
    # -------------------------------------------------------------------------

    def find_priority_target(self, world: WorldState) -> Monster | None:
        """Closest living priority monster within the search radius."""
        if not self.priority_monsters:
            return None

        origin = world.player.position
        radius = self._settings.priority_search_radius
        closest: Monster | None = None
        min_distance: int | None = None
        for monster in world.enemies():
            if monster.name not in self.priority_monsters or not monster.is_alive:
                continue
            distance = self._context.pathfinder.distance(origin, monster.position)
            if distance >= radius:
                continue
            if min_distance is None or distance < min_distance:
                closest, min_distance = monster, distance

        if closest is not None:
            logger.debug("Priority monster found", name=closest.name, distance=min_distance)
        return closest

    def select_target(self, world: WorldState, selector: TargetSelector) -> int | None:
        priority = self.find_priority_target(world)
        if priority is not None:
            return priority.unit_id
        return selector(world)

    def pre_battle_checks(
        self,
        monster: Monster | None,
        skip_on_immunities: Sequence[StatKind],
    ) -> CombatOutcome | None:
        """Return a terminal outcome if the target must not be fought."""
        if monster is None or not monster.is_alive:
            return CombatOutcome.TARGET_DEAD
        for resist in skip_on_immunities:
            if monster.is_immune(resist):
                logger.info("Monster is immune, skipping", name=monster.name, immune_to=resist)
                return CombatOutcome.TARGET_IMMUNE
        return None

    def iteration_cap(self, engagement: Engagement) -> int:
        if engagement.max_iterations is not None:
            return engagement.max_iterations
        if engagement.boss:
            return self._settings.boss_max_iterations
        return self.default_iteration_cap()

    @abstractmethod
    def default_iteration_cap(self) -> int:
        """Iterations on one target before the loop gives up."""

    @abstractmethod
    def plan(
        self,
        state: EngagementState,
        world: WorldState,
        target: Monster,
        engagement: Engagement,
        *,
        now: float,
    ) -> tuple[EngagementState, CombatStep]:
        """Choose movement and attack for an engaged, living target."""

    def tick(
        self,
        state: EngagementState,
        world: WorldState,
        engagement: Engagement,
        *,
        now: float,
    ) -> tuple[EngagementState, CombatStep]:
        """Decide one iteration against one snapshot.

        Args:
            state: Counters from the previous iteration.
            world: Current snapshot.
            engagement: Caller request.
            now: Current clock value.

        Returns:
            Tuple of (state assuming the attack succeeds, step).
        """
        if world.player.is_dead:
            previous = state.target.unit_id if state.target else None
            return state, CombatStep(CombatPhase.DONE, previous, CombatOutcome.PLAYER_DIED)

        target_id = self.select_target(world, engagement.selector)
        if target_id is None:
            return state, CombatStep(CombatPhase.DONE, None, CombatOutcome.NO_TARGET)

        monster = world.monster_by_id(target_id)
        outcome = self.pre_battle_checks(monster, engagement.skip_on_immunities)
        if outcome is not None:
            return state, CombatStep(CombatPhase.DONE, target_id, outcome)

        key = TargetKey(monster.unit_id, monster.name)
        if state.target != key:
            state = EngagementState(target=key, last_reposition_at=state.last_reposition_at)

        if state.iterations >= self.iteration_cap(engagement):
            logger.info(
                "Target engaged too long, giving up",
                target_id=target_id,
                iterations=state.iterations,
            )
            return state, CombatStep(CombatPhase.DONE, target_id, CombatOutcome.STALLED)

        state = replace(state, iterations=state.iterations + 1)
        return self.plan(state, world, monster, engagement, now=now)

    def _attack(
        self,
        state: EngagementState,
        succeeded: EngagementState,
        primitive: AttackPrimitive,
        target: Monster,
        movement: MoveAction | None = None,
        *,
        fallback: tuple[AttackPrimitive, EngagementState] | None = None,
    ) -> tuple[EngagementState, CombatStep]:
        """Build an attacking step.

        Args:
            state: State to continue with if every attack is rejected.
            succeeded: State to continue with if ``primitive`` lands.
            primitive: Attack to fire.
            target: Engaged monster.
            movement: Move executed before attacking.
            fallback: Attack fired instead when ``primitive`` is rejected,
                with the state to continue with if it lands.
        """
        step = CombatStep(
            CombatPhase.ATTACKING,
            target.unit_id,
            movement=movement,
            attack=AttackAction(primitive, target.unit_id),
            on_failure=state,
            fallback=AttackAction(fallback[0], target.unit_id) if fallback else None,
            on_fallback=fallback[1] if fallback else None,
        )
        return succeeded, step

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def _fire(self, action: AttackAction) -> bool:
        """Fire one attack primitive, returning False if it was rejected."""
        executor = self._context.executor
        primitive = action.primitive
        try:
            if primitive.slot == AttackSlot.PRIMARY:
                executor.primary_attack(action.target_id, primitive.repetitions, primitive.options)
            else:
                if primitive.skill is None:
                    raise CombatError(
                        f"Secondary primitive {primitive.name} has no skill",
                        target_id=action.target_id,
                    )
                executor.secondary_attack(
                    primitive.skill,
                    action.target_id,
                    primitive.repetitions,
                    primitive.options,
                )
        except ActionFailedError as exc:
            logger.warning(
                "Attack primitive failed",
                primitive=primitive.name,
                target_id=action.target_id,
                error=exc.message,
            )
            return False
        return True

    def _execute(self, step: CombatStep) -> AttackAction | None:
        """Carry out a step.

        Returns:
            The attack that landed, None if there was none or all were rejected.
        """
        executor = self._context.executor

        if step.movement is not None:
            try:
                executor.move_to(step.movement.position)
            except ActionFailedError as exc:
                logger.warning("Movement failed", reason=step.movement.reason, error=exc.message)

        if step.attack is None:
            return None

        attempted = step.attack
        landed = self._fire(attempted)
        if not landed and step.fallback is not None:
            logger.debug(f"Falling back to {step.fallback.primitive.name}")
            attempted = step.fallback
            landed = self._fire(attempted)

        if attempted.primitive.random_movement:
            logger.debug("Performing random movement to reposition")
            try:
                executor.random_movement()
            except ActionFailedError as exc:
                logger.warning("Random movement failed", error=exc.message)

        return attempted if landed else None

    def _pause_for(self, step: CombatStep) -> float:
        if step.attack is not None and step.attack.primitive.pause_seconds is not None:
            return step.attack.primitive.pause_seconds
        return self._settings.tick_interval_seconds

    def run(self, engagement: Engagement) -> CombatResult:
        """Drive an engagement until it reaches a terminal condition.

        Returns:
            The combat result.

        Raises:
            PlayerDiedError: If the player dies during the engagement.
        """
        ctx = self._context
        state = EngagementState(last_reposition_at=ctx.clock())
        iterations = 0
        attacks = 0

        with log_context(archetype=self.archetype, engagement=engagement.label):
            while True:
                world = ctx.snapshots.get_snapshot()
                state, step = self.tick(state, world, engagement, now=ctx.clock())

                if step.done:
                    return self._finish(step, iterations, attacks)

                iterations += 1
                landed = self._execute(step)
                if landed is not None:
                    attacks += 1
                    if landed is step.fallback and step.on_fallback is not None:
                        state = step.on_fallback
                elif step.on_failure is not None:
                    state = step.on_failure

                ctx.sleep(self._pause_for(step))

    def _finish(self, step: CombatStep, iterations: int, attacks: int) -> CombatResult:
        if step.outcome == CombatOutcome.PLAYER_DIED:
            logger.info("Player detected as dead, stopping actions")
            self._context.sleep(self._settings.death_pause_seconds)
            raise PlayerDiedError(
                "Player died during engagement",
                target_id=step.target_id,
                iterations=iterations,
            )

        logger.debug(
            "Engagement finished",
            outcome=step.outcome,
            target_id=step.target_id,
            iterations=iterations,
        )
        return CombatResult(
            outcome=step.outcome,
            target_id=step.target_id,
            iterations=iterations,
            attacks=attacks,
        )

    # -------------------------------------------------------------------------
    # Convenience
    # -------------------------------------------------------------------------

    def kill_monster_sequence(
        self,
        selector: TargetSelector,
        skip_on_immunities: Sequence[StatKind] = (),
        *,
        boss: bool = False,
        approach_distance: int | None = None,
        label: str = "",
    ) -> CombatResult:
        """Kill whatever the selector keeps returning."""
        return self.run(
            Engagement(
                selector=selector,
                skip_on_immunities=tuple(skip_on_immunities),
                boss=boss,
                approach_distance=approach_distance,
                label=label,
            )
        )

    def kill_monster_by_name(
        self,
        name: str,
        monster_type: MonsterType | None = None,
        skip_on_immunities: Sequence[StatKind] = (),
    ) -> CombatResult:
        return self.kill_monster_sequence(
            by_name(name, monster_type),
            skip_on_immunities,
            label=str(name),
        )


# =============================================================================
# Melee Hybrid
# =============================================================================


class MeleeHybridCombat(CombatLoop):
    """Paladin leveling build backed by Barbarian warcries.

    Kills priority monsters first, then walks the leveling table
    (Might, Holy Fire, Zeal, then Blessed Hammer with hit-and-move).
    """

    archetype = Archetype.MELEE_HYBRID
    priority_monsters = PRIORITY_MONSTERS

    def __init__(self, context: CombatContext) -> None:
        super().__init__(context)
        self._rules: tuple[AttackRule, ...] = melee_rules(self._settings)
        self._boss_rules: tuple[AttackRule, ...] = melee_boss_rules(self._settings)

    def default_iteration_cap(self) -> int:
        return self._settings.melee_max_attack_loops

    def plan(
        self,
        state: EngagementState,
        world: WorldState,
        target: Monster,
        engagement: Engagement,
        *,
        now: float,
    ) -> tuple[EngagementState, CombatStep]:
        if engagement.approach_distance is not None:
            distance = self._context.pathfinder.distance(world.player.position, target.position)
            if distance > engagement.approach_distance:
                logger.debug(f"{target.name} is too far away ({distance}), moving closer")
                step = CombatStep(
                    CombatPhase.ENGAGING,
                    target.unit_id,
                    movement=MoveAction(target.position, "approach"),
                )
                return state, step

        rules = self._boss_rules if engagement.boss else self._rules
        primitive = select_primitive(rules, world.player, target)
        logger.debug(f"Using {primitive.name}", target_id=target.unit_id)
        return self._attack(state, replace(state, attacks=state.attacks + 1), primitive, target)


# =============================================================================
# Lightning Caster
# =============================================================================


class LightningCasterCombat(CombatLoop):
    """Ranged lightning build.

    Keeps its distance from monsters, opens every engagement with Static
    Field while the target is healthy, then casts Chain Lightning (or the
    primary skill against act bosses).
    """

    archetype = Archetype.LIGHTNING_CASTER

    def __init__(self, context: CombatContext) -> None:
        super().__init__(context)
        self._rules: tuple[AttackRule, ...] = caster_rules(self._settings)
        self._static_field = static_field_primitive(self._settings)

    def default_iteration_cap(self) -> int:
        return self._settings.caster_max_iterations

    def should_cast_static_field(self, target: Monster) -> bool:
        """Static Field only pays off while the target is above the life threshold."""
        if target.max_life <= 0:
            return False
        return target.life_percent > self._settings.static_field_threshold

    def plan_reposition(
        self,
        state: EngagementState,
        world: WorldState,
        target: Monster,
        *,
        now: float,
    ) -> tuple[EngagementState, MoveAction | None]:
        """Look for a safe spot when a monster gets too close.

        Attempts are rate limited by the reposition cooldown.
        """
        player_position = world.player.position
        enemies = world.enemies()
        in_danger, dangerous = self._safety.needs_repositioning(player_position, enemies)
        if not in_danger or dangerous is None:
            return state, None
        if now - state.last_reposition_at <= self._settings.reposition_cooldown_seconds:
            return state, None

        state = replace(state, last_reposition_at=now)
        logger.info(
            "Dangerous monster detected, repositioning",
            distance=self._context.pathfinder.distance(player_position, dangerous.position),
            monster=dangerous.name,
        )
        safe_position = self._safety.find_safe_position(
            player_position,
            target,
            enemies,
            threat=dangerous,
        )
        if safe_position is None:
            logger.info("Could not find safe position for repositioning")
            return state, None
        return state, MoveAction(safe_position, "reposition")

    def plan(
        self,
        state: EngagementState,
        world: WorldState,
        target: Monster,
        engagement: Engagement,
        *,
        now: float,
    ) -> tuple[EngagementState, CombatStep]:
        state, movement = self.plan_reposition(state, world, target, now=now)

        primitive = select_primitive(self._rules, world.player, target)
        damaged = replace(state, attacks=state.attacks + 1)
        if damaged.attacks >= self._settings.caster_max_attack_loops:
            damaged = replace(damaged, attacks=0, setup_cast=False)

        # Bosses are drained with Static Field before any lightning is thrown
        if engagement.boss and target.life_percent > self._settings.boss_static_threshold:
            return self._attack(state, state, self._static_field, target, movement)

        # A rejected setup falls through to the damage skill
        if not state.setup_cast and self.should_cast_static_field(target):
            return self._attack(
                state,
                replace(state, setup_cast=True),
                self._static_field,
                target,
                movement,
                fallback=(primitive, damaged),
            )

        return self._attack(state, damaged, primitive, target, movement)


def combat_loop_for(archetype: Archetype, context: CombatContext) -> CombatLoop:
    """Instantiate the combat loop of an archetype."""
    loops: dict[Archetype, type[CombatLoop]] = {
        Archetype.MELEE_HYBRID: MeleeHybridCombat,
        Archetype.LIGHTNING_CASTER: LightningCasterCombat,
    }
    return loops[archetype](context)


__all__ = [
    "CombatPhase",
    "CombatOutcome",
    "TargetKey",
    "Engagement",
    "EngagementState",
    "MoveAction",
    "AttackAction",
    "CombatStep",
    "CombatResult",
    "CombatLoop",
    "MeleeHybridCombat",
    "LightningCasterCombat",
    "combat_loop_for",
]
