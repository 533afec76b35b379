"""Encounter scripts.

Each named encounter (act bosses, super uniques, the Council, the
Ancients) is described once in a registry and played by the
EncounterRunner on top of an archetype's combat loop.

Bosses are awaited before fighting: the runner polls snapshots until the
boss shows up and raises EncounterTimeoutError if it never does. Other
encounters do not wait; a missing target completes gracefully.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from tenacity import RetryError, Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from arpg_pilot.core.constants import ANCIENTS_ARENA, COUNCIL_MEMBERS
from arpg_pilot.core.exceptions import ActionFailedError, EncounterTimeoutError, ValidationError
from arpg_pilot.core.logging import get_logger, log_context
from arpg_pilot.engine.combat import CombatLoop, CombatOutcome, CombatResult, Engagement
from arpg_pilot.engine.targeting import by_name, nearest_of
from arpg_pilot.models import Monster, MonsterType, NpcId, Position


logger = get_logger(__name__)


class EncounterKind(StrEnum):
    """How an encounter is played."""

    BOSS = "boss"
    NAMED = "named"
    COUNCIL = "council"
    ANCIENTS = "ancients"


@dataclass(frozen=True)
class Encounter:
    """Registry entry.

    Attributes:
        name: Registry key, also the key of the appearance timeout.
        kind: How the encounter is played.
        npc: Monster kind to kill, None for group encounters.
        monster_type: Classification the monster is looked up with.
        approach: Melee builds close in before attacking.
        configurable_skips: Read the immunity skip list from settings.
    """

    name: str
    kind: EncounterKind
    npc: NpcId | None = None
    monster_type: MonsterType = MonsterType.UNIQUE
    approach: bool = False
    configurable_skips: bool = False


ENCOUNTERS: dict[str, Encounter] = {
    encounter.name: encounter
    for encounter in (
        Encounter("andariel", EncounterKind.BOSS, NpcId.ANDARIEL),
        Encounter("duriel", EncounterKind.BOSS, NpcId.DURIEL),
        Encounter("mephisto", EncounterKind.BOSS, NpcId.MEPHISTO),
        Encounter("izual", EncounterKind.BOSS, NpcId.IZUAL, approach=True),
        Encounter("diablo", EncounterKind.BOSS, NpcId.DIABLO),
        Encounter("baal", EncounterKind.BOSS, NpcId.BAAL_CRAB),
        Encounter("countess", EncounterKind.NAMED, NpcId.COUNTESS, MonsterType.SUPER_UNIQUE),
        Encounter("summoner", EncounterKind.NAMED, NpcId.SUMMONER),
        Encounter(
            "pindleskin",
            EncounterKind.NAMED,
            NpcId.PINDLESKIN,
            MonsterType.SUPER_UNIQUE,
            configurable_skips=True,
        ),
        Encounter("nihlathak", EncounterKind.NAMED, NpcId.NIHLATHAK, MonsterType.SUPER_UNIQUE),
        Encounter("council", EncounterKind.COUNCIL),
        Encounter("ancients", EncounterKind.ANCIENTS),
    )
}


def get_encounter(name: str) -> Encounter:
    """Look up an encounter by name.

    Raises:
        ValidationError: If the encounter is unknown.
    """
    try:
        return ENCOUNTERS[name.lower()]
    except KeyError:
        raise ValidationError(
            f"Unknown encounter: {name}",
            field_name="encounter",
            invalid_value=name,
            details={"known": sorted(ENCOUNTERS)},
        ) from None


class _NotPresentYet(Exception):
    """Internal retry signal while a boss has not appeared."""


class EncounterRunner:
    """Plays registry encounters with a combat loop.

    Args:
        combat: Combat loop of the current archetype.
    """

    def __init__(self, combat: CombatLoop) -> None:
        self._combat = combat
        self._context = combat.context
        self._settings = combat.context.settings.encounter

    def run(self, name: str) -> CombatResult:
        """Play an encounter to completion.

        Args:
            name: Registry key.

        Returns:
            The combat result.

        Raises:
            ValidationError: If the encounter is unknown.
            EncounterTimeoutError: If a boss never appears.
            PlayerDiedError: If the player dies.
        """
        encounter = get_encounter(name)
        with log_context(encounter=encounter.name):
            logger.info(f"Starting {encounter.name} kill sequence")
            if encounter.kind == EncounterKind.BOSS:
                return self._kill_boss(encounter)
            if encounter.kind == EncounterKind.NAMED:
                return self._kill_named(encounter)
            if encounter.kind == EncounterKind.COUNCIL:
                return self._kill_council()
            return self._kill_ancients()

    # -------------------------------------------------------------------------
    # Bosses
    # -------------------------------------------------------------------------

    def _find_present(self, encounter: Encounter) -> Monster:
        world = self._context.snapshots.get_snapshot()
        monster = world.find_one(encounter.npc, encounter.monster_type)
        if monster is None:
            raise _NotPresentYet(encounter.name)
        return monster

    def wait_for(self, encounter: Encounter) -> Monster:
        """Poll snapshots until the encounter's monster appears.

        Args:
            encounter: A boss encounter.

        Returns:
            The monster as first seen.

        Raises:
            EncounterTimeoutError: If the timeout elapses first.
        """
        timeout = self._settings.timeout_for(encounter.name)
        poll = self._settings.poll_interval_seconds
        attempts = int(timeout / poll) + 1 if poll > 0 else 1

        retryer = Retrying(
            retry=retry_if_exception_type(_NotPresentYet),
            stop=stop_after_attempt(attempts),
            wait=wait_fixed(poll),
            sleep=self._context.sleep,
        )
        try:
            return retryer(self._find_present, encounter)
        except RetryError as exc:
            logger.error(f"{encounter.name} was not found, timeout reached")
            raise EncounterTimeoutError(
                f"{encounter.name} not found within the time limit",
                entity=encounter.name,
                timeout_seconds=timeout,
            ) from exc

    def _kill_boss(self, encounter: Encounter) -> CombatResult:
        boss = self.wait_for(encounter)
        logger.info(f"{encounter.name} detected, attacking", target_id=boss.unit_id)

        approach = self._settings.izual_approach_distance if encounter.approach else None
        return self._combat.run(
            Engagement(
                selector=by_name(encounter.npc, encounter.monster_type),
                boss=True,
                approach_distance=approach,
                label=encounter.name,
            )
        )

    # -------------------------------------------------------------------------
    # Other encounters
    # -------------------------------------------------------------------------

    def _kill_named(self, encounter: Encounter) -> CombatResult:
        skips = tuple(self._settings.pindleskin_skip_on_immunities) if encounter.configurable_skips else ()
        return self._combat.kill_monster_sequence(
            by_name(encounter.npc, encounter.monster_type),
            skips,
            label=encounter.name,
        )

    def _kill_council(self) -> CombatResult:
        return self._combat.kill_monster_sequence(
            nearest_of(COUNCIL_MEMBERS, self._context.pathfinder),
            label="council",
        )

    def _kill_ancients(self) -> CombatResult:
        world = self._context.snapshots.get_snapshot()
        arena = Position(x=ANCIENTS_ARENA[0], y=ANCIENTS_ARENA[1])

        iterations = 0
        attacks = 0
        result = CombatResult(outcome=CombatOutcome.NO_TARGET)
        seen: set[str] = set()
        for elite in world.enemies(elite_only=True):
            if elite.name in seen:
                continue
            ancient = world.find_one(elite.name, MonsterType.SUPER_UNIQUE)
            if ancient is None:
                continue
            seen.add(elite.name)

            try:
                self._context.executor.move_to(arena)
            except ActionFailedError as exc:
                logger.warning("Could not reach the Ancients arena", error=exc.message)

            result = self._combat.kill_monster_by_name(ancient.name, MonsterType.SUPER_UNIQUE)
            iterations += result.iterations
            attacks += result.attacks

        return CombatResult(
            outcome=result.outcome,
            target_id=result.target_id,
            iterations=iterations,
            attacks=attacks,
        )


__all__ = [
    "EncounterKind",
    "Encounter",
    "ENCOUNTERS",
    "get_encounter",
    "EncounterRunner",
]
