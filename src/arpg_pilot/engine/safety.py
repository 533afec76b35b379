"""Danger detection and safe-position search for ranged builds.

The search is a greedy multi-candidate local search:

1. Candidates around the point reached by retreating ``safe_distance``
   away from the threat, perturbed on a small grid.
2. Candidates on concentric rings around the player, swept every few
   degrees, each perturbed on a smaller grid.
3. Candidates without line of sight to the target, or closer than the
   minimum safe distance to any living monster, are dropped.
4. Survivors are scored and the best one wins; ties keep generation order.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from arpg_pilot.core.config import SafetySettings
from arpg_pilot.core.logging import get_logger
from arpg_pilot.engine.interfaces import Pathfinder
from arpg_pilot.models import Monster, Position


logger = get_logger(__name__)


@dataclass(frozen=True)
class ScoredPosition:
    """Candidate position with its score and the distances it was scored on."""

    position: Position
    score: float
    nearest_monster_distance: float
    target_distance: int


class SafetyEvaluator:
    """Decides whether the player is in danger and where to retreat to.

    Args:
        settings: Safety radii and score weights.
        pathfinder: Walkability, line of sight and distance queries.
    """

    def __init__(self, settings: SafetySettings, pathfinder: Pathfinder) -> None:
        self._settings = settings
        self._pathfinder = pathfinder

    @property
    def settings(self) -> SafetySettings:
        return self._settings

    def needs_repositioning(
        self,
        player_position: Position,
        monsters: Sequence[Monster],
    ) -> tuple[bool, Monster | None]:
        """Check for a living monster inside the danger radius.

        Args:
            player_position: Current player position.
            monsters: Hostile monsters of the snapshot.

        Returns:
            Tuple of (in danger, first dangerous monster in scan order).
        """
        for monster in monsters:
            if not monster.is_alive:
                continue
            distance = self._pathfinder.distance(player_position, monster.position)
            if distance < self._settings.danger_distance:
                return True, monster
        return False, None

    def nearest_monster_distance(self, position: Position, monsters: Sequence[Monster]) -> float:
        """Distance to the closest living monster, infinity if there is none."""
        nearest = math.inf
        for monster in monsters:
            if not monster.is_alive:
                continue
            nearest = min(nearest, float(self._pathfinder.distance(position, monster.position)))
        return nearest

    # -------------------------------------------------------------------------
    # Candidate generation
    # -------------------------------------------------------------------------

    def _retreat_candidates(self, player_position: Position, threat: Position) -> Iterator[Position]:
        vector_x = player_position.x - threat.x
        vector_y = player_position.y - threat.y
        length = math.sqrt(vector_x * vector_x + vector_y * vector_y)
        if length <= 0:
            return

        safe_distance = self._settings.safe_distance
        retreat_x = int(vector_x / length * safe_distance)
        retreat_y = int(vector_y / length * safe_distance)
        spread = self._settings.grid_offset
        for offset_x in range(-spread, spread + 1):
            for offset_y in range(-spread, spread + 1):
                yield player_position.offset(retreat_x + offset_x, retreat_y + offset_y)

    def _ring_candidates(self, player_position: Position) -> Iterator[Position]:
        cfg = self._settings
        spread = cfg.ring_offset
        for angle in range(0, 360, cfg.angle_step_degrees):
            radians = math.radians(angle)
            for radius in range(cfg.min_safe_monster_distance, cfg.safe_distance + 6, cfg.radius_step):
                base_x = player_position.x + int(math.cos(radians) * radius)
                base_y = player_position.y + int(math.sin(radians) * radius)
                for offset_x in range(-spread, spread + 1):
                    for offset_y in range(-spread, spread + 1):
                        yield Position(x=base_x + offset_x, y=base_y + offset_y)

    def candidate_positions(self, player_position: Position, threat: Position) -> list[Position]:
        """Walkable candidates in generation order, retreat grid first."""
        candidates = [
            *self._retreat_candidates(player_position, threat),
            *self._ring_candidates(player_position),
        ]
        return [pos for pos in candidates if self._pathfinder.is_walkable(pos)]

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    def attack_range_score(self, target_distance: int) -> float:
        """Bonus inside the attack band, negative deviation from its midpoint outside."""
        cfg = self._settings
        if cfg.attack_range_min <= target_distance <= cfg.attack_range_max:
            return cfg.in_range_bonus
        return -abs(target_distance - cfg.attack_range_midpoint)

    def score(
        self,
        nearest_monster_distance: float,
        target_distance: int,
        travel_distance: int,
    ) -> float:
        cfg = self._settings
        score = (
            nearest_monster_distance * cfg.monster_distance_weight
            + self.attack_range_score(target_distance) * cfg.attack_range_weight
            - travel_distance * cfg.travel_distance_weight
        )
        if nearest_monster_distance > cfg.danger_distance:
            score += cfg.safety_bonus
        return score

    def rank_positions(
        self,
        player_position: Position,
        target: Monster,
        monsters: Sequence[Monster],
        threat: Monster | None = None,
    ) -> list[ScoredPosition]:
        """Score every surviving candidate, best first.

        Args:
            player_position: Current player position.
            target: Monster the player must keep attacking.
            monsters: Hostile monsters of the snapshot.
            threat: Monster to retreat from, defaults to the target.

        Returns:
            Scored candidates sorted by descending score.
        """
        threat_position = (threat or target).position
        scored: list[ScoredPosition] = []

        for position in self.candidate_positions(player_position, threat_position):
            if not self._pathfinder.line_of_sight(position, target.position):
                continue

            nearest = self.nearest_monster_distance(position, monsters)
            if nearest < self._settings.min_safe_monster_distance:
                continue

            target_distance = self._pathfinder.distance(position, target.position)
            travel_distance = self._pathfinder.distance(position, player_position)
            scored.append(
                ScoredPosition(
                    position=position,
                    score=self.score(nearest, target_distance, travel_distance),
                    nearest_monster_distance=nearest,
                    target_distance=target_distance,
                )
            )

        # Stable sort keeps generation order among equal scores
        scored.sort(key=lambda candidate: candidate.score, reverse=True)
        return scored

    def find_safe_position(
        self,
        player_position: Position,
        target: Monster,
        monsters: Sequence[Monster],
        threat: Monster | None = None,
    ) -> Position | None:
        """Pick the best safe position, or None if no candidate survives."""
        ranked = self.rank_positions(player_position, target, monsters, threat)
        if not ranked:
            return None

        best = ranked[0]
        logger.info(
            f"Found safe position with score {best.score:.2f}",
            position=(best.position.x, best.position.y),
            nearest_monster_distance=best.nearest_monster_distance,
            candidates=len(ranked),
        )
        return best.position


__all__ = [
    "ScoredPosition",
    "SafetyEvaluator",
]
