"""Configuration management for the action RPG autopilot.

This module provides centralized configuration management using pydantic-settings,
supporting environment variables, .env files, and runtime configuration overrides.
Every tunable distance, threshold and timing used by the combat loop lives here.

Example:
    >>> from arpg_pilot.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.safety.danger_distance
    4

Environment Variables:
    ARPG_PILOT_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    ARPG_PILOT_COMBAT_TICK_INTERVAL_SECONDS: Pause between combat iterations
    ARPG_PILOT_SAFETY_DANGER_DISTANCE: Radius that triggers repositioning
    ARPG_PILOT_ENCOUNTER_POLL_INTERVAL_SECONDS: Boss appearance polling interval
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from arpg_pilot.core.exceptions import ConfigurationError
from arpg_pilot.models.enums import StatKind


class CombatSettings(BaseSettings):
    """Configuration for the per-archetype combat loops.

    Attributes:
        tick_interval_seconds: Pause between two loop iterations.
        melee_max_attack_loops: Iterations on one target before the melee loop gives up.
        caster_max_attack_loops: Successful casts after which the caster re-arms Static Field.
        caster_max_iterations: Iterations on one target before the caster loop gives up.
        boss_max_iterations: Iteration cap for boss engagements.
        priority_search_radius: Radius scanned for priority monsters.
        caster_min_distance: Lower bound of the caster engagement band.
        caster_max_distance: Upper bound of the caster engagement band.
        static_min_distance: Lower bound of the Static Field band.
        static_max_distance: Upper bound of the Static Field band.
        static_field_threshold: Life percentage above which Static Field opens an engagement.
        boss_static_threshold: Life percentage a boss is drained to before lightning.
        reposition_cooldown_seconds: Minimum time between two reposition attempts.
        random_movement_pause_seconds: Pause after a hit-and-move primitive.
        boss_random_movement_pause_seconds: Same pause for boss engagements.
        death_pause_seconds: Pause before reporting player death.
    """

    model_config = SettingsConfigDict(
        env_prefix="ARPG_PILOT_COMBAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    tick_interval_seconds: float = Field(default=0.3, ge=0, le=5, description="Loop pause")
    melee_max_attack_loops: int = Field(default=10, ge=1, description="Melee stall cap")
    caster_max_attack_loops: int = Field(default=40, ge=1, description="Static Field re-arm cap")
    caster_max_iterations: int = Field(default=200, ge=1, description="Caster stall cap")
    boss_max_iterations: int = Field(default=500, ge=1, description="Boss stall cap")
    priority_search_radius: int = Field(default=15, ge=0, description="Priority scan radius")
    caster_min_distance: int = Field(default=10, ge=0)
    caster_max_distance: int = Field(default=20, ge=0)
    static_min_distance: int = Field(default=1, ge=0)
    static_max_distance: int = Field(default=3, ge=0)
    static_field_threshold: float = Field(default=67.0, ge=0, le=100)
    boss_static_threshold: float = Field(default=65.0, ge=0, le=100)
    reposition_cooldown_seconds: float = Field(default=1.0, ge=0)
    random_movement_pause_seconds: float = Field(default=0.15, ge=0)
    boss_random_movement_pause_seconds: float = Field(default=0.25, ge=0)
    death_pause_seconds: float = Field(default=0.5, ge=0)

    @model_validator(mode="after")
    def validate_bands(self) -> "CombatSettings":
        """Ensure every distance band is ordered.

        Raises:
            ConfigurationError: If a band minimum exceeds its maximum.
        """
        if self.caster_min_distance > self.caster_max_distance:
            raise ConfigurationError(
                f"caster_min_distance ({self.caster_min_distance}) must not exceed "
                f"caster_max_distance ({self.caster_max_distance})",
                config_key="caster_min_distance",
            )
        if self.static_min_distance > self.static_max_distance:
            raise ConfigurationError(
                f"static_min_distance ({self.static_min_distance}) must not exceed "
                f"static_max_distance ({self.static_max_distance})",
                config_key="static_min_distance",
            )
        return self


class SafetySettings(BaseSettings):
    """Configuration for danger detection and safe-position search.

    Attributes:
        danger_distance: A living monster closer than this triggers repositioning.
        safe_distance: Length of the retreat vector and base of the ring radii.
        min_safe_monster_distance: Candidates closer than this to any monster are dropped.
        attack_range_min: Lower bound of the preferred distance to the target.
        attack_range_max: Upper bound of the preferred distance to the target.
        in_range_bonus: Attack-range score inside the band.
        safety_bonus: Flat bonus when the nearest monster is beyond the danger radius.
        grid_offset: Perturbation around the retreat point, in each axis.
        ring_offset: Perturbation around each ring point, in each axis.
        angle_step_degrees: Angular step of the ring sweep.
        radius_step: Radial step of the ring sweep.
        monster_distance_weight: Weight of the nearest-monster distance.
        attack_range_weight: Weight of the attack-range score.
        travel_distance_weight: Weight of the distance from the player.
    """

    model_config = SettingsConfigDict(
        env_prefix="ARPG_PILOT_SAFETY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    danger_distance: int = Field(default=4, ge=0)
    safe_distance: int = Field(default=6, ge=1)
    min_safe_monster_distance: int = Field(default=2, ge=0)
    attack_range_min: int = Field(default=8, ge=0)
    attack_range_max: int = Field(default=16, ge=0)
    in_range_bonus: float = Field(default=10.0)
    safety_bonus: float = Field(default=5.0)
    grid_offset: int = Field(default=3, ge=0, le=10)
    ring_offset: int = Field(default=1, ge=0, le=5)
    angle_step_degrees: int = Field(default=5, ge=1, le=90)
    radius_step: int = Field(default=2, ge=1)
    monster_distance_weight: float = Field(default=3.0)
    attack_range_weight: float = Field(default=2.0)
    travel_distance_weight: float = Field(default=0.5)

    @model_validator(mode="after")
    def validate_distances(self) -> "SafetySettings":
        """Ensure the safety radii are consistent.

        Raises:
            ConfigurationError: If the bands are inverted.
        """
        if self.attack_range_min > self.attack_range_max:
            raise ConfigurationError(
                f"attack_range_min ({self.attack_range_min}) must not exceed "
                f"attack_range_max ({self.attack_range_max})",
                config_key="attack_range_min",
            )
        if self.min_safe_monster_distance >= self.safe_distance:
            raise ConfigurationError(
                f"min_safe_monster_distance ({self.min_safe_monster_distance}) must be less "
                f"than safe_distance ({self.safe_distance})",
                config_key="min_safe_monster_distance",
            )
        return self

    @property
    def attack_range_midpoint(self) -> float:
        """Midpoint of the preferred attack band."""
        return (self.attack_range_min + self.attack_range_max) / 2.0


def _default_boss_timeouts() -> dict[str, float]:
    return {
        "andariel": 160.0,
        "duriel": 120.0,
        "mephisto": 160.0,
        "izual": 120.0,
        "diablo": 120.0,
        "baal": 600.0,
    }


class EncounterSettings(BaseSettings):
    """Configuration for boss and objective encounter scripts.

    Attributes:
        poll_interval_seconds: Interval between two appearance checks.
        default_timeout_seconds: Appearance timeout for encounters without an entry.
        boss_timeouts: Appearance timeout per encounter name.
        izual_approach_distance: Melee builds close in to this distance before attacking.
        pindleskin_skip_on_immunities: Resistances that make Pindleskin not worth fighting.
    """

    model_config = SettingsConfigDict(
        env_prefix="ARPG_PILOT_ENCOUNTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    poll_interval_seconds: float = Field(default=0.5, ge=0, le=10)
    default_timeout_seconds: float = Field(default=120.0, ge=0)
    boss_timeouts: dict[str, float] = Field(default_factory=_default_boss_timeouts)
    izual_approach_distance: int = Field(default=7, ge=1)
    pindleskin_skip_on_immunities: list[StatKind] = Field(default_factory=list)

    def timeout_for(self, encounter: str) -> float:
        """Return the appearance timeout for an encounter name."""
        return self.boss_timeouts.get(encounter, self.default_timeout_seconds)


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name tagged on log entries.
        debug: Log at DEBUG level regardless of ``log_level``.
        log_level: Application logging level.
        json_logs: Render logs as JSON.
        combat: Combat loop settings.
        safety: Safety evaluator settings.
        encounter: Encounter script settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="ARPG_PILOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="arpg_pilot",
        description="Application name tagged on log entries",
    )
    debug: bool = Field(default=False, description="Log at DEBUG level regardless of log_level")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    combat: CombatSettings = Field(default_factory=CombatSettings)
    safety: SafetySettings = Field(default_factory=SafetySettings)
    encounter: EncounterSettings = Field(default_factory=EncounterSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If required configuration is missing or invalid.
    """
    try:
        return Settings()
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "CombatSettings",
    "SafetySettings",
    "EncounterSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
