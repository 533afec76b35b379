"""Core services shared by the models and the engine.

Settings are grouped per concern (combat, safety, encounters) and read
from ``ARPG_PILOT_*`` environment variables. Logging is structlog with
engagement-scoped context. Exceptions separate terminal conditions
(player death, encounter timeout) from the non-fatal action failures
raised by input collaborators.
"""

from __future__ import annotations

from arpg_pilot.core.config import (
    CombatSettings,
    EncounterSettings,
    SafetySettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from arpg_pilot.core.exceptions import (
    ActionFailedError,
    ArpgPilotError,
    CombatError,
    ConfigurationError,
    EncounterTimeoutError,
    GameEngineError,
    PlayerDiedError,
    ValidationError,
)
from arpg_pilot.core.logging import clear_context, configure_logging, get_logger, log_context


__all__ = [
    # Exceptions
    "ArpgPilotError",
    "GameEngineError",
    "CombatError",
    "PlayerDiedError",
    "EncounterTimeoutError",
    "ActionFailedError",
    "ConfigurationError",
    "ValidationError",
    # Configuration
    "CombatSettings",
    "SafetySettings",
    "EncounterSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "log_context",
    "clear_context",
]
