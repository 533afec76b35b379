"""Exception hierarchy of the autopilot.

Two families exist. GameEngineError covers what happens while fighting:
terminal conditions (player death, an encounter target that never shows
up), decision tables that cannot produce an attack, and the action
failures raised by input collaborators. ConfigurationError and
ValidationError cover bad settings and bad lookups.

Not every failure is an exception: a selector that finds nothing and a
target that stalls the loop are reported as combat results, not raised.

Example:
    >>> from arpg_pilot.core.exceptions import EncounterTimeoutError
    >>> raise EncounterTimeoutError("Andariel not found", entity="andariel", timeout_seconds=160)
"""

from __future__ import annotations

from typing import Any


def _with_context(details: dict[str, Any] | None, **context: Any) -> dict[str, Any]:
    """Merge keyword context into a details dict, dropping unset values."""
    merged = dict(details or {})
    merged.update({key: value for key, value in context.items() if value is not None})
    return merged


class ArpgPilotError(Exception):
    """Base exception for all autopilot errors.

    Attributes:
        message: Human-readable error description.
        details: Structured context, rendered after the message.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.details:
            return self.message
        rendered = ", ".join(f"{key}={value!r}" for key, value in self.details.items())
        return f"{self.message} [{rendered}]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Engine
# =============================================================================


class GameEngineError(ArpgPilotError):
    """Base exception for combat loop and encounter errors."""


class CombatError(GameEngineError):
    """An engagement cannot be carried out.

    Raised when a decision table yields no attack primitive for the
    target, or a primitive is missing the skill it must fire.
    """

    def __init__(
        self,
        message: str,
        *,
        target_id: int | None = None,
        iteration: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            details=_with_context(details, target_id=target_id, iteration=iteration),
        )


class PlayerDiedError(GameEngineError):
    """The player was detected dead during an engagement.

    Death is a distinguished terminal condition: the combat loop raises
    it after its death pause and nothing in the engine catches it.

    Args:
        message: Human-readable error description.
        target_id: Target engaged when death was detected.
        iterations: Iterations executed in the engagement.
        details: Additional context.
    """

    def __init__(
        self,
        message: str,
        *,
        target_id: int | None = None,
        iterations: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            details=_with_context(details, target_id=target_id, iterations=iterations),
        )


class EncounterTimeoutError(GameEngineError):
    """An awaited encounter target did not appear within its bound."""

    def __init__(
        self,
        message: str,
        *,
        entity: str | None = None,
        timeout_seconds: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            details=_with_context(details, entity=entity, timeout_seconds=timeout_seconds),
        )


class ActionFailedError(GameEngineError):
    """Input collaborators raise this when an attack or move is rejected.

    The combat loop logs it and carries on with the next iteration.
    """

    def __init__(
        self,
        message: str,
        *,
        action: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=_with_context(details, action=action))


# =============================================================================
# Settings and Lookups
# =============================================================================


class ConfigurationError(ArpgPilotError):
    """Settings are missing or inconsistent, e.g. an inverted distance band."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=_with_context(details, config_key=config_key))


class ValidationError(ArpgPilotError):
    """A lookup or table entry is invalid, e.g. an unknown encounter name."""

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            details=_with_context(details, field_name=field_name, invalid_value=invalid_value),
        )


__all__ = [
    "ArpgPilotError",
    "GameEngineError",
    "CombatError",
    "PlayerDiedError",
    "EncounterTimeoutError",
    "ActionFailedError",
    "ConfigurationError",
    "ValidationError",
]
