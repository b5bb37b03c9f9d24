"""Custom exception hierarchy for the Skirmish combat engine.

This module defines the exception hierarchy used across the engine. All
exceptions inherit from SkirmishError, enabling unified error handling at
the application boundary while preserving domain-specific context.

Gameplay requests (skill use, target confirmation, cancellation) never raise
during normal play; they return result objects instead. These exceptions
are reserved for invalid content, invalid configuration, and misuse of the
engine's internal APIs.

Example:
    >>> from skirmish.core.exceptions import CatalogLoadError
    >>> raise CatalogLoadError("Unknown skill id", source_file="content.json")
"""

from __future__ import annotations

from typing import Any


class SkirmishError(Exception):
    """Base exception for all Skirmish engine errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Game Engine Domain Exceptions
# =============================================================================


class GameEngineError(SkirmishError):
    """Base exception for all game engine errors.

    Raised when the engine's internal APIs are used in a way that violates
    its invariants (unknown characters, duplicate registrations, etc.).
    """


class InvalidGameStateError(GameEngineError):
    """Raised when an operation is attempted in the wrong turn phase."""

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid game state error with state context.

        Args:
            message: Human-readable error description.
            current_state: The current state identifier.
            expected_states: List of valid states that were expected.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if current_state:
            combined_details["current_state"] = current_state
        if expected_states:
            combined_details["expected_states"] = expected_states
        super().__init__(message, details=combined_details)


class CombatError(GameEngineError):
    """Raised when combat resolution encounters an unrecoverable error."""

    def __init__(
        self,
        message: str,
        *,
        character_id: str | None = None,
        turn_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize combat error with combat context.

        Args:
            message: Human-readable error description.
            character_id: Identifier of the character involved.
            turn_number: Turn number when the error occurred.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if character_id:
            combined_details["character_id"] = character_id
        if turn_number is not None:
            combined_details["turn_number"] = turn_number
        super().__init__(message, details=combined_details)


class TurnManagementError(GameEngineError):
    """Raised when turn sequencing or the step scheduler is misused."""


class TargetingError(GameEngineError):
    """Raised when targeting state is queried inconsistently."""


class EncounterError(GameEngineError):
    """Raised when encounter sequencing cannot proceed.

    Running out of encounters is not an error; it is signalled with the
    AllEncountersComplete event.
    """

    def __init__(
        self,
        message: str,
        *,
        encounter_name: str | None = None,
        step_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize encounter error with sequencing context.

        Args:
            message: Human-readable error description.
            encounter_name: Name of the encounter involved.
            step_index: Zero-based sequence step.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if encounter_name:
            combined_details["encounter_name"] = encounter_name
        if step_index is not None:
            combined_details["step_index"] = step_index
        super().__init__(message, details=combined_details)


# =============================================================================
# Content Domain Exceptions
# =============================================================================


class ContentError(SkirmishError):
    """Base exception for skill, character and encounter content errors."""


class CatalogLoadError(ContentError):
    """Raised when a content catalog cannot be loaded or resolved."""

    def __init__(
        self,
        message: str,
        *,
        source_file: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize catalog error with source file context.

        Args:
            message: Human-readable error description.
            source_file: Path to the catalog file that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if source_file:
            combined_details["source_file"] = source_file
        super().__init__(message, details=combined_details)


# =============================================================================
# Configuration & Validation Exceptions
# =============================================================================


class ConfigurationError(SkirmishError):
    """Raised when engine configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(SkirmishError):
    """Raised when content or input data fails validation."""

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


__all__ = [
    # Base exception
    "SkirmishError",
    # Game engine exceptions
    "GameEngineError",
    "InvalidGameStateError",
    "CombatError",
    "TurnManagementError",
    "TargetingError",
    "EncounterError",
    # Content exceptions
    "ContentError",
    "CatalogLoadError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
]
