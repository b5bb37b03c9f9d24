"""Core module providing configuration, logging, and base exceptions.

This module serves as the foundation for the Skirmish combat engine,
providing the infrastructure used by the models and the engine.

Exports:
    Exceptions:
        SkirmishError: Base exception for all engine errors.
        ConfigurationError: Configuration-related errors.
        ValidationError: Data validation errors.

    Configuration:
        Settings: Main engine settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up engine logging.
        configure_logging_from_settings: Set up logging from Settings.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
        unbind_context: Remove keys from logging context.
"""

from __future__ import annotations

from skirmish.core.config import (
    RulesSettings,
    Settings,
    TimingSettings,
    clear_settings_cache,
    get_settings,
)
from skirmish.core.exceptions import (
    CatalogLoadError,
    CombatError,
    ConfigurationError,
    ContentError,
    EncounterError,
    GameEngineError,
    InvalidGameStateError,
    SkirmishError,
    TargetingError,
    TurnManagementError,
    ValidationError,
)
from skirmish.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
    unbind_context,
)


__all__ = [
    # Base exception
    "SkirmishError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
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
    # Configuration
    "Settings",
    "TimingSettings",
    "RulesSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
    "unbind_context",
]
