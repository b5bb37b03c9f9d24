"""Configuration management for the Skirmish combat engine.

This module provides centralized configuration using pydantic-settings,
supporting environment variables, .env files, and runtime overrides.

Example:
    >>> from skirmish.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.timing.enemy_move_delay
    0.3

Environment Variables:
    SKIRMISH_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    SKIRMISH_TIMING_ENEMY_MOVE_DELAY: Seconds before each enemy move
    SKIRMISH_TIMING_ENEMY_TURN_END_DELAY: Seconds after the last enemy move
    SKIRMISH_RULES_STAMINA_PER_ACTION: Stamina points granted after acting
    SKIRMISH_RULES_RNG_SEED: Seed for reproducible sessions
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from skirmish.core.constants import (
    DEFAULT_ENCOUNTER_COMPLETE_DELAY,
    DEFAULT_ENEMY_MOVE_DELAY,
    DEFAULT_ENEMY_TURN_END_DELAY,
    DEFAULT_SKILL_RESOLUTION_DELAY,
    DEFAULT_STAMINA_PER_ACTION,
    MIN_AI_WEIGHT,
    UNIFORM_FALLBACK_THRESHOLD,
)
from skirmish.core.exceptions import ConfigurationError


class TimingSettings(BaseSettings):
    """Delays used by the step scheduler.

    Attributes:
        enemy_move_delay: Seconds to wait before each enemy executes its move.
        enemy_turn_end_delay: Seconds to wait after the enemy queue completes.
        skill_resolution_delay: Seconds between a player skill's effects and
            the caster being marked as acted.
        encounter_complete_delay: Seconds between clearing an encounter and
            the between-encounter interlude.
    """

    model_config = SettingsConfigDict(
        env_prefix="SKIRMISH_TIMING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enemy_move_delay: float = Field(
        default=DEFAULT_ENEMY_MOVE_DELAY,
        ge=0,
        description="Delay before each enemy move",
    )
    enemy_turn_end_delay: float = Field(
        default=DEFAULT_ENEMY_TURN_END_DELAY,
        ge=0,
        description="Delay after the enemy queue completes",
    )
    skill_resolution_delay: float = Field(
        default=DEFAULT_SKILL_RESOLUTION_DELAY,
        ge=0,
        description="Settle time after a player skill resolves",
    )
    encounter_complete_delay: float = Field(
        default=DEFAULT_ENCOUNTER_COMPLETE_DELAY,
        ge=0,
        description="Delay before the interlude after an encounter is cleared",
    )


class RulesSettings(BaseSettings):
    """Tunable combat rules.

    Attributes:
        stamina_per_action: Points distributed to a player's skills after acting.
        min_ai_weight: Floor applied to every skill's AI weight.
        uniform_fallback_threshold: Total weight at or below which the enemy
            planner picks uniformly.
        rng_seed: Optional seed for reproducible sessions.
    """

    model_config = SettingsConfigDict(
        env_prefix="SKIRMISH_RULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    stamina_per_action: int = Field(
        default=DEFAULT_STAMINA_PER_ACTION,
        ge=0,
        description="Stamina distributed after a player acts",
    )
    min_ai_weight: float = Field(
        default=MIN_AI_WEIGHT,
        description="Floor for AI skill weights",
    )
    uniform_fallback_threshold: float = Field(
        default=UNIFORM_FALLBACK_THRESHOLD,
        ge=0,
        description="Total weight below which selection is uniform",
    )
    rng_seed: int | None = Field(
        default=None,
        description="Seed for the session random number generator",
    )

    @model_validator(mode="after")
    def validate_min_ai_weight(self) -> "RulesSettings":
        """Ensure the weight floor keeps every skill selectable.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If min_ai_weight is not positive.
        """
        if self.min_ai_weight <= 0:
            raise ConfigurationError(
                f"min_ai_weight ({self.min_ai_weight}) must be greater than 0",
                config_key="min_ai_weight",
            )
        return self


class Settings(BaseSettings):
    """Main engine settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        debug: Enable debug mode.
        log_level: Engine logging level.
        timing: Scheduler delays.
        rules: Combat rule tunables.
    """

    model_config = SettingsConfigDict(
        env_prefix="SKIRMISH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="Skirmish Combat Engine",
        description="Application name",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    timing: TimingSettings = Field(default_factory=TimingSettings)
    rules: RulesSettings = Field(default_factory=RulesSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the engine settings singleton.

    Returns:
        The cached Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load engine settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "TimingSettings",
    "RulesSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
