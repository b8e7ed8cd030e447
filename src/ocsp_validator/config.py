"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables (prefix OCSP_)
  - Fall back to a .env file
  - Validate types and constraints when the settings object is built

env_nested_delimiter="__" maps OCSP_FRESHNESS__DEFAULT → freshness.default.
Durations accept ISO 8601 strings ("P7D", "PT1H") or a number of seconds.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ocsp_validator.domain.context import TimeBasedContext, ValidationContext, ValidatorContext

# Resolve the .env file relative to the project root (three levels above this file),
# so settings load correctly regardless of the working directory at runtime.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class FreshnessSettings(BaseModel):
    """
    How old a response's "this update" may be relative to the validation date.

    Resolution order for a context:
      1. per_validator[context.validator], if present
      2. historical, when the context is HISTORICAL
      3. default
    """

    default: timedelta = Field(
        default=timedelta(days=30),
        description="Freshness window for validations at the present time",
    )
    historical: timedelta = Field(
        default=timedelta(minutes=1),
        description="Freshness window for validations at a past instant",
    )
    per_validator: dict[ValidatorContext, timedelta] = Field(
        default_factory=dict,
        description="Overrides keyed by validator role",
    )

    @field_validator("default", "historical")
    @classmethod
    def validate_positive(cls, value: timedelta) -> timedelta:
        """Reject zero or negative windows."""
        if value <= timedelta(0):
            raise ValueError(f"Freshness window must be positive, got {value}")
        return value

    @field_validator("per_validator")
    @classmethod
    def validate_overrides(cls, value: dict[ValidatorContext, timedelta]) -> dict[ValidatorContext, timedelta]:
        for validator, window in value.items():
            if window <= timedelta(0):
                raise ValueError(f"Freshness window for {validator.value} must be positive, got {window}")
        return value

    def resolve(self, context: ValidationContext) -> timedelta:
        if context.validator in self.per_validator:
            return self.per_validator[context.validator]
        if context.time_based is TimeBasedContext.HISTORICAL:
            return self.historical
        return self.default


class AppSettings(BaseSettings):
    """
    Root settings for the OCSP validation engine.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="OCSP_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    freshness: FreshnessSettings = Field(default_factory=lambda: FreshnessSettings())
    log_level: str = Field(default="INFO")

    def freshness_for(self, context: ValidationContext) -> timedelta:
        """Return the freshness window that applies to `context`."""
        return self.freshness.resolve(context)
