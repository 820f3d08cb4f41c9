"""Configuration for problem details construction and response rendering."""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: str = Field(default="INFO", description="Log level for library output")
    scrub_fields: Sequence[str] = Field(
        default_factory=lambda: ["password", "token", "secret", "authorization"],
        description="Fields that should be redacted in logs",
    )


class ProblemSettings(BaseSettings):
    """Top-level settings, read from ``HTTP_API_PROBLEM_*`` environment variables."""

    type_url_template: str = Field(
        default="https://httpstatuses.com/{code}",
        description="Template used to derive a problem type URL from a status code",
    )
    fallback_status: int = Field(
        default=500,
        ge=100,
        le=599,
        description="Status used by response adapters when a problem carries none",
    )
    log_reserved_collisions: bool = Field(
        default=True,
        description="Emit a warning when an extension would shadow a reserved member",
    )
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(env_prefix="HTTP_API_PROBLEM_", env_nested_delimiter="__")

    @field_validator("type_url_template")
    @classmethod
    def _template_has_code(cls, value: str) -> str:
        if "{code}" not in value:
            raise ValueError("type_url_template must contain a '{code}' placeholder")
        return value


def load_settings() -> ProblemSettings:
    """Load settings from the environment."""
    try:
        return ProblemSettings()
    except ValidationError as err:
        raise RuntimeError(f"Invalid configuration: {err}") from err


@lru_cache(maxsize=1)
def get_settings() -> ProblemSettings:
    """Cached accessor used by library code."""
    return load_settings()
