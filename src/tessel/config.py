"""Runtime configuration."""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TesselSettings(BaseSettings):
    """Settings for command-line runs.

    Loads from environment variables automatically:
        TESSEL_DEFAULT_TIMEOUT, TESSEL_VERBOSITY, TESSEL_LOG_LEVEL,
        TESSEL_TRACE, TESSEL_TRACE_OUTPUT

    Command-line flags take precedence.
    """

    default_timeout: float | None = Field(
        default=None, description="Seconds after which a test without its own timeout fails"
    )
    verbosity: int = Field(default=0, description="-1 quiet, 0 compact, 1 or more verbose")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Level for the tessel loggers"
    )
    trace: bool = Field(default=False, description="Write OpenTelemetry spans for every test")
    trace_output: Path = Field(default=Path("traces.jsonl"), description="Where spans are written")

    model_config = SettingsConfigDict(
        env_prefix="TESSEL_",
        extra="ignore",
    )

    @field_validator("default_timeout")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v
