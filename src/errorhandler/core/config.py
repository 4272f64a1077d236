"""Configuration models for errorhandler.

Defines Pydantic models for the retry executor, the error reporter and
logging. The models can be built in code or loaded from YAML:

    backoff:
      max_retries: 3
      throw_on_failure: true
    reporter:
      addon_name: Mail Merge
      version: "52"
    logging:
      level: WARNING
      format: json
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from errorhandler.core.constants import (
    DEFAULT_DEEP_LINK_TEMPLATE,
    DEFAULT_MAX_RETRIES,
    MAX_RETRIES,
    MIN_RETRIES,
)


class BackoffOptions(BaseModel):
    """Options for one exponential backoff call."""

    throw_on_failure: bool = Field(
        default=False,
        description="Raise the ReportedError instead of returning it",
    )
    do_not_log_known_errors: bool = Field(
        default=False,
        description="Skip emitting terminal failures whose message was normalized",
    )
    verbose: bool = Field(
        default=False,
        description="Log a warning when a call succeeds after one or more retries",
    )
    max_retries: int = Field(
        default=DEFAULT_MAX_RETRIES,
        description=f"Retries after the first attempt ({MIN_RETRIES}-{MAX_RETRIES}); "
        f"out-of-range values fall back to {DEFAULT_MAX_RETRIES}",
    )

    @field_validator("max_retries", mode="before")
    @classmethod
    def _default_missing_max_retries(cls, v: Any) -> Any:
        if v is None:
            return DEFAULT_MAX_RETRIES
        return v

    @field_validator("max_retries", mode="after")
    @classmethod
    def _clamp_max_retries(cls, v: int) -> int:
        """Replace out-of-range retry counts with the default.

        Runs after coercion so ``"10"`` and ``7.0`` are range-checked too.
        """
        if not MIN_RETRIES <= v <= MAX_RETRIES:
            return DEFAULT_MAX_RETRIES
        return v


class ReporterConfig(BaseModel):
    """Host-level settings for the error reporter."""

    addon_name: str | None = Field(
        default=None,
        description="Project name the host appends to stack file names; stripped from stacks",
    )
    version: str | None = Field(
        default=None,
        description="Deployed version, added to every record's custom params when set",
    )
    deep_link_template: str = Field(
        default=DEFAULT_DEEP_LINK_TEMPLATE,
        description="Link to the failing line, formatted with script_id, file and line",
    )

    @field_validator("deep_link_template")
    @classmethod
    def _check_placeholders(cls, v: str) -> str:
        for placeholder in ("{file}", "{line}"):
            if placeholder not in v:
                raise ValueError(f"deep_link_template must contain {placeholder}")
        return v


class LogConfig(BaseModel):
    """Configuration for structured logging.

    Controls log level, output format, and file rotation settings.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum log level to capture",
    )
    format: Literal["json", "console", "both"] = Field(
        default="console",
        description="Output format: json for structured, console for human-readable, "
        "both for console to stderr and JSON to file",
    )
    file_path: Path | None = Field(
        default=None,
        description="Path for log file output (required if format='both')",
    )
    max_file_size_mb: int = Field(
        default=50,
        gt=0,
        le=1000,
        description="Maximum log file size before rotation (MB)",
    )
    backup_count: int = Field(
        default=5,
        ge=0,
        le=100,
        description="Number of rotated log files to keep",
    )
    include_timestamps: bool = Field(
        default=True,
        description="Include ISO8601 UTC timestamps in log entries",
    )

    @model_validator(mode="after")
    def _check_file_path_required(self) -> LogConfig:
        """Validate that file_path is set when format requires file output."""
        if self.format == "both" and self.file_path is None:
            raise ValueError(
                f"file_path is required when format='{self.format}'"
            )
        return self


class ErrorHandlerConfig(BaseModel):
    """Top-level configuration grouping backoff, reporter and logging settings."""

    backoff: BackoffOptions = Field(default_factory=BackoffOptions)
    reporter: ReporterConfig = Field(default_factory=ReporterConfig)
    logging: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> ErrorHandlerConfig:
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})

    @classmethod
    def from_yaml_string(cls, yaml_str: str) -> ErrorHandlerConfig:
        """Load configuration from a YAML string."""
        data = yaml.safe_load(yaml_str)
        return cls.model_validate(data or {})

    def configure_logging(self) -> None:
        """Apply the logging section via configure_logging()."""
        from errorhandler.core.logging import configure_logging

        configure_logging(**self.logging.model_dump())
