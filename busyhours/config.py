"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.models import WorkloadPolicy


class WorkloadConfig(BaseModel):
    """Rules for buffering and collapsing busy hours."""
    buffer_minutes: int = 30
    full_day_threshold_hours: int = 8
    full_week_busy_days: int = 5
    lookahead_years: int = 1

    @field_validator("buffer_minutes")
    @classmethod
    def validate_buffer(cls, value: int) -> int:
        """Ensure the buffer is positive."""
        if value <= 0:
            raise ValueError("buffer_minutes must be greater than zero")
        return value

    @field_validator("full_day_threshold_hours")
    @classmethod
    def validate_threshold(cls, v: int) -> int:
        """Validate the threshold fits into a day."""
        if not 1 <= v <= 24:
            raise ValueError(f"full_day_threshold_hours must be between 1 and 24, got {v}")
        return v

    @field_validator("full_week_busy_days")
    @classmethod
    def validate_week_days(cls, v: int) -> int:
        if not 1 <= v <= 7:
            raise ValueError(f"full_week_busy_days must be between 1 and 7, got {v}")
        return v

    @field_validator("lookahead_years")
    @classmethod
    def validate_lookahead(cls, v: int) -> int:
        if v < 1:
            raise ValueError("lookahead_years must be at least 1")
        return v


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Warsaw"
    holiday_locale: str = "PL"
    excluded_easter_offsets: List[int] = Field(default_factory=lambda: [49])  # Pentecost Sunday
    data_file: Optional[Path] = None
    workload: WorkloadConfig = Field(default_factory=WorkloadConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("holiday_locale")
    @classmethod
    def validate_locale(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("holiday_locale must not be empty")
        return value.strip().upper()

    def build_policy(self) -> WorkloadPolicy:
        """Domain policy derived from the workload settings."""
        return WorkloadPolicy(
            buffer_minutes=self.workload.buffer_minutes,
            full_day_threshold_hours=self.workload.full_day_threshold_hours,
            full_week_busy_days=self.workload.full_week_busy_days,
            timezone=self.timezone,
        )

    def resolve_data_file(self, config_path: Path) -> Optional[Path]:
        """Resolve a relative data file against the config file directory."""
        if self.data_file is None or self.data_file.is_absolute():
            return self.data_file
        return config_path.parent / self.data_file

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of busyhours/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
