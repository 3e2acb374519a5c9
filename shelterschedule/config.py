"""
Configuration management using Pydantic models loaded from YAML.
"""

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class SchedulingConfig(BaseModel):
    """Rules applied to weekly schedule requests."""
    past_window_months: int = 1
    future_window_years: int = 1
    require_monday: bool = True

    @field_validator("past_window_months", "future_window_years")
    @classmethod
    def validate_window(cls, value: int) -> int:
        """Ensure the accepted start-date window is not negative."""
        if value < 0:
            raise ValueError(f"Window size must not be negative, got {value}")
        return value


class ApiConfig(BaseModel):
    """Connection settings for the shelter backend REST API."""
    base_url: str = "http://localhost:5000/api"
    token: str = ""
    timeout_seconds: int = 30

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: int) -> int:
        """Ensure the request timeout is positive."""
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Lisbon"
    data_file: Optional[Path] = None
    log_level: str = "WARNING"
    scheduling: SchedulingConfig = Field(default_factory=SchedulingConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize the level name and reject unknown ones."""
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {value}")
        return level

    def get_log_level(self) -> int:
        return getattr(logging, self.log_level)

    def resolve_data_file(self, config_path: Path) -> Optional[Path]:
        """Resolve ``data_file`` relative to the config file's directory."""
        if self.data_file is None:
            return None
        if self.data_file.is_absolute():
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
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
