"""
YAML settings loader.

Loads runtime settings from YAML files with:
- Environment variable substitution
- Type coercion and validation
- Default values
"""

import os
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import structlog
import yaml

from iaeste_reports.core.http_client import DEFAULT_USER_AGENT

logger = structlog.get_logger(__name__)

# YAML section -> settings attributes read from it
SECTIONS = {
    "server": ("host", "port", "refresh_interval_hours"),
    "scraper": ("country_concurrency", "field_concurrency", "entry_concurrency"),
    "http": ("timeout", "max_attempts", "backoff_base_ms", "requests_per_second", "user_agent"),
}


@dataclass(frozen=True)
class Settings:
    """Runtime settings of the scraper and the API server."""

    # Server
    host: str = "0.0.0.0"
    port: int = 6969
    refresh_interval_hours: float = 12.0

    # Fan-out limits
    country_concurrency: int = 4
    field_concurrency: int = 32
    entry_concurrency: int = 8

    # HTTP
    timeout: float = 30.0
    max_attempts: int = 5
    backoff_base_ms: float = 50_000.0
    requests_per_second: float = 0.0  # 0 disables rate limiting
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """
        Create from a parsed YAML document.

        Raises:
            ValueError: If a value cannot be converted or is out of range
        """
        values = {}
        for section, names in SECTIONS.items():
            section_data = data.get(section) or {}
            for name in names:
                if section_data.get(name) is not None:
                    values[name] = section_data[name]

        defaults = cls()
        converted = {}
        for f in fields(cls):
            if f.name not in values:
                continue
            kind = type(getattr(defaults, f.name))
            try:
                converted[f.name] = kind(values[f.name])
            except (TypeError, ValueError):
                raise ValueError(f"Invalid value for {f.name}: {values[f.name]!r}") from None

        settings = cls(**converted)
        settings.validate()
        return settings

    def validate(self) -> None:
        for name in ("country_concurrency", "field_concurrency", "entry_concurrency", "max_attempts", "port"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be positive")
        if self.refresh_interval_hours <= 0:
            raise ValueError("refresh_interval_hours must be positive")

    @property
    def refresh_interval_seconds(self) -> float:
        return self.refresh_interval_hours * 3600

    @property
    def concurrency_limits(self) -> dict[str, int]:
        """Keyword arguments for ReviewAggregator."""
        return {
            "country_concurrency": self.country_concurrency,
            "field_concurrency": self.field_concurrency,
            "entry_concurrency": self.entry_concurrency,
        }


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variables in text.

    Supports formats:
    - ${VAR_NAME} - empty string (with a warning) if missing
    - ${VAR_NAME:-default} - optional with default
    """
    def replace(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        value = os.getenv(var_expr)
        if value is None:
            logger.warning("env_var_not_set", var=var_expr)
            return ""
        return value

    return re.sub(r"\$\{([^}]+)\}", replace, text)


class ConfigLoader:
    """Loads YAML config files from a directory."""

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
                       (defaults to package config directory)
        """
        self.config_dir = Path(config_dir) if config_dir else Path(__file__).parent

    def load_file(self, filename: str) -> dict:
        """
        Load YAML config file with environment substitution.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        filepath = self.config_dir / filename

        if not filepath.exists():
            raise FileNotFoundError(f"Config file not found: {filepath}")

        logger.info("loading_config", file=str(filepath))

        with open(filepath, "r", encoding="utf-8") as f:
            content = substitute_env_vars(f.read())

        return yaml.safe_load(content) or {}

    def load_settings(self, filename: str = "settings.yml") -> Settings:
        return Settings.from_dict(self.load_file(filename))


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Convenience function to load settings.

    Args:
        config_path: Optional path to a settings YAML file
                     (defaults to the packaged settings.yml)
    """
    if config_path:
        path = Path(config_path)
        return ConfigLoader(str(path.parent)).load_settings(path.name)
    return ConfigLoader().load_settings()
