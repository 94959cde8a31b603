"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

VALID_OUTPUT_FORMATS = ("table", "json", "markdown", "text")


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".bodytrend"


def _default_db_path() -> Path:
    """Return the default database path."""
    return _default_config_dir() / "bodytrend.db"


@dataclass
class DatabaseConfig:
    """Database configuration."""

    path: Path = field(default_factory=_default_db_path)


@dataclass
class DefaultsConfig:
    """Default values for CLI output."""

    output_format: str = "table"  # "table", "json", "markdown", "text"
    history_limit: int = 30
    recent_points: int = 30  # points shown in the status chart series

    def __post_init__(self) -> None:
        if self.output_format not in VALID_OUTPUT_FORMATS:
            raise ValueError(
                f"output_format must be one of {VALID_OUTPUT_FORMATS}, got '{self.output_format}'"
            )
        if self.history_limit < 1:
            raise ValueError(f"history_limit must be at least 1, got {self.history_limit}")
        if self.recent_points < 0:
            raise ValueError(f"recent_points must be at least 0, got {self.recent_points}")


@dataclass
class Settings:
    """Main application settings.

    The tracking parameters (smoothing factor, energy per kg, display unit)
    are not here: they live in the database next to the weigh-ins.
    """

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.bodytrend/config.yaml

        Returns:
            Settings instance
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings = cls()

        # Parse database config
        if "database" in data:
            db_data = data["database"] or {}
            if "path" in db_data:
                settings.database.path = Path(db_data["path"]).expanduser()

        # Parse defaults
        if "defaults" in data:
            def_data = data["defaults"] or {}
            settings.defaults = DefaultsConfig(
                output_format=def_data.get("output_format", settings.defaults.output_format),
                history_limit=int(def_data.get("history_limit", settings.defaults.history_limit)),
                recent_points=int(def_data.get("recent_points", settings.defaults.recent_points)),
            )

        return settings

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.bodytrend/config.yaml
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "database": {
                "path": str(self.database.path),
            },
            "defaults": {
                "output_format": self.defaults.output_format,
                "history_limit": self.defaults.history_limit,
                "recent_points": self.defaults.recent_points,
            },
        }

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
