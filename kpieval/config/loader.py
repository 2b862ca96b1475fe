"""Configuration file loader and writer."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import KpievalConfig

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Load and save kpieval configuration."""

    CONFIG_FILENAME = "kpieval.yaml"
    USER_CONFIG_DIR = Path.home() / ".kpieval"

    def __init__(self, project_path: Path | None = None):
        """Initialize config loader.

        Args:
            project_path: Project directory path. If None, uses current directory.
        """
        self._project_path = project_path or Path.cwd()

    @property
    def project_path(self) -> Path:
        return self._project_path

    def get_config_path(self) -> Path | None:
        """Find config file (project-level first, then user-level).

        Returns:
            Path to config file if found, None otherwise.
        """
        project_config = self._project_path / self.CONFIG_FILENAME
        if project_config.exists():
            return project_config

        user_config = self.USER_CONFIG_DIR / self.CONFIG_FILENAME
        if user_config.exists():
            return user_config

        return None

    def load(self) -> KpievalConfig:
        """Load configuration, returning defaults if no usable config exists."""
        config_path = self.get_config_path()
        if config_path is None:
            logger.debug("No config file found, using defaults")
            return KpievalConfig()

        try:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            config = KpievalConfig.model_validate(data)
        except (OSError, yaml.YAMLError, ValidationError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            return KpievalConfig()

        logger.info(f"Loaded config from: {config_path}")
        return config

    def save(self, config: KpievalConfig, user_level: bool = False) -> Path:
        """Save configuration to file.

        Args:
            config: Configuration to save.
            user_level: If True, save to user-level config directory.

        Returns:
            Path where config was saved.
        """
        if user_level:
            self.USER_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
            config_path = self.USER_CONFIG_DIR / self.CONFIG_FILENAME
        else:
            config_path = self._project_path / self.CONFIG_FILENAME

        data = config.model_dump(exclude_none=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                data,
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )

        logger.info(f"Saved config to: {config_path}")
        return config_path

    def database_path(self, config: KpievalConfig) -> str:
        """Resolve the configured database path against the project directory."""
        path = config.database.path
        if path == ":memory:" or Path(path).is_absolute():
            return path
        return str(self._project_path / path)


def load_config(project_path: Path | str | None = None) -> KpievalConfig:
    """Load configuration from project or user directory.

    Args:
        project_path: Project directory path. If None, uses current directory.

    Returns:
        KpievalConfig with loaded or default values.
    """
    path = Path(project_path) if project_path else None
    return ConfigLoader(path).load()
