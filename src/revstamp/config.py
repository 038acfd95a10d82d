"""Configuration management for revstamp."""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .exceptions import ConfigError
from .formatting.placeholders import FormatCatalogue

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".revstamp"
CONFIG_FILE_NAME = "config.json"


class Config(BaseModel):
    """Project settings for revision stamping."""

    format_catalogue: FormatCatalogue = Field(
        default=FormatCatalogue.CURRENT,
        description="Placeholder catalogue version: 'current' renders {bmin} as "
        "base28 20-minute units, 'legacy' as base36 10-minute units",
    )
    default_format: Optional[str] = Field(
        default=None,
        description="Format used when none is given on the command line",
    )
    tag_match: Optional[str] = Field(
        default=None,
        description="Glob pattern of tag names to consider (None accepts all, "
        "an empty string disables tag lookup)",
    )
    remove_tag_v: bool = Field(
        default=False,
        description="Strip a leading 'v' followed by a digit from tag names",
    )
    git_timeout: float = Field(
        default=10.0, description="Timeout for each git command in seconds"
    )

    @field_validator("git_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("git_timeout must be positive")
        return v


class ConfigManager:
    """Manages configuration loading and saving."""

    DEFAULT_CONFIG_PATH = Path(CONFIG_DIR_NAME) / CONFIG_FILE_NAME

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: Optional[Config] = None

    def load(self) -> Config:
        """Load configuration from file, or defaults if there is none."""
        if self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                self._config = Config(**data)
            except Exception as e:
                raise ConfigError(f"Failed to load config from {self.config_path}: {e}")
            logger.debug("Loaded configuration from %s", self.config_path)
        else:
            logger.debug("No configuration at %s, using defaults", self.config_path)
            self._config = Config()

        return self._config

    def save(self, config: Optional[Config] = None) -> None:
        """Save configuration to file."""
        if config is None:
            config = self._config

        if config is None:
            raise ConfigError("No configuration to save")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(config.model_dump(mode="json"), f, indent=2)

    @staticmethod
    def find_config_path(start_dir: Optional[Path] = None) -> Optional[Path]:
        """Find .revstamp/config.json by walking up the directory tree.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Path to config.json if found, None otherwise
        """
        current = (start_dir or Path.cwd()).resolve()
        for path in [current] + list(current.parents):
            config_path = path / CONFIG_DIR_NAME / CONFIG_FILE_NAME
            if config_path.exists():
                return config_path

        return None

    @classmethod
    def create_with_backtrack(cls, start_dir: Optional[Path] = None) -> "ConfigManager":
        """Create ConfigManager by finding config through directory backtracking.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            ConfigManager instance with found config path or default path
        """
        config_path = cls.find_config_path(start_dir)
        if config_path is None:
            start = start_dir or Path.cwd()
            config_path = start / CONFIG_DIR_NAME / CONFIG_FILE_NAME
        return cls(config_path)
