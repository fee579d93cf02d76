"""Configuration management for Annotation Lens."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# Default configuration file path
DEFAULT_CONFIG_PATH = Path("config.yaml")


@dataclass
class AppConfig:
    """
    Application configuration settings.

    Stores user preferences and application state.
    """

    last_image_directory: str = ""
    last_annotation_directory: str = ""
    image_root_directory: str = ""  # Restored as the image root on startup when it still exists
    preview_limit: int = 5000  # Characters of annotation text shown in the panel
    line_thickness: int = 2
    font_size: int = 10
    handle_radius: int = 6  # Resize handle radius in screen pixels
    min_box_size: int = 8  # Minimum width/height a resize may produce, natural pixels
    edit_mode_on_start: bool = True
    show_annotation_panel: bool = False
    max_recent_paths: int = 10  # Number of recent annotation files to remember (0 = disabled)
    recent_paths: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return {
            "lastImageDirectory": self.last_image_directory,
            "lastAnnotationDirectory": self.last_annotation_directory,
            "imageRootDirectory": self.image_root_directory,
            "previewLimit": self.preview_limit,
            "lineThickness": self.line_thickness,
            "fontSize": self.font_size,
            "handleRadius": self.handle_radius,
            "minBoxSize": self.min_box_size,
            "editModeOnStart": self.edit_mode_on_start,
            "showAnnotationPanel": self.show_annotation_panel,
            "maxRecentPaths": self.max_recent_paths,
            "recentPaths": self.recent_paths,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AppConfig:
        """Create config from dictionary."""
        return cls(
            last_image_directory=data.get("lastImageDirectory", ""),
            last_annotation_directory=data.get("lastAnnotationDirectory", ""),
            image_root_directory=data.get("imageRootDirectory", ""),
            preview_limit=data.get("previewLimit", 5000),
            line_thickness=data.get("lineThickness", 2),
            font_size=data.get("fontSize", 10),
            handle_radius=data.get("handleRadius", 6),
            min_box_size=data.get("minBoxSize", 8),
            edit_mode_on_start=data.get("editModeOnStart", True),
            show_annotation_panel=data.get("showAnnotationPanel", False),
            max_recent_paths=data.get("maxRecentPaths", 10),
            recent_paths=list(data.get("recentPaths", []) or []),
        )


class ConfigManager:
    """
    Manager for loading and saving application configuration.

    Handles YAML serialization and provides a clean interface
    for configuration access.
    """

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = config_path
        self._config: Optional[AppConfig] = None

    @property
    def config(self) -> AppConfig:
        """Get the current configuration, loading if necessary."""
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self) -> AppConfig:
        """
        Load configuration from file.

        Returns:
            AppConfig instance with loaded or default values
        """
        if not self.config_path.exists():
            logger.info(f"Config file not found at {self.config_path}, using defaults")
            return AppConfig()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                logger.warning(f"Ignoring config file with unexpected layout: {self.config_path}")
                return AppConfig()
            logger.info(f"Loaded configuration from {self.config_path}")
            return AppConfig.from_dict(data)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing config file: {e}")
            return AppConfig()
        except Exception as e:
            logger.error(f"Error loading config: {e}")
            return AppConfig()

    def save(self, config: Optional[AppConfig] = None) -> bool:
        """
        Save configuration to file.

        Args:
            config: Configuration to save, or use current config

        Returns:
            True if save was successful
        """
        if config is not None:
            self._config = config

        if self._config is None:
            logger.warning("No configuration to save")
            return False

        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                yaml.dump(self._config.to_dict(), f, default_flow_style=False, allow_unicode=True)
            logger.info(f"Saved configuration to {self.config_path}")
            return True
        except Exception as e:
            logger.error(f"Error saving config: {e}")
            return False

    def update(self, **kwargs: Any) -> None:
        """
        Update configuration with new values.

        Args:
            **kwargs: Key-value pairs to update
        """
        config = self.config
        for key, value in kwargs.items():
            if hasattr(config, key):
                setattr(config, key, value)
            else:
                logger.warning(f"Unknown config key: {key}")
        self.save()

    def add_recent_path(self, path: str) -> List[str]:
        """
        Move a path to the front of the recent annotation files.

        Args:
            path: Annotation file path

        Returns:
            The updated recent path list
        """
        max_recent = self.config.max_recent_paths
        if max_recent <= 0:
            return []

        recent_paths = [p for p in self.config.recent_paths if p != path]
        recent_paths.insert(0, path)
        recent_paths = recent_paths[:max_recent]

        self.update(recent_paths=recent_paths)
        return recent_paths
