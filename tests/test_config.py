"""Tests for configuration management."""

import pytest
from pathlib import Path
import tempfile

from annotation_lens.core.config import AppConfig, ConfigManager


class TestAppConfig:
    """Tests for AppConfig."""

    def test_default_config(self):
        """Test creating config with defaults."""
        config = AppConfig()

        assert config.image_root_directory == ""
        assert config.preview_limit == 5000
        assert config.line_thickness == 2
        assert config.handle_radius == 6
        assert config.min_box_size == 8
        assert config.edit_mode_on_start is True
        assert config.recent_paths == []

    def test_custom_config(self):
        """Test creating config with custom values."""
        config = AppConfig(
            image_root_directory="/data/images",
            preview_limit=100,
            edit_mode_on_start=False
        )

        assert config.image_root_directory == "/data/images"
        assert config.preview_limit == 100
        assert config.edit_mode_on_start is False

    def test_to_dict(self):
        """Test converting config to dictionary."""
        config = AppConfig(
            last_annotation_directory="/annotations",
            show_annotation_panel=True
        )

        data = config.to_dict()

        assert data["lastAnnotationDirectory"] == "/annotations"
        assert data["showAnnotationPanel"] is True
        assert "handleRadius" in data
        assert "recentPaths" in data

    def test_from_dict(self):
        """Test creating config from dictionary."""
        data = {
            "lastImageDirectory": "/images",
            "previewLimit": 200,
            "fontSize": 12,
            "editModeOnStart": False,
            "recentPaths": ["/a.json"]
        }

        config = AppConfig.from_dict(data)

        assert config.last_image_directory == "/images"
        assert config.preview_limit == 200
        assert config.font_size == 12
        assert config.edit_mode_on_start is False
        assert config.recent_paths == ["/a.json"]

    def test_from_dict_with_defaults(self):
        """Test creating config from partial dictionary."""
        data = {"lastImageDirectory": "/images", "recentPaths": None}

        config = AppConfig.from_dict(data)

        assert config.last_image_directory == "/images"
        assert config.line_thickness == 2  # default
        assert config.recent_paths == []


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_load_nonexistent_file(self):
        """Test loading config when file doesn't exist."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "nonexistent.yaml"
            manager = ConfigManager(config_path)

            config = manager.load()

            # Should return default config
            assert config.image_root_directory == ""
            assert config.line_thickness == 2

    def test_save_and_load(self):
        """Test saving and loading config."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            manager = ConfigManager(config_path)

            config = AppConfig(
                image_root_directory="/données/images",
                min_box_size=4
            )
            assert manager.save(config)

            loaded = manager.load()

            assert loaded.image_root_directory == "/données/images"
            assert loaded.min_box_size == 4

    def test_load_invalid_yaml(self):
        """Test that a broken file falls back to defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            config_path.write_text("previewLimit: [1, 2\n", encoding="utf-8")

            config = ConfigManager(config_path).load()

            assert config.preview_limit == 5000

    def test_load_non_mapping(self):
        """Test that a YAML list falls back to defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            config_path.write_text("- a\n- b\n", encoding="utf-8")

            config = ConfigManager(config_path).load()

            assert config.preview_limit == 5000

    def test_update(self):
        """Test updating config values."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            manager = ConfigManager(config_path)

            manager.update(image_root_directory="/new/path", unknown_key=1)

            assert manager.config.image_root_directory == "/new/path"
            assert not hasattr(manager.config, "unknown_key")
            assert config_path.exists()

    def test_config_property(self):
        """Test config property lazy loading."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            manager = ConfigManager(config_path)

            # First access loads config
            config1 = manager.config
            config2 = manager.config

            # Should return same instance
            assert config1 is config2


class TestRecentPaths:
    """Tests for the recent annotation file list."""

    def test_add_recent_path(self):
        """Test ordering and de-duplication."""
        with tempfile.TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir) / "config.yaml")

            manager.add_recent_path("/a.json")
            manager.add_recent_path("/b.json")
            recent = manager.add_recent_path("/a.json")

            assert recent == ["/a.json", "/b.json"]
            assert ConfigManager(Path(tmpdir) / "config.yaml").load().recent_paths == recent

    def test_limit(self):
        """Test that the list is capped."""
        with tempfile.TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir) / "config.yaml")
            manager.update(max_recent_paths=2)

            for name in ("/a.json", "/b.json", "/c.json"):
                recent = manager.add_recent_path(name)

            assert recent == ["/c.json", "/b.json"]

    def test_disabled(self):
        """Test that a zero limit keeps nothing."""
        with tempfile.TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir) / "config.yaml")
            manager.update(max_recent_paths=0)

            assert manager.add_recent_path("/a.json") == []
            assert manager.config.recent_paths == []
