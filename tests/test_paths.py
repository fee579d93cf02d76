"""Tests for image path helpers."""

from pathlib import Path

import pytest

from annotation_lens.core.errors import ImageResolutionError
from annotation_lens.utils.paths import (
    build_attempted_path,
    get_base_name,
    get_root_label,
    normalize_path,
    path_segments,
    resolve_relative_path,
)


class TestPathHelpers:
    """Tests for path normalization."""

    def test_normalize(self):
        """Test backslash conversion."""
        assert normalize_path("a\\b\\c.jpg") == "a/b/c.jpg"

    def test_segments(self):
        """Test that empty segments are dropped."""
        assert path_segments("a//b\\c.jpg") == ["a", "b", "c.jpg"]
        assert path_segments("") == []

    def test_base_name(self):
        """Test the last path segment."""
        assert get_base_name("dir\\sub/photo.jpg") == "photo.jpg"
        assert get_base_name("photo.jpg") == "photo.jpg"
        assert get_base_name("dir/") == "dir/"

    def test_root_label(self, tmp_path):
        """Test that a filesystem root is labelled with its full path."""
        assert get_root_label(tmp_path) == tmp_path.name
        assert get_root_label(Path("/")) == "/"

    def test_attempted_path(self):
        """Test the user-facing description."""
        assert build_attempted_path("images", "a\\b.jpg") == "Root: images / Relative path: a/b.jpg"
        assert build_attempted_path(None, "b.jpg") == "Root: not selected / Relative path: b.jpg"


class TestResolveRelativePath:
    """Tests for resolve_relative_path."""

    @pytest.fixture
    def root(self, tmp_path):
        """An image root with one nested file."""
        (tmp_path / "train" / "set1").mkdir(parents=True)
        (tmp_path / "train" / "set1" / "a.jpg").write_bytes(b"")
        (tmp_path / "top.jpg").write_bytes(b"")
        return tmp_path

    def test_nested(self, root):
        """Test a multi-segment path."""
        assert resolve_relative_path(root, "train/set1/a.jpg") == root / "train" / "set1" / "a.jpg"

    def test_backslashes_and_empty_segments(self, root):
        """Test Windows separators and doubled separators."""
        assert resolve_relative_path(root, "train\\\\set1\\a.jpg") == root / "train" / "set1" / "a.jpg"
        assert resolve_relative_path(root, "/top.jpg") == root / "top.jpg"

    def test_missing_directory(self, root):
        """Test a missing intermediate directory."""
        with pytest.raises(ImageResolutionError) as excinfo:
            resolve_relative_path(root, "val\\set1\\a.jpg")
        assert excinfo.value.relative_path == "val/set1/a.jpg"
        assert str(excinfo.value) == f"Root: {root.name} / Relative path: val/set1/a.jpg"

    def test_file_used_as_directory(self, root):
        """Test a file named as an intermediate segment."""
        with pytest.raises(ImageResolutionError):
            resolve_relative_path(root, "top.jpg/a.jpg")

    def test_directory_used_as_file(self, root):
        """Test a directory named as the last segment."""
        with pytest.raises(ImageResolutionError):
            resolve_relative_path(root, "train/set1")

    def test_missing_file(self, root):
        """Test a missing file."""
        with pytest.raises(ImageResolutionError):
            resolve_relative_path(root, "train/set1/b.jpg")

    def test_empty_path(self, root):
        """Test an empty relative path."""
        with pytest.raises(ImageResolutionError):
            resolve_relative_path(root, "")

    @pytest.mark.parametrize("relative", ["../top.jpg", "train/../top.jpg", "./top.jpg", "train\\..\\..\\x.jpg"])
    def test_dot_segments_rejected(self, root, relative):
        """Test that paths cannot step outside or around the root."""
        (root / "train" / "x.jpg").write_bytes(b"")

        with pytest.raises(ImageResolutionError) as excinfo:
            resolve_relative_path(root / "train", relative)

        assert excinfo.value.root_label == "train"
