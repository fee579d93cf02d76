"""Tests for the annotation file reader worker."""

import pytest

from annotation_lens.core.format_registry import ACCEPTED_EXTENSIONS
from annotation_lens.workers.annotation_reader import ANNOTATION_FILE_FILTER, AnnotationFileReader


def run_reader(token, path):
    """Run a reader synchronously and collect its signals."""
    loaded, failed = [], []
    reader = AnnotationFileReader(token, str(path))
    reader.loaded.connect(lambda *args: loaded.append(args))
    reader.failed.connect(lambda *args: failed.append(args))
    reader.run()
    return loaded, failed


class TestAnnotationFileReader:
    """Tests for AnnotationFileReader."""

    def test_read(self, qapp, tmp_path):
        """Test that the file text is emitted with its token."""
        path = tmp_path / "boxes.json"
        path.write_text('[{"bbox": [0, 0, 1, 1]}]', encoding="utf-8")

        loaded, failed = run_reader(7, path)

        assert loaded == [(7, "boxes.json", '[{"bbox": [0, 0, 1, 1]}]')]
        assert failed == []

    def test_byte_order_mark_removed(self, qapp, tmp_path):
        """Test UTF-8 files written with a BOM."""
        path = tmp_path / "a.xml"
        path.write_bytes("\ufeff<annotation/>".encode("utf-8"))

        loaded, _ = run_reader(1, path)

        assert loaded[0][2] == "<annotation/>"

    def test_missing_file(self, qapp, tmp_path):
        """Test that read errors are emitted with the file name."""
        loaded, failed = run_reader(3, tmp_path / "missing.json")

        assert loaded == []
        assert len(failed) == 1
        token, name, message = failed[0]
        assert token == 3
        assert name == "missing.json"
        assert "missing.json" in message


class TestFileFilters:
    """Tests for the dialog filters."""

    def test_annotation_filter_lists_accepted_extensions(self):
        """Test that the annotation filter offers every accepted extension."""
        assert ANNOTATION_FILE_FILTER == "Annotation files (*.json *.xml *.txt *.csv)"
        for extension in ACCEPTED_EXTENSIONS:
            assert f"*{extension}" in ANNOTATION_FILE_FILTER
