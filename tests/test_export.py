"""Tests for COCO-Text export."""

import json

import pytest

from annotation_lens.core.export import (
    EXPORT_SUFFIX,
    build_export_document,
    export_file_name,
    write_export_document,
)
from annotation_lens.core.models import AnnotationBox


@pytest.fixture
def boxes():
    """Two boxes, one without a label."""
    return [
        AnnotationBox(id="x7", x=1, y=2, width=3, height=4, label="café", image_id=9),
        AnnotationBox(id="x8", x=5, y=6, width=7, height=8),
    ]


class TestBuildExportDocument:
    """Tests for build_export_document."""

    def test_document(self, boxes):
        """Test the exported structure."""
        document = build_export_document(boxes, "photo.jpg", 640, 480)

        assert document["images"] == [{"id": 1, "file_name": "photo.jpg", "width": 640, "height": 480}]
        assert document["annotations"] == [
            {"id": 1, "image_id": 1, "bbox": [1, 2, 3, 4], "transcription": "café"},
            {"id": 2, "image_id": 1, "bbox": [5, 6, 7, 8], "transcription": ""},
        ]

    def test_unknown_size_omitted(self, boxes):
        """Test that zero dimensions are left out."""
        document = build_export_document(boxes, "photo.jpg")
        assert document["images"] == [{"id": 1, "file_name": "photo.jpg"}]

    def test_nothing_to_export(self, boxes):
        """Test missing image or boxes."""
        assert build_export_document([], "photo.jpg") is None
        assert build_export_document(boxes, None) is None
        assert build_export_document(boxes, "") is None


class TestExportFileName:
    """Tests for export_file_name."""

    def test_extension_replaced(self):
        """Test that only the last extension is replaced."""
        assert export_file_name("photo.jpg") == "photo" + EXPORT_SUFFIX
        assert export_file_name("photo.final.png") == "photo.final_coco-text.json"

    def test_no_extension(self):
        """Test names without an extension."""
        assert export_file_name("photo") == "photo_coco-text.json"


class TestWriteExportDocument:
    """Tests for write_export_document."""

    def test_write(self, tmp_path, boxes):
        """Test writing UTF-8 JSON."""
        path = tmp_path / "out.json"
        document = build_export_document(boxes, "photo.jpg")

        assert write_export_document(path, document)

        text = path.read_text(encoding="utf-8")
        assert "café" in text
        assert json.loads(text) == document

    def test_write_failure(self, tmp_path, boxes):
        """Test that an unwritable path returns False."""
        document = build_export_document(boxes, "photo.jpg")
        assert not write_export_document(tmp_path / "missing" / "out.json", document)
