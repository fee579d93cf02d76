"""Tests for YOLO parsing."""

import pytest

from annotation_lens.core.models import AnnotationSource
from annotation_lens.core.yolo_format import MISSING_SIZE_WARNING, YOLOAnnotationParser


class TestYOLOAnnotationParser:
    """Tests for YOLOAnnotationParser."""

    def test_format_properties(self):
        """Test format properties."""
        parser = YOLOAnnotationParser()
        assert parser.format_name == "YOLO"
        assert parser.source == AnnotationSource.YOLO

    def test_missing_image_size(self):
        """Test that an unknown image size gives no boxes and a warning."""
        result = YOLOAnnotationParser().parse("0 0.5 0.5 0.2 0.2\n")

        assert result.boxes == []
        assert result.warning == MISSING_SIZE_WARNING
        assert result.images is None

    def test_center_to_pixels(self):
        """Test conversion of normalized center coordinates."""
        result = YOLOAnnotationParser(100, 100).parse("0 0.5 0.5 0.2 0.2")

        assert len(result.boxes) == 1
        box = result.boxes[0]
        assert box.x == pytest.approx(40)
        assert box.y == pytest.approx(40)
        assert box.width == pytest.approx(20)
        assert box.height == pytest.approx(20)
        assert box.label == "class_0"
        assert box.image_id == 1
        assert result.warning is None

    def test_non_square_image(self):
        """Test that each axis uses its own dimension."""
        box = YOLOAnnotationParser(200, 100).parse("3 0.25 0.5 0.5 0.2").boxes[0]

        assert box.x == pytest.approx(0)
        assert box.y == pytest.approx(40)
        assert box.width == pytest.approx(100)
        assert box.height == pytest.approx(20)
        assert box.label == "class_3"

    def test_blank_and_short_lines(self):
        """Test that blank lines are ignored and short lines dropped."""
        text = "0 0.5 0.5 0.2 0.2\n\n   \n1 0.5 0.5\n2 0.1 0.1 0.1 0.1\n"

        result = YOLOAnnotationParser(100, 100).parse(text)

        assert [box.id for box in result.boxes] == ["1", "3"]
        assert [box.label for box in result.boxes] == ["class_0", "class_2"]

    def test_crlf_line_endings(self):
        """Test Windows line endings."""
        result = YOLOAnnotationParser(100, 100).parse("0 0.5 0.5 0.2 0.2\r\n1 0.5 0.5 0.2 0.2\r\n")
        assert len(result.boxes) == 2

    def test_non_numeric_class(self):
        """Test that a non-numeric class leaves the label unset."""
        box = YOLOAnnotationParser(100, 100).parse("cat 0.5 0.5 0.2 0.2").boxes[0]
        assert box.label is None

    def test_float_class_id(self):
        """Test that an integral float class id is written without a fraction."""
        box = YOLOAnnotationParser(100, 100).parse("1.0 0.5 0.5 0.2 0.2").boxes[0]
        assert box.label == "class_1"

    def test_non_numeric_coordinates_dropped(self):
        """Test that lines with non-numeric coordinates are dropped."""
        result = YOLOAnnotationParser(100, 100).parse("0 a 0.5 0.2 0.2\n0 0.5 0.5 0.2 0.2")
        assert [box.id for box in result.boxes] == ["2"]

    def test_image_name(self):
        """Test the image entry name."""
        assert YOLOAnnotationParser(10, 10).parse("").images[0].file_name == "image.jpg"
        result = YOLOAnnotationParser(10, 10, image_name="photo.png").parse("")
        assert result.images[0].file_name == "photo.png"
        assert result.images[0].id == 1
