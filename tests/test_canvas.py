"""Tests for the annotation canvas widget."""

import pytest
from PyQt6.QtCore import QPointF
from PyQt6.QtGui import QPixmap

from annotation_lens.core.models import AnnotationBox
from annotation_lens.core.transform import MAX_ZOOM, Point
from annotation_lens.ui.canvas import AnnotationCanvas


@pytest.fixture
def canvas(qapp):
    """A canvas showing a 200x100 image at half size."""
    widget = AnnotationCanvas()
    pixmap = QPixmap(200, 100)
    pixmap.fill()
    widget.setPixmap(pixmap)
    widget.set_display_size(100, 50)
    return widget


class TestAnnotationCanvas:
    """Tests for AnnotationCanvas."""

    def test_frame_follows_zoom(self, canvas):
        """Test that the widget size is display size times zoom."""
        assert (canvas.width(), canvas.height()) == (100, 50)

        canvas.set_zoom(2.0)

        assert (canvas.width(), canvas.height()) == (200, 100)

    def test_zoom_clamped(self, canvas):
        """Test the zoom range and the zoom signal."""
        zooms = []
        canvas.zoom_changed.connect(zooms.append)

        canvas.set_zoom(50)

        assert canvas.zoom == MAX_ZOOM
        assert zooms == [MAX_ZOOM]

    @pytest.mark.parametrize("zoom", [0.5, 1.0, 2.0])
    def test_to_natural(self, canvas, zoom):
        """Test that the frame center maps to the image center at any zoom."""
        canvas.set_zoom(zoom)

        point = canvas.to_natural(QPointF(canvas.width() / 2, canvas.height() / 2))

        assert point.x == pytest.approx(100)
        assert point.y == pytest.approx(50)

    def test_new_image_resets_zoom(self, canvas):
        """Test that loading an image restores 100%."""
        canvas.set_zoom(2.0)

        canvas.setPixmap(QPixmap(40, 30))

        assert canvas.zoom == 1.0
        assert (canvas.width(), canvas.height()) == (40, 30)

    def test_edits_emit_boxes(self, canvas):
        """Test that editor steps are forwarded as boxes_changed."""
        changes = []
        canvas.boxes_changed.connect(changes.append)
        canvas.set_boxes([AnnotationBox(id="a", x=10, y=10, width=50, height=50)])
        canvas.set_edit_mode(True)

        assert canvas.editor.press(Point(30, 30), canvas.natural_handle_radius())
        canvas.editor.move(Point(40, 35))

        assert len(changes) == 1
        assert (changes[0][0].x, changes[0][0].y) == (20, 15)
        assert canvas.boxes()[0].x == 20

    def test_handle_radius_in_natural_pixels(self, canvas):
        """Test that the handle radius scales with the frame."""
        canvas.handle_radius = 6
        assert canvas.natural_handle_radius() == pytest.approx(12)

        canvas.set_zoom(2.0)
        assert canvas.natural_handle_radius() == pytest.approx(6)

    def test_painting_matches_pointer_mapping(self, qapp):
        """Test that the paint scale and pointer mapping share the rounded widget size."""
        widget = AnnotationCanvas()
        widget.setPixmap(QPixmap(333, 100))
        widget.set_zoom(1.1)

        scale = widget.render_scale()

        assert widget.width() == 366
        assert scale.x == pytest.approx(366 / 333)
        point = widget.to_natural(QPointF(120 * scale.x, 40 * scale.y))
        assert point.x == pytest.approx(120)
        assert point.y == pytest.approx(40)

    def test_render_scale_without_image(self, qapp):
        """Test that nothing is scaled before an image is shown."""
        assert AnnotationCanvas().render_scale() is None

    def test_clear(self, canvas):
        """Test removing the image."""
        canvas.set_boxes([AnnotationBox(id="a", x=0, y=0, width=1, height=1)])

        canvas.clear()

        assert canvas.pixmap() is None
        assert canvas.boxes() == []
        assert (canvas.width(), canvas.height()) == (0, 0)
