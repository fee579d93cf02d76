"""Canvas widget showing an image with its editable annotation boxes."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from PyQt6.QtCore import QPointF, QRectF, Qt, pyqtSignal
from PyQt6.QtGui import (
    QColor, QFont, QFontMetrics, QKeyEvent, QMouseEvent, QPainter, QPen,
    QPixmap, QWheelEvent
)
from PyQt6.QtWidgets import QScrollArea, QWidget

from ..core.editor import GeometryEditor, handle_positions
from ..core.models import AnnotationBox
from ..core.transform import (
    DEFAULT_ZOOM, ZOOM_FACTOR, FrameRect, Point, ViewportMetrics, screen_to_natural
)

logger = logging.getLogger(__name__)

# Cursor shapes for each resize handle
HANDLE_CURSORS = {
    "n": Qt.CursorShape.SizeVerCursor,
    "s": Qt.CursorShape.SizeVerCursor,
    "e": Qt.CursorShape.SizeHorCursor,
    "w": Qt.CursorShape.SizeHorCursor,
    "ne": Qt.CursorShape.SizeBDiagCursor,
    "sw": Qt.CursorShape.SizeBDiagCursor,
    "nw": Qt.CursorShape.SizeFDiagCursor,
    "se": Qt.CursorShape.SizeFDiagCursor,
}


class AnnotationCanvas(QWidget):
    """
    Canvas for viewing and editing bounding boxes over an image.

    The widget is sized to the zoomed frame. Boxes are painted through a
    scale transform so drawing happens in natural image coordinates, and
    pointer positions are mapped back with the widget's current size.
    """

    # Signals
    boxes_changed = pyqtSignal(list)
    zoom_changed = pyqtSignal(float)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        """Initialize the canvas."""
        super().__init__(parent)

        # Visual settings
        self.box_color = QColor("#FF3B30")
        self.active_color = QColor("#FFCC00")
        self.line_thickness = 2
        self.font_size = 10
        self.handle_radius = 6

        self._pixmap: Optional[QPixmap] = None
        self.metrics = ViewportMetrics()
        self.editor = GeometryEditor(on_change=self._on_editor_change)
        self.hover_box_id: Optional[str] = None
        self.scroll_area: Optional[QScrollArea] = None

        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setFixedSize(0, 0)

    # === Image and Boxes ===

    def pixmap(self) -> Optional[QPixmap]:
        """Return the current pixmap."""
        return self._pixmap

    def setPixmap(self, pixmap: QPixmap) -> None:
        """
        Show a new image.

        The zoom is reset to 100% and the natural size is taken from the
        decoded pixmap.
        """
        self.editor.cancel()
        self._pixmap = pixmap
        if pixmap.isNull():
            self.metrics = ViewportMetrics()
        else:
            self.metrics = ViewportMetrics(
                natural_width=pixmap.width(),
                natural_height=pixmap.height(),
                display_width=pixmap.width(),
                display_height=pixmap.height(),
                zoom=DEFAULT_ZOOM,
            )
        self._update_frame_size()
        self.zoom_changed.emit(self.metrics.zoom)

    def clear(self) -> None:
        """Remove the image and boxes."""
        self.editor.set_boxes([])
        self._pixmap = None
        self.metrics = ViewportMetrics()
        self.hover_box_id = None
        self._update_frame_size()

    def set_boxes(self, boxes: Sequence[AnnotationBox]) -> None:
        """Replace the displayed boxes. Any gesture in progress is aborted."""
        self.editor.set_boxes(boxes)
        self.hover_box_id = None
        self.update()

    def boxes(self) -> List[AnnotationBox]:
        """Return the displayed boxes."""
        return self.editor.boxes

    def set_edit_mode(self, enabled: bool) -> None:
        """Enable or disable box editing."""
        self.editor.set_edit_mode(enabled)
        if not enabled:
            self.unsetCursor()
        self.update()

    def set_scroll_area(self, scroll_area: QScrollArea) -> None:
        """Set the parent scroll area for zoom anchoring."""
        self.scroll_area = scroll_area

    # === Sizing and Zoom ===

    def set_display_size(self, width: int, height: int) -> None:
        """Set the on-screen size of the image before zoom."""
        if not self.metrics.has_natural_size:
            return
        self.metrics = self.metrics.with_display_size(width, height)
        self._update_frame_size()

    @property
    def zoom(self) -> float:
        """Current zoom factor."""
        return self.metrics.zoom

    def set_zoom(self, zoom: float) -> None:
        """
        Set the zoom factor.

        Args:
            zoom: Zoom factor, clamped to 0.2 - 5.0
        """
        self.metrics = self.metrics.with_zoom(zoom)
        self._update_frame_size()
        self.zoom_changed.emit(self.metrics.zoom)

    def _update_frame_size(self) -> None:
        self.setFixedSize(
            int(round(self.metrics.frame_width)),
            int(round(self.metrics.frame_height)),
        )
        self.update()

    def current_frame(self) -> FrameRect:
        """Bounding rectangle of the zoomed frame in widget coordinates."""
        return FrameRect(0.0, 0.0, float(self.width()), float(self.height()))

    def to_natural(self, pos: QPointF) -> Optional[Point]:
        """Map a widget position to natural image coordinates."""
        return screen_to_natural(
            Point(pos.x(), pos.y()),
            self.current_frame(),
            self.metrics.natural_width,
            self.metrics.natural_height,
        )

    def render_scale(self) -> Optional[Point]:
        """
        Widget pixels per natural pixel along each axis.

        Taken from the widget size so painting and pointer mapping agree.
        """
        frame = self.current_frame()
        if frame.width <= 0 or frame.height <= 0 or not self.metrics.has_natural_size:
            return None
        return Point(
            frame.width / self.metrics.natural_width,
            frame.height / self.metrics.natural_height,
        )

    def natural_handle_radius(self) -> float:
        """Handle detection radius converted to natural pixels."""
        frame = self.current_frame()
        if frame.width <= 0 or not self.metrics.has_natural_size:
            return float(self.handle_radius)
        return self.handle_radius * self.metrics.natural_width / frame.width

    # === Event Handlers ===

    def _on_editor_change(self, boxes: List[AnnotationBox]) -> None:
        self.boxes_changed.emit(boxes)
        self.update()

    def wheelEvent(self, event: QWheelEvent) -> None:
        """Handle mouse wheel for zooming."""
        if event.modifiers() == Qt.KeyboardModifier.ControlModifier and self.metrics.has_natural_size:
            delta = event.angleDelta().y()
            zoom_factor = ZOOM_FACTOR if delta > 0 else 1 / ZOOM_FACTOR

            cursor_pos = event.position()
            viewport_pos = None
            if self.scroll_area:
                viewport_pos = self.mapTo(self.scroll_area.viewport(), cursor_pos.toPoint())

            old_zoom = self.metrics.zoom
            self.set_zoom(old_zoom * zoom_factor)
            applied = self.metrics.zoom / old_zoom

            # Keep the image point under the cursor in place
            if self.scroll_area and viewport_pos is not None:
                self.scroll_area.horizontalScrollBar().setValue(int(cursor_pos.x() * applied - viewport_pos.x()))
                self.scroll_area.verticalScrollBar().setValue(int(cursor_pos.y() * applied - viewport_pos.y()))

            event.accept()
        else:
            super().wheelEvent(event)

    def mousePressEvent(self, event: QMouseEvent) -> None:
        """Start a move or resize gesture."""
        self.setFocus()
        if event.button() != Qt.MouseButton.LeftButton:
            return

        point = self.to_natural(event.position())
        if point is None:
            return

        if self.editor.press(point, self.natural_handle_radius()):
            drag = self.editor.drag_state
            logger.debug(f"Started {drag.mode.value} on box {drag.target_box_id}")
            self.hover_box_id = drag.target_box_id
            if drag.handle:
                self.setCursor(HANDLE_CURSORS[drag.handle])
            else:
                self.setCursor(Qt.CursorShape.ClosedHandCursor)
        self.update()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        """Update the gesture in progress or the hover state."""
        point = self.to_natural(event.position())
        if point is None:
            return

        if self.editor.is_dragging:
            self.editor.move(point)
            return

        self._update_hover(point)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        """Finish the gesture in progress."""
        if event.button() != Qt.MouseButton.LeftButton:
            return
        if self.editor.release():
            point = self.to_natural(event.position())
            if point is not None:
                self._update_hover(point)
            self.update()

    def keyPressEvent(self, event: QKeyEvent) -> None:
        """Escape aborts the gesture in progress."""
        if event.key() == Qt.Key.Key_Escape and self.editor.cancel():
            self.unsetCursor()
            self.update()
            return
        super().keyPressEvent(event)

    def focusOutEvent(self, event) -> None:
        """Abort the gesture when focus moves away."""
        if self.editor.cancel():
            self.unsetCursor()
            self.update()
        super().focusOutEvent(event)

    def hideEvent(self, event) -> None:
        """Abort the gesture when the canvas is hidden."""
        self.editor.cancel()
        super().hideEvent(event)

    def _update_hover(self, point: Point) -> None:
        if not self.editor.edit_mode:
            return

        hit = self.editor.handle_at(point, self.natural_handle_radius())
        if hit:
            box, handle = hit
            self.hover_box_id = box.id
            self.setCursor(HANDLE_CURSORS[handle])
        else:
            box = self.editor.box_at(point)
            self.hover_box_id = box.id if box else None
            if box:
                self.setCursor(Qt.CursorShape.OpenHandCursor)
            else:
                self.unsetCursor()
        self.update()

    # === Painting ===

    def paintEvent(self, event) -> None:
        """Paint the image and the boxes."""
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        if self._pixmap is None or self._pixmap.isNull():
            painter.end()
            return

        painter.drawPixmap(self.rect(), self._pixmap)

        scale = self.render_scale()
        if scale is None:
            painter.end()
            return

        # Overlay coordinates equal natural coordinates from here on
        painter.scale(scale.x, scale.y)
        for box in self.editor.boxes:
            self._draw_box(painter, box, scale)

        painter.end()

    def _draw_box(self, painter: QPainter, box: AnnotationBox, scale: Point) -> None:
        """Draw one box with its label and, when editable, its handles."""
        is_active = box.id == self.hover_box_id and self.editor.edit_mode
        color = self.active_color if is_active else self.box_color

        pen = QPen(color, self.line_thickness)
        pen.setCosmetic(True)
        painter.setPen(pen)
        painter.setBrush(QColor(color.red(), color.green(), color.blue(), 40))
        painter.drawRect(QRectF(box.x, box.y, box.width, box.height))

        if box.label:
            self._draw_label(painter, box, color, scale)

        if is_active:
            rx = self.handle_radius / scale.x
            ry = self.handle_radius / scale.y
            painter.setBrush(QColor(255, 255, 255))
            for point in handle_positions(box).values():
                painter.drawRect(QRectF(point.x - rx / 2, point.y - ry / 2, rx, ry))

    def _draw_label(self, painter: QPainter, box: AnnotationBox, color: QColor, scale: Point) -> None:
        """Draw a label with background above the top-left corner."""
        painter.save()
        painter.scale(1 / scale.x, 1 / scale.y)

        font = QFont("Arial")
        font.setPointSizeF(float(self.font_size))
        font_metrics = QFontMetrics(font)
        padding = 3
        rect_width = font_metrics.horizontalAdvance(box.label) + 2 * padding
        rect_height = font_metrics.height() + 2 * padding

        left = box.x * scale.x
        top = max(0.0, box.y * scale.y - rect_height)
        background_rect = QRectF(left, top, rect_width, rect_height)

        background_color = QColor(color)
        background_color.setAlpha(180)
        brightness = (
            background_color.red() * 299 +
            background_color.green() * 587 +
            background_color.blue() * 114
        ) / 1000
        text_color = Qt.GlobalColor.black if brightness > 128 else Qt.GlobalColor.white

        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(background_color)
        painter.drawRect(background_rect)
        painter.setFont(font)
        painter.setPen(text_color)
        painter.drawText(background_rect, Qt.AlignmentFlag.AlignCenter, box.label)

        painter.restore()
