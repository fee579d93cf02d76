"""Pointer driven move/resize editing of bounding boxes in natural space."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from .models import AnnotationBox
from .transform import Point

logger = logging.getLogger(__name__)

# Resize handles at the edge midpoints and corners of a box
HANDLES = ("n", "s", "e", "w", "ne", "nw", "se", "sw")

# Smallest width/height a resize may produce, in natural pixels
MIN_BOX_SIZE = 8.0


class DragMode(str, Enum):
    """Kind of gesture in progress."""

    MOVE = "move"
    RESIZE = "resize"


class Size(NamedTuple):
    """Width and height pair."""

    width: float
    height: float


@dataclass
class DragState:
    """
    State of the single gesture in progress.

    Created on pointer-down and discarded on pointer-up or cancel.
    """

    target_box_id: str
    pointer_start: Point
    origin_position: Point
    origin_size: Size
    mode: DragMode
    handle: Optional[str] = None


def handle_positions(box: AnnotationBox) -> Dict[str, Point]:
    """
    Get the natural-space position of every resize handle of a box.

    Args:
        box: Box to compute handles for

    Returns:
        Dictionary mapping handle names to points
    """
    cx = box.x + box.width / 2
    cy = box.y + box.height / 2
    return {
        "n": Point(cx, box.y),
        "s": Point(cx, box.bottom),
        "e": Point(box.right, cy),
        "w": Point(box.x, cy),
        "ne": Point(box.right, box.y),
        "nw": Point(box.x, box.y),
        "se": Point(box.right, box.bottom),
        "sw": Point(box.x, box.bottom),
    }


def moved_geometry(origin: Point, size: Size, dx: float, dy: float) -> Tuple[float, float, float, float]:
    """Geometry of a box translated by ``(dx, dy)``."""
    return (origin.x + dx, origin.y + dy, size.width, size.height)


def resized_geometry(
    origin: Point,
    size: Size,
    handle: str,
    dx: float,
    dy: float,
    min_size: float = MIN_BOX_SIZE
) -> Tuple[float, float, float, float]:
    """
    Geometry of a box after dragging one of its handles.

    Edges named by the handle follow the pointer while the opposite edges
    stay anchored. A width or height below ``min_size`` is clamped, and for
    the west/north edges the position is recomputed so the anchored edge
    does not move.

    Args:
        origin: Box position when the gesture started
        size: Box size when the gesture started
        handle: One of HANDLES
        dx: Horizontal pointer delta in natural pixels
        dy: Vertical pointer delta in natural pixels
        min_size: Minimum width and height

    Returns:
        Tuple of (x, y, width, height)
    """
    x, y = origin.x, origin.y
    width, height = size.width, size.height

    if "e" in handle:
        width = size.width + dx
    if "w" in handle:
        width = size.width - dx
        x = origin.x + dx
    if "s" in handle:
        height = size.height + dy
    if "n" in handle:
        height = size.height - dy
        y = origin.y + dy

    if width < min_size:
        width = min_size
        if "w" in handle:
            x = origin.x + size.width - min_size
    if height < min_size:
        height = min_size
        if "n" in handle:
            y = origin.y + size.height - min_size

    return (x, y, width, height)


class GeometryEditor:
    """
    State machine for moving and resizing boxes.

    States are Idle, Dragging-Move and Dragging-Resize(handle). All pointer
    positions are expected in natural image coordinates. Each step replaces
    the whole box list and passes the new list to ``on_change``.
    """

    def __init__(
        self,
        boxes: Optional[Sequence[AnnotationBox]] = None,
        on_change: Optional[Callable[[List[AnnotationBox]], None]] = None,
        min_size: float = MIN_BOX_SIZE
    ) -> None:
        """
        Initialize the editor.

        Args:
            boxes: Initial active box collection
            on_change: Callback receiving each new box list
            min_size: Minimum width/height produced by a resize
        """
        self._boxes: List[AnnotationBox] = list(boxes or [])
        self._on_change = on_change
        self._drag: Optional[DragState] = None
        self.min_size = min_size
        self.edit_mode = False

    @property
    def boxes(self) -> List[AnnotationBox]:
        """The current active box collection."""
        return list(self._boxes)

    @property
    def drag_state(self) -> Optional[DragState]:
        """The gesture in progress, or None when idle."""
        return self._drag

    @property
    def is_dragging(self) -> bool:
        """True while a gesture is in progress."""
        return self._drag is not None

    def set_boxes(self, boxes: Sequence[AnnotationBox]) -> None:
        """Replace the active collection, aborting any gesture."""
        self.cancel()
        self._boxes = list(boxes)

    def set_edit_mode(self, enabled: bool) -> None:
        """Enable or disable editing. Disabling aborts any gesture."""
        self.edit_mode = enabled
        if not enabled:
            self.cancel()

    def find_box(self, box_id: str) -> Optional[AnnotationBox]:
        """Find a box by id."""
        for box in self._boxes:
            if box.id == box_id:
                return box
        return None

    # === Hit Testing ===

    def box_at(self, point: Point) -> Optional[AnnotationBox]:
        """Return the topmost box containing a point."""
        for box in reversed(self._boxes):
            if box.contains(point.x, point.y):
                return box
        return None

    def handle_at(self, point: Point, radius: float) -> Optional[Tuple[AnnotationBox, str]]:
        """
        Return the topmost handle within ``radius`` of a point.

        Args:
            point: Natural-space position
            radius: Detection radius in natural pixels

        Returns:
            Tuple of (box, handle name) or None
        """
        for box in reversed(self._boxes):
            for name, handle_point in handle_positions(box).items():
                if abs(handle_point.x - point.x) + abs(handle_point.y - point.y) < radius:
                    return (box, name)
        return None

    # === Gesture Handling ===

    def press_body(self, box_id: str, pointer: Point) -> bool:
        """
        Start moving a box.

        Returns:
            True if a move gesture started
        """
        return self._begin(box_id, pointer, DragMode.MOVE, None)

    def press_handle(self, box_id: str, handle: str, pointer: Point) -> bool:
        """
        Start resizing a box from one of its handles.

        Returns:
            True if a resize gesture started
        """
        if handle not in HANDLES:
            logger.warning(f"Unknown resize handle: {handle}")
            return False
        return self._begin(box_id, pointer, DragMode.RESIZE, handle)

    def press(self, pointer: Point, handle_radius: float) -> bool:
        """
        Start a gesture at a pointer position.

        Handles take priority over box bodies.

        Args:
            pointer: Natural-space pointer position
            handle_radius: Handle detection radius in natural pixels

        Returns:
            True if a gesture started
        """
        if not self.edit_mode or self._drag is not None:
            return False

        hit = self.handle_at(pointer, handle_radius)
        if hit:
            box, handle = hit
            return self.press_handle(box.id, handle, pointer)

        box = self.box_at(pointer)
        if box:
            return self.press_body(box.id, pointer)
        return False

    def _begin(self, box_id: str, pointer: Point, mode: DragMode, handle: Optional[str]) -> bool:
        if not self.edit_mode:
            return False
        if self._drag is not None:
            logger.debug(f"Ignoring pointer-down on {box_id}: gesture on {self._drag.target_box_id} active")
            return False

        box = self.find_box(box_id)
        if box is None:
            return False

        self._drag = DragState(
            target_box_id=box.id,
            pointer_start=pointer,
            origin_position=Point(box.x, box.y),
            origin_size=Size(box.width, box.height),
            mode=mode,
            handle=handle,
        )
        return True

    def move(self, pointer: Point) -> bool:
        """
        Update the dragged box for a new pointer position.

        Returns:
            True if the box collection was replaced
        """
        drag = self._drag
        if drag is None:
            return False

        dx = pointer.x - drag.pointer_start.x
        dy = pointer.y - drag.pointer_start.y

        if drag.mode == DragMode.MOVE:
            geometry = moved_geometry(drag.origin_position, drag.origin_size, dx, dy)
        else:
            geometry = resized_geometry(
                drag.origin_position, drag.origin_size, drag.handle or "", dx, dy, self.min_size
            )

        self._boxes = [
            box.with_geometry(*geometry) if box.id == drag.target_box_id else box
            for box in self._boxes
        ]
        if self._on_change:
            self._on_change(list(self._boxes))
        return True

    def release(self) -> bool:
        """
        End the gesture in progress.

        Returns:
            True if a gesture was ended
        """
        if self._drag is None:
            return False
        self._drag = None
        return True

    def cancel(self) -> bool:
        """Abort the gesture in progress, keeping the last applied geometry."""
        return self.release()
