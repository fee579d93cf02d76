"""Coordinate mapping between natural image pixels and the zoomed screen."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import NamedTuple, Optional, Tuple

MIN_ZOOM = 0.2
MAX_ZOOM = 5.0
DEFAULT_ZOOM = 1.0
ZOOM_FACTOR = 1.1

# Preset zoom levels (percent) used for stepping in and out
ZOOM_LEVELS = [20, 25, 33, 50, 67, 75, 100, 125, 150, 200, 250, 300, 400, 500]


class Point(NamedTuple):
    """A 2D point."""

    x: float
    y: float


class FrameRect(NamedTuple):
    """Bounding rectangle of the zoomed frame in screen coordinates."""

    left: float
    top: float
    width: float
    height: float


def clamp_zoom(zoom: float) -> float:
    """Clamp a zoom factor to the supported range."""
    return max(min(zoom, MAX_ZOOM), MIN_ZOOM)


def zoom_step_in(zoom: float) -> float:
    """Return the next preset zoom above the current one."""
    current = round(zoom * 100)
    for level in ZOOM_LEVELS:
        if level > current:
            return level / 100.0
    return MAX_ZOOM


def zoom_step_out(zoom: float) -> float:
    """Return the next preset zoom below the current one."""
    current = round(zoom * 100)
    for level in reversed(ZOOM_LEVELS):
        if level < current:
            return level / 100.0
    return MIN_ZOOM


def fit_size(
    natural_width: int,
    natural_height: int,
    max_width: int,
    max_height: int
) -> Tuple[int, int]:
    """
    Compute the display size of an image constrained to a bounding box.

    The image is scaled down, never up, keeping its aspect ratio.
    """
    if natural_width <= 0 or natural_height <= 0:
        return (0, 0)
    if max_width <= 0 or max_height <= 0:
        return (natural_width, natural_height)

    scale = min(1.0, max_width / natural_width, max_height / natural_height)
    return (max(1, int(natural_width * scale)), max(1, int(natural_height * scale)))


@dataclass(frozen=True)
class ViewportMetrics:
    """
    Snapshot of everything the coordinate math depends on.

    ``natural_*`` is the intrinsic image resolution, ``display_*`` the size
    the image occupies on screen before zoom, and ``zoom`` the visual scale
    applied on top of the display size.
    """

    natural_width: int = 0
    natural_height: int = 0
    display_width: int = 0
    display_height: int = 0
    zoom: float = DEFAULT_ZOOM

    @property
    def has_natural_size(self) -> bool:
        """True once the image has decoded."""
        return self.natural_width > 0 and self.natural_height > 0

    @property
    def frame_width(self) -> float:
        """Width of the zoomed frame on screen."""
        return self.display_width * self.zoom

    @property
    def frame_height(self) -> float:
        """Height of the zoomed frame on screen."""
        return self.display_height * self.zoom

    def frame_rect(self, left: float = 0.0, top: float = 0.0) -> FrameRect:
        """Bounding rectangle of the zoomed frame placed at ``(left, top)``."""
        return FrameRect(left, top, self.frame_width, self.frame_height)

    def with_zoom(self, zoom: float) -> ViewportMetrics:
        """Return a copy with a clamped zoom factor."""
        return replace(self, zoom=clamp_zoom(zoom))

    def with_display_size(self, width: int, height: int) -> ViewportMetrics:
        """Return a copy with a new display size."""
        return replace(self, display_width=width, display_height=height)

    def screen_scale(self) -> Optional[Point]:
        """
        Screen pixels per natural pixel along each axis.

        Returns:
            Point of scale factors, or None if any dimension is unknown
        """
        if not self.has_natural_size or self.frame_width <= 0 or self.frame_height <= 0:
            return None
        return Point(
            self.frame_width / self.natural_width,
            self.frame_height / self.natural_height,
        )


def natural_to_screen(metrics: ViewportMetrics, point: Point) -> Optional[Point]:
    """
    Map a natural-space point to frame-relative screen coordinates.

    Returns:
        Screen point, or None if the mapping is undefined
    """
    scale = metrics.screen_scale()
    if scale is None:
        return None
    return Point(point.x * scale.x, point.y * scale.y)


def screen_to_natural(
    pointer: Point,
    frame: FrameRect,
    natural_width: int,
    natural_height: int
) -> Optional[Point]:
    """
    Map a pointer position to natural image coordinates.

    The pointer offset inside the zoomed frame is divided by the frame's
    current size, so the result does not depend on the zoom factor.

    Args:
        pointer: Pointer position in the same coordinate system as ``frame``
        frame: Current bounding rectangle of the zoomed frame
        natural_width: Natural image width in pixels
        natural_height: Natural image height in pixels

    Returns:
        Natural-space point, or None for a zero-sized frame or unknown image
    """
    if frame.width <= 0 or frame.height <= 0:
        return None
    if natural_width <= 0 or natural_height <= 0:
        return None
    return Point(
        (pointer.x - frame.left) / frame.width * natural_width,
        (pointer.y - frame.top) / frame.height * natural_height,
    )
