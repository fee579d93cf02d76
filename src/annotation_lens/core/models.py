"""Data models for Annotation Lens annotations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Image id used for boxes that do not belong to any image entry
UNGROUPED_IMAGE_ID = 0


class AnnotationSource(str, Enum):
    """Interchange format an annotation file was decoded from."""

    COCO = "coco"
    COCO_TEXT = "coco-text"
    VOC = "voc"
    YOLO = "yolo"
    SIMPLE = "simple"


@dataclass
class AnnotationBox:
    """
    Data model for a single axis-aligned bounding box.

    Geometry is stored in the natural pixel space of the source image,
    never in zoomed display space.
    """

    id: str
    x: float
    y: float
    width: float
    height: float
    label: Optional[str] = None
    image_id: Optional[int] = None

    def __post_init__(self) -> None:
        """Keep width and height non-negative."""
        if self.width < 0:
            logger.debug(f"Box {self.id}: negative width {self.width} clamped to 0")
            self.width = 0.0
        if self.height < 0:
            logger.debug(f"Box {self.id}: negative height {self.height} clamped to 0")
            self.height = 0.0

    @property
    def right(self) -> float:
        """X coordinate of the right edge."""
        return self.x + self.width

    @property
    def bottom(self) -> float:
        """Y coordinate of the bottom edge."""
        return self.y + self.height

    def contains(self, px: float, py: float) -> bool:
        """Check whether a natural-space point lies inside the box."""
        return self.x <= px <= self.right and self.y <= py <= self.bottom

    def with_geometry(self, x: float, y: float, width: float, height: float) -> AnnotationBox:
        """
        Return a copy of this box with new geometry.

        Args:
            x: New left edge
            y: New top edge
            width: New width
            height: New height

        Returns:
            New AnnotationBox, the original is left untouched
        """
        return replace(self, x=x, y=y, width=width, height=height)

    def to_bbox(self) -> List[float]:
        """Return the box as a COCO style ``[x, y, width, height]`` list."""
        return [self.x, self.y, self.width, self.height]


@dataclass
class AnnotationImage:
    """One image entry a set of boxes belongs to."""

    id: int
    file_name: str
    width: Optional[int] = None
    height: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary, omitting unknown dimensions."""
        data: Dict[str, Any] = {"id": self.id, "file_name": self.file_name}
        if self.width is not None:
            data["width"] = self.width
        if self.height is not None:
            data["height"] = self.height
        return data


@dataclass
class ParseResult:
    """
    Outcome of parsing one annotation file.

    A non-empty ``warning`` marks a degraded parse that produced a valid but
    incomplete result.
    """

    boxes: List[AnnotationBox]
    format: str
    source: AnnotationSource
    warning: Optional[str] = None
    images: Optional[List[AnnotationImage]] = None

    @property
    def has_images(self) -> bool:
        """True if the result names at least one image."""
        return bool(self.images)


@dataclass
class ImageInfo:
    """The image currently shown on the canvas."""

    file_name: Optional[str] = None
    natural_width: int = 0
    natural_height: int = 0

    @property
    def is_loaded(self) -> bool:
        """True if an image file has been loaded."""
        return bool(self.file_name)

    @property
    def has_size(self) -> bool:
        """True once the natural pixel size is known."""
        return self.natural_width > 0 and self.natural_height > 0
