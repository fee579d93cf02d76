"""YOLO annotation parsing."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from .annotation_format import AnnotationParser, coerce_number, format_id
from .models import AnnotationBox, AnnotationImage, AnnotationSource, ParseResult

logger = logging.getLogger(__name__)

# YOLO labels describe boxes of a single, externally supplied image
YOLO_IMAGE_ID = 1
DEFAULT_FILE_NAME = "image.jpg"

MISSING_SIZE_WARNING = (
    "Image size is not known yet, so YOLO boxes cannot be placed. "
    "Load the image first, then reload the annotation file."
)

_LINE_BREAK = re.compile(r"\r?\n")


class YOLOAnnotationParser(AnnotationParser):
    """
    YOLO annotation format parser.

    Each line contains ``class_id x_center y_center width height`` with all
    coordinates normalized to [0, 1]. Converting to pixels needs the natural
    size of the loaded image, which is not part of the file.
    """

    def __init__(
        self,
        img_width: int = 0,
        img_height: int = 0,
        image_name: Optional[str] = None
    ) -> None:
        """
        Initialize the parser.

        Args:
            img_width: Natural width of the loaded image in pixels (0 if unknown)
            img_height: Natural height of the loaded image in pixels (0 if unknown)
            image_name: File name of the loaded image, if any
        """
        self.img_width = img_width
        self.img_height = img_height
        self.image_name = image_name

    @property
    def source(self) -> AnnotationSource:
        """Return the format variant."""
        return AnnotationSource.YOLO

    @property
    def format_name(self) -> str:
        """Return the format label."""
        return "YOLO"

    def parse(self, raw_text: str) -> ParseResult:
        """
        Parse YOLO label text.

        Without a known image size the result is empty and carries a warning
        instead of failing.
        """
        if not self.img_width or not self.img_height:
            logger.warning("YOLO annotation parsed before the image size was known")
            return ParseResult(
                boxes=[],
                format=self.format_name,
                source=self.source,
                warning=MISSING_SIZE_WARNING,
            )

        lines = [line for line in _LINE_BREAK.split(raw_text) if line.strip()]
        boxes: List[AnnotationBox] = []
        for line_num, line in enumerate(lines, 1):
            box = self._parse_line(line, line_num)
            if box:
                boxes.append(box)

        logger.info(f"Parsed {len(boxes)} YOLO boxes from {len(lines)} lines")
        return ParseResult(
            boxes=boxes,
            format=self.format_name,
            source=self.source,
            images=[AnnotationImage(id=YOLO_IMAGE_ID, file_name=self.image_name or DEFAULT_FILE_NAME)],
        )

    def _parse_line(self, line: str, line_num: int) -> Optional[AnnotationBox]:
        """
        Parse a single annotation line.

        Args:
            line: Non-blank line from the label file
            line_num: 1-based index among non-blank lines, used as the box id

        Returns:
            AnnotationBox or None if the line is malformed
        """
        data = line.split()
        if len(data) < 5:
            logger.warning(f"Invalid annotation format on line {line_num}: {line}")
            return None

        coords = [coerce_number(value) for value in data[1:5]]
        if any(value is None for value in coords):
            logger.warning(f"Non-numeric coordinates on line {line_num}: {line}")
            return None
        x_center, y_center, width, height = coords

        abs_width = width * self.img_width
        abs_height = height * self.img_height
        box = AnnotationBox(
            id=str(line_num),
            x=x_center * self.img_width - abs_width / 2,
            y=y_center * self.img_height - abs_height / 2,
            width=abs_width,
            height=abs_height,
            image_id=YOLO_IMAGE_ID,
        )

        class_id = coerce_number(data[0])
        if class_id is not None:
            box.label = f"class_{format_id(class_id)}"
        return box
