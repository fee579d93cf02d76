"""Generic ("simple JSON") annotation parsing."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from .annotation_format import JSONAnnotationParser, coerce_number, first_present, format_id
from .models import AnnotationBox, AnnotationSource, ParseResult

logger = logging.getLogger(__name__)

# Object keys searched for the box list, in priority order
CONTAINER_KEYS = ("boxes", "annotations", "objects")

LABEL_KEYS = ["label", "category", "text"]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class SimpleAnnotationParser(JSONAnnotationParser):
    """
    Fallback parser for loosely structured JSON.

    Accepts a top-level array of box objects, or an object holding such an
    array under ``boxes``, ``annotations`` or ``objects``. A box is given
    either as ``{"bbox": [x, y, w, h]}`` or with explicit ``x``, ``y``,
    ``width`` and ``height`` numbers.
    """

    @property
    def source(self) -> AnnotationSource:
        """Return the format variant."""
        return AnnotationSource.SIMPLE

    @property
    def format_name(self) -> str:
        """Return the format label."""
        return "Simple JSON"

    @staticmethod
    def find_items(data: Any) -> List[Any]:
        """
        Locate the list of box records.

        For objects the first container key holding a non-empty list wins.
        """
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            for key in CONTAINER_KEYS:
                items = data.get(key)
                if isinstance(items, list) and items:
                    return items
        return []

    @staticmethod
    def normalize(item: Any, index: int) -> Optional[AnnotationBox]:
        """
        Convert one record to a box.

        Args:
            item: Candidate record
            index: Position of the record, used for the fallback id

        Returns:
            AnnotationBox or None if the record is not recognized
        """
        if not isinstance(item, dict):
            return None

        raw_id = first_present(item, ["id", "name"])
        box_id = format_id(raw_id) if raw_id is not None else str(index + 1)
        raw_label = first_present(item, LABEL_KEYS)
        label = format_id(raw_label) if raw_label is not None else None

        bbox = item.get("bbox")
        if isinstance(bbox, list) and len(bbox) >= 4:
            coords = [coerce_number(value) for value in bbox[:4]]
            if all(value is not None for value in coords):
                x, y, width, height = coords
                return AnnotationBox(id=box_id, x=x, y=y, width=width, height=height, label=label)

        if all(_is_number(item.get(key)) for key in ("x", "y", "width", "height")):
            return AnnotationBox(
                id=box_id,
                x=float(item["x"]),
                y=float(item["y"]),
                width=float(item["width"]),
                height=float(item["height"]),
                label=label,
            )

        return None

    def parse_data(self, data: Any) -> ParseResult:
        """Parse a decoded JSON value of unknown layout."""
        items = self.find_items(data)
        boxes: List[AnnotationBox] = []
        for index, item in enumerate(items):
            box = self.normalize(item, index)
            if box is None:
                logger.debug(f"Skipping unrecognized record at index {index}")
                continue
            boxes.append(box)

        logger.info(f"Parsed {len(boxes)} of {len(items)} simple JSON records")
        return ParseResult(boxes=boxes, format=self.format_name, source=self.source)
