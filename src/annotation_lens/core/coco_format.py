"""COCO and COCO-Text annotation parsing."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .annotation_format import (
    JSONAnnotationParser, coerce_int, first_present, format_id,
    images_from_list, number_or_zero
)
from .models import AnnotationBox, AnnotationSource, ParseResult

logger = logging.getLogger(__name__)

# Annotation keys whose presence marks a COCO-Text document
TEXT_FIELDS = ("transcription", "utf8_string", "text")

# Lookup order for the COCO-Text label
TRANSCRIPTION_KEYS = ["transcription", "utf8_string", "text", "label"]


def has_text_fields(annotations: Any) -> bool:
    """Check whether any annotation entry carries a transcription field."""
    if not isinstance(annotations, list):
        return False
    return any(
        isinstance(ann, dict) and any(key in ann for key in TEXT_FIELDS)
        for ann in annotations
    )


def _annotation_list(data: Any) -> List[Any]:
    if isinstance(data, dict) and isinstance(data.get("annotations"), list):
        return data["annotations"]
    return []


def _box_from_annotation(ann: Any, index: int, label: Optional[str]) -> AnnotationBox:
    """
    Build a box from one COCO annotation entry.

    A missing or malformed ``bbox`` reads as ``[0, 0, 0, 0]``.
    """
    record = ann if isinstance(ann, dict) else {}
    bbox = record.get("bbox")
    if not isinstance(bbox, list):
        bbox = [0, 0, 0, 0]
    coords = [number_or_zero(bbox[i]) if i < len(bbox) else 0.0 for i in range(4)]
    ann_id = record.get("id")

    return AnnotationBox(
        id=format_id(ann_id) if ann_id is not None else str(index + 1),
        x=coords[0],
        y=coords[1],
        width=coords[2],
        height=coords[3],
        label=label,
        image_id=coerce_int(record.get("image_id")),
    )


class COCOAnnotationParser(JSONAnnotationParser):
    """
    COCO annotation format parser.

    JSON structure:
    {
        "images": [
            {"id": 1, "file_name": "image.jpg", "width": 1920, "height": 1080}
        ],
        "annotations": [
            {"id": 1, "image_id": 1, "category_id": 1, "bbox": [x, y, width, height]}
        ],
        "categories": [
            {"id": 1, "name": "cat", "supercategory": "animal"}
        ]
    }
    """

    @property
    def source(self) -> AnnotationSource:
        """Return the format variant."""
        return AnnotationSource.COCO

    @property
    def format_name(self) -> str:
        """Return the format label."""
        return "COCO"

    @staticmethod
    def category_names(data: Any) -> Dict[Any, str]:
        """
        Build the category id to name lookup.

        Categories without an id are ignored; a category without a name is
        labelled with its id.
        """
        categories = data.get("categories") if isinstance(data, dict) else None
        names: Dict[Any, str] = {}
        if not isinstance(categories, list):
            return names

        for cat in categories:
            if not isinstance(cat, dict) or cat.get("id") is None:
                continue
            name = cat.get("name")
            names[cat["id"]] = str(name) if name is not None else format_id(cat["id"])
        return names

    def parse_data(self, data: Any) -> ParseResult:
        """Parse a decoded COCO document."""
        categories = self.category_names(data)

        boxes: List[AnnotationBox] = []
        for index, ann in enumerate(_annotation_list(data)):
            record = ann if isinstance(ann, dict) else {}
            category_id = record.get("category_id")
            label = categories.get(category_id) if _hashable(category_id) else None
            if label is None and record.get("label") is not None:
                label = format_id(record["label"])
            boxes.append(_box_from_annotation(ann, index, label))

        images = images_from_list(data.get("images") if isinstance(data, dict) else None)
        logger.info(f"Parsed {len(boxes)} COCO annotations for {len(images)} images")
        return ParseResult(boxes=boxes, format=self.format_name, source=self.source, images=images)


class COCOTextAnnotationParser(JSONAnnotationParser):
    """
    COCO-Text annotation format parser.

    Same layout as COCO, but each annotation carries its text in
    ``transcription`` (or ``utf8_string`` / ``text``), which becomes the label.
    """

    @property
    def source(self) -> AnnotationSource:
        """Return the format variant."""
        return AnnotationSource.COCO_TEXT

    @property
    def format_name(self) -> str:
        """Return the format label."""
        return "COCO-Text"

    @staticmethod
    def transcription_of(ann: Any) -> Optional[str]:
        """Return the first present transcription field as text."""
        if not isinstance(ann, dict):
            return None
        value = first_present(ann, TRANSCRIPTION_KEYS)
        if value is None or value == "":
            return None
        return value if isinstance(value, str) else format_id(value)

    def parse_data(self, data: Any) -> ParseResult:
        """Parse a decoded COCO-Text document."""
        boxes = [
            _box_from_annotation(ann, index, self.transcription_of(ann))
            for index, ann in enumerate(_annotation_list(data))
        ]

        images = images_from_list(data.get("images") if isinstance(data, dict) else None)
        logger.info(f"Parsed {len(boxes)} COCO-Text annotations for {len(images)} images")
        return ParseResult(boxes=boxes, format=self.format_name, source=self.source, images=images)


def _hashable(value: Any) -> bool:
    return not isinstance(value, (list, dict))
