"""Serialization of the active box set to a COCO-Text style document."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .models import AnnotationBox, AnnotationImage

logger = logging.getLogger(__name__)

EXPORT_IMAGE_ID = 1
EXPORT_SUFFIX = "_coco-text.json"

_EXTENSION = re.compile(r"\.[^/.]+$")


def build_export_document(
    boxes: Sequence[AnnotationBox],
    image_name: Optional[str],
    img_width: int = 0,
    img_height: int = 0
) -> Optional[Dict[str, Any]]:
    """
    Build the export document for one image.

    JSON structure:
    {
        "images": [{"id": 1, "file_name": "image.jpg", "width": 640, "height": 480}],
        "annotations": [
            {"id": 1, "image_id": 1, "bbox": [x, y, width, height], "transcription": "text"}
        ]
    }

    Args:
        boxes: Active box collection
        image_name: File name of the loaded image
        img_width: Natural image width (omitted when 0)
        img_height: Natural image height (omitted when 0)

    Returns:
        Document dictionary, or None if there is no image or no box
    """
    if not image_name or not boxes:
        return None

    image = AnnotationImage(EXPORT_IMAGE_ID, image_name, img_width or None, img_height or None)

    annotations = [
        {
            "id": index,
            "image_id": EXPORT_IMAGE_ID,
            "bbox": box.to_bbox(),
            "transcription": box.label or "",
        }
        for index, box in enumerate(boxes, start=1)
    ]

    return {"images": [image.to_dict()], "annotations": annotations}


def export_file_name(image_name: str) -> str:
    """Suggested export file name: image name without extension plus suffix."""
    return _EXTENSION.sub("", image_name) + EXPORT_SUFFIX


def write_export_document(path: Path, document: Dict[str, Any]) -> bool:
    """
    Write an export document as UTF-8 JSON.

    Args:
        path: Destination file
        document: Document from build_export_document

    Returns:
        True if the write was successful
    """
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, ensure_ascii=False)

        logger.info(f"Exported {len(document.get('annotations', []))} annotations to {path}")
        return True

    except Exception as e:
        logger.error(f"Error writing export file {path}: {e}")
        return False
