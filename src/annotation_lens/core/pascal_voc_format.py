"""Pascal VOC annotation parsing."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import List, Optional

from .annotation_format import AnnotationParser, coerce_int, number_or_zero
from .errors import AnnotationParseError
from .models import AnnotationBox, AnnotationImage, AnnotationSource, ParseResult

logger = logging.getLogger(__name__)

# Pascal VOC files describe exactly one image
VOC_IMAGE_ID = 1
DEFAULT_FILE_NAME = "image.jpg"


def _first_text(element: ET.Element, tag: str) -> Optional[str]:
    """Return the text of the first descendant (or self) named ``tag``."""
    found = next(element.iter(tag), None)
    if found is None:
        return None
    return found.text or ""


class PascalVOCAnnotationParser(AnnotationParser):
    """
    Pascal VOC annotation format parser.

    XML structure:
    <annotation>
        <filename>image.jpg</filename>
        <size>
            <width>1920</width>
            <height>1080</height>
        </size>
        <object>
            <name>cat</name>
            <bndbox>
                <xmin>100</xmin>
                <ymin>100</ymin>
                <xmax>200</xmax>
                <ymax>200</ymax>
            </bndbox>
        </object>
    </annotation>
    """

    @property
    def source(self) -> AnnotationSource:
        """Return the format variant."""
        return AnnotationSource.VOC

    @property
    def format_name(self) -> str:
        """Return the format label."""
        return "Pascal VOC"

    def parse(self, raw_text: str) -> ParseResult:
        """
        Parse a Pascal VOC XML document.

        Objects without a ``<bndbox>`` are dropped. Inverted min/max pairs
        give a zero width or height instead of negative geometry.

        Raises:
            AnnotationParseError: If the XML is malformed
        """
        try:
            root = ET.fromstring(raw_text)
        except ET.ParseError as e:
            logger.error(f"Error parsing Pascal VOC XML: {e}")
            raise AnnotationParseError("XML parse failed") from e

        file_name = _first_text(root, "filename")
        width = coerce_int(_first_text(root, "width"))
        height = coerce_int(_first_text(root, "height"))

        boxes: List[AnnotationBox] = []
        for index, obj in enumerate(root.iter("object")):
            bndbox = next(obj.iter("bndbox"), None)
            if bndbox is None:
                logger.debug(f"Skipping object {index + 1}: no bndbox")
                continue

            xmin = number_or_zero(_first_text(bndbox, "xmin"))
            ymin = number_or_zero(_first_text(bndbox, "ymin"))
            xmax = number_or_zero(_first_text(bndbox, "xmax"))
            ymax = number_or_zero(_first_text(bndbox, "ymax"))

            name = _first_text(obj, "name")
            boxes.append(AnnotationBox(
                id=str(index + 1),
                x=xmin,
                y=ymin,
                width=max(0.0, xmax - xmin),
                height=max(0.0, ymax - ymin),
                label=name or None,
                image_id=VOC_IMAGE_ID,
            ))

        image = AnnotationImage(
            id=VOC_IMAGE_ID,
            file_name=file_name if file_name is not None else DEFAULT_FILE_NAME,
            width=width or 0,
            height=height or 0,
        )

        logger.info(f"Parsed {len(boxes)} Pascal VOC objects for {image.file_name}")
        return ParseResult(
            boxes=boxes,
            format=self.format_name,
            source=self.source,
            images=[image],
        )
