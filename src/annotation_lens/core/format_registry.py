"""Format registry for annotation format detection and parser dispatch."""

from __future__ import annotations

import logging
from pathlib import PurePath
from typing import Any, Dict, Optional, Type

from .annotation_format import AnnotationParser, JSONAnnotationParser, load_json
from .coco_format import COCOAnnotationParser, COCOTextAnnotationParser, has_text_fields
from .models import AnnotationSource, ParseResult
from .pascal_voc_format import PascalVOCAnnotationParser
from .simple_format import SimpleAnnotationParser
from .yolo_format import YOLOAnnotationParser

logger = logging.getLogger(__name__)

# Extensions offered by the annotation file dialog. ".csv" is accepted but no
# parser handles it yet.
ACCEPTED_EXTENSIONS = (".json", ".xml", ".txt", ".csv")

UNSUPPORTED_FORMAT_LABEL = "Unsupported"

# Format display names
FORMAT_DISPLAY_NAMES = {
    AnnotationSource.COCO: "COCO",
    AnnotationSource.COCO_TEXT: "COCO-Text",
    AnnotationSource.VOC: "Pascal VOC",
    AnnotationSource.YOLO: "YOLO",
    AnnotationSource.SIMPLE: "Simple JSON",
}


class FormatRegistry:
    """
    Registry for annotation parsers.

    Detection is a pure function of the file extension and, for JSON, the
    decoded document. Each detected variant maps to exactly one parser class.
    """

    # Map format variants to parser classes
    _formats: Dict[AnnotationSource, Type[AnnotationParser]] = {
        AnnotationSource.COCO: COCOAnnotationParser,
        AnnotationSource.COCO_TEXT: COCOTextAnnotationParser,
        AnnotationSource.VOC: PascalVOCAnnotationParser,
        AnnotationSource.YOLO: YOLOAnnotationParser,
        AnnotationSource.SIMPLE: SimpleAnnotationParser,
    }

    @classmethod
    def get_display_name(cls, source: AnnotationSource) -> str:
        """Get the display name for a format."""
        return FORMAT_DISPLAY_NAMES.get(source, str(source))

    @classmethod
    def get_handler(
        cls,
        source: AnnotationSource,
        img_width: int = 0,
        img_height: int = 0,
        image_name: Optional[str] = None
    ) -> AnnotationParser:
        """
        Get an instance of a format parser.

        Args:
            source: Format variant
            img_width: Natural width of the loaded image (YOLO only)
            img_height: Natural height of the loaded image (YOLO only)
            image_name: File name of the loaded image (YOLO only)

        Returns:
            AnnotationParser instance

        Raises:
            ValueError: If the format is unknown
        """
        if source not in cls._formats:
            raise ValueError(f"Unknown format: {source}")

        if source == AnnotationSource.YOLO:
            return YOLOAnnotationParser(img_width, img_height, image_name)
        return cls._formats[source]()

    @staticmethod
    def extension_of(file_name: str) -> str:
        """Return the lower-cased extension of a file name."""
        return PurePath(file_name).suffix.lower()

    @classmethod
    def detect_source(cls, file_name: str, data: Any = None) -> Optional[AnnotationSource]:
        """
        Detect the annotation format of a file.

        Detection order:
        1. .json whose object has an "annotations" key: COCO-Text if any
           annotation carries transcription/utf8_string/text, else COCO
        2. any other .json: simple JSON
        3. .xml: Pascal VOC
        4. .txt: YOLO
        5. anything else: None (unsupported)

        Args:
            file_name: Name of the annotation file
            data: Decoded JSON document, only consulted for .json files

        Returns:
            Format variant or None if the file is unsupported
        """
        extension = cls.extension_of(file_name)

        if extension == ".json":
            if isinstance(data, dict) and "annotations" in data:
                if has_text_fields(data["annotations"]):
                    return AnnotationSource.COCO_TEXT
                return AnnotationSource.COCO
            return AnnotationSource.SIMPLE
        if extension == ".xml":
            return AnnotationSource.VOC
        if extension == ".txt":
            return AnnotationSource.YOLO
        return None

    @classmethod
    def parse_file(
        cls,
        file_name: str,
        raw_text: str,
        img_width: int = 0,
        img_height: int = 0,
        image_name: Optional[str] = None
    ) -> Optional[ParseResult]:
        """
        Detect the format of an annotation file and parse it.

        Args:
            file_name: Name of the annotation file
            raw_text: Complete file content
            img_width: Natural width of the loaded image (0 if unknown)
            img_height: Natural height of the loaded image (0 if unknown)
            image_name: File name of the loaded image, if any

        Returns:
            ParseResult, or None if the extension is unsupported

        Raises:
            AnnotationParseError: If the document is syntactically malformed
        """
        data: Any = None
        if cls.extension_of(file_name) == ".json":
            data = load_json(raw_text)

        source = cls.detect_source(file_name, data)
        if source is None:
            logger.info(f"Unsupported annotation file: {file_name}")
            return None

        logger.info(f"Detected {cls.get_display_name(source)} format in {file_name}")
        handler = cls.get_handler(source, img_width, img_height, image_name)
        if isinstance(handler, JSONAnnotationParser):
            return handler.parse_data(data)
        return handler.parse(raw_text)
