"""Abstract base classes and shared helpers for annotation parsers."""

from __future__ import annotations

import json
import math
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .errors import AnnotationParseError
from .models import AnnotationImage, AnnotationSource, ParseResult


def coerce_number(value: Any) -> Optional[float]:
    """
    Convert a JSON or XML scalar to a finite float.

    Numbers pass through, numeric strings are parsed and an empty string
    reads as 0. Anything else (None, lists, non-numeric text, NaN) gives None.

    Args:
        value: Raw value from the document

    Returns:
        Float value or None if the value is not numeric
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def number_or_zero(value: Any) -> float:
    """Coerce a value to float, reading anything non-numeric as 0."""
    number = coerce_number(value)
    return 0.0 if number is None else number


def coerce_int(value: Any) -> Optional[int]:
    """Coerce an id-like value to int, or None if it is not integral."""
    number = coerce_number(value) if value is not None else None
    if number is None or not number.is_integer():
        return None
    return int(number)


def format_id(value: Any) -> str:
    """Render an id as text, writing integral floats without a fraction."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def first_present(record: Dict[str, Any], keys: List[str]) -> Any:
    """Return the value of the first key whose value is not None."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def images_from_list(entries: Any) -> List[AnnotationImage]:
    """
    Build image entries from a COCO style ``images`` array.

    Entries that are not objects or carry no integral id are skipped.
    """
    if not isinstance(entries, list):
        return []

    images: List[AnnotationImage] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        image_id = coerce_int(entry.get("id"))
        if image_id is None:
            continue
        images.append(AnnotationImage(
            id=image_id,
            file_name=str(entry.get("file_name") or ""),
            width=coerce_int(entry.get("width")),
            height=coerce_int(entry.get("height")),
        ))
    return images


class AnnotationParser(ABC):
    """
    Abstract base class for annotation format parsers.

    Every supported interchange format is a subclass that turns raw file
    text into one canonical ParseResult.
    """

    @property
    @abstractmethod
    def source(self) -> AnnotationSource:
        """Return the format variant handled by this parser."""
        pass

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Return the human readable format label (e.g. 'COCO', 'YOLO')."""
        pass

    @abstractmethod
    def parse(self, raw_text: str) -> ParseResult:
        """
        Parse raw annotation file text.

        Args:
            raw_text: Complete file content

        Returns:
            ParseResult with canonical boxes

        Raises:
            AnnotationParseError: If the text is syntactically malformed
        """
        pass


class JSONAnnotationParser(AnnotationParser):
    """
    Base class for parsers whose input is a JSON document.

    Subclasses implement ``parse_data`` on the decoded value so the format
    registry can decode a document once and reuse it for detection.
    """

    def parse(self, raw_text: str) -> ParseResult:
        """Decode the JSON text and parse the resulting value."""
        return self.parse_data(load_json(raw_text))

    @abstractmethod
    def parse_data(self, data: Any) -> ParseResult:
        """
        Parse an already decoded JSON value.

        Args:
            data: Decoded JSON document

        Returns:
            ParseResult with canonical boxes
        """
        pass


def load_json(raw_text: str) -> Any:
    """
    Decode JSON text.

    Raises:
        AnnotationParseError: If the text is not valid JSON
    """
    try:
        return json.loads(raw_text)
    except (json.JSONDecodeError, RecursionError) as e:
        raise AnnotationParseError(f"JSON parse failed: {e}") from e
