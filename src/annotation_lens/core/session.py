"""Annotation session: ingestion, grouping and image selection state."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..utils.paths import build_attempted_path, get_base_name, resolve_relative_path, get_root_label
from .errors import AnnotationParseError
from .export import build_export_document
from .format_registry import UNSUPPORTED_FORMAT_LABEL, FormatRegistry
from .models import (
    UNGROUPED_IMAGE_ID,
    AnnotationBox,
    AnnotationImage,
    AnnotationSource,
    ImageInfo,
    ParseResult,
)
from .transform import ViewportMetrics

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_LIMIT = 5000
PREVIEW_ELLIPSIS = "\n..."

NAME_MISMATCH_MESSAGE = "Image name does not match the selected annotation entry. Please check."
NO_IMAGE_MESSAGE = "No image loaded. Load the matching image file."
READ_FAILED_MESSAGE = "Failed to read the annotation file."
FOLDER_FAILED_MESSAGE = "Failed to select folder."


def group_boxes(boxes: Sequence[AnnotationBox]) -> Dict[int, List[AnnotationBox]]:
    """
    Bucket boxes by image id, keeping their order.

    Boxes without an image id go to UNGROUPED_IMAGE_ID.
    """
    grouped: Dict[int, List[AnnotationBox]] = {}
    for box in boxes:
        image_id = box.image_id if box.image_id is not None else UNGROUPED_IMAGE_ID
        grouped.setdefault(image_id, []).append(box)
    return grouped


def truncate_preview(text: str, limit: int = DEFAULT_PREVIEW_LIMIT) -> str:
    """Cut text longer than ``limit`` characters and mark the cut."""
    if len(text) > limit:
        return text[:limit] + PREVIEW_ELLIPSIS
    return text


def format_preview(file_name: str, raw_text: str, limit: int = DEFAULT_PREVIEW_LIMIT) -> str:
    """
    Build the preview text for an annotation file.

    JSON documents are re-serialized with an indent of 2, other files are
    shown as read.
    """
    text = raw_text
    if FormatRegistry.extension_of(file_name) == ".json":
        try:
            text = json.dumps(json.loads(raw_text), indent=2, ensure_ascii=False)
        except (ValueError, RecursionError):
            text = raw_text
    return truncate_preview(text, limit)


class AnnotationSession:
    """
    State of the loaded annotation file and the image it is viewed against.

    The grouping map, image list and selection are rebuilt wholesale from
    each successful parse. Annotation loads are numbered by a monotonically
    increasing token and only the most recently started load may commit.
    """

    def __init__(self, preview_limit: int = DEFAULT_PREVIEW_LIMIT) -> None:
        """
        Initialize an empty session.

        Args:
            preview_limit: Maximum number of preview characters
        """
        self.preview_limit = preview_limit
        self._load_token = 0

        self.image = ImageInfo()
        self.image_root: Optional[Path] = None

        self.annotation_name: Optional[str] = None
        self.preview: Optional[str] = None
        self.error: Optional[str] = None
        self.mismatch: Optional[str] = None
        self.dirty = False

        self.format_label: Optional[str] = None
        self.warning: Optional[str] = None
        self.source: Optional[AnnotationSource] = None
        self.images: List[AnnotationImage] = []
        self.boxes_by_image: Dict[int, List[AnnotationBox]] = {}
        self.selected_image_id: Optional[int] = None
        self.selected_image_name: Optional[str] = None
        self.active_boxes: List[AnnotationBox] = []

    # === Load Tokens ===

    def begin_load(self) -> int:
        """Start a new annotation load and return its token."""
        self._load_token += 1
        return self._load_token

    def is_current(self, token: int) -> bool:
        """Check whether a token belongs to the most recently started load."""
        return token == self._load_token

    # === Ingestion ===

    def ingest(
        self,
        token: int,
        file_name: str,
        raw_text: str,
        metrics: Optional[ViewportMetrics] = None,
        image_name: Optional[str] = None
    ) -> bool:
        """
        Detect, parse and apply an annotation file.

        Parse errors become the session error and clear all derived state.
        An unsupported file resets the state with the "Unsupported" label.

        Args:
            token: Token from begin_load
            file_name: Name of the annotation file
            raw_text: Complete file content
            metrics: Current viewport metrics, used for YOLO sizing
            image_name: File name of the loaded image, if any

        Returns:
            True if the load was committed, False if a newer load superseded it
        """
        if not self.is_current(token):
            logger.debug(f"Discarding stale annotation load {token} for {file_name}")
            return False

        metrics = metrics or ViewportMetrics()
        self.annotation_name = file_name
        self.error = None
        self.warning = None
        self.mismatch = None
        self.dirty = False

        try:
            result = FormatRegistry.parse_file(
                file_name,
                raw_text,
                metrics.natural_width,
                metrics.natural_height,
                image_name,
            )
        except AnnotationParseError as e:
            logger.error(f"Failed to parse {file_name}: {e}")
            self._fail(str(e))
            return True

        self.preview = format_preview(file_name, raw_text, self.preview_limit)

        if result is None:
            self._clear_derived()
            self.format_label = UNSUPPORTED_FORMAT_LABEL
            return True

        self.apply_result(result)
        if self.images and self.image_root is None:
            self.check_mismatch(image_name, require_image=False)
        return True

    def apply_read_error(self, token: int, file_name: str, message: Optional[str] = None) -> bool:
        """
        Record a failure to read an annotation file.

        Returns:
            True if the failure was committed, False if the load is stale
        """
        if not self.is_current(token):
            return False

        self.annotation_name = file_name
        self._fail(message or READ_FAILED_MESSAGE)
        return True

    def apply_result(self, result: ParseResult) -> None:
        """
        Rebuild grouping and selection from a parse result.

        The first image entry is selected when the result names images,
        otherwise every box forms one ungrouped active set.
        """
        self.images = list(result.images or [])
        self.boxes_by_image = group_boxes(result.boxes)
        self.format_label = result.format
        self.source = result.source
        self.warning = result.warning

        if result.has_images:
            first = self.images[0]
            self.selected_image_id = first.id
            self.selected_image_name = first.file_name
            self.active_boxes = list(self.boxes_by_image.get(first.id, []))
        else:
            self.selected_image_id = None
            self.selected_image_name = None
            self.active_boxes = list(result.boxes)

        logger.info(
            f"Loaded {len(result.boxes)} boxes in {len(self.images)} image entries "
            f"({result.format})"
        )

    def _fail(self, message: str) -> None:
        self.error = message
        self.preview = None
        self._clear_derived()

    def _clear_derived(self) -> None:
        self.format_label = None
        self.source = None
        self.images = []
        self.boxes_by_image = {}
        self.selected_image_id = None
        self.selected_image_name = None
        self.active_boxes = []

    def reset(self) -> None:
        """Forget the loaded annotation file."""
        self.annotation_name = None
        self.preview = None
        self.error = None
        self.warning = None
        self.mismatch = None
        self.dirty = False
        self._clear_derived()

    # === Selection ===

    def find_image(self, image_id: int) -> Optional[AnnotationImage]:
        """Find an image entry by id."""
        for item in self.images:
            if item.id == image_id:
                return item
        return None

    def select_image(self, image_id: int) -> Optional[AnnotationImage]:
        """
        Make an image entry the current selection.

        Swaps in the stored boxes of that image. Edits made to the previous
        active set are not written back.

        Args:
            image_id: Id of the entry to select

        Returns:
            The selected entry, or None if the id is unknown
        """
        item = self.find_image(image_id)
        if item is None:
            logger.warning(f"Unknown image id: {image_id}")
            return None

        self.selected_image_id = item.id
        self.selected_image_name = item.file_name
        self.active_boxes = list(self.boxes_by_image.get(item.id, []))
        return item

    def box_count(self, image_id: int) -> int:
        """Number of boxes stored for an image entry."""
        return len(self.boxes_by_image.get(image_id, []))

    def set_active_boxes(self, boxes: Sequence[AnnotationBox]) -> None:
        """Replace the active box set after an edit."""
        self.active_boxes = list(boxes)
        self.dirty = True

    @property
    def has_annotations(self) -> bool:
        """True if there is at least one box to draw."""
        return bool(self.active_boxes)

    @property
    def is_unparsed(self) -> bool:
        """True if an annotation file is loaded but produced no box."""
        return bool(self.annotation_name) and not self.active_boxes

    # === Image State ===

    @property
    def root_label(self) -> Optional[str]:
        """Display name of the image root, or None if none is selected."""
        if self.image_root is None:
            return None
        return get_root_label(self.image_root)

    def set_image_root(self, root: Optional[Path]) -> None:
        """Select the directory image entries are resolved against."""
        self.image_root = root
        self.mismatch = None

    def locate_image(self, file_name: str) -> Optional[Path]:
        """
        Resolve an image entry's file name below the image root.

        Args:
            file_name: Possibly multi-segment relative path

        Returns:
            Path of the image file, or None if no root is selected

        Raises:
            ImageResolutionError: If the path does not exist below the root
        """
        if self.image_root is None:
            return None
        return resolve_relative_path(self.image_root, file_name)

    def set_image(self, file_name: str, natural_width: int = 0, natural_height: int = 0) -> None:
        """Record the image shown on the canvas."""
        self.image = ImageInfo(file_name, natural_width, natural_height)

    def set_image_size(self, natural_width: int, natural_height: int) -> None:
        """Record the natural size once the image has decoded."""
        self.image = ImageInfo(self.image.file_name, natural_width, natural_height)

    def report_image_failure(self, file_name: str) -> str:
        """
        Record that the image for an entry could not be loaded.

        Annotation state is kept.

        Returns:
            The mismatch message
        """
        self.mismatch = f"Failed to load image. Path: {build_attempted_path(self.root_label, file_name)}"
        return self.mismatch

    def report_folder_failure(self) -> str:
        """Record that the image root could not be selected."""
        self.mismatch = FOLDER_FAILED_MESSAGE
        return self.mismatch

    def clear_mismatch(self) -> None:
        """Forget the current mismatch message."""
        self.mismatch = None

    def check_mismatch(self, image_name: Optional[str], require_image: bool = True) -> Optional[str]:
        """
        Compare the selected entry's base name with the loaded image name.

        Args:
            image_name: File name of the loaded image
            require_image: Report a missing image as a mismatch

        Returns:
            The mismatch message, or None if the names agree
        """
        if not self.selected_image_name:
            self.mismatch = None
        elif not image_name:
            self.mismatch = NO_IMAGE_MESSAGE if require_image else None
        elif get_base_name(self.selected_image_name) != image_name:
            self.mismatch = NAME_MISMATCH_MESSAGE
        else:
            self.mismatch = None
        return self.mismatch

    # === Export ===

    def export_document(self) -> Optional[Dict[str, Any]]:
        """Build the export document for the active boxes and loaded image."""
        return build_export_document(
            self.active_boxes,
            self.image.file_name,
            self.image.natural_width,
            self.image.natural_height,
        )

    def mark_saved(self) -> None:
        """Clear the unsaved changes flag after an export."""
        self.dirty = False
