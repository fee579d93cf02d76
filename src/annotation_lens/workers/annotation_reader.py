"""Background annotation file reading worker thread."""

from __future__ import annotations

import logging
from pathlib import Path

from PyQt6.QtCore import QThread, pyqtSignal

from ..core.format_registry import ACCEPTED_EXTENSIONS

logger = logging.getLogger(__name__)

# Extensions offered by the annotation file dialog
ANNOTATION_FILE_FILTER = "Annotation files (" + " ".join(f"*{ext}" for ext in ACCEPTED_EXTENSIONS) + ")"

# Supported image extensions
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp"}
IMAGE_FILE_FILTER = "Images (" + " ".join(f"*{ext}" for ext in sorted(IMAGE_EXTENSIONS)) + ")"


class AnnotationFileReader(QThread):
    """
    Background thread reading one annotation file as text.

    Results are tagged with the load token they were started with so the
    receiver can drop results of superseded loads.
    """

    # Signal emitted with (token, file name, text) on success
    loaded = pyqtSignal(int, str, str)

    # Signal emitted with (token, file name, error message) on failure
    failed = pyqtSignal(int, str, str)

    def __init__(self, token: int, path: str) -> None:
        """
        Initialize the reader.

        Args:
            token: Load token from AnnotationSession.begin_load
            path: Path of the annotation file
        """
        super().__init__()
        self.token = token
        self.path = Path(path)

    def run(self) -> None:
        """Read the file and emit the result."""
        try:
            text = self.path.read_text(encoding="utf-8-sig", errors="replace")
        except OSError as e:
            logger.error(f"Error reading annotation file {self.path}: {e}")
            self.failed.emit(self.token, self.path.name, f"Failed to read {self.path.name}: {e.strerror or e}")
            return

        logger.info(f"Read annotation file {self.path} ({len(text)} characters)")
        self.loaded.emit(self.token, self.path.name, text)
