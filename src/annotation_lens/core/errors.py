"""Exception types raised by Annotation Lens."""

from __future__ import annotations


class AnnotationLensError(Exception):
    """Base class for all Annotation Lens errors."""


class AnnotationParseError(AnnotationLensError):
    """Raised when an annotation document is syntactically malformed."""


class ImageResolutionError(AnnotationLensError):
    """
    Raised when an image path cannot be resolved below an image root.

    Carries the root label and the normalized relative path that was tried
    so the message shown to the user names the exact location.
    """

    def __init__(self, root_label: str, relative_path: str) -> None:
        self.root_label = root_label
        self.relative_path = relative_path
        super().__init__(f"Root: {root_label} / Relative path: {relative_path}")
