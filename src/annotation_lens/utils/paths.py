"""Image path helpers: normalization and resolution below an image root."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from ..core.errors import ImageResolutionError

logger = logging.getLogger(__name__)

NO_ROOT_LABEL = "not selected"


def normalize_path(value: str) -> str:
    """Convert backslashes to forward slashes."""
    return value.replace("\\", "/")


def path_segments(value: str) -> List[str]:
    """Split a relative path into its non-empty segments."""
    return [part for part in normalize_path(value).split("/") if part]


def get_base_name(value: str) -> str:
    """
    Get the last segment of a path.

    Falls back to the normalized value when the path ends in a separator.
    """
    normalized = normalize_path(value)
    return normalized.split("/")[-1] or normalized


def get_root_label(root: Path) -> str:
    """Display name of an image root; the full path for a filesystem root."""
    return root.name or str(root)


def build_attempted_path(root_name: Optional[str], file_name: str) -> str:
    """
    Describe a resolution attempt for user-facing messages.

    Args:
        root_name: Name of the image root, or None when no root is selected
        file_name: Relative path that was tried

    Returns:
        String of the form ``"Root: <label> / Relative path: <path>"``
    """
    label = root_name if root_name is not None else NO_ROOT_LABEL
    return f"Root: {label} / Relative path: {normalize_path(file_name)}"


def resolve_relative_path(root: Path, relative: str) -> Path:
    """
    Resolve a possibly multi-segment relative path below a root directory.

    Segments are followed strictly downward: "." and ".." are rejected.
    Every intermediate segment must name an existing subdirectory and the
    last segment an existing file. Nothing is returned until the whole path
    has been checked.

    Args:
        root: Image root directory
        relative: Relative path from an annotation file

    Returns:
        Path of the existing file

    Raises:
        ImageResolutionError: If any segment is missing or leaves the root
    """
    normalized = normalize_path(relative)
    parts = path_segments(relative)
    label = get_root_label(root)
    if not parts:
        raise ImageResolutionError(label, normalized)
    if any(part in (".", "..") for part in parts):
        logger.warning(f"Rejected relative path leaving the image root: {normalized}")
        raise ImageResolutionError(label, normalized)

    current = root
    for part in parts[:-1]:
        current = current / part
        if not current.is_dir():
            logger.warning(f"Directory not found below image root: {current}")
            raise ImageResolutionError(label, normalized)

    target = current / parts[-1]
    if not target.is_file():
        logger.warning(f"Image not found below image root: {target}")
        raise ImageResolutionError(label, normalized)

    return target
