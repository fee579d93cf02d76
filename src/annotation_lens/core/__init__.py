"""Core business logic modules for Annotation Lens."""

from .models import AnnotationBox, AnnotationImage, AnnotationSource, ParseResult
from .config import AppConfig, ConfigManager
from .errors import AnnotationLensError, AnnotationParseError, ImageResolutionError
from .format_registry import FormatRegistry
from .editor import GeometryEditor

__all__ = [
    "AnnotationBox",
    "AnnotationImage",
    "AnnotationSource",
    "ParseResult",
    "AppConfig",
    "ConfigManager",
    "AnnotationLensError",
    "AnnotationParseError",
    "ImageResolutionError",
    "FormatRegistry",
    "GeometryEditor",
]
