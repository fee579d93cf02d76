"""UI components for Annotation Lens."""

from .canvas import AnnotationCanvas
from .image_list import AnnotationImageList
from .annotation_panel import AnnotationPanel
from .main_window import MainWindow

__all__ = [
    "AnnotationCanvas",
    "AnnotationImageList",
    "AnnotationPanel",
    "MainWindow",
]
