"""
Annotation Lens - A desktop viewer and box editor for object annotations.

Built with PyQt6. Loads COCO, COCO-Text, Pascal VOC, YOLO and simple JSON
annotation files, overlays their bounding boxes on the matching image and
lets the boxes be moved and resized before exporting a COCO-Text document.
"""

__version__ = "1.0.0"
__author__ = "Annotation Lens Team"
