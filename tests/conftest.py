"""Pytest configuration and fixtures."""

import os
import pytest
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Widgets are created without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def qapp():
    """Create a QApplication for tests that need it."""
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])

    yield app


@pytest.fixture
def coco_document():
    """A two-image COCO document with categories."""
    return {
        "images": [
            {"id": 1, "file_name": "images/first.jpg", "width": 640, "height": 480},
            {"id": 2, "file_name": "images/second.jpg", "width": 320, "height": 240},
        ],
        "annotations": [
            {"id": 10, "image_id": 1, "category_id": 1, "bbox": [10, 20, 30, 40]},
            {"id": 11, "image_id": 1, "category_id": 2, "bbox": [50, 60, 70, 80]},
            {"id": 12, "image_id": 2, "category_id": 1, "bbox": [1, 2, 3, 4]},
        ],
        "categories": [
            {"id": 1, "name": "cat"},
            {"id": 2, "name": "dog"},
        ],
    }


@pytest.fixture
def sample_voc_xml():
    """A Pascal VOC document with two objects."""
    return (
        "<annotation>"
        "<filename>street.jpg</filename>"
        "<size><width>800</width><height>600</height><depth>3</depth></size>"
        "<object><name>car</name>"
        "<bndbox><xmin>100</xmin><ymin>120</ymin><xmax>300</xmax><ymax>260</ymax></bndbox>"
        "</object>"
        "<object><name>person</name>"
        "<bndbox><xmin>400</xmin><ymin>50</ymin><xmax>450</xmax><ymax>200</ymax></bndbox>"
        "</object>"
        "</annotation>"
    )
