"""Image entry list widget for multi-image annotation files."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QAbstractItemView, QListWidget, QListWidgetItem, QWidget

from ..core.models import AnnotationImage
from ..utils.paths import get_base_name

logger = logging.getLogger(__name__)

EMPTY_TEXT = "No annotation data loaded"


class ImageEntryItem(QListWidgetItem):
    """List item for one image entry of an annotation file."""

    def __init__(self, position: int, image: AnnotationImage, box_count: int) -> None:
        """
        Initialize the item.

        Args:
            position: One-based position in the list
            image: Image entry
            box_count: Number of boxes stored for the entry
        """
        super().__init__(f"{position}  {get_base_name(image.file_name)}  ({box_count} boxes)")
        self.image = image
        self.setToolTip(image.file_name)
        self.setData(Qt.ItemDataRole.UserRole, image.id)


class AnnotationImageList(QListWidget):
    """
    List of the image entries named by an annotation file.

    Emits ``image_selected`` with the entry's image id when the user picks
    an entry.
    """

    image_selected = pyqtSignal(int)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        """Initialize the list."""
        super().__init__(parent)
        self.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.itemClicked.connect(self._on_item_clicked)
        self._show_empty()

    def _show_empty(self) -> None:
        placeholder = QListWidgetItem(EMPTY_TEXT)
        placeholder.setFlags(Qt.ItemFlag.NoItemFlags)
        self.addItem(placeholder)

    def set_images(
        self,
        images: Sequence[AnnotationImage],
        box_count: Callable[[int], int],
        selected_id: Optional[int] = None
    ) -> None:
        """
        Rebuild the list.

        Args:
            images: Image entries in file order
            box_count: Function returning the box count of an image id
            selected_id: Id of the entry to highlight
        """
        self.blockSignals(True)
        self.clear()

        if not images:
            self._show_empty()
        for position, image in enumerate(images, start=1):
            item = ImageEntryItem(position, image, box_count(image.id))
            self.addItem(item)
            if image.id == selected_id:
                item.setSelected(True)
                self.setCurrentItem(item)

        self.blockSignals(False)
        logger.debug(f"Image list rebuilt with {len(images)} entries")

    def _on_item_clicked(self, item: QListWidgetItem) -> None:
        if isinstance(item, ImageEntryItem):
            self.image_selected.emit(item.image.id)
