"""Main application window for Annotation Lens."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from PyQt6.QtCore import QEvent, QSize, Qt
from PyQt6.QtGui import QAction, QFont, QIcon, QImageReader, QPainter, QPixmap
from PyQt6.QtWidgets import (
    QDockWidget, QFileDialog, QLabel, QMainWindow, QMessageBox, QScrollArea,
    QStatusBar, QToolBar
)

from ..core.config import AppConfig, ConfigManager
from ..core.errors import ImageResolutionError
from ..core.export import export_file_name, write_export_document
from ..core.session import AnnotationSession
from ..core.transform import DEFAULT_ZOOM, fit_size, zoom_step_in, zoom_step_out
from ..workers.annotation_reader import (
    ANNOTATION_FILE_FILTER, IMAGE_FILE_FILTER, AnnotationFileReader
)
from .annotation_panel import AnnotationPanel
from .canvas import AnnotationCanvas
from .image_list import AnnotationImageList

logger = logging.getLogger(__name__)

# Margin kept free around the fitted image inside the viewport
FIT_MARGIN = 20

UNPARSED_BADGE_TEXT = "Annotations not parsed"


def increase_image_allocation_limit() -> None:
    """Remove image allocation limit for large images."""
    QImageReader.setAllocationLimit(0)


class MainWindow(QMainWindow):
    """
    Main application window for Annotation Lens.

    Provides the complete UI for reviewing annotation files including:
    - Image display with zoom
    - Loading COCO, COCO-Text, Pascal VOC, YOLO and simple JSON files
    - Resolving image entries below an image root folder
    - Moving and resizing boxes
    - COCO-Text export of the edited boxes
    """

    def __init__(self) -> None:
        """Initialize the main window."""
        super().__init__()

        # Remove image allocation limit
        increase_image_allocation_limit()

        # Initialize managers
        self.config_manager = ConfigManager()
        self.session = AnnotationSession(preview_limit=self.config.preview_limit)
        self._readers: List[AnnotationFileReader] = []

        # UI elements (initialized in _init_ui)
        self.dock_widgets: Dict[str, QDockWidget] = {}
        self.canvas: Optional[AnnotationCanvas] = None
        self.scroll_area: Optional[QScrollArea] = None
        self.image_list: Optional[AnnotationImageList] = None
        self.annotation_panel: Optional[AnnotationPanel] = None

        # Status bar elements
        self.status_bar: Optional[QStatusBar] = None
        self.mismatch_label: Optional[QLabel] = None
        self.badge_label: Optional[QLabel] = None
        self.image_label: Optional[QLabel] = None
        self.format_label: Optional[QLabel] = None
        self.zoom_label: Optional[QLabel] = None
        self.root_label: Optional[QLabel] = None

        self._init_ui()
        self._setup_connections()
        self._load_settings()
        self._refresh()

        logger.info("MainWindow initialization complete")

    @property
    def config(self) -> AppConfig:
        """Get the current configuration."""
        return self.config_manager.config

    def _load_settings(self) -> None:
        """Apply persisted settings."""
        config = self.config

        self.canvas.line_thickness = config.line_thickness
        self.canvas.font_size = config.font_size
        self.canvas.handle_radius = config.handle_radius
        self.canvas.editor.min_size = config.min_box_size

        self.edit_action.setChecked(config.edit_mode_on_start)
        self.canvas.set_edit_mode(config.edit_mode_on_start)

        self.dock_widgets["Annotation File"].setVisible(config.show_annotation_panel)
        self.panel_action.setChecked(config.show_annotation_panel)

        root = config.image_root_directory
        if root and Path(root).is_dir():
            self.session.set_image_root(Path(root))
            logger.info(f"Restored image root {root}")

    def _init_ui(self) -> None:
        """Initialize the user interface."""
        self.setWindowTitle("Annotation Lens")
        self.setGeometry(100, 100, 1200, 800)

        self.scroll_area = QScrollArea()
        self.scroll_area.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.canvas = AnnotationCanvas()
        self.canvas.set_scroll_area(self.scroll_area)
        self.scroll_area.setWidget(self.canvas)
        self.scroll_area.setWidgetResizable(False)
        self.setCentralWidget(self.scroll_area)

        self._create_status_bar()
        self._create_dock_widgets()
        self._create_toolbar()
        self._create_menus()

    def _create_status_bar(self) -> None:
        """Create the status bar."""
        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)

        self.mismatch_label = QLabel()
        self.mismatch_label.setStyleSheet("QLabel { color: #C62828; }")
        self.status_bar.addWidget(self.mismatch_label, 1)

        self.badge_label = QLabel(UNPARSED_BADGE_TEXT)
        self.badge_label.setStyleSheet(
            "QLabel { background-color: #B26A00; color: white; padding: 1px 6px; border-radius: 3px; }"
        )
        self.status_bar.addPermanentWidget(self.badge_label)

        self.image_label = QLabel()
        self.status_bar.addPermanentWidget(self.image_label)

        self.format_label = QLabel()
        self.status_bar.addPermanentWidget(self.format_label)

        self.zoom_label = QLabel()
        self.status_bar.addPermanentWidget(self.zoom_label)

    def _create_dock_widgets(self) -> None:
        """Create all dock widgets."""
        # Image entries dock
        self.image_list = AnnotationImageList()
        self.dock_widgets["Annotations"] = QDockWidget("Annotations", self)
        self.dock_widgets["Annotations"].setObjectName("AnnotationsDock")
        self.dock_widgets["Annotations"].setAllowedAreas(
            Qt.DockWidgetArea.LeftDockWidgetArea | Qt.DockWidgetArea.RightDockWidgetArea
        )
        self.dock_widgets["Annotations"].setWidget(self.image_list)
        self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea, self.dock_widgets["Annotations"])

        # Annotation file dock
        self.annotation_panel = AnnotationPanel()
        self.dock_widgets["Annotation File"] = QDockWidget("Annotation File", self)
        self.dock_widgets["Annotation File"].setObjectName("AnnotationFileDock")
        self.dock_widgets["Annotation File"].setAllowedAreas(
            Qt.DockWidgetArea.LeftDockWidgetArea | Qt.DockWidgetArea.RightDockWidgetArea
        )
        self.dock_widgets["Annotation File"].setWidget(self.annotation_panel)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self.dock_widgets["Annotation File"])

    def _create_toolbar(self) -> None:
        """Create the main toolbar."""
        self.toolbar = QToolBar()
        self.toolbar.setObjectName("MainToolBar")
        self.toolbar.setIconSize(QSize(32, 32))
        self.addToolBar(self.toolbar)

        self.load_image_action = QAction(self._create_icon("image"), "Load Image", self)
        self.load_image_action.setShortcut("Ctrl+I")
        self.load_image_action.triggered.connect(self._load_image)
        self.toolbar.addAction(self.load_image_action)

        self.load_annotation_action = QAction(self._create_icon("annotation"), "Load Annotation", self)
        self.load_annotation_action.setShortcut("Ctrl+O")
        self.load_annotation_action.triggered.connect(self._load_annotation)
        self.toolbar.addAction(self.load_annotation_action)

        self.select_root_action = QAction(self._create_icon("folder"), "Select Image Root Folder", self)
        self.select_root_action.triggered.connect(self._select_image_root)
        self.toolbar.addAction(self.select_root_action)

        self.root_label = QLabel()
        self.root_label.setContentsMargins(6, 0, 6, 0)
        self.toolbar.addWidget(self.root_label)

        self.toolbar.addSeparator()

        self.save_action = QAction(self._create_icon("save"), "Save Annotations", self)
        self.save_action.setShortcut("Ctrl+S")
        self.save_action.triggered.connect(self._save_annotations)
        self.toolbar.addAction(self.save_action)

        self.edit_action = QAction(self._create_icon("edit"), "Edit Mode", self)
        self.edit_action.setCheckable(True)
        self.edit_action.setShortcut("E")
        self.edit_action.toggled.connect(self._set_edit_mode)
        self.toolbar.addAction(self.edit_action)

        self.panel_action = QAction(self._create_icon("panel"), "Show Annotation File", self)
        self.panel_action.setCheckable(True)
        self.panel_action.toggled.connect(self._set_panel_visible)
        self.toolbar.addAction(self.panel_action)

        self.toolbar.addSeparator()

        self.zoom_out_action = QAction(self._create_icon("zoom_out"), "Zoom Out", self)
        self.zoom_out_action.setShortcut("Ctrl+-")
        self.zoom_out_action.triggered.connect(self._zoom_out_step)
        self.toolbar.addAction(self.zoom_out_action)

        self.zoom_in_action = QAction(self._create_icon("zoom_in"), "Zoom In", self)
        self.zoom_in_action.setShortcut("Ctrl+=")
        self.zoom_in_action.triggered.connect(self._zoom_in_step)
        self.toolbar.addAction(self.zoom_in_action)

        self.reset_zoom_action = QAction(self._create_icon("reset"), "Reset Zoom", self)
        self.reset_zoom_action.setShortcut("Ctrl+0")
        self.reset_zoom_action.triggered.connect(self._reset_zoom)
        self.toolbar.addAction(self.reset_zoom_action)

    def _create_menus(self) -> None:
        """Create the menu bar."""
        menubar = self.menuBar()

        file_menu = menubar.addMenu("File")
        file_menu.addAction(self.load_image_action)
        file_menu.addAction(self.load_annotation_action)
        file_menu.addAction(self.select_root_action)

        self.recent_menu = file_menu.addMenu("Recent Annotation Files")
        self._update_recent_menu()

        file_menu.addSeparator()
        file_menu.addAction(self.save_action)
        file_menu.addSeparator()

        quit_action = QAction("Quit", self)
        quit_action.setShortcut("Ctrl+Q")
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        view_menu = menubar.addMenu("View")
        view_menu.addAction(self.edit_action)
        view_menu.addAction(self.panel_action)
        view_menu.addAction(self.dock_widgets["Annotations"].toggleViewAction())
        view_menu.addSeparator()
        view_menu.addAction(self.zoom_in_action)
        view_menu.addAction(self.zoom_out_action)
        view_menu.addAction(self.reset_zoom_action)

        help_menu = menubar.addMenu("Help")
        about_action = QAction("About", self)
        about_action.triggered.connect(self._show_about)
        help_menu.addAction(about_action)

    def _setup_connections(self) -> None:
        """Set up signal/slot connections."""
        self.canvas.boxes_changed.connect(self._on_boxes_changed)
        self.canvas.zoom_changed.connect(self._update_zoom_label)
        self.image_list.image_selected.connect(self._on_image_selected)
        self.dock_widgets["Annotation File"].visibilityChanged.connect(self._on_panel_visibility_changed)

        # Refit the image when the viewport is resized
        self.scroll_area.viewport().installEventFilter(self)

    @staticmethod
    def _create_icon(name: str, size: int = 32) -> QIcon:
        """Create an icon from Unicode emoji/symbol.

        Args:
            name: Icon identifier
            size: Icon size in pixels
        """
        # Map icon names to Unicode symbols
        icons = {
            "image": "\U0001F5BC",
            "annotation": "\U0001F4C4",
            "folder": "\U0001F4C2",
            "save": "\U0001F4BE",
            "edit": "✎",
            "panel": "☰",
            "zoom_in": "+",
            "zoom_out": "−",
            "reset": "1:1",
        }

        symbol = icons.get(name, name)

        pixmap = QPixmap(size, size)
        pixmap.fill(Qt.GlobalColor.transparent)

        painter = QPainter(pixmap)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        font = QFont()
        font.setPointSize(int(size * 0.5))
        painter.setFont(font)

        painter.drawText(pixmap.rect(), Qt.AlignmentFlag.AlignCenter, symbol)
        painter.end()

        return QIcon(pixmap)

    # === Image Operations ===

    def _load_image(self) -> None:
        """Pick an image file and show it."""
        path, _ = QFileDialog.getOpenFileName(
            self, "Load Image", self.config.last_image_directory, IMAGE_FILE_FILTER
        )
        if not path:
            return

        image_path = Path(path)
        self.config_manager.update(last_image_directory=str(image_path.parent))

        if not self._show_image(image_path):
            QMessageBox.warning(self, "Load Image", f"Could not open image:\n{image_path}")
            return

        self.session.check_mismatch(image_path.name)
        self._refresh()

    def _show_image(self, path: Path) -> bool:
        """
        Decode an image and put it on the canvas.

        Returns:
            True if the image was decoded
        """
        pixmap = QPixmap(str(path))
        if pixmap.isNull():
            logger.error(f"Failed to decode image {path}")
            return False

        self.canvas.setPixmap(pixmap)
        self.session.set_image(path.name, pixmap.width(), pixmap.height())
        self._fit_display()
        logger.info(f"Loaded image {path} ({pixmap.width()}x{pixmap.height()})")
        return True

    def _fit_display(self) -> None:
        """Fit the image into the viewport at 100% zoom."""
        if not self.session.image.has_size:
            return
        viewport_size = self.scroll_area.viewport().size()
        width, height = fit_size(
            self.session.image.natural_width,
            self.session.image.natural_height,
            viewport_size.width() - FIT_MARGIN,
            viewport_size.height() - FIT_MARGIN,
        )
        self.canvas.set_display_size(width, height)

    def _load_entry_image(self, file_name: str) -> None:
        """Load the image of an annotation entry from the image root."""
        try:
            path = self.session.locate_image(file_name)
        except ImageResolutionError as e:
            logger.warning(f"Could not resolve image entry: {e}")
            self.session.report_image_failure(file_name)
            return

        if path is None:
            return

        if self._show_image(path):
            self.session.clear_mismatch()
        else:
            self.session.report_image_failure(file_name)

    def _select_image_root(self) -> None:
        """Pick the folder image entries are resolved against."""
        directory = QFileDialog.getExistingDirectory(
            self, "Select Image Root Folder", self.config.image_root_directory
        )
        if not directory:
            # Cancelled
            return

        root = Path(directory)
        if not root.is_dir():
            logger.error(f"Selected image root is not a directory: {root}")
            self.session.report_folder_failure()
            self._refresh()
            return

        self.session.set_image_root(root)
        self.config_manager.update(image_root_directory=str(root))
        logger.info(f"Image root set to {root}")

        if self.session.selected_image_name:
            self._load_entry_image(self.session.selected_image_name)
        self._refresh()

    # === Annotation Operations ===

    def _load_annotation(self) -> None:
        """Pick an annotation file and load it."""
        path, _ = QFileDialog.getOpenFileName(
            self, "Load Annotation", self.config.last_annotation_directory, ANNOTATION_FILE_FILTER
        )
        if path:
            self.open_annotation(path)

    def open_annotation(self, path: str) -> None:
        """Start reading an annotation file in the background."""
        token = self.session.begin_load()
        reader = AnnotationFileReader(token, path)
        reader.loaded.connect(self._on_annotation_read)
        reader.failed.connect(self._on_annotation_failed)
        reader.finished.connect(lambda r=reader: self._on_reader_finished(r))
        self._readers.append(reader)
        reader.start()

        self.config_manager.update(last_annotation_directory=str(Path(path).parent))
        self.config_manager.add_recent_path(path)
        self._update_recent_menu()
        self.status_bar.showMessage(f"Loading {Path(path).name}...")

    def _on_reader_finished(self, reader: AnnotationFileReader) -> None:
        if reader in self._readers:
            self._readers.remove(reader)
        reader.deleteLater()

    def _on_annotation_read(self, token: int, file_name: str, text: str) -> None:
        """Apply a finished annotation read."""
        committed = self.session.ingest(
            token, file_name, text, self.canvas.metrics, self.session.image.file_name
        )
        if not committed:
            return

        self.canvas.set_boxes(self.session.active_boxes)
        if self.session.selected_image_name and self.session.image_root is not None:
            self._load_entry_image(self.session.selected_image_name)

        if self.session.error:
            self.status_bar.showMessage(f"Failed to load {file_name}", 5000)
        else:
            self.status_bar.showMessage(
                f"Loaded {file_name}: {len(self.session.active_boxes)} boxes", 5000
            )
        self._refresh()

    def _on_annotation_failed(self, token: int, file_name: str, message: str) -> None:
        """Apply a failed annotation read."""
        if self.session.apply_read_error(token, file_name, message):
            self.canvas.set_boxes([])
            self.status_bar.showMessage(message, 5000)
            self._refresh()

    def _on_image_selected(self, image_id: int) -> None:
        """Switch to another image entry."""
        item = self.session.select_image(image_id)
        if item is None:
            return

        self.canvas.set_boxes(self.session.active_boxes)
        if self.session.image_root is not None:
            self._load_entry_image(item.file_name)
        else:
            self.session.check_mismatch(self.session.image.file_name)
        self._refresh()

    def _on_boxes_changed(self, boxes: list) -> None:
        """Store edited boxes."""
        self.session.set_active_boxes(boxes)
        self._update_title()

    def _save_annotations(self) -> None:
        """Export the active boxes as a COCO-Text document."""
        document = self.session.export_document()
        if document is None:
            QMessageBox.information(
                self, "Save Annotations", "Load an image and annotations before saving."
            )
            return

        suggested = Path(self.config.last_annotation_directory or ".") / export_file_name(
            self.session.image.file_name
        )
        path, _ = QFileDialog.getSaveFileName(
            self, "Save Annotations", str(suggested), "JSON files (*.json)"
        )
        if not path:
            return

        if write_export_document(Path(path), document):
            self.session.mark_saved()
            self.status_bar.showMessage(f"Saved {Path(path).name}", 5000)
        else:
            QMessageBox.warning(self, "Save Annotations", f"Could not write:\n{path}")
        self._refresh()

    # === Recent Files ===

    def _update_recent_menu(self) -> None:
        """Update the recent annotation files submenu."""
        self.recent_menu.clear()

        if self.config.max_recent_paths == 0:
            disabled_action = self.recent_menu.addAction("(Disabled in settings)")
            disabled_action.setEnabled(False)
            return

        if not self.config.recent_paths:
            no_recent_action = self.recent_menu.addAction("No recent files")
            no_recent_action.setEnabled(False)
            return

        for path in self.config.recent_paths:
            action = self.recent_menu.addAction(path)
            action.triggered.connect(lambda checked, p=path: self._open_recent_path(p))

    def _open_recent_path(self, path: str) -> None:
        """Open a recent annotation file."""
        if not Path(path).is_file():
            QMessageBox.warning(self, "Recent Files", f"File no longer exists:\n{path}")
            return
        self.open_annotation(path)

    # === View ===

    def _set_edit_mode(self, enabled: bool) -> None:
        self.canvas.set_edit_mode(enabled)

    def _set_panel_visible(self, visible: bool) -> None:
        self.dock_widgets["Annotation File"].setVisible(visible)
        if self.config.show_annotation_panel != visible:
            self.config_manager.update(show_annotation_panel=visible)

    def _on_panel_visibility_changed(self, visible: bool) -> None:
        if self.isVisible():
            self.panel_action.blockSignals(True)
            self.panel_action.setChecked(visible)
            self.panel_action.blockSignals(False)

    def _zoom_in_step(self) -> None:
        """Zoom in by a step."""
        self.canvas.set_zoom(zoom_step_in(self.canvas.zoom))

    def _zoom_out_step(self) -> None:
        """Zoom out by a step."""
        self.canvas.set_zoom(zoom_step_out(self.canvas.zoom))

    def _reset_zoom(self) -> None:
        """Reset zoom to 100%."""
        self.canvas.set_zoom(DEFAULT_ZOOM)

    def _update_zoom_label(self, zoom: float) -> None:
        self.zoom_label.setText(f"{round(zoom * 100)}%")

    # === State Display ===

    def _refresh(self) -> None:
        """Bring every view in line with the session state."""
        session = self.session

        self.image_list.set_images(session.images, session.box_count, session.selected_image_id)
        self.annotation_panel.show_session(session)

        self.mismatch_label.setText(session.mismatch or "")
        self.badge_label.setVisible(session.is_unparsed)
        self.image_label.setText(session.image.file_name or "No image")
        self.format_label.setText(session.format_label or "")
        self.root_label.setText(f"Root: {session.root_label}" if session.root_label else "")
        self._update_zoom_label(self.canvas.zoom)

        self.save_action.setEnabled(session.image.is_loaded and session.has_annotations)
        self._update_title()

    def _update_title(self) -> None:
        title = "Annotation Lens"
        if self.session.annotation_name:
            title = f"{self.session.annotation_name} - {title}"
        if self.session.dirty:
            title = f"*{title}"
        self.setWindowTitle(title)

    def _show_about(self) -> None:
        """Show about dialog."""
        QMessageBox.about(
            self,
            "About Annotation Lens",
            "Annotation Lens\nVersion 1.0.0\n\n"
            "View and adjust COCO, COCO-Text, Pascal VOC and YOLO bounding boxes."
        )

    # === Event Handlers ===

    def eventFilter(self, obj, event) -> bool:
        """Filter events for the scroll area viewport to catch resize."""
        if obj == self.scroll_area.viewport() and event.type() == QEvent.Type.Resize:
            self._fit_display()

        return super().eventFilter(obj, event)

    def closeEvent(self, event) -> None:
        """Handle window close."""
        if self.session.dirty:
            answer = QMessageBox.question(
                self,
                "Unsaved Changes",
                "Edited boxes have not been saved. Quit anyway?",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            )
            if answer != QMessageBox.StandardButton.Yes:
                event.ignore()
                return

        # Wait for background reads
        for reader in list(self._readers):
            reader.wait()

        super().closeEvent(event)
