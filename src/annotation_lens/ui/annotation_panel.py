"""Panel showing the loaded annotation file and its parse status."""

from __future__ import annotations

from typing import Optional

from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import QLabel, QPlainTextEdit, QVBoxLayout, QWidget

from ..core.session import AnnotationSession


class AnnotationPanel(QWidget):
    """Read-only view of the annotation file name, format, warning and text."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)

        self.name_label = QLabel()
        font = self.name_label.font()
        font.setBold(True)
        self.name_label.setFont(font)
        layout.addWidget(self.name_label)

        self.format_label = QLabel()
        layout.addWidget(self.format_label)

        self.warning_label = QLabel()
        self.warning_label.setWordWrap(True)
        self.warning_label.setStyleSheet("color: #B26A00;")
        layout.addWidget(self.warning_label)

        self.error_label = QLabel()
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet("color: #C62828;")
        layout.addWidget(self.error_label)

        self.preview = QPlainTextEdit()
        self.preview.setReadOnly(True)
        self.preview.setFont(QFont("Monospace"))
        layout.addWidget(self.preview, 1)

        self.show_session(None)

    def show_session(self, session: Optional[AnnotationSession]) -> None:
        """Update the panel from the session state."""
        if session is None or not session.annotation_name:
            self.name_label.setText("No annotation file loaded")
            for label in (self.format_label, self.warning_label, self.error_label):
                label.hide()
            self.preview.clear()
            return

        self.name_label.setText(session.annotation_name)

        self.format_label.setVisible(bool(session.format_label))
        self.format_label.setText(f"Format: {session.format_label or ''}")

        self.warning_label.setVisible(bool(session.warning))
        self.warning_label.setText(session.warning or "")

        if session.error:
            self.error_label.setText(f"Load error: {session.error}")
            self.error_label.show()
            self.preview.hide()
        else:
            self.error_label.hide()
            self.preview.setPlainText(session.preview or "")
            self.preview.show()
