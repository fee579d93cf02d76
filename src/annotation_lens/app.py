"""Application bootstrap for Annotation Lens."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

from PyQt6.QtWidgets import QApplication

from .ui.main_window import MainWindow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)

logger = logging.getLogger(__name__)


def create_application() -> QApplication:
    """
    Create and configure the Qt application.

    Returns:
        Configured QApplication instance
    """
    app = QApplication(sys.argv)
    app.setApplicationName("Annotation Lens")
    app.setApplicationVersion("1.0.0")
    app.setOrganizationName("Annotation Lens")
    return app


def create_main_window() -> MainWindow:
    """
    Create the main application window.

    Returns:
        MainWindow instance
    """
    return MainWindow()


def run(argv: Optional[List[str]] = None) -> int:
    """
    Run the Annotation Lens application.

    Args:
        argv: Command line arguments; an optional first argument names an
            annotation file to open on startup

    Returns:
        Exit code
    """
    args = sys.argv[1:] if argv is None else argv
    logger.info("Starting Annotation Lens")

    try:
        app = create_application()
        logger.info("QApplication created")

        window = create_main_window()
        logger.info("MainWindow created")

        window.show()
        logger.info("MainWindow shown")

        if args:
            annotation_path = Path(args[0])
            if annotation_path.is_file():
                window.open_annotation(str(annotation_path))
            else:
                logger.warning(f"Annotation file not found: {annotation_path}")

        return app.exec()

    except Exception as e:
        logger.error(f"Application error: {e}", exc_info=True)
        return 1


def main() -> None:
    """Main entry point for the application."""
    sys.exit(run())


if __name__ == "__main__":
    main()
