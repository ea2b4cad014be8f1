"""Application bootstrap for the site sheet viewer.
"""

from __future__ import annotations
import sys
import logging
from typing import Optional, Sequence
from PySide6.QtWidgets import QApplication
from site_sheet_viewer.gui.main_window import MainWindow
from site_sheet_viewer.logging_utils import configure_logging
from site_sheet_viewer.settings import load_settings

def run(argv: Optional[Sequence[str]] = None) -> None:
    """Launch the viewer; an optional first argument is a workbook to open."""
    if argv is None:
        argv = sys.argv
    settings = load_settings()
    configure_logging(debug=settings.debug, log_dir=settings.log_dir)

    log = logging.getLogger(__name__)
    log.debug("Starting site sheet viewer (settings=%s)", settings)

    # Check if QApplication already exists
    app = QApplication.instance()
    if not app:
        app = QApplication(list(argv))

    window = MainWindow(settings)
    args = [a for a in list(argv)[1:] if not a.startswith("-")]
    if args:
        window.load_workbook(args[0])
    window.showMaximized()

    sys.exit(app.exec())
