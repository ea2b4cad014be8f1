from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QSettings
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QFileDialog, QMainWindow, QMessageBox

from site_sheet_viewer.gui.spreadsheet_viewer import SpreadsheetViewer
from site_sheet_viewer.parsers.frame_adapter import load_csv_sheets
from site_sheet_viewer.parsers.json_adapter import load_json_sheets
from site_sheet_viewer.parsers.workbook_adapter import load_sheets
from site_sheet_viewer.settings import ViewerSettings


logger = logging.getLogger(__name__)


OPEN_FILTER = (
    "Spreadsheets (*.xlsx *.xlsm *.csv *.json);;"
    "Excel Files (*.xlsx *.xlsm);;CSV Files (*.csv);;Sheet JSON (*.json);;All Files (*)"
)

_LOADERS = {
    ".csv": load_csv_sheets,
    ".json": load_json_sheets,
}


class MainWindow(QMainWindow):
    def __init__(self, settings: Optional[ViewerSettings] = None):
        super().__init__()
        self.setWindowTitle("Site Sheet Viewer")
        self.resize(1400, 900)

        self.viewer_settings = settings or ViewerSettings()
        self.workbook_path = ""

        # Per-user/per-machine settings (Windows registry on Windows).
        self._settings = QSettings("site_sheet_viewer", "site_sheet_viewer_gui")

        self.viewer = SpreadsheetViewer(
            title="Spreadsheets",
            subtitle="Budget, daily report and master schedule exports",
            color_theme=self.viewer_settings.theme,
            row_height=self.viewer_settings.row_height,
            overscan=self.viewer_settings.overscan,
        )
        self.setCentralWidget(self.viewer)

        file_menu = self.menuBar().addMenu("&File")
        open_action = QAction("&Open workbook...", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self.browse_workbook)
        file_menu.addAction(open_action)
        file_menu.addSeparator()
        quit_action = QAction("E&xit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        self._restore_geometry()
        self.statusBar().showMessage("Ready")

    def _restore_geometry(self) -> None:
        try:
            geometry = self._settings.value("window/geometry")
            if geometry is not None:
                self.restoreGeometry(geometry)
        except Exception:
            logger.debug("Could not restore window geometry", exc_info=True)

    def browse_workbook(self) -> None:
        start_dir = ""
        try:
            start_dir = str(self._settings.value("last_dir/workbook", "") or "").strip()
        except Exception:
            start_dir = ""
        if not start_dir and self.workbook_path:
            start_dir = os.path.dirname(self.workbook_path)

        path, _ = QFileDialog.getOpenFileName(self, "Open Workbook", start_dir, OPEN_FILTER)
        if path:
            self._settings.setValue("last_dir/workbook", os.path.dirname(path))
            self.load_workbook(path)

    def load_workbook(self, path: str) -> bool:
        if not path or not os.path.exists(path):
            QMessageBox.warning(self, "Workbook Not Found", f"File does not exist:\n{path}")
            return False

        try:
            loader = _LOADERS.get(Path(path).suffix.lower(), load_sheets)
            sheets = loader(path)
        except Exception as e:
            logger.exception("Failed to load workbook %s", path)
            QMessageBox.warning(self, "Workbook Error", f"Failed to load workbook:\n{e}")
            return False

        self.workbook_path = path
        self._settings.setValue("paths/workbook", path)
        name = Path(path).name
        self.viewer.set_title(name, f"{len(sheets)} sheet(s)")
        self.viewer.set_sheets(sheets)
        self.setWindowTitle(f"Site Sheet Viewer - {name}")
        self.statusBar().showMessage(f"Loaded {len(sheets)} sheet(s) from {name}", 5000)
        logger.info("Loaded workbook %s (%d sheets)", path, len(sheets))
        return True

    def closeEvent(self, event):
        try:
            self._settings.setValue("window/geometry", self.saveGeometry())
        except Exception:
            logger.debug("Could not persist window geometry", exc_info=True)
        super().closeEvent(event)
