from __future__ import annotations

import logging
import os
from pathlib import Path
from logging.handlers import RotatingFileHandler


def _default_log_dir(env_log_dir: str | None) -> Path:
    if env_log_dir:
        log_dir = Path(env_log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        return log_dir

    # ./logs next to the working directory, else a per-user location.
    cwd_logs = Path.cwd() / "logs"
    try:
        cwd_logs.mkdir(parents=True, exist_ok=True)
        return cwd_logs
    except OSError:
        appdata = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if appdata:
            fallback = Path(appdata) / "SiteSheetViewer" / "logs"
        else:
            fallback = Path.home() / ".site_sheet_viewer" / "logs"
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback


def configure_logging(*, debug: bool = False, log_path: str | None = None, log_dir: str | None = None) -> None:
    """Configure app-wide logging.

    - Always logs to a rotating file (``site_sheet_viewer.log``)
    - Also logs to the console when debug is enabled
    """

    level = logging.DEBUG if debug else logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    # Avoid duplicating handlers if run() is called more than once.
    if getattr(root, "_site_sheet_viewer_configured", False):
        return

    if log_path is None:
        env_log_dir = log_dir or os.environ.get("SITE_SHEET_VIEWER_LOG_DIR")
        log_path = str(_default_log_dir(env_log_dir) / "site_sheet_viewer.log")

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    if debug:
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(fmt)
        root.addHandler(console)

    setattr(root, "_site_sheet_viewer_configured", True)
