import logging

from site_sheet_viewer.logging_utils import configure_logging
from site_sheet_viewer.settings import load_settings
from site_sheet_viewer.themes import ColorTheme, resolve_theme, theme_colors


def test_defaults_without_environment():
    s = load_settings({})
    assert s.debug is False
    assert s.log_dir is None
    assert (s.row_height, s.overscan) == (22, 10)
    assert s.theme is ColorTheme.SLATE


def test_environment_overrides():
    s = load_settings(
        {
            "SITE_SHEET_VIEWER_DEBUG": "yes",
            "SITE_SHEET_VIEWER_LOG_DIR": "/tmp/ssv",
            "SITE_SHEET_VIEWER_ROW_HEIGHT": "30",
            "SITE_SHEET_VIEWER_OVERSCAN": "0",
            "SITE_SHEET_VIEWER_THEME": "Amber",
        }
    )
    assert s.debug is True
    assert s.log_dir == "/tmp/ssv"
    assert (s.row_height, s.overscan) == (30, 0)
    assert s.theme is ColorTheme.AMBER


def test_invalid_numbers_fall_back(caplog):
    with caplog.at_level(logging.WARNING):
        s = load_settings({"SITE_SHEET_VIEWER_ROW_HEIGHT": "tall", "SITE_SHEET_VIEWER_OVERSCAN": "-1"})
    assert (s.row_height, s.overscan) == (22, 10)
    assert "SITE_SHEET_VIEWER_ROW_HEIGHT" in caplog.text


def test_unknown_theme_falls_back_to_slate():
    assert resolve_theme("teal") is ColorTheme.SLATE
    assert resolve_theme(None) is ColorTheme.SLATE
    assert theme_colors("blue").text == "#1d4ed8"


def test_configure_logging_is_idempotent(tmp_path):
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    try:
        if hasattr(root, "_site_sheet_viewer_configured"):
            delattr(root, "_site_sheet_viewer_configured")
        configure_logging(log_dir=str(tmp_path))
        added = [h for h in root.handlers if h not in saved_handlers]
        configure_logging(log_dir=str(tmp_path))
        assert [h for h in root.handlers if h not in saved_handlers] == added
        assert len(added) == 1

        logging.getLogger("site_sheet_viewer.test").info("hello")
        for h in added:
            h.flush()
        assert "hello" in (tmp_path / "site_sheet_viewer.log").read_text(encoding="utf-8")
    finally:
        for h in list(root.handlers):
            if h not in saved_handlers:
                root.removeHandler(h)
                h.close()
        root.setLevel(saved_level)
        if hasattr(root, "_site_sheet_viewer_configured"):
            delattr(root, "_site_sheet_viewer_configured")
