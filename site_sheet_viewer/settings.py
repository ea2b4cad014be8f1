"""Runtime configuration read from the environment."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

import logging
import os

from site_sheet_viewer.themes import ColorTheme, resolve_theme
from site_sheet_viewer.virtualizer import OVERSCAN, ROW_HEIGHT


logger = logging.getLogger(__name__)

ENV_PREFIX = "SITE_SHEET_VIEWER_"
TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ViewerSettings:
    debug: bool = False
    log_dir: Optional[str] = None
    row_height: int = ROW_HEIGHT
    overscan: int = OVERSCAN
    theme: ColorTheme = ColorTheme.SLATE


def _env_flag(env: Mapping[str, str], name: str) -> bool:
    return str(env.get(name, "")).strip().lower() in TRUTHY


def _env_int(env: Mapping[str, str], name: str, default: int, *, minimum: int) -> int:
    raw = str(env.get(name, "") or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r (not an integer), using %d", name, raw, default)
        return default
    if value < minimum:
        logger.warning("Ignoring %s=%r (must be >= %d), using %d", name, raw, minimum, default)
        return default
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> ViewerSettings:
    if env is None:
        env = os.environ
    log_dir = str(env.get(ENV_PREFIX + "LOG_DIR", "") or "").strip() or None
    return ViewerSettings(
        debug=_env_flag(env, ENV_PREFIX + "DEBUG"),
        log_dir=log_dir,
        row_height=_env_int(env, ENV_PREFIX + "ROW_HEIGHT", ROW_HEIGHT, minimum=1),
        overscan=_env_int(env, ENV_PREFIX + "OVERSCAN", OVERSCAN, minimum=0),
        theme=resolve_theme(env.get(ENV_PREFIX + "THEME")),
    )
