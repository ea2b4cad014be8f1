from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

import logging


logger = logging.getLogger(__name__)


class ColorTheme(str, Enum):
    BLUE = "blue"
    AMBER = "amber"
    PURPLE = "purple"
    SLATE = "slate"


@dataclass(frozen=True)
class ThemeColors:
    background: str
    text: str
    border: str
    hover: str


THEMES = {
    ColorTheme.BLUE: ThemeColors("#eff6ff", "#1d4ed8", "#93c5fd", "#dbeafe"),
    ColorTheme.AMBER: ThemeColors("#fffbeb", "#b45309", "#fcd34d", "#fef3c7"),
    ColorTheme.PURPLE: ThemeColors("#faf5ff", "#7e22ce", "#d8b4fe", "#f3e8ff"),
    ColorTheme.SLATE: ThemeColors("#f8fafc", "#334155", "#cbd5e1", "#f1f5f9"),
}

# Grid chrome shared by every theme.
GRID_LINE = "#d4d4d4"
CELL_TEXT = "#334155"
PINNED_BACKGROUND = "#f1f5f9"
PINNED_TEXT = "#1e293b"
PICKING_HOVER = "#eff6ff"


def resolve_theme(theme: Union[ColorTheme, str, None]) -> ColorTheme:
    if isinstance(theme, ColorTheme):
        return theme
    name = str(theme or "").strip().lower()
    if not name:
        return ColorTheme.SLATE
    try:
        return ColorTheme(name)
    except ValueError:
        logger.warning("Unknown color theme %r, using slate", theme)
        return ColorTheme.SLATE


def theme_colors(theme: Union[ColorTheme, str, None]) -> ThemeColors:
    return THEMES[resolve_theme(theme)]
