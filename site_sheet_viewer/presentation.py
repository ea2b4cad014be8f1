"""Cosmetic per-cell formatting decisions.

Nothing here feeds back into visibility or windowing; a classifier only
decides how a cell's text is aligned and weighted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import re

from site_sheet_viewer.model import SpanInfo


# Optional currency marker, optional minus, digits/separators, optional percent.
NUMBER_LIKE_RE = re.compile(r"^[R$]?\s*-?[\d.,]+%?$", re.ASCII)
HEADER_ROW_LIMIT = 5


def display_text(value: Any) -> str:
    if value is None:
        return ""
    # bool is a subclass of int; keep it out of the float branch.
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        if value != value:  # NaN from pandas frames
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


def is_number_like(text: str) -> bool:
    # Any "-" disqualifies the text, so negative amounts stay left-aligned
    # even though the pattern itself admits a leading minus.
    return bool(NUMBER_LIKE_RE.match(text.strip())) and "-" not in text


def is_header_like(value: Any, row_index: int) -> bool:
    if row_index < HEADER_ROW_LIMIT:
        return True
    return isinstance(value, str) and value == value.upper() and len(value) > 3


@dataclass(frozen=True)
class CellPresentation:
    text: str
    align: str = "left"  # 'left' | 'right' | 'center'
    v_align: str = "middle"
    bold: bool = False
    merged: bool = False

    @property
    def tooltip(self) -> str:
        return self.text


class DefaultCellClassifier:
    """Row-position and all-caps header heuristic, numeric right alignment."""

    def classify(self, value: Any, row_index: int, span: Optional[SpanInfo] = None) -> CellPresentation:
        text = display_text(value)
        merged = span is not None and not span.is_ghost
        if merged:
            align = "center"
        elif is_number_like(text):
            align = "right"
        else:
            align = "left"
        return CellPresentation(
            text=text,
            align=align,
            bold=is_header_like(value, row_index),
            merged=merged,
        )


_default_classifier = DefaultCellClassifier()


def classify_cell(value: Any, row_index: int, span: Optional[SpanInfo] = None) -> CellPresentation:
    return _default_classifier.classify(value, row_index, span)
