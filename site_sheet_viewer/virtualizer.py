"""Vertical viewport windowing over the visible-row list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import math


ROW_HEIGHT = 22
OVERSCAN = 10
# Assumed until the scroll area reports a real height after layout.
DEFAULT_VIEWPORT_HEIGHT = 800


@dataclass(frozen=True)
class ViewportWindow:
    start_index: int
    end_index: int  # exclusive
    total_height: int
    offset_y: int

    def __len__(self) -> int:
        return self.end_index - self.start_index

    def indices(self, visible_rows: Sequence[int]) -> Tuple[int, ...]:
        """Sheet row indices materialized by this window."""
        return tuple(visible_rows[self.start_index:self.end_index])


def _finite_or(value, fallback: float) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        return fallback
    if math.isnan(v) or math.isinf(v):
        return fallback
    return v


def compute_window(
    visible_row_count: int,
    scroll_offset: float,
    viewport_height: Optional[float],
    row_height: int = ROW_HEIGHT,
    overscan: int = OVERSCAN,
) -> ViewportWindow:
    if row_height <= 0:
        raise ValueError(f"row_height must be positive, got {row_height}")

    count = max(0, int(visible_row_count))
    overscan = max(0, int(overscan))
    scroll = max(0.0, _finite_or(scroll_offset, 0.0))
    height = _finite_or(viewport_height, 0.0)
    if height <= 0:
        height = DEFAULT_VIEWPORT_HEIGHT

    start = max(0, math.floor(scroll / row_height) - overscan)
    end = min(count, math.ceil((scroll + height) / row_height) + overscan)
    # Scrolled past the content (stale offset after a sheet swap).
    start = min(start, end)

    return ViewportWindow(
        start_index=start,
        end_index=end,
        total_height=count * row_height,
        offset_y=start * row_height,
    )


def row_at_offset(y: float, visible_rows: Sequence[int], row_height: int = ROW_HEIGHT) -> Optional[int]:
    """Sheet row index under content-space y, or None outside the rows."""
    if y is None or y < 0 or row_height <= 0:
        return None
    pos = int(y // row_height)
    if pos >= len(visible_rows):
        return None
    return visible_rows[pos]
