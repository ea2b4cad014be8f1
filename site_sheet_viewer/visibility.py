"""Row visibility and merge-span resolution for one sheet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import logging

from site_sheet_viewer.model import GHOST, CellKey, Sheet, SpanInfo


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VisibilityResult:
    visible_rows: Tuple[int, ...] = ()
    span_map: Dict[CellKey, SpanInfo] = field(default_factory=dict)
    pinned_row_data: Optional[List[Any]] = None

    @property
    def visible_row_count(self) -> int:
        return len(self.visible_rows)


EMPTY_RESULT = VisibilityResult()


def build_span_map(sheet: Sheet) -> Dict[CellKey, SpanInfo]:
    """Map every merged cell to its span, with hidden columns collapsed.

    The anchor gets the row span of the whole range and a column span that
    counts only visible columns. Every other covered cell is a ghost. A merge
    whose columns are all hidden leaves no entry at all.
    """

    span_map: Dict[CellKey, SpanInfo] = {}
    for merge in sheet.merges:
        visible_col_span = sum(
            1 for c in range(merge.start_col, merge.end_col + 1) if not sheet.is_col_hidden(c)
        )
        if visible_col_span == 0:
            continue

        span_map[merge.anchor] = SpanInfo(
            row_span=merge.end_row - merge.start_row + 1,
            col_span=visible_col_span,
            is_ghost=False,
        )
        for key in merge.cells():
            if key == merge.anchor:
                continue
            span_map[key] = GHOST
    return span_map


def resolve_visibility(sheet: Optional[Sheet], pinned_row: Optional[int] = None) -> VisibilityResult:
    if sheet is None:
        return EMPTY_RESULT

    visible_rows = tuple(i for i in range(sheet.row_count) if not sheet.is_row_hidden(i))

    pinned_data = None
    if pinned_row is not None and 0 <= pinned_row < sheet.row_count:
        pinned_data = sheet.data[pinned_row]

    return VisibilityResult(
        visible_rows=visible_rows,
        span_map=build_span_map(sheet),
        pinned_row_data=pinned_data,
    )


class VisibilityCache:
    """Keeps the last resolved result for a (sheet, pinned row) pair.

    Scroll and resize never invalidate the cache; only a different sheet
    object or a different pinned row does.
    """

    def __init__(self) -> None:
        self._sheet: Optional[Sheet] = None
        self._pinned: Optional[int] = None
        self._result: Optional[VisibilityResult] = None
        self.hits = 0
        self.misses = 0

    def get(self, sheet: Optional[Sheet], pinned_row: Optional[int]) -> VisibilityResult:
        if self._result is not None and sheet is self._sheet and pinned_row == self._pinned:
            self.hits += 1
            return self._result

        self.misses += 1
        result = resolve_visibility(sheet, pinned_row)
        logger.debug(
            "Resolved visibility for sheet=%r pinned=%s: %d visible rows, %d span entries",
            getattr(sheet, "name", None),
            pinned_row,
            result.visible_row_count,
            len(result.span_map),
        )
        self._sheet = sheet
        self._pinned = pinned_row
        self._result = result
        return result

    def clear(self) -> None:
        self._sheet = None
        self._pinned = None
        self._result = None
