"""Per-viewer session state and the render plan for one paint pass.

A ``ViewerSession`` owns everything the spreadsheet widget needs to decide
what to draw: the active tab, the sticky-header controller, scroll offsets,
and the measured viewport height. It holds no Qt objects so the whole
pipeline (visibility -> window -> classification) can run headless.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

import logging

from site_sheet_viewer.header_state import StickyHeaderController
from site_sheet_viewer.model import Sheet, SpanInfo
from site_sheet_viewer.presentation import CellPresentation, DefaultCellClassifier, display_text
from site_sheet_viewer.virtualizer import (
    DEFAULT_VIEWPORT_HEIGHT,
    OVERSCAN,
    ROW_HEIGHT,
    ViewportWindow,
    compute_window,
    row_at_offset,
)
from site_sheet_viewer.visibility import VisibilityCache, VisibilityResult


logger = logging.getLogger(__name__)


EMPTY_TITLE = "No spreadsheet loaded."
EMPTY_HINT = 'Open a workbook from "File > Open workbook..." to load its sheets.'


@dataclass(frozen=True)
class ColumnGeometry:
    index: int
    x: float
    width: float
    hidden: bool = False


@dataclass(frozen=True)
class RenderCell:
    row: int
    col: int
    x: float
    width: float
    height: float
    presentation: CellPresentation
    span: Optional[SpanInfo] = None


@dataclass(frozen=True)
class RenderRow:
    row: int
    y: float
    height: float
    placeholder: bool = False
    cells: Tuple[RenderCell, ...] = ()


@dataclass(frozen=True)
class RenderPlan:
    empty: bool
    rows: Tuple[RenderRow, ...] = ()
    pinned: Optional[RenderRow] = None
    window: Optional[ViewportWindow] = None
    columns: Tuple[ColumnGeometry, ...] = ()
    total_height: float = 0
    content_width: float = 0
    visible_row_count: int = 0
    scroll_x: float = 0
    picking: bool = False
    status_text: str = ""
    footer_text: str = ""


class ViewerSession:
    def __init__(
        self,
        sheets: Optional[Sequence[Sheet]] = None,
        *,
        classifier=None,
        row_height: int = ROW_HEIGHT,
        overscan: int = OVERSCAN,
    ):
        if row_height <= 0:
            raise ValueError(f"row_height must be positive, got {row_height}")
        self.row_height = int(row_height)
        self.overscan = max(0, int(overscan))
        self.classifier = classifier or DefaultCellClassifier()
        self.header = StickyHeaderController()
        self._cache = VisibilityCache()
        self._sheets: Tuple[Sheet, ...] = tuple(sheets or ())
        self.active_tab_index = 0
        self.scroll_offset: float = 0
        self.scroll_x: float = 0
        self.viewport_height: float = DEFAULT_VIEWPORT_HEIGHT

    # -- sheet collection ---------------------------------------------------

    @property
    def sheets(self) -> Tuple[Sheet, ...]:
        return self._sheets

    def set_sheets(self, sheets: Optional[Sequence[Sheet]]) -> None:
        self._sheets = tuple(sheets or ())
        self._cache.clear()
        logger.info("Loaded %d sheet(s)", len(self._sheets))
        self._reset_for_tab(0)

    @property
    def current_sheet(self) -> Optional[Sheet]:
        if not self._sheets:
            return None
        return self._sheets[self.active_tab_index]

    def set_active_tab(self, index: int) -> None:
        if not self._sheets:
            index = 0
        else:
            index = max(0, min(int(index), len(self._sheets) - 1))
        if index != self.active_tab_index:
            self._reset_for_tab(index)
        else:
            self.scroll_offset = 0
            self.scroll_x = 0

    def _reset_for_tab(self, index: int) -> None:
        self.active_tab_index = index
        self.header.reset()
        self.scroll_offset = 0
        self.scroll_x = 0
        sheet = self.current_sheet
        logger.debug("Active tab -> %d (%r)", index, sheet.name if sheet else None)

    # -- viewport -----------------------------------------------------------

    def set_scroll(self, y: float, x: Optional[float] = None) -> None:
        self.scroll_offset = max(0, y or 0)
        if x is not None:
            self.scroll_x = max(0, x or 0)

    def set_viewport_height(self, height: Optional[float]) -> None:
        if height is None or height <= 0:
            return
        self.viewport_height = height

    # -- header picking -----------------------------------------------------

    def toggle_header_picker(self) -> None:
        self.header.toggle()

    def click_at(self, y: float) -> Optional[int]:
        """Forward a click at content-space y to the header controller.

        Returns the sheet row under the pointer, or None when the click
        landed below the last row.
        """

        row = row_at_offset(y, self.visibility().visible_rows, self.row_height)
        if row is not None:
            self.header.click_row(row)
        return row

    # -- derived state ------------------------------------------------------

    def visibility(self) -> VisibilityResult:
        return self._cache.get(self.current_sheet, self.header.pinned_row)

    def window(self) -> ViewportWindow:
        return compute_window(
            self.visibility().visible_row_count,
            self.scroll_offset,
            self.viewport_height,
            row_height=self.row_height,
            overscan=self.overscan,
        )

    def column_layout(self) -> Tuple[ColumnGeometry, ...]:
        sheet = self.current_sheet
        if sheet is None:
            return ()
        columns = []
        x = 0.0
        for c in range(sheet.column_count):
            if sheet.is_col_hidden(c):
                columns.append(ColumnGeometry(c, x, 0, hidden=True))
                continue
            w = sheet.col_width(c)
            columns.append(ColumnGeometry(c, x, w))
            x += w
        return tuple(columns)

    def _span_width(self, sheet: Sheet, columns: Sequence[ColumnGeometry], col: int, col_span: int) -> float:
        # col_span counts visible columns only, so walk until that many are seen.
        total = 0.0
        seen = 0
        c = col
        while seen < col_span:
            if not sheet.is_col_hidden(c):
                total += columns[c].width if c < len(columns) else sheet.col_width(c)
                seen += 1
            c += 1
        return total

    def _row_cells(
        self,
        sheet: Sheet,
        row: int,
        row_data: List[Any],
        columns: Sequence[ColumnGeometry],
        span_map,
    ) -> Tuple[RenderCell, ...]:
        cells = []
        for col, value in enumerate(row_data):
            if sheet.is_col_hidden(col):
                continue
            span = span_map.get((row, col))
            if span is not None and span.is_ghost:
                continue
            x = columns[col].x if col < len(columns) else 0.0
            if span is not None:
                width = self._span_width(sheet, columns, col, span.col_span)
                height = span.row_span * self.row_height
            else:
                width = columns[col].width if col < len(columns) else sheet.col_width(col)
                height = self.row_height
            cells.append(
                RenderCell(
                    row=row,
                    col=col,
                    x=x,
                    width=width,
                    height=height,
                    presentation=self.classifier.classify(value, row, span),
                    span=span,
                )
            )
        return tuple(cells)

    def _pinned_row(self, sheet: Sheet, result: VisibilityResult, columns) -> Optional[RenderRow]:
        row = self.header.pinned_row
        if row is None or result.pinned_row_data is None:
            return None
        cells = []
        for col, value in enumerate(result.pinned_row_data):
            if sheet.is_col_hidden(col):
                continue
            x = columns[col].x if col < len(columns) else 0.0
            width = columns[col].width if col < len(columns) else sheet.col_width(col)
            text = display_text(value)
            cells.append(
                RenderCell(
                    row=row,
                    col=col,
                    x=x,
                    width=width,
                    height=self.row_height,
                    presentation=CellPresentation(text=text, bold=True),
                )
            )
        return RenderRow(row=row, y=0, height=self.row_height, cells=tuple(cells))

    def render_plan(self) -> RenderPlan:
        sheet = self.current_sheet
        if sheet is None:
            return RenderPlan(empty=True, status_text=EMPTY_TITLE, footer_text=EMPTY_HINT)

        result = self.visibility()
        window = self.window()
        columns = self.column_layout()
        pinned_row = self.header.pinned_row

        rows = []
        for pos in range(window.start_index, window.end_index):
            r = result.visible_rows[pos]
            y = pos * self.row_height
            if r == pinned_row:
                rows.append(RenderRow(row=r, y=y, height=self.row_height, placeholder=True))
                continue
            rows.append(
                RenderRow(
                    row=r,
                    y=y,
                    height=self.row_height,
                    cells=self._row_cells(sheet, r, sheet.row(r), columns, result.span_map),
                )
            )

        content_width = sum(c.width for c in columns)
        return RenderPlan(
            empty=False,
            rows=tuple(rows),
            pinned=self._pinned_row(sheet, result, columns),
            window=window,
            columns=columns,
            total_height=window.total_height,
            content_width=content_width,
            visible_row_count=result.visible_row_count,
            scroll_x=self.scroll_x,
            picking=self.header.picking,
            status_text=self.header.status_text,
            footer_text=f"{result.visible_row_count} rows rendered",
        )
