"""Adapt openpyxl worksheets into Sheet objects.

openpyxl does the XLSX decoding; this module only reads back what it decoded
(cell values, merged ranges, column widths, hidden rows/columns) and shapes
it into the 0-based model the viewer consumes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import logging

import openpyxl
from openpyxl.utils import column_index_from_string, get_column_letter

from site_sheet_viewer.model import DEFAULT_COL_WIDTH, MergeRange, Sheet


logger = logging.getLogger(__name__)


def column_width_to_pixels(width: Any) -> float:
    """Excel column width is in "character" units; approximate to pixels."""
    try:
        w = float(width)
    except (TypeError, ValueError):
        return DEFAULT_COL_WIDTH
    if w <= 0:
        return DEFAULT_COL_WIDTH
    return max(int(w * 7 + 10), 20)


def _is_blank_worksheet(ws) -> bool:
    cells = getattr(ws, "_cells", None)
    if cells is None:
        return False
    return not cells and not list(getattr(ws.merged_cells, "ranges", []))


def _hidden_columns(ws) -> Dict[int, bool]:
    hidden: Dict[int, bool] = {}
    for key, dim in ws.column_dimensions.items():
        if not getattr(dim, "hidden", False):
            continue
        try:
            lo = int(getattr(dim, "min", None) or column_index_from_string(key))
            hi = int(getattr(dim, "max", None) or lo)
        except (TypeError, ValueError):
            logger.debug("Skipping column dimension with unreadable bounds: %r", key)
            continue
        for c1 in range(lo, hi + 1):
            hidden[c1 - 1] = True
    return hidden


def _hidden_rows(ws) -> Dict[int, bool]:
    hidden: Dict[int, bool] = {}
    for r1, dim in ws.row_dimensions.items():
        if getattr(dim, "hidden", False):
            hidden[int(r1) - 1] = True
    return hidden


def sheet_from_worksheet(ws, *, file_name: Optional[str] = None) -> Sheet:
    max_row = int(ws.max_row or 0)
    max_col = int(ws.max_column or 0)

    merges: List[MergeRange] = []
    for merged in list(getattr(ws.merged_cells, "ranges", [])):
        merges.append(
            MergeRange.from_corners(merged.min_row - 1, merged.min_col - 1, merged.max_row - 1, merged.max_col - 1)
        )
        max_row = max(max_row, merged.max_row)
        max_col = max(max_col, merged.max_col)

    data: List[List[Any]] = []
    if max_row and max_col:
        for values in ws.iter_rows(min_row=1, max_row=max_row, min_col=1, max_col=max_col, values_only=True):
            data.append(list(values))

    col_widths = []
    for c1 in range(1, max_col + 1):
        w = getattr(ws.column_dimensions.get(get_column_letter(c1)), "width", None)
        col_widths.append(column_width_to_pixels(w) if w else DEFAULT_COL_WIDTH)

    sheet = Sheet(
        name=ws.title,
        data=data,
        merges=tuple(merges),
        col_widths=col_widths,
        hidden_cols=_hidden_columns(ws),
        hidden_rows=_hidden_rows(ws),
        id=ws.title,
        file_name=file_name,
    )
    logger.debug(
        "Adapted worksheet %r: %d rows, %d cols, %d merges, %d hidden rows, %d hidden cols",
        ws.title,
        sheet.row_count,
        sheet.column_count,
        len(sheet.merges),
        len(sheet.hidden_rows),
        len(sheet.hidden_cols),
    )
    return sheet


def sheets_from_workbook(wb, *, file_name: Optional[str] = None) -> List[Sheet]:
    sheets = []
    for ws in wb.worksheets:
        if _is_blank_worksheet(ws):
            logger.info("Skipping empty worksheet %r", ws.title)
            continue
        sheets.append(sheet_from_worksheet(ws, file_name=file_name))
    return sheets


def load_sheets(path: Union[str, Path]) -> List[Sheet]:
    """Open a workbook from disk and adapt every non-empty worksheet.

    Errors from openpyxl propagate; the caller decides how to report them.
    """

    path = Path(path)
    wb = openpyxl.load_workbook(str(path), data_only=True)
    try:
        return sheets_from_workbook(wb, file_name=path.name)
    finally:
        wb.close()
