from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional, Union

import logging

import pandas as pd

from site_sheet_viewer.model import Sheet


logger = logging.getLogger(__name__)


def _cell(val: Any) -> Any:
    # Lists and other containers are not scalars; keep them as text.
    if not pd.api.types.is_scalar(val):
        return str(val)
    if pd.isna(val):
        return None
    if hasattr(val, "item"):
        # numpy scalar -> plain Python value
        return val.item()
    return val


def sheet_from_dataframe(
    df: pd.DataFrame,
    name: str,
    *,
    include_header: bool = True,
    file_name: Optional[str] = None,
) -> Sheet:
    """Build a Sheet from a DataFrame, header row first when requested."""
    data = []
    if include_header:
        data.append([str(c) for c in df.columns])
    for row in df.itertuples(index=False, name=None):
        data.append([_cell(v) for v in row])
    return Sheet(name=name, data=data, id=name, file_name=file_name)


def load_csv_sheets(path: Union[str, Path]) -> List[Sheet]:
    """Read a CSV export as a single sheet named after the file.

    Every line is data (no header promotion), so the first row keeps the
    same treatment as it has in the source spreadsheet.
    """

    path = Path(path)
    df = pd.read_csv(path, header=None, skip_blank_lines=False)
    sheet = sheet_from_dataframe(df, path.stem, include_header=False, file_name=path.name)
    logger.debug("Read CSV %s: %d rows, %d cols", path, sheet.row_count, sheet.column_count)
    return [sheet]
