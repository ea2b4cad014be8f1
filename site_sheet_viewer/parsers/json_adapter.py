"""Read sheet collections in the dashboard's stored JSON shape.

A file holds either a list of sheet objects, a single sheet object, or
``{"sheets": [...]}``. Each sheet object uses the keys ``Sheet.to_dict``
writes (``name``, ``data``, ``merges``, ``colWidths``, ``hiddenCols``,
``hiddenRows`` plus the optional ``id``/``description``/``fileName``).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Union

import logging

from site_sheet_viewer.model import Sheet, SheetError


logger = logging.getLogger(__name__)


def sheets_from_payload(payload: Any) -> List[Sheet]:
    if isinstance(payload, dict) and "sheets" in payload:
        payload = payload["sheets"]
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        raise SheetError(f"expected a list of sheets, got {type(payload).__name__}")
    return [Sheet.from_dict(item) for item in payload]


def load_json_sheets(path: Union[str, Path]) -> List[Sheet]:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    sheets = sheets_from_payload(payload)
    logger.debug("Read %d sheet(s) from %s", len(sheets), path)
    return sheets

