from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import logging


logger = logging.getLogger(__name__)


CellKey = Tuple[int, int]  # (row, col) 0-based

# Fallback pixel width for columns the export did not size.
DEFAULT_COL_WIDTH = 64


class SheetError(ValueError):
    """Raised when an upstream payload cannot be shaped into a Sheet at all."""


@dataclass(frozen=True)
class MergeRange:
    """Inclusive rectangular merge, anchored at (start_row, start_col)."""

    start_row: int
    start_col: int
    end_row: int
    end_col: int

    @classmethod
    def from_corners(cls, r1: int, c1: int, r2: int, c2: int) -> "MergeRange":
        return cls(min(r1, r2), min(c1, c2), max(r1, r2), max(c1, c2))

    @property
    def anchor(self) -> CellKey:
        return (self.start_row, self.start_col)

    def covers(self, row: int, col: int) -> bool:
        return self.start_row <= row <= self.end_row and self.start_col <= col <= self.end_col

    def cells(self) -> Iterable[CellKey]:
        for r in range(self.start_row, self.end_row + 1):
            for c in range(self.start_col, self.end_col + 1):
                yield (r, c)

    def to_dict(self) -> dict:
        return {
            "s": {"r": self.start_row, "c": self.start_col},
            "e": {"r": self.end_row, "c": self.end_col},
        }


@dataclass(frozen=True)
class SpanInfo:
    row_span: int
    col_span: int
    is_ghost: bool = False


GHOST = SpanInfo(0, 0, True)


def coerce_hidden(value: Any) -> Dict[int, bool]:
    """Normalize a hidden-rows/cols flag container to ``{index: True}``.

    Accepts a mapping of index -> flag, a sequence of flags indexed by
    position (``[False, True, ...]``), or a set of indices.
    """

    if not value:
        return {}

    out: Dict[int, bool] = {}
    if isinstance(value, Mapping):
        items = value.items()
    elif isinstance(value, (set, frozenset)):
        items = ((idx, True) for idx in value)
    elif isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        items = enumerate(value)
    else:
        logger.debug("Ignoring unsupported hidden flag container %r", type(value).__name__)
        return {}

    for key, flag in items:
        if not flag:
            continue
        try:
            idx = int(key)
        except (TypeError, ValueError):
            logger.debug("Ignoring non-integer hidden index %r", key)
            continue
        if idx < 0:
            continue
        out[idx] = True
    return out


def _merge_from_payload(raw: Any) -> Optional[MergeRange]:
    if isinstance(raw, MergeRange):
        return raw
    try:
        if isinstance(raw, Mapping):
            s = raw["s"]
            e = raw["e"]
            return MergeRange.from_corners(int(s["r"]), int(s["c"]), int(e["r"]), int(e["c"]))
        r1, c1, r2, c2 = raw
        return MergeRange.from_corners(int(r1), int(c1), int(r2), int(c2))
    except (KeyError, TypeError, ValueError):
        logger.warning("Skipping malformed merge range %r", raw)
        return None


@dataclass
class Sheet:
    """One spreadsheet tab: row data plus layout metadata.

    The viewer treats a Sheet as read-only input; nothing in this package
    writes to ``data`` or the layout fields after construction.
    """

    name: str
    data: List[List[Any]] = field(default_factory=list)
    merges: Tuple[MergeRange, ...] = ()
    col_widths: List[float] = field(default_factory=list)
    hidden_cols: Dict[int, bool] = field(default_factory=dict)
    hidden_rows: Dict[int, bool] = field(default_factory=dict)
    id: Optional[str] = None
    description: Optional[str] = None
    file_name: Optional[str] = None

    def __post_init__(self) -> None:
        self.data = [list(row) if row is not None else [] for row in (self.data or [])]
        merges = []
        for raw in self.merges or ():
            merge = _merge_from_payload(raw)
            if merge is not None:
                merges.append(merge)
        self.merges = tuple(merges)
        self.col_widths = list(self.col_widths or [])
        self.hidden_cols = coerce_hidden(self.hidden_cols)
        self.hidden_rows = coerce_hidden(self.hidden_rows)

    @property
    def row_count(self) -> int:
        return len(self.data)

    @property
    def column_count(self) -> int:
        widest = max((len(row) for row in self.data), default=0)
        return max(widest, len(self.col_widths))

    def row(self, index: int) -> List[Any]:
        if 0 <= index < len(self.data):
            return self.data[index]
        return []

    def is_row_hidden(self, index: int) -> bool:
        return bool(self.hidden_rows.get(index))

    def is_col_hidden(self, index: int) -> bool:
        return bool(self.hidden_cols.get(index))

    def col_width(self, index: int) -> float:
        if 0 <= index < len(self.col_widths):
            try:
                w = float(self.col_widths[index])
            except (TypeError, ValueError):
                return DEFAULT_COL_WIDTH
            if w > 0:
                return w
        return DEFAULT_COL_WIDTH

    @classmethod
    def from_dict(cls, payload: Any) -> "Sheet":
        """Build a Sheet from the dashboard's stored JSON shape.

        This is the exchange format with the upstream collaborator that stores
        decoded sheets. ``to_dict`` writes the same shape back, and
        ``parsers.json_adapter`` reads whole files of it.
        """
        if not isinstance(payload, Mapping):
            raise SheetError(f"sheet payload must be a mapping, got {type(payload).__name__}")

        data = payload.get("data") or []
        if isinstance(data, (str, bytes)) or not isinstance(data, Sequence):
            raise SheetError("sheet 'data' must be a sequence of rows")
        rows = []
        for row in data:
            if row is None:
                rows.append([])
            elif isinstance(row, Sequence) and not isinstance(row, (str, bytes)):
                rows.append(list(row))
            else:
                raise SheetError(f"sheet row must be a sequence, got {type(row).__name__}")

        return cls(
            name=str(payload.get("name") or payload.get("id") or ""),
            data=rows,
            merges=tuple(payload.get("merges") or ()),
            col_widths=list(payload.get("colWidths") or []),
            hidden_cols=payload.get("hiddenCols") or {},
            hidden_rows=payload.get("hiddenRows") or {},
            id=payload.get("id"),
            description=payload.get("description"),
            file_name=payload.get("fileName"),
        )

    def to_dict(self) -> dict:
        out = {
            "name": self.name,
            "data": [list(row) for row in self.data],
            "merges": [m.to_dict() for m in self.merges],
            "colWidths": list(self.col_widths),
            "hiddenCols": {str(k): True for k in sorted(self.hidden_cols)},
            "hiddenRows": {str(k): True for k in sorted(self.hidden_rows)},
        }
        if self.id is not None:
            out["id"] = self.id
        if self.description is not None:
            out["description"] = self.description
        if self.file_name is not None:
            out["fileName"] = self.file_name
        return out
