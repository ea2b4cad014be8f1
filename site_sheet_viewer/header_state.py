from __future__ import annotations

from enum import Enum
from typing import Callable, Optional

import logging


logger = logging.getLogger(__name__)


class HeaderState(str, Enum):
    INACTIVE = "inactive"
    PICKING = "picking"
    PINNED = "pinned"


PIN_LABEL = "Pin header"
UNPIN_LABEL = "Unpin header"
PICKING_STATUS = "SELECTION MODE: click the row you want to pin as the header."
REPORT_STATUS = "View: report mode (layout fidelity on)"


class StickyHeaderController:
    """Tracks which data row, if any, the user pinned above the body.

    INACTIVE -> PICKING on toggle, PICKING -> PINNED on a row click,
    PINNED -> INACTIVE on toggle, and any state -> INACTIVE on reset().
    Toggling while PICKING cancels the pick.
    """

    def __init__(self, on_change: Optional[Callable[["StickyHeaderController"], None]] = None):
        self.pinned_row: Optional[int] = None
        self.picking: bool = False
        self.on_change = on_change

    @property
    def state(self) -> HeaderState:
        if self.pinned_row is not None:
            return HeaderState.PINNED
        if self.picking:
            return HeaderState.PICKING
        return HeaderState.INACTIVE

    @property
    def button_label(self) -> str:
        return UNPIN_LABEL if self.pinned_row is not None else PIN_LABEL

    @property
    def status_text(self) -> str:
        return PICKING_STATUS if self.picking else REPORT_STATUS

    def toggle(self) -> None:
        before = self.state
        if self.pinned_row is not None:
            self.pinned_row = None
        else:
            self.picking = not self.picking
        self._changed(before)

    def click_row(self, row: int) -> bool:
        if not self.picking:
            return False
        before = self.state
        self.pinned_row = int(row)
        self.picking = False
        self._changed(before)
        return True

    def reset(self) -> None:
        before = self.state
        self.pinned_row = None
        self.picking = False
        self._changed(before)

    def _changed(self, before: HeaderState) -> None:
        after = self.state
        if after is before:
            return
        logger.debug("Header state %s -> %s (pinned_row=%s)", before.value, after.value, self.pinned_row)
        if self.on_change is not None:
            self.on_change(self)
