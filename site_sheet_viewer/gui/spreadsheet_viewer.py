from __future__ import annotations

from typing import Optional, Sequence, Union

import logging

from PySide6.QtCore import Qt, QEvent, QRectF, QTimer
from PySide6.QtGui import QColor, QFont, QIcon, QPainter, QPen, QPixmap
from PySide6.QtWidgets import (
    QAbstractScrollArea,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QStackedWidget,
    QTabBar,
    QToolTip,
    QVBoxLayout,
    QWidget,
)

from site_sheet_viewer.model import Sheet
from site_sheet_viewer.session import EMPTY_HINT, EMPTY_TITLE, RenderCell, RenderPlan, ViewerSession
from site_sheet_viewer.themes import (
    CELL_TEXT,
    GRID_LINE,
    PICKING_HOVER,
    PINNED_BACKGROUND,
    PINNED_TEXT,
    ColorTheme,
    resolve_theme,
    theme_colors,
)
from site_sheet_viewer.virtualizer import OVERSCAN, ROW_HEIGHT, row_at_offset

logger = logging.getLogger(__name__)


CELL_PADDING = 8
CELL_FONT_PX = 11
# Re-measure the viewport this long after show/resize instead of every layout tick.
MEASURE_DELAY_MS = 100

_H_ALIGN = {
    "left": Qt.AlignmentFlag.AlignLeft,
    "right": Qt.AlignmentFlag.AlignRight,
    "center": Qt.AlignmentFlag.AlignHCenter,
}


def _cell_font(bold: bool) -> QFont:
    font = QFont("Arial")
    font.setPixelSize(CELL_FONT_PX)
    font.setBold(bool(bold))
    return font


def _paint_cell(
    painter: QPainter,
    cell: RenderCell,
    dx: float,
    y: float,
    *,
    background: Optional[QColor] = None,
    text_color: str = CELL_TEXT,
) -> None:
    rect = QRectF(cell.x - dx, y, cell.width, cell.height)
    if background is not None:
        painter.fillRect(rect, background)

    pres = cell.presentation
    if pres.text:
        painter.setFont(_cell_font(pres.bold))
        painter.setPen(QColor(text_color))
        flags = _H_ALIGN.get(pres.align, Qt.AlignmentFlag.AlignLeft) | Qt.AlignmentFlag.AlignVCenter
        # Text is clipped to the cell rect (no wrapping), like Excel's report view.
        painter.drawText(rect.adjusted(CELL_PADDING, 0, -CELL_PADDING, 0), int(flags), pres.text)

    painter.setPen(QPen(QColor(GRID_LINE), 1))
    painter.drawLine(rect.topRight(), rect.bottomRight())
    painter.drawLine(rect.bottomLeft(), rect.bottomRight())


class _VirtualSheetBody(QAbstractScrollArea):
    """Scroll area that paints only the rows inside the current window."""

    def __init__(self, viewer: "SpreadsheetViewer"):
        super().__init__(viewer)
        self._viewer = viewer
        self._hover_row: Optional[int] = None
        self.viewport().setMouseTracking(True)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAsNeeded)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAsNeeded)
        self.verticalScrollBar().setSingleStep(viewer.session.row_height)
        self.horizontalScrollBar().setSingleStep(20)

    def update_scrollbars(self, plan: RenderPlan) -> None:
        vp = self.viewport()
        v = self.verticalScrollBar()
        h = self.horizontalScrollBar()
        v.setRange(0, max(0, int(plan.total_height) - vp.height()))
        v.setPageStep(max(1, vp.height()))
        h.setRange(0, max(0, int(plan.content_width) - vp.width()))
        h.setPageStep(max(1, vp.width()))

    def scrollContentsBy(self, dx: int, dy: int) -> None:
        self._viewer._on_body_scrolled(self.verticalScrollBar().value(), self.horizontalScrollBar().value())

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._viewer._schedule_measure()

    def paintEvent(self, event):
        painter = QPainter(self.viewport())
        painter.fillRect(self.viewport().rect(), QColor("#ffffff"))

        plan = self._viewer.render_plan()
        if plan.empty:
            return

        dy = self.verticalScrollBar().value()
        dx = self.horizontalScrollBar().value()
        hover = QColor(PICKING_HOVER)
        white = QColor("#ffffff")

        merged_cells = []
        for row in plan.rows:
            y = row.y - dy
            if row.placeholder:
                # Keeps the pinned row's slot in the body without drawing it.
                continue
            if plan.picking and row.row == self._hover_row:
                painter.fillRect(QRectF(0, y, self.viewport().width(), row.height), hover)
            for cell in row.cells:
                if cell.span is not None:
                    merged_cells.append((cell, y))
                    continue
                _paint_cell(painter, cell, dx, y)

        # Merged anchors may cover rows below them; draw them last so they sit on top.
        for cell, y in merged_cells:
            _paint_cell(painter, cell, dx, y, background=white)

    def _content_y(self, pos_y: float) -> float:
        return pos_y + self.verticalScrollBar().value()

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            self._viewer._on_body_clicked(self._content_y(event.position().y()))
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        if self._viewer.session.header.picking:
            row = self._viewer._row_at(self._content_y(event.position().y()))
            if row != self._hover_row:
                self._hover_row = row
                self.viewport().update()
        super().mouseMoveEvent(event)

    def leaveEvent(self, event):
        if self._hover_row is not None:
            self._hover_row = None
            self.viewport().update()
        super().leaveEvent(event)

    def viewportEvent(self, event):
        if event.type() == QEvent.Type.ToolTip:
            cell = self._cell_at(event.pos().x(), event.pos().y())
            if cell is not None and cell.presentation.tooltip:
                QToolTip.showText(event.globalPos(), cell.presentation.tooltip, self.viewport())
            else:
                QToolTip.hideText()
                event.ignore()
            return True
        return super().viewportEvent(event)

    def _cell_at(self, x: float, y: float) -> Optional[RenderCell]:
        plan = self._viewer.render_plan()
        cx = x + self.horizontalScrollBar().value()
        cy = self._content_y(y)
        for row in plan.rows:
            for cell in row.cells:
                if cell.x <= cx < cell.x + cell.width and row.y <= cy < row.y + cell.height:
                    return cell
        return None


class _PinnedHeaderStrip(QWidget):
    """Vertically fixed copy of the pinned row, sharing the body's horizontal offset."""

    def __init__(self, viewer: "SpreadsheetViewer"):
        super().__init__(viewer)
        self._viewer = viewer
        self.setFixedHeight(viewer.session.row_height)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor(PINNED_BACKGROUND))
        plan = self._viewer.render_plan()
        if plan.pinned is None:
            return
        for cell in plan.pinned.cells:
            _paint_cell(painter, cell, plan.scroll_x, 0, text_color=PINNED_TEXT)
        painter.setPen(QPen(QColor(GRID_LINE), 1))
        painter.drawLine(self.rect().bottomLeft(), self.rect().bottomRight())


class SpreadsheetViewer(QWidget):
    """Read-only, virtualized viewer for a collection of sheets.

    All interaction state (active tab, scroll, pinned header) lives in
    ``self.session``; the widget only paints the session's render plan.
    """

    def __init__(
        self,
        sheets: Optional[Sequence[Sheet]] = None,
        *,
        title: str = "",
        subtitle: Optional[str] = None,
        icon: Union[QIcon, QPixmap, None] = None,
        color_theme: Union[ColorTheme, str] = ColorTheme.SLATE,
        row_height: int = ROW_HEIGHT,
        overscan: int = OVERSCAN,
        classifier=None,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self.session = ViewerSession(sheets, classifier=classifier, row_height=row_height, overscan=overscan)
        self._theme = resolve_theme(color_theme)
        self._plan: Optional[RenderPlan] = None
        self._syncing_scroll = False

        self._measure_timer = QTimer(self)
        self._measure_timer.setSingleShot(True)
        self._measure_timer.setInterval(MEASURE_DELAY_MS)
        self._measure_timer.timeout.connect(self._measure_viewport)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        # Title bar
        header = QWidget()
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(16, 12, 16, 12)
        self.icon_label = QLabel()
        self.icon_label.setVisible(False)
        self.title_label = QLabel()
        title_font = QFont()
        title_font.setPointSize(13)
        title_font.setBold(True)
        self.title_label.setFont(title_font)
        self.subtitle_label = QLabel()
        self.subtitle_label.setStyleSheet("color: #64748b; font-size: 10px;")
        titles = QVBoxLayout()
        titles.setSpacing(0)
        titles.addWidget(self.title_label)
        titles.addWidget(self.subtitle_label)
        header_layout.addWidget(self.icon_label)
        header_layout.addLayout(titles)
        header_layout.addStretch(1)
        self.pin_button = QPushButton()
        self.pin_button.clicked.connect(self.toggle_header_picker)
        header_layout.addWidget(self.pin_button)
        layout.addWidget(header)

        self.tab_bar = QTabBar()
        self.tab_bar.setExpanding(False)
        self.tab_bar.setDrawBase(True)
        self.tab_bar.currentChanged.connect(self._on_tab_changed)
        self.tab_bar.tabBarClicked.connect(self._on_tab_clicked)
        layout.addWidget(self.tab_bar)

        # Grid page vs empty-state page.
        self.stack = QStackedWidget()
        grid_page = QWidget()
        grid_layout = QVBoxLayout(grid_page)
        grid_layout.setContentsMargins(0, 0, 0, 0)
        grid_layout.setSpacing(0)
        self.pinned_strip = _PinnedHeaderStrip(self)
        self.pinned_strip.setVisible(False)
        self.body = _VirtualSheetBody(self)
        grid_layout.addWidget(self.pinned_strip)
        grid_layout.addWidget(self.body, 1)
        self.stack.addWidget(grid_page)

        empty_page = QWidget()
        empty_layout = QVBoxLayout(empty_page)
        empty_layout.addStretch(1)
        self.empty_title = QLabel(EMPTY_TITLE)
        self.empty_title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.empty_title.setStyleSheet("color: #475569; font-size: 16px; font-weight: 600;")
        self.empty_hint = QLabel(EMPTY_HINT)
        self.empty_hint.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.empty_hint.setStyleSheet("color: #94a3b8;")
        empty_layout.addWidget(self.empty_title)
        empty_layout.addWidget(self.empty_hint)
        empty_layout.addStretch(1)
        self.stack.addWidget(empty_page)
        layout.addWidget(self.stack, 1)

        # Footer
        footer = QWidget()
        footer_layout = QHBoxLayout(footer)
        footer_layout.setContentsMargins(16, 2, 16, 2)
        self.status_label = QLabel()
        self.count_label = QLabel()
        for lbl in (self.status_label, self.count_label):
            lbl.setStyleSheet("color: #94a3b8; font-size: 10px;")
        footer_layout.addWidget(self.status_label)
        footer_layout.addStretch(1)
        footer_layout.addWidget(self.count_label)
        layout.addWidget(footer)

        self.session.header.on_change = lambda _ctrl: self._invalidate()

        self.set_title(title, subtitle)
        self.set_icon(icon)
        self._rebuild_tabs()
        self._invalidate()

    # -- public API ---------------------------------------------------------

    def set_sheets(self, sheets: Optional[Sequence[Sheet]]) -> None:
        self.session.set_sheets(sheets)
        self._rebuild_tabs()
        self._reset_scrollbars()
        self._invalidate()
        self._schedule_measure()

    def set_title(self, title: str, subtitle: Optional[str] = None) -> None:
        self.title_label.setText(title or "")
        self.subtitle_label.setText(subtitle or "")
        self.subtitle_label.setVisible(bool(subtitle))

    def set_icon(self, icon: Union[QIcon, QPixmap, None]) -> None:
        if icon is None:
            self.icon_label.clear()
            self.icon_label.setVisible(False)
            return
        pixmap = icon.pixmap(20, 20) if isinstance(icon, QIcon) else icon
        self.icon_label.setPixmap(pixmap)
        colors = theme_colors(self._theme)
        self.icon_label.setStyleSheet(
            f"background: {colors.background}; color: {colors.text}; border-radius: 6px; padding: 6px;"
        )
        self.icon_label.setVisible(True)

    @property
    def color_theme(self) -> ColorTheme:
        return self._theme

    def set_active_tab(self, index: int) -> None:
        if 0 <= index < self.tab_bar.count() and index != self.tab_bar.currentIndex():
            self.tab_bar.setCurrentIndex(index)
        else:
            self._on_tab_clicked(index)

    def toggle_header_picker(self) -> None:
        # The header controller calls back into _invalidate on every transition.
        self.session.toggle_header_picker()

    def render_plan(self) -> RenderPlan:
        if self._plan is None:
            self._plan = self.session.render_plan()
        return self._plan

    # -- internals ----------------------------------------------------------

    def _rebuild_tabs(self) -> None:
        self.tab_bar.blockSignals(True)
        try:
            while self.tab_bar.count():
                self.tab_bar.removeTab(0)
            for sheet in self.session.sheets:
                self.tab_bar.addTab(sheet.name)
                if sheet.description:
                    self.tab_bar.setTabToolTip(self.tab_bar.count() - 1, sheet.description)
            if self.tab_bar.count():
                self.tab_bar.setCurrentIndex(self.session.active_tab_index)
        finally:
            self.tab_bar.blockSignals(False)

    def _on_tab_changed(self, index: int) -> None:
        if index < 0:
            return
        self.session.set_active_tab(index)
        self._reset_scrollbars()
        self._invalidate()
        self._schedule_measure()

    def _on_tab_clicked(self, index: int) -> None:
        # Clicking the tab that is already active only rewinds the scroll.
        if index < 0 or index != self.session.active_tab_index:
            return
        self.session.set_active_tab(index)
        self._reset_scrollbars()
        self._invalidate()

    def _reset_scrollbars(self) -> None:
        self._syncing_scroll = True
        try:
            self.body.verticalScrollBar().setValue(0)
            self.body.horizontalScrollBar().setValue(0)
        finally:
            self._syncing_scroll = False

    def _on_body_scrolled(self, y: int, x: int) -> None:
        if self._syncing_scroll:
            return
        self.session.set_scroll(y, x)
        self._invalidate()

    def _on_body_clicked(self, content_y: float) -> None:
        if self.session.header.picking:
            row = self.session.click_at(content_y)
            logger.debug("Picked row %s as sticky header", row)

    def _row_at(self, content_y: float) -> Optional[int]:
        return row_at_offset(content_y, self.session.visibility().visible_rows, self.session.row_height)

    def _schedule_measure(self) -> None:
        self._measure_timer.start()

    def _measure_viewport(self) -> None:
        height = self.body.viewport().height()
        if height > 0 and height != self.session.viewport_height:
            self.session.set_viewport_height(height)
            self._invalidate()
        else:
            self._sync_chrome(self.render_plan())

    def _invalidate(self) -> None:
        self._plan = None
        plan = self.render_plan()
        self._sync_chrome(plan)
        self.body.viewport().update()
        self.pinned_strip.update()

    def _sync_chrome(self, plan: RenderPlan) -> None:
        self.stack.setCurrentIndex(1 if plan.empty else 0)
        self.tab_bar.setVisible(not plan.empty)
        self.pin_button.setEnabled(not plan.empty)

        header = self.session.header
        self.pin_button.setText(header.button_label if header.pinned_row is not None else f"\U0001F4CC {header.button_label}")
        if header.picking:
            style = "background: #dbeafe; color: #1d4ed8; border: 1px solid #93c5fd;"
        elif header.pinned_row is not None:
            style = "background: #fef2f2; color: #dc2626; border: 1px solid #fecaca;"
        else:
            style = "background: #ffffff; color: #475569; border: 1px solid #cbd5e1;"
        self.pin_button.setStyleSheet(f"QPushButton {{ {style} padding: 4px 10px; font-weight: bold; font-size: 11px; }}")

        self.pinned_strip.setVisible(plan.pinned is not None)
        self.body.viewport().setCursor(
            Qt.CursorShape.CrossCursor if plan.picking else Qt.CursorShape.ArrowCursor
        )
        self.status_label.setText(plan.status_text if not plan.empty else "")
        self.count_label.setText(plan.footer_text if not plan.empty else "")
        if not plan.empty:
            self.body.update_scrollbars(plan)

    def showEvent(self, event):
        super().showEvent(event)
        self._schedule_measure()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._schedule_measure()
