from site_sheet_viewer.header_state import (
    PICKING_STATUS,
    PIN_LABEL,
    REPORT_STATUS,
    UNPIN_LABEL,
    HeaderState,
    StickyHeaderController,
)


def test_pick_then_click_pins_row():
    ctrl = StickyHeaderController()
    assert ctrl.state is HeaderState.INACTIVE

    ctrl.toggle()
    assert ctrl.state is HeaderState.PICKING
    assert ctrl.status_text == PICKING_STATUS

    assert ctrl.click_row(7) is True
    assert ctrl.pinned_row == 7
    assert ctrl.picking is False
    assert ctrl.state is HeaderState.PINNED
    assert ctrl.button_label == UNPIN_LABEL
    assert ctrl.status_text == REPORT_STATUS


def test_clicks_outside_picking_are_ignored():
    ctrl = StickyHeaderController()
    assert ctrl.click_row(3) is False
    assert ctrl.state is HeaderState.INACTIVE

    ctrl.toggle()
    ctrl.click_row(3)
    assert ctrl.click_row(5) is False
    assert ctrl.pinned_row == 3


def test_toggle_unpins_and_cancels_picking():
    ctrl = StickyHeaderController()
    ctrl.toggle()
    ctrl.toggle()
    assert ctrl.state is HeaderState.INACTIVE

    ctrl.toggle()
    ctrl.click_row(1)
    ctrl.toggle()
    assert ctrl.state is HeaderState.INACTIVE
    assert ctrl.pinned_row is None
    assert ctrl.button_label == PIN_LABEL


def test_reset_from_any_state():
    ctrl = StickyHeaderController()
    ctrl.toggle()
    ctrl.reset()
    assert ctrl.state is HeaderState.INACTIVE

    ctrl.toggle()
    ctrl.click_row(4)
    ctrl.reset()
    assert ctrl.state is HeaderState.INACTIVE
    assert ctrl.pinned_row is None


def test_on_change_fires_only_on_real_transitions():
    seen = []
    ctrl = StickyHeaderController(on_change=lambda c: seen.append(c.state))
    ctrl.reset()
    ctrl.click_row(1)
    ctrl.toggle()
    ctrl.click_row(2)
    ctrl.toggle()
    assert seen == [HeaderState.PICKING, HeaderState.PINNED, HeaderState.INACTIVE]
