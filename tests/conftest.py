import os

import pytest

# Widget tests run without a display.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from site_sheet_viewer.model import MergeRange, Sheet


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


def _grid(rows: int, cols: int):
    return [[f"r{r}c{c}" for c in range(cols)] for r in range(rows)]


@pytest.fixture
def make_sheet():
    def _make(name="Sheet1", rows=10, cols=5, **kwargs):
        data = kwargs.pop("data", None)
        if data is None:
            data = _grid(rows, cols)
        return Sheet(name=name, data=data, **kwargs)

    return _make


@pytest.fixture
def budget_sheet():
    """Small budget-style export with a title merge and a hidden column."""
    data = [
        ["BUDGET 2024", None, None, None],
        ["Item", "Qty", "Unit cost", "Total"],
        ["Concrete", 12, "R$ 1.200,00", "R$ 14.400,00"],
        ["Rebar", 3, "R$ 800,00", "R$ 2.400,00"],
        ["Formwork", 5, "-R$ 50,00", "10%"],
    ]
    return Sheet(
        name="Budget",
        data=data,
        merges=(MergeRange(0, 0, 0, 3),),
        col_widths=[120, 60, 90],
        hidden_cols={1: True},
    )
