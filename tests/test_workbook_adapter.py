import json

import pandas as pd
import pytest
from openpyxl import Workbook

from site_sheet_viewer.model import DEFAULT_COL_WIDTH, MergeRange, SheetError
from site_sheet_viewer.parsers.frame_adapter import load_csv_sheets, sheet_from_dataframe
from site_sheet_viewer.parsers.json_adapter import load_json_sheets, sheets_from_payload
from site_sheet_viewer.parsers.workbook_adapter import (
    column_width_to_pixels,
    load_sheets,
    sheet_from_worksheet,
    sheets_from_workbook,
)


def _schedule_workbook():
    wb = Workbook()
    ws = wb.active
    ws.title = "Master Plan"
    rows = [
        ["MASTER SCHEDULE", None, None, None],
        ["Task", "Start", "End", "Progress"],
        ["Foundations", "2024-01-08", "2024-02-16", 1],
        ["Structure", "2024-02-19", "2024-05-31", 0.45],
        ["Internal note", None, None, None],
    ]
    for r, row in enumerate(rows, 1):
        for c, v in enumerate(row, 1):
            ws.cell(row=r, column=c, value=v)
    ws.merge_cells("A1:D1")
    ws.column_dimensions["A"].width = 30
    ws.column_dimensions["C"].hidden = True
    ws.row_dimensions[5].hidden = True

    wb.create_sheet("Empty")
    daily = wb.create_sheet("Daily Report")
    daily["A1"] = "RDO"
    return wb


def test_worksheet_is_adapted_to_zero_based_sheet():
    wb = _schedule_workbook()
    sheet = sheet_from_worksheet(wb["Master Plan"], file_name="plan.xlsx")

    assert sheet.name == "Master Plan"
    assert sheet.file_name == "plan.xlsx"
    assert sheet.row_count == 5
    assert sheet.data[0] == ["MASTER SCHEDULE", None, None, None]
    assert sheet.data[3][3] == 0.45
    assert sheet.merges == (MergeRange(0, 0, 0, 3),)
    assert sheet.hidden_cols == {2: True}
    assert sheet.hidden_rows == {4: True}
    assert sheet.col_widths[0] == 30 * 7 + 10
    assert sheet.col_widths[1] == DEFAULT_COL_WIDTH


def test_workbook_skips_empty_sheets_and_keeps_order():
    sheets = sheets_from_workbook(_schedule_workbook())
    assert [s.name for s in sheets] == ["Master Plan", "Daily Report"]


def test_load_sheets_from_disk(tmp_path):
    path = tmp_path / "schedule.xlsx"
    _schedule_workbook().save(path)
    sheets = load_sheets(path)
    assert [s.name for s in sheets] == ["Master Plan", "Daily Report"]
    assert all(s.file_name == "schedule.xlsx" for s in sheets)


def test_load_sheets_propagates_errors(tmp_path):
    bad = tmp_path / "not-a-workbook.xlsx"
    bad.write_text("plain text", encoding="utf-8")
    with pytest.raises(Exception):
        load_sheets(bad)


@pytest.mark.parametrize("width,expected", [(None, DEFAULT_COL_WIDTH), (0, DEFAULT_COL_WIDTH), (1, 20), (10, 80)])
def test_column_width_to_pixels(width, expected):
    assert column_width_to_pixels(width) == expected


def test_dataframe_adapter_puts_header_first_and_blanks_nan():
    df = pd.DataFrame({"Item": ["Cement", "Sand"], "Qty": [10.0, float("nan")]})
    sheet = sheet_from_dataframe(df, "Supplies")
    assert sheet.data[0] == ["Item", "Qty"]
    assert sheet.data[1] == ["Cement", 10.0]
    assert sheet.data[2] == ["Sand", None]
    assert isinstance(sheet.data[1][1], float)

    no_header = sheet_from_dataframe(df, "Supplies", include_header=False)
    assert no_header.row_count == 2


def test_csv_export_becomes_one_sheet_named_after_the_file(tmp_path):
    path = tmp_path / "rdo_2024-03.csv"
    path.write_text("DATE,CREW,HOURS\n2024-03-01,Forms,8\n\n2024-03-02,,6\n", encoding="utf-8")

    (sheet,) = load_csv_sheets(path)
    assert sheet.name == "rdo_2024-03"
    assert sheet.file_name == "rdo_2024-03.csv"
    assert sheet.data[0] == ["DATE", "CREW", "HOURS"]
    assert sheet.data[1] == ["2024-03-01", "Forms", "8"]
    assert sheet.data[2] == [None, None, None]
    assert sheet.data[3] == ["2024-03-02", None, "6"]


def test_json_payload_file_reloads_with_layout(tmp_path):
    wb = _schedule_workbook()
    sheets = sheets_from_workbook(wb, file_name="schedule.xlsx")
    path = tmp_path / "schedule.json"
    path.write_text(json.dumps({"sheets": [s.to_dict() for s in sheets]}), encoding="utf-8")

    reloaded = load_json_sheets(path)
    assert [s.name for s in reloaded] == [s.name for s in sheets]
    assert reloaded[0].merges == sheets[0].merges
    assert reloaded[0].hidden_cols == sheets[0].hidden_cols
    assert reloaded[0].hidden_rows == sheets[0].hidden_rows
    assert reloaded[0].file_name == "schedule.xlsx"


def test_sheet_payload_shapes():
    one = {"name": "A", "data": [[1]]}
    assert [s.name for s in sheets_from_payload(one)] == ["A"]
    assert [s.name for s in sheets_from_payload([one, {"name": "B", "data": []}])] == ["A", "B"]
    assert [s.name for s in sheets_from_payload({"sheets": [one]})] == ["A"]
    with pytest.raises(SheetError):
        sheets_from_payload("A")
