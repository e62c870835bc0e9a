from datetime import date

import pytest
from openpyxl import load_workbook

from models.attendance_model import AttendanceStatus, DateRange, EmployeeData
from services.attendance_service import analyze_data, generate_summary_stats
from utils import excel_utils
from utils.excel_utils import (
    DETAIL_HEADERS,
    EXCEL_STATUS_FILLS,
    STATUS_COLORS,
    build_report_workbook,
    export_report,
    report_filename,
    validate_status_mapping,
)
from tests.conftest import FRIDAY, MONDAY, make_record


@pytest.fixture
def report_inputs():
    employees = [EmployeeData(employee_name="Alice Smith", records=[
        make_record("Alice Smith", MONDAY, 8.0, in_time="09:00", out_time="17:00", total_hours="08:00"),
        make_record("Alice Smith", FRIDAY, 2.5, in_time="09:00", total_hours="02:30", reason="Left early"),
    ])]
    records = analyze_data(employees, [])[0].records
    summary = generate_summary_stats(records)
    return records, summary, DateRange(start=MONDAY, end=FRIDAY)


def _load(records, summary, date_range, name="Alice Smith"):
    return load_workbook(build_report_workbook(records, summary, name, date_range))


def test_status_tables_cover_every_status():
    validate_status_mapping(EXCEL_STATUS_FILLS, "EXCEL_STATUS_FILLS")
    validate_status_mapping(STATUS_COLORS, "STATUS_COLORS")
    with pytest.raises(ValueError, match="UNKNOWN"):
        validate_status_mapping({s: "FFFFFF" for s in AttendanceStatus if s != AttendanceStatus.UNKNOWN}, "partial")


def test_workbook_has_two_sheets_in_order(report_inputs):
    wb = _load(*report_inputs)
    assert wb.sheetnames == ["Summary", "Detailed Report"]


def test_summary_sheet_layout(report_inputs):
    records, summary, date_range = report_inputs
    ws = _load(records, summary, date_range)["Summary"]

    assert ws["A1"].value == "Employee Attendance Summary"
    assert ws["A1"].font.bold and ws["A1"].font.size == 16
    assert ws["A1"].alignment.horizontal == "center"
    assert "A1:B1" in {str(r) for r in ws.merged_cells.ranges}

    assert ws["A2"].value is None
    assert (ws["A3"].value, ws["B3"].value) == ("Employee Name:", "Alice Smith")
    assert (ws["A4"].value, ws["B4"].value) == ("Period:", "3/3/2025 - 3/7/2025")
    assert ws["A5"].value is None
    assert (ws["A6"].value, ws["B6"].value) == ("Metric", "Value")

    rows = [(ws.cell(row=7 + i, column=1).value, ws.cell(row=7 + i, column=2).value) for i in range(len(summary))]
    assert rows == [(s.label, s.value) for s in summary]
    assert ws["B12"].value == "10:30"
    assert "10.5000" in ws["B12"].comment.text

    assert ws.column_dimensions["A"].width == 25
    assert ws.column_dimensions["B"].width == 15


def test_detail_sheet_rows_and_fills(report_inputs):
    records, summary, date_range = report_inputs
    ws = _load(records, summary, date_range)["Detailed Report"]

    assert [c.value for c in ws[1]] == DETAIL_HEADERS
    for cell in ws[1]:
        assert cell.font.bold
        assert cell.fill.fgColor.rgb.upper().endswith("D1D5DB")
        assert cell.alignment.horizontal == "center"

    assert ws.max_row == 1 + len(records)
    assert [c.value for c in ws[2]] == ["3/3/2025", "Monday", "09:00", "17:00", "08:00", "Present", "-"]
    assert [c.value for c in ws[3]] == ["3/4/2025", "Tuesday", "-", "-", "0:00", "Absent", "-"]
    assert [c.value for c in ws[6]] == ["3/7/2025", "Friday", "09:00", "-", "02:30", "Half Day", "Left early"]

    for row_idx, record in enumerate(records, start=2):
        for cell in ws[row_idx]:
            assert cell.fill.fgColor.rgb.upper().endswith(EXCEL_STATUS_FILLS[record.status])

    assert ws.column_dimensions["F"].width == 18
    assert ws.column_dimensions["G"].width == 40


def test_detail_rows_follow_given_order(report_inputs):
    records, summary, date_range = report_inputs
    newest_first = list(reversed(records))
    ws = _load(newest_first, summary, date_range)["Detailed Report"]
    assert ws["A2"].value == "3/7/2025"
    assert ws["A6"].value == "3/3/2025"


def test_export_does_not_mutate_inputs(report_inputs):
    records, summary, date_range = report_inputs
    before = ([r.model_copy() for r in records], [s.model_copy() for s in summary])
    build_report_workbook(records, summary, "Alice Smith", date_range)
    assert (records, summary) == before


def test_report_filename():
    assert report_filename("Alice Mary Smith", date(2025, 3, 10)) == "Attendance_Report_Alice_Mary_Smith_2025-03-10.xlsx"


def test_export_report_writes_file(tmp_path, report_inputs):
    records, summary, date_range = report_inputs
    path = export_report(records, summary, "Alice Smith", date_range, tmp_path / "out", export_date=date(2025, 3, 10))

    assert path == tmp_path / "out" / "Attendance_Report_Alice_Smith_2025-03-10.xlsx"
    assert load_workbook(path).sheetnames == ["Summary", "Detailed Report"]


def test_export_report_surfaces_write_errors(tmp_path, report_inputs):
    records, summary, date_range = report_inputs
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")

    with pytest.raises(OSError):
        export_report(records, summary, "Alice Smith", date_range, blocker)


def test_export_report_leaves_no_partial_file(tmp_path, monkeypatch, report_inputs):
    records, summary, date_range = report_inputs

    def failing_replace(src, dst):
        raise OSError("No space left on device")

    monkeypatch.setattr(excel_utils.os, "replace", failing_replace)
    with pytest.raises(OSError, match="No space left"):
        export_report(records, summary, "Alice Smith", date_range, tmp_path, export_date=date(2025, 3, 10))

    assert list(tmp_path.iterdir()) == []


def test_export_report_overwrites_existing_report(tmp_path, report_inputs):
    records, summary, date_range = report_inputs
    target = tmp_path / "Attendance_Report_Alice_Smith_2025-03-10.xlsx"
    target.write_bytes(b"stale")

    path = export_report(records, summary, "Alice Smith", date_range, tmp_path, export_date=date(2025, 3, 10))
    assert path == target
    assert load_workbook(path).sheetnames == ["Summary", "Detailed Report"]
    assert [p.name for p in tmp_path.iterdir()] == [target.name]
