# utils/excel_utils.py

import logging
import calendar
import os
import tempfile
from datetime import date
from io import BytesIO
from pathlib import Path
from typing import List, Optional

import pandas as pd
from openpyxl.comments import Comment
from openpyxl.styles import Font, Alignment, PatternFill, Border
from openpyxl.utils import get_column_letter

from config import REPORT_OUTPUT_DIR
from models.attendance_model import AttendanceRecord, AttendanceStatus, DateRange, Stat

logger = logging.getLogger(__name__)

SUMMARY_SHEET = "Summary"
DETAIL_SHEET = "Detailed Report"

DETAIL_HEADERS = ["Date", "Day", "In Time", "Out Time", "Total Hours", "Status", "Reason / Note"]
DETAIL_COLUMN_WIDTHS = [12, 12, 10, 10, 12, 18, 40]
SUMMARY_COLUMN_WIDTHS = [25, 15]

# Summary sheet layout (1-based rows)
TITLE_ROW = 1
NAME_ROW = 3
PERIOD_ROW = 4
METRIC_HEADER_ROW = 6

HEADER_FILL = "D1D5DB"

EXCEL_STATUS_FILLS = {
    AttendanceStatus.PRESENT: "DCFCE7",
    AttendanceStatus.ABSENT: "FEE2E2",
    AttendanceStatus.HALF_DAY: "FEF9C3",
    AttendanceStatus.SHORT_HOURS: "FEF3C7",
    AttendanceStatus.WEEKEND: "E2E8F0",
    AttendanceStatus.HOLIDAY: "E0F2FE",
    AttendanceStatus.WORK_ON_HOLIDAY: "E9D5FF",
    AttendanceStatus.WORK_ON_WEEKEND: "E0E7FF",
    AttendanceStatus.UNKNOWN: "F3F4F6",
}

# Tailwind classes for the record table badges
STATUS_COLORS = {
    AttendanceStatus.PRESENT: "bg-green-100 text-green-800",
    AttendanceStatus.ABSENT: "bg-red-100 text-red-800",
    AttendanceStatus.HALF_DAY: "bg-yellow-100 text-yellow-800",
    AttendanceStatus.SHORT_HOURS: "bg-amber-100 text-amber-800",
    AttendanceStatus.WEEKEND: "bg-slate-200 text-slate-800",
    AttendanceStatus.HOLIDAY: "bg-sky-100 text-sky-800",
    AttendanceStatus.WORK_ON_HOLIDAY: "bg-purple-200 text-purple-800",
    AttendanceStatus.WORK_ON_WEEKEND: "bg-indigo-100 text-indigo-800",
    AttendanceStatus.UNKNOWN: "bg-gray-100 text-gray-800",
}


def validate_status_mapping(mapping, name):
    """Every status must have an entry; raises at import rather than on a missing lookup."""
    missing = [s.name for s in AttendanceStatus if s not in mapping]
    if missing:
        raise ValueError(f"{name} is missing statuses: {', '.join(missing)}")


validate_status_mapping(EXCEL_STATUS_FILLS, "EXCEL_STATUS_FILLS")
validate_status_mapping(STATUS_COLORS, "STATUS_COLORS")


def format_locale_date(value: date) -> str:
    """US short date without padding, e.g. 3/7/2025."""
    return f"{value.month}/{value.day}/{value.year}"


def report_filename(employee_name: str, export_date: Optional[date] = None) -> str:
    export_date = export_date or date.today()
    return f"Attendance_Report_{employee_name.replace(' ', '_')}_{export_date.isoformat()}.xlsx"


def _solid_fill(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def _detail_rows(records: List[AttendanceRecord]):
    return [
        {
            "Date": format_locale_date(r.date),
            "Day": calendar.day_name[r.date.weekday()],
            "In Time": r.in_time or "-",
            "Out Time": r.out_time or "-",
            "Total Hours": r.total_hours or "0:00",
            "Status": r.status.value,
            "Reason / Note": r.reason or "-",
        }
        for r in records
    ]


def _write_summary_sheet(writer, summary: List[Stat], employee_name: str, date_range: DateRange):
    metrics_df = pd.DataFrame(
        [[s.label, s.value] for s in summary],
        columns=["Metric", "Value"],
    )
    metrics_df.to_excel(writer, sheet_name=SUMMARY_SHEET, index=False, startrow=METRIC_HEADER_ROW - 1)
    worksheet = writer.sheets[SUMMARY_SHEET]

    worksheet.merge_cells(start_row=TITLE_ROW, start_column=1, end_row=TITLE_ROW, end_column=2)
    cell = worksheet.cell(row=TITLE_ROW, column=1)
    cell.value = "Employee Attendance Summary"
    cell.font = Font(bold=True, size=16)
    cell.alignment = Alignment(horizontal="center")

    worksheet.cell(row=NAME_ROW, column=1).value = "Employee Name:"
    worksheet.cell(row=NAME_ROW, column=2).value = employee_name
    worksheet.cell(row=PERIOD_ROW, column=1).value = "Period:"
    worksheet.cell(row=PERIOD_ROW, column=2).value = (
        f"{format_locale_date(date_range.start)} - {format_locale_date(date_range.end)}"
    )

    # pandas styles its own header; reset it to plain text like the rest of the sheet
    for col_idx in range(1, 3):
        header = worksheet.cell(row=METRIC_HEADER_ROW, column=col_idx)
        header.font = Font(bold=False)
        header.border = Border()
        header.alignment = Alignment()

    for offset, stat in enumerate(summary, start=1):
        if stat.total_hours_decimal is not None:
            value_cell = worksheet.cell(row=METRIC_HEADER_ROW + offset, column=2)
            value_cell.comment = Comment(f"{stat.total_hours_decimal:.4f} hours", "Attendance Report")

    for col_idx, width in enumerate(SUMMARY_COLUMN_WIDTHS, start=1):
        worksheet.column_dimensions[get_column_letter(col_idx)].width = width


def _write_detail_sheet(writer, records: List[AttendanceRecord]):
    report_df = pd.DataFrame(_detail_rows(records), columns=DETAIL_HEADERS)
    report_df.to_excel(writer, sheet_name=DETAIL_SHEET, index=False)
    worksheet = writer.sheets[DETAIL_SHEET]

    for col_idx in range(1, len(DETAIL_HEADERS) + 1):
        cell = worksheet.cell(row=1, column=col_idx)
        cell.font = Font(bold=True)
        cell.fill = _solid_fill(HEADER_FILL)
        cell.alignment = Alignment(horizontal="center")

    for row_idx, record in enumerate(records, start=2):
        row_fill = _solid_fill(EXCEL_STATUS_FILLS[record.status])
        for col_idx in range(1, len(DETAIL_HEADERS) + 1):
            worksheet.cell(row=row_idx, column=col_idx).fill = row_fill

    for col_idx, width in enumerate(DETAIL_COLUMN_WIDTHS, start=1):
        worksheet.column_dimensions[get_column_letter(col_idx)].width = width


def build_report_workbook(
    records: List[AttendanceRecord],
    summary: List[Stat],
    employee_name: str,
    date_range: DateRange,
) -> BytesIO:
    """
    Create the two-sheet attendance report for one employee.

    Args:
        records: Classified records, already filtered and ordered by the caller
        summary: Stats from generate_summary_stats, written in order
        employee_name: Name shown on the summary sheet
        date_range: Reporting period shown on the summary sheet

    Returns:
        BytesIO containing the xlsx document
    """
    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        _write_summary_sheet(writer, summary, employee_name, date_range)
        _write_detail_sheet(writer, records)

    output.seek(0)
    return output


def export_report(
    records: List[AttendanceRecord],
    summary: List[Stat],
    employee_name: str,
    date_range: DateRange,
    output_dir=REPORT_OUTPUT_DIR,
    export_date: Optional[date] = None,
) -> Path:
    """
    Write the report to output_dir. The document lands under its final name
    only once fully written; I/O errors reach the caller as-is.
    """
    content = build_report_workbook(records, summary, employee_name, date_range).getvalue()
    path = Path(output_dir) / report_filename(employee_name, export_date)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".xlsx.tmp")
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info(f"Wrote attendance report for {employee_name} to {path}")
    return path
