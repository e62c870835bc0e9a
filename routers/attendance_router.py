# routers/attendance_router.py
from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse
from services.attendance_service import (
    analyze_data,
    apply_record_update,
    generate_summary_stats,
    get_date_range,
    has_missed_punch,
    last_record_wins,
    normalize_holidays,
    reject_duplicate_days,
)
from models.attendance_model import (
    AnalyzeRequest,
    DateRange,
    DateRangeRequest,
    RecordUpdateRequest,
    ReportSelection,
)
from utils.excel_utils import STATUS_COLORS, build_report_workbook, report_filename
from utils.query_utils import ALL_EMPLOYEES, filter_employee_records, records_to_show
from datetime import date
from urllib.parse import quote

router = APIRouter(prefix="/attendance", tags=["attendance"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _content_disposition(filename: str) -> str:
    # header values must be latin-1, so other names use the RFC 5987 form
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


def _full_date_range(employees) -> DateRange:
    date_range = get_date_range(employees)
    if date_range is None:
        today = date.today()
        return DateRange(start=today, end=today)
    return DateRange(start=date_range[0], end=date_range[1])


def _select_records(selection: ReportSelection):
    """Apply the employee/date window and return (date range, records newest first)."""
    full_range = _full_date_range(selection.employees)
    start = selection.start_date or full_range.start
    end = selection.end_date or full_range.end
    if start > end:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")

    if selection.employee_name != ALL_EMPLOYEES and not any(
        e.employee_name == selection.employee_name for e in selection.employees
    ):
        raise HTTPException(status_code=404, detail="Employee not found")

    filtered = filter_employee_records(selection.employees, selection.employee_name, start, end)
    return DateRange(start=start, end=end), records_to_show(filtered, selection.employee_name)


@router.post("/analyze")
def api_analyze(request: AnalyzeRequest, strict: bool = False):
    """Reconcile and classify; strict=true rejects duplicate days instead of keeping the last one."""
    policy = reject_duplicate_days if strict else last_record_wins
    return analyze_data(request.employees, normalize_holidays(request.holidays), duplicate_policy=policy)


@router.post("/records/update")
def api_update_record(request: RecordUpdateRequest):
    try:
        return apply_record_update(request.employees, request.update, request.holidays)
    except KeyError:
        raise HTTPException(status_code=404, detail="Attendance record not found")


@router.post("/date-range")
def api_date_range(request: DateRangeRequest):
    return _full_date_range(request.employees)


@router.post("/records")
def api_get_records(selection: ReportSelection):
    _, records = _select_records(selection)
    return [
        {
            **record.model_dump(mode="json"),
            "missed_punch": has_missed_punch(record),
            "status_color": STATUS_COLORS[record.status],
        }
        for record in records
    ]


@router.post("/summary")
def api_get_summary(selection: ReportSelection):
    if selection.employee_name == ALL_EMPLOYEES:
        return []
    _, records = _select_records(selection)
    return generate_summary_stats(records)


@router.post("/export")
def api_export_report(selection: ReportSelection):
    if selection.employee_name == ALL_EMPLOYEES:
        raise HTTPException(
            status_code=400,
            detail="Please select a specific employee to export their report."
        )
    date_range, records = _select_records(selection)
    summary = generate_summary_stats(records)
    output = build_report_workbook(records, summary, selection.employee_name, date_range)
    filename = report_filename(selection.employee_name)
    return StreamingResponse(
        output,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": _content_disposition(filename)},
    )
