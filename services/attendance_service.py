# services/attendance_service.py
import logging
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

import pandas as pd

from config import FULL_DAY_HOURS, HALF_DAY_HOURS, WEEKEND_DAYS
from models.attendance_model import (
    AttendanceRecord,
    AttendanceStatus,
    AttendanceUpdate,
    EmployeeData,
    Holiday,
    Stat,
)
from utils.time_utils import format_clock, hours_between, to_calendar_day, to_date_string

logger = logging.getLogger(__name__)

OUT_OF_OFFICE_REASON = "Out of Office"


class DuplicateRecordError(ValueError):
    """Raised when an employee has more than one record for the same calendar day."""


def get_holiday_dates(holidays: Iterable[Holiday]) -> Set[str]:
    return {h.date for h in holidays}


def normalize_holidays(holidays: Iterable[Holiday]) -> List[Holiday]:
    """Drop repeated dates (the last label wins) and order by date."""
    by_date = {h.date: h for h in holidays}
    return [by_date[d] for d in sorted(by_date)]


def classify_status(
    record: AttendanceRecord,
    holiday_dates: Set[str],
    weekend_days=WEEKEND_DAYS,
    full_day_hours: float = FULL_DAY_HOURS,
    half_day_hours: float = HALF_DAY_HOURS,
) -> AttendanceStatus:
    """
    Classify one day. Holiday wins over weekend, and both win over the
    hour thresholds whenever any time was worked.
    """
    is_holiday = to_date_string(record.date) in holiday_dates
    is_weekend = record.date.weekday() in weekend_days
    hours = record.work_hours_decimal

    if hours > 0:
        if is_holiday:
            return AttendanceStatus.WORK_ON_HOLIDAY
        if is_weekend:
            return AttendanceStatus.WORK_ON_WEEKEND
        if hours >= full_day_hours:
            return AttendanceStatus.PRESENT
        if hours >= half_day_hours:
            return AttendanceStatus.SHORT_HOURS
        return AttendanceStatus.HALF_DAY

    # Unreachable while full_day_hours > 0: hours is zero on this branch.
    # Kept as-is until approved-leave semantics are settled.
    if record.reason == OUT_OF_OFFICE_REASON and hours == full_day_hours:
        return AttendanceStatus.PRESENT
    if is_holiday:
        return AttendanceStatus.HOLIDAY
    if is_weekend:
        return AttendanceStatus.WEEKEND
    return AttendanceStatus.ABSENT


# Duplicate-day policies: fold one employee's records into a date-string -> record map.

DuplicatePolicy = Callable[[str, Iterable[AttendanceRecord]], Dict[str, AttendanceRecord]]


def last_record_wins(employee_name: str, records: Iterable[AttendanceRecord]) -> Dict[str, AttendanceRecord]:
    records_map: Dict[str, AttendanceRecord] = {}
    for record in records:
        key = to_date_string(record.date)
        if key in records_map:
            logger.warning(
                f"Duplicate records for {employee_name} on {key}; keeping record {record.id}"
            )
        records_map[key] = record
    return records_map


def reject_duplicate_days(employee_name: str, records: Iterable[AttendanceRecord]) -> Dict[str, AttendanceRecord]:
    records_map: Dict[str, AttendanceRecord] = {}
    for record in records:
        key = to_date_string(record.date)
        if key in records_map:
            raise DuplicateRecordError(f"Employee {employee_name} has more than one record for {key}")
        records_map[key] = record
    return records_map


def get_date_range(employees: Iterable[EmployeeData]) -> Optional[Tuple[date, date]]:
    """Earliest and latest record date across every employee, or None when there are no records."""
    min_date = None
    max_date = None
    for employee in employees:
        for record in employee.records:
            record_date = to_calendar_day(record.date)
            if min_date is None or record_date < min_date:
                min_date = record_date
            if max_date is None or record_date > max_date:
                max_date = record_date
    if min_date is None:
        return None
    return min_date, max_date


def make_placeholder(employee_name: str, day: date) -> AttendanceRecord:
    date_string = day.isoformat()
    return AttendanceRecord(
        id=f"{employee_name}-{date_string}",
        date=day,
        employee_name=employee_name,
        in_time=None,
        out_time=None,
        total_hours=None,
        work_hours_decimal=0,
        status=AttendanceStatus.UNKNOWN,
        reason="",
        is_ai_enhanced=False,
    )


def analyze_data(
    employees: List[EmployeeData],
    holidays: Iterable[Holiday],
    duplicate_policy: DuplicatePolicy = last_record_wins,
    weekend_days=WEEKEND_DAYS,
    full_day_hours: float = FULL_DAY_HOURS,
    half_day_hours: float = HALF_DAY_HOURS,
) -> List[EmployeeData]:
    """
    Fill every employee out to the shared calendar window and classify each day.

    The window is the min/max date over all employees together, so every
    employee ends up with the same days. Days without a record get a
    zero-hour placeholder. Every record's status is recomputed, including
    records that arrive with a status already set.
    """
    if not employees:
        return employees

    date_range = get_date_range(employees)
    if date_range is None:
        return employees
    min_date, max_date = date_range

    holiday_dates = get_holiday_dates(holidays)
    days = [ts.date() for ts in pd.date_range(min_date, max_date, freq="D")]
    logger.info(
        f"Reconciling {len(employees)} employees over {min_date.isoformat()} to {max_date.isoformat()} ({len(days)} days)"
    )

    analyzed_employees = []
    for employee in employees:
        records_map = duplicate_policy(employee.employee_name, employee.records)

        new_records = []
        synthesized = 0
        for day in days:
            record = records_map.get(day.isoformat())
            if record is None:
                record = make_placeholder(employee.employee_name, day)
                synthesized += 1
            else:
                record = record.model_copy(update={"date": to_calendar_day(record.date)})

            status = classify_status(record, holiday_dates, weekend_days, full_day_hours, half_day_hours)
            new_records.append(record.model_copy(update={"status": status}))

        if synthesized:
            logger.debug(f"Synthesized {synthesized} placeholder days for {employee.employee_name}")

        analyzed_employees.append(EmployeeData(
            employee_name=employee.employee_name,
            records=sorted(new_records, key=lambda r: r.date),
        ))

    return analyzed_employees


def generate_summary_stats(records: List[AttendanceRecord]) -> List[Stat]:
    total_days = len(records)
    present = sum(1 for r in records if r.status == AttendanceStatus.PRESENT)
    absent = sum(1 for r in records if r.status == AttendanceStatus.ABSENT)
    half_days = sum(1 for r in records if r.status == AttendanceStatus.HALF_DAY)
    short_hours = sum(1 for r in records if r.status == AttendanceStatus.SHORT_HOURS)
    holidays = sum(1 for r in records if r.status in (AttendanceStatus.HOLIDAY, AttendanceStatus.WORK_ON_HOLIDAY))
    weekends = sum(1 for r in records if r.status in (AttendanceStatus.WEEKEND, AttendanceStatus.WORK_ON_WEEKEND))
    work_on_holiday = sum(1 for r in records if r.status == AttendanceStatus.WORK_ON_HOLIDAY)

    total_workable_days = total_days - holidays - weekends
    total_hours_decimal = sum(r.work_hours_decimal for r in records)

    return [
        Stat(label="Total Workable Days", value=total_workable_days, color="bg-blue-500"),
        Stat(label="Present Days", value=present, color="bg-green-500"),
        Stat(label="Absent Days", value=absent, color="bg-red-500"),
        Stat(label="Short/Half Days", value=f"{short_hours}/{half_days}", color="bg-yellow-500"),
        Stat(label="Work on Holiday", value=work_on_holiday, color="bg-purple-500"),
        Stat(
            label="Total Hours Worked",
            value=format_clock(total_hours_decimal),
            color="bg-slate-700",
            total_hours_decimal=total_hours_decimal,
        ),
    ]


def has_missed_punch(record: AttendanceRecord) -> bool:
    """An in punch without an out punch, or an out punch alone on a day with hours."""
    if record.in_time and not record.out_time:
        return True
    return bool(not record.in_time and record.out_time and record.work_hours_decimal > 0)


def apply_record_update(
    employees: List[EmployeeData],
    update: AttendanceUpdate,
    holidays: Iterable[Holiday],
    weekend_days=WEEKEND_DAYS,
    full_day_hours: float = FULL_DAY_HOURS,
    half_day_hours: float = HALF_DAY_HOURS,
) -> List[EmployeeData]:
    """
    Supersede one record with an edited copy carrying the same id.

    Hours come from the payload, or from the in/out punches when only those
    changed. total_hours is re-derived from the hours and the status is
    reclassified before the record is merged back.
    """
    changes = update.model_dump(exclude_unset=True, exclude={"record_id"})
    # punches and reason may be cleared with null; hours and the flag may not
    for key in ("work_hours_decimal", "is_ai_enhanced"):
        if changes.get(key, 0) is None:
            del changes[key]
    holiday_dates = get_holiday_dates(holidays)

    updated_employees = []
    found = False
    for employee in employees:
        new_records = []
        for record in employee.records:
            if record.id != update.record_id:
                new_records.append(record)
                continue

            found = True
            edited = record.model_copy(update=changes)
            if "work_hours_decimal" not in changes and ("in_time" in changes or "out_time" in changes):
                if edited.in_time and edited.out_time:
                    edited = edited.model_copy(
                        update={"work_hours_decimal": hours_between(edited.in_time, edited.out_time)}
                    )
            # model_copy skips validation, so run the edit back through the model
            edited = AttendanceRecord.model_validate(edited.model_dump())
            edited = edited.model_copy(update={"total_hours": format_clock(edited.work_hours_decimal)})
            status = classify_status(edited, holiday_dates, weekend_days, full_day_hours, half_day_hours)
            new_records.append(edited.model_copy(update={"status": status}))

        updated_employees.append(EmployeeData(employee_name=employee.employee_name, records=new_records))

    if not found:
        raise KeyError(f"Attendance record {update.record_id} not found")

    logger.info(f"Updated attendance record {update.record_id}")
    return updated_employees
