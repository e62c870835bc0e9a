# utils/query_utils.py

from datetime import date
from typing import List, Optional

from models.attendance_model import AttendanceRecord, EmployeeData
from utils.time_utils import to_calendar_day

ALL_EMPLOYEES = "All"


def filter_employee_records(
    employees: List[EmployeeData],
    employee_name: str = ALL_EMPLOYEES,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[EmployeeData]:
    """
    Narrow employees to a calendar-day window, inclusive on both ends.
    Handles the "All" selection and open-ended ranges.
    """
    start = to_calendar_day(start_date) if start_date else None
    end = to_calendar_day(end_date) if end_date else None

    filtered = []
    for employee in employees:
        if employee_name != ALL_EMPLOYEES and employee.employee_name != employee_name:
            continue

        records = [
            r for r in employee.records
            if (start is None or r.date >= start) and (end is None or r.date <= end)
        ]
        filtered.append(EmployeeData(employee_name=employee.employee_name, records=records))

    return filtered


def records_to_show(employees: List[EmployeeData], employee_name: str = ALL_EMPLOYEES) -> List[AttendanceRecord]:
    """Newest first; the "All" view breaks date ties by employee name."""
    if employee_name == ALL_EMPLOYEES:
        records = [r for e in employees for r in e.records]
        records.sort(key=lambda r: r.employee_name)
        records.sort(key=lambda r: r.date, reverse=True)
        return records

    employee = next((e for e in employees if e.employee_name == employee_name), None)
    if employee is None:
        return []
    return sorted(employee.records, key=lambda r: r.date, reverse=True)
