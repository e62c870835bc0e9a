from datetime import date

import pytest

from models.attendance_model import AttendanceRecord, EmployeeData, Holiday

# 2025-03-03 is a Monday; 2025-03-08/09 are the weekend.
MONDAY = date(2025, 3, 3)
FRIDAY = date(2025, 3, 7)
SATURDAY = date(2025, 3, 8)
SUNDAY = date(2025, 3, 9)


def make_record(employee_name, day, hours=0.0, **fields):
    return AttendanceRecord(
        id=fields.pop("id", f"{employee_name}-{day.isoformat()}"),
        date=day,
        employee_name=employee_name,
        work_hours_decimal=hours,
        **fields,
    )


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def two_employees():
    """Alice worked a full Monday, Bob has a zero-hour Friday; nothing in between."""
    return [
        EmployeeData(employee_name="Alice", records=[
            make_record("Alice", MONDAY, 8.0, in_time="09:00", out_time="17:00", total_hours="08:00"),
        ]),
        EmployeeData(employee_name="Bob", records=[
            make_record("Bob", FRIDAY, 0.0),
        ]),
    ]


@pytest.fixture
def holidays():
    return [Holiday(date="2025-03-05", name="Founders Day")]
