# models/attendance_model.py
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Union
from datetime import date
from enum import Enum

from utils.time_utils import parse_hhmm, to_calendar_day, to_date_string


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    HALF_DAY = "Half Day"
    SHORT_HOURS = "Short Hours"
    WEEKEND = "Weekend"
    HOLIDAY = "Holiday"
    WORK_ON_WEEKEND = "Work on Weekend"
    WORK_ON_HOLIDAY = "Work on Holiday"
    UNKNOWN = "Unknown"


class AttendanceRecord(BaseModel):
    id: str
    date: date
    employee_name: str
    in_time: Optional[str] = None
    out_time: Optional[str] = None
    total_hours: Optional[str] = None
    work_hours_decimal: float = Field(default=0.0, ge=0)
    status: AttendanceStatus = AttendanceStatus.UNKNOWN
    reason: str = ""
    is_ai_enhanced: bool = False

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, value):
        # time-of-day is irrelevant, records are keyed by calendar day
        return to_calendar_day(value)

    @field_validator("reason", mode="before")
    @classmethod
    def empty_reason(cls, value):
        return value or ""


class EmployeeData(BaseModel):
    employee_name: str
    records: List[AttendanceRecord] = []


class Holiday(BaseModel):
    date: str  # YYYY-MM-DD
    name: str = ""

    @field_validator("date", mode="before")
    @classmethod
    def canonical_date(cls, value):
        return to_date_string(value)


class Stat(BaseModel):
    label: str
    value: Union[int, str]
    color: str
    total_hours_decimal: Optional[float] = None


class DateRange(BaseModel):
    start: date
    end: date


class AttendanceUpdate(BaseModel):
    """Edit payload for one record; unset fields keep the record's current value."""
    record_id: str
    in_time: Optional[str] = None
    out_time: Optional[str] = None
    work_hours_decimal: Optional[float] = Field(default=None, ge=0)
    reason: Optional[str] = None
    is_ai_enhanced: Optional[bool] = None

    @field_validator("in_time", "out_time")
    @classmethod
    def punch_is_hhmm(cls, value):
        if value is None or not value.strip():
            return None
        try:
            parse_hhmm(value)
        except ValueError:
            raise ValueError(f"expected an HH:MM clock time, got {value!r}")
        return value.strip()


class AnalyzeRequest(BaseModel):
    employees: List[EmployeeData]
    holidays: List[Holiday] = []


class RecordUpdateRequest(BaseModel):
    employees: List[EmployeeData]
    holidays: List[Holiday] = []
    update: AttendanceUpdate


class DateRangeRequest(BaseModel):
    employees: List[EmployeeData]


class ReportSelection(BaseModel):
    employees: List[EmployeeData]
    employee_name: str = "All"
    start_date: Optional[date] = None
    end_date: Optional[date] = None
