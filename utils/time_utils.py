# utils/time_utils.py
from datetime import date, datetime, time, timedelta
import math

import pandas as pd

ZERO_CLOCK = "0:00"


def to_calendar_day(value) -> date:
    """Normalize a date, datetime, timestamp or parseable string to a calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    # pandas covers timestamps, numpy datetimes and looser string formats
    return pd.Timestamp(value).date()


def to_date_string(value) -> str:
    """Canonical YYYY-MM-DD key for per-day lookups."""
    return to_calendar_day(value).isoformat()


def format_clock(decimal_hours) -> str:
    """
    Render fractional hours as a clock string, e.g. 8.5 -> "08:30".

    Rounds once on total minutes (half up), not separately on hours and
    minutes, so 59.5 minutes never shows as ":60". Zero hours render as a
    single "0" ("0:30"), matching the canonical "0:00" used for invalid
    input. Values too large to count in seconds also give "0:00".
    """
    try:
        hours = float(decimal_hours)
    except (TypeError, ValueError, OverflowError):
        return ZERO_CLOCK
    if not math.isfinite(hours * 3600) or hours < 0:
        return ZERO_CLOCK

    # snap to whole seconds first: 8.0083333 is 08:00:30 less float noise
    total_seconds = round(hours * 3600)
    total_minutes = (total_seconds + 30) // 60
    whole_hours, minutes = divmod(total_minutes, 60)
    if whole_hours == 0:
        return f"0:{minutes:02d}"
    return f"{whole_hours:02d}:{minutes:02d}"


def parse_hhmm(s: str) -> time:
    hh, mm = s.strip().split(":")[:2]
    return time(int(hh), int(mm))


def hours_between(in_time: str, out_time: str) -> float:
    """Decimal hours from an in punch to an out punch; an earlier out time wraps past midnight."""
    start = datetime.combine(date.min, parse_hhmm(in_time))
    end = datetime.combine(date.min, parse_hhmm(out_time))
    if end < start:
        end += timedelta(days=1)
    return (end - start).total_seconds() / 3600
