# config.py
from dotenv import load_dotenv
import math
import os
load_dotenv()


def _parse_weekend_days(raw: str):
    days = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        day = int(part)
        if day < 0 or day > 6:
            raise ValueError(f"WEEKEND_DAYS entries must be weekday indices 0-6, got {day}")
        days.add(day)
    return frozenset(days)


def validate_thresholds(full_day_hours: float, half_day_hours: float):
    # NaN compares False against everything
    if not (math.isfinite(full_day_hours) and math.isfinite(half_day_hours)):
        raise ValueError("FULL_DAY_HOURS and HALF_DAY_HOURS must be finite numbers")
    if half_day_hours < 0:
        raise ValueError("HALF_DAY_HOURS must not be negative")
    if full_day_hours <= half_day_hours:
        raise ValueError("FULL_DAY_HOURS must be greater than HALF_DAY_HOURS")


# Python date.weekday() indices: Monday=0 ... Sunday=6
WEEKEND_DAYS = _parse_weekend_days(os.getenv("WEEKEND_DAYS", "5,6"))
FULL_DAY_HOURS = float(os.getenv("FULL_DAY_HOURS", "8.0"))
HALF_DAY_HOURS = float(os.getenv("HALF_DAY_HOURS", "4.0"))

REPORT_OUTPUT_DIR = os.getenv("REPORT_OUTPUT_DIR", "reports")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

validate_thresholds(FULL_DAY_HOURS, HALF_DAY_HOURS)
