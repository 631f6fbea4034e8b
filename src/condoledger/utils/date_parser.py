"""Date parsing and calendar-month utilities."""

import calendar
import re
from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024", ...) and the
    relative words "today", "yesterday" and "tomorrow".

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def normalize_time(time_str: str) -> str:
    """Normalize "HH:MM" or "HH:MM:SS" into "HH:MM:SS".

    Raises:
        ValueError: If the string is not a valid 24-hour time
    """
    match = TIME_PATTERN.match(time_str.strip())
    if match is None:
        raise ValueError(f"Could not parse time '{time_str}'")
    hours, minutes, seconds = match.groups()
    return f"{hours}:{minutes}:{seconds or '00'}"


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return the first and last day of a calendar month."""
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def months_ago(months: int, today: date | None = None) -> date:
    """Return the date that lies the given number of months before today."""
    today = today or date.today()
    return today - relativedelta(months=months)


def period_display_name(year: int, month: int) -> str:
    """Human readable name of a period, e.g. "March 2024"."""
    return f"{MONTH_NAMES[month - 1]} {year}"
