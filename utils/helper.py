from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from itertools import count
from typing import List, Optional, Tuple

from utils.errors import ParseError, ValidationError

TIME_FORMATS = ("%H:%M:%S", "%H:%M")


def parse_time_of_day(value) -> time:
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        text = value.strip()
        for fmt in TIME_FORMATS:
            try:
                return datetime.strptime(text, fmt).time()
            except ValueError:
                continue
    raise ParseError(f"Invalid time of day: {value!r}")


def parse_date(value) -> date:
    """Accepts dates, ISO strings and epoch-millisecond timestamps (as numbers or digit strings)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).date()
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return parse_date(int(text))
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            pass
    raise ParseError(f"Invalid date: {value!r}")


def parse_timestamp(value) -> datetime:
    """Accepts datetimes, ISO strings (a trailing Z is UTC) and epoch-millisecond timestamps."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return parse_timestamp(int(text))
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            pass
    raise ParseError(f"Invalid timestamp: {value!r}")


def to_local_naive(value: datetime) -> datetime:
    """Aware datetimes are converted to local wall-clock time, naive ones are kept."""
    if value.utcoffset() is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def parse_period(period: str) -> Tuple[int, int]:
    """'2024-05' -> (2024, 5)"""
    try:
        year, month = (int(part) for part in period.split("-"))
    except (AttributeError, ValueError):
        raise ParseError(f"Invalid period, expected YYYY-MM: {period!r}")
    if not 1 <= month <= 12:
        raise ParseError(f"Invalid month in period: {period!r}")
    return year, month


# In-memory time entry and session stores used by the HTTP adapter
time_entries = []
sessions = {}
_entry_ids = count(1)


def next_entry_id() -> int:
    return next(_entry_ids)


def get_active_entry(employee_id) -> Optional[object]:
    for entry in time_entries:
        if entry.employee_id == str(employee_id) and entry.status == "active":
            return entry
    return None


def insert_entry(entry) -> None:
    time_entries.append(entry)


def replace_entry(entry) -> None:
    for i, existing in enumerate(time_entries):
        if existing.id == entry.id:
            time_entries[i] = entry
            return
    time_entries.append(entry)


def get_entries_for_employee(employee_id) -> List[object]:
    return sorted(
        [e for e in time_entries if e.employee_id == str(employee_id)],
        key=lambda e: e.clock_in,
    )


def save_session(session) -> None:
    sessions[session.token] = session


def get_session(token: str) -> Optional[object]:
    return sessions.get(token)


def as_counter(value, name: str = "value") -> int:
    """Missing counts as 0 and negatives are clamped; non-numeric or fractional values are rejected."""
    if value is None or value == "":
        return 0
    if isinstance(value, (str, float)):
        value = str(value).strip()
    try:
        number = Decimal(value)
    except (TypeError, ValueError, InvalidOperation):
        raise ValidationError(f"{name} must be a whole number, got {value!r}")
    if not number.is_finite() or number != number.to_integral_value():
        raise ValidationError(f"{name} must be a whole number, got {value!r}")
    return max(int(number), 0)


def as_money(value, name: str = "amount") -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value)
    except (TypeError, ValueError, InvalidOperation):
        raise ValidationError(f"{name} must be a number, got {value!r}")
