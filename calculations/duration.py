"""
Elapsed-time helpers for shifts and the punch clock.

Times of day are interpreted on a common reference day. Datetime pairs
(time entries) are measured directly.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Mapping

from models.policy import DEFAULT_POLICY, OvernightPolicy, PayrollPolicy
from utils.errors import ValidationError
from utils.helper import parse_time_of_day

REFERENCE_DAY = date(2024, 1, 1)


def _check_same_clock(start: datetime, end: datetime) -> None:
    if (start.utcoffset() is None) != (end.utcoffset() is None):
        raise ValidationError(f"Cannot compare naive and timezone-aware times: {start} and {end}")


def duration_hours(start, end, policy: PayrollPolicy = DEFAULT_POLICY) -> float:
    """
    Hours between two times of day ("09:00", time objects) or two datetimes.

    A time-of-day end earlier than the start is an overnight shift: it is
    wrapped to the next day, or rejected, depending on ``policy.overnight``.
    """
    if isinstance(start, datetime) and isinstance(end, datetime):
        _check_same_clock(start, end)
        delta = end - start
        if delta < timedelta(0):
            raise ValidationError(f"Clock-out {end} is before clock-in {start}")
        return delta.total_seconds() / 3600.0

    start_t = parse_time_of_day(start)
    end_t = parse_time_of_day(end)
    delta = datetime.combine(REFERENCE_DAY, end_t) - datetime.combine(REFERENCE_DAY, start_t)
    if delta < timedelta(0):
        if policy.overnight == OvernightPolicy.REJECT:
            raise ValidationError(f"Shift ends before it starts: {start_t} -> {end_t}")
        delta += timedelta(days=1)
    return delta.total_seconds() / 3600.0


def elapsed_since(start: datetime, now: datetime) -> timedelta:
    """Running time of an open session; a ``now`` behind ``start`` reads as zero."""
    _check_same_clock(start, now)
    return max(now - start, timedelta(0))


def format_elapsed(delta: timedelta) -> str:
    total = max(int(delta.total_seconds()), 0)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def _bounds(entry):
    if isinstance(entry, tuple):
        return entry
    if isinstance(entry, Mapping):
        start = entry.get("start", entry.get("start_time"))
        end = entry.get("end", entry.get("end_time"))
        return (start or None), (end or None)
    return entry.start_time, entry.end_time


def total_hours_for_period(entries: Iterable, policy: PayrollPolicy = DEFAULT_POLICY) -> float:
    """Sum of shift durations; entries missing a start or an end count for 0."""
    total = 0.0
    for entry in entries:
        start, end = _bounds(entry)
        if start is None or end is None:
            continue
        total += duration_hours(start, end, policy)
    return total
