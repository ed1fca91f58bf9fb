from datetime import date, timedelta
from typing import Callable, Iterable, List, Optional, Tuple

from calculations.duration import total_hours_for_period
from models.policy import DEFAULT_POLICY, PayrollPolicy
from models.schema import ScheduleSummary, WorkSchedule, load_records
from utils.helper import parse_date, parse_period

PeriodFilter = Callable[[date], bool]


def summarize(
    schedules: Iterable,
    period_filter: Optional[PeriodFilter] = None,
    policy: PayrollPolicy = DEFAULT_POLICY,
) -> ScheduleSummary:
    records = load_records(WorkSchedule, schedules)
    if period_filter is not None:
        records = [s for s in records if period_filter(s.day)]

    return ScheduleSummary(
        working_days=sum(1 for s in records if s.is_working),
        total_hours=total_hours_for_period(records, policy),
        sessions=sum(1 for s in records if s.start_time is not None and s.end_time is not None),
    )


def display_key(schedule: WorkSchedule) -> Tuple[int, date]:
    # isoweekday: Monday=1 .. Sunday=7
    return schedule.day.isoweekday(), schedule.day


def sort_for_display(schedules: Iterable) -> List[WorkSchedule]:
    """Week order starting on Monday, Sunday last, same weekday by date."""
    return sorted(load_records(WorkSchedule, schedules), key=display_key)


def week_bounds(day) -> Tuple[date, date]:
    day = parse_date(day)
    monday = day - timedelta(days=day.isoweekday() - 1)
    return monday, monday + timedelta(days=6)


def in_week(day) -> PeriodFilter:
    monday, sunday = week_bounds(day)
    return lambda d: monday <= d <= sunday


def in_month(period: str) -> PeriodFilter:
    year, month = parse_period(period)
    return lambda d: d.year == year and d.month == month
