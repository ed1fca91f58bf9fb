import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from calculations.duration import duration_hours, elapsed_since, format_elapsed
from models.schema import EntryStatus, PunchState, Role, Session, TimeEntry
from utils.errors import InvalidStateTransition
from utils.helper import get_active_entry, get_session, insert_entry, next_entry_id, replace_entry, save_session


def punch_state(active_entry: Optional[TimeEntry]) -> PunchState:
    if active_entry is not None and active_entry.status == EntryStatus.ACTIVE:
        return PunchState.ON_DUTY
    return PunchState.OFF_DUTY


def clock_in(employee_id, now: datetime, active_entry: Optional[TimeEntry] = None, location_id=None) -> TimeEntry:
    """OffDuty -> OnDuty. ``active_entry`` is the caller's view of the employee's open entry."""
    if punch_state(active_entry) == PunchState.ON_DUTY:
        raise InvalidStateTransition(
            f"Employee {employee_id} already clocked in at {active_entry.clock_in:%Y-%m-%d %H:%M}"
        )
    return TimeEntry(employee_id=employee_id, location_id=location_id, clock_in=now)


def clock_out(entry: Optional[TimeEntry], now: datetime) -> TimeEntry:
    """OnDuty -> OffDuty, closing the entry and recording its hours."""
    if punch_state(entry) == PunchState.OFF_DUTY:
        raise InvalidStateTransition("No open time entry to clock out of")
    return entry.model_copy(
        update={
            "clock_out": now,
            "status": EntryStatus.COMPLETED,
            "total_hours": duration_hours(entry.clock_in, now),
        }
    )


def live_elapsed(entry: Optional[TimeEntry], now: datetime) -> str:
    if punch_state(entry) == PunchState.OFF_DUTY:
        return format_elapsed(timedelta(0))
    return format_elapsed(elapsed_since(entry.clock_in, now))


def process_clock_in(employee_id, timestamp: datetime, location_id=None) -> TimeEntry:
    active = get_active_entry(employee_id)
    try:
        entry = clock_in(employee_id, timestamp, active, location_id)
    except InvalidStateTransition:
        logging.warning(f"Duplicate clock-in for employee_id: {employee_id}")
        raise

    entry = entry.model_copy(update={"id": str(next_entry_id())})
    insert_entry(entry)
    logging.info(f"Clock-in recorded for employee_id: {employee_id} at {timestamp}")
    return entry


def process_clock_out(employee_id, timestamp: datetime) -> TimeEntry:
    active = get_active_entry(employee_id)
    try:
        entry = clock_out(active, timestamp)
    except InvalidStateTransition:
        logging.warning(f"Clock-out without clock-in for employee_id: {employee_id}")
        raise

    replace_entry(entry)
    logging.info(f"Clock-out recorded for employee_id: {employee_id}, {entry.total_hours:.2f}h")
    return entry


def open_session(user_id, role: Role = Role.EMPLOYEE, employee_id=None, now: Optional[datetime] = None) -> Session:
    session = Session(
        token=secrets.token_urlsafe(24),
        user_id=user_id,
        role=role,
        employee_id=employee_id,
        created_at=now or datetime.now(),
    )
    save_session(session)
    logging.info(f"Session opened for user_id: {user_id} ({session.role.value})")
    return session


def require_session(token: str) -> Session:
    session = get_session(token)
    if session is None:
        raise InvalidStateTransition("Unknown session")
    if not session.is_open:
        raise InvalidStateTransition("Session is closed")
    return session


def close_session(token: str, now: Optional[datetime] = None) -> Session:
    session = require_session(token)
    closed = session.model_copy(update={"closed_at": now or datetime.now()})
    save_session(closed)
    logging.info(f"Session closed for user_id: {session.user_id}")
    return closed
