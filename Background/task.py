import logging
from datetime import datetime
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator

from calculations.payroll import active_only, aggregate_totals
from calculations.performance import classify, performance_score
from main import close_session, live_elapsed, open_session, process_clock_in, process_clock_out, punch_state, require_session
from models.schema import PayrollTotals, Rating, Role, Session, TimeEntry
from utils.errors import InvalidStateTransition, ParseError, ValidationError
from utils.helper import get_active_entry, parse_timestamp, to_local_naive

app = FastAPI(title="Staff Payroll API")


class SessionRequest(BaseModel):
    user_id: str
    role: Role = Role.EMPLOYEE
    employee_id: Optional[str] = None


class PunchRequest(BaseModel):
    location_id: Optional[str] = None
    timestamp: Optional[datetime] = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def _local_wall_clock(cls, value):
        # punches are compared with the server's naive datetime.now()
        if value is None or value == "":
            return None
        return to_local_naive(parse_timestamp(value))


class PunchStatus(BaseModel):
    state: str
    elapsed: str
    entry: Optional[TimeEntry] = None


class Counters(BaseModel):
    infractions: Optional[int] = None
    absences: Optional[int] = None
    delays: Optional[int] = None


class PerformanceResult(BaseModel):
    score: int
    rating: Rating


@app.exception_handler(InvalidStateTransition)
async def invalid_transition_handler(request: Request, exc: InvalidStateTransition):
    logging.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(ParseError)
@app.exception_handler(ValidationError)
async def invalid_input_handler(request: Request, exc: Exception):
    logging.warning(f"Invalid input on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def _session_or_401(token: str) -> Session:
    try:
        return require_session(token)
    except InvalidStateTransition as e:
        raise HTTPException(status_code=401, detail=str(e))


def current_session(x_session_token: str = Header(...)) -> Session:
    return _session_or_401(x_session_token)


def current_employee_id(session: Session = Depends(current_session)) -> str:
    if session.employee_id is None:
        raise HTTPException(status_code=400, detail="Session is not linked to an employee")
    return session.employee_id


@app.post("/sessions", response_model=Session)
def login(body: SessionRequest):
    return open_session(body.user_id, body.role, body.employee_id)


@app.delete("/sessions/{token}", response_model=Session)
def logout(token: str):
    _session_or_401(token)
    return close_session(token)


@app.post("/punch/clock-in", response_model=TimeEntry)
def receive_clock_in(body: PunchRequest, employee_id: str = Depends(current_employee_id)):
    return process_clock_in(employee_id, body.timestamp or datetime.now(), body.location_id)


@app.post("/punch/clock-out", response_model=TimeEntry)
def receive_clock_out(body: PunchRequest, employee_id: str = Depends(current_employee_id)):
    return process_clock_out(employee_id, body.timestamp or datetime.now())


@app.get("/punch/status", response_model=PunchStatus)
def punch_status(employee_id: str = Depends(current_employee_id)):
    entry = get_active_entry(employee_id)
    return PunchStatus(
        state=punch_state(entry).value,
        elapsed=live_elapsed(entry, datetime.now()),
        entry=entry,
    )


@app.post("/payroll/totals", response_model=PayrollTotals)
def payroll_totals(rows: List[dict], location_id: Optional[str] = None):
    return aggregate_totals(active_only(rows, location_id))


@app.post("/performance", response_model=PerformanceResult)
def performance(body: Counters):
    score = performance_score(body.infractions, body.absences, body.delays)
    return PerformanceResult(score=score, rating=classify(score))
