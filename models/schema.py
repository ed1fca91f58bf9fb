from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Annotated, Iterable, List, Optional, Type, TypeVar

import pydantic
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from utils.errors import ValidationError
from utils.helper import parse_date, parse_time_of_day, parse_timestamp


def _zero_if_missing(value):
    if value is None or value == "":
        return 0
    return value


def _as_id(value):
    return value if value is None else str(value)


RecordId = Annotated[str, BeforeValidator(_as_id)]
Money = Annotated[Decimal, BeforeValidator(_zero_if_missing), Field(ge=0)]
Counter = Annotated[int, BeforeValidator(_zero_if_missing), Field(ge=0)]


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class EntryStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class ContractStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    TERMINATED = "terminated"


class ContractPhase(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    EXPIRED = "expired"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Rating(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    NEEDS_IMPROVEMENT = "NeedsImprovement"


class PunchState(str, Enum):
    OFF_DUTY = "OffDuty"
    ON_DUTY = "OnDuty"


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class Record(BaseModel):
    """Read-only input record; French column names are accepted as aliases."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Employee(Record):
    id: Optional[RecordId] = None
    first_name: str = Field(default="", alias="prenom")
    last_name: str = Field(default="", alias="nom")
    email: str = ""
    phone: str = Field(default="", alias="telephone")
    job_title: str = ""
    location_id: Optional[RecordId] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE

    base_salary: Money = Field(default=Decimal("0"), alias="salaire")
    premium: Money = Field(default=Decimal("0"), alias="prime")
    bonus: Money = Decimal("0")
    advance: Money = Field(default=Decimal("0"), alias="avance")
    hourly_rate: Money = Field(default=Decimal("0"), alias="price_h")

    infractions: Counter = 0
    absences: Counter = Field(default=0, alias="absence")
    delays: Counter = Field(default=0, alias="retard")
    uniform_count: Counter = Field(default=0, alias="tenu_de_travail")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class WorkSchedule(Record):
    id: Optional[RecordId] = None
    employee_id: Optional[RecordId] = None
    day: date = Field(alias="date")
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_working: bool = True
    shift_type: str = ""
    job_position: str = ""

    @field_validator("day", mode="before")
    @classmethod
    def _parse_day(cls, value):
        return parse_date(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_time(cls, value):
        if value is None or value == "":
            return None
        return parse_time_of_day(value)

    @property
    def in_progress(self) -> bool:
        return self.is_working and self.start_time is not None and self.end_time is None


class TimeEntry(Record):
    id: Optional[RecordId] = None
    employee_id: RecordId
    location_id: Optional[RecordId] = None
    clock_in: datetime
    clock_out: Optional[datetime] = None
    status: EntryStatus = EntryStatus.ACTIVE
    total_hours: Optional[float] = None

    @field_validator("clock_in", "clock_out", mode="before")
    @classmethod
    def _parse_timestamp(cls, value):
        if value is None or value == "":
            return None
        return parse_timestamp(value)

    @property
    def day(self) -> date:
        return self.clock_in.date()


class Contract(Record):
    id: Optional[RecordId] = None
    employee_id: Optional[RecordId] = None
    contract_type: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    salary: Money = Decimal("0")
    tenu_count: Counter = 0
    status: ContractStatus = ContractStatus.ACTIVE
    documents: Optional[str] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_dates(cls, value):
        if value is None or value == "":
            return None
        return parse_date(value)


class LeaveRequest(Record):
    id: Optional[RecordId] = None
    employee_id: Optional[RecordId] = None
    type: str = ""
    start_date: date
    end_date: date
    days_count: Optional[Counter] = None
    reason: str = ""
    status: LeaveStatus = LeaveStatus.PENDING
    manager_comment: Optional[str] = None
    admin_comment: Optional[str] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_dates(cls, value):
        return parse_date(value)

    @field_validator("status", mode="before")
    @classmethod
    def _two_step_approval(cls, value):
        # manager approval still waits on the admin
        if value == "manager_approved":
            return LeaveStatus.PENDING
        if value == "admin_approved":
            return LeaveStatus.APPROVED
        return value


class PayrollTotals(BaseModel):
    total_net: Decimal = Decimal("0")
    total_bonuses: Decimal = Decimal("0")
    total_penalties: Decimal = Decimal("0")
    total_advances: Decimal = Decimal("0")
    headcount: int = 0


class ScheduleSummary(BaseModel):
    working_days: int = 0
    total_hours: float = 0.0
    sessions: int = 0


class Session(BaseModel):
    """Identity of a logged-in user, created at login and closed at logout."""

    token: str
    user_id: RecordId
    role: Role = Role.EMPLOYEE
    employee_id: Optional[RecordId] = None
    created_at: datetime
    closed_at: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_open(self) -> bool:
        return self.closed_at is None


M = TypeVar("M", bound=BaseModel)


def load_record(model: Type[M], data) -> M:
    """Validate external data into a typed record.

    Field errors become ``ValidationError``; malformed dates and times
    surface as ``ParseError``.
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid {model.__name__}: {e}") from e


def load_records(model: Type[M], rows: Iterable) -> List[M]:
    return [load_record(model, row) for row in rows]
