from datetime import datetime
from decimal import Decimal

import pytest

from calculations.payroll import (
    active_only,
    employee_hourly_pay,
    aggregate_totals,
    format_amount,
    hourly_pay,
    hours_worked,
    net_salary,
    penalties,
)
from models.policy import PayrollPolicy, PenaltyRates
from models.schema import Employee
from utils.errors import ParseError, ValidationError

EMPLOYEES = [
    {"id": 1, "salaire": 2000, "prime": 100, "bonus": 50, "avance": 80, "infractions": 1, "retard": 1, "absence": 1,
     "status": "active", "location_id": 1},
    {"id": 2, "salaire": "1500.10", "prime": None, "avance": 0, "retard": 2, "status": "active", "location_id": 2},
    {"id": 3, "salaire": 900, "status": "inactive", "location_id": 1},
]


def test_penalties():
    assert penalties(1, 1, 1) == Decimal("40")
    assert penalties(0, 2, 0) == Decimal("30")
    assert penalties(None, None, 3) == Decimal("30")


def test_penalty_rates_configurable():
    policy = PayrollPolicy(penalty_rates=PenaltyRates(infraction=Decimal("20"), delay=Decimal("5"), absence=Decimal("12.5")))
    assert penalties(1, 1, 2, policy) == Decimal("50.00")


def test_net_salary():
    assert net_salary(EMPLOYEES[0]) == Decimal("2030")
    assert net_salary(Employee(salaire=1000)) == Decimal("1000.00")


def test_net_salary_can_be_negative():
    employee = Employee(salaire=100, avance=150, infractions=2)
    assert net_salary(employee) == Decimal("-80.00")


def test_net_salary_rejects_negative_fields():
    with pytest.raises(ValidationError):
        net_salary({"salaire": -10})
    with pytest.raises(ValidationError):
        net_salary({"salaire": "lots"})


def test_aggregate_totals():
    totals = aggregate_totals(EMPLOYEES[:2])
    assert totals.headcount == 2
    assert totals.total_net == Decimal("2030.00") + Decimal("1470.10")
    assert totals.total_bonuses == Decimal("150.00")
    assert totals.total_penalties == Decimal("70.00")
    assert totals.total_advances == Decimal("80.00")


def test_aggregate_totals_no_drift():
    rows = [{"salaire": "0.10"}] * 30
    assert aggregate_totals(rows).total_net == Decimal("3.00")


def test_aggregate_totals_is_repeatable():
    employees = tuple(active_only(EMPLOYEES))
    assert aggregate_totals(employees) == aggregate_totals(employees)


def test_aggregate_totals_empty():
    totals = aggregate_totals([])
    assert totals.headcount == 0
    assert totals.total_net == Decimal("0")


def test_active_only():
    assert [e.id for e in active_only(EMPLOYEES)] == ["1", "2"]
    assert [e.id for e in active_only(EMPLOYEES, location_id=1)] == ["1"]


def test_hours_worked():
    entries = [
        {"employee_id": 1, "clock_in": datetime(2024, 5, 2, 9), "status": "completed", "total_hours": 8},
        {"employee_id": 1, "clock_in": datetime(2024, 5, 3, 9), "status": "completed", "total_hours": 6.5},
        {"employee_id": 1, "clock_in": datetime(2024, 5, 4, 9), "status": "active"},
        {"employee_id": 1, "clock_in": datetime(2024, 4, 30, 9), "status": "completed", "total_hours": 5},
    ]
    assert hours_worked(entries, "2024-05") == 14.5
    assert hours_worked(entries, "2024-04") == 5.0


def test_hours_worked_bad_period():
    with pytest.raises(ParseError):
        hours_worked([], "May 2024")
    with pytest.raises(ParseError):
        hours_worked([], "2024-13")


def test_hourly_pay():
    assert hourly_pay(14.5, 12) == Decimal("174.00")
    assert hourly_pay(7.333333, "10.5") == Decimal("77.00")
    assert hourly_pay(0, 12) == Decimal("0.00")


def test_format_amount():
    assert format_amount(Decimal("2030")) == "2,030.00 DT"
    assert format_amount(-40) == "-40.00 DT"
    assert format_amount(1234.5, PayrollPolicy(currency="EUR")) == "1,234.50 EUR"


def test_penalties_reject_fractional_counts():
    with pytest.raises(ValidationError):
        penalties(1.5, 0, 0)
    assert penalties("1.0", 0, 0) == Decimal("15.00")


def test_employee_hourly_pay():
    employee = {"id": 7, "price_h": "9.5"}
    entries = [
        {"employee_id": 7, "clock_in": datetime(2024, 5, 2, 9), "status": "completed", "total_hours": 8},
        {"employee_id": 7, "clock_in": datetime(2024, 5, 3, 9), "status": "completed", "total_hours": 4.25},
        {"employee_id": 8, "clock_in": datetime(2024, 5, 3, 9), "status": "completed", "total_hours": 10},
        {"employee_id": 7, "clock_in": datetime(2024, 6, 1, 9), "status": "completed", "total_hours": 3},
    ]
    assert employee_hourly_pay(employee, entries, "2024-05") == Decimal("116.38")
    assert employee_hourly_pay(Employee(id=7), entries, "2024-05") == Decimal("0.00")
