"""
Net pay, penalties and report totals.

Amounts are Decimals rounded half-up to ``policy.money_quantum`` so totals
over many employees do not drift.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional

from models.policy import DEFAULT_POLICY, PayrollPolicy
from models.schema import Employee, EmployeeStatus, EntryStatus, PayrollTotals, TimeEntry, load_record, load_records
from utils.helper import as_counter, as_money, parse_period


def _round(amount: Decimal, policy: PayrollPolicy) -> Decimal:
    return amount.quantize(policy.money_quantum, rounding=ROUND_HALF_UP)


def penalties(infractions, delays, absences, policy: PayrollPolicy = DEFAULT_POLICY) -> Decimal:
    rates = policy.penalty_rates
    amount = (
        as_counter(infractions, "infractions") * rates.infraction
        + as_counter(delays, "delays") * rates.delay
        + as_counter(absences, "absences") * rates.absence
    )
    return _round(amount, policy)


def employee_penalties(employee: Employee, policy: PayrollPolicy = DEFAULT_POLICY) -> Decimal:
    return penalties(employee.infractions, employee.delays, employee.absences, policy)


def net_salary(employee, policy: PayrollPolicy = DEFAULT_POLICY) -> Decimal:
    """base + premium + bonus - advance - penalties. Can be negative."""
    employee = load_record(Employee, employee)
    gross = employee.base_salary + employee.premium + employee.bonus
    return _round(gross - employee.advance - employee_penalties(employee, policy), policy)


def aggregate_totals(employees: Iterable, policy: PayrollPolicy = DEFAULT_POLICY) -> PayrollTotals:
    """
    Component-wise sums over an already filtered sequence of employees
    (see ``active_only``).
    """
    total_net = total_bonuses = total_penalties = total_advances = Decimal("0")
    headcount = 0
    for row in employees:
        employee = load_record(Employee, row)
        total_net += net_salary(employee, policy)
        total_bonuses += employee.premium + employee.bonus
        total_penalties += employee_penalties(employee, policy)
        total_advances += employee.advance
        headcount += 1

    return PayrollTotals(
        total_net=_round(total_net, policy),
        total_bonuses=_round(total_bonuses, policy),
        total_penalties=_round(total_penalties, policy),
        total_advances=_round(total_advances, policy),
        headcount=headcount,
    )


def active_only(employees: Iterable, location_id: Optional[str] = None) -> List[Employee]:
    """Active employees, optionally restricted to one location."""
    result = []
    for row in employees:
        employee = load_record(Employee, row)
        if employee.status != EmployeeStatus.ACTIVE:
            continue
        if location_id is not None and employee.location_id != str(location_id):
            continue
        result.append(employee)
    return result


def hours_worked(entries: Iterable, period: str) -> float:
    """Completed time-entry hours falling in a ``YYYY-MM`` period."""
    year, month = parse_period(period)
    total = 0.0
    for row in entries:
        entry = load_record(TimeEntry, row)
        if entry.status != EntryStatus.COMPLETED:
            continue
        if (entry.day.year, entry.day.month) != (year, month):
            continue
        total += entry.total_hours or 0.0
    return total


def hourly_pay(hours, rate, policy: PayrollPolicy = DEFAULT_POLICY) -> Decimal:
    """Amount paid for a period: hours worked times the hourly rate."""
    return _round(as_money(hours, "hours") * as_money(rate, "rate"), policy)


def format_amount(amount, policy: PayrollPolicy = DEFAULT_POLICY) -> str:
    places = -policy.money_quantum.as_tuple().exponent
    value = _round(as_money(amount), policy)
    return f"{value:,.{places}f} {policy.currency}"


def employee_hourly_pay(employee, entries: Iterable, period: str, policy: PayrollPolicy = DEFAULT_POLICY) -> Decimal:
    """Pay for the employee's completed hours in a ``YYYY-MM`` period at their hourly rate."""
    employee = load_record(Employee, employee)
    entries = load_records(TimeEntry, entries)
    if employee.id is not None:
        entries = [entry for entry in entries if entry.employee_id == employee.id]
    return hourly_pay(hours_worked(entries, period), employee.hourly_rate, policy)
