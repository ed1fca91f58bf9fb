from datetime import date
from typing import Iterable, Optional

from models.policy import DEFAULT_POLICY, PayrollPolicy
from models.schema import Contract, ContractPhase, LeaveRequest, LeaveStatus, load_record
from utils.helper import parse_date


def leave_days(start, end) -> int:
    """Calendar days covered by a leave, both ends included."""
    start, end = parse_date(start), parse_date(end)
    return abs((end - start).days) + 1


def remaining_leave(
    requests: Iterable,
    policy: PayrollPolicy = DEFAULT_POLICY,
    allowance: Optional[int] = None,
) -> int:
    """
    Allowance left after pending and approved requests. Rejected requests
    are ignored; the result goes negative when the allowance is overdrawn.
    """
    if allowance is None:
        allowance = policy.annual_leave_days
    taken = 0
    for row in requests:
        request = load_record(LeaveRequest, row)
        if request.status == LeaveStatus.REJECTED:
            continue
        if request.days_count is not None:
            taken += request.days_count
        else:
            taken += leave_days(request.start_date, request.end_date)
    return allowance - taken


def contract_phase(contract, today: date) -> ContractPhase:
    contract = load_record(Contract, contract)
    if contract.start_date is not None and today < contract.start_date:
        return ContractPhase.UPCOMING
    if contract.end_date is not None and today > contract.end_date:
        return ContractPhase.EXPIRED
    return ContractPhase.ACTIVE
