from typing import Tuple

from models.policy import DEFAULT_POLICY, PayrollPolicy
from models.schema import Employee, Rating
from utils.helper import as_counter


def performance_score(infractions, absences, delays, policy: PayrollPolicy = DEFAULT_POLICY) -> int:
    """
    100 minus the weighted disciplinary counters, floored at 0.

    Missing counters count as 0, negative ones are clamped to 0.
    """
    weights = policy.performance_weights
    penalty = (
        as_counter(infractions, "infractions") * weights.infraction
        + as_counter(absences, "absences") * weights.absence
        + as_counter(delays, "delays") * weights.delay
    )
    return max(0, 100 - penalty)


def classify(score: int, policy: PayrollPolicy = DEFAULT_POLICY) -> Rating:
    thresholds = policy.rating_thresholds
    if score >= thresholds.excellent:
        return Rating.EXCELLENT
    if score >= thresholds.good:
        return Rating.GOOD
    return Rating.NEEDS_IMPROVEMENT


def employee_performance(employee: Employee, policy: PayrollPolicy = DEFAULT_POLICY) -> Tuple[int, Rating]:
    score = performance_score(employee.infractions, employee.absences, employee.delays, policy)
    return score, classify(score, policy)
