import json

import pytest

from calculations.performance import classify, employee_performance, performance_score
from models.policy import DEFAULT_POLICY, PayrollPolicy, PerformanceWeights, RatingThresholds, load_policy
from models.schema import Employee, Rating
from utils.errors import ValidationError


def test_score_formula():
    assert performance_score(0, 0, 0) == 100
    assert performance_score(1, 1, 1) == 90
    assert performance_score(2, 3, 4) == 100 - (10 + 9 + 8)


def test_score_floor_at_zero():
    assert performance_score(20, 0, 0) == 0
    assert performance_score(10, 10, 10) == 0


@pytest.mark.parametrize("i,a,d", [(0, 0, 0), (1, 2, 3), (4, 0, 7), (12, 5, 1)])
def test_score_non_increasing(i, a, d):
    base = performance_score(i, a, d)
    assert performance_score(i + 1, a, d) <= base
    assert performance_score(i, a + 1, d) <= base
    assert performance_score(i, a, d + 1) <= base
    assert base == max(0, 100 - (5 * i + 3 * a + 2 * d))


def test_missing_and_negative_counters():
    assert performance_score(None, None, None) == 100
    assert performance_score(-3, 1, None) == 97
    assert performance_score("2", "0", "1") == 88


def test_non_numeric_counter():
    with pytest.raises(ValidationError):
        performance_score("many", 0, 0)


def test_fractional_counter_rejected():
    with pytest.raises(ValidationError):
        performance_score(2.7, 0, 0)
    with pytest.raises(ValidationError):
        performance_score(0, "1.5", 0)
    assert performance_score("2.0", 0, 0) == 90
    assert performance_score(2.0, 0, 0) == 90


def test_classify_thresholds():
    assert classify(100) == Rating.EXCELLENT
    assert classify(80) == Rating.EXCELLENT
    assert classify(79) == Rating.GOOD
    assert classify(60) == Rating.GOOD
    assert classify(59) == Rating.NEEDS_IMPROVEMENT
    assert classify(0) == Rating.NEEDS_IMPROVEMENT


def test_custom_policy():
    policy = PayrollPolicy(
        performance_weights=PerformanceWeights(infraction=10, absence=0, delay=1),
        rating_thresholds=RatingThresholds(excellent=95, good=50),
    )
    assert performance_score(1, 5, 2, policy) == 88
    assert classify(88, policy) == Rating.GOOD
    assert classify(95, policy) == Rating.EXCELLENT


def test_employee_performance():
    employee = Employee(infractions=2, absence=1, retard=3)
    assert employee_performance(employee) == (81, Rating.EXCELLENT)


def test_load_policy(tmp_path):
    path = tmp_path / "policy.json"
    path.write_text(json.dumps({"performance_weights": {"infraction": 7}, "overnight": "reject"}))
    policy = load_policy(path)
    assert policy.performance_weights.infraction == 7
    assert policy.performance_weights.absence == 3
    assert policy.overnight.value == "reject"
    assert policy.penalty_rates == DEFAULT_POLICY.penalty_rates


def test_load_policy_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_policy(tmp_path / "missing.json")


def test_load_policy_invalid(tmp_path):
    path = tmp_path / "policy.json"
    path.write_text(json.dumps({"annual_leave_days": -1}))
    with pytest.raises(ValidationError):
        load_policy(path)
