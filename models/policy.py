import json
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Union

import pydantic
from pydantic import BaseModel, Field

from utils.errors import ValidationError


class OvernightPolicy(str, Enum):
    WRAP = "wrap"
    REJECT = "reject"


class PerformanceWeights(BaseModel):
    infraction: int = Field(default=5, ge=0)
    absence: int = Field(default=3, ge=0)
    delay: int = Field(default=2, ge=0)


class RatingThresholds(BaseModel):
    excellent: int = Field(default=80, ge=0, le=100)
    good: int = Field(default=60, ge=0, le=100)


class PenaltyRates(BaseModel):
    infraction: Decimal = Field(default=Decimal("15"), ge=0)
    delay: Decimal = Field(default=Decimal("15"), ge=0)
    absence: Decimal = Field(default=Decimal("10"), ge=0)


class PayrollPolicy(BaseModel):
    """Business rules the dashboard treats as tunable."""

    performance_weights: PerformanceWeights = PerformanceWeights()
    rating_thresholds: RatingThresholds = RatingThresholds()
    penalty_rates: PenaltyRates = PenaltyRates()
    overnight: OvernightPolicy = OvernightPolicy.WRAP
    money_quantum: Decimal = Decimal("0.01")
    currency: str = "DT"
    annual_leave_days: int = Field(default=15, ge=0)

    model_config = {"frozen": True}


DEFAULT_POLICY = PayrollPolicy()


def load_policy(path: Union[str, Path]) -> PayrollPolicy:
    """
    Load a policy from a JSON file. Keys left out keep their defaults.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Policy file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        raw_data = json.load(f)
    try:
        return PayrollPolicy.model_validate(raw_data)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid policy in {path}: {e}") from e
