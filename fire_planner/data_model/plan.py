# data_model/plan.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

DEFAULT_CURRENCY = "INR"


@dataclass(frozen=True)
class PlanParameters:
    """Inputs to the projection. Rates are annual percentages (12.0 == 12%)."""

    start_date: dt.date
    starting_contribution: float = 0.0
    target_income: float = 0.0
    currency: str = DEFAULT_CURRENCY
    expected_inflation: float = 0.0
    expected_growth_rate: float = 0.0
    step_up_rate: float = 0.0
