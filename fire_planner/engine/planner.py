from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import List, Tuple

from ..dates import add_years, first_day_of_next_month
from ..data_model import Investment, PlanParameters, planned_record

logger = logging.getLogger(__name__)

# Annual percent -> simple daily rate on a 365-day year. Period lengths use
# real calendar days, so leap years lengthen periods but not the denominator.
DAYS_PER_YEAR_PCT = 36500.0
PLAN_LIMIT_YEARS = 50


@dataclass(frozen=True)
class GeneratedPlan:
    investment_plan: Tuple[Investment, ...]
    retire_date: dt.date


def daily_rate(annual_pct: float) -> float:
    return annual_pct / DAYS_PER_YEAR_PCT


def limit_date_for(start_date: dt.date) -> dt.date:
    return add_years(start_date, PLAN_LIMIT_YEARS)


def reached_limit(params: PlanParameters, retire_date: dt.date) -> bool:
    """True when the projection ran out of horizon instead of meeting the target."""
    return first_day_of_next_month(retire_date) >= limit_date_for(params.start_date)


def generate_plan(params: PlanParameters) -> GeneratedPlan:
    """Step a monthly contribution schedule forward until it can retire.

    Each month the portfolio grows by simple daily interest, receives the
    current contribution, and the contribution steps up in proportion to the
    days elapsed (always against the starting contribution). The sustainability
    target starts at ``target_income + starting_contribution`` and rises with
    inflation. The loop stops once a month's interest covers the target, or
    when the next step would pass ``start_date + 50 years``. A final record is
    always emitted at the stopping date, which becomes the retire date.
    """
    start_date = params.start_date
    limit_date = limit_date_for(start_date)
    daily_inflation = daily_rate(params.expected_inflation)
    daily_growth = daily_rate(params.expected_growth_rate)
    daily_step_up = daily_rate(params.step_up_rate)
    starting = params.starting_contribution
    income = params.target_income

    contribution = starting
    principal = contribution
    value = contribution
    target = income + starting
    current_date = start_date
    next_date = first_day_of_next_month(start_date)
    period_days = (next_date - current_date).days
    interest = value * period_days * daily_growth

    records: List[Investment] = []
    while interest < target and next_date < limit_date:
        records.append(planned_record(current_date, principal, value))

        value = round(value + interest + contribution, 2)
        principal = round(principal + contribution, 2)
        contribution = round(contribution + starting * period_days * daily_step_up, 2)
        target = round(target + (income + contribution) * period_days * daily_inflation, 2)

        current_date = next_date
        next_date = first_day_of_next_month(current_date)
        period_days = (next_date - current_date).days
        interest = value * period_days * daily_growth

    records.append(planned_record(current_date, principal, value))

    logger.debug(
        "Generated %d planned records from %s; retire date %s (limit %s)",
        len(records),
        start_date.isoformat(),
        current_date.isoformat(),
        limit_date.isoformat(),
    )
    return GeneratedPlan(investment_plan=tuple(records), retire_date=current_date)
