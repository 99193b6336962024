from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, fields
from typing import Tuple

from ..dates import add_years
from .plan import PlanParameters
from .records import InflationObservation, Investment

DEFAULT_HORIZON_YEARS = 20


@dataclass(frozen=True)
class ApplicationState:
    plan_parameters: PlanParameters
    retire_date: dt.date
    investments: Tuple[Investment, ...] = ()
    inflation_observations: Tuple[InflationObservation, ...] = ()
    investment_plan: Tuple[Investment, ...] = ()


STATE_FIELDS = tuple(f.name for f in fields(ApplicationState))


def default_state(today: dt.date | None = None) -> ApplicationState:
    """Fresh session: nothing invested, retirement 20 years out, empty histories."""
    start = today or dt.date.today()
    return ApplicationState(
        plan_parameters=PlanParameters(start_date=start),
        retire_date=add_years(start, DEFAULT_HORIZON_YEARS),
    )


def state_as_mapping(state: ApplicationState) -> dict:
    """Top-level fields only; nested records are shared, not copied."""
    return {name: getattr(state, name) for name in STATE_FIELDS}
