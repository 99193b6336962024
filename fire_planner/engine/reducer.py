from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Iterable, Mapping, Tuple

from ..data_model import (
    ApplicationState,
    InflationObservation,
    Investment,
    PlanParameters,
    default_state,
    state_as_mapping,
    to_date,
)
from ..data_model.state import STATE_FIELDS
from .ordering import sort_inflation, sort_investments
from .planner import generate_plan

logger = logging.getLogger(__name__)

PLAN_FIELDS = tuple(f.name for f in fields(PlanParameters))
_SEQUENCE_FIELDS = {"investments", "inflation_observations", "investment_plan"}


class ActionType:
    RESET = "RESET"
    LOAD_SNAPSHOT = "LOAD_SNAPSHOT"
    RECORD_INVESTMENTS = "RECORD_INVESTMENTS"
    RECORD_INFLATION = "RECORD_INFLATION"
    RECOMPUTE_PLAN = "RECOMPUTE_PLAN"


@dataclass(frozen=True)
class Action:
    action_type: str
    payload: Any = None


def _unpack(action: Action | Mapping[str, Any]) -> Tuple[Any, Any]:
    if isinstance(action, Mapping):
        return action.get("type", action.get("action_type")), action.get("payload")
    return getattr(action, "action_type", None), getattr(action, "payload", None)


def _load_snapshot(payload: ApplicationState | Mapping[str, Any] | None) -> ApplicationState:
    if isinstance(payload, ApplicationState):
        payload = state_as_mapping(payload)
    overrides = {}
    for key, value in (payload or {}).items():
        if key not in STATE_FIELDS or value is None:
            continue
        overrides[key] = tuple(value) if key in _SEQUENCE_FIELDS else value
    return replace(default_state(), **overrides)


def _record_investments(state: ApplicationState, records: Iterable[Investment] | None) -> ApplicationState:
    normalized = [replace(record, record_date=to_date(record.record_date)) for record in records or ()]
    return replace(state, investments=sort_investments(normalized))


def _record_inflation(state: ApplicationState, records: Iterable[InflationObservation] | None) -> ApplicationState:
    normalized = [replace(record, record_date=to_date(record.record_date)) for record in records or ()]
    return replace(state, inflation_observations=sort_inflation(normalized))


def _recompute_plan(state: ApplicationState, payload: PlanParameters | Mapping[str, Any] | None) -> ApplicationState:
    if isinstance(payload, PlanParameters):
        params = payload
    else:
        overrides = {key: value for key, value in (payload or {}).items() if key in PLAN_FIELDS}
        params = replace(state.plan_parameters, **overrides)
    params = replace(params, start_date=to_date(params.start_date))
    plan = generate_plan(params)
    return replace(
        state,
        plan_parameters=params,
        investment_plan=plan.investment_plan,
        retire_date=plan.retire_date,
    )


def reduce(state: ApplicationState, action: Action | Mapping[str, Any]) -> ApplicationState:
    """Apply one action and return the next state; `state` itself is never touched.

    Unknown action types return `state` unchanged (the same object), so callers
    can use an identity check to skip re-rendering.
    """
    action_type, payload = _unpack(action)
    if action_type == ActionType.RESET:
        return default_state()
    if action_type == ActionType.LOAD_SNAPSHOT:
        return _load_snapshot(payload)
    if action_type == ActionType.RECORD_INVESTMENTS:
        return _record_investments(state, payload)
    if action_type == ActionType.RECORD_INFLATION:
        return _record_inflation(state, payload)
    if action_type == ActionType.RECOMPUTE_PLAN:
        return _recompute_plan(state, payload)
    logger.debug("Ignoring unknown action type %r", action_type)
    return state
