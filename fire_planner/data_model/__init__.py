from .plan import DEFAULT_CURRENCY, PlanParameters
from .records import (
    ACTUAL_TAG,
    PLANNED_TAG,
    RESERVED_TAGS,
    InflationObservation,
    Investment,
    actual_record,
    planned_record,
    to_date,
)
from .state import ApplicationState, default_state, state_as_mapping
from .tables import InflationTableModel, InvestmentTableModel

__all__ = [
    "ACTUAL_TAG",
    "DEFAULT_CURRENCY",
    "PLANNED_TAG",
    "RESERVED_TAGS",
    "ApplicationState",
    "InflationObservation",
    "InflationTableModel",
    "Investment",
    "InvestmentTableModel",
    "PlanParameters",
    "actual_record",
    "default_state",
    "planned_record",
    "state_as_mapping",
    "to_date",
]
