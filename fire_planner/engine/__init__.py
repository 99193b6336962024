from .ordering import compare_inflation, compare_investments, sort_inflation, sort_investments
from .planner import GeneratedPlan, generate_plan, limit_date_for, reached_limit
from .reconcile import VarianceRow, compute_variance, merge_with_plan, value_to_price
from .reducer import Action, ActionType, reduce

__all__ = [
    "Action",
    "ActionType",
    "GeneratedPlan",
    "VarianceRow",
    "compare_inflation",
    "compare_investments",
    "compute_variance",
    "generate_plan",
    "limit_date_for",
    "merge_with_plan",
    "reached_limit",
    "reduce",
    "sort_inflation",
    "sort_investments",
    "value_to_price",
]
