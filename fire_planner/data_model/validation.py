"""Input checks applied before records or plan parameters reach the engine.

The engine trusts its inputs; everything a form or an upload can get wrong is
caught here. Rules mirror the record/plan forms: amounts are non-negative,
rates sit in [0, 100], tags are non-empty and never one of the reserved tags,
and only one inflation observation may exist per date.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Iterable, List, Literal

from .plan import PlanParameters
from .records import RESERVED_TAGS, InflationObservation, Investment

MAX_RATE_PCT = 100.0


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    message: str
    severity: Literal["error", "warning"] = "error"

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "severity": self.severity}


class ValidationError(ValueError):
    """Raised when boundary input has at least one error-level issue."""

    def __init__(self, issues: List[ValidationIssue]) -> None:
        self.issues = issues
        super().__init__("; ".join(f"{issue.field}: {issue.message}" for issue in issues))


def errors_only(issues: Iterable[ValidationIssue]) -> List[ValidationIssue]:
    return [issue for issue in issues if issue.severity == "error"]


def warnings_only(issues: Iterable[ValidationIssue]) -> List[ValidationIssue]:
    return [issue for issue in issues if issue.severity == "warning"]


def raise_for_issues(issues: Iterable[ValidationIssue]) -> None:
    errors = errors_only(issues)
    if errors:
        raise ValidationError(errors)


def is_reserved_tag(tag: str) -> bool:
    normalized = str(tag or "").strip().lower()
    return normalized in {reserved.lower() for reserved in RESERVED_TAGS}


def validate_tag(tag: str, field: str = "tag") -> List[ValidationIssue]:
    text = str(tag or "").strip()
    if not text:
        return [ValidationIssue(field, "Tag is required")]
    if is_reserved_tag(text):
        return [ValidationIssue(field, f"'{text}' is a reserved tag")]
    return []


def validate_investment(investment: Investment, field: str = "investment") -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    if investment.invested_amount < 0:
        issues.append(ValidationIssue(f"{field}.investedAmount", "Invested amount must be positive"))
    if investment.current_value < 0:
        issues.append(ValidationIssue(f"{field}.currentValue", "Current value must be positive"))
    if not isinstance(investment.record_date, dt.date):
        issues.append(ValidationIssue(f"{field}.recordDate", "Record date is required"))
    issues.extend(validate_tag(investment.tag, f"{field}.tag"))
    return issues


def validate_inflation(
    observation: InflationObservation,
    existing: Iterable[InflationObservation] = (),
    field: str = "inflation",
) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    if not isinstance(observation.record_date, dt.date):
        issues.append(ValidationIssue(f"{field}.recordDate", "Record date is required"))
    elif any(item.record_date == observation.record_date for item in existing):
        issues.append(
            ValidationIssue(
                f"{field}.recordDate",
                f"Inflation already recorded for {observation.record_date.isoformat()}",
            )
        )
    return issues


def _check_rate(value: float, field: str, label: str, lower: float | None = 0.0) -> List[ValidationIssue]:
    if lower is not None and value < lower:
        return [ValidationIssue(field, f"{label} must be positive")]
    if value > MAX_RATE_PCT:
        return [ValidationIssue(field, f"{label} cannot exceed 100%")]
    return []


def validate_plan_parameters(params: PlanParameters) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    if not isinstance(params.start_date, dt.date):
        issues.append(ValidationIssue("startDate", "Start date is required"))
    if params.starting_contribution < 0:
        issues.append(ValidationIssue("startingContribution", "Starting contribution must be positive"))
    if params.target_income < 0:
        issues.append(ValidationIssue("targetIncome", "Income at maturity must be positive"))
    if not str(params.currency or "").strip():
        issues.append(ValidationIssue("currency", "Currency is required"))
    issues.extend(_check_rate(params.expected_inflation, "expectedInflation", "Inflation rate"))
    issues.extend(_check_rate(params.expected_growth_rate, "expectedGrowthRate", "Growth rate", lower=None))
    issues.extend(_check_rate(params.step_up_rate, "stepUpRate", "Contribution step-up rate"))
    if params.expected_growth_rate < params.expected_inflation:
        issues.append(
            ValidationIssue(
                "expectedGrowthRate",
                "Growth rate should be higher than inflation rate",
                severity="warning",
            )
        )
    return issues


def suggest_tags(investments: Iterable[Investment]) -> List[str]:
    """Existing user tags, reserved ones excluded, in first-seen order."""
    seen: List[str] = []
    for investment in investments:
        if investment.tag not in seen and not is_reserved_tag(investment.tag):
            seen.append(investment.tag)
    return seen
