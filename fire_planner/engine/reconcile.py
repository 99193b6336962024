"""Merge recorded investments with the generated plan.

Recorded investments are absolute per-tag snapshots: a "Stocks" record on a
date says what the Stocks holdings totalled on that date, not what was added.
Walking the merged, canonically sorted records and keeping the latest snapshot
of every tag gives the portfolio total at each date, which is emitted as one
synthetic "Actual" record per date.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from ..data_model import PLANNED_TAG, Investment, actual_record
from .ordering import sort_investments


@dataclass(frozen=True)
class VarianceRow:
    record_date: dt.date
    planned_invested: float
    planned_value: float
    actual_invested: float | None = None
    actual_value: float | None = None
    to_pay: float | None = None
    to_earn: float | None = None


def _actual_tags(records: Iterable[Investment]) -> List[str]:
    tags: List[str] = []
    for record in records:
        if record.tag != PLANNED_TAG and record.tag not in tags:
            tags.append(record.tag)
    return tags


def merge_with_plan(
    investments: Iterable[Investment],
    investment_plan: Iterable[Investment],
) -> Tuple[Investment, ...]:
    combined = sort_investments([*investments, *investment_plan])
    totals: Dict[str, Tuple[float, float]] = {tag: (0.0, 0.0) for tag in _actual_tags(combined)}
    actuals: Dict[dt.date, Investment] = {}
    for record in combined:
        if record.tag != PLANNED_TAG:
            totals[record.tag] = (record.invested_amount, record.current_value)
        sum_invested = round(sum((invested for invested, _ in totals.values()), 0.0), 2)
        sum_current = round(sum((current for _, current in totals.values()), 0.0), 2)
        # one aggregate per date: a later record of the same date replaces it
        actuals[record.record_date] = actual_record(record.record_date, sum_invested, sum_current)

    return sort_investments([*combined, *actuals.values()])


def compute_variance(merged: Iterable[Investment]) -> List[VarianceRow]:
    """Planned vs. Actual for every plan date; dates without an Actual stay empty."""
    records = list(merged)
    actual_by_date = {record.record_date: record for record in records if record.is_actual()}
    rows: List[VarianceRow] = []
    for record in records:
        if not record.is_planned():
            continue
        actual = actual_by_date.get(record.record_date)
        if actual is None:
            rows.append(
                VarianceRow(
                    record_date=record.record_date,
                    planned_invested=record.invested_amount,
                    planned_value=record.current_value,
                )
            )
            continue
        rows.append(
            VarianceRow(
                record_date=record.record_date,
                planned_invested=record.invested_amount,
                planned_value=record.current_value,
                actual_invested=actual.invested_amount,
                actual_value=actual.current_value,
                to_pay=round(record.invested_amount - actual.invested_amount, 2),
                to_earn=round(record.current_value - actual.current_value, 2),
            )
        )
    return rows


def value_to_price(record: Investment) -> float:
    if record.invested_amount > 0:
        return round(record.current_value / record.invested_amount, 2)
    return 0.0
