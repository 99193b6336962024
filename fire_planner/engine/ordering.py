"""Canonical ordering for investment and inflation records.

Every sort in the package goes through these comparators. Within one date the
"Planned" record always comes last, so an aggregate built while walking the
sorted records is complete before the plan row of that date is reached.
"""
from __future__ import annotations

from functools import cmp_to_key
from typing import Iterable, Tuple

from ..data_model.records import PLANNED_TAG, InflationObservation, Investment


def compare_investments(a: Investment, b: Investment) -> int:
    if a.record_date < b.record_date:
        return -1
    if a.record_date > b.record_date:
        return 1
    a_planned = a.tag == PLANNED_TAG
    b_planned = b.tag == PLANNED_TAG
    if a_planned and b_planned:
        return 0
    if a_planned:
        return 1
    if b_planned:
        return -1
    if a.tag < b.tag:
        return -1
    if a.tag > b.tag:
        return 1
    return 0


def compare_inflation(a: InflationObservation, b: InflationObservation) -> int:
    if a.record_date < b.record_date:
        return -1
    if a.record_date > b.record_date:
        return 1
    return 0


def sort_investments(records: Iterable[Investment]) -> Tuple[Investment, ...]:
    return tuple(sorted(records, key=cmp_to_key(compare_investments)))


def sort_inflation(records: Iterable[InflationObservation]) -> Tuple[InflationObservation, ...]:
    return tuple(sorted(records, key=cmp_to_key(compare_inflation)))
