from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

PLANNED_TAG = "Planned"
ACTUAL_TAG = "Actual"
RESERVED_TAGS = (PLANNED_TAG, ACTUAL_TAG)


def to_date(value: dt.date | dt.datetime) -> dt.date:
    """Drop the time-of-day part; record dates are calendar dates."""
    if isinstance(value, dt.datetime):
        return value.date()
    return value


@dataclass(frozen=True)
class Investment:
    """Point-in-time totals for one tag: principal committed and market value."""

    invested_amount: float
    current_value: float
    record_date: dt.date
    tag: str

    def is_planned(self) -> bool:
        return self.tag == PLANNED_TAG

    def is_actual(self) -> bool:
        return self.tag == ACTUAL_TAG


@dataclass(frozen=True)
class InflationObservation:
    inflation: float  # annual percent, 6.0 == 6%
    record_date: dt.date


def planned_record(record_date: dt.date, invested_amount: float, current_value: float) -> Investment:
    return Investment(
        invested_amount=invested_amount,
        current_value=current_value,
        record_date=record_date,
        tag=PLANNED_TAG,
    )


def actual_record(record_date: dt.date, invested_amount: float, current_value: float) -> Investment:
    return Investment(
        invested_amount=invested_amount,
        current_value=current_value,
        record_date=record_date,
        tag=ACTUAL_TAG,
    )
