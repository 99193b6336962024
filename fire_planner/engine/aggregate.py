from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Iterable, List

import pandas as pd

from ..data_model import Investment

FRAME_COLUMNS = ["RecordDate", "Tag", "InvestedAmount", "CurrentValue"]
TIME_WINDOW_DAYS = {
    "3m": 90,
    "6m": 180,
    "1y": 365,
    "2y": 730,
    "3y": 1095,
    "all": None,
}


@dataclass(frozen=True)
class PortfolioSummary:
    total_invested: float
    total_current: float
    total_gains: float
    total_return_pct: float


@dataclass(frozen=True)
class TagBreakdown:
    tag: str
    invested: float
    current: float
    gain: float
    return_pct: float


def _return_pct(invested: float, current: float) -> float:
    if invested > 0:
        return round((current - invested) / invested * 100.0, 2)
    return 0.0


def records_to_frame(records: Iterable[Investment]) -> pd.DataFrame:
    rows = [
        {
            "RecordDate": pd.Timestamp(record.record_date),
            "Tag": record.tag,
            "InvestedAmount": record.invested_amount,
            "CurrentValue": record.current_value,
        }
        for record in records
    ]
    if not rows:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def filter_time_window(df: pd.DataFrame, window: str = "all", reference: dt.date | None = None) -> pd.DataFrame:
    """Keep rows within `window` days of `reference` (today by default), either side."""
    key = (window or "all").lower()
    if key not in TIME_WINDOW_DAYS:
        raise ValueError(f"Unknown time window: {window}")
    days = TIME_WINDOW_DAYS[key]
    if days is None or df.empty:
        return df
    ref = pd.Timestamp(reference or dt.date.today())
    distance = (df["RecordDate"] - ref).abs()
    return df[distance <= pd.Timedelta(days=days)]


def aggregate_period(df: pd.DataFrame, freq: str = "M") -> pd.DataFrame:
    """Collapse records to the last snapshot per tag per month/quarter/year."""
    if df.empty:
        return df

    freq = (freq or "M").upper()
    df = df.sort_values(["RecordDate"], kind="stable").copy()
    years = df["RecordDate"].dt.year
    months = df["RecordDate"].dt.month

    if freq == "Q":
        quarter = ((months - 1) // 3 + 1).astype(int)
        df["PeriodValue"] = years * 4 + quarter - 1
        df["Period"] = years.astype(str) + " Q" + quarter.astype(str)
    elif freq == "Y":
        df["PeriodValue"] = years
        df["Period"] = years.astype(str)
    elif freq == "M":
        df["PeriodValue"] = years * 12 + months - 1
        df["Period"] = df["RecordDate"].dt.strftime("%Y-%m")
    else:
        raise ValueError(f"Unknown frequency: {freq}")

    grouped = df.groupby(["Tag", "PeriodValue"], as_index=False, sort=False).last()
    return grouped.sort_values(["PeriodValue", "Tag"]).reset_index(drop=True)


def _latest_per_tag(records: Iterable[Investment]) -> pd.DataFrame:
    df = records_to_frame(records)
    if df.empty:
        return df
    df = df.sort_values(["RecordDate"], kind="stable")
    return df.groupby("Tag", as_index=False).last()


def portfolio_summary(investments: Iterable[Investment]) -> PortfolioSummary:
    """Totals over the latest snapshot of every tag."""
    latest = _latest_per_tag(investments)
    if latest.empty:
        return PortfolioSummary(0.0, 0.0, 0.0, 0.0)
    invested = round(float(latest["InvestedAmount"].sum()), 2)
    current = round(float(latest["CurrentValue"].sum()), 2)
    return PortfolioSummary(
        total_invested=invested,
        total_current=current,
        total_gains=round(current - invested, 2),
        total_return_pct=_return_pct(invested, current),
    )


def tag_breakdown(investments: Iterable[Investment]) -> List[TagBreakdown]:
    latest = _latest_per_tag(investments)
    rows: List[TagBreakdown] = []
    for row in latest.sort_values("Tag").to_dict("records"):
        invested = float(row["InvestedAmount"])
        current = float(row["CurrentValue"])
        rows.append(
            TagBreakdown(
                tag=str(row["Tag"]),
                invested=invested,
                current=current,
                gain=round(current - invested, 2),
                return_pct=_return_pct(invested, current),
            )
        )
    return rows
