import datetime as dt

import pytest

from fire_planner.data_model import Investment
from fire_planner.engine.aggregate import (
    FRAME_COLUMNS,
    aggregate_period,
    filter_time_window,
    portfolio_summary,
    records_to_frame,
    tag_breakdown,
)


def _records():
    return [
        Investment(1000.0, 1100.0, dt.date(2023, 1, 1), "Stocks"),
        Investment(2000.0, 2300.0, dt.date(2023, 2, 1), "Stocks"),
        Investment(500.0, 450.0, dt.date(2023, 2, 1), "Bonds"),
        Investment(2500.0, 2900.0, dt.date(2023, 4, 1), "Stocks"),
    ]


def test_records_to_frame_empty_has_columns():
    df = records_to_frame([])

    assert df.empty
    assert list(df.columns) == FRAME_COLUMNS


def test_aggregate_quarterly_keeps_last_snapshot_per_tag():
    agg = aggregate_period(records_to_frame(_records()), freq="Q")

    rows = [(row["Period"], row["Tag"], row["InvestedAmount"]) for row in agg.to_dict("records")]
    assert rows == [
        ("2023 Q1", "Bonds", 500.0),
        ("2023 Q1", "Stocks", 2000.0),
        ("2023 Q2", "Stocks", 2500.0),
    ]


def test_aggregate_yearly_and_monthly_labels():
    df = records_to_frame(_records())

    yearly = aggregate_period(df, freq="Y")
    monthly = aggregate_period(df, freq="M")

    assert list(yearly["Period"]) == ["2023", "2023"]
    assert list(yearly["InvestedAmount"]) == [500.0, 2500.0]
    assert list(monthly["Period"]) == ["2023-01", "2023-02", "2023-02", "2023-04"]


def test_aggregate_rejects_unknown_frequency():
    with pytest.raises(ValueError):
        aggregate_period(records_to_frame(_records()), freq="W")


def test_filter_time_window_around_reference():
    df = records_to_frame(_records())

    recent = filter_time_window(df, "3m", reference=dt.date(2023, 4, 15))

    assert list(recent["RecordDate"].dt.strftime("%Y-%m-%d")) == ["2023-02-01", "2023-02-01", "2023-04-01"]
    assert len(filter_time_window(df, "all")) == 4
    with pytest.raises(ValueError):
        filter_time_window(df, "5y")


def test_portfolio_summary_uses_latest_snapshot_per_tag():
    summary = portfolio_summary(_records()[:3])

    assert summary.total_invested == 2500.0
    assert summary.total_current == 2750.0
    assert summary.total_gains == 250.0
    assert summary.total_return_pct == 10.0


def test_portfolio_summary_empty():
    summary = portfolio_summary([])

    assert (summary.total_invested, summary.total_current, summary.total_return_pct) == (0.0, 0.0, 0.0)


def test_tag_breakdown_sorted_by_tag():
    rows = tag_breakdown(_records())

    assert [row.tag for row in rows] == ["Bonds", "Stocks"]
    assert rows[0].gain == -50.0
    assert rows[0].return_pct == -10.0
    assert rows[1].invested == 2500.0
    assert rows[1].return_pct == 16.0
