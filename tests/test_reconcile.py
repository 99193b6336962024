import datetime as dt

from fire_planner.data_model import Investment, planned_record
from fire_planner.engine.ordering import sort_investments
from fire_planner.engine.reconcile import compute_variance, merge_with_plan, value_to_price

JAN = dt.date(2023, 1, 1)
FEB = dt.date(2023, 2, 1)
MAR = dt.date(2023, 3, 1)


def _inv(record_date, tag, invested, current):
    return Investment(invested_amount=invested, current_value=current, record_date=record_date, tag=tag)


def _actuals(merged):
    return [record for record in merged if record.tag == "Actual"]


def test_actual_precedes_planned_on_same_date():
    investments = [_inv(JAN, "Stocks", 1000.0, 1100.0)]
    plan = [planned_record(JAN, 1200.0, 1300.0)]

    merged = merge_with_plan(investments, plan)

    actual = [r for r in merged if r.tag == "Actual" and r.record_date == JAN]
    assert len(actual) == 1
    assert actual[0].invested_amount == 1000.0
    assert actual[0].current_value == 1100.0
    tags = [r.tag for r in merged]
    assert tags.index("Actual") < tags.index("Planned")


def test_one_actual_per_date_when_several_tags_share_it():
    investments = [
        _inv(JAN, "Stocks", 1000.0, 1100.0),
        _inv(JAN, "Bonds", 500.0, 510.0),
        _inv(JAN, "Gold", 200.0, 190.0),
    ]

    merged = merge_with_plan(investments, [])

    actuals = _actuals(merged)
    assert len(actuals) == 1
    assert actuals[0].invested_amount == 1700.0
    assert actuals[0].current_value == 1800.0


def test_tag_snapshots_overwrite_instead_of_accumulating():
    investments = [
        _inv(JAN, "Stocks", 1000.0, 1100.0),
        _inv(FEB, "Stocks", 1500.0, 1700.0),
        _inv(FEB, "Bonds", 500.0, 520.0),
    ]

    merged = merge_with_plan(investments, [])

    by_date = {record.record_date: record for record in _actuals(merged)}
    assert by_date[JAN].invested_amount == 1000.0
    assert by_date[FEB].invested_amount == 2000.0
    assert by_date[FEB].current_value == 2220.0


def test_empty_inputs_give_empty_sequence():
    assert merge_with_plan([], []) == ()


def test_empty_plan_keeps_sorted_investments():
    investments = [
        _inv(FEB, "Stocks", 1500.0, 1700.0),
        _inv(JAN, "Stocks", 1000.0, 1100.0),
        _inv(JAN, "Bonds", 500.0, 520.0),
    ]

    merged = merge_with_plan(investments, [])

    assert tuple(r for r in merged if r.tag != "Actual") == sort_investments(investments)


def test_plan_without_records_gets_zero_actuals():
    plan = [planned_record(FEB, 2000.0, 2050.0), planned_record(JAN, 1000.0, 1000.0)]

    merged = merge_with_plan([], plan)

    assert tuple(r for r in merged if r.tag == "Planned") == sort_investments(plan)
    actuals = _actuals(merged)
    assert [(r.record_date, r.invested_amount, r.current_value) for r in actuals] == [
        (JAN, 0.0, 0.0),
        (FEB, 0.0, 0.0),
    ]
    rows = compute_variance(merged)
    assert rows[0].to_pay == 1000.0
    assert rows[1].to_earn == 2050.0


def test_variance_before_first_record_matches_no_records_case():
    plan = [planned_record(JAN, 1000.0, 1000.0)]
    later = [_inv(MAR, "Stocks", 3000.0, 3300.0)]

    without_tags = compute_variance(merge_with_plan([], plan))
    with_later_tag = compute_variance(merge_with_plan(later, plan))

    assert without_tags[0].to_pay == with_later_tag[0].to_pay == 1000.0


def test_variance_compares_plan_with_same_day_actual():
    investments = [_inv(JAN, "Stocks", 1000.0, 1100.0)]
    plan = [planned_record(JAN, 1200.0, 1300.0), planned_record(FEB, 2400.0, 2650.0)]

    rows = compute_variance(merge_with_plan(investments, plan))

    assert [row.record_date for row in rows] == [JAN, FEB]
    assert rows[0].to_pay == 200.0
    assert rows[0].to_earn == 200.0
    # February has no new records; the latest January totals carry forward
    assert rows[1].actual_invested == 1000.0
    assert rows[1].to_pay == 1400.0


def test_plan_dates_before_first_record_compare_against_zero():
    investments = [_inv(MAR, "Stocks", 3000.0, 3300.0)]
    plan = [planned_record(JAN, 1000.0, 1000.0), planned_record(MAR, 3000.0, 3100.0)]

    rows = compute_variance(merge_with_plan(investments, plan))

    assert rows[0].actual_invested == 0.0
    assert rows[0].to_pay == 1000.0
    assert rows[1].to_earn == -200.0


def test_value_to_price():
    assert value_to_price(_inv(JAN, "Stocks", 1000.0, 1234.0)) == 1.23
    assert value_to_price(_inv(JAN, "Stocks", 0.0, 50.0)) == 0.0
