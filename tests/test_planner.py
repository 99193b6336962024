import datetime as dt

from fire_planner.dates import add_years, first_day_of_next_month
from fire_planner.data_model import PlanParameters
from fire_planner.engine.planner import generate_plan, limit_date_for, reached_limit

START = dt.date(2023, 1, 1)


def _params(**overrides) -> PlanParameters:
    values = dict(
        start_date=START,
        starting_contribution=10000.0,
        target_income=100000.0,
        expected_inflation=6.0,
        expected_growth_rate=12.0,
        step_up_rate=8.0,
    )
    values.update(overrides)
    return PlanParameters(**values)


def test_happy_path_plan_grows_and_retires_after_start():
    result = generate_plan(_params())
    plan = result.investment_plan

    assert len(plan) > 0
    assert result.retire_date > START
    assert result.retire_date <= add_years(START, 50)
    assert plan[0].invested_amount < plan[-1].invested_amount
    assert plan[-1].record_date == result.retire_date
    assert all(record.tag == "Planned" for record in plan)


def test_happy_path_plan_is_monotonic():
    plan = generate_plan(_params()).investment_plan

    for previous, current in zip(plan, plan[1:]):
        assert current.invested_amount >= previous.invested_amount
        assert current.current_value >= previous.current_value
        assert current.record_date > previous.record_date


def test_amounts_are_rounded_to_cents():
    plan = generate_plan(_params(starting_contribution=1234.56, step_up_rate=7.3)).investment_plan

    for record in plan:
        assert round(record.invested_amount, 2) == record.invested_amount
        assert round(record.current_value, 2) == record.current_value


def test_zero_contribution_and_target_returns_single_record():
    result = generate_plan(_params(starting_contribution=0.0, target_income=0.0))

    assert len(result.investment_plan) == 1
    assert result.retire_date == START
    assert result.investment_plan[0].invested_amount == 0.0
    assert result.investment_plan[0].current_value == 0.0


def test_stops_once_interest_covers_target():
    params = _params(
        starting_contribution=100.0,
        target_income=3050.0,
        expected_inflation=0.0,
        expected_growth_rate=36500.0,
        step_up_rate=0.0,
    )

    result = generate_plan(params)

    assert [(r.record_date, r.invested_amount, r.current_value) for r in result.investment_plan] == [
        (dt.date(2023, 1, 1), 100.0, 100.0),
        (dt.date(2023, 2, 1), 200.0, 3300.0),
    ]
    assert result.retire_date == dt.date(2023, 2, 1)
    assert not reached_limit(params, result.retire_date)


def test_step_up_applies_to_starting_contribution():
    params = _params(
        starting_contribution=1000.0,
        target_income=1_000_000_000.0,
        expected_inflation=0.0,
        expected_growth_rate=0.0,
        step_up_rate=36.5,
    )

    plan = generate_plan(params).investment_plan

    # +31 (Jan), +28 (Feb), +31 (Mar), +30 (Apr) on top of 1000 each month
    assert [record.invested_amount for record in plan[:5]] == [1000.0, 2000.0, 3031.0, 4090.0, 5180.0]


def test_unreachable_target_runs_to_fifty_year_bound():
    params = _params(
        starting_contribution=1000.0,
        target_income=1_000_000_000.0,
        expected_inflation=0.0,
        expected_growth_rate=0.0,
        step_up_rate=0.0,
    )

    result = generate_plan(params)

    assert len(result.investment_plan) == 600
    assert result.retire_date == dt.date(2072, 12, 1)
    assert reached_limit(params, result.retire_date)


def test_growth_below_inflation_still_terminates():
    params = _params(expected_inflation=12.0, expected_growth_rate=2.0)

    result = generate_plan(params)

    assert result.retire_date <= limit_date_for(START)
    assert len(result.investment_plan) >= 1


def test_negative_rates_still_terminate():
    params = _params(expected_inflation=-3.0, expected_growth_rate=-5.0, step_up_rate=-1.0)

    result = generate_plan(params)

    assert result.retire_date <= limit_date_for(START)
    assert len(result.investment_plan) >= 1


def test_mid_month_start_uses_partial_first_period():
    params = _params(
        start_date=dt.date(2023, 1, 15),
        starting_contribution=1000.0,
        target_income=1_000_000_000.0,
        expected_inflation=0.0,
        expected_growth_rate=0.0,
        step_up_rate=36.5,
    )

    plan = generate_plan(params).investment_plan

    assert plan[0].record_date == dt.date(2023, 1, 15)
    assert plan[1].record_date == dt.date(2023, 2, 1)
    # 17 days elapse in the first period
    assert plan[2].invested_amount == 3017.0


def test_limit_date_clamps_leap_day():
    assert limit_date_for(dt.date(2024, 2, 29)) == dt.date(2074, 2, 28)
    assert limit_date_for(START) == dt.date(2073, 1, 1)


def test_first_day_of_next_month_rolls_year():
    assert first_day_of_next_month(dt.date(2023, 12, 31)) == dt.date(2024, 1, 1)
    assert first_day_of_next_month(dt.date(2024, 1, 31)) == dt.date(2024, 2, 1)
