from datetime import datetime
from decimal import Decimal

import pytest

from utils.dates import month_start, today_end, today_start, week_start
from utils.fuel import estimate_fuel
from utils.goals import GoalProgress, calculate_percentage, personal_daily_target, round_half_up


def test_estimate_fuel():
    result = estimate_fuel(100, 7, 50)

    assert result.fuel_used_liters == pytest.approx(7)
    assert result.fuel_cost == pytest.approx(350)


def test_estimate_fuel_short_trip():
    result = estimate_fuel(2.5, 8, 48.5)

    assert result.fuel_used_liters == pytest.approx(0.2)
    assert result.fuel_cost == pytest.approx(9.7)
    assert result.to_dict() == {"fuel_used_liters": 0.2, "fuel_cost": 9.7}


def test_estimate_fuel_zero_distance():
    result = estimate_fuel(0, 7, 50)

    assert result.fuel_used_liters == 0
    assert result.fuel_cost == 0


def test_goal_progress_clamped_with_surplus():
    progress = GoalProgress(target=Decimal("100"), current=Decimal("150"))

    assert progress.percentage == 100
    assert progress.achieved
    assert progress.surplus == 50
    assert progress.remaining == 0


def test_goal_progress_in_progress():
    progress = GoalProgress(target=Decimal("3000"), current=Decimal("1200"))

    assert progress.percentage == 40
    assert not progress.achieved
    assert progress.remaining == 1800
    assert progress.surplus == 0


def test_goal_progress_without_target():
    progress = GoalProgress(target=Decimal("0"), current=Decimal("500"))

    assert progress.percentage == 0
    assert not progress.achieved


def test_percentage_rounds_half_up():
    assert calculate_percentage(1, 8) == 13     # 12.5
    assert calculate_percentage(1, 3) == 33
    assert calculate_percentage(2, 3) == 67
    assert round_half_up(2.5) == 3
    assert round_half_up(Decimal("0.5")) == 1


def test_personal_daily_target():
    assert personal_daily_target(3000, 3) == 1000
    assert personal_daily_target(1000, 3) == 333
    assert personal_daily_target(5, 2) == 3
    assert personal_daily_target(3000, 0) == 3000


@pytest.mark.parametrize("day, expected_monday", [
    (datetime(2026, 10, 12, 8, 0), datetime(2026, 10, 12)),    # Monday
    (datetime(2026, 10, 14, 23, 59), datetime(2026, 10, 12)),  # Wednesday
    (datetime(2026, 10, 18, 10, 0), datetime(2026, 10, 12)),   # Sunday
    (datetime(2026, 11, 1, 0, 30), datetime(2026, 10, 26)),    # Sunday, previous month
])
def test_week_start(day, expected_monday):
    assert week_start(day) == expected_monday


def test_day_and_month_bounds():
    now = datetime(2026, 10, 14, 15, 30)

    assert today_start(now) == datetime(2026, 10, 14)
    assert today_end(now) == datetime(2026, 10, 14, 23, 59, 59, 999999)
    assert month_start(now) == datetime(2026, 10, 1)
