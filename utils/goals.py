# utils/goals.py
# Goal progress math shared by the dashboard and notifications

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[int, float, Decimal]


def round_half_up(value: Number) -> int:
    """Round to the nearest integer, .5 going up (not banker's rounding)"""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_percentage(current: Number, target: Number) -> int:
    """Progress in whole percent, capped at 100; 0 when there is no target"""
    if target <= 0:
        return 0
    return min(round_half_up(Decimal(str(current)) / Decimal(str(target)) * 100), 100)


def personal_daily_target(daily_goal: Number, user_count: int) -> int:
    """One driver's share of the team's daily goal"""
    return round_half_up(Decimal(str(daily_goal)) / max(user_count, 1))


@dataclass(frozen=True)
class GoalProgress:
    target: Decimal
    current: Decimal

    @property
    def percentage(self) -> int:
        return calculate_percentage(self.current, self.target)

    @property
    def achieved(self) -> bool:
        return self.percentage >= 100

    @property
    def remaining(self) -> Decimal:
        return max(self.target - self.current, Decimal("0"))

    @property
    def surplus(self) -> Decimal:
        if not self.achieved:
            return Decimal("0")
        return self.current - self.target

    def to_dict(self) -> dict:
        return {
            "target": float(self.target),
            "current": float(self.current),
            "percentage": self.percentage,
            "achieved": self.achieved,
            "remaining": float(self.remaining),
            "surplus": float(self.surplus),
        }
