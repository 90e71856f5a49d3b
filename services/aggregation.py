"""
services/aggregation.py - Dashboard rollups computed from a payment snapshot

Everything here is recomputed on each call from the records handed in; there is
no cached or incremental state.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from models.payment import PaymentRecord, PaymentType
from utils.dates import month_start, today_end, today_start, week_start
from utils.goals import GoalProgress, personal_daily_target

FIRST_HOUR = 6
DAYS_PER_WEEK = 7
MAX_MONTH_SPANS = 5
DAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
PAYMENT_TYPE_LABELS = {
    PaymentType.cash: "Cash",
    PaymentType.iban: "Electronic transfer",
}

ZERO = Decimal("0")


@dataclass(frozen=True)
class Bucket:
    """One point of a chart series"""

    label: str
    total: Decimal = ZERO
    cash: Decimal = ZERO
    iban: Decimal = ZERO

    def to_dict(self) -> Dict:
        return {
            "label": self.label,
            "total": float(self.total),
            "cash": float(self.cash),
            "iban": float(self.iban),
        }


@dataclass(frozen=True)
class UserEarnings:
    user: str
    total: Decimal
    cash: Decimal
    iban: Decimal

    def to_dict(self) -> Dict:
        return {
            "user": self.user,
            "total": float(self.total),
            "cash": float(self.cash),
            "iban": float(self.iban),
        }


@dataclass
class DashboardSnapshot:
    payments: List[PaymentRecord]
    total_earnings: Decimal
    cash_total: Decimal
    iban_total: Decimal
    daily_goal: GoalProgress
    weekly_goal: GoalProgress
    hourly: List[Bucket]
    user_earnings: List[UserEarnings]
    payment_types: List[Dict]
    period_daily: List[Bucket] = field(default_factory=list)
    period_weekly: List[Bucket] = field(default_factory=list)
    period_monthly: List[Bucket] = field(default_factory=list)
    filter_user: Optional[str] = None

    @property
    def is_personal_view(self) -> bool:
        return self.filter_user is not None

    def to_dict(self) -> Dict:
        return {
            "filter_user": self.filter_user,
            "is_personal_view": self.is_personal_view,
            "payments": [p.to_dict() for p in self.payments],
            "total_earnings": float(self.total_earnings),
            "cash_total": float(self.cash_total),
            "iban_total": float(self.iban_total),
            "daily_goal": self.daily_goal.to_dict(),
            "weekly_goal": self.weekly_goal.to_dict(),
            "hourly": [{"hour": b.label, "earnings": float(b.total)} for b in self.hourly],
            "user_earnings": [u.to_dict() for u in self.user_earnings],
            "payment_types": [
                {"payment_type": t["payment_type"], "label": t["label"], "value": float(t["value"])}
                for t in self.payment_types
            ],
            "period": {
                "daily": [b.to_dict() for b in self.period_daily],
                "weekly": [b.to_dict() for b in self.period_weekly],
                "monthly": [b.to_dict() for b in self.period_monthly],
            },
        }


# ── Helpers ────────────────────────────────────────────────

def _sum(records: Iterable[PaymentRecord], payment_type: Optional[PaymentType] = None) -> Decimal:
    return sum(
        (r.amount for r in records if payment_type is None or r.payment_type == payment_type),
        ZERO,
    )


def _bucket(label: str, records: Sequence[PaymentRecord]) -> Bucket:
    return Bucket(
        label=label,
        total=_sum(records),
        cash=_sum(records, PaymentType.cash),
        iban=_sum(records, PaymentType.iban),
    )


def _hour_label(hour: int) -> str:
    return f"{hour:02d}:00"


def hourly_buckets(today: Sequence[PaymentRecord], now: datetime) -> List[Bucket]:
    """06:00 up to the current hour, always at least the 06:00 bucket"""
    buckets = []
    for hour in range(FIRST_HOUR, max(now.hour, FIRST_HOUR) + 1):
        buckets.append(_bucket(_hour_label(hour), [r for r in today if r.hour == hour]))
    return buckets


def weekly_buckets(records: Sequence[PaymentRecord], now: datetime) -> List[Bucket]:
    """Monday..Sunday of the current week, matched by calendar day"""
    monday = week_start(now).date()
    buckets = []
    for offset in range(DAYS_PER_WEEK):
        day = monday + timedelta(days=offset)
        day_records = [r for r in records if r.created_at.date() == day and r.created_at <= now]
        buckets.append(_bucket(DAY_LABELS[day.weekday()], day_records))
    return buckets


def monthly_buckets(records: Sequence[PaymentRecord], now: datetime) -> List[Bucket]:
    """Seven-day spans from the 1st of the month, labelled "week N", at most five"""
    buckets = []
    span_start = month_start(now)
    week_number = 1
    while span_start <= now and week_number <= MAX_MONTH_SPANS:
        span_end = span_start + timedelta(days=DAYS_PER_WEEK)
        span_records = [
            r for r in records
            if span_start <= r.created_at < span_end
            and r.created_at.year == now.year
            and r.created_at.month == now.month
        ]
        buckets.append(_bucket(f"week {week_number}", span_records))
        span_start = span_end
        week_number += 1
    return buckets


# ── Engine ─────────────────────────────────────────────────

def build_dashboard(
    payments: Sequence[PaymentRecord],
    now: datetime,
    daily_target: Decimal,
    user_names: Sequence[str],
    filter_user: Optional[str] = None,
) -> DashboardSnapshot:
    """
    Compute the full dashboard snapshot.

    Args:
        payments: records from the trailing month (or longer) up to now
        now: reference time; "today" and "this week" are derived from it
        daily_target: the shared daily goal
        user_names: display names of every registered driver, in display order
        filter_user: restrict to one driver's payments (personal view)
    """
    if filter_user:
        payments = [p for p in payments if p.user == filter_user]
    else:
        filter_user = None

    payments = [p for p in payments if p.created_at <= now]

    start_of_day, end_of_day = today_start(now), today_end(now)
    today = [p for p in payments if start_of_day <= p.created_at <= end_of_day]
    this_week = [p for p in payments if p.created_at >= week_start(now)]

    total_earnings = _sum(today)
    cash_total = _sum(today, PaymentType.cash)
    iban_total = _sum(today, PaymentType.iban)

    daily_target = Decimal(daily_target)
    if filter_user:
        goal_target = Decimal(personal_daily_target(daily_target, len(user_names)))
    else:
        goal_target = daily_target
    weekly_target = goal_target * DAYS_PER_WEEK

    hourly = hourly_buckets(today, now)

    names = [filter_user] if filter_user else list(user_names)
    user_earnings = []
    for name in names:
        user_today = [p for p in today if p.user == name]
        user_earnings.append(UserEarnings(
            user=name,
            total=_sum(user_today),
            cash=_sum(user_today, PaymentType.cash),
            iban=_sum(user_today, PaymentType.iban),
        ))

    payment_types = [
        {"payment_type": t.value, "label": PAYMENT_TYPE_LABELS[t], "value": _sum(today, t)}
        for t in (PaymentType.cash, PaymentType.iban)
    ]

    period_daily = hourly or [Bucket(label=_hour_label(FIRST_HOUR))]
    period_monthly = monthly_buckets(payments, now) or [Bucket(label="week 1")]

    return DashboardSnapshot(
        payments=sorted(today, key=lambda p: p.created_at, reverse=True),
        total_earnings=total_earnings,
        cash_total=cash_total,
        iban_total=iban_total,
        daily_goal=GoalProgress(target=goal_target, current=total_earnings),
        weekly_goal=GoalProgress(target=weekly_target, current=_sum(this_week)),
        hourly=hourly,
        user_earnings=user_earnings,
        payment_types=payment_types,
        period_daily=period_daily,
        period_weekly=weekly_buckets(payments, now),
        period_monthly=period_monthly,
        filter_user=filter_user,
    )
