# utils/dates.py
# Calendar boundaries used for dashboard rollups (local, naive datetimes)

from datetime import datetime, time, timedelta


def today_start(now: datetime) -> datetime:
    return datetime.combine(now.date(), time.min)


def today_end(now: datetime) -> datetime:
    return datetime.combine(now.date(), time.max)


def week_start(now: datetime) -> datetime:
    """Midnight of the Monday starting now's week; Sunday belongs to the week before."""
    monday = now.date() - timedelta(days=now.weekday())
    return datetime.combine(monday, time.min)


def month_start(now: datetime) -> datetime:
    return datetime(now.year, now.month, 1)
