import logging
from datetime import datetime
from typing import Optional

from services.aggregation import DashboardSnapshot, build_dashboard
from services.store import EarningsStore
from utils.dates import month_start, week_start

logger = logging.getLogger(__name__)


def load_dashboard(
    store: EarningsStore,
    filter_user: Optional[str] = None,
    now: Optional[datetime] = None,
) -> DashboardSnapshot:
    """Fetch the trailing payments, goal and users, then compute the snapshot.

    Store failures propagate to the caller.
    """
    now = now or datetime.now()
    # A week that began last month still needs its first days for the weekly view
    since = min(month_start(now), week_start(now))

    payments = store.list_payments(since, user=filter_user)
    daily_goal = store.get_daily_goal()
    users = store.list_users()

    logger.debug(
        f"Building dashboard for {filter_user or 'all users'}: "
        f"{len(payments)} payments since {since.isoformat()}"
    )
    return build_dashboard(
        payments,
        now=now,
        daily_target=daily_goal,
        user_names=[u["display_name"] for u in users],
        filter_user=filter_user,
    )
