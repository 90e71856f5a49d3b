from typing import Optional

from fastapi import APIRouter, Depends, Query

from services.dashboard import load_dashboard
from services.store import EarningsStore, get_store

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/")
def get_dashboard(
    user: Optional[str] = Query(None, description="Display name for the personal view"),
    store: EarningsStore = Depends(get_store)
):
    """
    Today/week/month rollups, goal progress and chart series.
    Recomputed from the payment log on every request.
    """
    snapshot = load_dashboard(store, filter_user=user or None)

    return {
        "success": True,
        "message": "Dashboard retrieved successfully",
        "data": snapshot.to_dict()
    }
