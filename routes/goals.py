import logging
from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from services.store import EarningsStore, get_store
from utils.goals import personal_daily_target

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/goals", tags=["Goals"])


class UpdateGoalRequest(BaseModel):
    daily_goal: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)


@router.get("/daily")
def get_daily_goal(store: EarningsStore = Depends(get_store)):
    """Shared daily goal and each driver's share of it"""

    daily_goal = store.get_daily_goal()
    user_count = len(store.list_users())
    personal = personal_daily_target(daily_goal, user_count)

    return {
        "success": True,
        "message": "Daily goal retrieved successfully",
        "data": {
            "daily_goal": float(daily_goal),
            "weekly_goal": float(daily_goal * 7),
            "personal_daily_goal": personal,
            "personal_weekly_goal": personal * 7,
            "user_count": user_count
        }
    }


@router.put("/daily")
def update_daily_goal(
    request: UpdateGoalRequest,
    store: EarningsStore = Depends(get_store)
):
    """Change the shared daily goal"""

    store.set_daily_goal(request.daily_goal)
    logger.info(f"Daily goal set to {request.daily_goal}")

    return {
        "success": True,
        "message": "Daily goal updated successfully",
        "data": {"daily_goal": float(request.daily_goal)}
    }
