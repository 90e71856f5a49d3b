from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from services.store import EarningsStore, get_store
from utils.cache import cache, users_key

router = APIRouter(prefix="/users", tags=["Users"])


# Schemas
class CreateUserRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    display_name: str = Field(..., min_length=1, max_length=255)


class NotificationSettingsRequest(BaseModel):
    new_payment: Optional[bool] = None
    goal_reached: Optional[bool] = None


@router.get("/")
def list_users(store: EarningsStore = Depends(get_store)):
    """All registered drivers"""

    cached = cache.get(users_key())
    if cached is not None:
        return cached

    result = {
        "success": True,
        "message": "Users retrieved successfully",
        "data": store.list_users()
    }
    cache.set(users_key(), result, ttl=60)
    return result


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_user(
    request: CreateUserRequest,
    store: EarningsStore = Depends(get_store)
):
    """Register a driver"""

    if store.get_user(request.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already in use"
        )

    user = store.add_user(request.username, request.display_name)
    cache.delete(users_key())

    return {
        "success": True,
        "message": "User created successfully",
        "data": {
            "user_id": user.user_id,
            "username": user.username,
            "display_name": user.display_name
        }
    }


@router.put("/{username}/notification-settings")
def update_notification_settings(
    username: str,
    request: NotificationSettingsRequest,
    store: EarningsStore = Depends(get_store)
):
    """Turn payment / goal notifications on or off"""

    user = store.get_user(username)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    if request.new_payment is not None:
        user.notify_new_payment = request.new_payment
    if request.goal_reached is not None:
        user.notify_goal_reached = request.goal_reached

    store.db.commit()

    return {
        "success": True,
        "message": "Notification settings updated successfully",
        "data": {
            "new_payment": user.notify_new_payment,
            "goal_reached": user.notify_goal_reached
        }
    }
