from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from models.notification import Notification
from utils.cache import cache, notifications_key

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/{username}")
def get_notifications(username: str, db: Session = Depends(get_db)):
    """Get a user's latest notifications"""

    cache_key = notifications_key(username, "list")
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    notifications = db.query(Notification) \
        .filter(Notification.recipient == username) \
        .order_by(Notification.created_at.desc(), Notification.notification_id.desc()) \
        .limit(50) \
        .all()

    result = {
        "success": True,
        "message": "Notifications retrieved successfully",
        "data": [
            {
                "notification_id": n.notification_id,
                "notification_type": n.notification_type.value,
                "title": n.title,
                "message": n.message,
                "is_read": n.is_read,
                "created_at": n.created_at.isoformat() if n.created_at else None
            }
            for n in notifications
        ]
    }
    cache.set(cache_key, result, ttl=10)
    return result


@router.get("/{username}/unread-count")
def get_unread_count(username: str, db: Session = Depends(get_db)):
    """Get count of unread notifications"""

    cache_key = notifications_key(username, "unread")
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    count = db.query(Notification) \
        .filter(
            Notification.recipient == username,
            Notification.is_read == False  # noqa: E712
        ) \
        .count()

    result = {
        "success": True,
        "message": "Unread count retrieved successfully",
        "data": {
            "unread_count": count
        }
    }
    cache.set(cache_key, result, ttl=10)
    return result


@router.patch("/{notification_id}/read")
def mark_as_read(notification_id: int, db: Session = Depends(get_db)):
    """Mark notification as read"""

    notification = db.query(Notification).filter(
        Notification.notification_id == notification_id
    ).first()

    if not notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )

    notification.is_read = True
    notification.read_at = datetime.now()
    db.commit()
    cache.delete_pattern(notifications_key(notification.recipient, "*"))

    return {
        "success": True,
        "message": "Notification marked as read"
    }
