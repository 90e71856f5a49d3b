# utils/notification_helper.py
# Helper to create notifications for payment and goal events

import logging
from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session
from models.notification import Notification, NotificationType
from models.user import User
from utils.cache import cache, notifications_key

logger = logging.getLogger(__name__)


def create_notification(db: Session, recipient: str, notification_type: NotificationType, title: str, message: str):
    """Create a notification for a user"""
    notif = Notification(
        recipient=recipient,
        notification_type=notification_type,
        title=title,
        message=message,
    )
    db.add(notif)
    db.commit()
    cache.delete_pattern(notifications_key(recipient, "*"))
    return notif


def _recipients(db: Session, exclude_display_name: str = None, wants: str = "notify_new_payment") -> List[User]:
    query = db.query(User).filter(getattr(User, wants) == True)  # noqa: E712
    if exclude_display_name:
        query = query.filter(User.display_name != exclude_display_name)
    return query.all()


def notify_new_payment(db: Session, sender: str, amount: Decimal, location: str) -> int:
    """Tell every other driver that a payment was recorded"""
    sent = 0
    for user in _recipients(db, exclude_display_name=sender, wants="notify_new_payment"):
        create_notification(
            db=db,
            recipient=user.username,
            notification_type=NotificationType.new_payment,
            title="New payment",
            message=f"{sender} recorded {float(amount):.2f} at {location}",
        )
        sent += 1
    return sent


def notify_goal_reached(db: Session, total: Decimal, target: Decimal) -> int:
    """Tell every driver that the shared daily goal was reached"""
    sent = 0
    for user in _recipients(db, wants="notify_goal_reached"):
        create_notification(
            db=db,
            recipient=user.username,
            notification_type=NotificationType.goal_reached,
            title="Daily goal reached!",
            message=f"Today's earnings hit {float(total):.2f} of the {float(target):.2f} goal",
        )
        sent += 1
    logger.info(f"Daily goal reached ({total} / {target}), notified {sent} users")
    return sent


def crossed_goal(before: Decimal, after: Decimal, target: Decimal) -> bool:
    """True only for the payment that moves the total from below to at/above the target"""
    return target > 0 and before < target <= after
