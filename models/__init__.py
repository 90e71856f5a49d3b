from .user import User
from .payment import Payment, PaymentRecord, PaymentType
from .setting import AppSetting
from .trip import TripHistory, TripSummary, FuelSetting
from .notification import Notification, NotificationType

__all__ = [
    "User",
    "Payment",
    "PaymentRecord",
    "PaymentType",
    "AppSetting",
    "TripHistory",
    "TripSummary",
    "FuelSetting",
    "Notification",
    "NotificationType",
]
