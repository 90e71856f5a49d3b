from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from fastapi import Depends
from sqlalchemy.orm import Session
from sqlalchemy import func

from config import settings
from database import get_db
from models.payment import Payment, PaymentRecord, PaymentType
from models.setting import AppSetting
from models.trip import TripHistory, TripSummary, FuelSetting
from models.user import User

DAILY_GOAL_KEY = "daily_goal"

# Fields a payment edit may touch; user, created_at and hour stay as created
EDITABLE_PAYMENT_FIELDS = ("amount", "payment_type", "location")


class EarningsStore:
    """Append/query store behind the dashboard, trip tracker and goal editor.

    Errors from the database are not caught here; callers decide what to show.
    """

    def __init__(self, db: Session):
        self.db = db

    # ── Payments ───────────────────────────────────────────────

    def list_payments(self, since: datetime, user: Optional[str] = None) -> List[PaymentRecord]:
        query = self.db.query(Payment).filter(Payment.created_at >= since)
        if user:
            query = query.filter(Payment.user_display_name == user)
        rows = query.order_by(Payment.created_at.desc()).all()
        return [row.to_record() for row in rows]

    def insert_payment(
        self,
        amount: Decimal,
        payment_type: PaymentType,
        user: str,
        location: str = "",
        created_at: Optional[datetime] = None,
        client_ref: Optional[str] = None,
    ) -> PaymentRecord:
        created_at = created_at or datetime.now()
        payment = Payment(
            user_display_name=user,
            amount=amount,
            payment_type=payment_type,
            location=location.strip() or "Unknown",
            hour=created_at.hour,
            created_at=created_at,
            client_ref=client_ref,
        )
        self.db.add(payment)
        self.db.commit()
        self.db.refresh(payment)
        return payment.to_record()

    def find_by_client_ref(self, client_ref: str) -> Optional[PaymentRecord]:
        payment = self.db.query(Payment).filter(Payment.client_ref == client_ref).first()
        return payment.to_record() if payment else None

    def update_payment(self, payment_id: int, **changes) -> bool:
        payment = self.db.query(Payment).filter(Payment.payment_id == payment_id).first()
        if not payment:
            return False

        for field in EDITABLE_PAYMENT_FIELDS:
            value = changes.get(field)
            if value is None:
                continue
            if field == "location":
                value = value.strip() or "Unknown"
            setattr(payment, field, value)

        self.db.commit()
        return True

    def delete_payment(self, payment_id: int) -> bool:
        payment = self.db.query(Payment).filter(Payment.payment_id == payment_id).first()
        if not payment:
            return False
        self.db.delete(payment)
        self.db.commit()
        return True

    def total_between(self, start: datetime, end: datetime) -> Decimal:
        total = self.db.query(func.sum(Payment.amount)).filter(
            Payment.created_at >= start,
            Payment.created_at <= end,
        ).scalar()
        return Decimal(total or 0)

    # ── Goal ───────────────────────────────────────────────────

    def get_daily_goal(self) -> Decimal:
        row = self.db.query(AppSetting).filter(AppSetting.key == DAILY_GOAL_KEY).first()
        if not row:
            return Decimal(settings.DEFAULT_DAILY_GOAL)
        return Decimal(row.value)

    def set_daily_goal(self, value: Decimal) -> None:
        row = self.db.query(AppSetting).filter(AppSetting.key == DAILY_GOAL_KEY).first()
        if row:
            row.value = str(value)
        else:
            self.db.add(AppSetting(key=DAILY_GOAL_KEY, value=str(value)))
        self.db.commit()

    # ── Users ──────────────────────────────────────────────────

    def list_users(self) -> List[Dict[str, str]]:
        users = self.db.query(User).order_by(User.user_id.asc()).all()
        return [{"username": u.username, "display_name": u.display_name} for u in users]

    def get_user(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def add_user(self, username: str, display_name: str) -> User:
        user = User(username=username, display_name=display_name)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    # ── Trips & fuel ───────────────────────────────────────────

    def save_trip_summary(self, summary: TripSummary) -> TripSummary:
        row = TripHistory(
            username=summary.username,
            start_time=summary.start_time,
            end_time=summary.end_time,
            total_distance_km=summary.total_distance_km,
            duration_minutes=summary.duration_minutes,
            fuel_used_liters=summary.fuel_used_liters,
            fuel_cost=summary.fuel_cost,
            consumption_per_100km=summary.consumption_per_100km,
            fuel_price=summary.fuel_price,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row.to_summary()

    def list_trips(self, username: str, limit: int = 10) -> List[TripSummary]:
        rows = (
            self.db.query(TripHistory)
            .filter(TripHistory.username == username)
            .order_by(TripHistory.start_time.desc())
            .limit(limit)
            .all()
        )
        return [row.to_summary() for row in rows]

    def get_fuel_settings(self, username: str) -> FuelSetting:
        """Stored settings, or unsaved defaults when the driver never set any"""
        row = self.db.query(FuelSetting).filter(FuelSetting.username == username).first()
        if row:
            return row
        return FuelSetting(
            username=username,
            consumption_per_100km=settings.DEFAULT_CONSUMPTION_PER_100KM,
            fuel_price=None,
        )

    def save_fuel_settings(
        self,
        username: str,
        consumption_per_100km: float,
        fuel_price: Optional[float] = None,
    ) -> FuelSetting:
        row = self.db.query(FuelSetting).filter(FuelSetting.username == username).first()
        if not row:
            row = FuelSetting(username=username)
            self.db.add(row)
        row.consumption_per_100km = consumption_per_100km
        row.fuel_price = fuel_price
        self.db.commit()
        self.db.refresh(row)
        return row


# Dependency for FastAPI routes
def get_store(db: Session = Depends(get_db)) -> EarningsStore:
    return EarningsStore(db)
