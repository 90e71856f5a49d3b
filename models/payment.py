from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy import Column, Integer, String, DateTime, Enum, DECIMAL
from database import Base
import enum


class PaymentType(str, enum.Enum):
    cash = "cash"
    iban = "iban"  # electronic transfer


@dataclass(frozen=True)
class PaymentRecord:
    """Read-only view of a payment row, the unit the aggregation engine works on."""

    id: object
    amount: Decimal
    payment_type: PaymentType
    user: str
    location: str
    created_at: datetime
    hour: int
    client_ref: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "amount": float(self.amount),
            "payment_type": self.payment_type.value,
            "user": self.user,
            "location": self.location,
            "hour": self.hour,
            "created_at": self.created_at.isoformat(),
            "client_ref": self.client_ref,
        }


class Payment(Base):
    __tablename__ = "payments"

    payment_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_display_name = Column(String(255), nullable=False, index=True)
    amount = Column(DECIMAL(10, 2), nullable=False)
    payment_type = Column(Enum(PaymentType), nullable=False)
    location = Column(String(255), nullable=False, default="Unknown")
    # Hour of day at creation; never recomputed on edit
    hour = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, index=True)
    # Temporary id the client showed before the server confirmed the payment
    client_ref = Column(String(64), nullable=True, unique=True)

    def to_record(self) -> PaymentRecord:
        return PaymentRecord(
            id=self.payment_id,
            amount=Decimal(self.amount),
            payment_type=PaymentType(self.payment_type),
            user=self.user_display_name,
            location=self.location,
            created_at=self.created_at,
            hour=self.hour,
            client_ref=self.client_ref,
        )
