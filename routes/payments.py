import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status, Query
from pydantic import BaseModel, Field

from models.payment import PaymentType
from services.store import EarningsStore, get_store
from utils.dates import today_end, today_start
from utils.notification_helper import crossed_goal, notify_goal_reached, notify_new_payment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


# Schemas
class CreatePaymentRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    payment_type: PaymentType
    user: str = Field(..., min_length=1, max_length=255)
    location: str = Field("", max_length=255)
    # Temporary id of the client's optimistic row; the stored payment replaces it
    client_ref: Optional[str] = Field(None, min_length=1, max_length=64)


class UpdatePaymentRequest(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    payment_type: Optional[PaymentType] = None
    location: Optional[str] = Field(None, max_length=255)


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_payment(
    request: CreatePaymentRequest,
    response: Response,
    store: EarningsStore = Depends(get_store)
):
    """Record a passenger payment"""

    if request.client_ref:
        existing = store.find_by_client_ref(request.client_ref)
        if existing:
            # Resent add; answer with the payment already stored
            response.status_code = status.HTTP_200_OK
            return {
                "success": True,
                "message": "Payment already recorded",
                "data": {
                    "payment": existing.to_dict(),
                    "client_ref": request.client_ref,
                }
            }

    record = store.insert_payment(
        amount=request.amount,
        payment_type=request.payment_type,
        user=request.user,
        location=request.location,
        client_ref=request.client_ref,
    )
    logger.info(f"Payment {record.id} recorded: {record.amount} {record.payment_type.value} by {record.user}")

    notify_new_payment(store.db, sender=record.user, amount=record.amount, location=record.location)

    target = store.get_daily_goal()
    total_today = store.total_between(today_start(record.created_at), today_end(record.created_at))
    if crossed_goal(total_today - record.amount, total_today, target):
        notify_goal_reached(store.db, total=total_today, target=target)

    return {
        "success": True,
        "message": "Payment created successfully",
        "data": {
            "payment": record.to_dict(),
            "client_ref": request.client_ref,
        }
    }


@router.get("/today")
def get_today_payments(
    user: Optional[str] = Query(None, description="Only this driver's payments"),
    store: EarningsStore = Depends(get_store)
):
    """Today's payments, newest first"""

    now = datetime.now()
    payments = [
        p for p in store.list_payments(today_start(now), user=user)
        if p.created_at <= today_end(now)
    ]

    return {
        "success": True,
        "message": "Payments retrieved successfully",
        "data": [p.to_dict() for p in payments]
    }


@router.put("/{payment_id}")
def update_payment(
    payment_id: int,
    request: UpdatePaymentRequest,
    store: EarningsStore = Depends(get_store)
):
    """Edit amount, type or location; user and time stay as recorded"""

    updated = store.update_payment(
        payment_id,
        amount=request.amount,
        payment_type=request.payment_type,
        location=request.location,
    )
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found"
        )

    return {
        "success": True,
        "message": "Payment updated successfully",
        "data": {"payment_id": payment_id}
    }


@router.delete("/{payment_id}")
def delete_payment(
    payment_id: int,
    store: EarningsStore = Depends(get_store)
):
    """Delete a payment"""

    if not store.delete_payment(payment_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found"
        )

    return {
        "success": True,
        "message": "Payment deleted successfully",
        "data": {"payment_id": payment_id}
    }
