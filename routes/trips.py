"""
routes/trips.py - Live GPS trip tracking (FastAPI)

The driver's device starts a trip, streams position samples, may pause/resume,
and finishes. Only the summary (distance, duration, fuel, cost) is stored.
Handlers are async so the event loop delivers samples to a tracker one by one.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError

from config import settings
from models.trip import TripSummary
from services.fuel_price import FuelPriceSource, get_fuel_price_source
from services.position_feed import PositionErrorCause, PositionSample
from services.store import EarningsStore, get_store
from services.trip_sessions import trip_sessions
from services.trip_tracker import TripStatus, TripTracker
from utils.fuel import estimate_fuel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["Trips"])


# ============================================
# PYDANTIC MODELS
# ============================================

class PositionUpdate(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    speed_mps: Optional[float] = Field(None, ge=0)
    timestamp_ms: Optional[int] = Field(None, ge=0)


class PositionError(BaseModel):
    cause: PositionErrorCause


# ============================================
# HELPER FUNCTIONS
# ============================================

def _status_response(username: str, message: str) -> dict:
    tracker = trip_sessions.get_tracker(username)
    # Drivers that never started a trip read as idle without opening a session
    snapshot = (tracker or TripTracker(source=None)).snapshot()
    return {
        "success": True,
        "message": message,
        "data": snapshot
    }


def _reject(detail: str):
    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)


# ============================================
# TRIP ENDPOINTS
# ============================================

@router.post("/{username}/start")
async def start_trip(username: str):
    """Start tracking a trip for this driver"""

    tracker = trip_sessions.tracker_for(username)
    if tracker.state.is_tracking:
        _reject("A trip is already in progress")

    if not tracker.start():
        # Positioning failures are reported in the state, not raised
        snapshot = tracker.snapshot()
        trip_sessions.discard(username)
        return {
            "success": False,
            "message": snapshot["error"] or "Could not start trip",
            "data": snapshot
        }

    logger.info(f"Trip started for {username}")
    return _status_response(username, "Trip started")


@router.post("/{username}/positions")
async def push_position(username: str, position: PositionUpdate):
    """Deliver one GPS sample to the driver's live trip"""

    delivered = 0
    feed = trip_sessions.get_feed(username)
    if feed is not None:
        delivered = feed.publish(PositionSample(
            latitude=position.latitude,
            longitude=position.longitude,
            speed_mps=position.speed_mps,
            timestamp_ms=position.timestamp_ms,
        ))
    response = _status_response(username, "Position received")
    response["data"]["delivered"] = delivered > 0
    return response


@router.post("/{username}/position-error")
async def report_position_error(username: str, error: PositionError):
    """Device could not get a fix; tracking continues"""

    feed = trip_sessions.get_feed(username)
    if feed is not None:
        feed.publish_error(error.cause)
    return _status_response(username, "Position error recorded")


@router.post("/{username}/pause")
async def pause_trip(username: str):
    tracker = trip_sessions.get_tracker(username)
    if tracker is None or not tracker.pause():
        _reject("No running trip to pause")
    return _status_response(username, "Trip paused")


@router.post("/{username}/resume")
async def resume_trip(username: str):
    tracker = trip_sessions.get_tracker(username)
    if tracker is None or not tracker.resume():
        _reject("No paused trip to resume")
    return _status_response(username, "Trip resumed")


@router.get("/{username}/status")
async def trip_status(username: str):
    """Live distance, speed and elapsed time"""
    return _status_response(username, "Trip status retrieved")


@router.post("/{username}/finish")
async def finish_trip(
    username: str,
    store: EarningsStore = Depends(get_store),
    price_source: FuelPriceSource = Depends(get_fuel_price_source)
):
    """Stop tracking, estimate fuel and store the trip summary"""

    tracker = trip_sessions.get_tracker(username)
    if tracker is None or tracker.status == TripStatus.idle:
        _reject("No trip in progress")

    fuel_settings = store.get_fuel_settings(username)
    fuel_price = fuel_settings.fuel_price
    if fuel_price is None:
        fuel_price = price_source.get_current_price().price

    result = tracker.finish()
    trip_sessions.discard(username)

    fuel = estimate_fuel(result.total_distance_km, fuel_settings.consumption_per_100km, fuel_price)
    summary = TripSummary(
        username=username,
        start_time=result.start_time,
        end_time=result.end_time,
        total_distance_km=result.total_distance_km,
        duration_minutes=result.duration_minutes,
        fuel_used_liters=fuel.fuel_used_liters,
        fuel_cost=fuel.fuel_cost,
        consumption_per_100km=fuel_settings.consumption_per_100km,
        fuel_price=fuel_price,
    )

    # Very short trips are shown but not kept in the history
    saved = False
    save_error = None
    if result.total_distance_km > settings.MIN_SAVED_TRIP_KM:
        try:
            summary = store.save_trip_summary(summary)
            saved = True
        except SQLAlchemyError as e:
            store.db.rollback()
            logger.error(f"Failed to save trip for {username}: {str(e)}")
            save_error = "Trip could not be saved"

    return {
        "success": save_error is None,
        "message": save_error or "Trip finished",
        "data": {
            "summary": summary.to_dict(),
            "saved": saved,
            "error": save_error,
            "coordinates": [c.to_dict() for c in result.coordinates]
        }
    }


@router.get("/{username}/history")
def trip_history(
    username: str,
    limit: int = Query(10, ge=1, le=100),
    store: EarningsStore = Depends(get_store)
):
    """Latest stored trip summaries"""

    trips = store.list_trips(username, limit=limit)
    return {
        "success": True,
        "message": "Trip history retrieved successfully",
        "data": [t.to_dict() for t in trips]
    }
