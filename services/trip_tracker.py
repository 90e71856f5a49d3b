"""
services/trip_tracker.py - Live GPS trip tracking

State machine: idle -> tracking <-> paused -> idle (finish).
Invalid transitions are rejected (False / None) and leave the state untouched.
Samples are handled one at a time; callers serialize delivery (the event loop).
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

from services.position_feed import PositionErrorCause, PositionFeed, PositionSample, Subscription
from utils.distance import haversine_distance, is_significant_move

logger = logging.getLogger(__name__)

MPS_TO_KMH = 3.6

POSITION_ERROR_MESSAGES = {
    PositionErrorCause.permission_denied: "Location permission denied. Please allow it in settings.",
    PositionErrorCause.unavailable: "Location information is unavailable",
    PositionErrorCause.timeout: "Location request timed out",
}
UNSUPPORTED_MESSAGE = "GPS is not supported on this device"


class TripStatus(str, enum.Enum):
    idle = "idle"
    tracking = "tracking"
    paused = "paused"


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float
    timestamp_ms: int

    def to_dict(self) -> Dict:
        return {"lat": self.lat, "lng": self.lng, "timestamp_ms": self.timestamp_ms}


@dataclass(frozen=True)
class TripResult:
    coordinates: List[Coordinate]
    total_distance_km: float
    start_time: datetime
    end_time: datetime
    duration_minutes: float


@dataclass
class TripState:
    is_tracking: bool = False
    is_paused: bool = False
    coordinates: List[Coordinate] = field(default_factory=list)
    total_distance_km: float = 0.0
    current_speed_kmh: float = 0.0
    start_time: Optional[datetime] = None
    paused_duration_ms: float = 0.0
    pause_started_at: Optional[datetime] = None
    error: Optional[str] = None


def _ms_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() * 1000


class TripTracker:
    def __init__(self, source: Optional[PositionFeed], clock: Callable[[], datetime] = datetime.now):
        self.source = source
        self.clock = clock
        self.state = TripState()
        self._anchor: Optional[Coordinate] = None
        self._subscription: Optional[Subscription] = None

    @property
    def status(self) -> TripStatus:
        if not self.state.is_tracking:
            return TripStatus.idle
        return TripStatus.paused if self.state.is_paused else TripStatus.tracking

    # ── Transitions ────────────────────────────────────────────

    def start(self) -> bool:
        if self.status != TripStatus.idle:
            logger.warning("Trip start rejected: a trip is already in progress")
            return False

        if self.source is None or not self.source.available:
            self.state.error = UNSUPPORTED_MESSAGE
            return False

        self.state = TripState(is_tracking=True, start_time=self.clock())
        self._anchor = None
        self._subscription = self.source.subscribe(self._handle_sample, self.on_position_error)
        logger.info("Trip tracking started")
        return True

    def pause(self) -> bool:
        if self.status != TripStatus.tracking:
            logger.warning(f"Trip pause rejected in state {self.status.value}")
            return False
        self.state.pause_started_at = self.clock()
        self.state.is_paused = True
        self.state.current_speed_kmh = 0.0
        return True

    def resume(self) -> bool:
        if self.status != TripStatus.paused:
            logger.warning(f"Trip resume rejected in state {self.status.value}")
            return False
        self.state.paused_duration_ms += _ms_between(self.state.pause_started_at, self.clock())
        self.state.pause_started_at = None
        self.state.is_paused = False
        return True

    def finish(self) -> Optional[TripResult]:
        if self.status == TripStatus.idle:
            logger.warning("Trip finish rejected: no trip in progress")
            return None

        self._release_subscription()
        end_time = self.clock()
        result = TripResult(
            coordinates=list(self.state.coordinates),
            total_distance_km=self.state.total_distance_km,
            start_time=self.state.start_time,
            end_time=end_time,
            duration_minutes=self._active_minutes(end_time),
        )

        self.state = TripState()
        self._anchor = None
        logger.info(
            f"Trip finished: {result.total_distance_km:.3f} km in {result.duration_minutes:.1f} min"
        )
        return result

    def close(self) -> None:
        """Drop any live subscription without producing a result"""
        self._release_subscription()
        self.state = TripState()
        self._anchor = None

    # ── Position stream ────────────────────────────────────────

    def _handle_sample(self, sample: PositionSample) -> None:
        self.on_position_sample(sample.latitude, sample.longitude, sample.speed_mps, sample.timestamp_ms)

    def on_position_sample(
        self,
        lat: float,
        lng: float,
        speed_mps: Optional[float] = None,
        timestamp_ms: Optional[int] = None,
    ) -> bool:
        """Feed one GPS sample; returns True when it was accepted as movement"""
        if self.status != TripStatus.tracking:
            # Paused samples are dropped whole so resuming never counts the gap
            return False

        if timestamp_ms is None:
            timestamp_ms = int(self.clock().timestamp() * 1000)
        coordinate = Coordinate(lat=lat, lng=lng, timestamp_ms=timestamp_ms)

        self.state.current_speed_kmh = speed_mps * MPS_TO_KMH if speed_mps else 0.0
        self.state.error = None

        if self._anchor is None:
            self._accept(coordinate)
            return True

        distance = haversine_distance(self._anchor.lat, self._anchor.lng, lat, lng)
        if not is_significant_move(distance):
            return False

        self._accept(coordinate)
        self.state.total_distance_km += distance
        return True

    def on_position_error(self, cause: PositionErrorCause) -> None:
        self.state.error = POSITION_ERROR_MESSAGES.get(cause, "Could not get location")

    def _accept(self, coordinate: Coordinate) -> None:
        self.state.coordinates.append(coordinate)
        self._anchor = coordinate

    def _release_subscription(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    # ── Read-only projections ──────────────────────────────────

    def _active_minutes(self, at: datetime) -> float:
        paused_ms = self.state.paused_duration_ms
        if self.state.pause_started_at is not None:
            paused_ms += _ms_between(self.state.pause_started_at, at)
        elapsed_ms = _ms_between(self.state.start_time, at) - paused_ms
        return max(0.0, elapsed_ms / 60000)

    def elapsed_minutes(self) -> float:
        if self.status == TripStatus.idle:
            return 0.0
        return self._active_minutes(self.clock())

    def snapshot(self) -> Dict:
        return {
            "status": self.status.value,
            "is_tracking": self.state.is_tracking,
            "is_paused": self.state.is_paused,
            "total_distance_km": round(self.state.total_distance_km, 3),
            "current_speed_kmh": round(self.state.current_speed_kmh, 1),
            "start_time": self.state.start_time.isoformat() if self.state.start_time else None,
            "elapsed_minutes": round(self.elapsed_minutes(), 1),
            "coordinates": [c.to_dict() for c in self.state.coordinates],
            "error": self.state.error,
        }
