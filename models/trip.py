"""
models/trip.py - Trip history and per-driver fuel settings
Only trip summaries are persisted; raw GPS coordinates never reach the database.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional
from sqlalchemy import Column, Integer, String, Float, DateTime
from sqlalchemy.sql import func
from database import Base


@dataclass(frozen=True)
class TripSummary:
    """Finished trip as stored in trip_history"""

    username: str
    start_time: datetime
    end_time: datetime
    total_distance_km: float
    duration_minutes: float
    fuel_used_liters: float
    fuel_cost: float
    consumption_per_100km: float
    fuel_price: float
    id: Optional[int] = None

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "username": self.username,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "total_distance_km": round(self.total_distance_km, 3),
            "duration_minutes": round(self.duration_minutes, 1),
            "fuel_used_liters": round(self.fuel_used_liters, 2),
            "fuel_cost": round(self.fuel_cost, 2),
            "consumption_per_100km": self.consumption_per_100km,
            "fuel_price": self.fuel_price,
        }


class TripHistory(Base):
    __tablename__ = "trip_history"

    trip_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(100), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    total_distance_km = Column(Float, nullable=False)
    duration_minutes = Column(Float, nullable=False, default=0)
    fuel_used_liters = Column(Float, nullable=False)
    fuel_cost = Column(Float, nullable=False)
    consumption_per_100km = Column(Float, nullable=False)
    fuel_price = Column(Float, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), index=True)

    def to_summary(self) -> TripSummary:
        return TripSummary(
            id=self.trip_id,
            username=self.username,
            start_time=self.start_time,
            end_time=self.end_time,
            total_distance_km=self.total_distance_km,
            duration_minutes=self.duration_minutes,
            fuel_used_liters=self.fuel_used_liters,
            fuel_cost=self.fuel_cost,
            consumption_per_100km=self.consumption_per_100km,
            fuel_price=self.fuel_price,
        )


class FuelSetting(Base):
    __tablename__ = "fuel_settings"

    username = Column(String(100), primary_key=True)
    consumption_per_100km = Column(Float, nullable=False, default=7.0)
    # Fixed price chosen by the driver; None means "use the live price"
    fuel_price = Column(Float, nullable=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
