from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from services.fuel_price import FuelPriceSource, get_fuel_price_source
from services.store import EarningsStore, get_store
from utils.fuel import MAX_CONSUMPTION_PER_100KM, MIN_CONSUMPTION_PER_100KM, estimate_fuel

router = APIRouter(prefix="/fuel", tags=["Fuel"])


# Schemas
class FuelSettingsRequest(BaseModel):
    consumption_per_100km: float = Field(..., ge=MIN_CONSUMPTION_PER_100KM, le=MAX_CONSUMPTION_PER_100KM)
    fuel_price: Optional[float] = Field(None, gt=0)


class FuelEstimateRequest(BaseModel):
    total_distance_km: float = Field(..., ge=0)
    consumption_per_100km: float = Field(..., ge=MIN_CONSUMPTION_PER_100KM, le=MAX_CONSUMPTION_PER_100KM)
    price_per_liter: float = Field(..., ge=0)


@router.get("/price")
def get_fuel_price(source: FuelPriceSource = Depends(get_fuel_price_source)):
    """Current price per liter (cached for an hour)"""

    quote = source.get_current_price()
    return {
        "success": True,
        "message": "Fuel price retrieved successfully",
        "data": quote.to_dict()
    }


@router.post("/price/refresh")
def refresh_fuel_price(source: FuelPriceSource = Depends(get_fuel_price_source)):
    """Drop the cached price and look it up again"""

    quote = source.get_current_price(force_refresh=True)
    return {
        "success": True,
        "message": "Fuel price refreshed",
        "data": quote.to_dict()
    }


@router.get("/settings/{username}")
def get_fuel_settings(username: str, store: EarningsStore = Depends(get_store)):
    """Driver's consumption and optional fixed price"""

    row = store.get_fuel_settings(username)
    return {
        "success": True,
        "message": "Fuel settings retrieved successfully",
        "data": {
            "username": username,
            "consumption_per_100km": row.consumption_per_100km,
            "fuel_price": row.fuel_price
        }
    }


@router.put("/settings/{username}")
def update_fuel_settings(
    username: str,
    request: FuelSettingsRequest,
    store: EarningsStore = Depends(get_store)
):
    """Save the driver's consumption and optional fixed price"""

    row = store.save_fuel_settings(username, request.consumption_per_100km, request.fuel_price)
    return {
        "success": True,
        "message": "Fuel settings updated successfully",
        "data": {
            "username": username,
            "consumption_per_100km": row.consumption_per_100km,
            "fuel_price": row.fuel_price
        }
    }


@router.post("/estimate")
def estimate(request: FuelEstimateRequest):
    """Liters and cost for a distance"""

    result = estimate_fuel(request.total_distance_km, request.consumption_per_100km, request.price_per_liter)
    return {
        "success": True,
        "message": "Fuel estimate calculated",
        "data": result.to_dict()
    }
