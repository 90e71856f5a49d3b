# utils/fuel.py
# Fuel usage and cost for a driven distance

from dataclasses import dataclass

# Accepted range for a driver's consumption setting (L/100km)
MIN_CONSUMPTION_PER_100KM = 3.0
MAX_CONSUMPTION_PER_100KM = 20.0


@dataclass(frozen=True)
class FuelEstimate:
    fuel_used_liters: float
    fuel_cost: float

    def to_dict(self) -> dict:
        return {
            "fuel_used_liters": round(self.fuel_used_liters, 2),
            "fuel_cost": round(self.fuel_cost, 2),
        }


def estimate_fuel(
    total_distance_km: float,
    consumption_per_100km: float,
    price_per_liter: float,
) -> FuelEstimate:
    """
    Liters burned over a distance and what they cost.

    liters = km / 100 * consumption
    cost   = liters * price
    """
    fuel_used = (total_distance_km / 100) * consumption_per_100km
    return FuelEstimate(fuel_used_liters=fuel_used, fuel_cost=fuel_used * price_per_liter)
