from .distance import haversine_distance, NOISE_FLOOR_KM
from .fuel import estimate_fuel, FuelEstimate
from .goals import GoalProgress, calculate_percentage
from .dates import today_start, today_end, week_start, month_start
from .responses import error_response

__all__ = [
    "haversine_distance",
    "NOISE_FLOOR_KM",
    "estimate_fuel",
    "FuelEstimate",
    "GoalProgress",
    "calculate_percentage",
    "today_start",
    "today_end",
    "week_start",
    "month_start",
    "error_response",
]
