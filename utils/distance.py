# utils/distance.py
# Great-circle distance between two GPS coordinates
# Used by the trip tracker to accumulate driven distance

import math

EARTH_RADIUS_KM = 6371

# Movements at or below this distance (5 m) are treated as GPS jitter
NOISE_FLOOR_KM = 0.005


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate straight-line distance between two GPS points (in km).
    Symmetric, and 0 for identical points.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def is_significant_move(distance_km: float) -> bool:
    """True when a move is larger than the GPS noise floor"""
    return distance_km > NOISE_FLOOR_KM
