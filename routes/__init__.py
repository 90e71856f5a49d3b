from .users import router as users_router
from .payments import router as payments_router
from .goals import router as goals_router
from .dashboard import router as dashboard_router
from .fuel import router as fuel_router
from .trips import router as trips_router
from .notifications import router as notifications_router

__all__ = [
    "users_router",
    "payments_router",
    "goals_router",
    "dashboard_router",
    "fuel_router",
    "trips_router",
    "notifications_router",
]
