"""
API routers module.
"""
from carp.api.admin import router as admin_router
from carp.api.analytics import router as analytics_router
from carp.api.factors import router as factors_router
from carp.api.trips import router as trips_router
from carp.api.users import router as users_router
from carp.api.vehicles import router as vehicles_router

__all__ = [
    "admin_router",
    "analytics_router",
    "factors_router",
    "trips_router",
    "users_router",
    "vehicles_router",
]
