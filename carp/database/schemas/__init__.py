"""
SQLAlchemy database models (schemas).
"""
from carp.database.schemas.admin_log import AdminLogDBModel
from carp.database.schemas.emission_factor import EmissionFactorDBModel
from carp.database.schemas.trip import TripDBModel
from carp.database.schemas.user import UserDBModel
from carp.database.schemas.user_preferences import UserPreferencesDBModel
from carp.database.schemas.vehicle import VehicleDBModel

__all__ = [
    "AdminLogDBModel",
    "EmissionFactorDBModel",
    "TripDBModel",
    "UserDBModel",
    "UserPreferencesDBModel",
    "VehicleDBModel",
]
