"""
Repository layer for database operations.
"""
from carp.database.repositories.admin_log import AdminLogRepository
from carp.database.repositories.base import BaseRepository
from carp.database.repositories.emission_factor import EmissionFactorRepository
from carp.database.repositories.trip import TripRepository
from carp.database.repositories.user import UserRepository
from carp.database.repositories.user_preferences import UserPreferencesRepository
from carp.database.repositories.vehicle import VehicleRepository

__all__ = [
    "AdminLogRepository",
    "BaseRepository",
    "EmissionFactorRepository",
    "TripRepository",
    "UserPreferencesRepository",
    "UserRepository",
    "VehicleRepository",
]
