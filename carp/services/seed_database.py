"""
Database seeding service for loading the reference catalogue and sample data.

Seeds, in order: the emission factor catalogue, the admin user, a sample
vehicle for the admin and a handful of sample trips. Every step skips rows
that already exist, so seeding can be re-run safely.

Usage:
    from carp.services.seed_database import DatabaseSeeder

    async with DatabaseSeeder() as seeder:
        await seeder.seed_all(clear_existing=True)
"""

import csv
import logging
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from carp.database.repositories import (
    EmissionFactorRepository,
    TripRepository,
    UserRepository,
    VehicleRepository,
)
from carp.database.schemas import UserDBModel
from carp.database.session_manager.db_session import Database
from carp.pydantic_models.trip import TripCreate
from carp.services.trips.trip_service import TripService
from carp.utils.constants import UserRole, UserStatus

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "seed_data"

ADMIN_USER = {
    "email": "admin@carbonplanner.com",
    "first_name": "Admin",
    "last_name": "User",
    "role": UserRole.ADMIN.value,
    "status": UserStatus.ACTIVE.value,
}

SAMPLE_VEHICLE = {
    "name": "Toyota Camry 2020",
    "make": "Toyota",
    "model": "Camry",
    "year": 2020,
    "vehicle_type": "car",
    "fuel_type": "gasoline",
    "fuel_efficiency": Decimal("12.0"),
    "engine_size": Decimal("2.5"),
    "transmission": "automatic",
    "is_default": True,
    "is_active": True,
}


class DatabaseSeeder:
    """Service for seeding the database from the CSV files in seed_data/."""

    def __init__(
        self,
        session: AsyncSession | None = None,
        data_dir: str | Path = DEFAULT_DATA_DIR,
    ):
        """
        Initialize the database seeder.

        Args:
            session: Optional async database session. If not provided, will create one.
            data_dir: Directory containing CSV files (default: carp/seed_data)
        """
        self._session = session
        self._external_session = session is not None
        self.data_dir = Path(data_dir)

        if not self.data_dir.exists():
            raise ValueError(f"Data directory not found: {self.data_dir}")

    async def __aenter__(self):
        """Context manager entry."""
        if not self._external_session:
            db = Database()
            self._session = await db.__aenter__()
            self._db_context = db
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        if not self._external_session and hasattr(self, "_db_context"):
            await self._db_context.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def session(self) -> AsyncSession:
        """Get the database session."""
        if not self._session:
            raise RuntimeError("Session not initialized. Use as context manager.")
        return self._session

    async def seed_all(
        self,
        clear_existing: bool = False,
        skip_samples: bool = False,
    ) -> dict[str, Any]:
        """
        Seed all data.

        Args:
            clear_existing: If True, clear existing data before seeding
            skip_samples: If True, only seed emission factors and the admin user

        Returns:
            Dictionary with seeding statistics
        """
        logger.info("Starting database seeding")

        stats = {
            "emission_factors": 0,
            "users": 0,
            "vehicles": 0,
            "trips": 0,
            "errors": [],
        }

        try:
            if clear_existing:
                await self._clear_existing_data()

            stats["emission_factors"] = await self.seed_emission_factors()
            admin, stats["users"] = await self.seed_admin_user()
            await self.session.commit()

            if not skip_samples:
                stats["vehicles"] = await self.seed_sample_vehicle(admin)
                await self.session.commit()
                trips, errors = await self.seed_sample_trips(admin)
                stats["trips"] = trips
                stats["errors"].extend(errors)

            logger.info(f"Database seeding completed: {stats}")
            return stats

        except Exception as e:
            logger.error(f"Error during database seeding: {e}", exc_info=True)
            await self.session.rollback()
            raise

    async def _clear_existing_data(self):
        """Clear all existing data."""
        logger.info("Clearing existing data")

        # Use text() for raw SQL statements (respecting relationships order)
        await self.session.execute(text("DELETE FROM admin_logs"))
        await self.session.execute(text("DELETE FROM trips"))
        await self.session.execute(text("DELETE FROM user_preferences"))
        await self.session.execute(text("DELETE FROM vehicles"))
        await self.session.execute(text("DELETE FROM emission_factors"))
        await self.session.execute(text("DELETE FROM users"))

        await self.session.commit()
        # raw deletes bypass the identity map
        self.session.expunge_all()
        logger.info("Existing data cleared")

    async def seed_emission_factors(self) -> int:
        """
        Load emission factors from emission_factors.csv.

        Returns:
            Number of emission factors created
        """
        csv_file = self.data_dir / "emission_factors.csv"
        if not csv_file.exists():
            logger.warning(f"File not found: {csv_file}")
            return 0

        logger.info(f"Loading emission factors from {csv_file}")
        repo = EmissionFactorRepository(self.session)
        count = 0

        with open(csv_file, "r") as f:
            reader = csv.DictReader(f)
            for row in reader:
                existing = await repo.get_by_profile_and_description(
                    row["vehicle_type"], row["fuel_type"], row["description"]
                )
                if existing is not None:
                    continue

                await repo.create(
                    vehicle_type=row["vehicle_type"],
                    fuel_type=row["fuel_type"],
                    factor_g_per_km=Decimal(row["factor_g_per_km"]),
                    description=row["description"],
                    source=row["source"] or None,
                    is_active=True,
                )
                count += 1

        logger.info(f"Created {count} emission factors")
        return count

    async def seed_admin_user(self) -> tuple[UserDBModel, int]:
        """
        Create the admin user unless it exists.

        Returns:
            Tuple of (admin user, number of users created)
        """
        repo = UserRepository(self.session)
        admin = await repo.get_by_email(ADMIN_USER["email"])
        if admin is not None:
            return admin, 0

        admin = await repo.create(**ADMIN_USER)
        logger.info(f"Created admin user {admin.email}")
        return admin, 1

    async def seed_sample_vehicle(self, admin: UserDBModel) -> int:
        """Give the admin a default sample vehicle unless they have one."""
        repo = VehicleRepository(self.session)
        if await repo.list_for_user(admin.id, include_inactive=True):
            logger.info("Sample vehicles already exist, skipping")
            return 0

        await repo.create(user_id=admin.id, **SAMPLE_VEHICLE)
        logger.info("Created sample vehicle")
        return 1

    async def seed_sample_trips(self, admin: UserDBModel) -> tuple[int, list[str]]:
        """
        Record the sample trips from sample_trips.csv for the admin.

        Emissions are computed by the trip service like any other trip.

        Returns:
            Tuple of (trips created, error messages)
        """
        csv_file = self.data_dir / "sample_trips.csv"
        if not csv_file.exists():
            logger.warning(f"File not found: {csv_file}")
            return 0, []

        trips = TripRepository(self.session)
        if await trips.count(filters={"user_id": admin.id}):
            logger.info("Sample trips already exist, skipping")
            return 0, []

        vehicle = await VehicleRepository(self.session).get_default_for_user(admin.id)
        service = TripService(self.session)
        count = 0
        errors = []

        with open(csv_file, "r") as f:
            reader = csv.DictReader(f)
            for row in reader:
                try:
                    trip = await service.create_trip(
                        admin.id,
                        TripCreate(
                            origin=row["origin"],
                            destination=row["destination"],
                            origin_lat=Decimal(row["origin_lat"]),
                            origin_lng=Decimal(row["origin_lng"]),
                            destination_lat=Decimal(row["destination_lat"]),
                            destination_lng=Decimal(row["destination_lng"]),
                            distance_km=Decimal(row["distance_km"]),
                            duration_minutes=int(row["duration_minutes"]),
                            travel_mode=row["travel_mode"],
                            vehicle_id=(
                                vehicle.id
                                if vehicle is not None and row["uses_vehicle"] == "yes"
                                else None
                            ),
                            is_saved=True,
                            planned_date=datetime.fromisoformat(row["planned_date"]),
                        ),
                    )
                    created_at = datetime.fromisoformat(row["created_at"])
                    await trips.update(trip.id, created_at=created_at, updated_at=created_at)
                    await self.session.commit()
                    count += 1
                except Exception as e:
                    await self.session.rollback()
                    logger.warning(f"Failed to create sample trip from row {row}: {e}")
                    errors.append(f"{row['origin']} -> {row['destination']}: {e}")

        logger.info(f"Created {count} sample trips")
        return count, errors
