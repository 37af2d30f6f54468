"""
Application constants following kkb_fastapi pattern.
"""
from decimal import Decimal
from enum import Enum


class ConfigFile:
    """Configuration file paths."""
    PRODUCTION = "production.toml"
    DEVELOPMENT = "development.toml"
    TEST = "test.toml"


class VehicleType(str, Enum):
    """Vehicle categories covered by emission factors."""
    CAR = "car"
    MOTORCYCLE = "motorcycle"
    TRUCK = "truck"
    BUS = "bus"
    VAN = "van"


class FuelType(str, Enum):
    """Fuel categories covered by emission factors."""
    GASOLINE = "gasoline"
    DIESEL = "diesel"
    ELECTRIC = "electric"
    HYBRID = "hybrid"
    LPG = "lpg"
    CNG = "cng"


class Transmission(str, Enum):
    MANUAL = "manual"
    AUTOMATIC = "automatic"
    CVT = "cvt"


class TravelMode(str, Enum):
    """Travel modes a trip can be recorded with."""
    DRIVING = "driving"
    TRANSIT = "transit"
    WALKING = "walking"
    CYCLING = "cycling"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class EmissionsStatus:
    """Trip emission states."""
    CALCULATED = "calculated"
    PENDING = "pending"


class AdminAction(str, Enum):
    """Audited admin actions."""
    USER_CREATED = "user_created"
    USER_UPDATED = "user_updated"
    USER_DELETED = "user_deleted"
    USER_SUSPENDED = "user_suspended"
    EMISSION_FACTOR_CREATED = "emission_factor_created"
    EMISSION_FACTOR_UPDATED = "emission_factor_updated"
    EMISSION_FACTOR_DELETED = "emission_factor_deleted"
    # Reserved for system settings; none is editable through the API yet.
    # Kept so logs written by other tools validate and filter.
    SYSTEM_CONFIG_UPDATED = "system_config_updated"


class TargetType(str, Enum):
    USER = "user"
    EMISSION_FACTOR = "emission_factor"
    SYSTEM = "system"


class AuditPolicy(str, Enum):
    """What happens to an admin mutation when its audit log cannot be written."""
    FAIL_OPEN = "fail_open"
    FAIL_CLOSED = "fail_closed"


# Actions whose mutation is aborted when the audit log write fails
FAIL_CLOSED_ACTIONS = frozenset(
    {
        AdminAction.USER_DELETED,
        AdminAction.SYSTEM_CONFIG_UPDATED,
    }
)

# Fuel types and travel modes counted as eco-friendly on the dashboard
ECO_FUEL_TYPES = frozenset({FuelType.ELECTRIC.value, FuelType.HYBRID.value})
ZERO_EMISSION_MODES = frozenset({TravelMode.WALKING.value, TravelMode.CYCLING.value})

# Transit trips without a vehicle are estimated with the bus/diesel factor
TRANSIT_PROFILE = (VehicleType.BUS.value, FuelType.DIESEL.value)

# "Average gasoline car" factor used as the savings baseline (g CO2/km)
DEFAULT_BASELINE_FACTOR_G_PER_KM = Decimal("120.0")

# Unit conversion constants
GRAMS_PER_KG = Decimal("1000")


class Period(str, Enum):
    """Look-back windows of the analytics reports."""
    WEEK = "7d"
    MONTH = "30d"
    QUARTER = "90d"
    YEAR = "1y"


PERIOD_DAYS = {
    Period.WEEK: 7,
    Period.MONTH: 30,
    Period.QUARTER: 90,
    Period.YEAR: 365,
}


class GroupBy(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class LeaderboardType(str, Enum):
    ECO_FRIENDLY = "eco_friendly"
    CARBON_SAVED = "carbon_saved"


# Users need this many trips to be ranked by their eco-friendly share
MIN_LEADERBOARD_TRIPS = 5

# CO2 one tree absorbs in a year (kg)
CO2_KG_PER_TREE_YEAR = Decimal("25")
