"""
Domain exceptions.

Every exception carries the HTTP status the API layer answers with.
"""
from fastapi import status


class CarpError(Exception):
    """Base class for domain errors surfaced to API callers."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict:
        detail = {"detail": self.message}
        if self.field:
            detail["field"] = self.field
        return detail


class NotFound(CarpError):
    """Raised when an id does not match any record."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class InvalidInput(CarpError):
    """Raised when a value is outside its allowed domain."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, field: str, message: str):
        super().__init__(f"Invalid {field}: {message}", field=field)


class NoFactorAvailable(CarpError):
    """Raised when no active emission factor covers a vehicle profile."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, vehicle_type: str, fuel_type: str):
        self.vehicle_type = vehicle_type
        self.fuel_type = fuel_type
        super().__init__(
            f"No active emission factor for {vehicle_type} with {fuel_type}"
        )


class ConstraintViolation(CarpError):
    """Raised when a write would break a uniqueness invariant."""

    status_code = status.HTTP_409_CONFLICT


class AuditLogWriteError(CarpError):
    """Raised when an admin log row cannot be stored."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, action: str, original_exception: Exception | None = None):
        self.action = action
        self.original_exception = original_exception
        message = f"Failed to write admin log for {action}"
        if original_exception:
            message += (
                f"\nCaused by: {type(original_exception).__name__}: "
                f"{original_exception}"
            )
        super().__init__(message)


class AdminActionFailed(CarpError):
    """
    Raised when an admin mutation is rolled back.

    The message names only the action; the storage error is chained as the cause.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Admin action {action} failed and was rolled back")
