"""
User SQLAlchemy model.
"""
from sqlalchemy import Column, DateTime, String

from carp.database import Base
from carp.database.schemas.mixins import TimestampMixin
from carp.utils.constants import UserRole, UserStatus


class UserDBModel(Base, TimestampMixin):
    """
    Application user.

    Root aggregate for vehicles, trips and preferences, which are removed
    with the user through ON DELETE CASCADE.
    """

    __tablename__ = "users"

    email = Column(String(255), nullable=False, unique=True, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)

    role = Column(
        String(20),
        nullable=False,
        default=UserRole.USER.value,
        comment="user or admin",
    )

    status = Column(
        String(20),
        nullable=False,
        default=UserStatus.ACTIVE.value,
        index=True,
        comment="active, inactive or suspended",
    )

    last_login_at = Column(DateTime, nullable=True)

    __table_args__ = ({"comment": "Registered users"},)

    def __repr__(self):
        return f"<UserDBModel: {self.email} ({self.role})>"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value
