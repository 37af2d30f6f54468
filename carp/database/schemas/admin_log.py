"""
AdminLog SQLAlchemy model.
"""
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String

from carp.database import Base


class AdminLogDBModel(Base):
    """
    Append-only audit trail of admin mutations.

    old_data / new_data hold the target's state before and after the action;
    either is NULL for creations and deletions.
    """

    __tablename__ = "admin_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    admin_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    action = Column(String(50), nullable=False)
    target_type = Column(String(50), nullable=True, comment="user, emission_factor or system")
    target_id = Column(Integer, nullable=True)
    old_data = Column(JSON, nullable=True)
    new_data = Column(JSON, nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_admin_logs_admin_created", "admin_id", "created_at"),
        Index("ix_admin_logs_action_created", "action", "created_at"),
        {"comment": "Audit log of admin actions"},
    )

    def __repr__(self):
        return f"<AdminLogDBModel: {self.action} {self.target_type}#{self.target_id}>"
