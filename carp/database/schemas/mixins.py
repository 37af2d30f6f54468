"""
Shared column mixins.
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer


class TimestampMixin:
    """Integer primary key plus created/updated timestamps."""

    id = Column(Integer, primary_key=True, autoincrement=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )
