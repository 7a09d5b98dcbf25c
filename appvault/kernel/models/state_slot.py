"""
Durable slot table: one row per persisted collection.
"""

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from appvault.kernel.models.base import Base, TimestampMixin


class StateSlot(Base, TimestampMixin):
    """A single key of the persisted key-value store."""

    __tablename__ = "state_slots"

    key: Mapped[str] = mapped_column(
        String(128),
        primary_key=True,
    )
    value: Mapped[Any] = mapped_column(
        JSON,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<StateSlot {self.key}>"
