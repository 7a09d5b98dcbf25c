"""
SQLAlchemy models backing the persisted key-value store.
"""

from appvault.kernel.models.base import Base, TimestampMixin
from appvault.kernel.models.state_slot import StateSlot

__all__ = [
    "Base",
    "TimestampMixin",
    "StateSlot",
]
