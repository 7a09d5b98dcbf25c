"""
Point ledger schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from appvault.schemas.common import generate_id, utcnow


class TransactionType(str, Enum):
    """Direction of a ledger entry. Amounts are always stored positive."""
    EARNED = "earned"
    REDEEMED = "redeemed"


class PointTransaction(BaseModel):
    """One ledger entry."""

    id: str = Field(default_factory=generate_id)
    user_id: Optional[str] = None
    date: datetime = Field(default_factory=utcnow)
    amount: int = Field(..., gt=0)
    reason: str
    type: TransactionType


class PointTotals(BaseModel):
    """Earned / redeemed rollup for one user."""

    user_id: str
    balance: int
    total_earned: int = 0
    total_redeemed: int = 0
