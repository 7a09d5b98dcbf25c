"""
Bug report schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from appvault.schemas.common import generate_id, utcnow


class BugReportStatus(str, Enum):
    """Lifecycle of a bug report. APPROVED and REJECTED are terminal."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not BugReportStatus.PENDING


class BugReport(BaseModel):
    """A user-submitted bug report with its reward frozen at submission."""

    id: str = Field(default_factory=generate_id)
    user_id: str
    user_name: str
    title: Optional[str] = None
    description: str
    contact: Optional[str] = None
    status: BugReportStatus = BugReportStatus.PENDING
    date: datetime = Field(default_factory=utcnow)
    reward_points: int = 50
    # Set on approval only; a rejection changes nothing but the status
    resolved_at: Optional[datetime] = None
