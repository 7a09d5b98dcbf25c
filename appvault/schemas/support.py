"""
Support ticket schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from appvault.schemas.common import generate_id, utcnow


class TicketStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class SupportTicket(BaseModel):
    """A support request. Always created open."""

    id: str = Field(default_factory=generate_id)
    user_id: str
    subject: str
    message: str
    date: datetime = Field(default_factory=utcnow)
    status: TicketStatus = TicketStatus.OPEN
    admin_reply: Optional[str] = None
    replied_at: Optional[datetime] = None
