"""
Notification schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from appvault.schemas.common import generate_id, utcnow


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    """A message produced by a workflow for one user (or everyone when user_id is None)."""

    id: str = Field(default_factory=generate_id)
    user_id: Optional[str] = None
    title: str
    message: str
    date: datetime = Field(default_factory=utcnow)
    read: bool = False
    type: NotificationType = NotificationType.INFO
