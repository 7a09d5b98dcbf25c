"""
Usage history schemas.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from appvault.schemas.common import generate_id, utcnow


class HistoryItem(BaseModel):
    """
    One app session.

    App fields are a snapshot taken when the session is recorded, so the
    entry survives later catalog edits or removals.
    """

    id: str = Field(default_factory=generate_id)
    app_id: str
    app_name: str
    app_icon: str = ""
    timestamp: datetime = Field(default_factory=utcnow)
    duration_seconds: int = Field(0, ge=0)
