"""
User account schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from appvault.schemas.common import utcnow


class ThemePreference(str, Enum):
    """UI theme stored with the account."""
    LIGHT = "light"
    DARK = "dark"


class SubscriptionStatus(str, Enum):
    """Premium subscription state."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class User(BaseModel):
    """A roster entry. The Current User is a copy of one of these."""

    id: str
    name: str
    email: str
    points: int = 0
    is_premium: bool = False
    avatar: str = ""
    is_admin: bool = False
    joined_date: datetime = Field(default_factory=utcnow)
    theme_preference: ThemePreference = ThemePreference.DARK
    subscription_status: SubscriptionStatus = SubscriptionStatus.INACTIVE
    subscription_date: Optional[datetime] = None
    subscription_id: Optional[str] = None


class UserUpdate(BaseModel):
    """Profile fields a user may change about themselves."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, min_length=3, max_length=255)
    avatar: Optional[str] = None
    theme_preference: Optional[ThemePreference] = None
