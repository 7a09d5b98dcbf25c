"""
Catalog schemas.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Category(str, Enum):
    SOCIAL = "Social"
    GAMES = "Games"
    EDUCATION = "Education"
    UTILITIES = "Utilities"
    PRODUCTIVITY = "Productivity"
    ENTERTAINMENT = "Entertainment"
    FINANCE = "Finance"


class AppRecord(BaseModel):
    """An app in the catalog. url1 is the primary launch link, url2 the failover."""

    id: str
    name: str
    description: str = ""
    icon: str = ""
    category: Category = Category.UTILITIES
    url1: str
    url2: str = ""
    is_premium: bool = False
    rating: float = Field(0.0, ge=0.0, le=5.0)
    plays: int = Field(0, ge=0)


class AppUpdate(BaseModel):
    """Partial update of a catalog record."""

    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    category: Optional[Category] = None
    url1: Optional[str] = None
    url2: Optional[str] = None
    is_premium: Optional[bool] = None
    rating: Optional[float] = Field(None, ge=0.0, le=5.0)
