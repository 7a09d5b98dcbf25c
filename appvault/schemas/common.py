"""
Common helpers shared by the entity schemas.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional


def generate_id(prefix: Optional[str] = None) -> str:
    """Generate a new opaque identifier."""
    value = uuid.uuid4().hex
    return f"{prefix}_{value[:12]}" if prefix else value


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    """Canonical form used for roster uniqueness."""
    return (email or "").strip().lower()
