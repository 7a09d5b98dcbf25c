"""
The engine's owned state: every entity collection plus the Current User
projection, and the mapping of each collection to its durable slot key.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, TypeAdapter

from appvault.kernel.errors import NotFound
from appvault.schemas.activity import HistoryItem
from appvault.schemas.bug_report import BugReport
from appvault.schemas.common import normalize_email
from appvault.schemas.notification import Notification
from appvault.schemas.points import PointTransaction
from appvault.schemas.support import SupportTicket
from appvault.schemas.user import User


# field name -> durable key
SLOT_KEYS: Dict[str, str] = {
    "current_user": "appvault_user",
    "users": "appvault_users_db",
    "history": "appvault_history",
    "wishlist": "appvault_wishlist",
    "bug_reports": "appvault_bugs",
    "points_history": "appvault_points",
    "notifications": "appvault_notifs",
    "support_tickets": "appvault_support",
    "roster_seeded": "appvault_roster_seeded",
}


class VaultState(BaseModel):
    """
    All mutable engine state.

    The Current User is a cached copy of the roster entry with the same id.
    Never assign to a roster entry or to current_user directly: go through
    write_user / set_current_user so the two cannot drift apart.
    """

    current_user: Optional[User] = None
    users: List[User] = Field(default_factory=list)
    history: List[HistoryItem] = Field(default_factory=list)
    wishlist: List[str] = Field(default_factory=list)
    bug_reports: List[BugReport] = Field(default_factory=list)
    points_history: List[PointTransaction] = Field(default_factory=list)
    notifications: List[Notification] = Field(default_factory=list)
    support_tickets: List[SupportTicket] = Field(default_factory=list)
    roster_seeded: bool = False

    # -----------------------------
    # Roster lookups
    # -----------------------------
    def _user_index(self, user_id: str) -> Optional[int]:
        for i, u in enumerate(self.users):
            if u.id == user_id:
                return i
        return None

    def find_user(self, user_id: str) -> Optional[User]:
        idx = self._user_index(user_id)
        return None if idx is None else self.users[idx]

    def find_user_by_email(self, email: str) -> Optional[User]:
        wanted = normalize_email(email)
        return next((u for u in self.users if normalize_email(u.email) == wanted), None)

    # -----------------------------
    # Write-through (roster + projection)
    # -----------------------------
    def write_user(self, user_id: str, **fields: Any) -> User:
        """
        Apply a field patch to a roster entry and, when it is the Current
        User, to the projection in the same call.

        This is the only mutation path for existing users.
        """
        idx = self._user_index(user_id)
        if idx is None:
            raise NotFound(f"User {user_id} not found", field="user_id")

        updated = User.model_validate({**self.users[idx].model_dump(), **fields})
        self.users[idx] = updated
        if self.current_user is not None and self.current_user.id == user_id:
            self.current_user = updated.model_copy(deep=True)
        return updated

    def add_user(self, user: User) -> User:
        self.users.append(user)
        return user

    def remove_user(self, user_id: str) -> User:
        idx = self._user_index(user_id)
        if idx is None:
            raise NotFound(f"User {user_id} not found", field="user_id")
        return self.users.pop(idx)

    def set_current_user(self, user_id: Optional[str]) -> Optional[User]:
        """Point the projection at a roster entry (by value copy), or clear it."""
        if user_id is None:
            self.current_user = None
            return None
        user = self.find_user(user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found", field="user_id")
        self.current_user = user.model_copy(deep=True)
        return self.current_user

    # -----------------------------
    # Persistence helpers
    # -----------------------------
    def slot_value(self, field_name: str) -> Any:
        """JSON-ready value for one slot."""
        adapter = TypeAdapter(VaultState.model_fields[field_name].annotation)
        return adapter.dump_python(getattr(self, field_name), mode="json")

    def changed_slots(self, newer: "VaultState") -> Dict[str, Any]:
        """Durable key -> JSON value for every slot that differs in `newer`."""
        return {
            key: newer.slot_value(field_name)
            for field_name, key in SLOT_KEYS.items()
            if getattr(self, field_name) != getattr(newer, field_name)
        }

    @classmethod
    def parse_slot(cls, field_name: str, raw: Any) -> Any:
        """Validate a stored value for one slot. Raises pydantic.ValidationError."""
        adapter = TypeAdapter(cls.model_fields[field_name].annotation)
        return adapter.validate_python(raw)
