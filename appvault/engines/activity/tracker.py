"""
Activity Tracker - usage history and the session wishlist.
"""

from datetime import datetime
from typing import Optional

from appvault.config import Settings
from appvault.engines.rewards.ledger import RewardsLedger
from appvault.kernel.errors import ValidationFailed
from appvault.schemas.activity import HistoryItem
from appvault.schemas.common import utcnow
from appvault.schemas.state import VaultState


class ActivityTracker:
    """Records app sessions and toggles saved-for-later apps."""

    def __init__(self, state: VaultState, settings: Settings):
        self.state = state
        self.settings = settings
        self.ledger = RewardsLedger(state)

    def record_usage(
        self,
        app_id: str,
        app_name: str,
        app_icon: str = "",
        duration_seconds: int = 0,
        started_at: Optional[datetime] = None,
    ) -> HistoryItem:
        """
        Prepend a history entry, then reward the signed-in user.

        The entry is recorded whether or not anyone is signed in; the point
        is only granted when someone is.
        """
        if not app_id:
            raise ValidationFailed("App id is required", field="app_id")
        if duration_seconds < 0:
            raise ValidationFailed("Duration cannot be negative", field="duration_seconds")

        item = HistoryItem(
            app_id=app_id,
            app_name=app_name,
            app_icon=app_icon or "",
            timestamp=started_at or utcnow(),
            duration_seconds=int(duration_seconds),
        )
        self.state.history.insert(0, item)

        current = self.state.current_user
        if current is not None:
            self.ledger.grant_points(current.id, self.settings.usage_reward_points, f"Used {app_name}")
        return item

    def toggle_wishlist(self, app_id: str) -> bool:
        """Flip membership of app_id. Returns True when it is now saved."""
        if app_id in self.state.wishlist:
            self.state.wishlist.remove(app_id)
            return False
        self.state.wishlist.append(app_id)
        return True

    def total_seconds(self) -> int:
        return sum(h.duration_seconds for h in self.state.history)
