"""
Notifier - produces notifications for workflows and tracks read state.
"""

from typing import List, Optional

from appvault.kernel.errors import NotFound
from appvault.schemas.notification import Notification, NotificationType
from appvault.schemas.state import VaultState


class Notifier:
    """Appends notifications to the state, newest first."""

    def __init__(self, state: VaultState):
        self.state = state

    def notify(
        self,
        user_id: Optional[str],
        title: str,
        message: str,
        kind: NotificationType = NotificationType.INFO,
    ) -> Notification:
        notification = Notification(user_id=user_id, title=title, message=message, type=kind)
        self.state.notifications.insert(0, notification)
        return notification

    def for_user(self, user_id: str) -> List[Notification]:
        """Notifications addressed to the user, plus broadcasts."""
        return [n for n in self.state.notifications if n.user_id in (None, user_id)]

    def unread_count(self, user_id: str) -> int:
        return sum(1 for n in self.for_user(user_id) if not n.read)

    def mark_read(self, notification_id: str, user_id: str) -> Notification:
        for n in self.state.notifications:
            if n.id == notification_id and n.user_id in (None, user_id):
                n.read = True
                return n
        raise NotFound(f"Notification {notification_id} not found", field="notification_id")

    def mark_all_read(self, user_id: str) -> int:
        count = 0
        for n in self.for_user(user_id):
            if not n.read:
                n.read = True
                count += 1
        return count
