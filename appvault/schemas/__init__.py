"""
Pydantic schemas for every entity the engine owns or reads.
"""

from appvault.schemas.activity import HistoryItem
from appvault.schemas.bug_report import BugReport, BugReportStatus
from appvault.schemas.catalog import AppRecord, AppUpdate, Category
from appvault.schemas.notification import Notification, NotificationType
from appvault.schemas.payment import PaymentOutcome
from appvault.schemas.points import PointTotals, PointTransaction, TransactionType
from appvault.schemas.state import SLOT_KEYS, VaultState
from appvault.schemas.support import SupportTicket, TicketStatus
from appvault.schemas.user import SubscriptionStatus, ThemePreference, User, UserUpdate

__all__ = [
    # Users
    "User",
    "UserUpdate",
    "ThemePreference",
    "SubscriptionStatus",
    # Ledger
    "PointTransaction",
    "PointTotals",
    "TransactionType",
    # Workflows
    "BugReport",
    "BugReportStatus",
    "SupportTicket",
    "TicketStatus",
    "Notification",
    "NotificationType",
    "PaymentOutcome",
    # Activity & catalog
    "HistoryItem",
    "AppRecord",
    "AppUpdate",
    "Category",
    # State
    "VaultState",
    "SLOT_KEYS",
]
