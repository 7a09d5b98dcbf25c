"""
Vault Engine - the single writer for all session and rewards state.

Every mutating operation runs inside transaction():
  1. take the engine lock (operations never interleave)
  2. work on a deep copy of the state
  3. swap the copy in only if the operation returned normally
  4. persist the slots that changed, in one store write

An exception anywhere in step 2 discards the copy, so no operation can
commit half of its changes. Collaborator calls (recommendations, payment)
are awaited outside the lock and their results applied in a fresh
transaction that revalidates its preconditions.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Union

from pydantic import BaseModel, ValidationError

from appvault.catalog.store import CatalogStore
from appvault.config import Settings, get_settings
from appvault.engines.activity.tracker import ActivityTracker
from appvault.engines.bug_reports.workflow import BugReportWorkflow
from appvault.engines.notifications.notifier import Notifier
from appvault.engines.rewards.ledger import RewardsLedger
from appvault.engines.subscription.pricing import PriceQuote
from appvault.engines.subscription.upgrade_flow import SubscriptionUpgradeFlow, UpgradeResult
from appvault.engines.support.desk import SupportDesk
from appvault.integrations.payment_gateway import PaymentProvider
from appvault.integrations.recommendations import RecommendationService
from appvault.kernel.errors import AlreadyPremium, InsufficientPoints, NotAuthenticated, NotFound
from appvault.kernel.identity.session_manager import SessionManager
from appvault.kernel.store.key_value_store import KeyValueStore
from appvault.logging_config import bind_operation, get_logger
from appvault.schemas.activity import HistoryItem
from appvault.schemas.bug_report import BugReport, BugReportStatus
from appvault.schemas.catalog import AppRecord, AppUpdate
from appvault.schemas.notification import Notification
from appvault.schemas.payment import PaymentOutcome
from appvault.schemas.points import PointTotals, PointTransaction
from appvault.schemas.state import SLOT_KEYS, VaultState
from appvault.schemas.support import SupportTicket
from appvault.schemas.user import User, UserUpdate

logger = get_logger(__name__)


class AdminStats(BaseModel):
    """Administrator dashboard figures."""

    total_apps: int
    total_users: int
    premium_users: int
    pending_bug_reports: int
    open_tickets: int
    total_plays: int


class VaultEngine:
    """
    Facade over the engines. Holds the state, the lock and the store.

    Usage:
        engine = VaultEngine(store)
        await engine.load()
        await engine.login("alice@example.com")
        await engine.record_usage("app-1", "Chess", duration_seconds=120)
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        settings: Optional[Settings] = None,
        catalog: Optional[CatalogStore] = None,
        recommender: Optional[RecommendationService] = None,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self.catalog = catalog or CatalogStore(store)
        self.recommender = recommender or RecommendationService(self.settings)
        self._state = VaultState()
        self._lock = asyncio.Lock()
        # Held for a whole checkout, payment included
        self._checkout_lock = asyncio.Lock()

    # -----------------------------
    # Lifecycle
    # -----------------------------
    async def load(self) -> VaultState:
        """Read every slot (defaults for missing / unreadable ones), then seed the roster."""
        async with self._lock:
            loaded = await self._read_state()
            working = loaded.model_copy(deep=True)
            self._reconcile_session(working)
            SessionManager(working, self.settings).seed_roster()

            changed = loaded.changed_slots(working)
            self._state = working
            await self._persist(changed)

        await self.catalog.load()
        logger.info(
            "Vault loaded",
            extra={"users": len(self._state.users), "apps": len(self.catalog)},
        )
        return self.snapshot()

    async def _read_state(self) -> VaultState:
        try:
            raw = await self.store.get_many(SLOT_KEYS.values())
        except Exception as exc:
            logger.error("State read failed, using defaults: %s", exc)
            raw = {}

        values = {}
        for field_name, key in SLOT_KEYS.items():
            if raw.get(key) is None:
                continue
            try:
                values[field_name] = VaultState.parse_slot(field_name, raw[key])
            except ValidationError as exc:
                logger.error("Slot %s unreadable, using default: %s", key, exc)
        return VaultState(**values)

    @staticmethod
    def _reconcile_session(state: VaultState) -> None:
        """Re-point a persisted Current User at its roster entry, or drop it."""
        current = state.current_user
        if current is None:
            return
        if state.find_user(current.id) is None:
            logger.warning("Persisted session user missing from roster; clearing session")
            state.set_current_user(None)
        else:
            state.set_current_user(current.id)

    @asynccontextmanager
    async def transaction(self, operation: str = "transaction") -> AsyncIterator[VaultState]:
        """Serialised, all-or-nothing access to a working copy of the state."""
        async with self._lock:
            working = self._state.model_copy(deep=True)
            current = working.current_user
            with bind_operation(operation, current.id if current else None):
                yield working
                changed = self._state.changed_slots(working)
                self._state = working
                await self._persist(changed)

    async def _persist(self, changed: dict) -> None:
        if not changed:
            return
        try:
            await self.store.set_many(changed)
        except Exception as exc:
            # In-memory state stays authoritative for the rest of the session
            logger.error(
                "Persisting state failed: %s",
                exc,
                extra={"slots": sorted(changed)},
            )

    # -----------------------------
    # Reads
    # -----------------------------
    def snapshot(self) -> VaultState:
        return self._state.model_copy(deep=True)

    @property
    def current_user(self) -> Optional[User]:
        user = self._state.current_user
        return user.model_copy(deep=True) if user else None

    @property
    def is_authenticated(self) -> bool:
        return self._state.current_user is not None

    @property
    def users(self) -> List[User]:
        return [u.model_copy(deep=True) for u in self._state.users]

    @property
    def history(self) -> List[HistoryItem]:
        return [h.model_copy() for h in self._state.history]

    @property
    def wishlist(self) -> List[str]:
        return list(self._state.wishlist)

    @property
    def bug_reports(self) -> List[BugReport]:
        return [b.model_copy() for b in self._state.bug_reports]

    @property
    def points_history(self) -> List[PointTransaction]:
        return [t.model_copy() for t in self._state.points_history]

    @property
    def notifications(self) -> List[Notification]:
        return [n.model_copy() for n in self._state.notifications]

    @property
    def support_tickets(self) -> List[SupportTicket]:
        return [t.model_copy() for t in self._state.support_tickets]

    def my_points_history(self) -> List[PointTransaction]:
        user = self._require_current(self._state)
        return RewardsLedger(self.snapshot()).transactions_for(user.id)

    def my_point_totals(self) -> PointTotals:
        user = self._require_current(self._state)
        return RewardsLedger(self.snapshot()).totals(user.id)

    def my_bug_reports(self) -> List[BugReport]:
        user = self._require_current(self._state)
        return BugReportWorkflow(self.snapshot(), self.settings).reports_for(user.id)

    def my_tickets(self) -> List[SupportTicket]:
        user = self._require_current(self._state)
        return SupportDesk(self.snapshot()).tickets_for(user.id)

    def my_notifications(self) -> List[Notification]:
        user = self._require_current(self._state)
        return Notifier(self.snapshot()).for_user(user.id)

    def unread_notifications(self) -> int:
        user = self._require_current(self._state)
        return Notifier(self._state).unread_count(user.id)

    # -----------------------------
    # Identity & session
    # -----------------------------
    async def login(self, email: str) -> User:
        async with self.transaction("login") as state:
            return SessionManager(state, self.settings).login(email)

    async def signup(self, name: str, email: str) -> User:
        async with self.transaction("signup") as state:
            return SessionManager(state, self.settings).signup(name, email)

    async def logout(self) -> None:
        async with self.transaction("logout") as state:
            SessionManager(state, self.settings).logout()

    async def delete_account(self) -> User:
        async with self.transaction("delete_account") as state:
            return SessionManager(state, self.settings).delete_account()

    async def delete_user(self, user_id: str) -> User:
        """Administrative deletion. Confirmation belongs to the caller."""
        async with self.transaction("delete_user") as state:
            return SessionManager(state, self.settings).delete_user(user_id)

    async def update_user(self, patch: Union[UserUpdate, dict]) -> User:
        if isinstance(patch, dict):
            patch = UserUpdate.model_validate(patch)
        async with self.transaction("update_user") as state:
            return SessionManager(state, self.settings).update_user(patch)

    async def toggle_theme(self) -> User:
        async with self.transaction("toggle_theme") as state:
            return SessionManager(state, self.settings).toggle_theme()

    # -----------------------------
    # Rewards
    # -----------------------------
    async def admin_grant_points(
        self,
        user_id: str,
        amount: int,
        reason: str = "Admin grant",
    ) -> Optional[PointTransaction]:
        """Administrator grant through the ledger."""
        async with self.transaction("admin_grant_points") as state:
            SessionManager(state, self.settings).require_admin()
            return RewardsLedger(state).grant_points(user_id, amount, reason)

    # -----------------------------
    # Catalog interaction
    # -----------------------------
    async def record_usage(
        self,
        app_id: str,
        app_name: str,
        app_icon: str = "",
        duration_seconds: int = 0,
        started_at=None,
    ) -> HistoryItem:
        async with self.transaction("record_usage") as state:
            return ActivityTracker(state, self.settings).record_usage(
                app_id, app_name, app_icon, duration_seconds, started_at
            )

    async def record_app_session(self, app_id: str, duration_seconds: int) -> HistoryItem:
        """record_usage with the app snapshot taken from the catalog."""
        app = self.catalog.get(app_id)
        if app is None:
            raise NotFound(f"App {app_id} not found", field="app_id")
        return await self.record_usage(app.id, app.name, app.icon, duration_seconds)

    async def toggle_wishlist(self, app_id: str) -> bool:
        async with self.transaction("toggle_wishlist") as state:
            return ActivityTracker(state, self.settings).toggle_wishlist(app_id)

    def search_apps(self, text: str) -> List[AppRecord]:
        return self.catalog.search(text)

    async def recommend_apps(self, query: str) -> List[AppRecord]:
        """LLM recommendations restricted to apps that exist in the catalog."""
        apps = self.catalog.list_apps()
        try:
            ids = await asyncio.wait_for(
                self.recommender.recommend(query, apps),
                timeout=self.settings.recommendation_timeout_seconds,
            )
        except Exception as exc:
            logger.warning("Recommendations unavailable: %s", exc)
            return []

        known = self.catalog.known_ids()
        picked: List[AppRecord] = []
        for app_id in dict.fromkeys(ids or []):
            if app_id in known:
                picked.append(self.catalog.get(app_id))
        return picked

    # -----------------------------
    # Bug reports
    # -----------------------------
    async def report_bug(
        self,
        description: str,
        title: Optional[str] = None,
        contact: Optional[str] = None,
    ) -> BugReport:
        async with self.transaction("report_bug") as state:
            reporter = SessionManager(state, self.settings).require_current_user()
            return BugReportWorkflow(state, self.settings).report_bug(reporter, description, title, contact)

    async def resolve_bug(self, report_id: str, decision: Union[BugReportStatus, str]) -> BugReport:
        async with self.transaction("resolve_bug") as state:
            actor = SessionManager(state, self.settings).require_admin()
            return BugReportWorkflow(state, self.settings).resolve_bug(
                report_id, BugReportStatus(decision), actor
            )

    # -----------------------------
    # Subscription
    # -----------------------------
    def quote_upgrade(self, redeem: bool) -> PriceQuote:
        user = self._require_current(self._state)
        return SubscriptionUpgradeFlow(self._state, self.settings).quote(user, redeem)

    async def upgrade(self, redeemed_points: int = 0, external_transaction_id: Optional[str] = None) -> User:
        async with self.transaction("upgrade") as state:
            user = SessionManager(state, self.settings).require_current_user()
            return SubscriptionUpgradeFlow(state, self.settings).upgrade(
                user, redeemed_points, external_transaction_id
            )

    async def complete_upgrade(self, quote: PriceQuote, outcome: Optional[PaymentOutcome]) -> UpgradeResult:
        async with self.transaction("complete_upgrade") as state:
            user = SessionManager(state, self.settings).require_current_user()
            return SubscriptionUpgradeFlow(state, self.settings).complete_upgrade(user, quote, outcome)

    async def checkout(
        self,
        redeem: bool,
        provider: PaymentProvider,
        *,
        description: str = "AppVault Premium",
    ) -> UpgradeResult:
        """
        Quote, pay (unless fully discounted) and upgrade.

        Checkouts on one engine run one at a time, so a second checkout
        sees the first one's upgrade and is rejected before charging. The
        provider is awaited outside the state lock. Timeouts and provider
        errors become a failed outcome; nothing is retried.
        """
        async with self._checkout_lock:
            quote = self.quote_upgrade(redeem)
            buyer = self._state.current_user
            SubscriptionUpgradeFlow(self._state, self.settings).require_upgradable(buyer)
            buyer_id = buyer.id

            if quote.requires_payment:
                try:
                    outcome = await asyncio.wait_for(
                        provider.charge(quote.final_price, quote.currency, description),
                        timeout=self.settings.payment_timeout_seconds,
                    )
                except asyncio.TimeoutError:
                    logger.warning("Payment timed out", extra={"user_id": buyer_id})
                    outcome = PaymentOutcome.failed("Payment timed out", quote.final_price, quote.currency)
                except Exception as exc:
                    logger.warning("Payment provider error: %s", exc, extra={"user_id": buyer_id})
                    outcome = PaymentOutcome.failed(str(exc) or "Payment failed", quote.final_price, quote.currency)
            else:
                outcome = PaymentOutcome.succeeded(
                    f"points_full_{int(time.time() * 1000)}", 0, quote.currency
                )

            async with self.transaction("checkout") as state:
                user = state.current_user
                if user is None or user.id != buyer_id:
                    raise NotAuthenticated("Session changed during checkout")
                try:
                    return SubscriptionUpgradeFlow(state, self.settings).complete_upgrade(user, quote, outcome)
                except (InsufficientPoints, AlreadyPremium) as exc:
                    logger.error(
                        "Account changed during checkout; payment needs manual review",
                        extra={"user_id": user.id, "transaction_id": outcome.transaction_id},
                    )
                    return UpgradeResult(upgraded=False, quote=quote, outcome=outcome, reason=exc.message)

    # -----------------------------
    # Support & notifications
    # -----------------------------
    async def submit_support(self, subject: str, message: str) -> SupportTicket:
        async with self.transaction("submit_support") as state:
            user = SessionManager(state, self.settings).require_current_user()
            return SupportDesk(state).submit(user, subject, message)

    async def reply_to_ticket(self, ticket_id: str, reply: str, close: bool = True) -> SupportTicket:
        async with self.transaction("reply_to_ticket") as state:
            SessionManager(state, self.settings).require_admin()
            return SupportDesk(state).reply(ticket_id, reply, close)

    async def close_ticket(self, ticket_id: str) -> SupportTicket:
        async with self.transaction("close_ticket") as state:
            SessionManager(state, self.settings).require_admin()
            return SupportDesk(state).close(ticket_id)

    async def mark_notification_read(self, notification_id: str) -> Notification:
        async with self.transaction("mark_notification_read") as state:
            user = SessionManager(state, self.settings).require_current_user()
            return Notifier(state).mark_read(notification_id, user.id)

    async def mark_all_notifications_read(self) -> int:
        async with self.transaction("mark_all_notifications_read") as state:
            user = SessionManager(state, self.settings).require_current_user()
            return Notifier(state).mark_all_read(user.id)

    # -----------------------------
    # Administration
    # -----------------------------
    def admin_stats(self) -> AdminStats:
        SessionManager(self._state, self.settings).require_admin()
        state = self._state
        return AdminStats(
            total_apps=len(self.catalog),
            total_users=len(state.users),
            premium_users=sum(1 for u in state.users if u.is_premium),
            pending_bug_reports=len(BugReportWorkflow(state, self.settings).pending_reports()),
            open_tickets=len(SupportDesk(state).open_tickets()),
            total_plays=self.catalog.total_plays(),
        )

    async def add_app(self, app: AppRecord) -> AppRecord:
        async with self._lock:
            SessionManager(self._state, self.settings).require_admin()
            return await self.catalog.add(app)

    async def update_app(self, app_id: str, patch: Union[AppUpdate, dict]) -> AppRecord:
        if isinstance(patch, dict):
            patch = AppUpdate.model_validate(patch)
        async with self._lock:
            SessionManager(self._state, self.settings).require_admin()
            return await self.catalog.update(app_id, patch)

    async def remove_app(self, app_id: str) -> AppRecord:
        async with self._lock:
            SessionManager(self._state, self.settings).require_admin()
            return await self.catalog.remove(app_id)

    # -----------------------------
    # Internals
    # -----------------------------
    @staticmethod
    def _require_current(state: VaultState) -> User:
        user = state.current_user
        if user is None:
            raise NotAuthenticated("No user is signed in")
        return user
