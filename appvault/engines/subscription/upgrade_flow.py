"""
Subscription Upgrade Flow - flips a user to premium and records the
point redemption that paid for part of it.

The payment provider is never called from here. Callers obtain a
PaymentOutcome elsewhere and hand it to complete_upgrade; only a
successful outcome (or a fully discounted price) leads to upgrade().
"""

from typing import Optional

from pydantic import BaseModel

from appvault.config import Settings
from appvault.engines.notifications.notifier import Notifier
from appvault.engines.rewards.ledger import RewardsLedger
from appvault.engines.subscription.pricing import PriceQuote, quote_upgrade
from appvault.kernel.errors import AlreadyPremium, ValidationFailed
from appvault.logging_config import get_logger
from appvault.schemas.common import utcnow
from appvault.schemas.notification import NotificationType
from appvault.schemas.payment import PaymentOutcome
from appvault.schemas.state import VaultState
from appvault.schemas.user import SubscriptionStatus, User

logger = get_logger(__name__)

DISCOUNT_REASON = "Discount on Premium"
MANUAL_SUBSCRIPTION_ID = "manual_upgrade"


class UpgradeResult(BaseModel):
    """What happened to an upgrade attempt."""

    upgraded: bool
    quote: PriceQuote
    outcome: Optional[PaymentOutcome] = None
    user: Optional[User] = None
    reason: Optional[str] = None


class SubscriptionUpgradeFlow:
    """Pricing and the premium state transition."""

    def __init__(self, state: VaultState, settings: Settings):
        self.state = state
        self.settings = settings
        self.ledger = RewardsLedger(state)

    def quote(self, user: User, redeem: bool) -> PriceQuote:
        return quote_upgrade(
            user.points,
            redeem,
            base_price=self.settings.premium_price,
            points_per_unit=self.settings.points_per_currency_unit,
            currency=self.settings.currency,
        )

    def require_upgradable(self, user: User) -> None:
        """Reject an upgrade for an account that is already premium."""
        current = self.state.find_user(user.id) or user
        if current.is_premium:
            raise AlreadyPremium("Account is already premium", field="is_premium")

    def upgrade(
        self,
        user: User,
        redeemed_points: int = 0,
        external_transaction_id: Optional[str] = None,
    ) -> User:
        """
        Make the user premium and debit the redeemed points.

        redeemed_points may be 0. The redemption is validated first so an
        over-redemption leaves the user untouched. A user who is already
        premium is rejected before anything changes.
        """
        self.require_upgradable(user)
        self.ledger.redeem_points(user.id, redeemed_points, DISCOUNT_REASON)

        updated = self.state.write_user(
            user.id,
            is_premium=True,
            subscription_status=SubscriptionStatus.ACTIVE,
            subscription_date=utcnow(),
            subscription_id=external_transaction_id or MANUAL_SUBSCRIPTION_ID,
        )
        Notifier(self.state).notify(
            user.id,
            "Welcome to Premium",
            "All premium apps are now unlocked.",
            NotificationType.SUCCESS,
        )
        logger.info(
            "User upgraded to premium",
            extra={
                "user_id": user.id,
                "redeemed_points": int(redeemed_points),
                "subscription_id": updated.subscription_id,
            },
        )
        return updated

    def complete_upgrade(
        self,
        user: User,
        quote: PriceQuote,
        outcome: Optional[PaymentOutcome],
    ) -> UpgradeResult:
        """
        Apply the payment outcome for a quote.

        A quote with a final price of 0 needs no outcome. Failed outcomes
        change nothing.
        """
        self.require_upgradable(user)
        if quote.requires_payment:
            if outcome is None:
                raise ValidationFailed("A payment outcome is required", field="outcome")
            if not outcome.success:
                logger.warning(
                    "Payment failed; upgrade not performed",
                    extra={"user_id": user.id, "reason": outcome.reason},
                )
                return UpgradeResult(
                    upgraded=False,
                    quote=quote,
                    outcome=outcome,
                    reason=outcome.reason or "Payment failed",
                )

        transaction_id = outcome.transaction_id if outcome else None
        updated = self.upgrade(user, quote.points_to_redeem, transaction_id)
        return UpgradeResult(upgraded=True, quote=quote, outcome=outcome, user=updated)
