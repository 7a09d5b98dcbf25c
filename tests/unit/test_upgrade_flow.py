"""Unit tests for the subscription upgrade flow."""

import pytest

from appvault.engines.subscription.upgrade_flow import (
    DISCOUNT_REASON,
    MANUAL_SUBSCRIPTION_ID,
    SubscriptionUpgradeFlow,
)
from appvault.engines.rewards.ledger import RewardsLedger
from appvault.kernel.errors import AlreadyPremium, InsufficientPoints, ValidationFailed
from appvault.schemas.payment import PaymentOutcome
from appvault.schemas.points import TransactionType
from appvault.schemas.user import SubscriptionStatus


@pytest.fixture
def bob(seeded_state):
    return seeded_state.set_current_user("u2")


class TestUpgrade:
    """Tests for SubscriptionUpgradeFlow.upgrade."""

    def test_upgrade_with_redemption(self, seeded_state, settings, bob):
        updated = SubscriptionUpgradeFlow(seeded_state, settings).upgrade(bob, 20, "pay_123")

        assert updated.is_premium is True
        assert updated.points == 0
        assert updated.subscription_status == SubscriptionStatus.ACTIVE
        assert updated.subscription_id == "pay_123"
        assert seeded_state.current_user.is_premium is True
        entry = seeded_state.points_history[0]
        assert entry.type == TransactionType.REDEEMED
        assert entry.reason == DISCOUNT_REASON

    def test_upgrade_without_redemption(self, seeded_state, settings, bob):
        updated = SubscriptionUpgradeFlow(seeded_state, settings).upgrade(bob)
        assert updated.points == 20
        assert updated.subscription_id == MANUAL_SUBSCRIPTION_ID
        assert seeded_state.points_history == []

    def test_over_redemption_leaves_user_free_tier(self, seeded_state, settings, bob):
        with pytest.raises(InsufficientPoints):
            SubscriptionUpgradeFlow(seeded_state, settings).upgrade(bob, 500)
        assert seeded_state.find_user("u2").is_premium is False


class TestCompleteUpgrade:
    """Tests for applying a payment outcome to a quote."""

    def test_failed_payment_changes_nothing(self, seeded_state, settings, bob):
        flow = SubscriptionUpgradeFlow(seeded_state, settings)
        quote = flow.quote(bob, redeem=True)
        result = flow.complete_upgrade(bob, quote, PaymentOutcome.failed("Card declined"))

        assert result.upgraded is False
        assert result.reason == "Card declined"
        assert seeded_state.find_user("u2").points == 20
        assert seeded_state.find_user("u2").is_premium is False
        assert seeded_state.points_history == []

    def test_successful_payment_redeems_quoted_points(self, seeded_state, settings, bob):
        flow = SubscriptionUpgradeFlow(seeded_state, settings)
        quote = flow.quote(bob, redeem=True)
        assert quote.final_price == 197

        result = flow.complete_upgrade(bob, quote, PaymentOutcome.succeeded("pay_9", 197))
        assert result.upgraded is True
        assert result.user.points == 0
        assert result.user.subscription_id == "pay_9"

    def test_payment_required_without_outcome(self, seeded_state, settings, bob):
        flow = SubscriptionUpgradeFlow(seeded_state, settings)
        with pytest.raises(ValidationFailed):
            flow.complete_upgrade(bob, flow.quote(bob, redeem=False), None)

    def test_fully_discounted_needs_no_outcome(self, seeded_state, settings, bob):
        RewardsLedger(seeded_state).grant_points("u2", 2000, "Admin grant")
        bob = seeded_state.current_user
        flow = SubscriptionUpgradeFlow(seeded_state, settings)
        quote = flow.quote(bob, redeem=True)
        assert quote.final_price == 0

        result = flow.complete_upgrade(bob, quote, None)
        assert result.upgraded is True
        assert result.user.points == 2020 - 1990


class TestAlreadyPremium:
    """A premium account cannot be upgraded or charged again."""

    def test_upgrade_rejected(self, seeded_state, settings):
        alice = seeded_state.set_current_user("u1")
        with pytest.raises(AlreadyPremium):
            SubscriptionUpgradeFlow(seeded_state, settings).upgrade(alice, 40, "pay_2")
        assert seeded_state.find_user("u1").points == 340
        assert seeded_state.points_history == []

    def test_complete_upgrade_rejected_before_applying_payment(self, seeded_state, settings):
        alice = seeded_state.set_current_user("u1")
        flow = SubscriptionUpgradeFlow(seeded_state, settings)
        quote = flow.quote(alice, redeem=True)

        with pytest.raises(AlreadyPremium):
            flow.complete_upgrade(alice, quote, PaymentOutcome.succeeded("pay_3", quote.final_price))
        assert seeded_state.find_user("u1").points == 340

    def test_second_upgrade_after_first_rejected(self, seeded_state, settings, bob):
        flow = SubscriptionUpgradeFlow(seeded_state, settings)
        flow.upgrade(bob, 0, "pay_4")
        with pytest.raises(ValidationFailed):
            flow.upgrade(seeded_state.current_user, 0, "pay_5")
        assert seeded_state.find_user("u2").subscription_id == "pay_4"
