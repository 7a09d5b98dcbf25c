"""Unit tests for the rewards ledger."""

import pytest

from appvault.engines.rewards.ledger import RewardsLedger
from appvault.kernel.errors import InsufficientPoints, NotFound, ValidationFailed
from appvault.schemas.points import TransactionType


class TestGrantPoints:
    """Tests for RewardsLedger.grant_points."""

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_grant_is_noop(self, seeded_state, amount):
        """No balance change and no ledger entry for amount <= 0."""
        ledger = RewardsLedger(seeded_state)
        assert ledger.grant_points("u2", amount, "nothing") is None
        assert seeded_state.find_user("u2").points == 20
        assert seeded_state.points_history == []

    def test_grant_updates_roster_and_current_user(self, seeded_state):
        """Roster entry and Current User carry the same balance after a grant."""
        seeded_state.set_current_user("u2")
        entry = RewardsLedger(seeded_state).grant_points("u2", 15, "Used Chess")

        assert entry.type == TransactionType.EARNED
        assert entry.amount == 15
        assert entry.user_id == "u2"
        assert seeded_state.find_user("u2").points == 35
        assert seeded_state.current_user.points == 35

    def test_grant_to_other_user_leaves_current_user(self, seeded_state):
        seeded_state.set_current_user("u1")
        RewardsLedger(seeded_state).grant_points("u2", 10, "Admin grant")
        assert seeded_state.current_user.points == 340
        assert seeded_state.find_user("u2").points == 30

    def test_newest_entry_first(self, seeded_state):
        ledger = RewardsLedger(seeded_state)
        ledger.grant_points("u2", 1, "first")
        ledger.grant_points("u2", 2, "second")
        assert [t.reason for t in seeded_state.points_history] == ["second", "first"]

    def test_unknown_user(self, seeded_state):
        with pytest.raises(NotFound):
            RewardsLedger(seeded_state).grant_points("ghost", 5, "x")

    @pytest.mark.parametrize("amount", [2.9, 0.5, "5", True])
    def test_non_integer_grant_rejected(self, seeded_state, amount):
        """Fractional, textual and boolean amounts are refused, not rounded."""
        with pytest.raises(ValidationFailed):
            RewardsLedger(seeded_state).grant_points("u2", amount, "x")
        assert seeded_state.find_user("u2").points == 20
        assert seeded_state.points_history == []


class TestRedeemPoints:
    """Tests for RewardsLedger.redeem_points."""

    def test_redeem_debits_and_records(self, seeded_state):
        entry = RewardsLedger(seeded_state).redeem_points("u1", 40, "Discount on Premium")
        assert entry.type == TransactionType.REDEEMED
        assert entry.amount == 40
        assert seeded_state.find_user("u1").points == 300

    def test_over_redemption_rejected(self, seeded_state):
        """Redeeming more than the balance raises and changes nothing."""
        with pytest.raises(InsufficientPoints) as exc_info:
            RewardsLedger(seeded_state).redeem_points("u2", 21, "too much")
        assert exc_info.value.balance == 20
        assert seeded_state.find_user("u2").points == 20
        assert seeded_state.points_history == []

    def test_zero_redemption_is_noop(self, seeded_state):
        assert RewardsLedger(seeded_state).redeem_points("u2", 0, "none") is None
        assert seeded_state.points_history == []

    def test_negative_redemption_rejected(self, seeded_state):
        with pytest.raises(ValidationFailed):
            RewardsLedger(seeded_state).redeem_points("u2", -1, "bad")

    @pytest.mark.parametrize("amount", [1.5, False])
    def test_non_integer_redemption_rejected(self, seeded_state, amount):
        with pytest.raises(ValidationFailed):
            RewardsLedger(seeded_state).redeem_points("u2", amount, "bad")
        assert seeded_state.find_user("u2").points == 20


class TestTotals:
    """Tests for per-user rollups."""

    def test_totals_split_by_direction(self, seeded_state):
        ledger = RewardsLedger(seeded_state)
        ledger.grant_points("u1", 10, "a")
        ledger.grant_points("u1", 5, "b")
        ledger.redeem_points("u1", 30, "c")
        ledger.grant_points("u2", 99, "someone else")

        totals = ledger.totals("u1")
        assert totals.total_earned == 15
        assert totals.total_redeemed == 30
        assert totals.balance == 325
        assert len(ledger.transactions_for("u1")) == 3
