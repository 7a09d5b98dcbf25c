"""
Rewards Ledger
==============

The single place that changes a point balance.

- grant_points / redeem_points move the balance of one user and append
  exactly one matching PointTransaction, newest first.
- The balance is written through VaultState.write_user, so the roster entry
  and the Current User projection always carry the same number.
- Balances are integers. Amounts that are not ints (floats, bools, numeric
  strings) are rejected, never rounded. Amounts are stored positive; the
  transaction type gives the direction.

Over-redemption is rejected rather than clamped: a redemption larger than
the balance raises InsufficientPoints and leaves the state untouched.
"""

from typing import List, Optional

from appvault.kernel.errors import InsufficientPoints, NotFound, ValidationFailed
from appvault.logging_config import get_logger
from appvault.schemas.points import PointTotals, PointTransaction, TransactionType
from appvault.schemas.state import VaultState

logger = get_logger(__name__)


def _check_amount(amount) -> None:
    # bool is an int subclass
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationFailed("Point amounts must be whole numbers", field="amount")


class RewardsLedger:
    """Point-earning and point-redemption primitives over the engine state."""

    def __init__(self, state: VaultState):
        self.state = state

    # -----------------------------
    # Mutations
    # -----------------------------
    def grant_points(self, user_id: str, amount: int, reason: str) -> Optional[PointTransaction]:
        """
        Credit `amount` points to a user.

        amount <= 0 is a no-op: no balance change and no ledger entry.
        """
        _check_amount(amount)
        if amount <= 0:
            return None

        user = self._require_user(user_id)
        self.state.write_user(user_id, points=user.points + amount)
        return self._append(user_id, amount, reason, TransactionType.EARNED)

    def redeem_points(self, user_id: str, amount: int, reason: str) -> Optional[PointTransaction]:
        """
        Debit `amount` points from a user.

        0 is a valid no-op (an upgrade without redemption passes 0).
        Negative amounts and amounts above the balance are rejected.
        """
        _check_amount(amount)
        if amount < 0:
            raise ValidationFailed("Redeemed points cannot be negative", field="amount")
        if amount == 0:
            return None

        user = self._require_user(user_id)
        if amount > user.points:
            raise InsufficientPoints(requested=amount, balance=user.points)

        self.state.write_user(user_id, points=user.points - amount)
        return self._append(user_id, amount, reason, TransactionType.REDEEMED)

    # -----------------------------
    # Reads
    # -----------------------------
    def balance(self, user_id: str) -> int:
        return self._require_user(user_id).points

    def transactions_for(self, user_id: str) -> List[PointTransaction]:
        """Entries attributable to the user, newest first."""
        return [t for t in self.state.points_history if t.user_id == user_id]

    def totals(self, user_id: str) -> PointTotals:
        earned = 0
        redeemed = 0
        for t in self.transactions_for(user_id):
            if t.type == TransactionType.EARNED:
                earned += t.amount
            else:
                redeemed += t.amount
        return PointTotals(
            user_id=user_id,
            balance=self.balance(user_id),
            total_earned=earned,
            total_redeemed=redeemed,
        )

    # -----------------------------
    # Internals
    # -----------------------------
    def _require_user(self, user_id: str):
        user = self.state.find_user(user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found", field="user_id")
        return user

    def _append(
        self,
        user_id: str,
        amount: int,
        reason: str,
        kind: TransactionType,
    ) -> PointTransaction:
        entry = PointTransaction(user_id=user_id, amount=amount, reason=reason, type=kind)
        self.state.points_history.insert(0, entry)
        logger.info(
            "Points %s",
            kind.value,
            extra={"user_id": user_id, "amount": amount, "reason": reason},
        )
        return entry
