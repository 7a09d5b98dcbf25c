"""
Rewards Engine - point balances and the transaction ledger.

Earning paths:
- 1 point per recorded app session
- Frozen reward of an approved bug report
- Administrator grants

Redemption paths:
- Premium upgrade discount (10 points = 1 currency unit)
"""

from appvault.engines.rewards.ledger import RewardsLedger

__all__ = ["RewardsLedger"]
