"""
Subscription Engine - premium pricing and upgrade.

Price: 199/month. Points convert at 10 points = 1 unit of discount, up to
the full price.
"""

from appvault.engines.subscription.pricing import PriceQuote, quote_upgrade
from appvault.engines.subscription.upgrade_flow import (
    DISCOUNT_REASON,
    SubscriptionUpgradeFlow,
    UpgradeResult,
)

__all__ = [
    "PriceQuote",
    "quote_upgrade",
    "SubscriptionUpgradeFlow",
    "UpgradeResult",
    "DISCOUNT_REASON",
]
