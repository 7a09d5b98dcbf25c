"""
Premium pricing with point redemption.

    max_redeemable = min(balance, price * rate)
    discount       = floor(max_redeemable / rate)   when redeeming, else 0
    final_price    = max(0, price - discount)

rate is points per currency unit (10 points = 1 unit). Redemption is only
offered once the balance reaches one full unit of discount; below that the
points would be spent for nothing.
"""

from pydantic import BaseModel

from appvault.kernel.errors import ValidationFailed


class PriceQuote(BaseModel):
    """Price of one premium upgrade for a given balance and redemption choice."""

    base_price: int
    points_per_unit: int
    currency: str = "INR"
    balance: int
    redeem_requested: bool
    max_redeemable: int
    points_to_redeem: int
    discount: int
    final_price: int

    @property
    def requires_payment(self) -> bool:
        return self.final_price > 0

    @property
    def can_redeem(self) -> bool:
        return self.max_redeemable >= self.points_per_unit


def quote_upgrade(
    balance: int,
    redeem: bool,
    *,
    base_price: int = 199,
    points_per_unit: int = 10,
    currency: str = "INR",
) -> PriceQuote:
    """Compute the discounted premium price. Pure; touches no state."""
    if base_price < 0:
        raise ValidationFailed("Base price cannot be negative", field="base_price")
    if points_per_unit <= 0:
        raise ValidationFailed("Conversion rate must be positive", field="points_per_unit")

    balance = max(0, int(balance))
    max_redeemable = min(balance, base_price * points_per_unit)
    redeeming = bool(redeem) and max_redeemable >= points_per_unit

    discount = max_redeemable // points_per_unit if redeeming else 0
    final_price = max(0, base_price - discount)

    return PriceQuote(
        base_price=base_price,
        points_per_unit=points_per_unit,
        currency=currency,
        balance=balance,
        redeem_requested=bool(redeem),
        max_redeemable=max_redeemable,
        points_to_redeem=max_redeemable if redeeming else 0,
        discount=discount,
        final_price=final_price,
    )
