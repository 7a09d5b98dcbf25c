"""
Payment collaborator schemas.
"""

from typing import Optional

from pydantic import BaseModel


class PaymentOutcome(BaseModel):
    """Final result reported by the payment provider."""

    success: bool
    amount: int = 0
    currency: str = "INR"
    transaction_id: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def succeeded(cls, transaction_id: str, amount: int, currency: str = "INR") -> "PaymentOutcome":
        return cls(success=True, transaction_id=transaction_id, amount=amount, currency=currency)

    @classmethod
    def failed(cls, reason: str, amount: int = 0, currency: str = "INR") -> "PaymentOutcome":
        return cls(success=False, reason=reason, amount=amount, currency=currency)
