"""
External collaborators: recommendation service and payment providers.
"""

from appvault.integrations.payment_gateway import (
    DemoPaymentProvider,
    HttpPaymentProvider,
    PaymentProvider,
    build_payment_provider,
)
from appvault.integrations.recommendations import RecommendationService, parse_recommended_ids

__all__ = [
    "PaymentProvider",
    "DemoPaymentProvider",
    "HttpPaymentProvider",
    "build_payment_provider",
    "RecommendationService",
    "parse_recommended_ids",
]
