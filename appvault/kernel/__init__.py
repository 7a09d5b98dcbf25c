"""
Kernel layer

Foundational pieces everything else sits on:
- Persisted key-value store (slot per collection, write-on-mutate)
- Identity & session management (roster + Current User projection)
- Error taxonomy shared by every operation
"""

from appvault.kernel.errors import (
    AlreadyPremium,
    EngineError,
    InsufficientPoints,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    ValidationFailed,
)

__all__ = [
    "AlreadyPremium",
    "EngineError",
    "ValidationFailed",
    "NotAuthenticated",
    "PermissionDenied",
    "NotFound",
    "InsufficientPoints",
]
