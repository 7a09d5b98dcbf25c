"""
Identity Core - roster and session management.
"""

from appvault.kernel.identity.session_manager import SessionManager, seed_accounts

__all__ = [
    "SessionManager",
    "seed_accounts",
]
