"""
AppVault - client-side state and rewards-ledger engine.
"""

__version__ = "2.1.0"
