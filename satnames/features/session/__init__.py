"""Wallet session feature module for satnames.

This module provides:
- Connect and disconnect the wallet
- Keep addresses and social profile in sync
- Recover from revoked authorization, account switches and sign-outs
"""

from satnames.features.session.service import (
    ConnectionState,
    SessionManager,
    SocialProfile,
    WalletAddresses,
    WalletSession,
)

__all__ = [
    "ConnectionState",
    "SessionManager",
    "SocialProfile",
    "WalletAddresses",
    "WalletSession",
]
