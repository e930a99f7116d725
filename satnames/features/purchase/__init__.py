"""Purchase feature module for satnames.

This module provides:
- Rail selection from availability and payment preference
- Hosted card checkout with resume after the browser round trip
- Direct wallet payment with backend reconciliation
- Atomic marketplace listing purchase
"""

from satnames.features.purchase.direct_wallet import DirectWalletAdapter, satoshis_for
from satnames.features.purchase.hosted_checkout import (
    BrowserNavigator,
    HostedCheckoutAdapter,
    strip_markers,
    with_marker,
)
from satnames.features.purchase.marketplace import MarketplaceAdapter
from satnames.features.purchase.models import (
    CheckoutOutcome,
    CheckoutStatus,
    IntentState,
    PaymentPreference,
    PaymentRail,
    PendingRegistration,
    PurchaseIntent,
)
from satnames.features.purchase.service import PurchaseOrchestrator

__all__ = [
    "BrowserNavigator",
    "CheckoutOutcome",
    "CheckoutStatus",
    "DirectWalletAdapter",
    "HostedCheckoutAdapter",
    "IntentState",
    "MarketplaceAdapter",
    "PaymentPreference",
    "PaymentRail",
    "PendingRegistration",
    "PurchaseIntent",
    "PurchaseOrchestrator",
    "satoshis_for",
    "strip_markers",
    "with_marker",
]
