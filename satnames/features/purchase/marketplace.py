"""Marketplace listing purchase rail."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from satnames.features.market.service import total_with_fee
from satnames.features.purchase.models import PaymentRail, PurchaseIntent
from satnames.shared.errors import PaymentError, UnauthorizedError, ValidationError

if TYPE_CHECKING:
    from satnames.features.availability.service import NameCandidate
    from satnames.features.session.service import SessionManager

logger = logging.getLogger(__name__)


class MarketplaceAdapter:
    """Buys a listed name in one wallet-signed trade transaction."""

    rail = PaymentRail.MARKETPLACE
    completes_immediately = True

    def __init__(self, fee_rate: float, fee_address: str):
        self.fee_rate = fee_rate
        self.fee_address = fee_address

    def quote(self, listing_price: int) -> int:
        return total_with_fee(listing_price, self.fee_rate)

    def execute(
        self,
        intent: PurchaseIntent,
        candidate: "NameCandidate",
        session_manager: "SessionManager",
    ) -> str:
        if not candidate.listing_outpoint or not candidate.listing_price:
            raise ValidationError(f"{candidate.handle} has no active listing")

        intent.amount = self.quote(candidate.listing_price)
        intent.unit = "satoshis"
        try:
            txid = session_manager.purchase_listing(
                candidate.listing_outpoint,
                fee_rate=self.fee_rate,
                fee_address=self.fee_address,
            )
        except UnauthorizedError:
            raise
        except Exception as e:
            raise PaymentError(f"Listing purchase failed: {e}") from e

        if not txid:
            raise PaymentError("No transaction ID returned from purchase")

        logger.info(
            "Purchased listing %s for %s in %s",
            candidate.listing_outpoint,
            intent.handle,
            txid,
        )
        return str(txid)
