"""Marketplace index client for satnames."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from urllib.parse import quote

from satnames.shared.network import NetworkClient

logger = logging.getLogger(__name__)


@dataclass
class Listing:
    outpoint: str
    for_sale: bool
    price: int

    @property
    def is_purchasable(self) -> bool:
        return self.for_sale and self.price > 0

    @classmethod
    def from_response(cls, outpoint: str, data: dict[str, Any]) -> "Listing":
        listing = (data.get("data") or {}).get("list") or data
        for_sale = listing.get("sale", listing.get("forSale", False))
        try:
            price = int(listing.get("price") or 0)
        except (TypeError, ValueError):
            price = 0
        return cls(outpoint=outpoint, for_sale=bool(for_sale), price=price)


def total_with_fee(price: int, fee_rate: float) -> int:
    """All-in price of a listing including the marketplace fee."""
    total = Decimal(price) * (Decimal(1) + Decimal(str(fee_rate)))
    return int(total.quantize(Decimal(1), rounding=ROUND_HALF_UP))


class MarketService:
    def __init__(self, network_client: NetworkClient):
        self.network_client = network_client

    def get_listing(self, outpoint: str) -> Listing | None:
        response = self.network_client.get_optional(
            f"/txos/{quote(outpoint)}",
            context="Fetch market listing",
            params={"script": "false"},
        )
        if response is None:
            return None
        listing = Listing.from_response(outpoint, response)
        logger.debug(
            "Listing %s for_sale=%s price=%d", outpoint, listing.for_sale, listing.price
        )
        return listing
