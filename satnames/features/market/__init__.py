"""Marketplace listing feature module for satnames."""

from satnames.features.market.service import Listing, MarketService, total_with_fee

__all__ = ["Listing", "MarketService", "total_with_fee"]
