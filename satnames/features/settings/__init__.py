"""User settings feature module for satnames."""

from satnames.features.settings.service import PREFERRED_PAYMENT_SLOT, PaymentSettings

__all__ = ["PREFERRED_PAYMENT_SLOT", "PaymentSettings"]
