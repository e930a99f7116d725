"""Persisted user settings."""

from __future__ import annotations

import logging

from satnames.features.purchase.models import PaymentPreference
from satnames.shared.protocols import KeyValueStore

logger = logging.getLogger(__name__)

PREFERRED_PAYMENT_SLOT = "preferred_payment"


class PaymentSettings:
    """Remembers which rail a plain "Buy" uses for names nobody owns yet."""

    def __init__(
        self,
        store: KeyValueStore,
        default: PaymentPreference = PaymentPreference.CARD,
    ):
        self.store = store
        self.default = default

    @property
    def preferred_payment(self) -> PaymentPreference:
        value = self.store.get(PREFERRED_PAYMENT_SLOT)
        if value is None:
            return self.default
        try:
            return PaymentPreference(value)
        except ValueError:
            logger.warning("Ignoring unknown payment preference %r", value)
            return self.default

    @preferred_payment.setter
    def preferred_payment(self, preference: PaymentPreference) -> None:
        self.store.put(PREFERRED_PAYMENT_SLOT, preference.value)
        logger.info("Preferred payment set to %s", preference.value)

    def toggle(self) -> PaymentPreference:
        if self.preferred_payment == PaymentPreference.CARD:
            preference = PaymentPreference.WALLET
        else:
            preference = PaymentPreference.CARD
        self.preferred_payment = preference
        return preference
