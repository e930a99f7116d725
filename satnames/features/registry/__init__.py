"""Registration backend feature module for satnames."""

from satnames.features.registry.service import (
    PaymentCompleteResult,
    RegistrationResult,
    RegistryService,
)

__all__ = ["PaymentCompleteResult", "RegistrationResult", "RegistryService"]
