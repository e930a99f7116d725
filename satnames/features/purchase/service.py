"""Name purchase orchestration for satnames."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from satnames.config import DEFAULT_DOMAIN
from satnames.features.availability.service import NameCandidate, NameStatus
from satnames.features.names.validators import full_name
from satnames.features.purchase.hosted_checkout import HostedCheckoutAdapter, read_marker
from satnames.features.purchase.models import (
    CheckoutOutcome,
    CheckoutStatus,
    PaymentPreference,
    PaymentRail,
    PaymentRailAdapter,
    PurchaseIntent,
)
from satnames.features.session.service import SessionManager
from satnames.shared.errors import (
    PurchaseInProgressError,
    ValidationError,
    WalletConnectionError,
)
from satnames.shared.logging import get_logger, log_with_context

logger = get_logger(__name__)

AcquiredCallback = Callable[[str, PurchaseIntent], None]


class PurchaseOrchestrator:
    """Drives one purchase per handle through exactly one payment rail."""

    def __init__(
        self,
        session_manager: SessionManager,
        hosted_checkout: HostedCheckoutAdapter,
        direct_wallet: PaymentRailAdapter,
        marketplace: PaymentRailAdapter,
        domain: str = DEFAULT_DOMAIN,
        on_acquired: AcquiredCallback | None = None,
    ):
        self.session_manager = session_manager
        self.hosted_checkout = hosted_checkout
        self.direct_wallet = direct_wallet
        self.marketplace = marketplace
        self.domain = domain
        self.on_acquired = on_acquired
        self._busy: set[str] = set()
        self._intents: dict[str, PurchaseIntent] = {}
        self._lock = threading.Lock()

    def intent_for(self, handle: str) -> PurchaseIntent | None:
        with self._lock:
            return self._intents.get(handle)

    def is_busy(self, handle: str) -> bool:
        with self._lock:
            return handle in self._busy

    def _claim(self, handle: str) -> None:
        with self._lock:
            if handle in self._busy:
                raise PurchaseInProgressError(handle)
            self._busy.add(handle)

    def _release(self, handle: str) -> None:
        with self._lock:
            self._busy.discard(handle)

    def select_adapter(
        self, candidate: NameCandidate, preference: PaymentPreference
    ) -> PaymentRailAdapter:
        if candidate.status == NameStatus.REGISTERED_UNLISTED:
            raise ValidationError(f"{full_name(candidate.handle, self.domain)} is already registered")
        if candidate.status == NameStatus.REGISTERED_LISTED:
            return self.marketplace
        if candidate.status != NameStatus.AVAILABLE:
            raise ValidationError("Check the name's availability before buying")
        if preference == PaymentPreference.WALLET:
            return self.direct_wallet
        return self.hosted_checkout

    def _ensure_connected(self) -> None:
        if self.session_manager.is_connected:
            return
        self.session_manager.connect()
        if not self.session_manager.is_connected:
            raise WalletConnectionError("The wallet did not authorize the connection")

    def buy(
        self,
        candidate: NameCandidate,
        preference: PaymentPreference = PaymentPreference.CARD,
    ) -> PurchaseIntent:
        handle = candidate.handle
        self._claim(handle)
        intent: PurchaseIntent | None = None
        try:
            self._ensure_connected()
            adapter = self.select_adapter(candidate, preference)
            intent = PurchaseIntent(rail=adapter.rail, handle=handle)
            intent.start()
            with self._lock:
                self._intents[handle] = intent

            log = logger.with_context(handle=handle, rail=adapter.rail.value)
            log.info("Purchase started")
            external_ref = adapter.execute(intent, candidate, self.session_manager)
        except Exception as e:
            if intent is not None and not intent.is_terminal:
                intent.fail(str(e))
                log_with_context(
                    logger,
                    logging.WARNING,
                    "Purchase failed",
                    handle=handle,
                    rail=intent.rail.value,
                    error=type(e).__name__,
                )
            self._release(handle)
            raise

        if not adapter.completes_immediately:
            # Finished by resume_checkout once the browser comes back.
            intent.external_ref = external_ref
            return intent

        intent.succeed(external_ref)
        self._release(handle)
        self._acquired(intent)
        return intent

    def _acquired(self, intent: PurchaseIntent) -> None:
        name = full_name(intent.handle, self.domain)
        log_with_context(
            logger,
            logging.INFO,
            "Name acquired",
            name=name,
            rail=intent.rail.value,
            ref=intent.external_ref,
        )
        if self.on_acquired is None:
            return
        try:
            self.on_acquired(name, intent)
        except Exception as e:
            logger.error("Error in acquisition callback: %s", e)

    def _intent_for_resume(self, handle: str) -> PurchaseIntent:
        with self._lock:
            intent = self._intents.get(handle)
            if intent is None or intent.is_terminal:
                # The process restarted while the browser was away.
                intent = PurchaseIntent(
                    rail=PaymentRail.HOSTED_CHECKOUT,
                    handle=handle,
                    amount=self.hosted_checkout.price_cents,
                    unit="usd_cents",
                )
                intent.start()
                self._intents[handle] = intent
            return intent

    def resume_checkout(self, url: str) -> CheckoutOutcome | None:
        """Complete or cancel a hosted checkout from the return ``url``."""

        def on_completed(outcome: CheckoutOutcome) -> None:
            if outcome.handle is None:
                return
            intent = self._intent_for_resume(outcome.handle)
            intent.succeed(outcome.transaction_id)
            self._release(outcome.handle)
            self._acquired(intent)

        pending = self.hosted_checkout.pending if read_marker(url) else None
        try:
            outcome = self.hosted_checkout.resume(url, on_completed=on_completed)
        except Exception as e:
            if pending is not None:
                intent = self._intent_for_resume(pending.handle)
                intent.fail(str(e))
                self._release(pending.handle)
            raise

        if outcome is not None and outcome.status == CheckoutStatus.CANCELLED and outcome.handle:
            intent = self._intent_for_resume(outcome.handle)
            intent.fail("Checkout cancelled")
            self._release(outcome.handle)
        return outcome
