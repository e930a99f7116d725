"""Purchase event handlers for the satnames TUI."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from satnames.features.purchase.models import (
    CheckoutStatus,
    PaymentPreference,
    PurchaseIntent,
)
from satnames.features.purchase.service import PurchaseOrchestrator
from satnames.screens import (
    CheckoutOpenedScreen,
    LoadingScreen,
    PaymentPendingScreen,
    PurchaseResultScreen,
)
from satnames.shared.errors import ReconciliationError
from satnames.shared.logging import format_error_for_user, get_logger

if TYPE_CHECKING:
    from satnames.__main__ import SatNamesApp
    from satnames.features.availability.service import AvailabilityResolver
    from satnames.features.purchase.models import CheckoutOutcome

logger = get_logger(__name__)


class PurchaseHandlersMixin:
    """Mixin class providing purchase-related event handlers for SatNamesApp."""

    orchestrator: PurchaseOrchestrator
    resolver: "AvailabilityResolver"
    _loading_screen: LoadingScreen | None = None

    def _show_loading(self: "SatNamesApp", message: str) -> None:
        self._loading_screen = LoadingScreen(message)
        self.push_screen(self._loading_screen)

    def _hide_loading(self: "SatNamesApp") -> None:
        if self._loading_screen is None:
            return
        if self.screen is self._loading_screen:
            self.pop_screen()
        self._loading_screen = None

    def _show_purchase_error(self: "SatNamesApp", error: Exception) -> None:
        if isinstance(error, ReconciliationError):
            self.push_screen(PaymentPendingScreen(str(error), error.payment_ref))
            return
        self.notify(format_error_for_user(error), severity="error")

    def start_purchase(self: "SatNamesApp", preference: PaymentPreference) -> None:
        candidate = self.resolver.candidate
        if not candidate.is_purchasable:
            self.notify("Pick an available or listed name first", severity="warning")
            return

        log = logger.with_context(handle=candidate.handle, preference=preference.value)
        log.info("Purchase requested")
        self._show_loading(f"Buying {candidate.handle}...")

        def worker() -> None:
            try:
                intent = self.orchestrator.buy(candidate, preference)
                self.call_from_thread(self._on_purchase_finished, intent, None)
            except Exception as e:
                self.call_from_thread(self._on_purchase_finished, None, e)

        threading.Thread(target=worker, daemon=True).start()

    def _on_purchase_finished(
        self: "SatNamesApp",
        intent: PurchaseIntent | None,
        error: Exception | None,
    ) -> None:
        self._hide_loading()
        if error is not None:
            logger.error("Purchase failed: %s", error)
            self._show_purchase_error(error)
            return
        if intent is not None and not intent.is_terminal and intent.external_ref:
            self.push_screen(CheckoutOpenedScreen(intent.handle, intent.external_ref))

    def _on_name_acquired(self: "SatNamesApp", name: str, intent: PurchaseIntent) -> None:
        self._hide_loading()
        self.push_screen(PurchaseResultScreen(name, intent.external_ref))
        threading.Thread(target=self.resolver.retry, daemon=True).start()

    def resume_checkout(self: "SatNamesApp", url: str) -> None:
        self._show_loading("Completing your checkout...")

        def worker() -> None:
            try:
                outcome = self.orchestrator.resume_checkout(url)
                self.call_from_thread(self._on_checkout_resumed, outcome, None)
            except Exception as e:
                self.call_from_thread(self._on_checkout_resumed, None, e)

        threading.Thread(target=worker, daemon=True).start()

    def _on_checkout_resumed(
        self: "SatNamesApp",
        outcome: "CheckoutOutcome | None",
        error: Exception | None,
    ) -> None:
        self._hide_loading()
        if error is not None:
            logger.error("Checkout resume failed: %s", error)
            self._show_purchase_error(error)
            return
        if outcome is None:
            return
        if outcome.status == CheckoutStatus.CANCELLED:
            self.notify(f"Checkout for {outcome.handle} was cancelled", severity="warning")
