"""Hosted card checkout rail.

The user leaves the app for the payment processor's page. A pending
registration is written to durable storage first, and the app finishes the
registration when it is started again with the return URL.
"""

from __future__ import annotations

import logging
import webbrowser
from typing import TYPE_CHECKING, Callable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from satnames.features.purchase.models import (
    CheckoutOutcome,
    CheckoutStatus,
    PaymentRail,
    PendingRegistration,
    PurchaseIntent,
)
from satnames.features.registry.service import RegistryService
from satnames.shared.errors import PaymentError, RegistrationPendingError
from satnames.shared.network import NetworkError
from satnames.shared.protocols import KeyValueStore, Navigator

if TYPE_CHECKING:
    from satnames.features.availability.service import NameCandidate
    from satnames.features.session.service import SessionManager

logger = logging.getLogger(__name__)

PENDING_REGISTRATION_SLOT = "pending_registration"
MARKER_PARAM = "payment"
SUCCESS_MARKER = "success"
CANCEL_MARKER = "cancelled"


def with_marker(url: str, marker: str) -> str:
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != MARKER_PARAM]
    query.append((MARKER_PARAM, marker))
    return urlunsplit(parts._replace(query=urlencode(query)))


def read_marker(url: str) -> str | None:
    for key, value in parse_qsl(urlsplit(url).query, keep_blank_values=True):
        if key == MARKER_PARAM:
            return value
    return None


def strip_markers(url: str) -> str:
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != MARKER_PARAM]
    return urlunsplit(parts._replace(query=urlencode(query)))


class BrowserNavigator:
    """Opens checkout in the system browser and remembers the app URL."""

    def __init__(self, current_url: str = ""):
        self.current_url = current_url

    def open(self, url: str) -> None:
        logger.info("Opening checkout page %s", url)
        webbrowser.open(url)

    def replace_url(self, url: str) -> None:
        self.current_url = url


class HostedCheckoutAdapter:
    rail = PaymentRail.HOSTED_CHECKOUT
    completes_immediately = False

    def __init__(
        self,
        registry: RegistryService,
        store: KeyValueStore,
        navigator: Navigator,
        price_cents: int,
        return_url: str,
        product_id: str = "",
    ):
        self.registry = registry
        self.store = store
        self.navigator = navigator
        self.price_cents = price_cents
        self.return_url = return_url
        self.product_id = product_id

    @property
    def pending(self) -> PendingRegistration | None:
        data = self.store.get(PENDING_REGISTRATION_SLOT)
        return PendingRegistration.from_dict(data) if data else None

    def execute(
        self,
        intent: PurchaseIntent,
        candidate: "NameCandidate",
        session_manager: "SessionManager",
    ) -> str:
        intent.amount = self.price_cents
        intent.unit = "usd_cents"
        owner = session_manager.session.owner_address
        pending = PendingRegistration(handle=intent.handle, address=owner)
        self.store.put(PENDING_REGISTRATION_SLOT, pending.to_dict())

        try:
            checkout_url = self.registry.create_checkout_session(
                handle=intent.handle,
                price_cents=self.price_cents,
                success_url=with_marker(self.return_url, SUCCESS_MARKER),
                cancel_url=with_marker(self.return_url, CANCEL_MARKER),
                product_id=self.product_id,
                address=owner,
            )
        except NetworkError as e:
            self.store.delete(PENDING_REGISTRATION_SLOT)
            raise PaymentError(f"Could not start checkout: {e}") from e

        if not checkout_url:
            self.store.delete(PENDING_REGISTRATION_SLOT)
            raise PaymentError("Checkout session did not return a payment page")

        logger.info("Redirecting to hosted checkout for %s", intent.handle)
        self.navigator.open(checkout_url)
        return checkout_url

    def resume(
        self,
        url: str,
        on_completed: Callable[[CheckoutOutcome], None] | None = None,
    ) -> CheckoutOutcome | None:
        """Finish a checkout after the processor redirected back to ``url``.

        The pending slot is taken (read and deleted) before anything else, so
        a second page load with the same URL does nothing. The URL markers are
        always stripped last.
        """
        marker = read_marker(url)
        if marker is None:
            return None

        try:
            if marker == CANCEL_MARKER:
                data = self.store.take(PENDING_REGISTRATION_SLOT)
                handle = data.get("handle") if data else None
                logger.info("Checkout cancelled for %s", handle)
                return CheckoutOutcome(status=CheckoutStatus.CANCELLED, handle=handle)

            if marker != SUCCESS_MARKER:
                logger.warning("Ignoring unknown checkout marker %r", marker)
                return None

            data = self.store.take(PENDING_REGISTRATION_SLOT)
            if not data:
                logger.info("Checkout success marker without a pending registration")
                return None

            pending = PendingRegistration.from_dict(data)
            outcome = self._complete(pending)
            if on_completed is not None:
                on_completed(outcome)
            return outcome
        finally:
            self.navigator.replace_url(strip_markers(url))

    def _complete(self, pending: PendingRegistration) -> CheckoutOutcome:
        try:
            result = self.registry.register(pending.handle, pending.address)
        except NetworkError as e:
            raise RegistrationPendingError(
                f"Payment succeeded but registering {pending.handle} failed: {e}",
                handle=pending.handle,
            ) from e

        if not result.success:
            raise RegistrationPendingError(
                f"Payment succeeded but registering {pending.handle} failed: "
                f"{result.message or 'no confirmation'}",
                handle=pending.handle,
            )

        logger.info("Registered %s after checkout", pending.handle)
        return CheckoutOutcome(
            status=CheckoutStatus.COMPLETED,
            handle=pending.handle,
            transaction_id=result.transaction_id,
        )
