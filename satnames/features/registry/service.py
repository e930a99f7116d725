"""Registration backend client for satnames."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from satnames.shared.network import NetworkClient, NetworkError, NetworkErrorType

logger = logging.getLogger(__name__)


@dataclass
class RegistrationResult:
    success: bool
    transaction_id: str | None = None
    name: str | None = None
    message: str | None = None

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "RegistrationResult":
        return cls(
            success=bool(data.get("success")),
            transaction_id=data.get("transactionId") or None,
            name=data.get("name") or None,
            message=data.get("message") or data.get("error") or None,
        )


@dataclass
class PaymentCompleteResult:
    success: bool
    registered: bool = False
    transaction_id: str | None = None

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "PaymentCompleteResult":
        transaction_id = data.get("transactionId") or None
        return cls(
            success=bool(data.get("success")),
            registered=bool(data.get("registered")) or transaction_id is not None,
            transaction_id=transaction_id,
        )


class RegistryService:
    """Talks to the name registration API.

    Presence of a ``mine:<handle>`` answer means the handle is taken; the
    server's own ``/register`` handler rejects handles on the same signal.
    """

    def __init__(self, network_client: NetworkClient):
        self.network_client = network_client

    def lookup(self, handle: str) -> str | None:
        """Return the outpoint registered for ``handle``, or None if free."""
        response = self.network_client.get_optional(
            f"/mine/{quote(handle)}",
            context="Look up name",
        )
        if response is None:
            return None

        outpoint = response.get("outpoint")
        if not outpoint:
            raise NetworkError(
                error_type=NetworkErrorType.UNKNOWN,
                message=f"Look up name: malformed response for {handle}",
            )
        return str(outpoint)

    def register(self, handle: str, address: str | None = None) -> RegistrationResult:
        form = {"handle": handle}
        if address:
            form["address"] = address
        response = self.network_client.post(
            "/register",
            context="Register name",
            data=form,
        )
        result = RegistrationResult.from_response(response)
        logger.info(
            "Registration for %s returned success=%s txid=%s",
            handle,
            result.success,
            result.transaction_id,
        )
        return result

    def create_checkout_session(
        self,
        handle: str,
        price_cents: int,
        success_url: str,
        cancel_url: str,
        product_id: str = "",
        address: str | None = None,
    ) -> str | None:
        form = {
            "productId": product_id or "name_registration",
            "name": handle,
            "price": str(price_cents),
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        if address:
            form["address"] = address
        response = self.network_client.post(
            "/create-checkout-session",
            context="Create checkout session",
            data=form,
        )
        url = response.get("url")
        return str(url) if url else None

    def payment_complete(
        self, handle: str, txid: str, address: str | None = None
    ) -> PaymentCompleteResult:
        form = {"handle": handle, "txid": txid}
        if address:
            form["address"] = address
        response = self.network_client.post(
            "/payment-complete",
            context="Confirm payment",
            data=form,
        )
        return PaymentCompleteResult.from_response(response)
