"""Direct on-chain wallet payment rail."""

from __future__ import annotations

import logging
import math
import time
from decimal import ROUND_FLOOR, Decimal
from typing import TYPE_CHECKING, Any, Callable

from satnames.features.purchase.models import PaymentRail, PurchaseIntent
from satnames.features.registry.service import RegistryService
from satnames.shared.errors import (
    PaymentError,
    ReconciliationError,
    UnauthorizedError,
)
from satnames.shared.network import NetworkError
from satnames.shared.protocols import KeyValueStore

if TYPE_CHECKING:
    from satnames.features.availability.service import NameCandidate
    from satnames.features.session.service import SessionManager

logger = logging.getLogger(__name__)

EXCHANGE_RATE_SLOT = "exchange_rate"
SATOSHIS_PER_UNIT = 100_000_000


def satoshis_for(price_usd: float, usd_per_unit: float) -> int:
    """``floor(price_usd / usd_per_unit * 1e8)`` without float drift."""
    sats = Decimal(str(price_usd)) / Decimal(str(usd_per_unit)) * SATOSHIS_PER_UNIT
    return int(sats.to_integral_value(rounding=ROUND_FLOOR))


def _valid_rate(value: Any) -> float | None:
    try:
        rate = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(rate) or rate <= 0:
        return None
    return rate


class DirectWalletAdapter:
    rail = PaymentRail.DIRECT_WALLET
    completes_immediately = True
    MAX_RATE_AGE_SECONDS = 3600.0

    def __init__(
        self,
        registry: RegistryService,
        store: KeyValueStore,
        price_usd: float,
        collector_address: str,
        max_rate_age: float = MAX_RATE_AGE_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.registry = registry
        self.store = store
        self.price_usd = price_usd
        self.collector_address = collector_address
        self.max_rate_age = max_rate_age
        self.clock = clock

    def resolve_exchange_rate(self, session_manager: "SessionManager") -> float:
        try:
            rate = _valid_rate(session_manager.get_exchange_rate())
        except UnauthorizedError:
            raise
        except Exception as e:
            logger.warning("Live exchange rate unavailable: %s", e)
            rate = None

        if rate is not None:
            self.store.put(EXCHANGE_RATE_SLOT, {"rate": rate, "fetched_at": self.clock()})
            return rate

        cached = self.store.get(EXCHANGE_RATE_SLOT) or {}
        cached_rate = _valid_rate(cached.get("rate"))
        fetched_at = cached.get("fetched_at", 0)
        if cached_rate is not None and self.clock() - fetched_at < self.max_rate_age:
            logger.info("Using cached exchange rate %.4f", cached_rate)
            return cached_rate

        raise PaymentError("No valid exchange rate is available. Try again shortly.")

    def quote(self, session_manager: "SessionManager") -> int:
        return satoshis_for(self.price_usd, self.resolve_exchange_rate(session_manager))

    def execute(
        self,
        intent: PurchaseIntent,
        candidate: "NameCandidate",
        session_manager: "SessionManager",
    ) -> str:
        satoshis = self.quote(session_manager)
        if satoshis <= 0:
            raise PaymentError("Computed payment amount is zero")
        intent.amount = satoshis
        intent.unit = "satoshis"

        outputs = [{"address": self.collector_address, "satoshis": satoshis}]
        try:
            response = session_manager.send_payment(outputs)
        except UnauthorizedError:
            raise
        except Exception as e:
            raise PaymentError(f"Wallet payment failed: {e}") from e

        txid = response.get("txid") if isinstance(response, dict) else response
        if not txid:
            raise PaymentError("Wallet payment returned no transaction id")
        txid = str(txid)
        intent.external_ref = txid
        logger.info("Paid %d sats for %s in %s", satoshis, intent.handle, txid)

        # Funds have moved: nothing past this point may surface as a PaymentError.
        try:
            self._reconcile(intent.handle, txid, session_manager)
        except ReconciliationError:
            raise
        except Exception as e:
            raise ReconciliationError(
                f"Payment {txid} was sent but registering {intent.handle} failed: {e}",
                handle=intent.handle,
                payment_ref=txid,
            ) from e
        return txid

    def _reconcile(
        self, handle: str, txid: str, session_manager: "SessionManager"
    ) -> None:
        session = session_manager.session
        try:
            confirmation = self.registry.payment_complete(
                handle, txid, session.addresses.identity
            )
        except NetworkError as e:
            logger.warning(
                "Payment-complete call for %s failed, registering directly: %s", handle, e
            )
            confirmation = None
        if confirmation is not None and confirmation.success and confirmation.registered:
            logger.info("Backend already registered %s", handle)
            return

        result = self.registry.register(handle, session.owner_address)
        if not result.success:
            raise ReconciliationError(
                f"Payment {txid} was sent but {handle} is not registered yet: "
                f"{result.message or 'no confirmation'}",
                handle=handle,
                payment_ref=txid,
            )
