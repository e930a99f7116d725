"""Name availability checks for satnames."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Protocol

from satnames.features.market.service import Listing
from satnames.features.names.validators import HandleValidator, sanitize_handle

logger = logging.getLogger(__name__)


class NameStatus(Enum):
    UNKNOWN = "unknown"
    CHECKING = "checking"
    FAILED = "failed"
    AVAILABLE = "available"
    REGISTERED_UNLISTED = "registered_unlisted"
    REGISTERED_LISTED = "registered_listed"


@dataclass(frozen=True)
class NameCandidate:
    raw_input: str = ""
    handle: str = ""
    status: NameStatus = NameStatus.UNKNOWN
    listing_outpoint: str | None = None
    listing_price: int | None = None
    error: str | None = None

    @property
    def is_purchasable(self) -> bool:
        return self.status in (NameStatus.AVAILABLE, NameStatus.REGISTERED_LISTED)


class RegistryLookup(Protocol):
    def lookup(self, handle: str) -> str | None: ...


class ListingLookup(Protocol):
    def get_listing(self, outpoint: str) -> Listing | None: ...


class AvailabilityResolver:
    DEBOUNCE_SECONDS = 0.5

    def __init__(
        self,
        registry: RegistryLookup,
        market: ListingLookup,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        timer_factory: Callable[..., Any] = threading.Timer,
        on_change: Callable[[NameCandidate], None] | None = None,
    ):
        self.registry = registry
        self.market = market
        self.debounce_seconds = debounce_seconds
        self.on_change = on_change
        self._timer_factory = timer_factory
        self._candidate = NameCandidate()
        self._generation = 0
        self._timer: Any = None
        self._sticky_failed: str | None = None
        self._lock = threading.Lock()

    @property
    def candidate(self) -> NameCandidate:
        with self._lock:
            return self._candidate

    def _notify(self, candidate: NameCandidate) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change(candidate)
        except Exception as e:
            logger.error("Error in availability callback: %s", e)

    def _cancel_timer_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _supersede_locked(self, raw_input: str, handle: str) -> None:
        self._generation += 1
        self._cancel_timer_locked()
        self._candidate = NameCandidate(raw_input=raw_input, handle=handle)
        self._sticky_failed = None

    def update_input(self, raw_input: str) -> NameCandidate:
        handle = sanitize_handle(raw_input)
        with self._lock:
            changed = handle != self._candidate.handle
            if changed:
                self._supersede_locked(raw_input, handle)
            else:
                self._candidate = replace(self._candidate, raw_input=raw_input)
            candidate = self._candidate

        if changed:
            self._notify(candidate)
            self.check(handle)
        return self.candidate

    def check(self, handle: str) -> None:
        if not handle:
            return

        with self._lock:
            if handle != self._candidate.handle:
                self._supersede_locked(handle, handle)
            self._cancel_timer_locked()

            if not HandleValidator.is_checkable(handle):
                self._candidate = replace(
                    self._candidate,
                    status=NameStatus.UNKNOWN,
                    listing_outpoint=None,
                    listing_price=None,
                    error=None,
                )
                candidate = self._candidate
                timer = None
            elif handle == self._sticky_failed:
                logger.debug("Skipping automatic check for failed handle %s", handle)
                return
            else:
                self._generation += 1
                self._candidate = replace(
                    self._candidate, status=NameStatus.CHECKING, error=None
                )
                candidate = self._candidate
                timer = self._timer_factory(
                    self.debounce_seconds,
                    self._run_check,
                    args=(handle, self._generation),
                )
                timer.daemon = True
                self._timer = timer

        if timer is not None:
            timer.start()
        self._notify(candidate)

    def retry(self) -> bool:
        """Run one immediate check for the active handle, clearing a sticky failure."""
        with self._lock:
            handle = self._candidate.handle
            if not HandleValidator.is_checkable(handle):
                return False
            self._sticky_failed = None
            self._cancel_timer_locked()
            self._generation += 1
            generation = self._generation
            self._candidate = replace(
                self._candidate, status=NameStatus.CHECKING, error=None
            )
            candidate = self._candidate

        logger.info("Retrying availability check for %s", handle)
        self._notify(candidate)
        self._run_check(handle, generation)
        return True

    def _resolve(self, handle: str) -> dict[str, Any]:
        outpoint = self.registry.lookup(handle)
        if outpoint is None:
            return {"status": NameStatus.AVAILABLE}

        listing = self.market.get_listing(outpoint)
        if listing is not None and listing.is_purchasable:
            return {
                "status": NameStatus.REGISTERED_LISTED,
                "listing_outpoint": outpoint,
                "listing_price": listing.price,
            }
        return {"status": NameStatus.REGISTERED_UNLISTED, "listing_outpoint": outpoint}

    def _run_check(self, handle: str, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None

        failed = False
        try:
            result = self._resolve(handle)
        except Exception as e:
            logger.warning("Availability check for %s failed: %s", handle, e)
            failed = True
            result = {"status": NameStatus.FAILED, "error": str(e)}

        with self._lock:
            if generation != self._generation or handle != self._candidate.handle:
                logger.debug("Discarding stale availability result for %s", handle)
                return
            if failed:
                self._sticky_failed = handle
            self._candidate = replace(
                self._candidate,
                status=result["status"],
                listing_outpoint=result.get("listing_outpoint"),
                listing_price=result.get("listing_price"),
                error=result.get("error"),
            )
            candidate = self._candidate

        logger.info("Availability of %s: %s", handle, candidate.status.value)
        self._notify(candidate)

    def close(self) -> None:
        with self._lock:
            self._generation += 1
            self._cancel_timer_locked()
