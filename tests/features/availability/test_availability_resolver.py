"""Tests for the debounced availability resolver."""

import pytest

from fakes import FakeTimer
from satnames.features.availability.service import (
    AvailabilityResolver,
    NameCandidate,
    NameStatus,
)
from satnames.features.market.service import Listing
from satnames.shared.network import NetworkError, NetworkErrorType

OUTPOINT = "4a5e1e4baab89f3a32518a88c31bc87f618f76673e2cc77ab2127b7afdeda33b_0"


@pytest.fixture
def changes():
    return []


@pytest.fixture
def resolver(registry, market, changes):
    return AvailabilityResolver(
        registry,
        market,
        debounce_seconds=0.5,
        timer_factory=FakeTimer,
        on_change=changes.append,
    )


def live_timers():
    return [t for t in FakeTimer.instances if t.started and not t.cancelled]


def type_slowly(resolver, text):
    for i in range(1, len(text) + 1):
        resolver.update_input(text[:i])


class TestCandidate:
    def test_purchasable_statuses(self):
        assert NameCandidate(status=NameStatus.AVAILABLE).is_purchasable
        assert NameCandidate(status=NameStatus.REGISTERED_LISTED).is_purchasable
        assert not NameCandidate(status=NameStatus.REGISTERED_UNLISTED).is_purchasable
        assert not NameCandidate(status=NameStatus.FAILED).is_purchasable
        assert not NameCandidate(status=NameStatus.CHECKING).is_purchasable


class TestDebounce:
    def test_input_is_sanitized(self, resolver):
        candidate = resolver.update_input("Al!ce")
        assert candidate.handle == "alce"
        assert candidate.raw_input == "Al!ce"

    def test_short_handle_is_not_checked(self, resolver, registry):
        resolver.update_input("ab")

        assert resolver.candidate.status == NameStatus.UNKNOWN
        assert FakeTimer.instances == []
        assert registry.calls == []

    def test_one_check_per_debounce_window(self, resolver, registry):
        type_slowly(resolver, "alice")

        timers = live_timers()
        assert len(timers) == 1
        assert timers[0].interval == 0.5
        assert timers[0].daemon is True
        assert resolver.candidate.status == NameStatus.CHECKING

        timers[0].fire()

        assert registry.calls == [("lookup", "alice")]
        assert resolver.candidate.status == NameStatus.AVAILABLE

    def test_same_handle_after_sanitizing_does_not_restart(self, resolver):
        resolver.update_input("alice")
        resolver.update_input("alice!")

        assert len(FakeTimer.instances) == 1
        assert resolver.candidate.raw_input == "alice!"
        assert resolver.candidate.status == NameStatus.CHECKING

    def test_superseded_timer_never_applies(self, resolver, registry):
        resolver.update_input("alice")
        old_timer = FakeTimer.instances[0]
        resolver.update_input("alicia")

        old_timer.function(*old_timer.args)

        assert registry.calls == []
        assert resolver.candidate.handle == "alicia"
        assert resolver.candidate.status == NameStatus.CHECKING

    def test_stale_result_is_discarded(self, resolver, registry):
        resolver.update_input("alice")
        timer = FakeTimer.instances[0]

        def lookup_then_user_types(handle):
            resolver.update_input("bo")
            return None

        registry.lookup = lookup_then_user_types
        timer.fire()

        assert resolver.candidate.handle == "bo"
        assert resolver.candidate.status == NameStatus.UNKNOWN

    def test_clearing_input(self, resolver):
        resolver.update_input("alice")
        resolver.update_input("")

        assert resolver.candidate == NameCandidate()
        assert FakeTimer.instances[0].cancelled is True


class TestResolution:
    def test_free_name_is_available(self, resolver):
        resolver.check("alice")
        live_timers()[0].fire()

        assert resolver.candidate.status == NameStatus.AVAILABLE
        assert resolver.candidate.listing_outpoint is None

    def test_registered_and_listed(self, resolver, registry, market):
        registry.registered["alice"] = OUTPOINT
        market.listings[OUTPOINT] = Listing(OUTPOINT, for_sale=True, price=100000)

        resolver.check("alice")
        live_timers()[0].fire()

        candidate = resolver.candidate
        assert candidate.status == NameStatus.REGISTERED_LISTED
        assert candidate.listing_outpoint == OUTPOINT
        assert candidate.listing_price == 100000
        assert market.calls == [OUTPOINT]

    def test_registered_not_for_sale(self, resolver, registry, market):
        registry.registered["alice"] = OUTPOINT
        market.listings[OUTPOINT] = Listing(OUTPOINT, for_sale=False, price=0)

        resolver.check("alice")
        live_timers()[0].fire()

        assert resolver.candidate.status == NameStatus.REGISTERED_UNLISTED
        assert resolver.candidate.listing_price is None

    def test_registered_without_market_record(self, resolver, registry):
        registry.registered["alice"] = OUTPOINT

        resolver.check("alice")
        live_timers()[0].fire()

        assert resolver.candidate.status == NameStatus.REGISTERED_UNLISTED

    def test_notifies_each_transition(self, resolver, changes):
        resolver.update_input("alice")
        live_timers()[0].fire()

        statuses = [c.status for c in changes]
        assert statuses == [NameStatus.UNKNOWN, NameStatus.CHECKING, NameStatus.AVAILABLE]

    def test_callback_errors_are_contained(self, registry, market):
        def explode(candidate):
            raise RuntimeError("ui gone")

        resolver = AvailabilityResolver(
            registry, market, timer_factory=FakeTimer, on_change=explode
        )
        resolver.update_input("alice")
        live_timers()[0].fire()

        assert resolver.candidate.status == NameStatus.AVAILABLE


class TestStickyFailure:
    def fail_once(self, resolver, registry):
        registry.lookup_error = NetworkError(
            error_type=NetworkErrorType.TIMEOUT, message="Request timed out"
        )
        resolver.update_input("alice")
        live_timers()[0].fire()

    def test_failure_is_reported(self, resolver, registry):
        self.fail_once(resolver, registry)

        assert resolver.candidate.status == NameStatus.FAILED
        assert resolver.candidate.error == "Request timed out"

    def test_no_automatic_recheck_after_failure(self, resolver, registry):
        self.fail_once(resolver, registry)
        timers_before = len(FakeTimer.instances)

        resolver.check("alice")
        resolver.update_input("alice ")

        assert len(FakeTimer.instances) == timers_before
        assert resolver.candidate.status == NameStatus.FAILED
        assert registry.call_names() == ["lookup"]

    def test_retry_clears_failure(self, resolver, registry):
        self.fail_once(resolver, registry)
        registry.lookup_error = None

        assert resolver.retry() is True

        assert resolver.candidate.status == NameStatus.AVAILABLE
        assert registry.call_names() == ["lookup", "lookup"]

    def test_listing_failure_is_sticky(self, resolver, registry, market):
        registry.registered["alice"] = OUTPOINT
        market.listing_error = NetworkError(
            error_type=NetworkErrorType.HTTP_ERROR, message="HTTP error 500", status_code=500
        )
        resolver.update_input("alice")
        live_timers()[0].fire()
        timers_before = len(FakeTimer.instances)

        resolver.check("alice")

        assert resolver.candidate.status == NameStatus.FAILED
        assert len(FakeTimer.instances) == timers_before
        assert registry.call_names() == ["lookup"]
        assert market.calls == [OUTPOINT]

    def test_failed_retry_stays_sticky(self, resolver, registry):
        self.fail_once(resolver, registry)

        resolver.retry()
        resolver.check("alice")

        assert resolver.candidate.status == NameStatus.FAILED
        assert registry.call_names() == ["lookup", "lookup"]

    def test_different_handle_clears_failure(self, resolver, registry):
        self.fail_once(resolver, registry)
        registry.lookup_error = None

        resolver.update_input("alicia")
        live_timers()[-1].fire()

        assert resolver.candidate.status == NameStatus.AVAILABLE

    def test_retry_needs_checkable_handle(self, resolver):
        resolver.update_input("ab")
        assert resolver.retry() is False


class TestClose:
    def test_close_cancels_pending_check(self, resolver, registry):
        resolver.update_input("alice")
        timer = FakeTimer.instances[0]

        resolver.close()
        timer.function(*timer.args)

        assert timer.cancelled is True
        assert registry.calls == []
