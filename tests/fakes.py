"""Deterministic stand-ins for the wallet, name service, market and timers."""

from satnames.features.availability.service import NameCandidate, NameStatus
from satnames.features.market.service import Listing
from satnames.features.registry.service import (
    PaymentCompleteResult,
    RegistrationResult,
)

PUBKEY = "02b4632d08485ff1df2db55b9dafd23347d1c47a457072a1e87be26896549a8737"
PAYMENT_ADDRESS = "1BoatSLRHtKNngkdXEeobR76b53LETtpyT"
ORDINAL_ADDRESS = "1Ord1naLsAddressxxxxxxxxxxxxxxxxx"
IDENTITY_ADDRESS = "1Ident1tyAddressxxxxxxxxxxxxxxxxx"
TXID = "a" * 64


class FakeTimer:
    """Stand-in for threading.Timer that fires only when told to."""

    instances: list["FakeTimer"] = []

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False
        FakeTimer.instances.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if self.started and not self.cancelled:
            self.function(*self.args, **self.kwargs)


def run_inline(target):
    target()


class FakeWalletProvider:
    def __init__(self):
        self.ready = True
        self.pubkey = PUBKEY
        self.addresses = {
            "bsvAddress": PAYMENT_ADDRESS,
            "ordAddress": ORDINAL_ADDRESS,
            "identityAddress": IDENTITY_ADDRESS,
        }
        self.profile = {"displayName": "Alice", "avatar": "https://img/alice.png"}
        self.exchange_rate = 50.0
        self.payment_response = {"txid": TXID}
        self.listing_txid = TXID
        self.errors: dict[str, Exception] = {}
        self.calls: list[tuple] = []
        self.handlers: dict[str, list] = {}

    def _maybe_raise(self, name):
        error = self.errors.get(name)
        if error is not None:
            raise error

    @property
    def is_ready(self):
        return self.ready

    def connect(self):
        self.calls.append(("connect",))
        self._maybe_raise("connect")
        return self.pubkey

    def disconnect(self):
        self.calls.append(("disconnect",))
        self._maybe_raise("disconnect")

    def get_addresses(self):
        self.calls.append(("get_addresses",))
        self._maybe_raise("get_addresses")
        return self.addresses

    def get_social_profile(self):
        self.calls.append(("get_social_profile",))
        self._maybe_raise("get_social_profile")
        return self.profile

    def send_payment(self, outputs):
        self.calls.append(("send_payment", outputs))
        self._maybe_raise("send_payment")
        return self.payment_response

    def purchase_listing(self, outpoint, fee_rate=None, fee_address=None):
        self.calls.append(("purchase_listing", outpoint, fee_rate, fee_address))
        self._maybe_raise("purchase_listing")
        return self.listing_txid

    def get_exchange_rate(self):
        self.calls.append(("get_exchange_rate",))
        self._maybe_raise("get_exchange_rate")
        return self.exchange_rate

    def on(self, event, handler):
        self.handlers.setdefault(event, []).append(handler)

    def remove_listener(self, event, handler):
        if handler in self.handlers.get(event, []):
            self.handlers[event].remove(handler)

    def emit(self, event):
        for handler in list(self.handlers.get(event, [])):
            handler()

    def call_names(self):
        return [call[0] for call in self.calls]


class FakeRegistry:
    def __init__(self):
        self.registered: dict[str, str] = {}
        self.lookup_error: Exception | None = None
        self.register_result = RegistrationResult(success=True, transaction_id=TXID)
        self.register_error: Exception | None = None
        self.payment_complete_result = PaymentCompleteResult(success=True, registered=False)
        self.payment_complete_error: Exception | None = None
        self.checkout_url: str | None = "https://checkout.example.com/session/cs_123"
        self.checkout_error: Exception | None = None
        self.calls: list[tuple] = []

    def lookup(self, handle):
        self.calls.append(("lookup", handle))
        if self.lookup_error is not None:
            raise self.lookup_error
        return self.registered.get(handle)

    def register(self, handle, address=None):
        self.calls.append(("register", handle, address))
        if self.register_error is not None:
            raise self.register_error
        return self.register_result

    def create_checkout_session(
        self, handle, price_cents, success_url, cancel_url, product_id="", address=None
    ):
        self.calls.append(
            ("create_checkout_session", handle, price_cents, success_url, cancel_url, address)
        )
        if self.checkout_error is not None:
            raise self.checkout_error
        return self.checkout_url

    def payment_complete(self, handle, txid, address=None):
        self.calls.append(("payment_complete", handle, txid, address))
        if self.payment_complete_error is not None:
            raise self.payment_complete_error
        return self.payment_complete_result

    def call_names(self):
        return [call[0] for call in self.calls]


class FakeMarket:
    def __init__(self):
        self.listings: dict[str, Listing] = {}
        self.calls: list[str] = []
        self.listing_error: Exception | None = None

    def get_listing(self, outpoint):
        self.calls.append(outpoint)
        if self.listing_error is not None:
            raise self.listing_error
        return self.listings.get(outpoint)


class RecordingNavigator:
    def __init__(self):
        self.opened: list[str] = []
        self.replaced: list[str] = []

    def open(self, url):
        self.opened.append(url)

    def replace_url(self, url):
        self.replaced.append(url)


def make_candidate(handle="alice", status=NameStatus.AVAILABLE, **kwargs):
    return NameCandidate(raw_input=handle, handle=handle, status=status, **kwargs)


