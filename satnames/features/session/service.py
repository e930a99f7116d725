"""Wallet session management for satnames.

The session manager is the only owner of the wallet provider. It tracks the
connection lifecycle, keeps addresses and profile in sync with the wallet,
and drops the session whenever the wallet reports that authorization is gone.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable

from satnames.shared.errors import (
    UnauthorizedError,
    WalletConnectionError,
    is_unauthorized_error,
)
from satnames.shared.protocols import (
    SIGNED_OUT_EVENT,
    SWITCH_ACCOUNT_EVENT,
    WalletProvider,
)

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass(frozen=True)
class WalletAddresses:
    payment: str | None = None
    ordinal: str | None = None
    identity: str | None = None

    @classmethod
    def from_provider(cls, data: dict[str, Any] | None) -> "WalletAddresses":
        if not data:
            return cls()
        return cls(
            payment=data.get("bsvAddress") or None,
            ordinal=data.get("ordAddress") or None,
            identity=data.get("identityAddress") or None,
        )

    @property
    def is_valid(self) -> bool:
        return bool(self.payment)

    def to_dict(self) -> dict[str, str]:
        return {
            key: value
            for key, value in (
                ("payment", self.payment),
                ("ordinal", self.ordinal),
                ("identity", self.identity),
            )
            if value
        }


@dataclass(frozen=True)
class SocialProfile:
    display_name: str | None = None
    avatar: str | None = None

    def merged(self, data: dict[str, Any] | None) -> "SocialProfile":
        """Return a profile updated with the non-empty fields of ``data``."""
        if not data:
            return self
        return SocialProfile(
            display_name=data.get("displayName") or self.display_name,
            avatar=data.get("avatar") or self.avatar,
        )

    def to_dict(self) -> dict[str, str]:
        result = {}
        if self.display_name:
            result["display_name"] = self.display_name
        if self.avatar:
            result["avatar"] = self.avatar
        return result


@dataclass(frozen=True)
class WalletSession:
    connection_state: ConnectionState = ConnectionState.DISCONNECTED
    addresses: WalletAddresses = field(default_factory=WalletAddresses)
    profile: SocialProfile = field(default_factory=SocialProfile)
    public_key: str | None = None

    @property
    def is_connected(self) -> bool:
        return self.connection_state == ConnectionState.CONNECTED

    @property
    def addresses_valid(self) -> bool:
        return self.addresses.is_valid

    @property
    def owner_address(self) -> str | None:
        return self.addresses.ordinal or self.addresses.payment


SessionListener = Callable[[WalletSession], None]


def _spawn_daemon(target: Callable[[], None]) -> None:
    threading.Thread(target=target, daemon=True).start()


class SessionManager:
    PROFILE_RETRY_DELAY_SECONDS = 2.0

    def __init__(
        self,
        provider: WalletProvider,
        spawn: Callable[[Callable[[], None]], None] | None = None,
        timer_factory: Callable[..., Any] = threading.Timer,
        profile_retry_delay: float = PROFILE_RETRY_DELAY_SECONDS,
    ):
        self.provider = provider
        self._spawn = spawn or _spawn_daemon
        self._timer_factory = timer_factory
        self._profile_retry_delay = profile_retry_delay
        self._session = WalletSession()
        self._lock = threading.Lock()
        self._epoch = 0
        self._profile_retry_attempted = False
        self._profile_retry_timer: Any = None
        self._listeners: list[SessionListener] = []
        self._subscribed = False
        self.subscribe()

    @property
    def session(self) -> WalletSession:
        with self._lock:
            return self._session

    @property
    def is_connected(self) -> bool:
        with self._lock:
            return self._session.is_connected

    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _notify(self) -> None:
        snapshot = self.session
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error("Error in session listener: %s", e)

    def subscribe(self) -> None:
        if self._subscribed:
            return
        self.provider.on(SWITCH_ACCOUNT_EVENT, self._on_switch_account)
        self.provider.on(SIGNED_OUT_EVENT, self._on_signed_out)
        self._subscribed = True

    def close(self) -> None:
        if not self._subscribed:
            return
        self.provider.remove_listener(SWITCH_ACCOUNT_EVENT, self._on_switch_account)
        self.provider.remove_listener(SIGNED_OUT_EVENT, self._on_signed_out)
        self._subscribed = False
        self._cancel_profile_retry()

    def _cancel_profile_retry(self) -> None:
        timer = self._profile_retry_timer
        self._profile_retry_timer = None
        if timer is not None:
            timer.cancel()

    def reset(self) -> None:
        with self._lock:
            self._epoch += 1
            self._session = WalletSession()
            self._profile_retry_attempted = False
        self._cancel_profile_retry()
        logger.debug("Wallet session reset")
        self._notify()

    def _reset_if_current(self, epoch: int) -> None:
        with self._lock:
            if epoch != self._epoch:
                return
        logger.info("Wallet authorization lost, resetting session")
        self.reset()

    def connect(self) -> WalletSession:
        if not self.provider.is_ready:
            logger.error("Wallet extension not installed or not ready")
            raise WalletConnectionError("Wallet extension not installed")

        self.reset()
        with self._lock:
            epoch = self._epoch
            self._session = replace(
                self._session, connection_state=ConnectionState.CONNECTING
            )
        self._notify()

        logger.info("Connecting to wallet...")
        try:
            public_key = self.provider.connect()
        except Exception as e:
            logger.error("Error connecting wallet: %s", e)
            self._reset_if_current(epoch)
            if is_unauthorized_error(e):
                return self.session
            raise WalletConnectionError(f"Wallet connection failed: {e}") from e

        if not public_key:
            self._reset_if_current(epoch)
            raise WalletConnectionError("Wallet did not return a public key")

        with self._lock:
            if epoch != self._epoch:
                logger.info("Connection superseded before completion")
                return self._session
            self._session = replace(
                self._session,
                connection_state=ConnectionState.CONNECTED,
                public_key=public_key,
            )
        logger.info("Wallet connected with pubkey %s", public_key)
        self._notify()

        self._spawn(lambda: self._load_session_data(epoch))
        return self.session

    def _load_session_data(self, epoch: int) -> None:
        self.refresh_addresses()
        self.refresh_profile()
        self._schedule_profile_retry(epoch)

    def _schedule_profile_retry(self, epoch: int) -> None:
        # Some wallets only expose the avatar a moment after connecting.
        with self._lock:
            if epoch != self._epoch or self._profile_retry_attempted:
                return
            self._profile_retry_attempted = True

        timer = self._timer_factory(self._profile_retry_delay, self.refresh_profile)
        timer.daemon = True
        self._profile_retry_timer = timer
        timer.start()

    def disconnect(self) -> None:
        try:
            self.provider.disconnect()
        except Exception as e:
            logger.warning("Non-critical error during wallet disconnect: %s", e)
        finally:
            self.reset()

    def refresh_addresses(self) -> bool:
        with self._lock:
            if not self._session.is_connected:
                return False
            epoch = self._epoch

        try:
            data = self.provider.get_addresses()
        except Exception as e:
            logger.error("Error fetching wallet addresses: %s", e)
            if is_unauthorized_error(e):
                self._reset_if_current(epoch)
            return False

        addresses = WalletAddresses.from_provider(data)
        if not addresses.is_valid:
            logger.warning("Received empty or invalid addresses from wallet")
            return False

        with self._lock:
            if epoch != self._epoch:
                return False
            self._session = replace(self._session, addresses=addresses)
        self._notify()
        return True

    def refresh_profile(self) -> bool:
        with self._lock:
            if not self._session.is_connected:
                return False
            epoch = self._epoch

        try:
            data = self.provider.get_social_profile()
        except Exception as e:
            logger.error("Error loading social profile: %s", e)
            if is_unauthorized_error(e):
                self._reset_if_current(epoch)
            return False

        with self._lock:
            if epoch != self._epoch:
                return False
            profile = self._session.profile.merged(data)
            if profile == self._session.profile:
                return False
            self._session = replace(self._session, profile=profile)
        self._notify()
        return True

    def _on_switch_account(self) -> None:
        logger.info("Wallet account switched")
        if not self.is_connected:
            return

        def refresh() -> None:
            self.refresh_addresses()
            self.refresh_profile()

        self._spawn(refresh)

    def _on_signed_out(self) -> None:
        logger.info("Wallet signed out")
        self.reset()
        try:
            self.provider.disconnect()
        except Exception as e:
            logger.warning("Non-critical error during disconnect on signedOut: %s", e)

    def _call_wallet(self, operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            epoch = self._epoch
        try:
            return operation(*args, **kwargs)
        except Exception as e:
            if is_unauthorized_error(e):
                self._reset_if_current(epoch)
                raise UnauthorizedError(str(e)) from e
            raise

    def send_payment(self, outputs: list[dict[str, Any]]) -> dict[str, Any]:
        if not outputs or not outputs[0].get("address"):
            raise ValueError("Invalid payment outputs: missing address")
        return self._call_wallet(self.provider.send_payment, outputs)

    def purchase_listing(
        self,
        outpoint: str,
        fee_rate: float | None = None,
        fee_address: str | None = None,
    ) -> str:
        return self._call_wallet(
            self.provider.purchase_listing,
            outpoint,
            fee_rate=fee_rate,
            fee_address=fee_address,
        )

    def get_exchange_rate(self) -> float:
        return self._call_wallet(self.provider.get_exchange_rate)
