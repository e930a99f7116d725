"""Collaborator contracts used across satnames features."""

from __future__ import annotations

from typing import Any, Callable, Protocol

SWITCH_ACCOUNT_EVENT = "switchAccount"
SIGNED_OUT_EVENT = "signedOut"

EventHandler = Callable[[], None]


class WalletProvider(Protocol):
    """Capability set of a browser-style wallet.

    Address and profile payloads use the wallet's own keys:
    ``bsvAddress``, ``ordAddress``, ``identityAddress`` and
    ``displayName``, ``avatar``.
    """

    @property
    def is_ready(self) -> bool: ...

    def connect(self) -> str | None: ...

    def disconnect(self) -> None: ...

    def get_addresses(self) -> dict[str, Any] | None: ...

    def get_social_profile(self) -> dict[str, Any] | None: ...

    def send_payment(self, outputs: list[dict[str, Any]]) -> dict[str, Any]: ...

    def purchase_listing(
        self,
        outpoint: str,
        fee_rate: float | None = None,
        fee_address: str | None = None,
    ) -> str: ...

    def get_exchange_rate(self) -> float: ...

    def on(self, event: str, handler: EventHandler) -> None: ...

    def remove_listener(self, event: str, handler: EventHandler) -> None: ...


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def put(self, key: str, value: Any) -> None: ...

    def take(self, key: str) -> Any | None: ...

    def delete(self, key: str) -> bool: ...


class Navigator(Protocol):
    """Opens the hosted checkout page and rewrites the return URL."""

    def open(self, url: str) -> None: ...

    def replace_url(self, url: str) -> None: ...
