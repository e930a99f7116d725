"""Wallet provider backed by a local wallet bridge.

The bridge exposes the browser wallet's capabilities as JSON over HTTP and
pushes account events (``switchAccount``, ``signedOut``) over a websocket.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

import websocket

from satnames.config import DEFAULT_WALLET_BRIDGE_URL
from satnames.shared.errors import UnauthorizedError
from satnames.shared.network import (
    NetworkClient,
    NetworkError,
    RetryConfig,
    TimeoutConfig,
)
from satnames.shared.protocols import EventHandler

logger = logging.getLogger(__name__)

UNAUTHORIZED_STATUS_CODES = (401, 403)


@dataclass
class WalletBridgeConfig:
    reconnect_delay: float = 1.0
    max_reconnect_delay: float = 30.0
    auto_reconnect: bool = True
    status_timeout: float = 2.0


def _build_ws_url(bridge_url: str) -> str:
    url = bridge_url.rstrip("/")
    if url.startswith("https://"):
        url = "wss://" + url[len("https://"):]
    elif url.startswith("http://"):
        url = "ws://" + url[len("http://"):]
    return f"{url}/events"


class WalletBridge:
    def __init__(
        self,
        bridge_url: str = DEFAULT_WALLET_BRIDGE_URL,
        timeout_config: TimeoutConfig | None = None,
        config: WalletBridgeConfig | None = None,
        network_client: NetworkClient | None = None,
    ):
        self.bridge_url = bridge_url.rstrip("/")
        self.config = config or WalletBridgeConfig()
        # Wallet actions move funds, so nothing here is retried.
        self.network_client = network_client or NetworkClient(
            self.bridge_url,
            timeout_config=timeout_config,
            retry_config=RetryConfig(max_retries=0),
        )
        self.ws_url = _build_ws_url(self.bridge_url)
        self._handlers: dict[str, list[EventHandler]] = {}
        self._lock = threading.Lock()
        self._ws: websocket.WebSocketApp | None = None
        self._ws_thread: threading.Thread | None = None
        self._running = False
        self._reconnect_delay = self.config.reconnect_delay

    def _request(self, method: str, endpoint: str, context: str, **kwargs) -> dict[str, Any]:
        call: Callable[..., dict[str, Any]] = getattr(self.network_client, method)
        try:
            return call(endpoint, context=context, **kwargs)
        except NetworkError as e:
            if e.status_code in UNAUTHORIZED_STATUS_CODES:
                raise UnauthorizedError(f"Unauthorized: {e.response_text or context}") from e
            raise

    @property
    def is_ready(self) -> bool:
        try:
            status = self.network_client.get(
                "/status",
                context="Wallet status",
                timeout=self.config.status_timeout,
            )
        except NetworkError as e:
            logger.debug("Wallet bridge not reachable: %s", e)
            return False
        return bool(status.get("isReady"))

    def connect(self) -> str | None:
        data = self._request("post", "/connect", "Wallet connect")
        return data.get("pubKey") or None

    def disconnect(self) -> None:
        self._request("post", "/disconnect", "Wallet disconnect")

    def get_addresses(self) -> dict[str, Any] | None:
        return self._request("get", "/addresses", "Wallet addresses") or None

    def get_social_profile(self) -> dict[str, Any] | None:
        return self._request("get", "/social-profile", "Wallet profile") or None

    def send_payment(self, outputs: list[dict[str, Any]]) -> dict[str, Any]:
        return self._request("post", "/send-bsv", "Wallet payment", json=outputs)

    def purchase_listing(
        self,
        outpoint: str,
        fee_rate: float | None = None,
        fee_address: str | None = None,
    ) -> str:
        payload: dict[str, Any] = {"outpoint": outpoint}
        if fee_rate is not None:
            payload["marketplaceRate"] = fee_rate
        if fee_address:
            payload["marketplaceAddress"] = fee_address
        data = self._request("post", "/purchase-ordinal", "Listing purchase", json=payload)
        return data.get("txid", "")

    def get_exchange_rate(self) -> float:
        data = self._request("get", "/exchange-rate", "Exchange rate")
        return data.get("rate")

    def on(self, event: str, handler: EventHandler) -> None:
        with self._lock:
            self._handlers.setdefault(event, []).append(handler)

    def remove_listener(self, event: str, handler: EventHandler) -> None:
        with self._lock:
            handlers = self._handlers.get(event, [])
            if handler in handlers:
                handlers.remove(handler)

    def emit(self, event: str) -> None:
        with self._lock:
            handlers = list(self._handlers.get(event, []))
        for handler in handlers:
            try:
                handler()
            except Exception as e:
                logger.error("Error in handler for %s: %s", event, e)

    def _on_ws_message(self, ws, message: str) -> None:
        try:
            data = json.loads(message)
        except json.JSONDecodeError as e:
            logger.error("Failed to parse wallet event: %s", e)
            return
        event = data.get("event") if isinstance(data, dict) else None
        if not event:
            logger.debug("Ignoring wallet message without event: %s", message)
            return
        logger.info("Wallet event: %s", event)
        self.emit(event)

    def _on_ws_open(self, ws) -> None:
        self._reconnect_delay = self.config.reconnect_delay
        logger.info("Wallet event stream opened at %s", self.ws_url)

    def _on_ws_error(self, ws, error) -> None:
        logger.warning("Wallet event stream error: %s", error)

    def _on_ws_close(self, ws, close_status_code, close_msg) -> None:
        logger.info("Wallet event stream closed (%s)", close_status_code)

    def _run_events(self) -> None:
        while self._running:
            try:
                self._ws = websocket.WebSocketApp(
                    self.ws_url,
                    on_message=self._on_ws_message,
                    on_error=self._on_ws_error,
                    on_close=self._on_ws_close,
                    on_open=self._on_ws_open,
                )
                self._ws.run_forever()
            except Exception as e:
                logger.error("Wallet event stream failed: %s", e)

            if not (self._running and self.config.auto_reconnect):
                break
            logger.info("Reconnecting wallet events in %.1fs", self._reconnect_delay)
            time.sleep(self._reconnect_delay)
            self._reconnect_delay = min(
                self._reconnect_delay * 2, self.config.max_reconnect_delay
            )

    def start_events(self) -> None:
        if self._running:
            return
        self._running = True
        self._ws_thread = threading.Thread(target=self._run_events, daemon=True)
        self._ws_thread.start()

    def stop_events(self) -> None:
        self._running = False
        if self._ws is not None:
            try:
                self._ws.close()
            except Exception as e:
                logger.debug("Error closing wallet event stream: %s", e)
        self._ws = None
