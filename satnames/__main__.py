"""Main application entry point for satnames."""

from __future__ import annotations

import argparse
import logging
import threading
from typing import Any, Callable

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import Button, Footer, Header, Input, Label, Static

from satnames.config import AppConfig
from satnames.features.availability.service import (
    AvailabilityResolver,
    NameCandidate,
    NameStatus,
)
from satnames.features.market.service import MarketService, total_with_fee
from satnames.features.names.validators import MIN_HANDLE_LENGTH, full_name
from satnames.features.purchase.direct_wallet import DirectWalletAdapter
from satnames.features.purchase.handlers import PurchaseHandlersMixin
from satnames.features.purchase.hosted_checkout import (
    BrowserNavigator,
    HostedCheckoutAdapter,
)
from satnames.features.purchase.marketplace import MarketplaceAdapter
from satnames.features.purchase.models import PaymentPreference
from satnames.features.purchase.service import PurchaseOrchestrator
from satnames.features.registry.service import RegistryService
from satnames.features.settings.service import PaymentSettings
from satnames.features.session.service import (
    ConnectionState,
    SessionManager,
    WalletSession,
)
from satnames.shared.durable_store import JsonFileStore
from satnames.shared.logging import format_error_for_user, setup_logging
from satnames.shared.network import NetworkClient
from satnames.shared.protocols import WalletProvider
from satnames.styles import CSS
from satnames.wallet import WalletBridge

logger = logging.getLogger(__name__)

STATUS_CLASSES = tuple(f"status-{status.value}" for status in NameStatus)
PREFERENCE_LABELS = {PaymentPreference.CARD: "Card", PaymentPreference.WALLET: "Wallet"}


class SatNamesApp(PurchaseHandlersMixin, App):
    CSS = CSS
    TITLE = "1sat.name"

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("b", "buy", "Buy"),
        ("p", "toggle_payment", "Payment method"),
        ("ctrl+r", "retry_check", "Retry"),
        ("tab", "focus_next", "Next"),
        ("shift+tab", "focus_previous", "Previous"),
    ]

    def __init__(
        self,
        config: AppConfig | None = None,
        resume_url: str | None = None,
        provider: WalletProvider | None = None,
    ):
        super().__init__()
        self.config = config or AppConfig.from_environment()
        self.resume_url = resume_url
        self.wallet: WalletProvider = provider or WalletBridge(
            self.config.wallet_bridge_url,
            timeout_config=self.config.timeout_config,
        )

    def _on_ui(self, callback: Callable[..., Any], *args: Any) -> None:
        """Run ``callback`` on the UI thread from either side."""
        try:
            self.call_from_thread(callback, *args)
        except RuntimeError:
            callback(*args)

    def _build_services(self) -> None:
        config = self.config
        store = JsonFileStore(config.storage_dir)
        self.settings = PaymentSettings(store)
        registry = RegistryService(
            NetworkClient(
                config.api_url,
                timeout_config=config.timeout_config,
                retry_config=config.retry_config,
            )
        )
        market = MarketService(
            NetworkClient(
                config.market_api_url,
                timeout_config=config.timeout_config,
                retry_config=config.retry_config,
            )
        )

        self.session_manager = SessionManager(self.wallet)
        self.session_manager.add_listener(
            lambda session: self._on_ui(self._update_session_display, session)
        )
        self.resolver = AvailabilityResolver(
            registry,
            market,
            debounce_seconds=config.debounce_seconds,
            on_change=lambda candidate: self._on_ui(self._update_name_status, candidate),
        )
        self.hosted_checkout = HostedCheckoutAdapter(
            registry,
            store,
            BrowserNavigator(self.resume_url or config.return_url),
            price_cents=config.price_cents,
            return_url=config.return_url,
            product_id=config.product_id,
        )
        self.marketplace = MarketplaceAdapter(
            config.marketplace_fee_rate, config.marketplace_fee_address
        )
        self.orchestrator = PurchaseOrchestrator(
            self.session_manager,
            self.hosted_checkout,
            DirectWalletAdapter(
                registry,
                store,
                price_usd=config.price_usd,
                collector_address=config.collector_address,
                max_rate_age=config.exchange_rate_max_age_seconds,
            ),
            self.marketplace,
            domain=config.domain,
            on_acquired=lambda name, intent: self._on_ui(
                self._on_name_acquired, name, intent
            ),
        )

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("[dim]● Wallet disconnected[/dim]", id="connection-status")
        with Container(id="content"):
            yield Label(f"Find your name on {self.config.domain}")
            yield Input(placeholder="yourname", id="name-input")
            yield Static(id="name-status")
            yield Horizontal(
                Button("🛍 Buy", id="buy-button", variant="primary"),
                Button("⚙ Payment: Card", id="payment-preference-button"),
                classes="preference-row",
            )
            yield Horizontal(
                Button("💳 Pay with Card", id="pay-card-button"),
                Button("👛 Pay with Wallet", id="pay-wallet-button"),
                Button("🛒 Buy Listing", id="buy-listing-button"),
                Button("🔄 Retry", id="retry-button"),
                classes="buy-row",
            )
            yield Horizontal(
                Button("🔗 Connect Wallet", id="connect-button"),
                Button("⏏ Disconnect", id="disconnect-button"),
                classes="wallet-row",
            )
            yield Static(id="session-info")
        yield Footer()

    def on_mount(self) -> None:
        self._build_services()
        if isinstance(self.wallet, WalletBridge):
            self.wallet.start_events()
        self._update_payment_preference()
        self._update_session_display(self.session_manager.session)
        self._update_name_status(self.resolver.candidate)
        if self.resume_url:
            logger.info("Resuming checkout from return URL")
            self.resume_checkout(self.resume_url)

    def on_unmount(self) -> None:
        self.resolver.close()
        self.session_manager.close()
        if isinstance(self.wallet, WalletBridge):
            self.wallet.stop_events()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "name-input":
            self.resolver.update_input(event.value)

    def _update_name_status(self, candidate: NameCandidate) -> None:
        status = self.query_one("#name-status", Static)
        status.remove_class(*STATUS_CLASSES)
        status.add_class(f"status-{candidate.status.value}")
        name = full_name(candidate.handle, self.config.domain) if candidate.handle else ""

        if candidate.status == NameStatus.UNKNOWN:
            if candidate.handle and len(candidate.handle) < MIN_HANDLE_LENGTH:
                status.update(
                    f"[dim]Names need at least {MIN_HANDLE_LENGTH} letters or digits[/dim]"
                )
            else:
                status.update("")
        elif candidate.status == NameStatus.CHECKING:
            status.update(f"[yellow]Checking {name}...[/yellow]")
        elif candidate.status == NameStatus.FAILED:
            status.update(
                f"[red]Could not check {name}. Press Retry to check again.[/red]"
            )
        elif candidate.status == NameStatus.AVAILABLE:
            status.update(
                f"[green]{name} is available for ${self.config.price_usd:.2f}[/green]"
            )
        elif candidate.status == NameStatus.REGISTERED_LISTED:
            total = total_with_fee(candidate.listing_price or 0, self.config.marketplace_fee_rate)
            status.update(f"[yellow]{name} is for sale: {total:,} sats incl. fee[/yellow]")
        else:
            status.update(f"[red]{name} is already taken[/red]")

    def _update_session_display(self, session: WalletSession) -> None:
        indicator = self.query_one("#connection-status", Static)
        info = self.query_one("#session-info", Static)

        if session.connection_state == ConnectionState.CONNECTED:
            label = session.profile.display_name or "Wallet"
            indicator.update(f"[green]● {label} connected[/green]")
        elif session.connection_state == ConnectionState.CONNECTING:
            indicator.update("[yellow]● Connecting...[/yellow]")
        else:
            indicator.update("[dim]● Wallet disconnected[/dim]")

        if session.owner_address:
            info.update(f"Names are delivered to {session.owner_address}")
        else:
            info.update("")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "buy-button":
            self.action_buy()
        elif button_id == "payment-preference-button":
            self.action_toggle_payment()
        elif button_id == "pay-card-button":
            self.start_purchase(PaymentPreference.CARD)
        elif button_id == "pay-wallet-button":
            self.start_purchase(PaymentPreference.WALLET)
        elif button_id == "buy-listing-button":
            if self.resolver.candidate.status != NameStatus.REGISTERED_LISTED:
                self.notify("This name is not listed for sale", severity="warning")
                return
            self.start_purchase(PaymentPreference.WALLET)
        elif button_id == "retry-button":
            self.action_retry_check()
        elif button_id == "connect-button":
            self.connect_wallet()
        elif button_id == "disconnect-button":
            self.disconnect_wallet()

    def action_buy(self) -> None:
        self.start_purchase(self.settings.preferred_payment)

    def action_toggle_payment(self) -> None:
        preference = self.settings.toggle()
        self._update_payment_preference()
        self.notify(f"Names will be bought by {PREFERENCE_LABELS[preference].lower()}")

    def _update_payment_preference(self) -> None:
        label = PREFERENCE_LABELS[self.settings.preferred_payment]
        self.query_one("#payment-preference-button", Button).label = f"⚙ Payment: {label}"

    def action_retry_check(self) -> None:
        threading.Thread(target=self.resolver.retry, daemon=True).start()

    def connect_wallet(self) -> None:
        def worker() -> None:
            try:
                self.session_manager.connect()
            except Exception as e:
                self.call_from_thread(self._on_wallet_error, e)

        threading.Thread(target=worker, daemon=True).start()

    def disconnect_wallet(self) -> None:
        threading.Thread(target=self.session_manager.disconnect, daemon=True).start()

    def _on_wallet_error(self, error: Exception) -> None:
        logger.error("Wallet connection failed: %s", error)
        self.notify(format_error_for_user(error), severity="error")


def main(argv: list[str] | None = None) -> None:
    """Entry point for the application."""
    parser = argparse.ArgumentParser(prog="satnames", description=__doc__)
    parser.add_argument(
        "--resume-url",
        help="return URL from the hosted checkout page, to finish a card purchase",
    )
    args = parser.parse_args(argv)

    setup_logging()
    app = SatNamesApp(resume_url=args.resume_url)
    app.run()


if __name__ == "__main__":
    main()
