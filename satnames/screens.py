"""Modal screens for the satnames terminal app."""

import logging
from typing import cast

import qrcode
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, Static

from satnames.shared.clipboard import copy_text

logger = logging.getLogger(__name__)

EXPLORER_TX_URL = "https://whatsonchain.com/tx/{txid}"


def render_qr(data: str) -> str:
    qr = qrcode.QRCode(version=1, box_size=1, border=1)
    qr.add_data(data)
    qr.make(fit=True)
    return "\n".join("".join("██" if cell else "  " for cell in row) for row in qr.modules)


class BaseModalScreen(ModalScreen):
    """Base modal screen with common key bindings."""

    BINDINGS = [
        ("escape", "app.pop_screen", "Close"),
        ("tab", "focus_next", "Next"),
        ("shift+tab", "focus_previous", "Previous"),
    ]

    def _copy(self, text: str, what: str) -> None:
        method = copy_text(text)
        if method:
            self.notify(f"{what} copied to clipboard", severity="information")
        else:
            self.notify(f"Could not copy {what.lower()}", severity="warning")


class LoadingScreen(ModalScreen):
    def __init__(self, message: str = "Working..."):
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        yield Vertical(Label(self.message, id="loading-message"))

    def update_message(self, message: str) -> None:
        self.message = message
        cast(Label, self.query_one("#loading-message")).update(message)


class PurchaseResultScreen(BaseModalScreen):
    def __init__(self, name: str, txid: str | None):
        super().__init__()
        self.name_acquired = name
        self.txid = txid or ""

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label(f"✅ {self.name_acquired} is yours!", id="result-title")
            if self.txid:
                yield Label("Transaction:")
                yield Static(self.txid, id="txid-display")
                yield Label(f"Explorer: {EXPLORER_TX_URL.format(txid=self.txid)}")
            yield Horizontal(
                Button("📋 Copy Transaction", id="copy-txid-button", variant="primary"),
                Button("❌ Close", id="close-button"),
            )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "copy-txid-button" and self.txid:
            self._copy(self.txid, "Transaction ID")
        elif event.button.id == "close-button":
            self.app.pop_screen()


class CheckoutOpenedScreen(BaseModalScreen):
    """Shown while the user pays on the hosted checkout page."""

    def __init__(self, handle: str, checkout_url: str):
        super().__init__()
        self.handle = handle
        self.checkout_url = checkout_url

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label(f"💳 Checkout opened for {self.handle}", id="result-title")
            yield Label(
                "Finish paying in your browser. The name is registered when the "
                "checkout page sends you back."
            )
            yield Static(self.checkout_url, id="checkout-url")
            yield Static(render_qr(self.checkout_url), id="qr-display")
            yield Horizontal(
                Button("📋 Copy Link", id="copy-url-button", variant="primary"),
                Button("❌ Close", id="close-button"),
            )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "copy-url-button":
            self._copy(self.checkout_url, "Checkout link")
        elif event.button.id == "close-button":
            self.app.pop_screen()


class PaymentPendingScreen(BaseModalScreen):
    """Funds moved but the name is not registered yet."""

    def __init__(self, message: str, payment_ref: str = ""):
        super().__init__()
        self.message = message
        self.payment_ref = payment_ref

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label("⚠️ Payment received, registration pending", id="error-title")
            yield Label(self.message)
            yield Label("Do not pay again. Keep this reference for support:")
            if self.payment_ref:
                yield Static(self.payment_ref, id="txid-display")
            yield Horizontal(
                Button("📋 Copy Reference", id="copy-ref-button", variant="primary"),
                Button("❌ Close", id="close-button"),
            )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "copy-ref-button" and self.payment_ref:
            self._copy(self.payment_ref, "Payment reference")
        elif event.button.id == "close-button":
            self.app.pop_screen()
