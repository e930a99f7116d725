"""Error taxonomy shared by the session, availability and purchase layers."""

from __future__ import annotations

WALLET_INSTALL_URL = "https://yours.org"


class SatNamesError(Exception):
    """Base class for errors that carry a user-facing message."""

    user_message = "An unexpected error occurred."
    suggest_action: str | None = None

    def __init__(self, message: str | None = None):
        super().__init__(message or self.user_message)
        if message:
            self.user_message = message


class WalletConnectionError(SatNamesError):
    user_message = "The wallet is not available."
    suggest_action = f"Install or unlock the wallet extension ({WALLET_INSTALL_URL})."

    def __init__(self, message: str | None = None, install_url: str = WALLET_INSTALL_URL):
        super().__init__(message)
        self.install_url = install_url


class UnauthorizedError(SatNamesError):
    user_message = "The wallet session was revoked."
    suggest_action = "Reconnect your wallet."


class ValidationError(SatNamesError):
    user_message = "The request is not valid."


class PurchaseInProgressError(ValidationError):
    user_message = "A purchase for this name is already in progress."

    def __init__(self, handle: str):
        super().__init__(f"A purchase for '{handle}' is already in progress.")
        self.handle = handle


class PaymentError(SatNamesError):
    user_message = "The payment did not go through."
    suggest_action = "No funds were taken. You can try again."


class ReconciliationError(SatNamesError):
    """Payment went through but the registration could not be confirmed.

    Never retried automatically: a retry risks charging twice.
    """

    user_message = "Payment received, registration pending."
    suggest_action = "Do not pay again. Contact support with the payment reference."

    def __init__(self, message: str | None = None, handle: str = "", payment_ref: str = ""):
        super().__init__(message)
        self.handle = handle
        self.payment_ref = payment_ref


class RegistrationPendingError(ReconciliationError):
    user_message = "Payment succeeded, registration pending."


UNAUTHORIZED_MARKERS = ("Unauthorized", "Not connected")


def is_unauthorized_error(error: BaseException) -> bool:
    if isinstance(error, UnauthorizedError):
        return True
    message = str(error)
    return any(marker in message for marker in UNAUTHORIZED_MARKERS)


__all__ = [
    "WALLET_INSTALL_URL",
    "SatNamesError",
    "WalletConnectionError",
    "UnauthorizedError",
    "ValidationError",
    "PurchaseInProgressError",
    "PaymentError",
    "ReconciliationError",
    "RegistrationPendingError",
    "is_unauthorized_error",
]
