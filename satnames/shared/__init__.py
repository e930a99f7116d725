"""Shared utilities for satnames."""

from satnames.shared.durable_store import JsonFileStore
from satnames.shared.errors import (
    PaymentError,
    PurchaseInProgressError,
    ReconciliationError,
    RegistrationPendingError,
    SatNamesError,
    UnauthorizedError,
    ValidationError,
    WalletConnectionError,
    is_unauthorized_error,
)
from satnames.shared.logging import (
    ContextAdapter,
    LoggingConfig,
    LogLevel,
    format_error_for_user,
    get_logger,
    get_user_friendly_error,
    sanitize_dict,
    sanitize_message,
    setup_logging,
)
from satnames.shared.network import (
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    RetryConfig,
    TimeoutConfig,
)

__all__ = [
    "JsonFileStore",
    "NetworkClient",
    "NetworkError",
    "NetworkErrorType",
    "RetryConfig",
    "TimeoutConfig",
    "PaymentError",
    "PurchaseInProgressError",
    "ReconciliationError",
    "RegistrationPendingError",
    "SatNamesError",
    "UnauthorizedError",
    "ValidationError",
    "WalletConnectionError",
    "is_unauthorized_error",
    "ContextAdapter",
    "LoggingConfig",
    "LogLevel",
    "format_error_for_user",
    "get_logger",
    "get_user_friendly_error",
    "sanitize_dict",
    "sanitize_message",
    "setup_logging",
]
