"""Logging setup for satnames.

Wallet sessions and checkout flows pass keys, passwords and processor
secrets around, so every formatter here redacts before writing. Modules get a
``ContextAdapter`` from ``get_logger`` and attach fields such as ``handle`` or
``rail`` with ``with_context``; the JSON formatter emits them under
``context`` and the human formatter appends them as ``key=value`` pairs.

Environment:
    SATNAMES_LOG_LEVEL   DEBUG, INFO, WARNING, ERROR or CRITICAL (INFO)
    SATNAMES_LOG_FILE    write ``satnames.log`` in the storage dir (on)
    SATNAMES_LOG_STDOUT  also log to stdout (off)
    SATNAMES_LOG_FORMAT  ``human`` or ``json`` (human)
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from satnames.shared.errors import SatNamesError
from satnames.shared.network import NetworkError, NetworkErrorType


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class LoggingConfig:
    log_level: LogLevel = LogLevel.INFO
    log_to_file: bool = True
    log_to_stdout: bool = False
    log_dir: Path | None = None
    log_filename: str = "satnames.log"
    log_format: str = "human"
    sanitize_sensitive: bool = True
    include_context: bool = True

    @classmethod
    def from_environment(cls) -> "LoggingConfig":
        try:
            level = LogLevel(os.getenv("SATNAMES_LOG_LEVEL", "INFO").upper())
        except ValueError:
            level = LogLevel.INFO

        storage_dir = os.getenv("SATNAMES_DIR")
        log_format = os.getenv("SATNAMES_LOG_FORMAT", "human").lower()
        return cls(
            log_level=level,
            log_to_file=_env_flag("SATNAMES_LOG_FILE", "1"),
            log_to_stdout=_env_flag("SATNAMES_LOG_STDOUT", ""),
            log_dir=Path(storage_dir).expanduser() if storage_dir else None,
            log_format="json" if log_format == "json" else "human",
        )


# Order matters: key=value forms first so their labels survive.
SENSITIVE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(r"(private[_-]?key['\"]?\s*[:=]\s*['\"]?)([A-Za-z0-9]{51,64})", re.I),
        r"\1[REDACTED]",
    ),
    (
        re.compile(r"(password['\"]?\s*[:=]\s*['\"]?)([^\s'\"]+)", re.I),
        r"\1[REDACTED]",
    ),
    # WIF private keys (uncompressed 5..., compressed K.../L...)
    (re.compile(r"\b[5KL][1-9A-HJ-NP-Za-km-z]{50,51}\b"), "[KEY_REDACTED]"),
    # Payment processor API keys and webhook secrets
    (re.compile(r"\b(?:sk|rk|whsec)_(?:live_|test_)?[A-Za-z0-9]{10,}\b"), "[SECRET_REDACTED]"),
]

ADDRESS_PATTERN = re.compile(r"\b1[1-9A-HJ-NP-Za-km-z]{25,33}\b")

SECRET_KEY_NAMES = ("private_key", "privatekey", "password", "secret", "wif")


def sanitize_message(message: str, preserve_addresses: bool = True) -> str:
    if not message:
        return message
    for pattern, replacement in SENSITIVE_PATTERNS:
        message = pattern.sub(replacement, message)
    if not preserve_addresses:
        message = ADDRESS_PATTERN.sub("[ADDRESS_REDACTED]", message)
    return message


def _redact_value(value: Any, preserve_addresses: bool) -> Any:
    if isinstance(value, str):
        return sanitize_message(value, preserve_addresses)
    if isinstance(value, dict):
        return sanitize_dict(value, preserve_addresses)
    if isinstance(value, (list, tuple)):
        return [_redact_value(item, preserve_addresses) for item in value]
    return value


def sanitize_dict(data: dict[str, Any], preserve_addresses: bool = True) -> dict[str, Any]:
    return {
        key: "[REDACTED]"
        if any(name in key.lower() for name in SECRET_KEY_NAMES)
        else _redact_value(value, preserve_addresses)
        for key, value in data.items()
    }


# (pattern, message, suggested action) checked in order against str(error).
MESSAGE_RULES: list[tuple[re.Pattern[str], str, str | None]] = [
    (
        re.compile(r"timeout|timed out"),
        "The request timed out. The service may be slow or unavailable.",
        "Try again later or check your network connection.",
    ),
    (
        re.compile(r"connection refused|cannot connect|connection error"),
        "Unable to reach the service.",
        "Check your internet connection and try again.",
    ),
    (
        re.compile(r"insufficient|not enough (?:funds|balance)"),
        "Insufficient wallet balance for this payment.",
        "Top up your wallet and try again.",
    ),
    (
        re.compile(r"unauthorized|not connected|forbidden|\b40[13]\b"),
        "The wallet session is no longer authorized.",
        "Reconnect your wallet.",
    ),
    (
        re.compile(r"user (?:rejected|cancell?ed)|rejected by user"),
        "The payment was cancelled in the wallet.",
        None,
    ),
    (
        re.compile(r"already registered|\b409\b"),
        "This name is already registered.",
        "Choose a different name.",
    ),
    (
        re.compile(r"payment required|\b402\b"),
        "Payment has not been recorded for this name yet.",
        "Wait a moment and check again before paying twice.",
    ),
    (
        re.compile(r"rate limit|too many requests|\b429\b"),
        "Too many requests. Please slow down.",
        "Wait a moment and try again.",
    ),
    (
        re.compile(r"not found|\b404\b"),
        "The requested resource was not found.",
        None,
    ),
    (
        re.compile(r"network.*error|networkerror"),
        "A network error occurred.",
        "Check your internet connection.",
    ),
]

UNREACHABLE_TYPES = (NetworkErrorType.TIMEOUT, NetworkErrorType.CONNECTION_ERROR)


def get_user_friendly_error(error: Exception | str) -> tuple[str, str | None]:
    """Return ``(message, suggested action)`` for showing ``error`` to a user."""
    if isinstance(error, SatNamesError):
        return error.user_message, error.suggest_action
    if isinstance(error, NetworkError) and error.error_type in UNREACHABLE_TYPES:
        return "The name service could not be reached.", "Press Retry to check again."

    text = str(error).lower()
    for pattern, message, action in MESSAGE_RULES:
        if pattern.search(text):
            return message, action
    return "An unexpected error occurred.", None


def format_error_for_user(error: Exception | str) -> str:
    message, action = get_user_friendly_error(error)
    return f"{message} {action}" if action else message


def _record_context(record: logging.LogRecord) -> dict[str, Any] | None:
    context = getattr(record, "context", None)
    return context if isinstance(context, dict) and context else None


class _RedactingFormatter(logging.Formatter):
    def __init__(self, sanitize: bool = True, preserve_addresses: bool = True, **kwargs: Any):
        super().__init__(**kwargs)
        self.sanitize = sanitize
        self.preserve_addresses = preserve_addresses

    def _clean(self, text: str) -> str:
        return sanitize_message(text, self.preserve_addresses) if self.sanitize else text

    def _clean_context(self, context: dict[str, Any]) -> dict[str, Any]:
        return sanitize_dict(context, self.preserve_addresses) if self.sanitize else context


class StructuredFormatter(_RedactingFormatter):
    """One JSON object per line."""

    def __init__(
        self,
        sanitize: bool = True,
        include_context: bool = True,
        preserve_addresses: bool = True,
    ):
        super().__init__(sanitize=sanitize, preserve_addresses=preserve_addresses)
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": self._clean(record.getMessage()),
        }
        if self.include_context:
            entry.update(module=record.module, function=record.funcName, line=record.lineno)

        context = _record_context(record)
        if context is not None:
            entry["context"] = self._clean_context(context)
        if record.exc_info:
            entry["exception"] = self._clean(self.formatException(record.exc_info))
        return json.dumps(entry, default=str)


class HumanReadableFormatter(_RedactingFormatter):
    def __init__(self, sanitize: bool = True, preserve_addresses: bool = True):
        super().__init__(
            sanitize=sanitize,
            preserve_addresses=preserve_addresses,
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _record_context(record)
        if context is not None:
            line += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"
        return self._clean(line)


class ContextAdapter(logging.LoggerAdapter):
    """Logger adapter that nests its fields under ``extra["context"]``."""

    def __init__(self, logger: logging.Logger, context: dict[str, Any] | None = None):
        super().__init__(logger, context or {})

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        if self.extra:
            extra["context"] = {**self.extra, **extra.get("context", {})}
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **fields: Any) -> "ContextAdapter":
        return ContextAdapter(self.logger, {**self.extra, **fields})


_logging_initialized = False


def _build_handlers(config: LoggingConfig) -> list[logging.Handler]:
    if config.log_format == "json":
        formatter: logging.Formatter = StructuredFormatter(
            sanitize=config.sanitize_sensitive, include_context=config.include_context
        )
    else:
        formatter = HumanReadableFormatter(sanitize=config.sanitize_sensitive)

    handlers: list[logging.Handler] = []
    if config.log_to_file:
        log_dir = config.log_dir or Path.home() / ".config" / "satnames"
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.FileHandler(log_dir / config.log_filename, mode="a", encoding="utf-8")
        )
    if config.log_to_stdout:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers or [logging.NullHandler()]


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure the root logger once per process."""
    global _logging_initialized
    if _logging_initialized:
        return

    config = config or LoggingConfig.from_environment()
    root = logging.getLogger()
    root.setLevel(getattr(logging, config.log_level.value))
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in _build_handlers(config):
        root.addHandler(handler)
    _logging_initialized = True


def get_logger(name: str, context: dict[str, Any] | None = None) -> ContextAdapter:
    if not _logging_initialized:
        setup_logging()
    return ContextAdapter(logging.getLogger(name), context)


def log_with_context(
    logger: logging.Logger | ContextAdapter,
    level: int,
    message: str,
    **context: Any,
) -> None:
    if isinstance(logger, ContextAdapter):
        logger.with_context(**context).log(level, message)
    else:
        logger.log(level, message, extra={"context": context})


__all__ = [
    "LogLevel",
    "LoggingConfig",
    "ContextAdapter",
    "StructuredFormatter",
    "HumanReadableFormatter",
    "sanitize_message",
    "sanitize_dict",
    "get_user_friendly_error",
    "setup_logging",
    "get_logger",
    "log_with_context",
    "format_error_for_user",
]
