"""Handle sanitization and validation for satnames."""

import re
from dataclasses import dataclass
from typing import Any

from satnames.config import DEFAULT_DOMAIN


@dataclass
class ValidationResult:
    is_valid: bool
    error_message: str | None = None
    normalized_value: Any = None


DISALLOWED_CHARS = re.compile(r"[^a-z0-9]")
MIN_HANDLE_LENGTH = 3


def sanitize_handle(raw: str) -> str:
    """Lowercase ``raw`` and drop everything outside ``[a-z0-9]``."""
    if not raw:
        return ""
    return DISALLOWED_CHARS.sub("", raw.lower())


def full_name(handle: str, domain: str = DEFAULT_DOMAIN) -> str:
    if "@" in handle:
        return handle
    return f"{handle}@{domain}"


class HandleValidator:
    @classmethod
    def validate(cls, raw: str) -> ValidationResult:
        handle = sanitize_handle(raw)
        if not handle:
            return ValidationResult(
                is_valid=False, error_message="Name is required"
            )

        if len(handle) < MIN_HANDLE_LENGTH:
            return ValidationResult(
                is_valid=False,
                error_message=f"Name must be at least {MIN_HANDLE_LENGTH} characters",
                normalized_value=handle,
            )

        return ValidationResult(is_valid=True, normalized_value=handle)

    @classmethod
    def is_checkable(cls, handle: str) -> bool:
        return len(handle) >= MIN_HANDLE_LENGTH
