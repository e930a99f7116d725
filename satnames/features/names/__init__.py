"""Name handling for satnames.

- Sanitize raw input into a handle
- Validate handles before lookups
- Build fully qualified names
"""

from satnames.features.names.validators import (
    MIN_HANDLE_LENGTH,
    HandleValidator,
    ValidationResult,
    full_name,
    sanitize_handle,
)

__all__ = [
    "MIN_HANDLE_LENGTH",
    "HandleValidator",
    "ValidationResult",
    "full_name",
    "sanitize_handle",
]
