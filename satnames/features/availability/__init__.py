"""Availability feature module for satnames.

This module provides:
- Debounced registration and listing lookups
- Sticky failure memoization with explicit retry
- Stale response discarding
"""

from satnames.features.availability.service import (
    AvailabilityResolver,
    NameCandidate,
    NameStatus,
)

__all__ = ["AvailabilityResolver", "NameCandidate", "NameStatus"]
