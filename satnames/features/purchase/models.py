"""Purchase data types for satnames."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from satnames.features.availability.service import NameCandidate
    from satnames.features.session.service import SessionManager


class PaymentRail(Enum):
    HOSTED_CHECKOUT = "hosted_checkout"
    DIRECT_WALLET = "direct_wallet"
    MARKETPLACE = "marketplace"


class PaymentPreference(Enum):
    CARD = "card"
    WALLET = "wallet"


class IntentState(Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STATES = (IntentState.SUCCEEDED, IntentState.FAILED)


@dataclass
class PurchaseIntent:
    rail: PaymentRail
    handle: str
    amount: int = 0
    unit: str = ""
    state: IntentState = IntentState.IDLE
    external_ref: str | None = None
    error: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def _transition(self, new_state: IntentState) -> None:
        if self.is_terminal:
            raise ValueError(
                f"Purchase of {self.handle} is already {self.state.value}"
            )
        self.state = new_state

    def start(self) -> None:
        self._transition(IntentState.IN_FLIGHT)

    def succeed(self, external_ref: str | None = None) -> None:
        self._transition(IntentState.SUCCEEDED)
        if external_ref:
            self.external_ref = external_ref

    def fail(self, error: str) -> None:
        self._transition(IntentState.FAILED)
        self.error = error

    def to_dict(self) -> dict[str, Any]:
        return {
            "rail": self.rail.value,
            "handle": self.handle,
            "amount": self.amount,
            "unit": self.unit,
            "state": self.state.value,
            "external_ref": self.external_ref,
            "error": self.error,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class PendingRegistration:
    handle: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    address: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "handle": self.handle,
            "created_at": self.created_at.isoformat(),
            "address": self.address,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PendingRegistration":
        return cls(
            handle=data["handle"],
            created_at=datetime.fromisoformat(data["created_at"])
            if "created_at" in data
            else datetime.now(timezone.utc),
            address=data.get("address") or None,
        )


class CheckoutStatus(Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class CheckoutOutcome:
    status: CheckoutStatus
    handle: str | None = None
    transaction_id: str | None = None


class PaymentRailAdapter(Protocol):
    rail: PaymentRail
    completes_immediately: bool

    def execute(
        self,
        intent: PurchaseIntent,
        candidate: "NameCandidate",
        session_manager: "SessionManager",
    ) -> str: ...
