"""
Delivery component models.

Report and configuration for a newsletter fan-out run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

INVALID_STORED_ADDRESS = "invalid stored address"


@dataclass(frozen=True)
class DeliveryFailure:
    """One recipient the issue could not be delivered to."""

    recipient: str
    reason: str


@dataclass
class DeliveryReport:
    """
    Outcome of one delivery run.

    Invariant: succeeded + failed == attempted.
    Failures carry enough detail for an operator to retry out-of-band.
    """

    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    failures: list[DeliveryFailure] = field(default_factory=list)
    succeeded_recipients: list[str] = field(default_factory=list)
    cancelled: bool = False
    started_at: datetime | None = None
    finished_at: datetime | None = None

    def record_success(self, recipient: str) -> None:
        self.attempted += 1
        self.succeeded += 1
        self.succeeded_recipients.append(recipient)

    def record_failure(self, recipient: str, reason: str) -> None:
        self.attempted += 1
        self.failed += 1
        self.failures.append(DeliveryFailure(recipient=recipient, reason=reason))

    @property
    def has_failures(self) -> bool:
        return self.failed > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "failures": [{"recipient": f.recipient, "reason": f.reason} for f in self.failures],
            "succeeded_recipients": list(self.succeeded_recipients),
            "cancelled": self.cancelled,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }


@dataclass(frozen=True)
class DeliveryConfig:
    """Delivery pipeline configuration."""

    max_workers: int = 4
    # Sends queued or running at once; defaults to 2 * max_workers
    max_in_flight: int | None = None

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.max_in_flight is not None and self.max_in_flight < 1:
            raise ValueError("max_in_flight must be at least 1")

    @property
    def in_flight_limit(self) -> int:
        return self.max_in_flight or 2 * self.max_workers
