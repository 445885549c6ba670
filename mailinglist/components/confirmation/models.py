"""
Confirmation component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class ConfirmInput:
    """Input for confirming a subscription."""

    token: str


@dataclass(frozen=True)
class ConfirmOutput:
    """Output from a successful confirmation."""

    subscriber_id: UUID
    already_confirmed: bool = False  # Idempotent success
