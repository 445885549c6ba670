"""
Subscription component models.

Data models for new-subscription intake (double opt-in, step one).
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from mailinglist.core.entities import SubscriberStatus

# --- Input Models ---


@dataclass(frozen=True)
class SubscribeInput:
    """Input for new subscription."""

    email: str
    name: str


# --- Output Models ---


@dataclass(frozen=True)
class SubscribeOutput:
    """Output from a successful subscription."""

    subscriber_id: UUID
    email: str
    status: SubscriberStatus = SubscriberStatus.PENDING_CONFIRMATION
    confirmation_url: str = ""


# --- Configuration ---


@dataclass(frozen=True)
class SubscriptionConfig:
    """Subscription service configuration."""

    base_url: str = "http://127.0.0.1:8000"
    confirmation_path: str = "/subscriptions/confirm"
    confirmation_subject: str = "Welcome!"
    max_name_graphemes: int = 256
    max_email_length: int = 254
