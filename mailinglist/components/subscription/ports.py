"""
Subscription component ports.

Protocol interfaces for subscription service dependencies
that are not shared core ports.
"""

from __future__ import annotations

from typing import Protocol


class TokenGeneratorPort(Protocol):
    """Confirmation token source."""

    def generate(self) -> str:
        """Return a fresh unguessable token."""
        ...
