"""
Token generator ports.

Interface for the randomness source the generator draws from.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol


class RandomSourcePort(Protocol):
    """
    Randomness source interface.

    secrets.SystemRandom satisfies it; tests inject a seeded random.Random.
    """

    def choice(self, seq: Sequence[str]) -> str:
        """Pick one element uniformly at random."""
        ...
