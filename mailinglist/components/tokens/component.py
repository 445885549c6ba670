"""
Token Generator component.

Produces unguessable confirmation tokens.

Key behaviors:
- Alphanumeric alphabet ([A-Za-z0-9], 62 symbols, ~5.95 bits per character)
- Default length 25 characters (~148 bits of entropy)
- Lengths below 128 bits of entropy are rejected
- Randomness source failures raise TokenGenerationError (fatal)
"""

from __future__ import annotations

import math
import secrets
import string

from mailinglist.components.tokens.ports import RandomSourcePort
from mailinglist.core.errors import TokenGenerationError

ALPHABET = string.ascii_letters + string.digits
DEFAULT_TOKEN_LENGTH = 25
MIN_ENTROPY_BITS = 128


def entropy_bits(length: int, alphabet_size: int = len(ALPHABET)) -> float:
    """Entropy of a uniformly random token of the given length."""
    return length * math.log2(alphabet_size)


def min_token_length(alphabet_size: int = len(ALPHABET)) -> int:
    """Shortest length reaching MIN_ENTROPY_BITS."""
    return math.ceil(MIN_ENTROPY_BITS / math.log2(alphabet_size))


class TokenGenerator:
    """Confirmation token generator with an injectable randomness source."""

    def __init__(
        self,
        length: int = DEFAULT_TOKEN_LENGTH,
        random_source: RandomSourcePort | None = None,
    ) -> None:
        if length < min_token_length():
            raise ValueError(
                f"Token length {length} is below {min_token_length()} characters "
                f"({MIN_ENTROPY_BITS} bits of entropy)"
            )
        self.length = length
        self._random = random_source or secrets.SystemRandom()

    def generate(self) -> str:
        """
        Generate one token.

        Raises:
            TokenGenerationError: randomness source unavailable
        """
        try:
            return "".join(self._random.choice(ALPHABET) for _ in range(self.length))
        except (OSError, NotImplementedError) as e:
            raise TokenGenerationError(f"Randomness source failed: {e}") from e


def generate_token(length: int = DEFAULT_TOKEN_LENGTH) -> str:
    """Generate a token from the system CSPRNG."""
    return TokenGenerator(length).generate()
