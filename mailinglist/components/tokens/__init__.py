"""
Token Generator component.

Unguessable alphanumeric confirmation tokens.
"""

from mailinglist.components.tokens.component import (
    ALPHABET,
    DEFAULT_TOKEN_LENGTH,
    MIN_ENTROPY_BITS,
    TokenGenerator,
    entropy_bits,
    generate_token,
    min_token_length,
)
from mailinglist.components.tokens.ports import RandomSourcePort

__all__ = [
    "ALPHABET",
    "DEFAULT_TOKEN_LENGTH",
    "MIN_ENTROPY_BITS",
    "TokenGenerator",
    "entropy_bits",
    "generate_token",
    "min_token_length",
    "RandomSourcePort",
]
