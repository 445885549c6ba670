"""
Subscriber field validation.

parse_* functions return the cleaned value or raise InvalidInput.

Rules:
- name: not blank, at most 256 grapheme clusters, none of / ( ) " < > \\ { }
- email: trimmed, at most 254 characters, RFC 5322 simplified syntax

Emails are not lowercased: the stored uniqueness constraint is case-sensitive.
"""

from __future__ import annotations

import re

import regex

from mailinglist.core.errors import InvalidInput

# --- Email Validation Regex (RFC 5322 simplified) ---

EMAIL_REGEX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

MAX_EMAIL_LENGTH = 254
MAX_NAME_GRAPHEMES = 256
FORBIDDEN_NAME_CHARACTERS = frozenset('/()"<>\\{}')

_GRAPHEME = regex.compile(r"\X")


def grapheme_count(s: str) -> int:
    """Count user-perceived characters (extended grapheme clusters)."""
    return len(_GRAPHEME.findall(s))


def parse_name(raw: str | None, max_graphemes: int = MAX_NAME_GRAPHEMES) -> str:
    """Validate a subscriber display name."""
    name = raw or ""
    if not name.strip():
        raise InvalidInput("name", "Name is required")
    if grapheme_count(name) > max_graphemes:
        raise InvalidInput("name", f"Name is longer than {max_graphemes} characters")
    if any(c in FORBIDDEN_NAME_CHARACTERS for c in name):
        raise InvalidInput("name", "Name contains forbidden characters")
    return name


def parse_email(raw: str | None, max_length: int = MAX_EMAIL_LENGTH) -> str:
    """Validate an email address and strip surrounding whitespace."""
    email = raw.strip() if raw else ""
    if not email:
        raise InvalidInput("email", "Email address is required")
    if len(email) > max_length:
        raise InvalidInput("email", "Email address is too long")
    if not EMAIL_REGEX.match(email):
        raise InvalidInput("email", "Invalid email format")
    return email


def is_valid_email(raw: str | None) -> bool:
    try:
        parse_email(raw)
    except InvalidInput:
        return False
    return True
