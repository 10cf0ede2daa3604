"""Canonicalisation and format checks for phone numbers and email addresses.

Every helper here is total: malformed input never raises, it is simply
reported as invalid.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_PHONE_SHAPE = re.compile(r"^\+?[\d\s\-()]+$")
_EMAIL_SHAPE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_WHITESPACE = re.compile(r"\s+")
_NON_DIGIT = re.compile(r"\D")
_NON_DIALABLE = re.compile(r"[^\d+]")

MIN_PHONE_DIGITS = 10
# fewer digits than this never joins a duplicate group
MIN_DUPLICATE_KEY_DIGITS = 7


@dataclass(frozen=True, slots=True)
class PhoneCheck:
    clean: str
    is_valid: bool
    suggested_fix: str

    @property
    def can_match(self) -> bool:
        return len(self.clean) >= MIN_DUPLICATE_KEY_DIGITS


@dataclass(frozen=True, slots=True)
class EmailCheck:
    clean: str
    is_valid: bool


def digits_only(value: Optional[str]) -> str:
    return _NON_DIGIT.sub("", value or "")


def dialable(value: Optional[str]) -> str:
    """Strip everything but digits and ``+`` from a phone number."""

    return _NON_DIALABLE.sub("", value or "")


def is_valid_phone(value: Optional[str]) -> bool:
    if not value:
        return False
    text = str(value).strip()
    return bool(_PHONE_SHAPE.match(text)) and len(digits_only(text)) >= MIN_PHONE_DIGITS


def is_valid_email(value: Optional[str]) -> bool:
    if not value:
        return False
    return bool(_EMAIL_SHAPE.match(str(value)))


def phone_key(value: Optional[str]) -> str:
    """Return the duplicate-matching key for a phone number.

    Formatting characters are ignored and a leading North American country
    code is folded away, so ``555-123-4567`` and ``+1 555 123 4567`` collide.
    """

    digits = digits_only(value)
    if len(digits) == 11 and digits.startswith("1"):
        return digits[1:]
    return digits


def suggest_phone_fix(value: Optional[str]) -> str:
    digits = digits_only(value)
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    return f"+1{digits}"


def normalize_phone(raw: Optional[str]) -> PhoneCheck:
    """Canonicalise a phone number and propose an E.164-style fix."""

    text = "" if raw is None else str(raw)
    compact = _WHITESPACE.sub("", text)
    if is_valid_phone(text):
        return PhoneCheck(clean=phone_key(compact), is_valid=True, suggested_fix=compact)
    return PhoneCheck(clean=phone_key(compact), is_valid=False, suggested_fix=suggest_phone_fix(compact))


def normalize_email(raw: Optional[str]) -> EmailCheck:
    """Lower-case and trim an email address and check its shape."""

    text = "" if raw is None else str(raw)
    return EmailCheck(clean=text.strip().lower(), is_valid=is_valid_email(text))


def title_case(value: str) -> str:
    """Capitalise each space separated word, lower-casing the rest."""

    return " ".join(word[:1].upper() + word[1:].lower() for word in value.split(" "))


__all__ = [
    "EmailCheck",
    "MIN_DUPLICATE_KEY_DIGITS",
    "MIN_PHONE_DIGITS",
    "PhoneCheck",
    "digits_only",
    "dialable",
    "is_valid_email",
    "is_valid_phone",
    "normalize_email",
    "normalize_phone",
    "phone_key",
    "suggest_phone_fix",
    "title_case",
]
