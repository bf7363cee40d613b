"""
Contact-field validation and cleaning.

Catches malformed, generic, and image-extension emails, implausible phone
numbers, and junk contact names before they reach a lead.
"""

import re
from typing import Optional

import leadcrawl.config as cfg

# ── Core email format regex ──────────────────────────────────────────────

_EMAIL_FORMAT_RE = re.compile(r"^[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}$")
_MAX_EMAIL_LENGTH = 100

# ── File extension patterns that sometimes sneak into regex matches ───────

_FILE_EXT_RE = re.compile(
    r"\.(png|jpg|jpeg|gif|svg|webp|ico|bmp|tiff|pdf|css|js|woff|woff2|ttf|eot)$",
    re.IGNORECASE,
)

# ── Phone / name ──────────────────────────────────────────────────────────

_NON_DIGIT_RE = re.compile(r"\D")
_PHONE_STRIP_RE = re.compile(r"[^\d+\-()\s]")
_PHONE_DIGITS = (7, 15)
# "1990 - 2024", "(2001-2019)": founding / membership years, not numbers
_YEAR_RANGE_RE = re.compile(r"^\(?\s*(?:19|20)\d{2}\s*[-/]\s*(?:19|20)\d{2}\s*\)?$")

_NAME_RE = re.compile(r"^[A-Za-z\s.]+$")


def is_valid_email(email: Optional[str]) -> bool:
    """Strict grammar, under 100 chars, and not a file name in disguise."""
    if not email:
        return False
    if len(email) >= _MAX_EMAIL_LENGTH:
        return False
    if not _EMAIL_FORMAT_RE.match(email):
        return False
    return not _FILE_EXT_RE.search(email)


def is_generic_email(email: str) -> bool:
    """True if *email* contains any denylisted substring (case-insensitive)."""
    lowered = email.lower()
    return any(pattern in lowered for pattern in cfg.GENERIC_EMAIL_PATTERNS)


def clean_email(raw: Optional[str]) -> Optional[str]:
    """
    Normalise a raw candidate (``mailto:`` prefix, query string, stray
    punctuation) and return it only if it is valid and not generic.
    """
    if not raw:
        return None
    cleaned = raw.strip()
    if cleaned.lower().startswith("mailto:"):
        cleaned = cleaned[7:]
    cleaned = cleaned.split("?")[0].split("#")[0].strip().rstrip(".")
    if is_valid_email(cleaned) and not is_generic_email(cleaned):
        return cleaned
    return None


def is_valid_phone(phone: Optional[str]) -> bool:
    """Digit-only form must be 7-15 digits long, and not a year range."""
    if not phone:
        return False
    digits = _NON_DIGIT_RE.sub("", phone)
    if not _PHONE_DIGITS[0] <= len(digits) <= _PHONE_DIGITS[1]:
        return False
    return not _YEAR_RANGE_RE.match(phone.strip(" (\t\n"))


def clean_phone(phone: str) -> str:
    """Keep digits, ``+ - ( )`` and whitespace only."""
    return _PHONE_STRIP_RE.sub("", phone).strip()


def is_valid_contact_name(name: Optional[str]) -> bool:
    """Letters, spaces and periods; longer than 2, shorter than 50."""
    if not name:
        return False
    return 2 < len(name) < 50 and bool(_NAME_RE.match(name))
