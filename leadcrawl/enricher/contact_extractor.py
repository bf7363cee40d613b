"""
Contact-detail extraction from a company's own web page.

For each field: structured selectors first (``mailto:`` / ``tel:`` links,
elements tagged as contact data), then regex over the page text. Every
candidate passes through ``filters`` before it is accepted.
"""

import re
from typing import Optional, Sequence
from urllib.parse import unquote

from bs4 import BeautifulSoup, Tag
from loguru import logger
from pydantic import BaseModel

from leadcrawl.enricher.filters import (
    clean_email,
    clean_phone,
    is_valid_contact_name,
    is_valid_phone,
)
from leadcrawl.models.lead import SelectorProfile

# ── Regex patterns (ordered by specificity) ──────────────────────────────

_EMAIL_PATTERNS = [
    re.compile(r"\b[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}\b"),
    re.compile(r"mailto:([A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,})", re.IGNORECASE),
]

_PHONE_PATTERNS = [
    re.compile(r"\+?[\d\s\-().]{10,}"),
    re.compile(r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b"),
    re.compile(r"\+\d{1,3}[-.\s]?\d{1,4}[-.\s]?\d{1,4}[-.\s]?\d{1,9}"),
]


class ContactDetails(BaseModel):
    """What one page yielded."""

    email: Optional[str] = None
    phone: Optional[str] = None
    contact_person: Optional[str] = None

    @property
    def has_contact(self) -> bool:
        return bool(self.email or self.phone)


def _node_text(node: Tag) -> str:
    return " ".join(node.get_text(" ", strip=True).split())


def _page_text(soup: BeautifulSoup) -> str:
    root = soup.body or soup
    return root.get_text(" ")


# ── Email ────────────────────────────────────────────────────────────────

def _structured_email(soup: BeautifulSoup, selectors: Sequence[str]) -> Optional[str]:
    for selector in selectors:
        node = soup.select_one(selector)
        if node is None:
            continue
        href = node.get("href") or ""
        if href.lower().startswith("mailto:"):
            raw = unquote(href)
        else:
            raw = node.get("data-email") or _node_text(node)
        email = clean_email(raw)
        if email:
            logger.debug("Email via selector '{}': {}", selector, email)
            return email
    return None


def _scanned_email(text: str) -> Optional[str]:
    for pattern in _EMAIL_PATTERNS:
        for match in pattern.finditer(text):
            email = clean_email(match.group(match.lastindex or 0))
            if email:
                logger.debug("Email via text scan: {}", email)
                return email
    return None


# ── Phone ────────────────────────────────────────────────────────────────

def _structured_phone(soup: BeautifulSoup, selectors: Sequence[str]) -> Optional[str]:
    for selector in selectors:
        node = soup.select_one(selector)
        if node is None:
            continue
        href = node.get("href") or ""
        if href.lower().startswith("tel:"):
            raw = unquote(href[4:])
        else:
            raw = node.get("data-phone") or _node_text(node)
        if is_valid_phone(raw):
            phone = clean_phone(raw)
            logger.debug("Phone via selector '{}': {}", selector, phone)
            return phone
    return None


def _scanned_phone(text: str) -> Optional[str]:
    for pattern in _PHONE_PATTERNS:
        for match in pattern.finditer(text):
            if is_valid_phone(match.group(0)):
                return clean_phone(match.group(0))
    return None


# ── Contact person ───────────────────────────────────────────────────────

def _contact_person(soup: BeautifulSoup, selectors: Sequence[str]) -> Optional[str]:
    for selector in selectors:
        node = soup.select_one(selector)
        if node is None:
            continue
        name = _node_text(node)
        if is_valid_contact_name(name):
            return name
    return None


def extract_contact_details(soup: BeautifulSoup, profile: SelectorProfile) -> ContactDetails:
    """
    Pull email, phone and contact person out of one parsed page.

    Parameters
    ----------
    soup : BeautifulSoup
        Parsed company page.
    profile : SelectorProfile
        Supplies the email / phone / contact-person selector lists.

    Returns
    -------
    ContactDetails
        Fields left as None when nothing acceptable was found.
    """
    text = _page_text(soup)
    return ContactDetails(
        email=_structured_email(soup, profile.email_selectors) or _scanned_email(text),
        phone=_structured_phone(soup, profile.phone_selectors) or _scanned_phone(text),
        contact_person=_contact_person(soup, profile.contact_person_selectors),
    )
