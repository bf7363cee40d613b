"""
Field extraction -- turns directory-page markup into listing models.

Finds the repeated listing blocks with a cascade of container selectors,
then resolves each field from the profile's selectors followed by the
generic fallbacks. Email and phone are also scraped from the block's text.
"""

import re
from typing import List, Optional, Sequence
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag
from loguru import logger

import leadcrawl.config as cfg
from leadcrawl.core.profiles import resolve_profile
from leadcrawl.enricher.filters import clean_phone, is_valid_phone
from leadcrawl.models.lead import ExtractedListing, SelectorProfile

# ── Regex patterns ────────────────────────────────────────────────────────────

_EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}\b")

# Candidate runs of 10+ digits / separators; filters.is_valid_phone decides
_PHONE_RE = re.compile(r"\+?[\d\s\-()]{10,}")


# ── DOM helpers ──────────────────────────────────────────────────────────────

def _text(node: Tag) -> str:
    """Visible text with whitespace collapsed."""
    return " ".join(node.get_text(" ", strip=True).split())


def _first_text(container: Tag, selectors: Sequence[str]) -> Optional[str]:
    for selector in selectors:
        found = container.select_one(selector)
        if found is not None:
            text = _text(found)
            if text:
                return text
    return None


def _first_link(container: Tag, selectors: Sequence[str], page_url: str) -> Optional[str]:
    for selector in selectors:
        found = container.select_one(selector)
        if found is not None and found.get("href"):
            return urljoin(page_url, found["href"].strip())
    return None


def _host(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


def _is_external(url: str, source_host: str) -> bool:
    """Absolute http(s) link on a host other than the directory's own."""
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.hostname) and (
        parsed.hostname.lower() != source_host
    )


def _external_website(container: Tag, profile: SelectorProfile, page_url: str) -> Optional[str]:
    """Profile selectors first, then the first off-host link in the block."""
    source_host = _host(page_url)

    for selector in profile.external_website:
        found = container.select_one(selector)
        if found is not None and found.get("href"):
            candidate = urljoin(page_url, found["href"].strip())
            if _is_external(candidate, source_host):
                return candidate

    for anchor in container.find_all("a", href=True):
        candidate = urljoin(page_url, anchor["href"].strip())
        if _is_external(candidate, source_host):
            return candidate

    return None


# ── Contact scraping ─────────────────────────────────────────────────────────

def _scan_email(text: str) -> Optional[str]:
    match = _EMAIL_RE.search(text)
    return match.group(0) if match else None


def _scan_phone(text: str) -> Optional[str]:
    for match in _PHONE_RE.finditer(text):
        if is_valid_phone(match.group(0)):
            return clean_phone(match.group(0))
    return None


def _selector_email(container: Tag, selectors: Sequence[str]) -> Optional[str]:
    text = _first_text(container, selectors)
    return _scan_email(text) if text else None


def _selector_phone(container: Tag, selectors: Sequence[str]) -> Optional[str]:
    text = _first_text(container, selectors)
    if text and is_valid_phone(text):
        return clean_phone(text)
    return None


# ── Main extraction ──────────────────────────────────────────────────────────

def _parse_container(
    container: Tag,
    index: int,
    profile: SelectorProfile,
    page_url: str,
) -> Optional[ExtractedListing]:
    name = (
        _first_text(container, profile.company_name)
        or _first_text(container, cfg.NAME_SELECTORS)
        or f"Company {index}"
    )
    if not name.strip():
        return None

    block_text = _text(container)
    email = _selector_email(container, profile.email) or _scan_email(block_text)
    phone = _selector_phone(container, profile.phone) or _scan_phone(block_text)

    return ExtractedListing(
        company_name=name,
        profile_link=(
            _first_link(container, profile.profile_link, page_url)
            or _first_link(container, cfg.PROFILE_LINK_SELECTORS, page_url)
        ),
        external_website=_external_website(container, profile, page_url),
        industry=(
            _first_text(container, profile.industry)
            or _first_text(container, cfg.INDUSTRY_SELECTORS)
        ),
        location=(
            _first_text(container, profile.location)
            or _first_text(container, cfg.LOCATION_SELECTORS)
        ),
        email=email,
        phone=phone,
        source_page_url=page_url,
    )


def _scan_headings(soup: BeautifulSoup, page_url: str) -> List[ExtractedListing]:
    """
    Fallback when no container matched: treat headings as company names.

    Uses the first heading selector that yields anything, capped at
    ``HEADING_SCAN_LIMIT`` results.
    """
    results: List[ExtractedListing] = []

    for selector in cfg.HEADING_SELECTORS:
        for node in soup.select(selector):
            text = _text(node)
            if 2 < len(text) < 100:
                results.append(ExtractedListing(company_name=text, source_page_url=page_url))
        if results:
            logger.debug("Heading scan '{}' found {} names", selector, len(results))
            break

    return results[: cfg.HEADING_SCAN_LIMIT]


def extract_listings(
    markup: str,
    source_page_url: str,
    profile: Optional[SelectorProfile] = None,
) -> List[ExtractedListing]:
    """
    Parse every listing block on a directory page.

    Parameters
    ----------
    markup : str
        Raw HTML of the directory page.
    source_page_url : str
        URL the markup came from; stored on every listing and used to
        resolve relative links and tell external sites apart.
    profile : SelectorProfile or None
        Site profile; resolved from *source_page_url* when omitted.

    Returns
    -------
    List[ExtractedListing]
        Listings in document order. Overlapping containers are not
        de-duplicated here.
    """
    if profile is None:
        profile = resolve_profile(source_page_url)

    soup = BeautifulSoup(markup, "lxml")

    containers: List[Tag] = []
    for selector in profile.container:
        containers = soup.select(selector)
        if containers:
            logger.debug("Container '{}' matched {} elements", selector, len(containers))
            break

    if not containers:
        logger.debug("No listing containers on {} -- trying heading scan", source_page_url)
        return _scan_headings(soup, source_page_url)

    results: List[ExtractedListing] = []
    for index, container in enumerate(containers, start=1):
        try:
            listing = _parse_container(container, index, profile, source_page_url)
        except Exception as exc:
            logger.warning("Failed to parse a listing block: {}", exc)
            continue
        if listing is not None:
            results.append(listing)

    logger.debug(
        "Extracted {} listings (from {} blocks) on {}",
        len(results),
        len(containers),
        source_page_url,
    )
    return results
