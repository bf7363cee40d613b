"""
Selector-profile resolution and pagination URLs.

Profiles are plain data in ``config.SITE_PROFILES``; this module turns the
matching entry (or the generic one) into an immutable ``SelectorProfile``.
"""

import math
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from loguru import logger

import leadcrawl.config as cfg
from leadcrawl.models.lead import PaginationStyle, SelectorProfile

# Profile keys that fall back to the generic site-level selector lists
_SITE_DEFAULTS = {
    "container": cfg.CONTAINER_SELECTORS,
    "email_selectors": cfg.EMAIL_SELECTORS,
    "phone_selectors": cfg.PHONE_SELECTORS,
    "contact_person_selectors": cfg.CONTACT_PERSON_SELECTORS,
    "contact_page_paths": cfg.CONTACT_PAGE_PATHS,
}


def _host_of(url: str) -> str:
    return (urlsplit(url).hostname or "").lower()


def _build_profile(data: dict, host: str) -> SelectorProfile:
    fields = {key: list(value) for key, value in _SITE_DEFAULTS.items()}
    fields.update(data)

    # Selector templates may refer to the directory's own host
    for key, value in fields.items():
        if isinstance(value, list):
            fields[key] = tuple(str(item).replace("{host}", host) for item in value)

    fields.setdefault("items_per_page", cfg.ITEMS_PER_PAGE)
    return SelectorProfile(**fields)


def resolve_profile(
    base_url: str,
    override: Optional[SelectorProfile] = None,
) -> SelectorProfile:
    """
    Pick the selector profile for *base_url*.

    An explicit *override* wins; otherwise the first ``SITE_PROFILES`` key
    contained in the URL's host is layered over the generic profile.
    """
    if override is not None:
        return override

    host = _host_of(base_url)
    data = dict(cfg.GENERIC_PROFILE)

    for pattern, site in cfg.SITE_PROFILES.items():
        if pattern in host:
            data.update(site)
            break

    profile = _build_profile(data, host)
    logger.debug("Selector profile '{}' resolved for {}", profile.name, host or base_url)
    return profile


def detect_pagination_style(base_url: str) -> PaginationStyle:
    """Look at the base URL's query for a known paging parameter."""
    keys = {key for key, _ in parse_qsl(urlsplit(base_url).query, keep_blank_values=True)}
    for style in (PaginationStyle.START, PaginationStyle.PAGE, PaginationStyle.OFFSET):
        if style.value in keys:
            return style
    return PaginationStyle.START


def build_page_url(
    base_url: str,
    page: int,
    items_per_page: int = cfg.ITEMS_PER_PAGE,
    style: Optional[PaginationStyle] = None,
) -> str:
    """
    Return the URL of 1-based *page*.

    ``start`` and ``offset`` take ``(page - 1) * items_per_page``; ``page``
    takes the page number itself. An existing parameter is replaced in
    place, otherwise it is appended.
    """
    if style is None:
        style = detect_pagination_style(base_url)
    value = page if style is PaginationStyle.PAGE else (page - 1) * items_per_page

    parts = urlsplit(base_url)
    params = []
    placed = False
    for key, current in parse_qsl(parts.query, keep_blank_values=True):
        if key == style.value:
            if not placed:
                params.append((key, str(value)))
                placed = True
            continue
        params.append((key, current))
    if not placed:
        params.append((style.value, str(value)))

    return urlunsplit(parts._replace(query=urlencode(params)))


def estimate_total_pages(
    profile: SelectorProfile,
    default: int = cfg.DEFAULT_TOTAL_PAGES,
) -> int:
    """Derive the page count from a known directory size, if the profile has one."""
    if profile.total_items:
        return max(1, math.ceil(profile.total_items / max(profile.items_per_page, 1)))
    return default
