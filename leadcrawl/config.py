"""
Single-source configuration: paths, HTTP settings, retrieval sources,
rate limits, and the selector data every extractor reads from.

Everything that might need tweaking lives here.
"""

from pathlib import Path


# ── Project Paths ─────────────────────────────────────────────────────────────

ROOT_DIR = Path(__file__).resolve().parent.parent
LOGS_DIR = ROOT_DIR / "logs"
LOG_LEVEL: str = "INFO"


# ── HTTP ──────────────────────────────────────────────────────────────────────

USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)
REQUEST_HEADERS: dict = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate, br",
    "Upgrade-Insecure-Requests": "1",
}
IMPERSONATE: str = "chrome120"

FETCH_TIMEOUT: int = 15                  # seconds per HTTP request
FETCH_MAX_RETRIES: int = 2               # attempts per source
FETCH_SAME_DOMAIN_DELAY: float = 0.5     # min gap between hits on one host

# ── Retrieval sources (tried in order) ───────────────────────────────────────
#
#    "direct" is a plain request; the rest are relays that fetch on our behalf.
#    Relay templates receive the URL-quoted target as {url}.

FETCH_SOURCES: list = ["direct", "allorigins", "codetabs"]
RELAY_TEMPLATES: dict = {
    "allorigins": ("https://api.allorigins.win/get?url={url}", "contents"),
    "codetabs": ("https://api.codetabs.com/v1/proxy?quest={url}", None),
}

# Headless Chromium as a last resort for JS-rendered directories
FETCH_ENABLE_BROWSER: bool = False
BROWSER_NAV_TIMEOUT: int = 20_000        # milliseconds
BROWSER_RENDER_WAIT: int = 2_000         # milliseconds

# Synthetic markup instead of FetchFailed (demo / offline runs only)
OFFLINE_DEMO: bool = False

# ── Run pacing ───────────────────────────────────────────────────────────────

PAGE_DELAY: float = 1.0                  # seconds between directory pages
BACKOFF_EVERY: int = 10                  # every N pages ...
BACKOFF_DELAY: float = 2.0               # ... wait this long instead
SITE_DELAY: float = 1.0                  # seconds between company sites
PAUSE_POLL: float = 0.25                 # pause-loop wake interval

# ── Pipeline ─────────────────────────────────────────────────────────────────

ITEMS_PER_PAGE: int = 20
DEFAULT_TOTAL_PAGES: int = 10
MIN_CONTENT_LENGTH: int = 100            # shorter payloads count as empty pages
BATCH_SIZE: int = 10                     # leads per consumer callback
ENRICH_ENABLED: bool = True
ENRICH_MAX_WORKERS: int = 1              # >1 enables the phase-2 thread pool
DEDUPE_LISTINGS: bool = False
HEADING_SCAN_LIMIT: int = 50

# ── Listing-page selectors ───────────────────────────────────────────────────
#
#    Generic fallbacks, tried after a profile's own selectors.

CONTAINER_SELECTORS: list = [
    ".company-listing", ".business-card", ".company-item", ".listing-item",
    ".directory-item", ".company-profile", ".member-listing", ".search-result",
    "[data-company]", ".company", ".business", ".member",
]
HEADING_SELECTORS: list = [
    "h3", "h2", ".company-name", ".business-name", ".title", ".name",
]
NAME_SELECTORS: list = ["h3", "h2", ".title", ".name", ".company-name"]
PROFILE_LINK_SELECTORS: list = ['a[href*="profile"]', 'a[href*="company"]', "a"]
INDUSTRY_SELECTORS: list = [".industry", ".sector", ".category"]
LOCATION_SELECTORS: list = [".location", ".address", ".city", ".region"]

# ── Company-site selectors ───────────────────────────────────────────────────

EMAIL_SELECTORS: list = [
    'a[href^="mailto:"]', ".email", ".contact-email", ".email-address",
    "[data-email]", ".contact-info .email",
]
PHONE_SELECTORS: list = [
    'a[href^="tel:"]', ".phone", ".telephone", ".contact-phone",
    ".phone-number", "[data-phone]", ".contact-info .phone",
]
CONTACT_PERSON_SELECTORS: list = [
    ".contact-person", ".contact-name", ".manager", ".director",
    ".ceo", ".founder", ".contact .name", ".team .name",
]
CONTACT_PAGE_PATHS: list = [
    "/contact", "/contact-us", "/contacts", "/about/contact",
    "/get-in-touch", "/reach-us", "/contact-info",
]

# Substrings that mark an address as generic (case-insensitive)
GENERIC_EMAIL_PATTERNS: list = [
    "noreply", "no-reply", "donotreply", "admin@", "test@",
    "example@", "demo@", "support@example", "@example.com",
]

# ── Site profiles ────────────────────────────────────────────────────────────
#
#    Keyed by a host substring. Unlisted fields fall back to the generic
#    profile built in core/profiles.py. "{host}" is replaced with the
#    directory's own host.

SITE_PROFILES: dict = {
    "ldc.lloyds.com": {
        "name": "lloyds",
        "company_name": [".company-name", ".business-name", "h3", "h2"],
        "profile_link": [".company-link", ".profile-link", 'a[href*="company"]'],
        "external_website": [
            ".website-link", 'a[href*="http"]:not([href*="ldc.lloyds.com"])',
        ],
        "industry": [".industry", ".sector", ".category"],
        "location": [".location", ".address", ".city"],
        "pagination_style": "start",
        "items_per_page": 20,
        "total_items": 4552,
        "contact_page_paths": ["/contact", "/contact-us", "/about"],
    },
}

GENERIC_PROFILE: dict = {
    "name": "generic",
    "company_name": [".company-name", ".business-name", ".title", "h3", "h2", ".name"],
    "profile_link": [".company-link", ".profile-link", 'a[href*="company"]', 'a[href*="profile"]'],
    "external_website": [
        ".website-link", ".external-link", 'a[href^="http"]:not([href*="{host}"])',
    ],
    "industry": [".industry", ".sector", ".category", ".type"],
    "location": [".location", ".address", ".city", ".region", ".area"],
    "email": [".email", ".mail"],
    "phone": [".phone", ".tel", ".telephone"],
}
