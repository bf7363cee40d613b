"""
Offline demo data source.

Produces plausible markup so the pipeline can be exercised without network
access. Only used when selected explicitly (``--demo`` / ``OFFLINE_DEMO``);
output is seeded by URL, so the same URL always yields the same page.
"""

import random
from urllib.parse import urlsplit

_COMPANY_WORDS = [
    "Aegis", "Baltic", "Crown", "Diamond", "Eclipse", "Fortress", "Heritage",
    "Imperial", "Meridian", "Neptune", "Pinnacle", "Sterling", "Titan",
]
_COMPANY_SUFFIXES = ["Insurance Group", "Underwriters", "Risk Partners", "Marine"]
_INDUSTRIES = [
    "Marine Insurance", "Aviation Insurance", "Energy Insurance",
    "Property Insurance", "Reinsurance", "Specialty Lines",
]
_LOCATIONS = ["London, UK", "Manchester, UK", "Edinburgh, UK", "Dublin, Ireland"]
_PEOPLE = ["John Smith", "Sarah Johnson", "Michael Brown", "Emma Wilson"]
_PHONES = ["+44 20 7123 4567", "+44 161 234 5678", "+44 117 987 6543"]


class DemoContentSource:
    """Synthetic directory pages and company sites."""

    name = "demo"

    def __init__(self, listings_per_page: int = 20) -> None:
        self.listings_per_page = listings_per_page

    def retrieve(self, url: str, kind: str = "site") -> str:
        rng = random.Random(url)
        if kind == "directory":
            return self._directory_page(rng)
        return self._company_site(url, rng)

    def _directory_page(self, rng: random.Random) -> str:
        cards = []
        for _ in range(self.listings_per_page):
            name = f"{rng.choice(_COMPANY_WORDS)} {rng.choice(_COMPANY_SUFFIXES)}"
            slug = "".join(ch for ch in name.lower() if ch.isalnum())
            cards.append(
                '<div class="company-listing">'
                f'<h3 class="company-name">{name}</h3>'
                f'<div class="industry">{rng.choice(_INDUSTRIES)}</div>'
                f'<div class="location">{rng.choice(_LOCATIONS)}</div>'
                f'<a href="https://{slug}.example.net" class="website-link">Visit Website</a>'
                f'<a href="/company/{slug}" class="profile-link">View Profile</a>'
                "</div>"
            )
        return f'<html><body><div class="search-results">{"".join(cards)}</div></body></html>'

    def _company_site(self, url: str, rng: random.Random) -> str:
        domain = (urlsplit(url).hostname or "company.example.net").removeprefix("www.")
        title = domain.split(".")[0].title()
        email = f"{rng.choice(['info', 'contact', 'sales', 'hello'])}@{domain}"
        phone = rng.choice(_PHONES)
        return (
            f"<html><head><title>{title}</title></head><body>"
            f"<header><h1>{title}</h1></header>"
            '<section class="contact-info"><h2>Contact Us</h2>'
            f'<p class="contact-person">{rng.choice(_PEOPLE)}</p>'
            f'<p class="email"><a href="mailto:{email}">{email}</a></p>'
            f'<p class="phone"><a href="tel:{phone}">{phone}</a></p>'
            "</section></body></html>"
        )
