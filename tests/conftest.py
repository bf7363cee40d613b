import pytest

from leadcrawl.core.errors import FetchFailed
from leadcrawl.models.lead import FetchResult


class FakeFetcher:
    """In-memory stand-in for ContentFetcher; unknown URLs raise FetchFailed."""

    def __init__(self, pages=None, on_fetch=None):
        self.pages = dict(pages or {})
        self.calls = []
        self.on_fetch = on_fetch

    def fetch(self, url, kind="site"):
        self.calls.append(url)
        if self.on_fetch is not None:
            self.on_fetch(url, kind)
        if url not in self.pages:
            raise FetchFailed(url, ["fake"])
        return FetchResult(url=url, content=self.pages[url], source="fake")


def directory_markup(names, websites=None):
    websites = websites or {}
    cards = []
    for name in names:
        link = ""
        if name in websites:
            link = f'<a class="website-link" href="{websites[name]}">Website</a>'
        cards.append(
            '<div class="company-listing">'
            f'<h3 class="company-name">{name}</h3>'
            '<div class="industry">Marine Insurance</div>'
            '<div class="location">London, UK</div>'
            f"{link}</div>"
        )
    return f"<html><body><div class='results'>{''.join(cards)}</div></body></html>"


@pytest.fixture
def make_fetcher():
    return FakeFetcher


@pytest.fixture
def make_directory():
    return directory_markup
