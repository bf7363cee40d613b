"""
Exception taxonomy for the pipeline.

Every error here is recovered by the orchestrator and written to the run's
error log; none of them aborts a run.
"""

from typing import Sequence


class LeadCrawlError(Exception):
    """Base class for recoverable pipeline errors."""


class FetchFailed(LeadCrawlError):
    """Every retrieval source was exhausted for *url*."""

    def __init__(self, url: str, sources: Sequence[str] = ()):
        self.url = url
        self.sources = list(sources)
        tried = ", ".join(self.sources) or "none"
        super().__init__(f"could not fetch {url} (sources tried: {tried})")


class EmptyPage(LeadCrawlError):
    """Fetched content is below the minimum useful length."""

    def __init__(self, url: str, length: int):
        self.url = url
        self.length = length
        super().__init__(f"{url} returned insufficient content ({length} chars)")


class NoListingsFound(LeadCrawlError):
    """Neither container detection nor the heading scan found anything."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"no companies found on {url}")


class EnrichmentFailed(LeadCrawlError):
    """Missing external site, or a fault while fetching / parsing it."""

    def __init__(self, company: str, reason: str):
        self.company = company
        self.reason = reason
        super().__init__(f"enrichment failed for {company}: {reason}")


class NoDataExtracted(LeadCrawlError):
    """A whole run finished without a single listing."""

    def __init__(self, url: str, pages: int):
        self.url = url
        self.pages = pages
        super().__init__(f"no data extracted from {url} ({pages} pages tried)")
