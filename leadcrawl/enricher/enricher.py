"""
ContactEnricher -- visits a lead's own website (and, if that yields
nothing, its likely contact pages) to fill in email, phone and contact
person.
"""

from typing import Optional, Tuple, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from loguru import logger

from leadcrawl.core.errors import EnrichmentFailed
from leadcrawl.core.fetcher import ContentFetcher
from leadcrawl.core.profiles import resolve_profile
from leadcrawl.enricher.contact_extractor import ContactDetails, extract_contact_details
from leadcrawl.models.lead import (
    EnrichedLead,
    EnrichmentStatus,
    ExtractedListing,
    SelectorProfile,
)

_NO_WEBSITE = "no external website"


def _merge(lead: EnrichedLead, details: ContactDetails) -> None:
    """Fill empty fields only; listing-page data wins."""
    if details.email and not lead.email:
        lead.email = details.email
    if details.phone and not lead.phone:
        lead.phone = details.phone
    if details.contact_person and not lead.contact_person:
        lead.contact_person = details.contact_person


class ContactEnricher:
    """Deep-crawl contact enrichment for one lead at a time."""

    def __init__(
        self,
        fetcher: ContentFetcher,
        profile: Optional[SelectorProfile] = None,
    ) -> None:
        self.fetcher = fetcher
        self.profile = profile

    # -- Page helpers ------------------------------------------------------

    def _details_for(self, url: str, profile: SelectorProfile) -> ContactDetails:
        page = self.fetcher.fetch(url)
        return extract_contact_details(BeautifulSoup(page.content, "lxml"), profile)

    def _probe_contact_pages(
        self,
        website: str,
        profile: SelectorProfile,
    ) -> Optional[Tuple[str, ContactDetails]]:
        """Try each contact path under the site's origin; first hit wins."""
        for path in profile.contact_page_paths:
            url = urljoin(website, path)
            try:
                details = self._details_for(url, profile)
            except Exception as exc:
                logger.debug("Contact page {} skipped: {}", url, exc)
                continue
            if details.has_contact:
                logger.debug("Contact details found on {}", url)
                return url, details
        return None

    # -- Public API --------------------------------------------------------

    def enrich(
        self,
        lead: Union[EnrichedLead, ExtractedListing],
        profile: Optional[SelectorProfile] = None,
    ) -> EnrichedLead:
        """
        Enrich *lead* in place and return it.

        Status becomes ``completed`` whenever the fetch-and-parse sequence
        runs to the end, even if nothing was found, and ``failed`` when the
        lead has no website or the main-page fetch/parse raises. The reason
        for a failure is kept in ``enrichment_error``.
        """
        if not isinstance(lead, EnrichedLead):
            lead = EnrichedLead.from_listing(lead)
        profile = profile or self.profile or resolve_profile(lead.source_page_url)

        try:
            self._enrich(lead, profile)
        except Exception as exc:
            failure = (
                exc if isinstance(exc, EnrichmentFailed)
                else EnrichmentFailed(lead.company_name, str(exc))
            )
            lead.enrichment_status = EnrichmentStatus.FAILED
            lead.enrichment_error = failure.reason
            logger.debug("{}", failure)
            return lead

        lead.enrichment_status = EnrichmentStatus.COMPLETED
        logger.debug(
            "Enriched {}: email={} phone={}",
            lead.company_name,
            bool(lead.email),
            bool(lead.phone),
        )
        return lead

    def _enrich(self, lead: EnrichedLead, profile: SelectorProfile) -> None:
        if not lead.external_website:
            raise EnrichmentFailed(lead.company_name, _NO_WEBSITE)

        _merge(lead, self._details_for(lead.external_website, profile))

        if lead.email or lead.phone:
            return

        found = self._probe_contact_pages(lead.external_website, profile)
        if found:
            lead.contact_page_url, details = found
            _merge(lead, details)

    def resolve_offline(self, lead: Union[EnrichedLead, ExtractedListing]) -> EnrichedLead:
        """Settle a lead's status without touching the network."""
        if not isinstance(lead, EnrichedLead):
            lead = EnrichedLead.from_listing(lead)

        if lead.external_website:
            lead.enrichment_status = EnrichmentStatus.COMPLETED
        else:
            lead.enrichment_status = EnrichmentStatus.FAILED
            lead.enrichment_error = _NO_WEBSITE
        return lead
