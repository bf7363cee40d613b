"""
Pydantic data models for directory listings, enriched leads, selector
profiles, and run state.
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class EnrichmentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaginationStyle(str, Enum):
    """Query parameter used to address a directory page."""

    START = "start"      # item offset
    PAGE = "page"        # 1-based page number
    OFFSET = "offset"    # item offset


class RunPhase(str, Enum):
    IDLE = "idle"
    LISTING = "listing"
    ENRICHMENT = "enrichment"
    DONE = "done"
    STOPPED = "stopped"


class ExtractedListing(BaseModel):
    """One candidate business found on a directory page."""

    company_name: str = Field(..., description="Business name, never blank")
    profile_link: Optional[str] = Field(None, description="Directory profile URL")
    external_website: Optional[str] = Field(
        None, description="Company's own site (different host from the directory)"
    )
    industry: Optional[str] = Field(None, description="Industry / sector label")
    location: Optional[str] = Field(None, description="City, region or address")
    email: Optional[str] = Field(None, description="Contact email")
    phone: Optional[str] = Field(None, description="Contact phone number")
    contact_person: Optional[str] = Field(None, description="Named contact")
    source_page_url: str = Field(..., description="Directory page it was found on")

    @field_validator("company_name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("company_name must not be blank")
        return value


class EnrichedLead(ExtractedListing):
    """A listing plus the outcome of the contact-enrichment attempt."""

    enrichment_status: EnrichmentStatus = Field(
        EnrichmentStatus.PENDING, description="pending | completed | failed"
    )
    contact_page_url: Optional[str] = Field(
        None, description="Secondary page the contact details came from"
    )
    enrichment_error: Optional[str] = Field(
        None, description="Why enrichment failed, if it did"
    )

    @computed_field
    @property
    def enriched(self) -> bool:
        return bool(self.email or self.phone)

    @classmethod
    def from_listing(cls, listing: ExtractedListing) -> "EnrichedLead":
        return cls(**listing.model_dump())


class SelectorProfile(BaseModel):
    """
    Ordered selector lists and pagination rules for one directory family.

    Immutable; resolved once per run by ``core.profiles.resolve_profile``.
    """

    model_config = ConfigDict(frozen=True)

    name: str

    # -- Listing page --------------------------------------------------------
    container: Tuple[str, ...] = ()
    company_name: Tuple[str, ...] = ()
    profile_link: Tuple[str, ...] = ()
    external_website: Tuple[str, ...] = ()
    industry: Tuple[str, ...] = ()
    location: Tuple[str, ...] = ()
    email: Tuple[str, ...] = ()
    phone: Tuple[str, ...] = ()

    # -- Company site --------------------------------------------------------
    email_selectors: Tuple[str, ...] = ()
    phone_selectors: Tuple[str, ...] = ()
    contact_person_selectors: Tuple[str, ...] = ()
    contact_page_paths: Tuple[str, ...] = ()

    # -- Pagination ----------------------------------------------------------
    pagination_style: Optional[PaginationStyle] = None
    items_per_page: int = 20
    total_items: Optional[int] = None


class RunState(BaseModel):
    """Mutable state of one pipeline run, owned by the orchestrator."""

    base_url: Optional[str] = None
    phase: RunPhase = RunPhase.IDLE
    paused: bool = False
    stop_requested: bool = False
    pause_requested: bool = False

    current_page: int = 0
    total_pages: int = 0
    current_lead: int = 0
    total_leads: int = 0
    progress: float = 0.0
    status_message: str = ""

    pages_succeeded: int = 0
    pages_failed: int = 0
    leads_found: int = 0
    leads_enriched: int = 0
    leads_errored: int = 0

    collected_leads: List[EnrichedLead] = Field(default_factory=list)
    error_log: List[str] = Field(default_factory=list)
    event_log: List[str] = Field(default_factory=list)


class RunSummary(BaseModel):
    """Final counts reported when a run ends."""

    base_url: str
    stopped: bool = False
    pages_succeeded: int = 0
    pages_failed: int = 0
    page_success_rate: float = 0.0
    leads_found: int = 0
    leads_with_email: int = 0
    leads_with_phone: int = 0
    leads_enriched: int = 0
    enrichment_rate: float = 0.0
    errors: int = 0
    elapsed_seconds: float = 0.0


class FetchResult(BaseModel):
    """Raw markup for a URL and where it came from."""

    url: str
    content: str
    source: str = Field(..., description="Name of the retrieval source that answered")
    synthetic: bool = Field(False, description="True when produced by the demo source")
