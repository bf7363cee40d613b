"""
Pipeline orchestrator.

Runs a two-phase crawl over a paginated directory:

1. Listing phase -- fetch each directory page and extract listings.
2. Enrichment phase -- visit every listing's own website for contacts.

Both phases are rate limited and check the run's stop / pause token at the
top of every iteration. Results reach the consumer in ordered batches.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from functools import partial
from typing import Callable, List, Optional

from loguru import logger

import leadcrawl.config as cfg
from leadcrawl.core.error_handler import ErrorHandler
from leadcrawl.core.errors import (
    EmptyPage,
    EnrichmentFailed,
    NoDataExtracted,
    NoListingsFound,
)
from leadcrawl.core.fetcher import KIND_DIRECTORY, ContentFetcher
from leadcrawl.core.parser import extract_listings
from leadcrawl.core.profiles import build_page_url, estimate_total_pages, resolve_profile
from leadcrawl.enricher.enricher import ContactEnricher
from leadcrawl.models.lead import (
    EnrichedLead,
    EnrichmentStatus,
    ExtractedListing,
    RunPhase,
    RunState,
    RunSummary,
    SelectorProfile,
)
from leadcrawl.pipeline.control import RunControl
from leadcrawl.pipeline.rate_limiter import RateLimiter

BatchCallback = Callable[[List[EnrichedLead]], None]
ProgressCallback = Callable[[RunState], None]


def dedupe_leads(leads: List[EnrichedLead]) -> List[EnrichedLead]:
    """Drop repeats of (company name, source page), keeping the first."""
    seen: set = set()
    unique: List[EnrichedLead] = []
    for lead in leads:
        key = (lead.company_name.casefold(), lead.source_page_url)
        if key in seen:
            continue
        seen.add(key)
        unique.append(lead)
    return unique


def _pick(value, default):
    return default if value is None else value


class PipelineOrchestrator:
    """
    Owns the run state and drives fetcher, extractor and enricher.

    ``start`` blocks until the run ends; ``run_in_background`` runs the
    same thing on a daemon thread. ``pause``, ``resume`` and ``stop`` may
    be called from any thread.
    """

    def __init__(
        self,
        fetcher: Optional[ContentFetcher] = None,
        enricher: Optional[ContactEnricher] = None,
        on_batch: Optional[BatchCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
        page_delay: Optional[float] = None,
        backoff_every: Optional[int] = None,
        backoff_delay: Optional[float] = None,
        site_delay: Optional[float] = None,
        batch_size: Optional[int] = None,
        max_workers: Optional[int] = None,
        min_content_length: Optional[int] = None,
        dedupe: Optional[bool] = None,
    ) -> None:
        self.fetcher = fetcher or ContentFetcher.from_config()
        self.enricher = enricher or ContactEnricher(self.fetcher)
        self.on_batch = on_batch
        self.on_progress = on_progress

        self.page_delay = _pick(page_delay, cfg.PAGE_DELAY)
        self.backoff_every = _pick(backoff_every, cfg.BACKOFF_EVERY)
        self.backoff_delay = _pick(backoff_delay, cfg.BACKOFF_DELAY)
        self.site_delay = _pick(site_delay, cfg.SITE_DELAY)
        self.batch_size = max(1, _pick(batch_size, cfg.BATCH_SIZE))
        self.max_workers = max(1, _pick(max_workers, cfg.ENRICH_MAX_WORKERS))
        self.min_content_length = _pick(min_content_length, cfg.MIN_CONTENT_LENGTH)
        self.dedupe = _pick(dedupe, cfg.DEDUPE_LISTINGS)

        self._lock = threading.RLock()
        self._control = RunControl()
        self._state = RunState()
        self._emitted = 0
        self._active = False
        self._thread: Optional[threading.Thread] = None
        self._last_summary: Optional[RunSummary] = None

    # -- Control surface ---------------------------------------------------

    def pause(self) -> None:
        self._control.pause()
        self._set(pause_requested=True)
        self._log_event("Pause requested")

    def resume(self) -> None:
        self._control.resume()
        self._set(pause_requested=False)
        self._log_event("Resume requested")

    def stop(self) -> None:
        self._control.stop()
        self._set(stop_requested=True, pause_requested=False)
        self._log_event("Stop requested")

    def snapshot(self) -> RunState:
        """Deep copy of the current run state for display layers."""
        with self._lock:
            return self._state.model_copy(deep=True)

    @property
    def last_summary(self) -> Optional[RunSummary]:
        """Summary of the most recent finished run."""
        return self._last_summary

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._active

    def start(
        self,
        base_url: str,
        total_pages: Optional[int] = None,
        profile: Optional[SelectorProfile] = None,
        enrich: Optional[bool] = None,
    ) -> RunSummary:
        """
        Run both phases and return the final summary.

        Parameters
        ----------
        base_url : str
            First page of the directory; its query decides the pagination
            parameter unless the profile names one.
        total_pages : int or None
            Pages to crawl. Estimated from the profile when omitted.
        profile : SelectorProfile or None
            Explicit profile; otherwise matched from the URL's host.
        enrich : bool or None
            Visit company websites. Defaults to ``cfg.ENRICH_ENABLED``.
        """
        run = self._prepare(base_url, total_pages, profile, enrich)
        return self._execute(*run)

    def run_in_background(
        self,
        base_url: str,
        total_pages: Optional[int] = None,
        profile: Optional[SelectorProfile] = None,
        enrich: Optional[bool] = None,
    ) -> threading.Thread:
        """Start the run on a daemon thread and return the thread."""
        run = self._prepare(base_url, total_pages, profile, enrich)
        self._thread = threading.Thread(
            target=self._execute, args=run, name="leadcrawl-run", daemon=True
        )
        self._thread.start()
        return self._thread

    # -- Run lifecycle -----------------------------------------------------

    def _prepare(self, base_url, total_pages, profile, enrich) -> tuple:
        with self._lock:
            if self._active:
                raise RuntimeError("a run is already in progress")
            self._active = True

        try:
            profile = resolve_profile(base_url, profile)
        except Exception:
            with self._lock:
                self._active = False
            raise
        if total_pages is None:
            total_pages = estimate_total_pages(profile)
        enrich = cfg.ENRICH_ENABLED if enrich is None else enrich

        with self._lock:
            self._control = RunControl()
            self._state = RunState(base_url=base_url, total_pages=total_pages)
            self._emitted = 0

        return base_url, total_pages, profile, enrich

    def _execute(
        self,
        base_url: str,
        total_pages: int,
        profile: SelectorProfile,
        enrich: bool,
    ) -> RunSummary:
        started = time.time()
        try:
            self._log_event(
                f"Run started: {base_url} ({total_pages} pages, profile '{profile.name}', "
                f"enrichment {'on' if enrich else 'off'})"
            )
            page_limiter = RateLimiter(
                self.page_delay, self.backoff_every, self.backoff_delay, name="pages"
            )
            listings = self._run_listing_phase(base_url, total_pages, profile, page_limiter)

            leads = [EnrichedLead.from_listing(listing) for listing in listings]
            if self.dedupe:
                before = len(leads)
                leads = dedupe_leads(leads)
                self._log_event(f"De-duplicated {before} listings to {len(leads)}")
            self._set(collected_leads=leads, total_leads=len(leads), leads_found=len(leads))
            if not leads and not self._control.stop_requested:
                line = ErrorHandler.record(NoDataExtracted(base_url, total_pages), context="run")
                with self._lock:
                    self._state.error_log.append(line)

            if self._control.stop_requested:
                self._flush(leads)
            else:
                site_limiter = RateLimiter(self.site_delay, name="sites")
                self._run_enrichment_phase(leads, profile, site_limiter, enrich)

            stopped = self._control.stop_requested
            self._set(
                phase=RunPhase.STOPPED if stopped else RunPhase.DONE,
                paused=False,
                progress=self._state.progress if stopped else 100.0,
                status_message="Stopped" if stopped else "Completed",
            )
            summary = self._summarize(base_url, stopped, started)
            self._log_summary(summary)
            self._last_summary = summary
            self._notify()
            return summary
        finally:
            with self._lock:
                self._active = False

    # -- Phase 1: directory pages ------------------------------------------

    def _run_listing_phase(
        self,
        base_url: str,
        total_pages: int,
        profile: SelectorProfile,
        limiter: RateLimiter,
    ) -> List[ExtractedListing]:
        self._set(phase=RunPhase.LISTING, status_message="Crawling directory pages")
        listings: List[ExtractedListing] = []

        for page in range(1, total_pages + 1):
            if not self._checkpoint(f"page {page}"):
                break
            if not limiter.acquire(self._control):
                break

            page_url = build_page_url(
                base_url, page, profile.items_per_page, profile.pagination_style
            )
            self._set(current_page=page, status_message=f"Fetching page {page}/{total_pages}")
            logger.debug("Fetching page {}: {}", page, page_url)

            try:
                found = self._crawl_page(page_url, profile)
            except Exception as exc:
                line = ErrorHandler.record(exc, context=f"page {page}")
                with self._lock:
                    self._state.pages_failed += 1
                    self._state.error_log.append(line)
            else:
                listings.extend(found)
                with self._lock:
                    self._state.pages_succeeded += 1
                    self._state.leads_found = len(listings)
                with_contact = sum(1 for item in found if item.email or item.phone)
                self._log_event(
                    f"Page {page}: {len(found)} companies, {with_contact} with contact info "
                    f"(total {len(listings)})"
                )

            self._set(progress=page / total_pages * 50)
            self._notify()

        return listings

    def _crawl_page(self, page_url: str, profile: SelectorProfile) -> List[ExtractedListing]:
        result = self.fetcher.fetch(page_url, kind=KIND_DIRECTORY)
        if len(result.content) < self.min_content_length:
            raise EmptyPage(page_url, len(result.content))

        found = extract_listings(result.content, page_url, profile)
        if not found:
            raise NoListingsFound(page_url)
        return found

    # -- Phase 2: company websites -----------------------------------------

    def _run_enrichment_phase(
        self,
        leads: List[EnrichedLead],
        profile: SelectorProfile,
        limiter: RateLimiter,
        enrich: bool,
    ) -> None:
        total = len(leads)
        self._set(phase=RunPhase.ENRICHMENT, status_message=f"Enriching {total} leads")
        self._log_event(f"Enrichment phase: {total} leads")

        workers = self.max_workers if enrich else 1
        pool = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None
        work = partial(self._enrich_one, profile=profile, limiter=limiter)

        index = 0
        try:
            while index < total:
                if not self._checkpoint(f"lead {index + 1}"):
                    break

                chunk = leads[index:index + workers]
                if not enrich:
                    for lead in chunk:
                        self.enricher.resolve_offline(lead)
                elif pool is not None:
                    list(pool.map(work, chunk))
                else:
                    work(chunk[0])

                index += len(chunk)
                self._after_leads(chunk, index, total)

                if index - self._emitted >= self.batch_size:
                    self._emit(leads, index)
        finally:
            if pool is not None:
                pool.shutdown(wait=True)

        self._flush(leads)

    def _enrich_one(
        self,
        lead: EnrichedLead,
        profile: SelectorProfile,
        limiter: RateLimiter,
    ) -> EnrichedLead:
        # Leads without a site fail immediately and need no request slot
        if lead.external_website and not limiter.acquire(self._control):
            return lead
        self._set(status_message=f"Enriching {lead.company_name}")
        return self.enricher.enrich(lead, profile)

    def _after_leads(self, chunk: List[EnrichedLead], index: int, total: int) -> None:
        with self._lock:
            for lead in chunk:
                if lead.enrichment_status is EnrichmentStatus.FAILED:
                    self._state.leads_errored += 1
                    if lead.enrichment_error:
                        self._state.error_log.append(
                            ErrorHandler.record(
                                EnrichmentFailed(lead.company_name, lead.enrichment_error),
                                context="enrichment",
                            )
                        )
                elif lead.enriched:
                    self._state.leads_enriched += 1
            self._state.current_lead = index
            self._state.progress = 50 + (index / total * 50 if total else 50)
        self._notify()

    # -- Delivery ----------------------------------------------------------

    def _emit(self, leads: List[EnrichedLead], upto: int) -> None:
        batch = leads[self._emitted:upto]
        self._emitted = upto
        if not batch:
            return
        logger.info("Delivering batch of {} leads ({} so far)", len(batch), upto)
        if self.on_batch is None:
            return
        try:
            self.on_batch([lead.model_copy() for lead in batch])
        except Exception as exc:
            line = ErrorHandler.record(exc, context="batch consumer")
            with self._lock:
                self._state.error_log.append(line)

    def _flush(self, leads: List[EnrichedLead]) -> None:
        self._emit(leads, len(leads))

    # -- State helpers -----------------------------------------------------

    def _checkpoint(self, where: str) -> bool:
        """Top-of-loop stop / pause check. False means leave the loop."""
        if self._control.stop_requested:
            self._log_event(f"Stopped at {where}")
            return False

        if self._control.pause_requested:
            self._set(paused=True, status_message=f"Paused at {where}")
            self._log_event(f"Paused at {where}")
            self._notify()
            if not self._control.wait_while_paused():
                self._log_event(f"Stopped while paused at {where}")
                return False
            self._set(paused=False, status_message=f"Resumed at {where}")
            self._log_event(f"Resumed at {where}")

        return True

    def _set(self, **fields) -> None:
        with self._lock:
            for key, value in fields.items():
                setattr(self._state, key, value)

    def _log_event(self, message: str) -> None:
        stamp = datetime.now().strftime("%H:%M:%S")
        with self._lock:
            self._state.event_log.append(f"[{stamp}] {message}")
        logger.info(message)

    def _progress_view(self) -> RunState:
        """Shallow state copy for progress callbacks, without the lead list."""
        with self._lock:
            return self._state.model_copy(
                update={
                    "collected_leads": [],
                    "error_log": list(self._state.error_log),
                    "event_log": list(self._state.event_log),
                }
            )

    def _notify(self) -> None:
        if self.on_progress is None:
            return
        try:
            self.on_progress(self._progress_view())
        except Exception as exc:
            logger.warning("Progress callback failed: {}", exc)

    def _summarize(self, base_url: str, stopped: bool, started: float) -> RunSummary:
        with self._lock:
            leads = list(self._state.collected_leads)
            total = len(leads)
            enriched = sum(1 for lead in leads if lead.enriched)
            return RunSummary(
                base_url=base_url,
                stopped=stopped,
                pages_succeeded=self._state.pages_succeeded,
                pages_failed=self._state.pages_failed,
                page_success_rate=(
                    self._state.pages_succeeded / self._state.total_pages * 100
                    if self._state.total_pages else 0.0
                ),
                leads_found=total,
                leads_with_email=sum(1 for lead in leads if lead.email),
                leads_with_phone=sum(1 for lead in leads if lead.phone),
                leads_enriched=enriched,
                enrichment_rate=enriched / total * 100 if total else 0.0,
                errors=len(self._state.error_log),
                elapsed_seconds=time.time() - started,
            )

    @staticmethod
    def _log_summary(summary: RunSummary) -> None:
        total = summary.leads_found
        logger.info("")
        logger.info("Run Results{}:", " (stopped)" if summary.stopped else "")
        logger.info("  Pages succeeded:     {}", summary.pages_succeeded)
        logger.info("  Pages failed:        {}", summary.pages_failed)
        logger.info("  Page success rate:   {:.0f}%", summary.page_success_rate)
        logger.info("  Leads found:         {}", total)
        logger.info("  With email:          {}/{}", summary.leads_with_email, total)
        logger.info("  With phone:          {}/{}", summary.leads_with_phone, total)
        logger.info(
            "  Enriched:            {}/{} ({:.0f}%)",
            summary.leads_enriched,
            total,
            summary.enrichment_rate,
        )
        logger.info("  Errors logged:       {}", summary.errors)
