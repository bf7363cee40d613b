"""
Directory lead crawler -- command-line entry point.

Usage
-----
    python -m leadcrawl.main -u "https://ldc.lloyds.com/market-directory/results?mode=bro&bro=1"
    python -m leadcrawl.main -u "https://dir.example.com/results?page=1" --pages 5
    python -m leadcrawl.main -u "https://dir.example.com/results" --no-enrich --json
"""

import sys
import time
import argparse
from typing import List

from loguru import logger

import leadcrawl.config as cfg
from leadcrawl.core.error_handler import ErrorHandler
from leadcrawl.core.fetcher import ContentFetcher
from leadcrawl.models.lead import EnrichedLead
from leadcrawl.pipeline.orchestrator import PipelineOrchestrator


# -- Consumer --------------------------------------------------------------

def _make_consumer(as_json: bool):
    """Batch callback: log each batch, optionally print leads as JSON lines."""

    def _consume(batch: List[EnrichedLead]) -> None:
        enriched = sum(1 for lead in batch if lead.enriched)
        logger.info("Received {} leads ({} enriched)", len(batch), enriched)
        if as_json:
            for lead in batch:
                print(lead.model_dump_json(), flush=True)

    return _consume


# -- CLI -------------------------------------------------------------------

def main() -> None:
    parser = argparse.ArgumentParser(
        description="Directory lead crawler with contact enrichment",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python -m leadcrawl.main -u 'https://dir.example.com/results?start=0'\n"
            "  python -m leadcrawl.main -u 'https://dir.example.com/results?page=1' --pages 5\n"
            "  python -m leadcrawl.main -u 'https://dir.example.com/results' --demo --json\n"
        ),
    )
    parser.add_argument(
        "-u", "--url",
        type=str,
        required=True,
        help="First page of the directory to crawl",
    )
    parser.add_argument(
        "--pages",
        type=int,
        default=None,
        help="Pages to crawl (default: estimated from the site profile, "
        f"else {cfg.DEFAULT_TOTAL_PAGES})",
    )
    parser.add_argument(
        "--no-enrich",
        action="store_true",
        default=False,
        help="Skip visiting company websites (listing crawl only)",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        default=False,
        help="Serve synthetic pages when every retrieval source fails",
    )
    parser.add_argument(
        "--browser",
        action="store_true",
        default=False,
        help="Add headless Chromium as a last-resort retrieval source",
    )
    parser.add_argument(
        "--dedupe",
        action="store_true",
        default=False,
        help="Drop repeated (company, page) listings before enrichment",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=cfg.ENRICH_MAX_WORKERS,
        help=f"Concurrent enrichment workers (default: {cfg.ENRICH_MAX_WORKERS})",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print every lead to stdout as a JSON line",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=cfg.LOG_LEVEL,
        help=f"Console log level (default: {cfg.LOG_LEVEL})",
    )
    args = parser.parse_args()

    # -- Apply CLI overrides -----------------------------------------------
    if args.no_enrich:
        cfg.ENRICH_ENABLED = False
    if args.demo:
        cfg.OFFLINE_DEMO = True
    if args.browser:
        cfg.FETCH_ENABLE_BROWSER = True
    if args.dedupe:
        cfg.DEDUPE_LISTINGS = True
    cfg.ENRICH_MAX_WORKERS = max(1, args.workers)

    ErrorHandler.setup_logging(args.log_level.upper())

    # -- Run ---------------------------------------------------------------
    orchestrator = PipelineOrchestrator(
        fetcher=ContentFetcher.from_config(),
        on_batch=_make_consumer(args.json),
    )
    start = time.time()

    thread = orchestrator.run_in_background(args.url, total_pages=args.pages)
    try:
        while thread.is_alive():
            thread.join(0.5)
    except KeyboardInterrupt:
        logger.warning("Interrupted -- stopping and flushing collected leads")
        orchestrator.stop()
        thread.join()

    summary = orchestrator.last_summary
    if summary is None:
        logger.error("Run ended without a summary")
        sys.exit(1)

    elapsed = time.time() - start

    # -- Report ------------------------------------------------------------
    logger.info("")
    logger.info("=" * 60)
    logger.info("CRAWL COMPLETE  ({:.1f}s elapsed)", elapsed)
    logger.info("=" * 60)
    status_icon = "OK" if summary.leads_found else "FAIL"
    logger.info(
        "  [{}]  '{}'  ->  {} leads, {} enriched ({:.0f}%)",
        status_icon,
        summary.base_url,
        summary.leads_found,
        summary.leads_enriched,
        summary.enrichment_rate,
    )
    for line in orchestrator.snapshot().error_log[-10:]:
        logger.info("  ! {}", line)
    logger.info("=" * 60)

    if not summary.leads_found:
        sys.exit(1)


if __name__ == "__main__":
    main()
