"""
Browser-like HTTP client using curl_cffi for TLS-fingerprint evasion.

Wraps curl_cffi.requests with:
- Chrome TLS impersonation
- A fixed browser header set
- Per-domain rate limiting
- Retry with exponential backoff
"""

import time
import threading
from typing import Optional
from urllib.parse import urlparse

from curl_cffi import requests as cffi_requests
from loguru import logger

import leadcrawl.config as cfg

# Blocked / throttled: retrying only makes it worse
_NO_RETRY_STATUSES = (401, 403, 429, 503)


class StealthHTTPClient:
    """
    Thread-safe HTTP client that presents itself as a desktop Chrome.

    ``get`` never raises; it returns None once retries are exhausted.
    """

    def __init__(
        self,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
        same_domain_delay: Optional[float] = None,
    ) -> None:
        self.timeout = cfg.FETCH_TIMEOUT if timeout is None else timeout
        self.max_retries = cfg.FETCH_MAX_RETRIES if max_retries is None else max_retries
        self.same_domain_delay = (
            cfg.FETCH_SAME_DOMAIN_DELAY if same_domain_delay is None else same_domain_delay
        )
        self._lock = threading.Lock()
        self._domain_timestamps: dict[str, float] = {}

    def _rate_limit(self, domain: str) -> None:
        """
        Enforce minimum delay between requests to the same domain.

        The slot is reserved under the lock; the wait happens outside it,
        so requests to other domains are not held up.
        """
        with self._lock:
            now = time.time()
            last = self._domain_timestamps.get(domain, 0)
            wait = max(0.0, last + self.same_domain_delay - now)
            self._domain_timestamps[domain] = now + wait
        if wait > 0:
            time.sleep(wait)

    def get(self, url: str) -> Optional[str]:
        """
        Fetch *url* and return its body as a string.

        Returns None on unrecoverable failure (after retries).
        """
        domain = urlparse(url).netloc
        self._rate_limit(domain)

        last_exc: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                resp = cffi_requests.get(
                    url,
                    headers=dict(cfg.REQUEST_HEADERS),
                    timeout=self.timeout,
                    impersonate=cfg.IMPERSONATE,
                    allow_redirects=True,
                )
                if resp.status_code == 200:
                    return resp.text
                logger.debug(
                    "HTTP {} for {} (attempt {}/{})",
                    resp.status_code,
                    domain,
                    attempt,
                    self.max_retries,
                )
                if resp.status_code in _NO_RETRY_STATUSES:
                    return None
            except Exception as exc:
                last_exc = exc
                logger.debug(
                    "Request failed for {} (attempt {}/{}): {}",
                    domain,
                    attempt,
                    self.max_retries,
                    exc,
                )

            if attempt < self.max_retries:
                time.sleep(min(2 ** attempt, 8))

        if last_exc:
            logger.debug("All retries exhausted for {}: {}", domain, last_exc)
        return None
