"""
ContentFetcher -- raw markup for a URL through an ordered list of
retrieval sources.

Sources are tried in order and the first non-empty payload wins. When all
of them fail the fetcher raises ``FetchFailed``, unless a demo source was
configured explicitly, in which case synthetic markup is returned and
tagged as such.
"""

import json
from typing import Iterable, List, Optional
from urllib.parse import quote

from loguru import logger

import leadcrawl.config as cfg
from leadcrawl.core.errors import FetchFailed
from leadcrawl.core.http_client import StealthHTTPClient
from leadcrawl.models.lead import FetchResult

# Page kinds a source may be asked for
KIND_SITE = "site"
KIND_DIRECTORY = "directory"


# ── Retrieval sources ─────────────────────────────────────────────────────

class DirectSource:
    """Request the page straight from its origin."""

    name = "direct"

    def __init__(self, client: StealthHTTPClient) -> None:
        self.client = client

    def retrieve(self, url: str, kind: str = KIND_SITE) -> Optional[str]:
        return self.client.get(url)


class RelaySource:
    """
    Fetch through a public relay that retrieves the page on our behalf.

    *template* receives the quoted target URL as ``{url}``. When
    *payload_key* is set the relay answers with JSON and the markup sits
    under that key; otherwise the body is the markup itself.
    """

    def __init__(
        self,
        name: str,
        template: str,
        client: StealthHTTPClient,
        payload_key: Optional[str] = None,
    ) -> None:
        self.name = name
        self.template = template
        self.client = client
        self.payload_key = payload_key

    def relay_url(self, url: str) -> str:
        return self.template.format(url=quote(url, safe=""))

    def retrieve(self, url: str, kind: str = KIND_SITE) -> Optional[str]:
        body = self.client.get(self.relay_url(url))
        if not body or self.payload_key is None:
            return body
        data = json.loads(body)
        if not isinstance(data, dict):
            return None
        return data.get(self.payload_key)


def default_sources(client: Optional[StealthHTTPClient] = None) -> List:
    """Build the source chain named in ``config.FETCH_SOURCES``."""
    client = client or StealthHTTPClient()
    sources: List = []

    for name in cfg.FETCH_SOURCES:
        if name == "direct":
            sources.append(DirectSource(client))
        elif name in cfg.RELAY_TEMPLATES:
            template, payload_key = cfg.RELAY_TEMPLATES[name]
            sources.append(RelaySource(name, template, client, payload_key))
        else:
            logger.warning("Unknown retrieval source '{}' -- ignored", name)

    if cfg.FETCH_ENABLE_BROWSER:
        from leadcrawl.core.browser import BrowserSource

        sources.append(BrowserSource())

    return sources


# ── Fetcher ───────────────────────────────────────────────────────────────

class ContentFetcher:
    """Try each retrieval source in turn; no caching between calls."""

    def __init__(
        self,
        sources: Optional[Iterable] = None,
        demo_source=None,
    ) -> None:
        self.sources = list(sources) if sources is not None else default_sources()
        self.demo_source = demo_source

    @classmethod
    def from_config(cls) -> "ContentFetcher":
        demo = None
        if cfg.OFFLINE_DEMO:
            from leadcrawl.core.demo import DemoContentSource

            demo = DemoContentSource()
        return cls(default_sources(), demo_source=demo)

    def fetch(self, url: str, kind: str = KIND_SITE) -> FetchResult:
        """
        Return the markup for *url*.

        Raises
        ------
        FetchFailed
            Every source came back empty and no demo source is configured.
        """
        tried: List[str] = []

        for source in self.sources:
            tried.append(source.name)
            try:
                content = source.retrieve(url, kind)
            except Exception as exc:
                logger.debug("Source {} failed for {}: {}", source.name, url, exc)
                continue

            if content and content.strip():
                logger.debug("Fetched {} via {} ({} chars)", url, source.name, len(content))
                return FetchResult(url=url, content=content, source=source.name)

            logger.debug("Source {} returned nothing for {}", source.name, url)

        if self.demo_source is not None:
            logger.warning("All sources failed for {} -- serving demo content", url)
            return FetchResult(
                url=url,
                content=self.demo_source.retrieve(url, kind),
                source=self.demo_source.name,
                synthetic=True,
            )

        raise FetchFailed(url, tried)
