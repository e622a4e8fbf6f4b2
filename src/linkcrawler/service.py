"""
Crawler service: resolve the start endpoint's seed links, then run one crawl.

Both the CLI (boot-time run) and the HTTP control surface go through here.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

import requests

from linkcrawler.config import CrawlerConfig
from linkcrawler.engine import CrawlEngine
from linkcrawler.seeds import resolve_seed_links, validate_endpoint
from linkcrawler.stats import CrawlStats

logger = logging.getLogger(__name__)


class CrawlerService:
    """Owns one session and one engine, so every crawl shares the same worker pool."""

    def __init__(self, config: CrawlerConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config.validate()
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = config.user_agent
        self.session = session
        self.engine = CrawlEngine.from_config(config, session=session)

    def validate_endpoint(self, start_endpoint: Optional[str]) -> str:
        """Check the endpoint without touching the network."""
        return validate_endpoint(start_endpoint)

    def crawl_endpoint(
        self,
        start_endpoint: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> CrawlStats:
        """
        Crawl everything reachable from the links listed at start_endpoint.

        Falls back to the configured endpoint when none is given. Raises
        InvalidSeed before any crawling if the endpoint or its document is
        unusable.
        """
        endpoint = start_endpoint if start_endpoint is not None else self.config.start_endpoint
        seeds = resolve_seed_links(endpoint, self.session, timeout_s=self.config.request_timeout)
        logger.info("Resolved %d seed links from %s", len(seeds), endpoint)
        return self.engine.run(seeds, cancel_event=cancel_event)

    def close(self) -> None:
        """Shut down the engine's worker pool."""
        self.engine.shutdown()
