"""
HTTP fetching: one GET per link, classified into success or failure.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

import requests

from linkcrawler.urls import extract_links

logger = logging.getLogger(__name__)

# Status codes below this are successes (3xx included, not followed by default)
FAILURE_STATUS_THRESHOLD = 400


@dataclass(frozen=True, slots=True)
class FetchSuccess:
    """A fetch that returned a status below 400."""
    url: str
    status_code: int
    links: List[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class FetchFailure:
    """A fetch that returned 400+ or never got a response."""
    url: str
    reason: str
    status_code: Optional[int] = None


FetchOutcome = Union[FetchSuccess, FetchFailure]


def is_successful_status(status_code: int) -> bool:
    return status_code < FAILURE_STATUS_THRESHOLD


class Fetcher:
    """
    Performs exactly one GET per call and never raises for per-link problems.

    Counting and enqueueing belong to the caller; this only turns a link
    into a FetchOutcome.
    """

    def __init__(
        self,
        session: requests.Session,
        timeout_s: float = 10.0,
        follow_redirects: bool = False,
    ) -> None:
        self.session = session
        self.timeout_s = timeout_s
        self.follow_redirects = follow_redirects

    def fetch(self, link: str) -> FetchOutcome:
        logger.debug("Crawling %s", link)
        try:
            resp = self.session.get(
                link,
                timeout=self.timeout_s,
                allow_redirects=self.follow_redirects,
            )
        except requests.RequestException as e:
            logger.warning("Failed to crawl %s: %s", link, e)
            return FetchFailure(url=link, reason=f"{type(e).__name__}: {e}")
        except ValueError as e:
            # urllib3 URL parsing errors that requests does not wrap
            logger.warning("Invalid link %s: %s", link, e)
            return FetchFailure(url=link, reason=f"invalid url: {e}")

        if not is_successful_status(resp.status_code):
            logger.warning("Failed to crawl %s: HTTP %s", link, resp.status_code)
            return FetchFailure(url=link, reason=f"HTTP {resp.status_code}", status_code=resp.status_code)

        # Only parse HTML content
        content_type = (resp.headers.get("content-type") or "").lower()
        if "html" not in content_type:
            return FetchSuccess(url=link, status_code=resp.status_code)

        return FetchSuccess(
            url=link,
            status_code=resp.status_code,
            links=extract_links(resp.text, resp.url or link),
        )
