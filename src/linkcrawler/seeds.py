"""
Seed resolution: fetch the start endpoint's JSON document and return its links.
"""
from __future__ import annotations

import json
import logging
from typing import List, Optional
from urllib.parse import urlparse

import requests

from linkcrawler.errors import InvalidSeed

logger = logging.getLogger(__name__)


def validate_endpoint(start_endpoint: Optional[str]) -> str:
    """Fail fast, before any network activity, on an unset or malformed endpoint."""
    if start_endpoint is None or not start_endpoint.strip():
        raise InvalidSeed("Crawler endpoint is not set!")
    endpoint = start_endpoint.strip()
    try:
        parsed = urlparse(endpoint)
    except ValueError as e:
        raise InvalidSeed(f'Invalid starting endpoint "{endpoint}"') from e
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidSeed(f'Invalid starting endpoint "{endpoint}"')
    return endpoint


def resolve_seed_links(
    start_endpoint: Optional[str],
    session: requests.Session,
    timeout_s: float = 10.0,
) -> List[str]:
    """
    GET the start endpoint and return the ``links`` array of its JSON body.

    Expected document: ``{"links": ["https://...", ...]}``. A document
    without ``links`` yields an empty list; the engine rejects that.
    """
    endpoint = validate_endpoint(start_endpoint)
    logger.info("Resolving seed links from %s", endpoint)

    try:
        resp = session.get(endpoint, timeout=timeout_s)
    except requests.RequestException as e:
        raise InvalidSeed("Could not crawl starting endpoint") from e

    if not 200 <= resp.status_code < 300:
        raise InvalidSeed(f"Starting endpoint returned HTTP {resp.status_code}")

    body = resp.text
    if not body or not body.strip():
        raise InvalidSeed("Starting endpoint returned an empty body")

    try:
        document = json.loads(body)
    except json.JSONDecodeError as e:
        raise InvalidSeed("Invalid json") from e

    if not isinstance(document, dict):
        raise InvalidSeed("Invalid json: expected an object with a 'links' array")

    links = document.get("links")
    if links is None:
        return []
    if not isinstance(links, list) or not all(isinstance(link, str) for link in links):
        raise InvalidSeed("Invalid json: 'links' must be an array of strings")
    return links
