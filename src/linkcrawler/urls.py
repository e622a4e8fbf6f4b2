"""
Link canonicalization and extraction.
"""
from __future__ import annotations

from typing import List
from urllib.parse import urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup, SoupStrainer

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)

DEFAULT_PORTS = {"http": 80, "https": 443}


def canonicalize(raw: str) -> str:
    """
    Normalize a link into the key used for deduplication.

    - Strips whitespace and drops fragments (#...)
    - Lowercases scheme and host for http(s) URLs
    - Removes default ports (:80, :443)
    - Keeps querystrings (they matter for uniqueness)

    Anything that is not an absolute http(s) URL is returned as-is apart
    from the first two steps; it still gets claimed and fetched, and the
    fetch fails.
    """
    link, _, _ = raw.strip().partition("#")
    try:
        parsed = urlparse(link)
        scheme = parsed.scheme.lower()
        if scheme not in DEFAULT_PORTS or not parsed.hostname:
            return link
        port = parsed.port
    except ValueError:
        # Unparseable port or bracketed host
        return link

    hostname = parsed.hostname.lower()
    if port is None or port == DEFAULT_PORTS[scheme]:
        netloc = hostname
    else:
        netloc = f"{hostname}:{port}"
    if parsed.username or parsed.password:
        userinfo = parsed.netloc.rpartition("@")[0]
        netloc = f"{userinfo}@{netloc}"

    return urlunparse((
        scheme,
        netloc,
        parsed.path or "/",
        parsed.params,
        parsed.query,
        "",
    ))


def extract_links(html: str, base_url: str) -> List[str]:
    """Return every <a href> target in the page, resolved against base_url, in document order."""
    soup = BeautifulSoup(html, "lxml", parse_only=LINK_STRAINER)
    links = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href:
            continue
        try:
            links.append(urljoin(base_url, href))
        except ValueError:
            links.append(href)
    return links
