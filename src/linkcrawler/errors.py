"""
Exception types raised by the crawler.
"""
from __future__ import annotations


class CrawlerError(Exception):
    """Base class for crawler errors."""


class InvalidSeed(CrawlerError):
    """The seed endpoint is unset, unreachable, or did not yield usable links."""


class InternalInvariantViolation(CrawlerError):
    """Frontier or engine state that correct code can never produce."""
