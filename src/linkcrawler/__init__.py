"""
Recursive web crawler: fetches every link reachable from a seed list exactly
once, with a bounded worker pool, and reports request/success/failure counts.
"""
from linkcrawler.config import CrawlerConfig
from linkcrawler.engine import CrawlEngine, CrawlState
from linkcrawler.errors import CrawlerError, InternalInvariantViolation, InvalidSeed
from linkcrawler.fetcher import Fetcher, FetchFailure, FetchSuccess
from linkcrawler.frontier import Frontier
from linkcrawler.service import CrawlerService
from linkcrawler.stats import CrawlStats

__version__ = "1.0.0"
__all__ = [
    "CrawlEngine",
    "CrawlState",
    "CrawlStats",
    "CrawlerConfig",
    "CrawlerError",
    "CrawlerService",
    "Fetcher",
    "FetchFailure",
    "FetchSuccess",
    "Frontier",
    "InternalInvariantViolation",
    "InvalidSeed",
]
