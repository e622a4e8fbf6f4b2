"""
Concurrent traversal engine.

A crawl run is a CrawlJob (frontier, stats, completion detector) driven by
a Dispatcher that feeds a shared, bounded thread pool. The run is over when, under
one lock, nothing is pending and no fetch is in flight.
"""
from __future__ import annotations

import enum
import logging
import threading
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Iterable, List, Optional

import requests

from linkcrawler.config import CrawlerConfig
from linkcrawler.errors import InvalidSeed
from linkcrawler.fetcher import Fetcher, FetchSuccess
from linkcrawler.frontier import Frontier
from linkcrawler.stats import CrawlStats, StatsCollector

logger = logging.getLogger(__name__)


class CrawlState(enum.Enum):
    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"


class CompletionDetector:
    """
    Tracks in-flight fetches and decides when a run has drained.

    Every claim and every finished fetch notifies the condition, so the
    dispatcher sleeps until something changes instead of polling.
    """

    def __init__(self, frontier: Frontier, cancel_event: Optional[threading.Event] = None) -> None:
        self.frontier = frontier
        self.cancel_event = cancel_event or threading.Event()
        self._cond = threading.Condition()
        self._in_flight = 0
        self._state = CrawlState.RUNNING

    @property
    def state(self) -> CrawlState:
        with self._cond:
            return self._state

    def signal(self) -> None:
        """Wake the dispatcher; called after a link is claimed."""
        with self._cond:
            self._cond.notify_all()

    def task_started(self) -> None:
        """Count a fetch handed to the pool."""
        with self._cond:
            self._in_flight += 1

    def task_finished(self) -> None:
        """Release a fetch slot and wake the dispatcher."""
        with self._cond:
            self._in_flight -= 1
            self._cond.notify_all()

    def cancel(self) -> None:
        """Stop dispatching new fetches; in-flight ones still drain."""
        self.cancel_event.set()
        self.signal()

    def wait_for_work(self, max_in_flight: int) -> bool:
        """
        Block until a link can be dispatched or the run is drained.

        Returns True when the frontier has a link and a pool slot is free,
        False once the run is DONE.
        """
        with self._cond:
            while True:
                cancelled = self.cancel_event.is_set()
                pending_empty = self.frontier.is_empty()
                if self._in_flight == 0 and (pending_empty or cancelled):
                    self._state = CrawlState.DONE
                    self._cond.notify_all()
                    return False
                if not cancelled and not pending_empty and self._in_flight < max_in_flight:
                    self._state = CrawlState.RUNNING
                    return True
                if cancelled or pending_empty:
                    self._state = CrawlState.DRAINING
                self._cond.wait()


class CrawlJob:
    """State for one crawl run. Never reused across runs."""

    def __init__(self, seed_links: List[str], cancel_event: Optional[threading.Event] = None) -> None:
        self.seed_links = seed_links
        self.started_at = datetime.now(timezone.utc)
        self._started_monotonic = time.monotonic()
        self.frontier = Frontier()
        self.stats = StatsCollector()
        self.detector = CompletionDetector(self.frontier, cancel_event)
        self.frontier.on_claim = self.detector.signal
        self._errors_lock = threading.Lock()
        self.errors: List[BaseException] = []

    def record_error(self, error: BaseException) -> None:
        """Keep an unexpected task error to re-raise once the run drains."""
        with self._errors_lock:
            self.errors.append(error)

    def elapsed_seconds(self) -> float:
        """Seconds since the job was created."""
        return time.monotonic() - self._started_monotonic

    def snapshot(self) -> CrawlStats:
        """Current counters with elapsed time."""
        return self.stats.snapshot(elapsed_seconds=self.elapsed_seconds())


class Dispatcher:
    """Pulls links from the frontier and submits fetch tasks to the pool."""

    def __init__(self, job: CrawlJob, fetcher: Fetcher, pool: Executor, max_in_flight: int) -> None:
        self.job = job
        self.fetcher = fetcher
        self.pool = pool
        self.max_in_flight = max_in_flight

    def run(self) -> None:
        """Dispatch links until the job's detector reports DONE."""
        detector = self.job.detector
        try:
            while detector.wait_for_work(self.max_in_flight):
                link = self.job.frontier.dequeue()
                if link is None:
                    continue
                detector.task_started()
                try:
                    self.pool.submit(self._crawl, link)
                except BaseException:
                    detector.task_finished()
                    raise
        except BaseException:
            # Fetches already submitted still finish before the error surfaces
            detector.cancel()
            detector.wait_for_work(self.max_in_flight)
            raise

    def _crawl(self, link: str) -> None:
        job = self.job
        try:
            outcome = self.fetcher.fetch(link)
            job.stats.record(outcome)
            if isinstance(outcome, FetchSuccess):
                for child in outcome.links:
                    job.frontier.try_claim(child)
        except Exception as e:
            logger.exception("Unexpected error while crawling %s", link)
            job.record_error(e)
        finally:
            job.detector.task_finished()


class CrawlEngine:
    """
    Runs crawls: seeds in, final stats out.

    One thread pool of ``core_pool_size`` workers is shared by every run on
    the engine, so concurrent runs never exceed that many fetches in total.
    Extra submissions wait in the pool's unbounded queue and the pool never
    grows towards ``max_pool_size``. Each run() still gets its own CrawlJob,
    so runs never share frontier or counters.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        core_pool_size: int = 5,
        max_pool_size: int = 10,
    ) -> None:
        if core_pool_size < 1 or max_pool_size < core_pool_size:
            raise ValueError(
                f"Invalid pool sizes: core={core_pool_size} max={max_pool_size}"
            )
        self.fetcher = fetcher
        self.core_pool_size = core_pool_size
        self.max_pool_size = max_pool_size
        self._pool = ThreadPoolExecutor(
            max_workers=core_pool_size,
            thread_name_prefix="AsyncCrawlerThread",
        )

    @classmethod
    def from_config(cls, config: CrawlerConfig, session: Optional[requests.Session] = None) -> "CrawlEngine":
        """Build an engine whose fetcher uses the configured timeout, redirects and User-Agent."""
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = config.user_agent
        fetcher = Fetcher(
            session,
            timeout_s=config.request_timeout,
            follow_redirects=config.follow_redirects,
        )
        return cls(fetcher, core_pool_size=config.core_pool_size, max_pool_size=config.max_pool_size)

    def shutdown(self) -> None:
        """Stop the worker pool once queued fetches finish."""
        self._pool.shutdown(wait=True)

    def __enter__(self) -> "CrawlEngine":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    def run(
        self,
        seed_links: Iterable[str],
        cancel_event: Optional[threading.Event] = None,
    ) -> CrawlStats:
        """
        Crawl everything reachable from seed_links and return the final counters.

        Raises InvalidSeed if there are no seeds, seed_links is a bare string,
        or a seed is not a string. Per-link failures are counted, never raised.
        Setting cancel_event stops new fetches; in-flight ones drain.
        """
        if isinstance(seed_links, (str, bytes)):
            raise InvalidSeed("Seed links must be a list of URLs, not a single string")
        seeds = list(seed_links or [])
        if not seeds:
            raise InvalidSeed("No seed links to crawl")
        for seed in seeds:
            if not isinstance(seed, str):
                raise InvalidSeed(f"Seed link is not a string: {seed!r}")

        job = CrawlJob(seeds, cancel_event)
        unique = sum(1 for seed in seeds if job.frontier.try_claim(seed))
        logger.info(
            "Crawler started: %d seed links (%d unique), pool core=%d max=%d",
            len(seeds), unique, self.core_pool_size, self.max_pool_size,
        )

        Dispatcher(job, self.fetcher, self._pool, self.core_pool_size).run()

        stats = job.snapshot()
        if job.errors:
            raise job.errors[0]

        if job.detector.cancel_event.is_set():
            logger.info("Crawl cancelled after %d requests", stats.requests)
        logger.info("Finished crawling in %.2f seconds", stats.elapsed_seconds)
        log_summary(stats)
        return stats


def log_summary(stats: CrawlStats) -> None:
    """Log the run's counters at INFO."""
    logger.info("Summary")
    logger.info("Total requests: %d", stats.requests)
    logger.info("Success count : %d", stats.successes)
    logger.info("Failed count  : %d", stats.failures)
