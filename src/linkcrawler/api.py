"""
HTTP control surface: start a crawl, poll its result.
"""
from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Optional

from flask import Flask, jsonify, request

from linkcrawler.errors import CrawlerError, InvalidSeed
from linkcrawler.service import CrawlerService
from linkcrawler.stats import CrawlStats

logger = logging.getLogger(__name__)

# Finished runs kept for polling; older ones are dropped first
DEFAULT_MAX_FINISHED_RUNS = 100


@dataclass(slots=True)
class CrawlRun:
    run_id: str
    start_endpoint: str
    status: str = "running"
    stats: Optional[CrawlStats] = None
    error: Optional[str] = None
    done: threading.Event = field(default_factory=threading.Event)

    def to_dict(self) -> Dict[str, object]:
        """JSON body for GET /api/crawler/runs/<id>."""
        return {
            "runId": self.run_id,
            "startEndpoint": self.start_endpoint,
            "status": self.status,
            "stats": self.stats.to_dict() if self.stats else None,
            "error": self.error,
        }


class RunRegistry:
    """
    Background crawl runs started through the API, keyed by run id.

    Running crawls are always kept. Finished ones are evicted oldest first
    once more than ``max_finished_runs`` have accumulated. All runs share
    the service's engine, so its pool bounds outbound fetches across them.
    """

    def __init__(self, service: CrawlerService, max_finished_runs: int = DEFAULT_MAX_FINISHED_RUNS) -> None:
        self.service = service
        self.max_finished_runs = max_finished_runs
        self._lock = threading.Lock()
        self._runs: "OrderedDict[str, CrawlRun]" = OrderedDict()

    def start(self, start_endpoint: str) -> CrawlRun:
        """Register a run and crawl it on a background thread."""
        run = CrawlRun(run_id=uuid.uuid4().hex, start_endpoint=start_endpoint)
        with self._lock:
            self._runs[run.run_id] = run
        thread = threading.Thread(
            target=self._execute,
            args=(run,),
            name=f"crawl-run-{run.run_id[:8]}",
            daemon=True,
        )
        thread.start()
        return run

    def get(self, run_id: str) -> Optional[CrawlRun]:
        """The run with this id, or None if unknown or evicted."""
        with self._lock:
            return self._runs.get(run_id)

    def describe(self, run_id: str) -> Optional[Dict[str, object]]:
        """Consistent to_dict() of a run, or None if unknown or evicted."""
        with self._lock:
            run = self._runs.get(run_id)
            return run.to_dict() if run else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._runs)

    def _evict_finished(self) -> None:
        # Caller holds self._lock
        finished = [run_id for run_id, run in self._runs.items() if run.status != "running"]
        for run_id in finished[: max(0, len(finished) - self.max_finished_runs)]:
            del self._runs[run_id]

    def _execute(self, run: CrawlRun) -> None:
        try:
            stats = self.service.crawl_endpoint(run.start_endpoint)
        except CrawlerError as e:
            logger.error("Crawl %s failed: %s", run.run_id, e)
            with self._lock:
                run.status = "failed"
                run.error = str(e)
                self._evict_finished()
        except Exception as e:
            logger.exception("Crawl %s crashed", run.run_id)
            with self._lock:
                run.status = "failed"
                run.error = f"{type(e).__name__}: {e}"
                self._evict_finished()
        else:
            with self._lock:
                run.status = "completed"
                run.stats = stats
                self._evict_finished()
        finally:
            run.done.set()


def create_app(service: CrawlerService, max_finished_runs: int = DEFAULT_MAX_FINISHED_RUNS) -> Flask:
    """Build the Flask app around one CrawlerService."""
    app = Flask(__name__)
    registry = RunRegistry(service, max_finished_runs=max_finished_runs)
    app.extensions["crawl_runs"] = registry

    @app.errorhandler(CrawlerError)
    def handle_crawler_error(error: CrawlerError):
        return jsonify({"error": str(error)}), 400

    @app.route("/api/crawler/start", methods=["POST"])
    def start_crawler():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            payload = {}
        start_endpoint = payload.get("startEndpoint")
        if not isinstance(start_endpoint, str) or not start_endpoint.strip():
            raise InvalidSeed("Starting endpoint must not be empty")
        try:
            endpoint = service.validate_endpoint(start_endpoint)
        except InvalidSeed as e:
            raise InvalidSeed(f"Invalid starting endpoint '{start_endpoint}'") from e

        run = registry.start(endpoint)
        logger.info("Accepted crawl %s for %s", run.run_id, endpoint)
        return jsonify({"status": "OK", "runId": run.run_id}), 202

    @app.route("/api/crawler/runs/<run_id>", methods=["GET"])
    def get_run(run_id: str):
        described = registry.describe(run_id)
        if described is None:
            return jsonify({"error": f"Unknown run '{run_id}'"}), 404
        return jsonify(described)

    return app
