"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from typing import List, Optional

from linkcrawler.config import CrawlerConfig
from linkcrawler.errors import InvalidSeed
from linkcrawler.service import CrawlerService
from linkcrawler.stats import CrawlStats


class LogFormatter(logging.Formatter):
    """[ Tue Jan 06 05:32:41 AM 2026 ] : INFO : linkcrawler.engine : Message"""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%a %b %d %I:%M:%S %p %Y")
        line = f"[ {timestamp} ] : {record.levelname} : {record.name} : {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr; DEBUG when verbose."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(LogFormatter())
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def print_summary(stats: CrawlStats) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Total requests:    {stats.requests}\n")
    sys.stderr.write(f"Success count:     {stats.successes}\n")
    sys.stderr.write(f"Failed count:      {stats.failures}\n")
    sys.stderr.write(f"Elapsed seconds:   {stats.elapsed_seconds:.2f}\n")

    sys.stderr.write("\n")


def build_parser() -> argparse.ArgumentParser:
    """Command-line options; every pool or HTTP flag defaults to the environment."""
    parser = argparse.ArgumentParser(
        description=(
            "Fetch a JSON document of seed links from a start endpoint and crawl "
            "every link reachable from them, reporting request counts."
        )
    )
    parser.add_argument(
        "start_endpoint",
        nargs="?",
        help="URL returning {\"links\": [...]} (default: $CRAWLER_START_ENDPOINT)",
    )
    parser.add_argument("--core-pool-size", type=int, help="Concurrent fetches, shared by all crawls (default: 5)")
    parser.add_argument("--max-pool-size", type=int, help="Pool upper bound, must be >= core; not reached since queued fetches wait (default: 10)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds (default: 10)")
    parser.add_argument("--user-agent", help="User-Agent header")
    parser.add_argument("--follow-redirects", action="store_true", default=None, help="Follow 3xx responses")
    parser.add_argument("--json", action="store_true", help="Print final stats as JSON to stdout")
    parser.add_argument("--serve", action="store_true", help="Run the HTTP control surface instead of a single crawl")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address for --serve (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8080, help="Port for --serve (default: 8080)")
    parser.add_argument("--verbose", action="store_true", help="Log every fetch")
    return parser


def config_from_args(args: argparse.Namespace) -> CrawlerConfig:
    """Environment first, command-line flags on top."""
    config = CrawlerConfig.from_env()
    if args.start_endpoint is not None:
        config.start_endpoint = args.start_endpoint
    if args.core_pool_size is not None:
        config.core_pool_size = args.core_pool_size
    if args.max_pool_size is not None:
        config.max_pool_size = args.max_pool_size
    if args.timeout is not None:
        config.request_timeout = args.timeout
    if args.user_agent is not None:
        config.user_agent = args.user_agent
    if args.follow_redirects is not None:
        config.follow_redirects = args.follow_redirects
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = config_from_args(args).validate()
    except ValueError as e:
        parser.error(str(e))

    service = CrawlerService(config)

    if args.serve:
        from linkcrawler.api import create_app

        try:
            create_app(service).run(host=args.host, port=args.port, threaded=True)
        finally:
            service.close()
        return 0

    try:
        stats = service.crawl_endpoint()
    except InvalidSeed as e:
        logging.getLogger(__name__).error("%s", e)
        return 2
    finally:
        service.close()

    print_summary(stats)
    if args.json:
        print(json.dumps(stats.to_dict(), ensure_ascii=False))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
