import threading

from linkcrawler.fetcher import FetchFailure, FetchSuccess
from linkcrawler.stats import CrawlStats, StatsCollector


def test_record_counts_each_outcome_once() -> None:
    stats = StatsCollector()
    stats.record(FetchSuccess(url="https://x/a", status_code=200))
    stats.record(FetchFailure(url="https://x/b", reason="HTTP 502", status_code=502))
    stats.record(FetchSuccess(url="https://x/c", status_code=201))

    assert (stats.requests, stats.successes, stats.failures) == (3, 2, 1)


def test_snapshot_is_detached() -> None:
    stats = StatsCollector()
    stats.record(FetchSuccess(url="https://x/a", status_code=200))
    snapshot = stats.snapshot(elapsed_seconds=1.5)
    stats.record(FetchSuccess(url="https://x/b", status_code=200))

    assert snapshot == CrawlStats(requests=1, successes=1, failures=0, elapsed_seconds=1.5)
    assert snapshot.to_dict() == {"requests": 1, "successes": 1, "failures": 0, "elapsed_seconds": 1.5}


def test_concurrent_records_keep_totals_consistent() -> None:
    stats = StatsCollector()

    def work(index: int) -> None:
        for i in range(500):
            if (index + i) % 3:
                stats.record(FetchSuccess(url="u", status_code=200))
            else:
                stats.record(FetchFailure(url="u", reason="HTTP 500", status_code=500))

    threads = [threading.Thread(target=work, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    snapshot = stats.snapshot()
    assert snapshot.requests == 4000
    assert snapshot.requests == snapshot.successes + snapshot.failures
