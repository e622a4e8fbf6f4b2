import pytest

from conftest import FakeSession, page
from linkcrawler.api import create_app
from linkcrawler.config import CrawlerConfig
from linkcrawler.service import CrawlerService

ENDPOINT = "http://localhost:8089/start-endpoint"


@pytest.fixture
def session() -> FakeSession:
    return FakeSession({
        ENDPOINT: (200, '{"links": ["https://x/links/1", "https://x/status/502"]}', "application/json"),
        "https://x/links/1": (200, page("/links/1/0")),
        "https://x/links/1/0": (200, page()),
        "https://x/status/502": (502, ""),
        "http://localhost:8089/empty": (200, '{"links": []}', "application/json"),
    })


@pytest.fixture
def service(session):
    service = CrawlerService(CrawlerConfig(), session=session)
    yield service
    service.close()


@pytest.fixture
def app(service):
    app = create_app(service)
    app.config["TESTING"] = True
    return app


def _wait(app, run_id: str) -> None:
    run = app.extensions["crawl_runs"].get(run_id)
    assert run.done.wait(timeout=5)


def test_start_accepts_and_reports_stats(app) -> None:
    client = app.test_client()

    resp = client.post("/api/crawler/start", json={"startEndpoint": ENDPOINT})

    assert resp.status_code == 202
    body = resp.get_json()
    assert body["status"] == "OK"
    run_id = body["runId"]

    _wait(app, run_id)
    result = client.get(f"/api/crawler/runs/{run_id}").get_json()
    assert result["status"] == "completed"
    assert result["error"] is None
    stats = result["stats"]
    assert (stats["requests"], stats["successes"], stats["failures"]) == (3, 2, 1)


@pytest.mark.parametrize("payload", [{}, {"startEndpoint": ""}, {"startEndpoint": None}])
def test_start_requires_endpoint(app, payload) -> None:
    resp = app.test_client().post("/api/crawler/start", json=payload)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Starting endpoint must not be empty"


def test_start_rejects_malformed_endpoint(app, session) -> None:
    resp = app.test_client().post("/api/crawler/start", json={"startEndpoint": "notavalidendpoint"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid starting endpoint 'notavalidendpoint'"
    assert session.calls == []


def test_failed_run_is_reported(app) -> None:
    client = app.test_client()
    run_id = client.post("/api/crawler/start", json={"startEndpoint": "http://localhost:8089/empty"}).get_json()["runId"]

    _wait(app, run_id)
    result = client.get(f"/api/crawler/runs/{run_id}").get_json()
    assert result["status"] == "failed"
    assert result["stats"] is None
    assert result["error"]


def test_unknown_run(app) -> None:
    resp = app.test_client().get("/api/crawler/runs/nope")
    assert resp.status_code == 404


def test_finished_runs_are_evicted_oldest_first(service) -> None:
    app = create_app(service, max_finished_runs=2)
    client = app.test_client()

    run_ids = []
    for _ in range(3):
        run_id = client.post("/api/crawler/start", json={"startEndpoint": ENDPOINT}).get_json()["runId"]
        _wait(app, run_id)
        run_ids.append(run_id)

    assert client.get(f"/api/crawler/runs/{run_ids[0]}").status_code == 404
    for run_id in run_ids[1:]:
        assert client.get(f"/api/crawler/runs/{run_id}").get_json()["status"] == "completed"
    assert len(app.extensions["crawl_runs"]) == 2
