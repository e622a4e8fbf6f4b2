import threading
import time
from typing import Callable, Dict, List, Optional, Union

import pytest
from requests.structures import CaseInsensitiveDict

from linkcrawler.engine import CrawlEngine
from linkcrawler.fetcher import Fetcher


class FakeResponse:
    def __init__(self, url: str, status_code: int = 200, text: str = "", content_type: Optional[str] = "text/html; charset=utf-8") -> None:
        self.url = url
        self.status_code = status_code
        self.text = text
        self.headers = CaseInsensitiveDict()
        if content_type:
            self.headers["Content-Type"] = content_type


Route = Union[tuple, BaseException, Callable[[str], FakeResponse]]


class FakeSession:
    """In-memory stand-in for requests.Session; unknown URLs answer 404."""

    def __init__(self, routes: Optional[Dict[str, Route]] = None, delay: float = 0.0) -> None:
        self.routes: Dict[str, Route] = dict(routes or {})
        self.delay = delay
        self.headers: Dict[str, str] = {}
        self.calls: List[str] = []
        self.kwargs: List[dict] = []
        self.max_active = 0
        self._active = 0
        self._lock = threading.Lock()

    def get(self, url: str, **kwargs) -> FakeResponse:
        with self._lock:
            self.calls.append(url)
            self.kwargs.append(kwargs)
            self._active += 1
            self.max_active = max(self.max_active, self._active)
        try:
            if self.delay:
                time.sleep(self.delay)
            route = self.routes.get(url)
            if route is None:
                return FakeResponse(url, 404, "Not Found", "text/plain")
            if isinstance(route, BaseException):
                raise route
            if callable(route):
                return route(url)
            status, body, *rest = route
            content_type = rest[0] if rest else "text/html; charset=utf-8"
            return FakeResponse(url, status, body, content_type)
        finally:
            with self._lock:
                self._active -= 1

    def call_count(self, url: str) -> int:
        with self._lock:
            return self.calls.count(url)


def page(*hrefs: str) -> str:
    anchors = "".join(f'<a href="{href}">link</a>' for href in hrefs)
    return f"<html><head><title>t</title></head><body>{anchors}</body></html>"


@pytest.fixture
def make_engine():
    engines = []

    def _make(session: FakeSession, core_pool_size: int = 5, max_pool_size: int = 10) -> CrawlEngine:
        engine = CrawlEngine(Fetcher(session), core_pool_size=core_pool_size, max_pool_size=max_pool_size)
        engines.append(engine)
        return engine

    yield _make
    for engine in engines:
        engine.shutdown()
