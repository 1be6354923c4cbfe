"""In-memory stand-ins for the HTTP session and the clock used in tests."""

from __future__ import annotations

from typing import Dict, List, Optional, Union

import requests
from requests.structures import CaseInsensitiveDict


class FakeResponse:
    def __init__(
        self, url: str, text: str = "", status_code: int = 200, content_type: str = "text/html; charset=utf-8"
    ) -> None:
        self.url = url
        self.text = text
        self.status_code = status_code
        self.headers = CaseInsensitiveDict({"Content-Type": content_type})

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}", response=self)


Route = Union[str, int, Exception, FakeResponse]


class FakeSession:
    """
    Serves canned responses keyed by exact URL.

    A route may be HTML text (200), a bare status code, an exception to raise,
    or a prepared FakeResponse. Unknown robots.txt URLs answer 404; any other
    unknown URL raises ConnectionError.
    """

    def __init__(self, routes: Optional[Dict[str, Route]] = None) -> None:
        self.routes: Dict[str, Route] = dict(routes or {})
        self.calls: List[str] = []
        self.timeouts: List[Optional[float]] = []
        self.headers: Dict[str, str] = {}

    def get(self, url: str, timeout: Optional[float] = None, **_kwargs) -> FakeResponse:
        self.calls.append(url)
        self.timeouts.append(timeout)
        route = self.routes.get(url)
        if route is None:
            if url.endswith("/robots.txt"):
                return FakeResponse(url, "Not Found", 404)
            raise requests.ConnectionError(f"no route to {url}")
        if isinstance(route, Exception):
            raise route
        if isinstance(route, FakeResponse):
            return route
        if isinstance(route, int):
            return FakeResponse(url, "", route)
        return FakeResponse(url, route)

    def count(self, url: str) -> int:
        return self.calls.count(url)


class FakeClock:
    """Monotonic clock whose sleep() advances time instantly."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds
