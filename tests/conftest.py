from __future__ import annotations

import threading
from dataclasses import dataclass, field

import pytest
import requests

from sds_harvester.errors import TransportError

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\n%%EOF\n"


@dataclass
class FakeResponse:
    status_code: int = 200
    content: bytes = b""
    headers: dict = field(default_factory=dict)
    reason: str = "OK"

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class FakeSession:
    """Stands in for requests.Session; answers from a url -> response table."""

    def __init__(self) -> None:
        self.routes: dict[str, FakeResponse | Exception] = {}
        self.calls: list[dict] = []
        self.headers: dict[str, str] = {}
        self.closed = False
        self._lock = threading.Lock()

    def add(self, url, body=b"", status=200, content_type="application/pdf", reason="OK"):
        headers = {"Content-Type": content_type} if content_type else {}
        self.routes[url] = FakeResponse(status, body, headers, reason)

    def add_pdf(self, url, body=PDF_BYTES):
        self.add(url, body)

    def fail(self, url, exc=None):
        self.routes[url] = exc or requests.ConnectionError("connection refused")

    def get(self, url, timeout=None):
        with self._lock:
            self.calls.append({"url": url, "timeout": timeout})
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(404, b"not found", {"Content-Type": "text/html"}, "Not Found")
        if isinstance(route, Exception):
            raise route
        return route

    def close(self) -> None:
        self.closed = True

    @property
    def urls(self) -> list[str]:
        return [call["url"] for call in self.calls]


class FakeSearchClient:
    """SearchClient replacement keyed by search key."""

    def __init__(self, bodies=None, failing=()):
        self.bodies: dict[str, str] = dict(bodies or {})
        self.failing = set(failing)
        self.fetched: list[str] = []
        self.closed = False

    def fetch(self, key: str) -> bytes:
        self.fetched.append(key)
        if key in self.failing:
            raise TransportError(f"Search for {key!r} failed: timed out")
        return self.bodies.get(key, "").encode("utf-8")

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def search_client() -> FakeSearchClient:
    return FakeSearchClient()
