"""HTTP client for the safety data sheet search endpoint."""

import logging
import time

import requests

from .config import DELAYS, SEARCH_URL, TIMEOUTS
from .errors import TransportError

logger = logging.getLogger(__name__)


class SearchClient:
    """Issues one GET per key and returns the raw response body."""

    def __init__(
        self,
        base_url: str = SEARCH_URL,
        timeout: float = TIMEOUTS["search"],
        delay: float = DELAYS["search"],
        session: requests.Session | None = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.delay = delay
        self.session = session or requests.Session()
        self._last_request = 0.0

    def __enter__(self) -> "SearchClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the HTTP session."""
        if self.session:
            self.session.close()
            self.session = None

    def url_for(self, key: str) -> str:
        return f"{self.base_url}?q={key}"

    def _throttle(self):
        if self.delay <= 0:
            return
        wait = self._last_request + self.delay - time.monotonic()
        if wait > 0:
            time.sleep(wait)

    def fetch(self, key: str) -> bytes:
        """Search for key and return the raw body bytes whatever the status code."""
        url = self.url_for(key)
        self._throttle()
        logger.debug("Searching %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
            body = response.content
        except requests.RequestException as e:
            raise TransportError(f"Search for {key!r} failed: {e}", url) from e
        finally:
            self._last_request = time.monotonic()

        if not response.ok:
            logger.debug("Search for %r returned %s; caching body anyway", key, response.status_code)
        return body
