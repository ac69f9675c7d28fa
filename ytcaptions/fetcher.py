"""HTTP access to YouTube.

All network traffic goes through a ContentFetcher so callers (and tests)
can substitute their own transport.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Protocol

import requests

from ytcaptions.errors import TransportError
from ytcaptions.logging import logger

DEFAULT_TIMEOUT = 30.0
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


class ContentFetcher(Protocol):
    """Anything that can GET and POST text bodies."""

    def get(self, url: str, headers: dict[str, str] | None = None) -> str:
        """GET url and return the response body."""
        ...

    def post(self, url: str, body: dict[str, Any]) -> str:
        """POST body as JSON to url and return the response body."""
        ...


class Throttler:
    """Enforces minimum delay between HTTP requests.

    Shared by all worker threads of a bulk operation.

    Usage:
        throttler = Throttler(delay_ms=200)
        throttler.wait()  # Call before each request
    """

    def __init__(self, delay_ms: int = 0) -> None:
        self._delay_ms = max(0, delay_ms)
        self._last_call: float = 0.0
        self._lock = threading.Lock()

    @property
    def delay_ms(self) -> int:
        """Current delay in milliseconds."""
        return self._delay_ms

    @delay_ms.setter
    def delay_ms(self, value: int) -> None:
        self._delay_ms = max(0, value)

    def wait(self) -> None:
        """Wait if needed to maintain minimum delay between calls."""
        if self._delay_ms <= 0:
            return

        with self._lock:
            now = time.monotonic()
            elapsed_ms = (now - self._last_call) * 1000
            if elapsed_ms < self._delay_ms:
                time.sleep((self._delay_ms - elapsed_ms) / 1000)
            self._last_call = time.monotonic()


def _raise_for_status(response: requests.Response, url: str) -> None:
    if response.status_code == 429:
        raise TransportError(
            None,
            "YouTube responded with too many requests (HTTP 429). "
            "Your IP may be rate limited or blocked.",
            status_code=429,
        )
    try:
        response.raise_for_status()
    except requests.HTTPError as e:
        raise TransportError(
            None,
            f"Request to {url} failed with HTTP status {response.status_code}.",
            e,
            status_code=response.status_code,
        ) from e


class RequestsFetcher:
    """ContentFetcher backed by a requests.Session.

    Args:
        timeout: Socket timeout in seconds
        proxy_url: Optional proxy applied to both http and https
        throttle_ms: Minimum delay between requests (0 to disable)
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        proxy_url: str | None = None,
        throttle_ms: int = 0,
        session: requests.Session | None = None,
    ) -> None:
        self.timeout = timeout
        self.throttler = Throttler(throttle_ms)
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        if proxy_url:
            self.session.proxies.update({"http": proxy_url, "https": proxy_url})
            logger.debug("Using proxy for YouTube requests")

    def _request(self, method: str, url: str, **kwargs: Any) -> str:
        self.throttler.wait()
        logger.debug("{} {}", method, url)
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise TransportError(None, f"Request to {url} failed: {e}", e) from e
        _raise_for_status(response, url)
        return response.text

    def get(self, url: str, headers: dict[str, str] | None = None) -> str:
        return self._request("GET", url, headers=headers)

    def post(self, url: str, body: dict[str, Any]) -> str:
        return self._request("POST", url, json=body)

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()
