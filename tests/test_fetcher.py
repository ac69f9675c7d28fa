"""Tests for ytcaptions.fetcher."""

import time
from unittest.mock import MagicMock, patch

import pytest
import requests

from ytcaptions.errors import TransportError
from ytcaptions.fetcher import RequestsFetcher, Throttler


def make_response(status: int, text: str = "") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = text.encode()
    response.encoding = "utf-8"
    response.url = "https://www.youtube.com/test"
    return response


@pytest.fixture
def session() -> MagicMock:
    """Mock requests.Session with real headers/proxies dicts."""
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    session.proxies = {}
    return session


class TestThrottler:
    """Tests for Throttler class."""

    def test_zero_delay_never_sleeps(self) -> None:
        """Zero delay returns immediately."""
        throttler = Throttler(delay_ms=0)
        with patch("ytcaptions.fetcher.time.sleep") as sleep:
            throttler.wait()
            throttler.wait()
        sleep.assert_not_called()

    def test_enforces_delay(self) -> None:
        """Second call waits for the remaining delay."""
        throttler = Throttler(delay_ms=50)
        throttler.wait()
        start = time.monotonic()
        throttler.wait()
        assert (time.monotonic() - start) >= 0.04

    def test_negative_delay_clamped(self) -> None:
        """Negative delays are treated as zero."""
        throttler = Throttler(delay_ms=-5)
        assert throttler.delay_ms == 0
        throttler.delay_ms = -1
        assert throttler.delay_ms == 0


class TestRequestsFetcher:
    """Tests for RequestsFetcher."""

    def test_get_returns_text(self, session: MagicMock) -> None:
        """GET returns the body and passes headers and timeout."""
        session.request.return_value = make_response(200, "<html/>")
        fetcher = RequestsFetcher(timeout=5.0, session=session)

        body = fetcher.get("https://www.youtube.com/watch?v=x", headers={"Accept-Language": "en-US"})

        assert body == "<html/>"
        session.request.assert_called_once_with(
            "GET",
            "https://www.youtube.com/watch?v=x",
            timeout=5.0,
            headers={"Accept-Language": "en-US"},
        )

    def test_post_sends_json(self, session: MagicMock) -> None:
        """POST sends the body as JSON."""
        session.request.return_value = make_response(200, "{}")
        fetcher = RequestsFetcher(session=session)

        fetcher.post("https://www.youtube.com/youtubei/v1/player", {"videoId": "x"})

        assert session.request.call_args.kwargs["json"] == {"videoId": "x"}
        assert session.request.call_args.args[0] == "POST"

    def test_429_is_too_many_requests(self, session: MagicMock) -> None:
        """HTTP 429 is reported as too many requests."""
        session.request.return_value = make_response(429)
        fetcher = RequestsFetcher(session=session)

        with pytest.raises(TransportError, match="too many requests") as exc_info:
            fetcher.get("https://www.youtube.com/watch?v=x")

        assert exc_info.value.status_code == 429

    def test_http_error_status(self, session: MagicMock) -> None:
        """Non-2xx responses raise TransportError with the status code."""
        session.request.return_value = make_response(404)
        fetcher = RequestsFetcher(session=session)

        with pytest.raises(TransportError) as exc_info:
            fetcher.get("https://www.youtube.com/api/timedtext")

        assert exc_info.value.status_code == 404
        assert exc_info.value.video_id is None
        assert isinstance(exc_info.value.cause, requests.HTTPError)

    def test_connection_error(self, session: MagicMock) -> None:
        """I/O failures raise TransportError."""
        session.request.side_effect = requests.ConnectionError("refused")
        fetcher = RequestsFetcher(session=session)

        with pytest.raises(TransportError, match="refused"):
            fetcher.get("https://www.youtube.com/")

    def test_proxy_configured(self, session: MagicMock) -> None:
        """Proxy URL applies to both schemes."""
        RequestsFetcher(proxy_url="http://user:pw@proxy:80", session=session)

        assert session.proxies == {"http": "http://user:pw@proxy:80", "https": "http://user:pw@proxy:80"}

    def test_sets_user_agent(self, session: MagicMock) -> None:
        """A browser user agent is set unless the session has one."""
        RequestsFetcher(session=session)
        assert "Mozilla" in session.headers["User-Agent"]

    def test_throttles_each_request(self, session: MagicMock) -> None:
        """Throttler.wait runs before every request."""
        session.request.return_value = make_response(200, "ok")
        fetcher = RequestsFetcher(session=session, throttle_ms=10)

        with patch.object(fetcher.throttler, "wait") as wait:
            fetcher.get("https://a")
            fetcher.post("https://b", {})

        assert wait.call_count == 2
