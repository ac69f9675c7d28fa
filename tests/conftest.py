"""Shared pytest fixtures for ytcaptions tests."""

import json
from typing import Any
from unittest.mock import MagicMock

import pytest
from googleapiclient.errors import HttpError

from ytcaptions.errors import TransportError

VIDEO_ID = "dQw4w9WgXcQ"
API_KEY = "AIzaTestInnertubeKey"
WATCH_HTML = f'<html><script>ytcfg.set({{"INNERTUBE_API_KEY": "{API_KEY}"}});</script></html>'

TRANSCRIPT_XML = """<?xml version="1.0" encoding="utf-8" ?>
<transcript>
    <text start="0.0" dur="1.54">Hey, this is just a test</text>
    <text start="1.54" dur="4.16">this is &lt;i&gt;not&lt;/i&gt; the original transcript</text>
    <text start="5.7" dur="3.239">test &amp;amp; test, like this &quot;test&quot; he&#39;s testing</text>
</transcript>
"""


# --- HTTP Error Fixtures ---


def make_http_error(status: int, reason: str = "unknown") -> HttpError:
    """Create a mock HttpError with the given status and reason.

    Args:
        status: HTTP status code (e.g., 400, 403, 404, 429, 500)
        reason: Error reason string (e.g., "quotaExceeded", "rateLimitExceeded")

    Returns:
        HttpError with mocked response and content
    """
    resp = MagicMock()
    resp.status = status
    resp.reason = f"Error: {reason}"
    content = json.dumps({"error": {"errors": [{"reason": reason}]}}).encode()
    return HttpError(resp, content, uri="https://www.googleapis.com/youtube/v3/test")


@pytest.fixture
def quota_exceeded_error() -> HttpError:
    """Create a 403 quotaExceeded error."""
    return make_http_error(403, "quotaExceeded")


@pytest.fixture
def not_found_error() -> HttpError:
    """Create a 404 playlistNotFound error."""
    return make_http_error(404, "playlistNotFound")


# --- Player info payloads ---


def make_track(
    code: str,
    name: str | None = None,
    generated: bool = False,
    simple_text: bool = False,
) -> dict[str, Any]:
    """Build one captionTracks[] entry."""
    track: dict[str, Any] = {
        "baseUrl": f"https://www.youtube.com/api/timedtext?v={VIDEO_ID}&lang={code}&fmt=srv3",
        "languageCode": code,
    }
    if name is not None:
        track["name"] = {"simpleText": name} if simple_text else {"runs": [{"text": name}]}
    if generated:
        track["kind"] = "asr"
    return track


def make_player_info(
    tracks: list[dict[str, Any]] | None = None,
    translations: dict[str, str] | None = None,
    status: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a player-info payload with the given tracks and translation languages."""
    if tracks is None:
        tracks = [
            make_track("en", "English"),
            make_track("de", "Deutsch"),
            make_track("en", "English (auto-generated)", generated=True),
            make_track("fr", "Français (auto-generated)", generated=True),
        ]
    if translations is None:
        translations = {"af": "Afrikaans", "es": "Spanish"}
    return {
        "playabilityStatus": status or {"status": "OK"},
        "captions": {
            "playerCaptionsTracklistRenderer": {
                "captionTracks": tracks,
                "translationLanguages": [
                    {"languageCode": code, "languageName": {"runs": [{"text": name}]}}
                    for code, name in translations.items()
                ],
            }
        },
    }


@pytest.fixture
def player_info() -> dict[str, Any]:
    """Player info with manual en/de, generated en/fr and two translation languages."""
    return make_player_info()


@pytest.fixture
def player_info_json(player_info: dict[str, Any]) -> str:
    """player_info serialized as the player endpoint returns it."""
    return json.dumps(player_info)


# --- Fake transport ---


class FakeFetcher:
    """ContentFetcher that serves canned bodies and records requests.

    GET bodies are looked up by URL substring; POST always returns the
    player body. Values that are exceptions are raised instead.
    """

    def __init__(
        self,
        player: str | BaseException | dict[str, str | BaseException] = "",
        watch_html: str | BaseException = WATCH_HTML,
        timedtext: str | BaseException = TRANSCRIPT_XML,
    ) -> None:
        self.player = player
        self.watch_html = watch_html
        self.timedtext = timedtext
        self.gets: list[tuple[str, dict[str, str] | None]] = []
        self.posts: list[tuple[str, dict[str, Any]]] = []

    @staticmethod
    def _serve(value: str | BaseException) -> str:
        if isinstance(value, BaseException):
            raise value
        return value

    def get(self, url: str, headers: dict[str, str] | None = None) -> str:
        self.gets.append((url, headers))
        if "/watch?v=" in url:
            return self._serve(self.watch_html)
        return self._serve(self.timedtext)

    def post(self, url: str, body: dict[str, Any]) -> str:
        self.posts.append((url, body))
        if isinstance(self.player, dict):
            return self._serve(self.player[body["videoId"]])
        return self._serve(self.player)


@pytest.fixture
def fake_fetcher(player_info_json: str) -> FakeFetcher:
    """FakeFetcher serving the default player_info and transcript XML."""
    return FakeFetcher(player=player_info_json)


@pytest.fixture
def transport_error() -> TransportError:
    """A 503 TransportError as RequestsFetcher raises it."""
    return TransportError(None, "Request failed with HTTP status 503.", status_code=503)
