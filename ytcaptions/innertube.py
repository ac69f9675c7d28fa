"""Watch page, Innertube player endpoint and timed-text requests.

Player info is obtained in two steps: the watch page HTML carries the
Innertube API key, which is then used to POST to the player endpoint.
"""

from __future__ import annotations

import re
from typing import Any

from ytcaptions.errors import (
    WATCH_URL,
    AgeRestrictedError,
    BotDetectedError,
    ParseError,
    TransportError,
)
from ytcaptions.fetcher import ContentFetcher
from ytcaptions.logging import logger

INNERTUBE_API_URL = "https://www.youtube.com/youtubei/v1/player?key={api_key}"
INNERTUBE_CLIENT = {"clientName": "ANDROID", "clientVersion": "20.10.38"}
LANGUAGE_HEADERS = {"Accept-Language": "en-US"}

_API_KEY_PATTERN = re.compile(r'"INNERTUBE_API_KEY"\s*:\s*"([^"]+)"')
_CONSENT_MARKER = 'action="https://consent.youtube.com/s"'
_RECAPTCHA_MARKER = 'class="g-recaptcha"'


def build_player_request(video_id: str) -> dict[str, Any]:
    """Innertube player request body for video_id."""
    return {"context": {"client": dict(INNERTUBE_CLIENT)}, "videoId": video_id}


def _get(fetcher: ContentFetcher, video_id: str, url: str) -> str:
    try:
        return fetcher.get(url, headers=dict(LANGUAGE_HEADERS))
    except TransportError as e:
        if e.video_id:
            raise
        raise e.for_video(video_id) from e.cause


def fetch_watch_page(fetcher: ContentFetcher, video_id: str) -> str:
    """Fetch the watch page HTML, rejecting consent and captcha pages.

    Raises:
        AgeRestrictedError: YouTube served its consent form
        BotDetectedError: YouTube served a reCAPTCHA challenge
    """
    html = _get(fetcher, video_id, WATCH_URL.format(video_id=video_id))
    if _CONSENT_MARKER in html:
        raise AgeRestrictedError(video_id, "Video is age restricted")
    if _RECAPTCHA_MARKER in html:
        raise BotDetectedError(
            video_id,
            "YouTube is receiving too many requests from this IP and now requires "
            "solving a captcha to continue.",
        )
    return html


def extract_innertube_api_key(video_id: str, html: str) -> str:
    """Pull the INNERTUBE_API_KEY value out of watch page HTML.

    Raises:
        ParseError: If the key is not present
    """
    match = _API_KEY_PATTERN.search(html)
    if match is None:
        raise ParseError(video_id, "Could not find the Innertube API key in the watch page.")
    return match.group(1)


def fetch_player_info(fetcher: ContentFetcher, video_id: str) -> str:
    """Return the raw player-info JSON for video_id.

    Raises:
        ParseError: Missing API key or empty player response
        TransportError: Network or HTTP failure
    """
    html = fetch_watch_page(fetcher, video_id)
    api_key = extract_innertube_api_key(video_id, html)
    logger.debug("Requesting player info for {}", video_id)
    try:
        raw_json = fetcher.post(
            INNERTUBE_API_URL.format(api_key=api_key), build_player_request(video_id)
        )
    except TransportError as e:
        if e.video_id:
            raise
        raise e.for_video(video_id) from e.cause
    if not raw_json or not raw_json.strip():
        raise ParseError(video_id, "Could not get innertube data from YouTube.")
    return raw_json


def fetch_timedtext(fetcher: ContentFetcher, video_id: str, url: str) -> str:
    """Fetch raw timed-text XML for a caption track URL.

    Raises:
        ParseError: If the body is blank
        TransportError: Network or HTTP failure
    """
    raw_xml = _get(fetcher, video_id, url)
    if not raw_xml or not raw_xml.strip():
        raise ParseError(video_id, "YouTube returned an empty transcript XML.")
    return raw_xml
