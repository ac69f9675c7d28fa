"""Player-info (Innertube) payload parsing.

The player endpoint returns JSON shaped roughly like::

    {
      "playabilityStatus": {"status": "OK", "reason": "...", "errorScreen": {...}},
      "captions": {
        "playerCaptionsTracklistRenderer": {
          "captionTracks": [
            {"baseUrl": "...", "name": {"runs": [{"text": "English"}]},
             "languageCode": "en", "kind": "asr"}
          ],
          "translationLanguages": [
            {"languageCode": "de", "languageName": {"runs": [{"text": "German"}]}}
          ]
        }
      }
    }
"""

from __future__ import annotations

import json
from enum import Enum, auto
from typing import Any

from ytcaptions.config import PlayabilityPatterns
from ytcaptions.errors import (
    AgeRestrictedError,
    BotDetectedError,
    CaptionsUnavailableError,
    ParseError,
    VideoUnavailableError,
    VideoUnplayableError,
)
from ytcaptions.logging import logger
from ytcaptions.tracks import CaptionTrack, ContentSource, TrackCollection

STATUS_OK = "OK"
STATUS_LOGIN_REQUIRED = "LOGIN_REQUIRED"
STATUS_ERROR = "ERROR"

_DEFAULT_PATTERNS = PlayabilityPatterns()


class PlayabilityFailure(Enum):
    """Why a video cannot be played."""

    BOT_DETECTED = auto()  # LOGIN_REQUIRED, "confirm you're not a bot"
    AGE_RESTRICTED = auto()  # LOGIN_REQUIRED, age gate
    VIDEO_UNAVAILABLE = auto()  # ERROR, removed/private
    UNPLAYABLE = auto()  # anything else that is not OK


def _matches(reason: str, patterns: list[str]) -> bool:
    lowered = reason.lower()
    return any(p.lower() in lowered for p in patterns)


def classify_playability(
    status: str | None, reason: str | None, patterns: PlayabilityPatterns | None = None
) -> PlayabilityFailure | None:
    """Classify a playability status/reason pair.

    This is the only place that interprets YouTube's reason wording.

    Returns:
        None when the video is playable, otherwise the failure kind.
    """
    if status is None or not status.strip() or status == STATUS_OK:
        return None

    patterns = patterns or _DEFAULT_PATTERNS
    reason = reason or ""
    if status == STATUS_LOGIN_REQUIRED:
        if _matches(reason, patterns.bot_detected):
            return PlayabilityFailure.BOT_DETECTED
        if _matches(reason, patterns.age_restricted):
            return PlayabilityFailure.AGE_RESTRICTED
    if status == STATUS_ERROR and _matches(reason, patterns.video_unavailable):
        return PlayabilityFailure.VIDEO_UNAVAILABLE
    return PlayabilityFailure.UNPLAYABLE


def _child(node: Any, key: str) -> Any:
    return node.get(key) if isinstance(node, dict) else None


def _subreason_texts(status_json: dict[str, Any]) -> list[str]:
    renderer = _child(status_json.get("errorScreen"), "playerErrorMessageRenderer")
    runs = _child(_child(renderer, "subreason"), "runs")
    if not isinstance(runs, list):
        return []
    texts = [run.get("text", "") for run in runs if isinstance(run, dict)]
    return [t for t in texts if isinstance(t, str) and t.strip()]


def check_playability(
    video_id: str, status_json: dict[str, Any], patterns: PlayabilityPatterns | None = None
) -> None:
    """Raise the matching error if playabilityStatus reports a problem."""
    status = status_json.get("status")
    reason = status_json.get("reason")
    failure = classify_playability(
        str(status) if status is not None else None,
        str(reason) if reason is not None else None,
        patterns,
    )
    if failure is None:
        return

    logger.debug(
        "Playability for {}: status={} reason={!r} -> {}", video_id, status, reason, failure.name
    )
    if failure is PlayabilityFailure.BOT_DETECTED:
        raise BotDetectedError(
            video_id, "YouTube is blocking requests from your IP because it thinks you are a bot"
        )
    if failure is PlayabilityFailure.AGE_RESTRICTED:
        raise AgeRestrictedError(video_id, "Video is age restricted")
    if failure is PlayabilityFailure.VIDEO_UNAVAILABLE:
        raise VideoUnavailableError(video_id, "This video is not available")

    details = _subreason_texts(status_json)
    message = "Video is unplayable."
    if details:
        message += " Additional details: " + ", ".join(details)
    raise VideoUnplayableError(video_id, message, details)


def _run_text(node: Any) -> str | None:
    """Text of runs[0], or simpleText."""
    if not isinstance(node, dict):
        return None
    runs = node.get("runs")
    if isinstance(runs, list) and runs and isinstance(runs[0], dict):
        text = runs[0].get("text")
        if isinstance(text, str):
            return text
    simple = node.get("simpleText")
    return simple if isinstance(simple, str) else None


def _entries(video_id: str, renderer: dict[str, Any], key: str) -> list[dict[str, Any]]:
    """List under key, each element checked to be an object."""
    entries = renderer.get(key, [])
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise ParseError(video_id, f"Malformed '{key}' in player info.")
    return entries


def extract_translation_languages(video_id: str, renderer: dict[str, Any]) -> dict[str, str]:
    """Map translation language code to display name (first wins).

    Raises:
        ParseError: If translationLanguages is not a list of objects
    """
    languages: dict[str, str] = {}
    for entry in _entries(video_id, renderer, "translationLanguages"):
        code = entry.get("languageCode")
        if not isinstance(code, str) or not code or code in languages:
            continue
        languages[code] = _run_text(entry.get("languageName")) or code
    return languages


def _build_track(
    video_id: str,
    entry: dict[str, Any],
    translation_languages: dict[str, str],
    source: ContentSource | None,
) -> CaptionTrack:
    base_url = entry.get("baseUrl")
    code = entry.get("languageCode")
    if not isinstance(base_url, str) or not isinstance(code, str) or not base_url or not code:
        raise ParseError(video_id, "Caption track is missing 'baseUrl' or 'languageCode'.")
    return CaptionTrack(
        video_id=video_id,
        content_url=base_url,
        language_name=_run_text(entry.get("name")) or code,
        language_code=code,
        is_generated="kind" in entry,
        translation_languages=translation_languages,
        source=source,
    )


def _load_json(video_id: str, raw_json: str) -> dict[str, Any]:
    try:
        data = json.loads(raw_json)
    except (json.JSONDecodeError, TypeError) as e:
        raise ParseError(video_id, "Failed to parse player info JSON.", e) from e
    if not isinstance(data, dict):
        raise ParseError(video_id, "Failed to find captions track list.")
    return data


def parse_player_info(
    video_id: str,
    raw_json: str,
    source: ContentSource | None = None,
    patterns: PlayabilityPatterns | None = None,
) -> TrackCollection:
    """Build the track collection for a video from player-info JSON.

    Args:
        video_id: Video the payload belongs to
        raw_json: Player endpoint response body
        source: Content source attached to every track for fetch()
        patterns: Playability reason patterns (defaults to built-ins)

    Raises:
        ParseError: Malformed JSON or caption entries
        BotDetectedError, AgeRestrictedError, VideoUnavailableError,
        VideoUnplayableError: Playability problems
        CaptionsUnavailableError: No captions for the video
    """
    data = _load_json(video_id, raw_json)

    status_json = data.get("playabilityStatus")
    if isinstance(status_json, dict):
        check_playability(video_id, status_json, patterns)

    captions = data.get("captions")
    if not isinstance(captions, dict):
        raise CaptionsUnavailableError(video_id, "This video does not have captions.")

    renderer = captions.get("playerCaptionsTracklistRenderer")
    if not isinstance(renderer, dict) or "captionTracks" not in renderer:
        raise CaptionsUnavailableError(video_id, "Transcripts are disabled for this video.")

    translation_languages = extract_translation_languages(video_id, renderer)
    manual: dict[str, CaptionTrack] = {}
    generated: dict[str, CaptionTrack] = {}

    for entry in _entries(video_id, renderer, "captionTracks"):
        track = _build_track(video_id, entry, translation_languages, source)
        bucket = generated if track.is_generated else manual
        # First occurrence wins on duplicate codes
        bucket.setdefault(track.language_code, track)

    logger.debug(
        "Found {} manual and {} generated tracks for {}", len(manual), len(generated), video_id
    )
    return TrackCollection(
        video_id=video_id,
        manual_tracks=manual,
        generated_tracks=generated,
        translation_languages=translation_languages,
    )
