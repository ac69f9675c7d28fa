"""Data models for ytcaptions."""

import re
from collections.abc import Iterator, Sequence
from dataclasses import asdict, dataclass, field
from typing import Any, overload
from urllib.parse import parse_qs, urlparse

from ytcaptions.errors import InvalidArgumentError

VIDEO_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{11}")

# Path prefixes that carry the video ID as the next segment
_VIDEO_PATH_PREFIXES = ("embed", "shorts", "v", "live")


@dataclass(frozen=True)
class Fragment:
    """One timed span of transcript text."""

    text: str
    start: float
    duration: float

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON/YAML."""
        return asdict(self)


@dataclass(frozen=True)
class TranscriptContent:
    """Ordered fragments of a fetched transcript.

    Equality is structural: two contents are equal when their fragment
    sequences are equal.
    """

    fragments: tuple[Fragment, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any sequence but store an immutable tuple
        object.__setattr__(self, "fragments", tuple(self.fragments))

    def __iter__(self) -> Iterator[Fragment]:
        return iter(self.fragments)

    def __len__(self) -> int:
        return len(self.fragments)

    @overload
    def __getitem__(self, index: int) -> Fragment: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Fragment, ...]: ...

    def __getitem__(self, index: int | slice) -> Fragment | tuple[Fragment, ...]:
        return self.fragments[index]

    def to_raw_data(self) -> list[dict[str, Any]]:
        """Serialize fragments to a list of plain dicts."""
        return [f.to_dict() for f in self.fragments]

    @classmethod
    def from_raw_data(cls, data: Sequence[dict[str, Any]]) -> "TranscriptContent":
        """Deserialize from the output of to_raw_data."""
        return cls(
            tuple(
                Fragment(
                    text=item["text"],
                    start=float(item["start"]),
                    duration=float(item.get("duration", 0.0)),
                )
                for item in data
            )
        )


@dataclass(frozen=True)
class BulkRequest:
    """Options for playlist and channel processing.

    Attributes:
        api_key: YouTube Data API v3 key used to list video IDs.
        stop_on_error: Abort the whole batch on the first failed video.
            When False, failed videos are left out of the result.
    """

    api_key: str
    stop_on_error: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise InvalidArgumentError(None, "API key cannot be null or blank")


def validate_video_id(video_id: str) -> str:
    """Ensure video_id is a bare 11-character YouTube video ID.

    Raises:
        InvalidArgumentError: If the ID is not exactly 11 chars of [A-Za-z0-9_-]
    """
    if not isinstance(video_id, str) or not VIDEO_ID_PATTERN.fullmatch(video_id):
        raise InvalidArgumentError(None, f"Invalid video ID: {video_id!r}")
    return video_id


def extract_video_id(url_or_id: str) -> str:
    """Extract and validate a video ID from a URL or bare ID.

    Accepts watch URLs (?v=), youtu.be short links and /embed/, /shorts/,
    /v/, /live/ paths.

    Args:
        url_or_id: YouTube video URL or video ID

    Returns:
        Valid 11-character video ID

    Raises:
        InvalidArgumentError: If no valid video ID can be found
    """
    candidate = url_or_id.strip()
    if not candidate:
        raise InvalidArgumentError(None, "Empty video URL/ID")

    if "/" in candidate or "?" in candidate:
        parsed = urlparse(candidate if "://" in candidate else f"https://{candidate}")
        host = parsed.netloc.lower()
        segments = [s for s in parsed.path.split("/") if s]
        if host.endswith("youtu.be") and segments:
            candidate = segments[0]
        elif "v" in parse_qs(parsed.query):
            candidate = parse_qs(parsed.query)["v"][0]
        elif len(segments) >= 2 and segments[0] in _VIDEO_PATH_PREFIXES:
            candidate = segments[1]

    return validate_video_id(candidate)


def extract_playlist_id(url_or_id: str) -> str:
    """Extract and validate playlist ID from URL or ID.

    Args:
        url_or_id: YouTube playlist URL or playlist ID

    Returns:
        Valid playlist ID

    Raises:
        InvalidArgumentError: If input is not a valid playlist URL/ID
    """
    url_or_id = url_or_id.strip()
    if not url_or_id:
        raise InvalidArgumentError(None, "Empty playlist URL/ID")

    playlist_id = url_or_id
    if "list=" in url_or_id:
        # URL format: ...?list=PLxxxxxx or &list=PLxxxxxx
        for part in url_or_id.split("?")[-1].split("&"):
            if part.startswith("list="):
                playlist_id = part[5:]
                break

    if not playlist_id:
        raise InvalidArgumentError(None, f"No playlist ID found in: {url_or_id}")

    # Typical prefixes: PL (user), UU (uploads), LL (liked), FL (favorites), RD (mix)
    valid_chars = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_")
    if not all(c in valid_chars for c in playlist_id):
        raise InvalidArgumentError(None, f"Invalid characters in playlist ID: {playlist_id}")

    if len(playlist_id) < 2:
        raise InvalidArgumentError(None, f"Playlist ID too short: {playlist_id}")

    return playlist_id
