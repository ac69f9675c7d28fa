"""Caption tracks and per-video track collections.

A video exposes manually created tracks and automatically generated tracks,
each keyed by language code. Lookups prefer manual tracks; within a bucket
the first requested code that is present wins.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from ytcaptions.content import parse_transcript_xml
from ytcaptions.errors import (
    InvalidArgumentError,
    NotFoundError,
    NotTranslatableError,
    TranscriptRetrievalError,
)
from ytcaptions.logging import logger
from ytcaptions.models import TranscriptContent

# Fetches raw timed-text XML for a content URL
ContentSource = Callable[[str], str]

DEFAULT_LANGUAGES: tuple[str, ...] = ("en",)
SRV3_PARAM = "&fmt=srv3"


def _format_codes(codes: Iterable[str]) -> str:
    return "[" + ", ".join(sorted(codes)) + "]"


@dataclass(frozen=True)
class CaptionTrack:
    """One available caption stream of a video."""

    video_id: str
    content_url: str
    language_name: str
    language_code: str
    is_generated: bool
    translation_languages: Mapping[str, str] = field(default_factory=dict, hash=False)
    source: ContentSource | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "content_url", self.content_url.replace(SRV3_PARAM, ""))
        object.__setattr__(
            self, "translation_languages", MappingProxyType(dict(self.translation_languages))
        )

    @property
    def is_translatable(self) -> bool:
        """Whether YouTube can machine-translate this track."""
        return len(self.translation_languages) > 0

    def fetch(self) -> TranscriptContent:
        """Download and parse this track's content."""
        if self.source is None:
            raise TranscriptRetrievalError(
                self.video_id, "Track has no content source to fetch from."
            )
        logger.debug("Fetching {} track '{}' for {}", self.origin, self.language_code, self.video_id)
        raw_xml = self.source(self.content_url)
        return parse_transcript_xml(self.video_id, raw_xml)

    def translate(self, language_code: str) -> CaptionTrack:
        """Return a copy of this track machine-translated to language_code.

        Raises:
            NotTranslatableError: If the track has no translation languages.
            NotFoundError: If language_code is not a translation target.
        """
        if not self.is_translatable:
            raise NotTranslatableError(self.video_id, "This transcript is not translatable.")
        if not isinstance(language_code, str) or not language_code.strip():
            raise InvalidArgumentError(self.video_id, "Language code cannot be blank")
        if language_code not in self.translation_languages:
            raise NotFoundError(
                self.video_id,
                f"Translation language '{language_code}' is not available. "
                f"Available translation languages: {_format_codes(self.translation_languages)}",
            )
        separator = "&" if "?" in self.content_url else "?"
        return dataclasses.replace(
            self,
            language_code=language_code,
            language_name=self.translation_languages[language_code],
            content_url=f"{self.content_url}{separator}tlang={language_code}",
        )

    @property
    def origin(self) -> str:
        """Either "generated" or "manual"."""
        return "generated" if self.is_generated else "manual"

    def to_dict(self) -> dict[str, object]:
        """Serialize track metadata (without the content source)."""
        return {
            "video_id": self.video_id,
            "language_code": self.language_code,
            "language_name": self.language_name,
            "is_generated": self.is_generated,
            "is_translatable": self.is_translatable,
            "content_url": self.content_url,
        }

    def __str__(self) -> str:
        return (
            f"Transcript for video with id: {self.video_id}.\n"
            f"Language: {self.language_name}\n"
            f"Language code: {self.language_code}\n"
            f"API URL for retrieving content: {self.content_url}\n"
            f"Available translation languages: {_format_codes(self.translation_languages)}"
        )


def normalize_language_codes(codes: Sequence[str]) -> tuple[str, ...]:
    """Validate requested language codes, defaulting to English.

    Raises:
        InvalidArgumentError: If any code is None, not a string, or blank.
    """
    for code in codes:
        if code is None:
            raise InvalidArgumentError(None, "Language codes cannot be null")
        if not isinstance(code, str):
            raise InvalidArgumentError(None, f"Language codes must be strings, got {code!r}")
        if not code.strip():
            raise InvalidArgumentError(None, "Language codes cannot be blank")
    return tuple(codes) if codes else DEFAULT_LANGUAGES


def resolve_track(
    buckets: Sequence[Mapping[str, CaptionTrack]], codes: Sequence[str]
) -> CaptionTrack | None:
    """Find the first track matching codes, searching buckets in order.

    Every code is tried against a bucket before moving to the next bucket.
    """
    for bucket in buckets:
        for code in codes:
            track = bucket.get(code)
            if track is not None:
                return track
    return None


@dataclass(frozen=True)
class TrackCollection:
    """All caption tracks available for one video."""

    video_id: str
    manual_tracks: Mapping[str, CaptionTrack] = field(default_factory=dict, hash=False)
    generated_tracks: Mapping[str, CaptionTrack] = field(default_factory=dict, hash=False)
    translation_languages: Mapping[str, str] = field(
        default_factory=dict, hash=False, compare=False
    )

    def __post_init__(self) -> None:
        # Read-only views over private copies
        for name in ("manual_tracks", "generated_tracks", "translation_languages"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def __iter__(self) -> Iterator[CaptionTrack]:
        yield from self.manual_tracks.values()
        yield from self.generated_tracks.values()

    def __len__(self) -> int:
        return len(self.manual_tracks) + len(self.generated_tracks)

    def find(self, *language_codes: str) -> CaptionTrack:
        """Find a track, preferring manually created ones.

        Args:
            *language_codes: Codes in descending priority, e.g. ("de", "en").
                Defaults to English when empty.

        Raises:
            InvalidArgumentError: If a code is blank.
            NotFoundError: If no bucket has any of the codes.
        """
        try:
            return self.find_manual(*language_codes)
        except NotFoundError:
            return self.find_generated(*language_codes)

    def find_manual(self, *language_codes: str) -> CaptionTrack:
        """Find a manually created track."""
        return self._find(self.manual_tracks, language_codes)

    def find_generated(self, *language_codes: str) -> CaptionTrack:
        """Find an automatically generated track."""
        return self._find(self.generated_tracks, language_codes)

    def _find(self, bucket: Mapping[str, CaptionTrack], language_codes: Sequence[str]) -> CaptionTrack:
        codes = normalize_language_codes(language_codes)
        track = resolve_track([bucket], codes)
        if track is None:
            raise NotFoundError(
                self.video_id,
                "No transcripts were found for any of the requested language codes: "
                f"[{', '.join(codes)}]. {self}.",
            )
        logger.debug("Resolved {} to {} track '{}'", list(codes), track.origin, track.language_code)
        return track

    def to_dict(self) -> dict[str, object]:
        """Serialize available languages for JSON/YAML output."""
        return {
            "video_id": self.video_id,
            "manual": [t.to_dict() for t in self.manual_tracks.values()],
            "generated": [t.to_dict() for t in self.generated_tracks.values()],
            "translation_languages": dict(self.translation_languages),
        }

    def __str__(self) -> str:
        return (
            f"For video with ID ({self.video_id}) transcripts are available "
            "in the following languages:\n"
            f"Manually created: {_format_codes(self.manual_tracks)}\n"
            f"Automatically generated: {_format_codes(self.generated_tracks)}\n"
            f"Available translation languages: {_format_codes(self.translation_languages)}"
        )
