"""ytcaptions - YouTube transcript retrieval."""

from ytcaptions.errors import (
    AgeRestrictedError,
    BotDetectedError,
    CaptionsUnavailableError,
    InvalidArgumentError,
    NotFoundError,
    NotTranslatableError,
    ParseError,
    TranscriptRetrievalError,
    TransportError,
    VideoUnavailableError,
    VideoUnplayableError,
)
from ytcaptions.models import BulkRequest, Fragment, TranscriptContent
from ytcaptions.tracks import CaptionTrack, TrackCollection
from ytcaptions.transcripts import TranscriptApi

try:
    from ytcaptions._version import __version__
except ImportError:
    __version__ = "0.0.0.dev0"

__all__ = [
    "AgeRestrictedError",
    "BotDetectedError",
    "BulkRequest",
    "CaptionTrack",
    "CaptionsUnavailableError",
    "Fragment",
    "InvalidArgumentError",
    "NotFoundError",
    "NotTranslatableError",
    "ParseError",
    "TrackCollection",
    "TranscriptApi",
    "TranscriptContent",
    "TranscriptRetrievalError",
    "TransportError",
    "VideoUnavailableError",
    "VideoUnplayableError",
    "__version__",
]
