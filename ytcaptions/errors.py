"""Exception hierarchy for transcript retrieval.

Every failure raised by ytcaptions derives from TranscriptRetrievalError:

    TranscriptRetrievalError
    ├── InvalidArgumentError      bad video ID / language codes / API key
    ├── BotDetectedError          YouTube thinks the caller is a bot
    ├── AgeRestrictedError        age gate or consent page
    ├── VideoUnavailableError     video removed or private
    ├── VideoUnplayableError      any other non-OK playability status
    ├── CaptionsUnavailableError  no captions for the video
    ├── ParseError                malformed JSON / XML / HTML from YouTube
    ├── NotFoundError             requested language or channel not found
    ├── NotTranslatableError      translation requested on a plain track
    └── TransportError            network failure or non-2xx response
"""

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


class TranscriptRetrievalError(Exception):
    """Root exception for all transcript retrieval failures.

    Attributes:
        video_id: Video the failure relates to (None for batch or API errors).
        reason: Human-readable cause, without the video prefix.
        cause: Underlying exception, if any.
    """

    def __init__(
        self, video_id: str | None, reason: str, cause: BaseException | None = None
    ) -> None:
        self.video_id = video_id
        self.reason = reason
        self.cause = cause
        super().__init__(self._build_message())
        if cause is not None:
            self.__cause__ = cause

    def _build_message(self) -> str:
        if not self.video_id:
            return self.reason
        url = WATCH_URL.format(video_id=self.video_id)
        return f"Could not retrieve transcript for the video: {url}.\nReason: {self.reason}"

    @property
    def message(self) -> str:
        """Full rendered message."""
        return str(self)


class InvalidArgumentError(TranscriptRetrievalError, ValueError):
    """Raised before any network access when an argument is malformed."""


class BotDetectedError(TranscriptRetrievalError):
    """YouTube is blocking requests because it suspects automation."""


class AgeRestrictedError(TranscriptRetrievalError):
    """Video is age restricted or hidden behind a consent page."""


class VideoUnavailableError(TranscriptRetrievalError):
    """Video does not exist or is no longer available."""


class VideoUnplayableError(TranscriptRetrievalError):
    """Video cannot be played for a reason not covered by other errors."""

    def __init__(
        self, video_id: str | None, reason: str, details: list[str] | None = None
    ) -> None:
        self.details = details or []
        super().__init__(video_id, reason)


class CaptionsUnavailableError(TranscriptRetrievalError):
    """Video has no captions, or captions are disabled."""


class ParseError(TranscriptRetrievalError):
    """Upstream payload could not be parsed."""


class NotFoundError(TranscriptRetrievalError):
    """Requested language code (or channel) is not available."""


class NotTranslatableError(TranscriptRetrievalError):
    """Track does not offer any translation languages."""


class TransportError(TranscriptRetrievalError):
    """HTTP request failed or returned a non-2xx status."""

    def __init__(
        self,
        video_id: str | None,
        reason: str,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(video_id, reason, cause)

    def for_video(self, video_id: str) -> "TransportError":
        """Return a copy of this error attributed to a specific video."""
        return TransportError(video_id, self.reason, self.cause, self.status_code)
