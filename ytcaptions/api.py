"""YouTube Data API v3 access for playlist and channel video listing."""

import json
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Protocol

from googleapiclient.discovery import Resource, build
from googleapiclient.errors import HttpError

from ytcaptions.errors import NotFoundError, ParseError, TransportError
from ytcaptions.logging import logger
from ytcaptions.quota import get_time_until_reset, record_quota


class ErrorCategory(Enum):
    """Categories for Data API errors."""

    RATE_LIMITED = auto()  # 429
    QUOTA_EXCEEDED = auto()  # 403 quotaExceeded - wait until midnight PT
    NOT_FOUND = auto()  # 404 - playlist/channel does not exist
    PERMISSION_DENIED = auto()  # 403 (not quota) - private playlist, bad key
    INVALID_REQUEST = auto()  # 400 - malformed ID or invalid key
    SERVER_ERROR = auto()  # 5xx
    NETWORK_ERROR = auto()  # Connection errors
    UNKNOWN = auto()


@dataclass
class APIError:
    """Structured Data API error with handling guidance."""

    category: ErrorCategory
    message: str
    user_action: str
    status_code: int | None = None
    reason: str | None = None

    def __str__(self) -> str:
        return f"{self.category.name}: {self.message}"


def _error_reason(exc: HttpError) -> str | None:
    """First errors[].reason from an HttpError body, if any."""
    try:
        error_content = json.loads(exc.content.decode("utf-8"))
        errors = error_content.get("error", {}).get("errors", [])
        if errors:
            reason: str | None = errors[0].get("reason")
            return reason
    except (json.JSONDecodeError, AttributeError, UnicodeDecodeError):
        pass
    return None


def classify_error(exc: BaseException) -> APIError:
    """Classify an exception into an APIError with handling guidance.

    Args:
        exc: The exception to classify

    Returns:
        APIError with category and user action guidance
    """
    if isinstance(exc, HttpError):
        status = exc.resp.status
        reason = exc.reason or ""
        error_reason = _error_reason(exc)

        if status == 429:
            return APIError(
                category=ErrorCategory.RATE_LIMITED,
                message="Rate limit exceeded.",
                user_action="Wait a moment or raise --throttle.",
                status_code=status,
                reason=error_reason,
            )

        if status == 403:
            if error_reason == "quotaExceeded":
                reset_time = get_time_until_reset()
                return APIError(
                    category=ErrorCategory.QUOTA_EXCEEDED,
                    message=f"Daily quota exceeded. Resets in {reset_time} (midnight PT).",
                    user_action="Wait until midnight PT or use a key from another project.",
                    status_code=status,
                    reason=error_reason,
                )
            return APIError(
                category=ErrorCategory.PERMISSION_DENIED,
                message=f"Permission denied: {reason}",
                user_action="Check that the playlist is public and the API key is enabled.",
                status_code=status,
                reason=error_reason,
            )

        if status == 404:
            return APIError(
                category=ErrorCategory.NOT_FOUND,
                message=f"Resource not found: {reason}",
                user_action="Check if the playlist/channel exists and is not deleted.",
                status_code=status,
                reason=error_reason,
            )

        if status == 400:
            return APIError(
                category=ErrorCategory.INVALID_REQUEST,
                message=f"Invalid request: {reason}",
                user_action="Check the playlist ID and the API key.",
                status_code=status,
                reason=error_reason,
            )

        if status >= 500:
            return APIError(
                category=ErrorCategory.SERVER_ERROR,
                message=f"YouTube server error ({status}): {reason}",
                user_action="Server issue. Try again later.",
                status_code=status,
                reason=error_reason,
            )

        return APIError(
            category=ErrorCategory.UNKNOWN,
            message=f"HTTP error {status}: {reason}",
            user_action="Unexpected error. Check logs for details.",
            status_code=status,
            reason=error_reason,
        )

    # Network/connection errors
    if isinstance(exc, (ConnectionError, TimeoutError, OSError)):
        return APIError(
            category=ErrorCategory.NETWORK_ERROR,
            message=f"Network error: {exc}",
            user_action="Check internet connection.",
        )

    return APIError(
        category=ErrorCategory.UNKNOWN,
        message=str(exc),
        user_action="Unexpected error. Check logs for details.",
    )


def to_transport_error(exc: BaseException) -> TransportError:
    """Convert a Data API failure into a TransportError."""
    api_error = classify_error(exc)
    logger.debug("Data API error: {} ({})", api_error, api_error.user_action)
    return TransportError(
        None, f"{api_error.message} {api_error.user_action}", exc, api_error.status_code
    )


def get_youtube_client(api_key: str) -> Resource:
    """Get a YouTube Data API client authenticated with an API key."""
    return build("youtube", "v3", developerKey=api_key, cache_discovery=False)


class VideoIdSource(Protocol):
    """Lists video IDs for playlists and channels."""

    def list_video_ids(self, playlist_id: str, api_key: str) -> list[str]:
        """All video IDs of a playlist, in playlist order."""
        ...

    def resolve_channel_uploads_playlist_id(self, channel_name: str, api_key: str) -> str:
        """ID of the uploads playlist of the channel named channel_name."""
        ...


class DataApiVideoSource:
    """VideoIdSource backed by the YouTube Data API v3."""

    def __init__(self, client_factory: Callable[[str], Resource] = get_youtube_client) -> None:
        self._client_factory = client_factory
        self._clients: dict[str, Resource] = {}

    def _client(self, api_key: str) -> Resource:
        if api_key not in self._clients:
            self._clients[api_key] = self._client_factory(api_key)
        return self._clients[api_key]

    def list_video_ids(self, playlist_id: str, api_key: str) -> list[str]:
        """Get all video IDs in a playlist (1 quota unit per page of 50)."""
        client = self._client(api_key)
        video_ids: list[str] = []
        page_token = None

        while True:
            try:
                response = (
                    client.playlistItems()
                    .list(
                        part="snippet",
                        playlistId=playlist_id,
                        maxResults=50,
                        pageToken=page_token,
                    )
                    .execute()
                )
            except (HttpError, OSError) as e:
                raise to_transport_error(e) from e
            record_quota("playlistItems.list")

            for item in response.get("items", []):
                video_ids.append(_item_video_id(item))

            page_token = response.get("nextPageToken")
            if not page_token:
                break

        logger.debug("Playlist {} has {} videos", playlist_id, len(video_ids))
        return video_ids

    def resolve_channel_uploads_playlist_id(self, channel_name: str, api_key: str) -> str:
        """Find a channel by name and return its uploads playlist ID.

        Costs 101 quota units (search.list + channels.list).

        Raises:
            NotFoundError: If no channel matches channel_name
        """
        client = self._client(api_key)
        channel_id = self._search_channel_id(client, channel_name)

        try:
            response = client.channels().list(part="contentDetails", id=channel_id).execute()
        except (HttpError, OSError) as e:
            raise to_transport_error(e) from e
        record_quota("channels.list")

        items = response.get("items") or []
        try:
            uploads: str = items[0]["contentDetails"]["relatedPlaylists"]["uploads"]
        except (IndexError, KeyError, TypeError) as e:
            raise ParseError(
                None, f"Could not find uploads playlist for channel: {channel_name}", e
            ) from e
        logger.debug("Channel {} ({}) uploads playlist: {}", channel_name, channel_id, uploads)
        return uploads

    def _search_channel_id(self, client: Resource, channel_name: str) -> str:
        try:
            response = (
                client.search()
                .list(part="snippet", q=channel_name, type="channel", maxResults=1)
                .execute()
            )
        except (HttpError, OSError) as e:
            raise to_transport_error(e) from e
        record_quota("search.list")

        items = response.get("items") or []
        channel_id = None
        if items:
            snippet: dict[str, Any] = items[0].get("snippet", {})
            channel_id = snippet.get("channelId") or items[0].get("id", {}).get("channelId")
        if not channel_id:
            raise NotFoundError(
                None, f"Could not find channel id for the channel with the name: {channel_name}"
            )
        return str(channel_id)


def _item_video_id(item: dict[str, Any]) -> str:
    try:
        video_id: str = item["snippet"]["resourceId"]["videoId"]
    except (KeyError, TypeError) as e:
        raise ParseError(None, "Failed to parse YouTube API response JSON.", e) from e
    return video_id
