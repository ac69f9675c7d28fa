"""Transcript retrieval for single videos, playlists and channels.

Usage:
    api = TranscriptApi()
    tracks = api.list_tracks("dQw4w9WgXcQ")
    content = tracks.find("de", "en").fetch()

    request = BulkRequest(api_key="AIza...", stop_on_error=False)
    by_video = api.get_transcripts_for_playlist("PLxxxx", request, "en")
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from functools import partial
from typing import TypeVar

from ytcaptions.api import DataApiVideoSource, VideoIdSource
from ytcaptions.config import Config
from ytcaptions.errors import TranscriptRetrievalError
from ytcaptions.fetcher import ContentFetcher, RequestsFetcher
from ytcaptions.innertube import fetch_player_info, fetch_timedtext
from ytcaptions.logging import logger
from ytcaptions.models import BulkRequest, TranscriptContent, validate_video_id
from ytcaptions.player import parse_player_info
from ytcaptions.tracks import CaptionTrack, TrackCollection, normalize_language_codes

T = TypeVar("T")

ProgressCallback = Callable[[int, int, str], None]


class TranscriptApi:
    """Entry point for listing and fetching YouTube transcripts.

    Args:
        fetcher: HTTP transport (defaults to a RequestsFetcher built from config)
        config: Settings (defaults to Config())
        id_source: Playlist/channel video listing (defaults to the Data API)
    """

    def __init__(
        self,
        fetcher: ContentFetcher | None = None,
        config: Config | None = None,
        id_source: VideoIdSource | None = None,
    ) -> None:
        self.config = config or Config()
        self.fetcher: ContentFetcher = fetcher or RequestsFetcher(
            timeout=self.config.timeout,
            proxy_url=self.config.effective_proxy_url(),
            throttle_ms=self.config.throttle_ms,
        )
        self.id_source: VideoIdSource = id_source or DataApiVideoSource()

    # --- Single video ---

    def list_tracks(self, video_id: str) -> TrackCollection:
        """List all caption tracks available for a video.

        Raises:
            InvalidArgumentError: If video_id is not an 11-character video ID
            TranscriptRetrievalError: Any subclass, on retrieval failure
        """
        validate_video_id(video_id)
        raw_json = fetch_player_info(self.fetcher, video_id)
        source = partial(fetch_timedtext, self.fetcher, video_id)
        return parse_player_info(video_id, raw_json, source, self.config.playability)

    def get_transcript(self, video_id: str, *language_codes: str) -> TranscriptContent:
        """Fetch the best matching transcript for a video.

        Manually created tracks are preferred over generated ones. Without
        language codes the configured default languages are used.
        """
        codes = language_codes or tuple(self.config.languages)
        return self.list_tracks(video_id).find(*codes).fetch()

    def translate(self, track: CaptionTrack, language_code: str) -> CaptionTrack:
        """Return track machine-translated to language_code."""
        return track.translate(language_code)

    # --- Playlists ---

    def list_tracks_for_playlist(
        self,
        playlist_id: str,
        request: BulkRequest,
        progress_callback: ProgressCallback | None = None,
    ) -> dict[str, TrackCollection]:
        """List tracks for every video of a playlist.

        Returns:
            Mapping video ID -> TrackCollection, in playlist order. With
            stop_on_error=False, videos that failed are absent.
        """
        video_ids = self.id_source.list_video_ids(playlist_id, request.api_key)
        return self._run_bulk(
            playlist_id, video_ids, self.list_tracks, request.stop_on_error, progress_callback
        )

    def get_transcripts_for_playlist(
        self,
        playlist_id: str,
        request: BulkRequest,
        *language_codes: str,
        progress_callback: ProgressCallback | None = None,
    ) -> dict[str, TranscriptContent]:
        """Fetch the best matching transcript for every video of a playlist."""
        codes = normalize_language_codes(language_codes or tuple(self.config.languages))
        video_ids = self.id_source.list_video_ids(playlist_id, request.api_key)

        def task(video_id: str) -> TranscriptContent:
            return self.get_transcript(video_id, *codes)

        return self._run_bulk(
            playlist_id, video_ids, task, request.stop_on_error, progress_callback
        )

    # --- Channels ---

    def list_tracks_for_channel(
        self,
        channel_name: str,
        request: BulkRequest,
        progress_callback: ProgressCallback | None = None,
    ) -> dict[str, TrackCollection]:
        """List tracks for every upload of the channel named channel_name."""
        playlist_id = self.id_source.resolve_channel_uploads_playlist_id(
            channel_name, request.api_key
        )
        return self.list_tracks_for_playlist(playlist_id, request, progress_callback)

    def get_transcripts_for_channel(
        self,
        channel_name: str,
        request: BulkRequest,
        *language_codes: str,
        progress_callback: ProgressCallback | None = None,
    ) -> dict[str, TranscriptContent]:
        """Fetch the best matching transcript for every upload of a channel."""
        playlist_id = self.id_source.resolve_channel_uploads_playlist_id(
            channel_name, request.api_key
        )
        return self.get_transcripts_for_playlist(
            playlist_id, request, *language_codes, progress_callback=progress_callback
        )

    # --- Fan-out ---

    def _run_bulk(
        self,
        playlist_id: str,
        video_ids: Sequence[str],
        task: Callable[[str], T],
        stop_on_error: bool,
        progress_callback: ProgressCallback | None,
    ) -> dict[str, T]:
        """Run task for each video on a thread pool and collect results.

        Results are collected on the calling thread only. With stop_on_error
        the first TranscriptRetrievalError is re-raised after pending work is
        cancelled; otherwise failed videos are skipped. Any other exception
        aborts the batch wrapped in a TranscriptRetrievalError.
        """
        video_ids = list(dict.fromkeys(video_ids))
        results: dict[str, T] = {}
        total = len(video_ids)
        if total == 0:
            return results

        workers = min(self.config.max_workers, total)
        logger.debug(
            "Processing {} videos from playlist {} (max {} workers)", total, playlist_id, workers
        )

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(task, vid): vid for vid in video_ids}
            completed = 0
            try:
                for future in as_completed(futures):
                    video_id = futures[future]
                    completed += 1
                    try:
                        results[video_id] = future.result()
                    except TranscriptRetrievalError as e:
                        if stop_on_error:
                            raise
                        logger.debug("Skipping {}: {}", video_id, e.reason)
                    except Exception as e:
                        raise TranscriptRetrievalError(
                            None, f"Failed to retrieve transcripts for playlist: {playlist_id}", e
                        ) from e
                    if progress_callback:
                        progress_callback(completed, total, video_id)
            except BaseException:
                # In-flight work finishes on executor exit; its results are dropped
                for pending in futures:
                    pending.cancel()
                raise

        logger.debug("Playlist {}: {}/{} videos succeeded", playlist_id, len(results), total)
        return {vid: results[vid] for vid in video_ids if vid in results}
