"""ytcaptions CLI - YouTube transcript retrieval."""

import json
import sys
from pathlib import Path
from typing import Any

import fire
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress
from rich.table import Table

from ytcaptions import __version__
from ytcaptions.config import Config, get_config_path, load_config
from ytcaptions.errors import TranscriptRetrievalError
from ytcaptions.formatters import file_extension, format_transcript, validate_format
from ytcaptions.logging import configure_logging, logger
from ytcaptions.models import BulkRequest, TranscriptContent, extract_playlist_id, extract_video_id
from ytcaptions.quota import estimate_bulk_cost, get_quota_summary, get_time_until_reset
from ytcaptions.transcripts import TranscriptApi

console = Console()
err_console = Console(stderr=True)


def _parse_languages(lang: Any) -> tuple[str, ...]:
    """Accept "de,en", ("de", "en") or None (fire turns "de,en" into a tuple)."""
    if lang is None:
        return ()
    if isinstance(lang, (list, tuple)):
        return tuple(str(code).strip() for code in lang)
    return tuple(code.strip() for code in str(lang).split(","))


def _mask(secret: str | None) -> str | None:
    if not secret:
        return None
    return secret[:4] + "..." if len(secret) > 8 else "***"


class YtcaptionsCLI:
    """YouTube transcript retrieval CLI.

    Examples:
        ytcaptions ls dQw4w9WgXcQ
        ytcaptions get "https://youtu.be/dQw4w9WgXcQ" --lang de,en --fmt srt
        ytcaptions --json-output get dQw4w9WgXcQ --translate fr
        ytcaptions playlist PLxxxx --output-dir transcripts/
        ytcaptions --throttle 500 channel "Some Channel"
    """

    def __init__(
        self, verbose: bool = False, json_output: bool = False, throttle: int | None = None
    ) -> None:
        """Initialize CLI with options.

        Args:
            verbose: Enable debug logging
            json_output: Output results as JSON instead of human-readable text
            throttle: Milliseconds between HTTP requests (overrides config, 0 to disable)
        """
        configure_logging(verbose)
        self._json = json_output
        self._throttle = throttle
        self._config: Config | None = None
        self._api: TranscriptApi | None = None
        logger.debug(
            "ytcaptions initialized with verbose={}, json={}, throttle={}",
            verbose,
            json_output,
            throttle,
        )

    def _get_config(self) -> Config:
        if self._config is None:
            config = load_config()
            if self._throttle is not None:
                config = config.model_copy(update={"throttle_ms": max(0, int(self._throttle))})
            self._config = config
        return self._config

    def _get_api(self) -> TranscriptApi:
        if self._api is None:
            self._api = TranscriptApi(config=self._get_config())
        return self._api

    def _output(self, data: dict[str, Any]) -> None:
        """Print result as JSON (human output is printed by each command)."""
        if self._json:
            print(json.dumps(data, indent=2, ensure_ascii=False))

    def _languages(self, lang: Any) -> tuple[str, ...]:
        return _parse_languages(lang) or tuple(self._get_config().languages)

    def version(self) -> None:
        """Show ytcaptions version."""
        if self._json:
            self._output({"version": __version__})
        else:
            console.print(f"ytcaptions {__version__}")

    def config(self) -> None:
        """Show config file location and effective settings.

        Example:
            ytcaptions config
        """
        config_path = get_config_path()
        config = self._get_config()
        settings = config.model_dump()
        settings["api_key"] = _mask(config.effective_api_key())
        settings["proxy_url"] = "<set>" if config.effective_proxy_url() else None

        if self._json:
            self._output(
                {
                    "config_path": str(config_path),
                    "config_exists": config_path.exists(),
                    "settings": settings,
                }
            )
            return

        console.print(f"[bold]Config path:[/bold] {config_path}")
        if config_path.exists():
            console.print("[green]Config file exists[/green]")
        else:
            console.print("[yellow]Config file not found, using defaults[/yellow]")
        console.print()
        for key, value in settings.items():
            if key == "playability":
                continue
            console.print(f"  {key} = {escape(str(value))}")
        if not settings["api_key"]:
            console.print()
            console.print(
                "[dim]Playlist and channel commands need a YouTube Data API key "
                "(api_key in config.toml or YTCAPTIONS_API_KEY).[/dim]"
            )

    def ls(self, video: str) -> None:
        """List available caption tracks for a video.

        Args:
            video: Video ID or URL

        Example:
            ytcaptions ls dQw4w9WgXcQ
        """
        video_id = extract_video_id(str(video))
        tracks = self._get_api().list_tracks(video_id)

        if self._json:
            self._output(tracks.to_dict())
            return

        table = Table(title=f"Caption tracks for {video_id}", show_header=True, header_style="bold")
        table.add_column("Code")
        table.add_column("Name")
        table.add_column("Origin")
        table.add_column("Translatable", justify="center")
        for track in tracks:
            table.add_row(
                track.language_code,
                escape(track.language_name),
                track.origin,
                "yes" if track.is_translatable else "no",
            )
        console.print(table)
        if tracks.translation_languages:
            console.print(
                f"[dim]{len(tracks.translation_languages)} translation languages available[/dim]"
            )

    def get(
        self,
        video: str,
        lang: Any = None,
        fmt: str = "text",
        output: str | None = None,
        translate: str | None = None,
    ) -> None:
        """Fetch a transcript for a video.

        Manually created tracks are preferred over generated ones.

        Args:
            video: Video ID or URL
            lang: Language codes in priority order, e.g. "de,en" (default from config)
            fmt: text, json, yaml, srt or vtt
            output: Write to this file instead of stdout
            translate: Machine-translate the chosen track to this language code

        Example:
            ytcaptions get dQw4w9WgXcQ --lang de,en --fmt srt --output talk.srt
        """
        video_id = extract_video_id(str(video))
        codes = self._languages(lang)
        fmt = validate_format(fmt)
        track = self._get_api().list_tracks(video_id).find(*codes)
        if translate:
            track = track.translate(str(translate))
        content = track.fetch()
        logger.debug(
            "Fetched {} fragments from {} track '{}'",
            len(content),
            track.origin,
            track.language_code,
        )

        if self._json and not output:
            self._output(
                {
                    "video_id": video_id,
                    "language_code": track.language_code,
                    "is_generated": track.is_generated,
                    "fragment_count": len(content),
                    "fragments": content.to_raw_data(),
                }
            )
            return

        rendered = format_transcript(content, fmt, video_id)
        if output:
            Path(output).write_text(rendered, encoding="utf-8")
            if self._json:
                self._output({"video_id": video_id, "output": output})
                return
            console.print(f"[green]Saved to: {output}[/green]")
            return

        print(rendered)

    def playlist(
        self,
        playlist: str,
        lang: Any = None,
        fmt: str = "text",
        output_dir: str | None = None,
        stop_on_error: bool | None = None,
    ) -> None:
        """Fetch transcripts for every video in a playlist.

        Requires a YouTube Data API key.

        Args:
            playlist: Playlist ID or URL
            lang: Language codes in priority order (default from config)
            fmt: text, json, yaml, srt or vtt
            output_dir: Write one file per video into this directory
            stop_on_error: Abort on the first failed video (default from config)

        Example:
            ytcaptions playlist PLxxxx --output-dir transcripts/ --fmt srt
        """
        playlist_id = extract_playlist_id(str(playlist))
        request = self._get_config().bulk_request(stop_on_error)
        self._bulk(playlist_id, False, request, lang, fmt, output_dir)

    def channel(
        self,
        name: str,
        lang: Any = None,
        fmt: str = "text",
        output_dir: str | None = None,
        stop_on_error: bool | None = None,
    ) -> None:
        """Fetch transcripts for every upload of a channel, found by name.

        Channel lookup costs 101 Data API quota units.

        Args:
            name: Channel name to search for
            lang: Language codes in priority order (default from config)
            fmt: text, json, yaml, srt or vtt
            output_dir: Write one file per video into this directory
            stop_on_error: Abort on the first failed video (default from config)

        Example:
            ytcaptions channel "Some Channel" --lang en --output-dir out/
        """
        request = self._get_config().bulk_request(stop_on_error)
        self._bulk(str(name), True, request, lang, fmt, output_dir)

    def _bulk(
        self,
        target: str,
        is_channel: bool,
        request: BulkRequest,
        lang: Any,
        fmt: str,
        output_dir: str | None,
    ) -> None:
        codes = self._languages(lang)
        fmt = validate_format(fmt)
        api = self._get_api()

        with Progress(console=err_console, disable=self._json) as progress:
            task = progress.add_task("Fetching transcripts...", total=None)

            def on_progress(completed: int, total: int, video_id: str) -> None:
                progress.update(task, completed=completed, total=total, description=video_id)

            results: dict[str, TranscriptContent]
            if is_channel:
                results = api.get_transcripts_for_channel(
                    target, request, *codes, progress_callback=on_progress
                )
            else:
                results = api.get_transcripts_for_playlist(
                    target, request, *codes, progress_callback=on_progress
                )

        written: list[str] = []
        if output_dir:
            out = Path(output_dir)
            out.mkdir(parents=True, exist_ok=True)
            for video_id, content in results.items():
                path = out / f"{video_id}.{file_extension(fmt)}"
                path.write_text(format_transcript(content, fmt, video_id), encoding="utf-8")
                written.append(str(path))

        quota_used = get_quota_summary()["used"]
        if self._json:
            data: dict[str, Any] = {
                "source": target,
                "count": len(results),
                "quota_used": quota_used,
            }
            if output_dir:
                data["files"] = written
            else:
                data["videos"] = {vid: c.to_raw_data() for vid, c in results.items()}
            self._output(data)
            return

        if output_dir:
            console.print(f"[green]Saved {len(written)} transcripts to: {output_dir}[/green]")
        else:
            for video_id, content in results.items():
                console.rule(video_id)
                print(format_transcript(content, fmt, video_id))
        if not results:
            console.print("[yellow]No transcripts retrieved[/yellow]")
        console.print(f"[dim]Data API quota used: {quota_used} units[/dim]")

    def quota(self, videos: int = 0, channel: bool = False) -> None:
        """Show when the Data API quota resets, or estimate a bulk run.

        Args:
            videos: Estimate the cost of listing this many videos
            channel: Include the channel lookup in the estimate

        Example:
            ytcaptions quota --videos 500 --channel
        """
        estimate = estimate_bulk_cost(int(videos), channel=bool(channel)) if videos else None

        if self._json:
            data: dict[str, Any] = {"resets_in": get_time_until_reset()}
            if estimate is not None:
                data["estimate"] = estimate.breakdown()
            self._output(data)
            return

        console.print(f"[bold]Quota resets in:[/bold] {get_time_until_reset()} (midnight PT)")
        if estimate is not None:
            console.print(f"[bold]Estimated cost:[/bold] {estimate.total:,} units")
            for key, units in estimate.breakdown().items():
                if key != "total" and units:
                    console.print(f"  - {key}: {units:,}")


def main() -> None:
    """CLI entry point."""
    try:
        fire.Fire(YtcaptionsCLI)
    except TranscriptRetrievalError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)
    except ValueError as e:
        # Also covers pydantic ValidationError from a bad config file
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
