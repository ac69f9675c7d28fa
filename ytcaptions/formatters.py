"""Render transcript content as text, JSON, YAML, SRT or WebVTT."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import yaml  # type: ignore[import-untyped]

from ytcaptions.models import TranscriptContent

FORMATS = ("text", "json", "yaml", "srt", "vtt")


def format_timestamp(seconds: float, separator: str = ",") -> str:
    """Format seconds as HH:MM:SS<sep>mmm (SRT uses ",", WebVTT ".")."""
    total_ms = max(0, round(seconds * 1000))
    hours, remainder = divmod(total_ms, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    secs, millis = divmod(remainder, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}{separator}{millis:03d}"


def _document(content: TranscriptContent, video_id: str | None) -> dict[str, Any]:
    return {
        "video_id": video_id,
        "fragment_count": len(content),
        "fragments": content.to_raw_data(),
    }


def format_text(content: TranscriptContent, video_id: str | None = None) -> str:
    """One line per fragment."""
    return "\n".join(fragment.text for fragment in content)


def format_json(content: TranscriptContent, video_id: str | None = None) -> str:
    return json.dumps(_document(content, video_id), indent=2, ensure_ascii=False)


def format_yaml(content: TranscriptContent, video_id: str | None = None) -> str:
    result: str = yaml.dump(
        _document(content, video_id), default_flow_style=False, allow_unicode=True, sort_keys=False
    )
    return result


def format_srt(content: TranscriptContent, video_id: str | None = None) -> str:
    """SubRip cues numbered from 1."""
    cues = []
    for index, fragment in enumerate(content, start=1):
        start = format_timestamp(fragment.start)
        end = format_timestamp(fragment.start + fragment.duration)
        cues.append(f"{index}\n{start} --> {end}\n{fragment.text}\n")
    return "\n".join(cues)


def format_webvtt(content: TranscriptContent, video_id: str | None = None) -> str:
    cues = ["WEBVTT\n"]
    for fragment in content:
        start = format_timestamp(fragment.start, ".")
        end = format_timestamp(fragment.start + fragment.duration, ".")
        cues.append(f"{start} --> {end}\n{fragment.text}\n")
    return "\n".join(cues)


def validate_format(fmt: str) -> str:
    """Normalize a format name.

    Raises:
        ValueError: For an unknown format
    """
    key = str(fmt).lower().strip()
    if key == "webvtt":
        key = "vtt"
    if key not in FORMATS:
        msg = f"Unknown format: {fmt}. Choose from: {', '.join(FORMATS)}"
        raise ValueError(msg)
    return key


_FORMATTERS: dict[str, Callable[[TranscriptContent, str | None], str]] = {
    "text": format_text,
    "json": format_json,
    "yaml": format_yaml,
    "srt": format_srt,
    "vtt": format_webvtt,
}


def format_transcript(
    content: TranscriptContent, fmt: str = "text", video_id: str | None = None
) -> str:
    """Render content in the named format.

    Args:
        content: Transcript to render
        fmt: One of text, json, yaml, srt, vtt (webvtt is accepted too)
        video_id: Included in json/yaml output

    Raises:
        ValueError: For an unknown format
    """
    return _FORMATTERS[validate_format(fmt)](content, video_id)


def file_extension(fmt: str) -> str:
    """File extension used when writing fmt to disk."""
    key = validate_format(fmt)
    return "txt" if key == "text" else key
