"""Timed-text XML parsing.

YouTube serves caption content as XML of the form::

    <transcript>
        <text start="0.0" dur="1.54">Hey, this is just a test</text>
        <text start="1.54" dur="4.16">this is not the original transcript</text>
    </transcript>

Element text is usually HTML-escaped a second time on top of the XML
escaping, so entities are unescaped after XML decoding.
"""

from __future__ import annotations

import re
from html import unescape
from typing import Any

from defusedxml import DefusedXmlException, ElementTree

from ytcaptions.errors import ParseError
from ytcaptions.logging import logger
from ytcaptions.models import Fragment, TranscriptContent

_TAG_PATTERN = re.compile(r"<[^>]*?>", re.IGNORECASE)


def strip_tags(text: str) -> str:
    """Remove every <...> markup tag from text."""
    return _TAG_PATTERN.sub("", text)


def _parse_seconds(video_id: str, element: Any, name: str, default: str | None) -> float:
    raw = element.attrib.get(name, default)
    if raw is None:
        raise ParseError(video_id, f"Transcript element is missing the '{name}' attribute.")
    try:
        return float(raw)
    except ValueError as e:
        raise ParseError(video_id, f"Invalid '{name}' value in transcript XML: {raw!r}", e) from e


def parse_transcript_xml(video_id: str, raw_xml: str) -> TranscriptContent:
    """Parse raw timed-text XML into normalized fragments.

    Records with missing or blank text are dropped, markup tags are
    stripped, entities are unescaped, and document order is preserved.

    Args:
        video_id: Video the XML belongs to (used in error messages)
        raw_xml: Timed-text XML as returned by YouTube

    Returns:
        TranscriptContent with one Fragment per non-blank record

    Raises:
        ParseError: If the XML is malformed or a timing attribute is invalid
    """
    try:
        root = ElementTree.fromstring(raw_xml)
    except (ElementTree.ParseError, DefusedXmlException) as e:
        raise ParseError(video_id, "Failed to parse transcript content XML.", e) from e

    fragments: list[Fragment] = []
    for element in root:
        text = "".join(element.itertext()) if len(element) else element.text
        if text is None or not text.strip():
            continue

        start = _parse_seconds(video_id, element, "start", None)
        duration = _parse_seconds(video_id, element, "dur", "0.0")

        cleaned = unescape(strip_tags(text))
        if not cleaned.strip():
            # Tag-only record
            continue
        fragments.append(Fragment(text=cleaned, start=start, duration=duration))

    logger.debug("Parsed {} transcript fragments for {}", len(fragments), video_id)
    return TranscriptContent(tuple(fragments))
