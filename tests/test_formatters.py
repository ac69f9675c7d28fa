"""Tests for ytcaptions.formatters."""

import json

import pytest
import yaml

from ytcaptions.formatters import (
    file_extension,
    format_timestamp,
    format_transcript,
    validate_format,
)
from ytcaptions.models import Fragment, TranscriptContent

CONTENT = TranscriptContent(
    (
        Fragment("Hey, this is just a test", 0.0, 1.54),
        Fragment("Grüße & <tags>", 3661.5, 2.0),
    )
)


class TestFormatTimestamp:
    """Tests for format_timestamp."""

    def test_srt_separator(self) -> None:
        """SRT uses a comma before milliseconds."""
        assert format_timestamp(3661.5) == "01:01:01,500"

    def test_vtt_separator(self) -> None:
        """WebVTT uses a dot."""
        assert format_timestamp(1.54, ".") == "00:00:01.540"

    def test_negative_clamped(self) -> None:
        """Negative times render as zero."""
        assert format_timestamp(-1) == "00:00:00,000"


class TestFormatTranscript:
    """Tests for format_transcript."""

    def test_text(self) -> None:
        """Text output has one fragment per line."""
        assert format_transcript(CONTENT) == "Hey, this is just a test\nGrüße & <tags>"

    def test_json(self) -> None:
        """JSON includes video ID and fragments, unescaped."""
        rendered = format_transcript(CONTENT, "json", "dQw4w9WgXcQ")
        data = json.loads(rendered)

        assert "Grüße" in rendered
        assert data["video_id"] == "dQw4w9WgXcQ"
        assert data["fragment_count"] == 2
        assert data["fragments"][0] == {"text": "Hey, this is just a test", "start": 0.0, "duration": 1.54}

    def test_yaml(self) -> None:
        """YAML parses back to the same document."""
        data = yaml.safe_load(format_transcript(CONTENT, "yaml", "dQw4w9WgXcQ"))

        assert data["fragments"][1]["text"] == "Grüße & <tags>"
        assert list(data) == ["video_id", "fragment_count", "fragments"]

    def test_srt(self) -> None:
        """SRT cues are numbered with start and end times."""
        rendered = format_transcript(CONTENT, "srt")

        assert rendered.startswith("1\n00:00:00,000 --> 00:00:01,540\nHey, this is just a test\n")
        assert "2\n01:01:01,500 --> 01:01:03,500\nGrüße & <tags>\n" in rendered

    def test_vtt(self) -> None:
        """WebVTT starts with the header."""
        rendered = format_transcript(CONTENT, "webvtt")

        assert rendered.startswith("WEBVTT\n")
        assert "00:00:00.000 --> 00:00:01.540" in rendered

    def test_empty_content(self) -> None:
        """Empty transcripts render as empty text."""
        assert format_transcript(TranscriptContent(), "text") == ""

    def test_unknown_format(self) -> None:
        """Unknown formats raise ValueError."""
        with pytest.raises(ValueError, match="Unknown format"):
            format_transcript(CONTENT, "docx")


class TestValidateFormat:
    """Tests for validate_format and file_extension."""

    def test_normalizes(self) -> None:
        """Case and webvtt alias are normalized."""
        assert validate_format(" SRT ") == "srt"
        assert validate_format("WebVTT") == "vtt"

    @pytest.mark.parametrize(
        ("fmt", "ext"), [("text", "txt"), ("json", "json"), ("yaml", "yaml"), ("webvtt", "vtt")]
    )
    def test_file_extension(self, fmt: str, ext: str) -> None:
        """Extensions follow the format."""
        assert file_extension(fmt) == ext
