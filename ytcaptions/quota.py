"""YouTube Data API quota tracking and estimation.

Only playlist and channel operations touch the Data API; transcript
retrieval itself uses no quota.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from ytcaptions.logging import logger

# YouTube Data API v3 quota costs
# https://developers.google.com/youtube/v3/determine_quota_cost
QUOTA_COSTS = {
    "search.list": 100,
    "channels.list": 1,
    "playlistItems.list": 1,
}

# Default daily quota limit
DAILY_QUOTA_LIMIT = 10_000

# Items per playlistItems.list page
PAGE_SIZE = 50

# Pacific timezone (quota resets at midnight PT)
PACIFIC_TZ = ZoneInfo("America/Los_Angeles")


@dataclass
class QuotaTracker:
    """Tracks actual API quota usage during a session.

    YouTube API quota resets at midnight Pacific Time daily.
    """

    used: int = 0
    limit: int = DAILY_QUOTA_LIMIT
    warn_threshold: float = 0.8  # Warn at 80%
    operations: dict[str, int] = field(default_factory=dict)

    def record(self, operation: str, units: int | None = None) -> None:
        """Record an API operation and its quota cost.

        Args:
            operation: API operation name (e.g., "search.list")
            units: Quota units consumed (defaults to QUOTA_COSTS lookup)
        """
        if units is None:
            units = QUOTA_COSTS.get(operation, 1)
        self.used += units
        self.operations[operation] = self.operations.get(operation, 0) + 1
        logger.debug("Quota: +{} units for {} (total: {})", units, operation, self.used)

    @property
    def remaining(self) -> int:
        """Remaining quota units for the day."""
        return max(0, self.limit - self.used)

    @property
    def usage_percent(self) -> float:
        """Percentage of daily quota used."""
        return (self.used / self.limit) * 100 if self.limit > 0 else 100.0

    def is_warning(self) -> bool:
        return self.used >= (self.limit * self.warn_threshold)

    def is_exceeded(self) -> bool:
        return self.used >= self.limit

    def check_and_warn(self) -> str | None:
        """Return a warning message when usage is high."""
        if self.is_exceeded():
            return f"Daily quota limit reached ({self.used:,}/{self.limit:,} units)"
        if self.is_warning():
            pct = self.usage_percent
            return f"Quota usage at {pct:.0f}% ({self.used:,}/{self.limit:,} units)"
        return None

    def summary(self) -> dict[str, int | float | dict[str, int]]:
        return {
            "used": self.used,
            "remaining": self.remaining,
            "limit": self.limit,
            "usage_percent": round(self.usage_percent, 1),
            "operations": dict(self.operations),
        }


# Global tracker instance
_tracker = QuotaTracker()


def record_quota(operation: str, units: int | None = None) -> None:
    """Record quota usage for an API operation, warning when usage is high."""
    _tracker.record(operation, units)
    warning = _tracker.check_and_warn()
    if warning:
        logger.warning(warning)


def get_quota_summary() -> dict[str, int | float | dict[str, int]]:
    """Get current quota usage summary."""
    return _tracker.summary()


def get_time_until_reset() -> str:
    """Get human-readable time until quota reset (midnight PT).

    Returns:
        String like "5h 23m" or "23m" until midnight Pacific Time.
    """
    now = datetime.now(PACIFIC_TZ)
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)

    total_seconds = int((midnight - now).total_seconds())
    hours, remainder = divmod(total_seconds, 3600)
    minutes = remainder // 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


@dataclass
class QuotaEstimate:
    """Estimated quota usage for a bulk operation."""

    searches: int = 0
    channel_lookups: int = 0
    page_requests: int = 0

    @property
    def total(self) -> int:
        """Total estimated quota units."""
        return (
            self.searches * QUOTA_COSTS["search.list"]
            + self.channel_lookups * QUOTA_COSTS["channels.list"]
            + self.page_requests * QUOTA_COSTS["playlistItems.list"]
        )

    def breakdown(self) -> dict[str, int]:
        """Get breakdown of quota costs by operation type."""
        return {
            "searches": self.searches * QUOTA_COSTS["search.list"],
            "channel_lookups": self.channel_lookups * QUOTA_COSTS["channels.list"],
            "page_requests": self.page_requests * QUOTA_COSTS["playlistItems.list"],
            "total": self.total,
        }


def estimate_bulk_cost(video_count: int, channel: bool = False) -> QuotaEstimate:
    """Estimate quota cost of listing a playlist (or channel uploads).

    Args:
        video_count: Expected number of videos
        channel: Whether the channel must first be resolved by name

    Example:
        >>> estimate_bulk_cost(120, channel=True).total  # 100 + 1 + 3 pages
        104
    """
    pages = max(1, (video_count + PAGE_SIZE - 1) // PAGE_SIZE)
    return QuotaEstimate(
        searches=1 if channel else 0,
        channel_lookups=1 if channel else 0,
        page_requests=pages,
    )

