"""
Date helpers shared by the collector, app-info fetcher and analytics.
"""

from datetime import datetime, timezone
from typing import Optional

EPOCH_FLOOR = datetime.min.replace(tzinfo=timezone.utc)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp as emitted by the feed.

    Returns:
        Timezone-aware datetime (naive values are taken as UTC),
        or None if the value cannot be parsed
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def timestamp_sort_key(value: Optional[str]) -> datetime:
    """Sort key for review dates; unparsable dates sort as the oldest."""
    return parse_timestamp(value) or EPOCH_FLOOR


def days_since(value: Optional[str], now: Optional[datetime] = None) -> int:
    """Whole days elapsed since value, never negative; 0 when unparsable."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return 0
    now = now or datetime.now(timezone.utc)
    return max(0, (now - parsed).days)
