"""
App Info Agent.

Fetches store listing metadata (name, developer, ratings, size, dates)
for the app being analyzed.
"""

import logging
from typing import Dict, Optional

from src.models.app_info import AppInfo
from src.utils.dates import days_since
from src.utils.feed_client import AppStoreFeedClient, FeedRequestError

logger = logging.getLogger(__name__)


def bytes_to_mb(size_bytes: int) -> float:
    return round(size_bytes / (1024 * 1024), 2)


class AppInfoFetcher:
    """Builds AppInfo from the store lookup endpoint."""

    def __init__(self, feed_client: Optional[AppStoreFeedClient] = None):
        self.feed_client = feed_client or AppStoreFeedClient()

    def fetch(self, app_id: str, region: str) -> Optional[AppInfo]:
        """
        Fetch metadata for an app.

        Returns:
            AppInfo, or None if the lookup failed or found nothing
        """
        try:
            record = self.feed_client.lookup_app(app_id, region)
        except FeedRequestError as e:
            logger.error(f"Failed to fetch app info for {app_id} ({region}): {e}")
            return None

        if not record:
            logger.warning(f"No lookup result for app {app_id} in {region.upper()}")
            return None

        app_info = self.from_lookup(record)
        logger.info(
            f"Fetched app info: {app_info.name} by {app_info.developer} "
            f"({app_info.rating_count} ratings)"
        )
        return app_info

    @staticmethod
    def from_lookup(record: Dict) -> AppInfo:
        """Convert one lookup result into AppInfo, defaulting missing fields."""
        try:
            file_size_bytes = int(record.get("fileSizeBytes") or 0)
        except (TypeError, ValueError):
            file_size_bytes = 0

        release_date = record.get("releaseDate")

        return AppInfo(
            name=record.get("trackName") or "Unknown App",
            developer=record.get("artistName") or "Unknown Developer",
            rating=float(record.get("averageUserRating") or 0),
            rating_count=int(record.get("userRatingCount") or 0),
            logo_url=(
                record.get("artworkUrl512")
                or record.get("artworkUrl100")
                or record.get("artworkUrl60")
            ),
            file_size_bytes=file_size_bytes,
            file_size_mb=bytes_to_mb(file_size_bytes) if file_size_bytes else 0.0,
            release_date=release_date,
            current_version_release_date=record.get("currentVersionReleaseDate"),
            days_on_store=days_since(release_date)
        )
