"""
App Store feed client.

HTTP access to the public customer-review RSS feed and the lookup endpoint.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import requests

import config.settings as settings

logger = logging.getLogger(__name__)


APP_STORE_URL_PATTERN = re.compile(
    r"^https://apps\.apple\.com/([a-z]{2})/app/[^/]+/id(\d+)"
)


class FeedRequestError(Exception):
    """A feed page or lookup could not be fetched or decoded."""


def parse_app_store_url(url: str) -> Optional[Tuple[str, str]]:
    """
    Extract app id and region from an App Store URL.

    Args:
        url: e.g. "https://apps.apple.com/us/app/some-app/id1234567890"

    Returns:
        (app_id, region) tuple, or None if the URL is not an App Store app URL
    """
    if not url:
        return None

    match = APP_STORE_URL_PATTERN.match(url.strip())
    if not match:
        return None

    region, app_id = match.group(1), match.group(2)
    return app_id, region


@dataclass
class FeedPage:
    """One page of the customer-review feed."""
    page: int
    found: bool = True  # False when the feed answered "not found"
    entries: List[Dict] = field(default_factory=list)


class AppStoreFeedClient:
    """
    Thin wrapper around a requests session for the App Store endpoints.
    """

    REVIEWS_PATH = "/{region}/rss/customerreviews/page={page}/id={app_id}/sortby=mostrecent/json"
    LOOKUP_PATH = "/lookup"

    def __init__(
        self,
        base_url: str = settings.FEED_BASE_URL,
        timeout_seconds: int = settings.REQUEST_TIMEOUT_SECONDS,
        user_agent: str = settings.USER_AGENT,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize feed client.

        Args:
            base_url: Feed host, without trailing slash
            timeout_seconds: Per-request timeout
            user_agent: User-Agent header sent with every request
            session: Optional pre-built session (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

        logger.debug(f"Initialized AppStoreFeedClient with base_url={self.base_url}")

    def review_page_url(self, app_id: str, region: str, page: int) -> str:
        path = self.REVIEWS_PATH.format(region=region.lower(), page=page, app_id=app_id)
        return f"{self.base_url}{path}"

    def fetch_review_page(self, app_id: str, region: str, page: int) -> FeedPage:
        """
        Fetch one page of reviews.

        Args:
            app_id: Numeric App Store id
            region: 2-letter region code
            page: 1-based page number

        Returns:
            FeedPage; found=False when the feed answers 404

        Raises:
            FeedRequestError: On transport errors, other non-2xx statuses,
                or an undecodable body
        """
        url = self.review_page_url(app_id, region, page)
        logger.debug(f"GET {url}")

        try:
            response = self.session.get(url, timeout=self.timeout_seconds)
        except requests.exceptions.RequestException as e:
            raise FeedRequestError(f"Request failed for {url}: {e}") from e

        if response.status_code == 404:
            return FeedPage(page=page, found=False)

        if not response.ok:
            raise FeedRequestError(f"HTTP {response.status_code} for {url}")

        try:
            data = response.json()
        except ValueError as e:
            raise FeedRequestError(f"Invalid JSON from {url}: {e}") from e

        return FeedPage(page=page, entries=self._extract_entries(data))

    def lookup_app(self, app_id: str, region: str) -> Optional[Dict]:
        """
        Look up store metadata for an app.

        Returns:
            First lookup result dict, or None if the app is unknown

        Raises:
            FeedRequestError: On transport errors, non-2xx statuses,
                or an undecodable body
        """
        url = f"{self.base_url}{self.LOOKUP_PATH}"
        params = {"id": app_id, "country": region.lower()}

        try:
            response = self.session.get(url, params=params, timeout=self.timeout_seconds)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise FeedRequestError(f"Lookup failed for app {app_id}: {e}") from e
        except ValueError as e:
            raise FeedRequestError(f"Invalid lookup JSON for app {app_id}: {e}") from e

        results = data.get("results") if isinstance(data, dict) else None
        if not results:
            return None
        return results[0]

    @staticmethod
    def _extract_entries(data) -> List[Dict]:
        """Pull feed.entry out of the payload; a single entry arrives as a dict."""
        if not isinstance(data, dict):
            return []
        feed = data.get("feed")
        if not isinstance(feed, dict):
            return []
        entries = feed.get("entry", [])
        if isinstance(entries, dict):
            return [entries]
        if not isinstance(entries, list):
            return []
        return entries
