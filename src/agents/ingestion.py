"""
Review Collection Agent.

Collects App Store reviews for one app across several regional variants
of the customer-review feed, deduplicating by (author, content).
"""

import logging
import math
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Tuple

from src.models.review import RegionYield, ReviewRecord
from src.utils.dates import timestamp_sort_key, utc_now_iso
from src.utils.feed_client import AppStoreFeedClient, FeedRequestError
import config.settings as settings

logger = logging.getLogger(__name__)


class FeedEntryError(ValueError):
    """A feed entry does not have the shape of a review entry."""


def build_region_order(primary_region: str, priority_regions: List[str]) -> List[str]:
    """
    Primary region first, then the priority list, without duplicates.

    Codes are compared lower-cased; the first occurrence wins.
    """
    order = []
    seen = set()
    for region in [primary_region] + list(priority_regions):
        code = region.lower()
        if code and code not in seen:
            seen.add(code)
            order.append(code)
    return order


def _label(entry: Dict, *path: str) -> Optional[str]:
    """Follow nested keys and return the final "label" value, if any."""
    node = entry
    for key in path + ("label",):
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    if node is None:
        return None
    return str(node)


def _parse_rating(raw: Optional[str]) -> int:
    if raw is None:
        return 0
    try:
        rating = int(float(raw.strip()))
    except (ValueError, OverflowError):
        return 0
    return rating if 0 <= rating <= 5 else 0


def parse_entry(
    entry,
    app_id: str,
    region: str,
    page: int,
    ordinal: int,
    collected_at: str
) -> ReviewRecord:
    """
    Build a ReviewRecord from one feed entry.

    Missing fields fall back to defaults; only an entry that is not a
    mapping at all is rejected.

    Args:
        entry: Raw feed entry
        app_id: App id, used to synthesize an id when the entry has none
        region: Region the entry was fetched from
        page: Feed page number
        ordinal: Position of the entry within the region batch
        collected_at: ISO timestamp used when the entry has no date

    Raises:
        FeedEntryError: If the entry is not a dict
    """
    if not isinstance(entry, dict):
        raise FeedEntryError(f"Expected a mapping, got {type(entry).__name__}")

    region_code = region.upper()

    return ReviewRecord(
        id=_label(entry, "id") or f"{app_id}-{region_code}-{page}-{ordinal}",
        title=_label(entry, "title") or "",
        content=_label(entry, "content") or "",
        rating=_parse_rating(_label(entry, "im:rating")),
        author=_label(entry, "author", "name") or "Anonymous",
        date=_label(entry, "updated") or collected_at,
        version=_label(entry, "im:version") or None,
        region=region_code
    )


def is_metadata_entry(entry) -> bool:
    """The app's own listing leads page 1 of the feed and carries no rating."""
    return not isinstance(entry, dict) or not entry.get("im:rating")


@dataclass
class CollectionState:
    """
    Accumulated result of a collection run.
    Threaded through merge_region_batch, one region at a time.
    """
    reviews: List[ReviewRecord] = field(default_factory=list)
    keys: Set[Tuple[str, str]] = field(default_factory=set)
    regions: List[str] = field(default_factory=list)  # Regions that contributed

    def __len__(self) -> int:
        return len(self.reviews)


def merge_region_batch(state: CollectionState, batch: RegionYield) -> CollectionState:
    """
    Merge one region's batch into the accumulated state.

    Records whose (author, content) key is already present are dropped.
    The input state is not modified.

    Returns:
        New CollectionState
    """
    reviews = list(state.reviews)
    keys = set(state.keys)
    regions = list(state.regions)

    added = 0
    for review in batch.reviews:
        if review.dedup_key in keys:
            continue
        keys.add(review.dedup_key)
        reviews.append(review)
        added += 1

    if added and batch.region.upper() not in regions:
        regions.append(batch.region.upper())

    logger.info(
        f"{batch.region.upper()}: {added} new unique reviews "
        f"({len(batch) - added} duplicates), total: {len(reviews)}"
    )
    return CollectionState(reviews=reviews, keys=keys, regions=regions)


def sort_by_date_desc(reviews: List[ReviewRecord]) -> List[ReviewRecord]:
    """Most recent first; equal dates keep their collection order."""
    return sorted(reviews, key=lambda r: timestamp_sort_key(r.date), reverse=True)


class ReviewCollector:
    """
    Collects reviews across regions until a target sample size is reached.

    Regions and pages are visited strictly in order, one request at a time,
    with short delays in between to keep the request rate polite.
    """

    def __init__(
        self,
        feed_client: Optional[AppStoreFeedClient] = None,
        priority_regions: Optional[List[str]] = None,
        max_per_region: int = settings.MAX_REVIEWS_PER_REGION,
        page_size: int = settings.PAGE_SIZE,
        page_ceiling: int = settings.PAGE_CEILING,
        min_full_page_entries: int = settings.MIN_FULL_PAGE_ENTRIES,
        page_delay_seconds: float = settings.PAGE_DELAY_SECONDS,
        region_delay_seconds: float = settings.REGION_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], str] = utc_now_iso
    ):
        """
        Initialize review collector.

        Args:
            feed_client: Client used for page requests
            priority_regions: Regions visited after the primary region
            max_per_region: Cap on reviews accepted from one region
            page_size: Entries per feed page
            page_ceiling: Highest page the feed serves
            min_full_page_entries: A page with fewer raw entries ends the region
            page_delay_seconds: Pause between page requests
            region_delay_seconds: Pause between regions
            sleep: Blocking sleep function
            clock: Returns the collection timestamp (ISO-8601)
        """
        self.feed_client = feed_client or AppStoreFeedClient()
        self.priority_regions = list(
            settings.PRIORITY_REGIONS if priority_regions is None else priority_regions
        )
        self.max_per_region = max_per_region
        self.page_size = page_size
        self.page_ceiling = page_ceiling
        self.min_full_page_entries = min_full_page_entries
        self.page_delay_seconds = page_delay_seconds
        self.region_delay_seconds = region_delay_seconds
        self.sleep = sleep
        self.clock = clock

        logger.info(
            f"Initialized ReviewCollector with {len(self.priority_regions)} priority regions, "
            f"max {self.max_per_region} per region over {self.max_pages} pages"
        )

    @property
    def max_pages(self) -> int:
        return min(self.page_ceiling, math.ceil(self.max_per_region / self.page_size))

    def collect_reviews(
        self,
        app_id: str,
        primary_region: str,
        target_count: int = settings.DEFAULT_TARGET_COUNT,
        cancel_event: Optional[threading.Event] = None
    ) -> List[ReviewRecord]:
        """
        Collect up to roughly target_count unique reviews.

        Args:
            app_id: App Store id
            primary_region: Region from the app's URL, visited first
            target_count: Stop visiting regions once this many are collected
            cancel_event: When set, collection stops at the next page boundary

        Returns:
            All accumulated reviews sorted by date descending. May exceed
            target_count by up to one region's batch; callers truncate.
        """
        if target_count <= 0:
            logger.warning(f"Non-positive target_count={target_count}, nothing to collect")
            return []

        regions = build_region_order(primary_region, self.priority_regions)
        collected_at = self.clock()
        state = CollectionState()

        logger.info(
            f"Collecting reviews for app {app_id} from up to {len(regions)} regions, "
            f"target: {target_count}"
        )

        for index, region in enumerate(regions):
            if self._cancelled(cancel_event):
                logger.warning("Collection cancelled, returning reviews gathered so far")
                break

            label = "primary" if index == 0 else "supplementary"
            logger.info(f"Collecting {region.upper()} reviews ({label} region)...")

            batch = self.collect_region(
                app_id=app_id,
                region=region,
                limit=self.max_per_region,
                collected_at=collected_at,
                cancel_event=cancel_event
            )
            logger.info(f"{region.upper()}: collected {len(batch)} reviews")

            state = merge_region_batch(state, batch)

            if len(state) >= target_count:
                logger.info(f"Reached target of {target_count} reviews, skipping remaining regions")
                break

            if index < len(regions) - 1:
                self.sleep(self.region_delay_seconds)

        reviews = sort_by_date_desc(state.reviews)
        logger.info(
            f"Collected {len(reviews)} reviews from {len(state.regions)} regions "
            f"({', '.join(state.regions) or 'none'})"
        )
        return reviews

    def collect_region(
        self,
        app_id: str,
        region: str,
        limit: int,
        collected_at: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> RegionYield:
        """
        Page through one region's feed.

        Failed pages are logged and skipped; the region ends on a 404,
        an empty page, a short page, or once limit reviews are accepted.

        Returns:
            RegionYield with reviews unique within this region
        """
        collected_at = collected_at or self.clock()
        batch = RegionYield(region=region.upper())
        batch_keys = set()

        for page in range(1, self.max_pages + 1):
            if len(batch) >= limit:
                break
            if self._cancelled(cancel_event):
                logger.warning(f"{region.upper()}: cancelled before page {page}")
                break

            if page > 1:
                self.sleep(self.page_delay_seconds)

            try:
                feed_page = self.feed_client.fetch_review_page(app_id, region, page)
            except FeedRequestError as e:
                logger.warning(f"{region.upper()} page {page}: {e}, skipping")
                continue

            if not feed_page.found:
                logger.info(f"{region.upper()} page {page}: not found, no more pages")
                break

            raw_entries = feed_page.entries
            entries = raw_entries
            if page == 1 and entries and is_metadata_entry(entries[0]):
                entries = entries[1:]
                logger.debug(f"{region.upper()} page 1: skipped app metadata entry")

            if not entries:
                logger.info(f"{region.upper()} page {page}: no review entries, stopping")
                break

            accepted = self._accept_entries(
                entries, app_id, region, page, collected_at, batch, batch_keys, limit
            )
            logger.debug(
                f"{region.upper()} page {page}: {accepted}/{len(entries)} accepted, "
                f"region total: {len(batch)}"
            )

            if len(raw_entries) < self.min_full_page_entries:
                logger.info(
                    f"{region.upper()} page {page}: only {len(raw_entries)} entries, "
                    f"treating as last page"
                )
                break

        return batch

    def _accept_entries(
        self,
        entries: List,
        app_id: str,
        region: str,
        page: int,
        collected_at: str,
        batch: RegionYield,
        batch_keys: Set[Tuple[str, str]],
        limit: int
    ) -> int:
        accepted = 0
        for entry in entries:
            if len(batch) >= limit:
                break
            try:
                review = parse_entry(
                    entry, app_id, region, page, len(batch), collected_at
                )
            except FeedEntryError as e:
                logger.warning(f"{region.upper()} page {page}: skipping malformed entry: {e}")
                continue

            if review.dedup_key in batch_keys:
                continue
            batch_keys.add(review.dedup_key)
            batch.reviews.append(review)
            accepted += 1
        return accepted

    @staticmethod
    def _cancelled(cancel_event: Optional[threading.Event]) -> bool:
        return cancel_event is not None and cancel_event.is_set()
