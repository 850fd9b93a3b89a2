"""
Unit tests for the Review Collection Agent.

The feed is replaced by an in-memory fake; no network access.
"""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from src.agents.ingestion import (
    CollectionState,
    FeedEntryError,
    ReviewCollector,
    build_region_order,
    merge_region_batch,
    parse_entry,
    sort_by_date_desc,
)
from src.models.review import RegionYield, ReviewRecord
from src.utils.feed_client import FeedPage, FeedRequestError
import config.settings as settings


COLLECTED_AT = "2024-07-01T00:00:00+00:00"
BASE_DATE = datetime(2024, 6, 1, tzinfo=timezone.utc)

METADATA_ENTRY = {
    "id": {"label": "https://apps.apple.com/us/app/id123"},
    "im:name": {"label": "Some App"},
    "title": {"label": "Some App - Developer"},
}


def make_entry(n, region="us", author=None, content=None, date=None, rating="4"):
    """Feed entry shaped like the customer-review JSON feed."""
    return {
        "id": {"label": f"{region}-{n}"},
        "title": {"label": f"Title {n}"},
        "content": {"label": content or f"Review body {region} {n}"},
        "im:rating": {"label": rating},
        "im:version": {"label": "1.0"},
        "author": {"name": {"label": author or f"user_{region}_{n}"}},
        "updated": {"label": date or (BASE_DATE + timedelta(hours=n)).isoformat()},
    }


def make_entries(start, count, region="us"):
    return [make_entry(n, region=region) for n in range(start, start + count)]


class FakeFeedClient:
    """Serves canned pages; unknown regions/pages answer "not found"."""

    def __init__(self, pages_by_region, failures=None, on_request=None):
        self.pages_by_region = pages_by_region
        self.failures = failures or set()
        self.on_request = on_request
        self.requests = []

    def fetch_review_page(self, app_id, region, page):
        self.requests.append((region, page))
        if self.on_request:
            self.on_request(region, page)
        if (region, page) in self.failures:
            raise FeedRequestError(f"HTTP 500 for {region} page {page}")
        pages = self.pages_by_region.get(region, {})
        if page not in pages:
            return FeedPage(page=page, found=False)
        return FeedPage(page=page, entries=pages[page])


def make_collector(feed_client, **kwargs):
    return ReviewCollector(
        feed_client=feed_client,
        sleep=lambda seconds: None,
        clock=lambda: COLLECTED_AT,
        **kwargs
    )


@pytest.fixture
def three_page_feed():
    """us: page 1 = metadata + 24 reviews, page 2 = 24 reviews, page 3 = empty."""
    return FakeFeedClient({
        "us": {
            1: [METADATA_ENTRY] + make_entries(0, 24),
            2: make_entries(24, 24),
            3: [],
        }
    })


def test_region_order_primary_first_without_duplicates():
    order = build_region_order("GB", ["us", "gb", "ca", "us"])
    assert order == ["gb", "us", "ca"]


def test_region_order_default_priority_list():
    order = build_region_order("jp", settings.PRIORITY_REGIONS)
    assert order[0] == "jp"
    assert len(order) == len(settings.PRIORITY_REGIONS)
    assert len(set(order)) == len(order)


def test_parse_entry_full_fields():
    review = parse_entry(make_entry(3, rating="2"), "123", "us", 1, 0, COLLECTED_AT)

    assert review.id == "us-3"
    assert review.title == "Title 3"
    assert review.rating == 2
    assert review.author == "user_us_3"
    assert review.version == "1.0"
    assert review.region == "US"


def test_parse_entry_defaults_missing_fields():
    review = parse_entry({"im:rating": {"label": "5"}}, "123", "gb", 2, 7, COLLECTED_AT)

    assert review.id == "123-GB-2-7"
    assert review.title == ""
    assert review.content == ""
    assert review.author == "Anonymous"
    assert review.date == COLLECTED_AT
    assert review.version is None
    assert review.rating == 5


def test_parse_entry_unparsable_rating_is_zero():
    for raw in ["five", "", "9", "-1"]:
        review = parse_entry(make_entry(1, rating=raw), "123", "us", 1, 0, COLLECTED_AT)
        assert review.rating == 0


def test_parse_entry_rejects_non_mapping():
    with pytest.raises(FeedEntryError):
        parse_entry(["not", "an", "entry"], "123", "us", 1, 0, COLLECTED_AT)


def test_collects_three_page_region_scenario(three_page_feed):
    """Metadata skipped, 48 unique reviews, no request past the empty page."""
    collector = make_collector(three_page_feed)

    reviews = collector.collect_reviews("123", "us", target_count=50)

    assert len(reviews) == 48
    assert all(r.region == "US" for r in reviews)
    assert len({r.dedup_key for r in reviews}) == 48
    assert ("us", 3) in three_page_feed.requests
    assert ("us", 4) not in three_page_feed.requests

    dates = [datetime.fromisoformat(r.date) for r in reviews]
    assert all(a >= b for a, b in zip(dates, dates[1:]))


def test_stops_visiting_regions_once_target_reached():
    feed = FakeFeedClient({
        "us": {1: make_entries(0, 24), 2: make_entries(24, 24), 3: []},
        "gb": {1: make_entries(0, 24, region="gb"), 2: []},
    })
    collector = make_collector(feed)

    reviews = collector.collect_reviews("123", "us", target_count=60)

    # Full accumulated set is returned, not truncated to the target
    assert len(reviews) == 72
    assert {r.region for r in reviews} == {"US", "GB"}
    requested_regions = {region for region, _ in feed.requests}
    assert requested_regions == {"us", "gb"}


def test_primary_region_is_visited_first():
    feed = FakeFeedClient({"de": {1: make_entries(0, 12, region="de"), 2: []}})
    collector = make_collector(feed, priority_regions=["us", "de", "fr"])

    reviews = collector.collect_reviews("123", "DE", target_count=10)

    assert feed.requests[0] == ("de", 1)
    assert len(reviews) == 12
    assert all(r.region == "DE" for r in reviews)


def test_cross_region_duplicates_are_dropped():
    shared = [make_entry(n, region="us") for n in range(12)]
    gb_page = [
        make_entry(100 + n, region="gb", author=e["author"]["name"]["label"],
                   content=e["content"]["label"])
        for n, e in enumerate(shared[:5])
    ] + make_entries(200, 7, region="gb")

    feed = FakeFeedClient({
        "us": {1: shared, 2: []},
        "gb": {1: gb_page, 2: []},
    })
    collector = make_collector(feed, priority_regions=["gb"])

    reviews = collector.collect_reviews("123", "us", target_count=100)

    assert len(reviews) == 12 + 7
    assert len({r.dedup_key for r in reviews}) == len(reviews)
    # The surviving copy keeps the region it was first collected from
    first_shared = next(r for r in reviews if r.content == shared[0]["content"]["label"])
    assert first_shared.region == "US"


def test_duplicates_within_region_are_dropped():
    page_1 = make_entries(0, 12)
    page_2 = [make_entry(0)] + make_entries(12, 11)
    feed = FakeFeedClient({"us": {1: page_1, 2: page_2, 3: []}})
    collector = make_collector(feed, priority_regions=[])

    batch = collector.collect_region("123", "us", limit=500, collected_at=COLLECTED_AT)

    assert len(batch) == 23
    assert len({r.dedup_key for r in batch.reviews}) == 23


def test_failed_page_is_skipped_and_paging_continues():
    feed = FakeFeedClient(
        {"us": {2: make_entries(0, 24), 3: []}},
        failures={("us", 1)}
    )
    collector = make_collector(feed, priority_regions=[])

    reviews = collector.collect_reviews("123", "us", target_count=100)

    assert len(reviews) == 24
    assert feed.requests[:3] == [("us", 1), ("us", 2), ("us", 3)]


def test_short_page_ends_region():
    feed = FakeFeedClient({"us": {1: [METADATA_ENTRY] + make_entries(0, 5), 2: make_entries(5, 24)}})
    collector = make_collector(feed, priority_regions=[])

    reviews = collector.collect_reviews("123", "us", target_count=100)

    assert len(reviews) == 5
    assert ("us", 2) not in feed.requests


def test_metadata_skip_only_applies_to_first_page():
    page_2 = [{"content": {"label": "no rating here"}, "author": {"name": {"label": "x"}}}]
    page_2 += make_entries(24, 11)
    feed = FakeFeedClient({"us": {1: make_entries(0, 24), 2: page_2, 3: []}})
    collector = make_collector(feed, priority_regions=[])

    reviews = collector.collect_reviews("123", "us", target_count=100)

    assert len(reviews) == 24 + 12
    unrated = [r for r in reviews if r.content == "no rating here"]
    assert len(unrated) == 1
    assert unrated[0].rating == 0


def test_first_entry_with_rating_is_not_skipped():
    feed = FakeFeedClient({"us": {1: make_entries(0, 12), 2: []}})
    collector = make_collector(feed, priority_regions=[])

    reviews = collector.collect_reviews("123", "us", target_count=100)

    assert len(reviews) == 12


def test_per_region_cap_limits_pages():
    feed = FakeFeedClient({"us": {p: make_entries(p * 100, 24) for p in range(1, 11)}})
    collector = make_collector(feed, priority_regions=[], max_per_region=30, page_size=10)

    assert collector.max_pages == 3

    reviews = collector.collect_reviews("123", "us", target_count=100)

    assert len(reviews) == 30
    assert ("us", 3) not in feed.requests


def test_default_max_pages():
    collector = make_collector(FakeFeedClient({}))
    assert collector.max_pages == 10


def test_malformed_entry_is_skipped():
    entries = make_entries(0, 6) + ["garbage"] + make_entries(6, 6)
    feed = FakeFeedClient({"us": {1: entries, 2: []}})
    collector = make_collector(feed, priority_regions=[])

    reviews = collector.collect_reviews("123", "us", target_count=100)

    assert len(reviews) == 12


def test_total_failure_returns_empty_list():
    failures = {(r, p) for r in ["us", "gb"] for p in range(1, 11)}
    feed = FakeFeedClient({}, failures=failures)
    collector = make_collector(feed, priority_regions=["gb"])

    assert collector.collect_reviews("123", "us", target_count=10) == []


def test_non_positive_target_makes_no_requests():
    feed = FakeFeedClient({"us": {1: make_entries(0, 24)}})
    collector = make_collector(feed)

    assert collector.collect_reviews("123", "us", target_count=0) == []
    assert feed.requests == []


def test_cancelled_before_start_makes_no_requests(three_page_feed):
    cancel = threading.Event()
    cancel.set()
    collector = make_collector(three_page_feed)

    assert collector.collect_reviews("123", "us", target_count=50, cancel_event=cancel) == []
    assert three_page_feed.requests == []


def test_cancel_during_collection_returns_partial_result():
    cancel = threading.Event()

    def cancel_after_first_page(region, page):
        if (region, page) == ("us", 1):
            cancel.set()

    feed = FakeFeedClient(
        {"us": {1: make_entries(0, 24), 2: make_entries(24, 24)}},
        on_request=cancel_after_first_page
    )
    collector = make_collector(feed)

    reviews = collector.collect_reviews("123", "us", target_count=500, cancel_event=cancel)

    assert len(reviews) == 24
    assert feed.requests == [("us", 1)]


def test_delays_between_pages_and_regions():
    sleeps = []
    feed = FakeFeedClient({"us": {1: make_entries(0, 24), 2: []}})
    collector = ReviewCollector(
        feed_client=feed,
        priority_regions=["gb"],
        page_delay_seconds=0.1,
        region_delay_seconds=0.3,
        sleep=sleeps.append,
        clock=lambda: COLLECTED_AT
    )

    collector.collect_reviews("123", "us", target_count=100)

    # us page 2, then region switch; gb stops at page 1
    assert sleeps == [0.1, 0.3]


def test_merge_region_batch_does_not_mutate_input():
    first = ReviewRecord(id="1", content="same", author="a", date="2024-06-01T00:00:00Z", region="us")
    duplicate = ReviewRecord(id="2", content="same", author="a", date="2024-06-02T00:00:00Z", region="gb")
    other = ReviewRecord(id="3", content="different", author="a", date="2024-06-02T00:00:00Z", region="gb")

    state = merge_region_batch(CollectionState(), RegionYield("US", [first]))
    merged = merge_region_batch(state, RegionYield("GB", [duplicate, other]))

    assert len(state) == 1
    assert [r.id for r in merged.reviews] == ["1", "3"]
    assert merged.regions == ["US", "GB"]


def test_sort_by_date_is_stable_for_equal_dates():
    reviews = [
        ReviewRecord(id="a", date="2024-06-01T00:00:00Z"),
        ReviewRecord(id="b", date="2024-06-03T00:00:00Z"),
        ReviewRecord(id="c", date="2024-06-01T00:00:00+00:00"),
        ReviewRecord(id="d", date="not a date"),
    ]

    ordered = sort_by_date_desc(reviews)

    assert [r.id for r in ordered] == ["b", "a", "c", "d"]


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
