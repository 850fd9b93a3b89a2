"""
Unit tests for the App Info Agent.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from src.agents.app_info import AppInfoFetcher, bytes_to_mb
from src.utils.feed_client import FeedRequestError


LOOKUP_RECORD = {
    "trackName": "Notes Pro",
    "artistName": "Acme Inc.",
    "averageUserRating": 4.6,
    "userRatingCount": 12345,
    "artworkUrl100": "https://img.test/100.png",
    "artworkUrl60": "https://img.test/60.png",
    "fileSizeBytes": "52428800",
    "currentVersionReleaseDate": "2024-05-01T07:00:00Z",
}


def test_bytes_to_mb():
    assert bytes_to_mb(52428800) == 50.0
    assert bytes_to_mb(1234567) == 1.18


def test_from_lookup_maps_fields():
    release = (datetime.now(timezone.utc) - timedelta(days=400)).isoformat()
    info = AppInfoFetcher.from_lookup({**LOOKUP_RECORD, "releaseDate": release})

    assert info.name == "Notes Pro"
    assert info.developer == "Acme Inc."
    assert info.rating == pytest.approx(4.6)
    assert info.rating_count == 12345
    assert info.logo_url == "https://img.test/100.png"
    assert info.file_size_bytes == 52428800
    assert info.file_size_mb == 50.0
    assert info.days_on_store in (399, 400)


def test_from_lookup_defaults():
    info = AppInfoFetcher.from_lookup({"fileSizeBytes": "n/a"})

    assert info.name == "Unknown App"
    assert info.developer == "Unknown Developer"
    assert info.rating == 0.0
    assert info.rating_count == 0
    assert info.logo_url is None
    assert info.file_size_mb == 0.0
    assert info.days_on_store == 0


def test_future_release_date_is_zero_days():
    future = (datetime.now(timezone.utc) + timedelta(days=30)).isoformat()
    assert AppInfoFetcher.from_lookup({"releaseDate": future}).days_on_store == 0


def test_fetch_returns_app_info():
    client = Mock()
    client.lookup_app.return_value = LOOKUP_RECORD

    info = AppInfoFetcher(client).fetch("123", "us")

    assert info.name == "Notes Pro"
    client.lookup_app.assert_called_once_with("123", "us")


def test_fetch_returns_none_when_unknown():
    client = Mock()
    client.lookup_app.return_value = None

    assert AppInfoFetcher(client).fetch("123", "us") is None


def test_fetch_returns_none_on_request_error():
    client = Mock()
    client.lookup_app.side_effect = FeedRequestError("HTTP 500")

    assert AppInfoFetcher(client).fetch("123", "us") is None


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
