"""
App metadata model.

Built from the store lookup endpoint; referenced by the analysis report.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class AppInfo:
    """Store listing metadata for one application."""
    name: str = "Unknown App"
    developer: str = "Unknown Developer"
    rating: float = 0.0  # Average user rating
    rating_count: int = 0  # Total ratings on the store, not reviews collected
    logo_url: Optional[str] = None
    file_size_bytes: int = 0
    file_size_mb: float = 0.0
    release_date: Optional[str] = None
    current_version_release_date: Optional[str] = None
    days_on_store: int = 0

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "name": self.name,
            "developer": self.developer,
            "rating": self.rating,
            "rating_count": self.rating_count,
            "logo_url": self.logo_url,
            "file_size_bytes": self.file_size_bytes,
            "file_size_mb": self.file_size_mb,
            "release_date": self.release_date,
            "current_version_release_date": self.current_version_release_date,
            "days_on_store": self.days_on_store
        }


@dataclass
class SentimentSummary:
    """Rating-based sentiment counts."""
    positive: int = 0  # rating >= 4
    neutral: int = 0  # rating == 3
    negative: int = 0  # rating <= 2

    @property
    def total(self) -> int:
        return self.positive + self.neutral + self.negative

    def to_dict(self) -> dict:
        return {
            "positive": self.positive,
            "neutral": self.neutral,
            "negative": self.negative
        }
