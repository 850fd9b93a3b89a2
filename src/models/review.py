"""
Review data model.

Represents one App Store customer review and the per-region batches
produced while collecting them.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass
class ReviewRecord:
    """
    One user review parsed from the customer-review feed.
    Identity for deduplication is the (author, content) pair.
    """
    id: str  # Feed id, or "{app_id}-{region}-{page}-{ordinal}" when absent
    title: str = ""
    content: str = ""
    rating: int = 0  # 1-5 stars, 0 when the feed value is unparsable
    author: str = "Anonymous"
    date: str = ""  # ISO-8601 timestamp
    version: Optional[str] = None
    region: str = ""  # Upper-cased 2-letter code of the source feed

    def __post_init__(self):
        if not (0 <= self.rating <= 5):
            raise ValueError(f"Invalid rating: {self.rating}. Must be 0-5")
        self.region = self.region.upper()

    @property
    def dedup_key(self) -> Tuple[str, str]:
        return (self.author, self.content)

    @property
    def text(self) -> str:
        """Title and content joined, as consumed by text analysis."""
        return f"{self.title} {self.content}"

    @classmethod
    def from_dict(cls, data: dict) -> "ReviewRecord":
        """Create ReviewRecord from JSON dict."""
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            content=data.get("content", ""),
            rating=data.get("rating", 0),
            author=data.get("author", "Anonymous"),
            date=data.get("date", ""),
            version=data.get("version"),
            region=data.get("region", "")
        )

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "rating": self.rating,
            "author": self.author,
            "date": self.date,
            "version": self.version,
            "region": self.region
        }


@dataclass
class RegionYield:
    """
    Reviews collected from a single region during one collection run.
    Ephemeral: produced and merged within the same run.
    """
    region: str
    reviews: List[ReviewRecord] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.reviews)
