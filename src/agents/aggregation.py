"""
Review Analytics.

Aggregates collected reviews into time trends, rating distributions,
per-region and per-version breakdowns and keyword trends.
"""

import logging
from typing import Dict, List, Optional

import pandas as pd

from src.models.review import ReviewRecord
from src.models.word_cloud import WordFrequency
import config.settings as settings

logger = logging.getLogger(__name__)


REVIEW_COLUMNS = ["id", "title", "content", "rating", "author", "date", "version", "region"]

LENGTH_BUCKETS = [
    ("0-25", 0, 25),
    ("26-50", 26, 50),
    ("51-100", 51, 100),
    ("101-200", 101, 200),
    ("201+", 201, None),
]

COMMON_ISSUES = ["crash", "bug", "slow", "loading", "error", "freeze", "glitch", "problem"]


def _mean(series: pd.Series) -> float:
    return float(series.mean()) if len(series) else 0.0


class ReviewAnalytics:
    """
    Statistical views over one set of reviews.
    All results are plain JSON-serializable lists and dicts.
    """

    def __init__(self, reviews: List[ReviewRecord]):
        """
        Initialize analytics.

        Args:
            reviews: Reviews to analyze (any order)
        """
        self.reviews = list(reviews)
        self.df = self._build_frame(self.reviews)
        logger.debug(f"Built analytics frame with {len(self.df)} reviews")

    @staticmethod
    def _build_frame(reviews: List[ReviewRecord]) -> pd.DataFrame:
        df = pd.DataFrame([r.to_dict() for r in reviews], columns=REVIEW_COLUMNS)
        df["rating"] = df["rating"].astype(int)
        df["timestamp"] = pd.to_datetime(df["date"], utc=True, errors="coerce", format="ISO8601")
        df["day"] = df["timestamp"].dt.strftime("%Y-%m-%d")
        df["text"] = df["title"].fillna("").astype(str) + " " + df["content"].fillna("").astype(str)
        df["length"] = df["text"].str.len().astype(int)
        df["lower_text"] = df["text"].str.lower()
        return df

    def time_trends(self) -> List[Dict]:
        """Per-day review counts and average rating, oldest day first."""
        dated = self.df.dropna(subset=["timestamp"])
        trends = []
        for day, group in dated.groupby("day"):
            trends.append({
                "date": day,
                "review_count": int(len(group)),
                "average_rating": _mean(group["rating"]),
                "positive_count": int((group["rating"] >= 4).sum()),
                "negative_count": int((group["rating"] <= 2).sum())
            })
        return trends

    @staticmethod
    def _distribution(df: pd.DataFrame) -> List[Dict]:
        total = len(df)
        counts = df["rating"].value_counts()
        distribution = []
        for rating in range(1, 6):
            count = int(counts.get(rating, 0))
            distribution.append({
                "rating": rating,
                "count": count,
                "percentage": (count / total) * 100 if total else 0.0
            })
        return distribution

    def rating_distribution(self) -> List[Dict]:
        """Count and percentage of each star rating 1-5."""
        return self._distribution(self.df)

    def by_region(self) -> List[Dict]:
        """Per-region averages and distributions, largest region first."""
        regions = self.df["region"].fillna("").replace("", "Unknown")
        rows = []
        for region, group in self.df.groupby(regions, sort=False):
            rows.append({
                "region": region,
                "average_rating": _mean(group["rating"]),
                "total_reviews": int(len(group)),
                "rating_distribution": self._distribution(group)
            })
        return sorted(rows, key=lambda row: row["total_reviews"], reverse=True)

    def user_behavior(self) -> Dict:
        """Review length buckets, reviewer activity and length per rating."""
        length_distribution = []
        for label, low, high in LENGTH_BUCKETS:
            in_range = self.df["length"] >= low
            if high is not None:
                in_range &= self.df["length"] <= high
            bucket = self.df[in_range]
            length_distribution.append({
                "length_range": label,
                "count": int(len(bucket)),
                "average_rating": _mean(bucket["rating"])
            })

        author_counts = self.df["author"].value_counts()
        total_users = int(len(author_counts))
        single = int((author_counts == 1).sum())
        repeat = int((author_counts > 1).sum())
        user_activity = [
            {
                "user_type": "single_review",
                "count": single,
                "percentage": (single / total_users) * 100 if total_users else 0.0
            },
            {
                "user_type": "multiple_reviews",
                "count": repeat,
                "percentage": (repeat / total_users) * 100 if total_users else 0.0
            }
        ]

        rating_vs_length = []
        for rating in range(1, 6):
            lengths = self.df.loc[self.df["rating"] == rating, "length"]
            rating_vs_length.append({
                "rating": rating,
                "average_length": _mean(lengths),
                "count": int(len(lengths))
            })

        return {
            "review_length_distribution": length_distribution,
            "user_activity": user_activity,
            "rating_vs_length": rating_vs_length
        }

    def version_analysis(self) -> List[Dict]:
        """
        Per-version ratings and top issues.

        A version's release date is taken as its earliest review date.
        Reviews without a version are left out.
        """
        versioned = self.df[self.df["version"].fillna("") != ""]
        rows = []
        for version, group in versioned.groupby("version", sort=False):
            first_seen = group["timestamp"].min()
            negative = group[group["rating"] <= 2]
            rows.append({
                "version": version,
                "average_rating": _mean(group["rating"]),
                "review_count": int(len(group)),
                "release_date": None if pd.isna(first_seen) else first_seen.isoformat(),
                "positive_count": int((group["rating"] >= 4).sum()),
                "negative_count": int(len(negative)),
                "top_issues": self._top_issues(negative)
            })
        return sorted(rows, key=lambda row: (row["release_date"] is None, row["release_date"] or ""))

    @staticmethod
    def _top_issues(negative: pd.DataFrame, limit: int = 5) -> List[str]:
        counts = {}
        for issue in COMMON_ISSUES:
            hits = int(negative["lower_text"].str.contains(issue, regex=False).sum())
            if hits:
                counts[issue] = hits
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [issue for issue, _ in ranked[:limit]]

    def keyword_trends(
        self,
        word_frequency: List[WordFrequency],
        top_n: int = settings.KEYWORD_TREND_TOP_N
    ) -> Dict:
        """
        Daily mention counts for the most frequent keywords.

        Returns:
            {"top_keywords": [...], "trend_data": [{"date": ..., kw: n, ...}]}
        """
        keywords = [w.word for w in word_frequency[:top_n]]
        dated = self.df.dropna(subset=["timestamp"])

        trend_data = []
        for day, group in dated.groupby("day"):
            row = {"date": day}
            for keyword in keywords:
                row[keyword] = int(group["lower_text"].str.contains(keyword.lower(), regex=False).sum())
            trend_data.append(row)

        return {"top_keywords": keywords, "trend_data": trend_data}

    def summary(self, word_frequency: Optional[List[WordFrequency]] = None) -> Dict:
        """All analytics views in one dict."""
        logger.info(f"Computing analytics for {len(self.df)} reviews")
        return {
            "time_trends": self.time_trends(),
            "rating_distribution": self.rating_distribution(),
            "region_analysis": self.by_region(),
            "user_behavior": self.user_behavior(),
            "version_analysis": self.version_analysis(),
            "keyword_trends": self.keyword_trends(word_frequency or [])
        }
