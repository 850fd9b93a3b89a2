"""
Storage utility.

File I/O helpers for collected reviews, analysis reports and CSV exports.
"""

import json
import logging
import os
from typing import Dict, List, Optional

import pandas as pd

from src.models.review import ReviewRecord
from src.models.word_cloud import WordFrequency

logger = logging.getLogger(__name__)


REVIEW_EXPORT_COLUMNS = ["id", "title", "content", "rating", "author", "date", "version", "region"]


class StorageManager:
    """
    Manages file I/O for pipeline outputs.

    Handles:
    - Collected reviews (data/raw/{app_id}.json)
    - Analysis reports (data/reports/{app_id}_report.json)
    - CSV exports (data/reports/{app_id}_reviews.csv, {app_id}_words.csv)
    """

    def __init__(self, data_root: str):
        """
        Initialize storage manager.

        Args:
            data_root: Root data directory (e.g., /path/to/data)
        """
        self.data_root = data_root
        self.raw_dir = os.path.join(data_root, "raw")
        self.reports_dir = os.path.join(data_root, "reports")

        os.makedirs(self.raw_dir, exist_ok=True)
        os.makedirs(self.reports_dir, exist_ok=True)

        logger.info(f"Initialized StorageManager with data_root={data_root}")

    def save_reviews(self, reviews: List[ReviewRecord], app_id: str) -> str:
        """
        Save collected reviews for an app.

        Returns:
            Path of the written file
        """
        filepath = os.path.join(self.raw_dir, f"{app_id}.json")

        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump([r.to_dict() for r in reviews], f, indent=2, ensure_ascii=False)
            logger.info(f"Saved {len(reviews)} reviews to {filepath}")
        except Exception as e:
            logger.error(f"Failed to save reviews for {app_id}: {e}")
            raise
        return filepath

    def load_reviews(self, app_id: str) -> Optional[List[ReviewRecord]]:
        """
        Load previously collected reviews.

        Returns:
            List of ReviewRecord, or None if missing or unreadable
        """
        filepath = os.path.join(self.raw_dir, f"{app_id}.json")

        if not os.path.exists(filepath):
            logger.warning(f"No saved reviews found for {app_id}")
            return None

        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
            reviews = [ReviewRecord.from_dict(item) for item in data]
            logger.debug(f"Loaded {len(reviews)} reviews from {filepath}")
            return reviews
        except Exception as e:
            logger.error(f"Failed to load reviews for {app_id}: {e}")
            return None

    def save_report(self, report: Dict, app_id: str) -> str:
        """
        Save the analysis report.

        Returns:
            Path of the written file
        """
        filepath = os.path.join(self.reports_dir, f"{app_id}_report.json")

        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(report, f, indent=2, ensure_ascii=False)
            logger.info(f"Saved analysis report to {filepath}")
        except Exception as e:
            logger.error(f"Failed to save report for {app_id}: {e}")
            raise
        return filepath

    def load_report(self, app_id: str) -> Optional[Dict]:
        filepath = os.path.join(self.reports_dir, f"{app_id}_report.json")

        if not os.path.exists(filepath):
            logger.debug(f"No report found for {app_id}")
            return None

        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                return json.load(f)
        except Exception as e:
            logger.error(f"Failed to load report for {app_id}: {e}")
            return None

    def export_csv(
        self,
        reviews: List[ReviewRecord],
        word_frequency: List[WordFrequency],
        app_id: str
    ) -> Dict[str, str]:
        """
        Export reviews and word frequencies as CSV tables.

        Returns:
            {"reviews": path, "words": path}
        """
        reviews_path = os.path.join(self.reports_dir, f"{app_id}_reviews.csv")
        words_path = os.path.join(self.reports_dir, f"{app_id}_words.csv")

        reviews_df = pd.DataFrame([r.to_dict() for r in reviews], columns=REVIEW_EXPORT_COLUMNS)

        words_df = pd.DataFrame([w.to_dict() for w in word_frequency], columns=["word", "count"])
        total_words = int(words_df["count"].sum()) if not words_df.empty else 0
        words_df.insert(0, "rank", range(1, len(words_df) + 1))
        words_df["percentage"] = (
            (words_df["count"] / total_words * 100).round(2) if total_words else 0.0
        )

        try:
            reviews_df.to_csv(reviews_path, index=False, encoding="utf-8-sig")
            words_df.to_csv(words_path, index=False, encoding="utf-8-sig")
        except Exception as e:
            logger.error(f"Failed to export CSV for {app_id}: {e}")
            raise

        logger.info(
            f"Exported {len(reviews_df)} reviews to {reviews_path} "
            f"and {len(words_df)} words to {words_path}"
        )
        return {"reviews": reviews_path, "words": words_path}
