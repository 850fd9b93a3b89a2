"""
Pipeline Orchestrator.

Runs collection, analysis, layout and persistence for one App Store URL.
"""

import logging
import threading
from datetime import datetime
from typing import Dict, Optional

from src.agents.aggregation import ReviewAnalytics
from src.agents.app_info import AppInfoFetcher
from src.agents.ingestion import ReviewCollector
from src.agents.text_analysis import (
    analyze_sentiment_by_rating,
    analyze_word_frequency,
    review_texts,
)
from src.layout.word_cloud import WordCloudLayoutEngine
from src.utils.dates import utc_now_iso
from src.utils.feed_client import AppStoreFeedClient, parse_app_store_url
from src.utils.storage import StorageManager
import config.settings as settings

logger = logging.getLogger(__name__)


class AppNotFoundError(Exception):
    """The store lookup returned no metadata for the app."""


class NoReviewsError(Exception):
    """Collection finished without a single review."""


class AnalysisOrchestrator:
    """
    Orchestrates one analysis run.

    Stages:
    1. URL parsing → 2. App info → 3. Review collection
    → 4. Word frequency + sentiment → 5. Analytics → 6. Word cloud → 7. Save
    """

    def __init__(
        self,
        data_root: str,
        feed_client: Optional[AppStoreFeedClient] = None,
        collector: Optional[ReviewCollector] = None,
        layout_engine: Optional[WordCloudLayoutEngine] = None,
        canvas_width: int = settings.WORD_CLOUD_WIDTH,
        canvas_height: int = settings.WORD_CLOUD_HEIGHT,
        max_words: int = settings.WORD_CLOUD_MAX_WORDS
    ):
        """
        Initialize pipeline orchestrator.

        Args:
            data_root: Root directory for outputs
            feed_client: Shared client for lookup and review requests
            collector: Review collector (built from feed_client if omitted)
            layout_engine: Word cloud layout engine
            canvas_width: Word cloud canvas width in pixels
            canvas_height: Word cloud canvas height in pixels
            max_words: Maximum words placed in the word cloud
        """
        logger.info("Initializing pipeline components...")

        self.feed_client = feed_client or AppStoreFeedClient()
        self.storage = StorageManager(data_root)
        self.app_info_fetcher = AppInfoFetcher(self.feed_client)
        self.collector = collector or ReviewCollector(self.feed_client)
        self.layout_engine = layout_engine or WordCloudLayoutEngine()
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.max_words = max_words

        logger.info("Pipeline initialized successfully")

    def run(
        self,
        app_url: str,
        target_count: int = settings.DEFAULT_TARGET_COUNT,
        analysis_limit: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> Dict:
        """
        Analyze the reviews of one app.

        Args:
            app_url: App Store URL, e.g. https://apps.apple.com/us/app/x/id123
            target_count: Reviews to collect before stopping
            analysis_limit: If set, only the newest N collected reviews are analyzed
            cancel_event: Stops collection early when set

        Returns:
            Report dict (also saved under data_root/reports)

        Raises:
            ValueError: If app_url is not an App Store app URL
            AppNotFoundError: If the store has no metadata for the app
            NoReviewsError: If no reviews could be collected
        """
        parsed = parse_app_store_url(app_url)
        if parsed is None:
            raise ValueError(f"Invalid App Store URL: {app_url}")
        app_id, region = parsed

        logger.info(f"Starting analysis for app {app_id} (region {region.upper()})")
        start_time = datetime.now()

        # STAGE 1: App info
        app_info = self.app_info_fetcher.fetch(app_id, region)
        if app_info is None:
            raise AppNotFoundError(f"Failed to fetch app information for {app_id}")

        # STAGE 2: Collection
        collected = self.collector.collect_reviews(
            app_id=app_id,
            primary_region=region,
            target_count=target_count,
            cancel_event=cancel_event
        )
        if not collected:
            raise NoReviewsError(f"No reviews found for app {app_id}")

        self.storage.save_reviews(collected, app_id)

        reviews = collected
        if analysis_limit is not None and analysis_limit > 0:
            reviews = collected[:analysis_limit]
        logger.info(f"Analyzing {len(reviews)} of {len(collected)} collected reviews")

        # STAGE 3: Text analysis
        word_frequency = analyze_word_frequency(review_texts(reviews))
        sentiment = analyze_sentiment_by_rating(reviews)

        # STAGE 4: Analytics
        analytics = ReviewAnalytics(reviews).summary(word_frequency)

        # STAGE 5: Word cloud
        word_cloud = self.layout_engine.layout(
            word_frequency, self.canvas_width, self.canvas_height, self.max_words
        )

        regions_collected = sorted({r.region for r in collected if r.region})
        processing_time = (datetime.now() - start_time).total_seconds()

        report = {
            "app_id": app_id,
            "app_info": app_info.to_dict(),
            "total_reviews": len(reviews),
            "collected_reviews": len(collected),
            "word_frequency": [w.to_dict() for w in word_frequency],
            "sentiment": sentiment.to_dict(),
            "analytics": analytics,
            "word_cloud": {
                "width": self.canvas_width,
                "height": self.canvas_height,
                "words": [p.to_dict() for p in word_cloud]
            },
            "data_source": {
                "source": "iTunes customer reviews RSS feed (multi-region)",
                "limitation": "Recent reviews only, collected from multiple regions",
                "total_app_ratings": app_info.rating_count,
                "regions_collected": regions_collected
            },
            "metadata": {
                "generated_at": utc_now_iso(),
                "processing_time_seconds": processing_time,
                "target_count": target_count,
                "analysis_limit": analysis_limit
            }
        }

        report_path = self.storage.save_report(report, app_id)
        export_paths = self.storage.export_csv(reviews, word_frequency, app_id)
        report["outputs"] = {"report": report_path, **export_paths}

        logger.info(
            f"Analysis complete for {app_info.name}: {len(reviews)} reviews, "
            f"{len(word_frequency)} keywords, {len(word_cloud)} words placed"
        )
        return report
