"""
Configuration settings for ReviewLens.

Centralized configuration for the collector, analysis and layout stages.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_ROOT = Path(os.getenv("REVIEWLENS_DATA_ROOT", str(PROJECT_ROOT / "data")))

# Upstream feed
FEED_BASE_URL = os.getenv("REVIEWLENS_FEED_BASE_URL", "https://itunes.apple.com")
REQUEST_TIMEOUT_SECONDS = int(os.getenv("REVIEWLENS_REQUEST_TIMEOUT", "15"))
USER_AGENT = os.getenv("REVIEWLENS_USER_AGENT", "Mozilla/5.0 (compatible; ReviewLens/0.1)")

# Review Collector
DEFAULT_TARGET_COUNT = 500
MAX_REVIEWS_PER_REGION = 500
PAGE_SIZE = 50  # Entries per feed page
PAGE_CEILING = 10  # Feed refuses pages beyond 10
MIN_FULL_PAGE_ENTRIES = 10  # Fewer raw entries than this means end of data
PAGE_DELAY_SECONDS = float(os.getenv("REVIEWLENS_PAGE_DELAY", "0.1"))
REGION_DELAY_SECONDS = float(os.getenv("REVIEWLENS_REGION_DELAY", "0.3"))

# Visited after the primary region, in this order
PRIORITY_REGIONS = [
    "us", "gb", "ca", "au", "de", "fr", "jp", "kr", "cn", "in",
    "br", "mx", "es", "it", "nl", "se", "no", "dk", "fi",
]

# Text analysis
WORD_FREQUENCY_LIMIT = 100
KEYWORD_TREND_TOP_N = 15

# Word cloud
WORD_CLOUD_WIDTH = 800
WORD_CLOUD_HEIGHT = 400
WORD_CLOUD_MAX_WORDS = 40

# Logging
LOG_LEVEL = os.getenv("REVIEWLENS_LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "reviewlens.log"


# Notes:
#
# 1. The customer-review feed serves at most 10 pages of 50 entries per
#    region, so one region never yields more than 500 reviews.
#
# 2. Delays are politeness throttles only; setting them to 0 does not
#    change which reviews are collected.
