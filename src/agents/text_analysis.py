"""
Text Analysis Agent.

Regex tokenization, word frequency counting, keyword sentiment and
rating-based sentiment over collected reviews.
"""

import logging
import re
from collections import Counter
from typing import Iterable, List

from src.models.app_info import SentimentSummary
from src.models.review import ReviewRecord
from src.models.word_cloud import WordFrequency
import config.settings as settings

logger = logging.getLogger(__name__)


PUNCTUATION_PATTERN = re.compile(r"[^\w\s\u4e00-\u9fff]")
WHITESPACE_PATTERN = re.compile(r"\s+")
DIGITS_PATTERN = re.compile(r"^\d+$")
CJK_PATTERN = re.compile(r"[\u4e00-\u9fff]")
LATIN_PATTERN = re.compile(r"[a-zA-Z]")

STOP_WORDS = frozenset([
    # English
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
    "is", "are", "was", "were", "be", "been", "being", "have", "has", "had", "do", "does", "did",
    "will", "would", "could", "should", "may", "might", "can", "this", "that", "these", "those",
    "i", "you", "he", "she", "it", "we", "they", "me", "him", "her", "us", "them", "my", "your",
    "his", "its", "our", "their", "very", "good", "great", "nice", "like", "love",
    "really", "just", "get", "use", "using", "used", "make", "makes", "made", "work", "works",
    "working", "time", "way", "need", "want", "see", "know", "think", "go", "going", "come",
    "app", "application", "review", "rating", "star", "stars", "one", "two", "three", "four", "five",
    "first", "second", "third", "last", "next", "back", "best", "better",
    "much", "more", "most", "many", "lot", "lots", "some", "any", "all", "every", "each", "other",
    "same", "different", "new", "old", "right", "wrong", "long", "short", "big", "small", "high", "low",
    "easy", "hard", "fast", "slow", "free", "pay", "paid", "buy", "bought", "find", "found", "try", "tried",
    # Chinese
    "的", "了", "在", "是", "我", "有", "和", "就", "不", "人", "都", "一", "一个", "上", "也", "很", "到",
    "说", "要", "去", "你", "会", "着", "没有", "看", "好", "自己", "这", "那", "里", "下", "来", "个",
    "出", "为", "用", "对", "可以", "应用", "软件", "程序", "评价", "评论", "星", "分", "非常", "还是",
    "比较", "觉得", "感觉", "挺", "蛮", "太", "真的", "确实", "但是", "不过", "只是", "就是", "这个",
    "那个", "什么", "怎么", "这样", "那样", "如果", "因为",
])

POSITIVE_WORDS = [
    "good", "great", "excellent", "amazing", "awesome", "fantastic", "wonderful", "perfect",
    "love", "like", "enjoy", "helpful", "useful", "easy", "simple", "fast", "quick", "smooth",
    "beautiful", "nice", "cool", "fun", "interesting", "recommend", "impressive", "satisfied",
    "好", "很好", "不错", "棒", "赞", "优秀", "完美", "满意", "喜欢", "爱", "推荐", "有用", "方便", "简单",
    "快", "顺畅", "流畅", "漂亮", "美观", "清晰", "准确", "实用", "贴心", "人性化", "智能", "高效",
]

NEGATIVE_WORDS = [
    "bad", "terrible", "awful", "horrible", "worst", "hate", "dislike", "annoying", "frustrating",
    "slow", "crash", "bug", "error", "problem", "issue", "broken", "useless", "waste", "disappointed",
    "confusing", "complicated", "difficult", "hard", "expensive", "poor", "stupid", "sucks",
    "差", "糟糕", "垃圾", "烂", "讨厌", "失望", "问题", "错误", "卡", "慢", "崩溃", "闪退", "无用", "浪费",
    "复杂", "困难", "麻烦", "贵", "坑", "骗", "假", "欺骗", "不好用", "不方便", "不准确", "不满意",
]


def tokenize(text: str) -> List[str]:
    """Lower-case, strip punctuation (keeping CJK) and split on whitespace."""
    cleaned = PUNCTUATION_PATTERN.sub(" ", text.lower())
    return [token for token in WHITESPACE_PATTERN.split(cleaned) if len(token) > 1]


def analyze_word_frequency(
    texts: Iterable[str],
    limit: int = settings.WORD_FREQUENCY_LIMIT
) -> List[WordFrequency]:
    """
    Count word occurrences across texts.

    Stop words and pure numbers are ignored. Ties keep first-appearance order.

    Args:
        texts: Texts to analyze (typically review_texts(reviews))
        limit: Maximum number of words returned

    Returns:
        WordFrequency list sorted by count descending
    """
    counts = Counter()
    for token in tokenize(" ".join(texts)):
        if token in STOP_WORDS or DIGITS_PATTERN.match(token):
            continue
        counts[token] += 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]
    logger.info(f"Counted {len(counts)} distinct words, returning top {len(ranked)}")
    return [WordFrequency(word=word, count=count) for word, count in ranked]


def review_texts(reviews: Iterable[ReviewRecord]) -> List[str]:
    return [review.text for review in reviews]


def analyze_sentiment(text: str) -> str:
    """
    Keyword-based sentiment of a single text.

    Returns:
        "positive", "negative" or "neutral"
    """
    lowered = text.lower()
    positive = sum(1 for word in POSITIVE_WORDS if word in lowered)
    negative = sum(1 for word in NEGATIVE_WORDS if word in lowered)

    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"


def analyze_sentiment_by_rating(reviews: Iterable[ReviewRecord]) -> SentimentSummary:
    """Bucket reviews by star rating: >=4 positive, 3 neutral, <=2 negative."""
    summary = SentimentSummary()
    for review in reviews:
        if review.rating >= 4:
            summary.positive += 1
        elif review.rating == 3:
            summary.neutral += 1
        else:
            summary.negative += 1
    return summary


def clean_text(text: str) -> str:
    """Remove punctuation (keeping CJK) and collapse whitespace."""
    return WHITESPACE_PATTERN.sub(" ", PUNCTUATION_PATTERN.sub(" ", text)).strip()


def detect_language(text: str) -> str:
    """
    Rough language guess from character ratios.

    Returns:
        "zh", "en" or "mixed"
    """
    if not text:
        return "mixed"

    chinese_ratio = len(CJK_PATTERN.findall(text)) / len(text)
    english_ratio = len(LATIN_PATTERN.findall(text)) / len(text)

    if chinese_ratio > 0.3:
        return "zh"
    if english_ratio > 0.3:
        return "en"
    return "mixed"
