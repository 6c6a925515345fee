"""
Local classification heuristics.
Keyword and regex classifiers that run without any model call.
"""

import re
from typing import Dict, Iterable, List, Optional, Pattern

from app.config import KNOWN_COMPANIES, SENTIMENTS, DEFAULT_SENTIMENT


GENERAL = "general"


DEFAULT_INTENT_PATTERNS: Dict[str, str] = {
    "question": r"\b(how|what|where|when|why|who)\b",
    "support": r"\b(help|assist|support|problem|issue)\b",
    "purchase": r"\b(buy|purchase|order)\b",
    "appointment": r"\b(appointment|schedule|reschedule|book|booking)\b",
    "cancellation": r"\b(cancel|refund|return)\b",
    "emergency": r"\b(emergency|urgent|911|bleeding|unconscious|chest pain)\b",
    "medical": r"\b(doctor|symptoms?|pain|fever|prescription|medication|sick|check-?up)\b",
}


class RegexIntentClassifier:
    """
    Tags a message with every intent whose pattern matches.

    Patterns are evaluated in insertion order, so tag order is stable.
    """

    def __init__(self, patterns: Optional[Dict[str, str]] = None):
        patterns = patterns if patterns is not None else DEFAULT_INTENT_PATTERNS
        self._patterns: Dict[str, Pattern] = {
            tag: re.compile(pattern, re.IGNORECASE)
            for tag, pattern in patterns.items()
        }

    @property
    def vocabulary(self) -> List[str]:
        return list(self._patterns) + [GENERAL]

    def classify(self, text: str) -> List[str]:
        intents = [tag for tag, pattern in self._patterns.items() if pattern.search(text or "")]
        return intents or [GENERAL]


class KeywordCompanyDetector:
    """Finds the first known company mentioned in a block of text."""

    def __init__(self, companies: Optional[Iterable[str]] = None):
        self.companies = [c.lower() for c in (companies if companies is not None else KNOWN_COMPANIES)]

    def detect(self, texts: Iterable[str]) -> str:
        haystack = " ".join(texts).lower()
        for company in self.companies:
            if company in haystack:
                return company
        return GENERAL


POSITIVE_WORDS = {"happy", "great", "excellent", "good", "love", "like", "thank", "thanks", "perfect", "awesome"}
NEGATIVE_WORDS = {"bad", "terrible", "awful", "hate", "dislike", "angry", "upset", "frustrated", "worst", "broken"}


class KeywordSentimentScorer:
    """Counts positive and negative keyword hits; ties resolve to neutral."""

    def __init__(self, positive: Optional[Iterable[str]] = None, negative: Optional[Iterable[str]] = None):
        self.positive = set(positive) if positive is not None else POSITIVE_WORDS
        self.negative = set(negative) if negative is not None else NEGATIVE_WORDS

    def score(self, text: str) -> str:
        words = re.split(r"\W+", (text or "").lower())
        positive = sum(1 for w in words if w in self.positive)
        negative = sum(1 for w in words if w in self.negative)

        if positive > negative:
            return "positive"
        if negative > positive:
            return "negative"
        return DEFAULT_SENTIMENT


def normalize_sentiment(raw: Optional[str]) -> str:
    """Reduce a model's answer to one of the known sentiment buckets."""
    if not raw:
        return DEFAULT_SENTIMENT
    word = re.sub(r"[^a-z]", "", raw.strip().split()[0].lower()) if raw.strip() else ""
    return word if word in SENTIMENTS else DEFAULT_SENTIMENT


def should_regenerate_title(user_message_count: int, interval: int = 3) -> bool:
    """Titles refresh after the first user message and every ``interval`` after."""
    if user_message_count <= 0:
        return False
    return user_message_count == 1 or user_message_count % interval == 0


def clean_title(raw: Optional[str]) -> Optional[str]:
    """Strip quotes and trailing punctuation a model tends to add."""
    if not raw:
        return None
    title = raw.strip().splitlines()[0] if raw.strip() else ""
    title = re.sub(r"^(title:\s*)", "", title, flags=re.IGNORECASE)
    title = title.strip().strip("\"'").rstrip(".").strip()
    return title or None
