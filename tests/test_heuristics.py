"""Tests for the local intent, company and sentiment heuristics."""

from app.core.heuristics import (
    KeywordCompanyDetector,
    KeywordSentimentScorer,
    RegexIntentClassifier,
    clean_title,
    normalize_sentiment,
    should_regenerate_title,
)


def test_cancel_order_intents():
    """Tags come back in vocabulary order."""
    assert RegexIntentClassifier().classify("I'd like to cancel my order") == ["purchase", "cancellation"]


def test_no_match_is_general():
    assert RegexIntentClassifier().classify("lovely weather today") == ["general"]


def test_intents_are_case_insensitive():
    intents = RegexIntentClassifier().classify("URGENT: I need to BOOK a doctor")
    assert intents == ["appointment", "emergency", "medical"]


def test_custom_patterns_replace_defaults():
    classifier = RegexIntentClassifier({"billing": r"\binvoice\b"})
    assert classifier.classify("where is my invoice") == ["billing"]
    assert classifier.vocabulary == ["billing", "general"]


def test_company_detection():
    detector = KeywordCompanyDetector()
    assert detector.detect(["My Netflix account", "was charged twice"]) == "netflix"
    assert detector.detect(["I ordered from Pizza Hut"]) == "pizza hut"
    assert detector.detect(["hello there"]) == "general"


def test_keyword_sentiment():
    scorer = KeywordSentimentScorer()
    assert scorer.score("Thanks, that was great") == "positive"
    assert scorer.score("This is the worst, I'm so frustrated") == "negative"
    assert scorer.score("good but broken") == "neutral"
    assert scorer.score("") == "neutral"


def test_normalize_sentiment():
    assert normalize_sentiment("Negative.") == "negative"
    assert normalize_sentiment("  urgent  ") == "urgent"
    assert normalize_sentiment("ecstatic") == "neutral"
    assert normalize_sentiment("") == "neutral"
    assert normalize_sentiment(None) == "neutral"


def test_title_regeneration_schedule():
    fired = [n for n in range(0, 8) if should_regenerate_title(n)]
    assert fired == [1, 3, 6]


def test_title_regeneration_custom_interval():
    assert [n for n in range(1, 9) if should_regenerate_title(n, interval=4)] == [1, 4, 8]


def test_clean_title():
    assert clean_title('"Amazon Refund Request."') == "Amazon Refund Request"
    assert clean_title("Title: Account Access Issue") == "Account Access Issue"
    assert clean_title("  ") is None
    assert clean_title(None) is None
