"""
Unit Tests for Model Output Parsing
"""

import pytest


class TestParseSentimentResponse:
    """Test the structured -> best-effort -> Unknown chain"""

    def test_plain_json(self):
        from models import RiskLevel, Sentiment
        from news.sentiment_parsing import parse_sentiment_response

        result = parse_sentiment_response(
            '{"sentiment": "Positive", "confidence": 85, "reason": "Beat estimates.", "risk": "Low"}',
            "TCS"
        )

        assert result.subject == "TCS"
        assert result.sentiment is Sentiment.POSITIVE
        assert result.confidence == 85
        assert result.reason == "Beat estimates."
        assert result.risk is RiskLevel.LOW

    def test_fenced_json(self):
        from models import Sentiment
        from news.sentiment_parsing import parse_sentiment_response

        text = 'Here is the analysis:\n```json\n{"sentiment": "negative", "confidence": 0.7, "reason": "Margins fell."}\n```'
        result = parse_sentiment_response(text, "HDFCBANK")

        assert result.sentiment is Sentiment.NEGATIVE
        assert result.confidence == 70

    def test_object_inside_prose(self):
        from models import Sentiment
        from news.sentiment_parsing import parse_sentiment_response

        text = 'Sure! {"sentiment": "Neutral", "reason": "Mixed signals."} Hope this helps.'

        assert parse_sentiment_response(text, "SBIN").sentiment is Sentiment.NEUTRAL

    def test_labelled_free_text(self):
        """'sentiment: Negative' in prose becomes Negative with the rest as reason"""
        from models import Sentiment
        from news.sentiment_parsing import parse_sentiment_response

        result = parse_sentiment_response(
            "sentiment: Negative. The bank reported weak margins.",
            "SBIN"
        )

        assert result.sentiment is Sentiment.NEGATIVE
        assert result.reason == "The bank reported weak margins."

    def test_labelled_reason(self):
        from models import Sentiment
        from news.sentiment_parsing import parse_sentiment_response

        result = parse_sentiment_response(
            "Sentiment - Positive\nReason: Order book is growing.",
            "LT"
        )

        assert result.sentiment is Sentiment.POSITIVE
        assert result.reason == "Order book is growing."

    def test_single_bare_keyword(self):
        from models import Sentiment
        from news.sentiment_parsing import parse_sentiment_response

        result = parse_sentiment_response("Overall this looks positive for the stock.", "ITC")

        assert result.sentiment is Sentiment.POSITIVE

    @pytest.mark.parametrize("text", [
        "",
        "I am unable to help with that.",
        "There are positive and negative factors here.",
    ])
    def test_unparseable(self, text):
        from models import Sentiment
        from news.sentiment_parsing import UNPARSEABLE_REASON, parse_sentiment_response

        result = parse_sentiment_response(text, "TCS")

        assert result.sentiment is Sentiment.UNKNOWN
        assert result.reason == UNPARSEABLE_REASON


class TestCoercion:
    """Test field coercion"""

    @pytest.mark.parametrize("value,expected", [
        (85, 85),
        (85.4, 85),
        ("85%", 85),
        (0.62, 62),
        (150, 100),
        (-3, 0),
        ("high", None),
        (True, None),
        (None, None),
    ])
    def test_confidence(self, value, expected):
        from news.sentiment_parsing import coerce_confidence
        assert coerce_confidence(value) == expected

    def test_risk_aliases(self):
        from models import RiskLevel
        from news.sentiment_parsing import coerce_risk

        assert coerce_risk("Medium") is RiskLevel.MODERATE
        assert coerce_risk(" HIGH ") is RiskLevel.HIGH
        assert coerce_risk("extreme") is None


class TestMajority:
    """Test aggregate voting"""

    def test_positive_majority(self):
        from models import Sentiment
        from news.sentiment_parsing import majority_sentiment

        votes = [Sentiment.POSITIVE, Sentiment.POSITIVE, Sentiment.NEGATIVE]
        assert majority_sentiment(votes) is Sentiment.POSITIVE

    def test_tie_is_neutral(self):
        from models import Sentiment
        from news.sentiment_parsing import majority_sentiment

        assert majority_sentiment([Sentiment.POSITIVE, Sentiment.NEGATIVE]) is Sentiment.NEUTRAL
        assert majority_sentiment([]) is Sentiment.NEUTRAL

    def test_counts_cover_all_labels(self):
        from models import Sentiment
        from news.sentiment_parsing import sentiment_counts

        counts = sentiment_counts([Sentiment.NEGATIVE, Sentiment.UNKNOWN, Sentiment.NEGATIVE])

        assert counts == {"Positive": 0, "Neutral": 0, "Negative": 2, "Unknown": 1}
