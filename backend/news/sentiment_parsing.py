"""
Model Output Parsing
Pure strategies for turning LLM text into a SentimentResult:
structured JSON decode first, regex extraction second, Unknown last
"""

import json
import logging
import re
from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Optional

from models import RiskLevel, Sentiment, SentimentResult

logger = logging.getLogger(__name__)

UNPARSEABLE_REASON = "Could not interpret the AI response."

_SENTIMENTS = {
    "positive": Sentiment.POSITIVE,
    "neutral": Sentiment.NEUTRAL,
    "negative": Sentiment.NEGATIVE,
}

_RISKS = {
    "low": RiskLevel.LOW,
    "moderate": RiskLevel.MODERATE,
    "medium": RiskLevel.MODERATE,
    "high": RiskLevel.HIGH,
}

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)
_BARE_OBJECT = re.compile(r"\{[^{}]*(?:\{[^{}]*\}[^{}]*)*\}", re.DOTALL)
_LABELLED_SENTIMENT = re.compile(
    r"[\"']?sentiment[\"']?\s*[:=\-]\s*[\"']?(positive|neutral|negative)\b[\"']?[,.;]?",
    re.IGNORECASE
)
_LABELLED_REASON = re.compile(r"[\"']?(?:reason|reasoning)[\"']?\s*[:=\-]\s*(.+)", re.IGNORECASE | re.DOTALL)
_BARE_SENTIMENT = re.compile(r"\b(positive|neutral|negative)\b", re.IGNORECASE)


def _load_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return value if isinstance(value, dict) else None


def parse_structured(text: str) -> Optional[Dict[str, Any]]:
    """
    Decode a JSON object from model output

    Tries the whole text, then a ```json fenced block, then the first {...} object.
    """
    if not text:
        return None

    parsed = _load_object(text.strip())
    if parsed is not None:
        return parsed

    match = _FENCED_JSON.search(text)
    if match:
        parsed = _load_object(match.group(1))
        if parsed is not None:
            return parsed

    match = _BARE_OBJECT.search(text)
    if match:
        return _load_object(match.group(0))
    return None


def _tidy(text: str) -> str:
    text = re.sub(r"\s+", " ", text).strip()
    return text.strip(" ,;:-\"'{}")


def extract_best_effort(text: str) -> Optional[Dict[str, Any]]:
    """
    Recover a sentiment keyword and justification from free-form output

    A labelled "sentiment: X" wins; the reason is the text after a "reason:"
    label if there is one, otherwise the rest of the text. Without a label, a
    single distinct bare keyword is accepted with the whole text as reason.
    """
    if not text:
        return None

    match = _LABELLED_SENTIMENT.search(text)
    if match:
        remaining = text[:match.start()] + " " + text[match.end():]
        reason_match = _LABELLED_REASON.search(remaining)
        reason = _tidy(reason_match.group(1)) if reason_match else _tidy(remaining)
        return {"sentiment": match.group(1), "reason": reason}

    keywords = {k.lower() for k in _BARE_SENTIMENT.findall(text)}
    if len(keywords) == 1:
        return {"sentiment": keywords.pop(), "reason": _tidy(text)}
    return None


def coerce_sentiment(value: Any) -> Sentiment:
    if isinstance(value, Sentiment):
        return value
    if isinstance(value, str):
        return _SENTIMENTS.get(value.strip().lower(), Sentiment.UNKNOWN)
    return Sentiment.UNKNOWN


def coerce_confidence(value: Any) -> Optional[int]:
    """0-100 integer; accepts 85, 85.2, "85%", 0.85"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().rstrip("%").strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if 0 < number <= 1 and not float(number).is_integer():
        number *= 100
    return max(0, min(100, int(round(number))))


def coerce_risk(value: Any) -> Optional[RiskLevel]:
    if isinstance(value, str):
        return _RISKS.get(value.strip().lower())
    return None


def _result_from_fields(fields: Dict[str, Any], subject: str) -> SentimentResult:
    reason = fields.get("reason") or fields.get("reasoning") or ""
    return SentimentResult(
        subject=subject,
        sentiment=coerce_sentiment(fields.get("sentiment")),
        reason=str(reason).strip(),
        confidence=coerce_confidence(fields.get("confidence")),
        risk=coerce_risk(fields.get("risk")),
    )


PARSE_STRATEGIES: List[Callable[[str], Optional[Dict[str, Any]]]] = [
    parse_structured,
    extract_best_effort,
]


def parse_sentiment_response(text: str, subject: str) -> SentimentResult:
    """
    Run the parsing strategies in order; the first that yields fields wins

    Returns:
        SentimentResult, sentiment=Unknown if nothing could be recovered
    """
    for strategy in PARSE_STRATEGIES:
        fields = strategy(text)
        if fields and fields.get("sentiment") is not None:
            if strategy is not parse_structured:
                logger.warning(f"Model output for {subject} was not valid JSON, used {strategy.__name__}")
            return _result_from_fields(fields, subject)

    logger.warning(f"Could not parse model output for {subject}: {text[:120]!r}")
    return SentimentResult(
        subject=subject,
        sentiment=Sentiment.UNKNOWN,
        reason=UNPARSEABLE_REASON,
    )


def sentiment_counts(sentiments: Iterable[Sentiment]) -> Dict[str, int]:
    counts = Counter(coerce_sentiment(s) for s in sentiments)
    return {s.value: counts.get(s, 0) for s in Sentiment}


def majority_sentiment(sentiments: Iterable[Sentiment]) -> Sentiment:
    """
    Majority vote over Positive/Negative counts; ties and empty input are Neutral
    """
    counts = Counter(coerce_sentiment(s) for s in sentiments)
    positive = counts.get(Sentiment.POSITIVE, 0)
    negative = counts.get(Sentiment.NEGATIVE, 0)
    if positive > negative:
        return Sentiment.POSITIVE
    if negative > positive:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL
