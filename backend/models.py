"""
Domain Records
Immutable value types shared by the quote, news and sentiment components
"""

import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_http_url(url: Optional[str]) -> bool:
    """True if url is a well-formed http(s) URL with a host"""
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def normalize_title(title: str) -> str:
    """Case-insensitive, whitespace-collapsed title used as dedupe identity"""
    return re.sub(r"\s+", " ", title or "").strip().casefold()


class Sentiment(str, Enum):
    POSITIVE = "Positive"
    NEUTRAL = "Neutral"
    NEGATIVE = "Negative"
    UNKNOWN = "Unknown"


class RiskLevel(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"


@dataclass(frozen=True)
class QuoteRecord:
    """Point-in-time quote for one symbol"""
    symbol: str  # provider ticker, e.g. RELIANCE.NS
    display_symbol: str  # as the caller asked for it
    price: float
    change_percent: float
    change_amount: float
    is_synthetic: bool = False
    fetched_at: datetime = field(default_factory=utc_now)

    def for_display(self, display_symbol: str) -> "QuoteRecord":
        if display_symbol == self.display_symbol:
            return self
        return replace(self, display_symbol=display_symbol)

    def to_response(self) -> Dict[str, Any]:
        data = {
            "symbol": self.display_symbol,
            "price": self.price,
            "change": self.change_percent,
            "changeAmount": self.change_amount,
        }
        if self.is_synthetic:
            data["isMock"] = True
        return data


@dataclass(frozen=True)
class NewsArticle:
    """Provider-independent news article"""
    title: str
    source: str
    url: str
    published_at: Optional[datetime] = None
    snippet: Optional[str] = None

    @property
    def dedupe_key(self) -> str:
        return normalize_title(self.title)

    @property
    def is_clickable(self) -> bool:
        return is_valid_http_url(self.url)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "source": self.source,
            "url": self.url,
            "date": self.published_at.isoformat() if self.published_at else None,
            "snippet": self.snippet,
            "clickable": self.is_clickable,
        }


@dataclass(frozen=True)
class MarketNews:
    """Merged general market news with the time it was fetched"""
    articles: Tuple[NewsArticle, ...]
    last_updated: datetime = field(default_factory=utc_now)

    def to_response(self) -> Dict[str, Any]:
        return {
            "news": [a.to_dict() for a in self.articles],
            "lastUpdated": self.last_updated.isoformat(),
        }


@dataclass(frozen=True)
class SentimentResult:
    """Sentiment verdict for one article or one batch of headlines"""
    subject: str
    sentiment: Sentiment
    reason: str
    confidence: Optional[int] = None  # 0..100
    risk: Optional[RiskLevel] = None
    is_fallback: bool = False
    article: Optional[NewsArticle] = None

    def with_article(self, article: NewsArticle) -> "SentimentResult":
        return replace(self, article=article)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = self.article.to_dict() if self.article else {"subject": self.subject}
        data["sentiment"] = self.sentiment.value
        data["reason"] = self.reason
        if self.confidence is not None:
            data["confidence"] = self.confidence
        if self.risk is not None:
            data["risk"] = self.risk.value
        return data
