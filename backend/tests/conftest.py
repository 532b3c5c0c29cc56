"""
Pytest Configuration and Fixtures
"""

import pytest
import pytest_asyncio
import json
import sys
import os
from unittest.mock import MagicMock, AsyncMock
from datetime import datetime, timezone

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class FakeClock:
    """Manually advanced monotonic clock for TTL tests"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def llm_reply(sentiment="Positive", confidence=80, reason="Strong quarterly numbers.", risk="Low"):
    """JSON body the chat model is asked to return"""
    return json.dumps({
        "sentiment": sentiment,
        "confidence": confidence,
        "reason": reason,
        "risk": risk,
    })


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def cache(fake_clock):
    from utils.cache import CacheStore
    return CacheStore(namespace="test", clock=fake_clock)


@pytest.fixture
def sample_news_articles():
    """Article dicts as the dashboard posts them"""
    return [
        {
            "title": "Reliance Industries Reports Strong Q3 Results",
            "snippet": "The company exceeded market expectations with robust revenue growth.",
            "url": "https://example.com/news/1",
            "source": "Economic Times",
            "date": "2024-12-15T10:30:00Z",
        },
        {
            "title": "Market Update: Nifty Hits New High",
            "snippet": "Indian stock market indices reached all-time highs today.",
            "url": "https://example.com/news/2",
            "source": "Business Standard",
            "date": "2024-12-15T09:00:00Z",
        },
        {
            "title": "RBI Holds Interest Rates Steady",
            "snippet": "The Reserve Bank of India maintains status quo on interest rates.",
            "url": "https://example.com/news/3",
            "source": "NDTV Profit",
            "date": "2024-12-14T16:45:00Z",
        },
    ]


@pytest.fixture
def sample_articles(sample_news_articles):
    """Normalized NewsArticle objects for the same headlines"""
    from news.merge import from_client
    return [from_client(item) for item in sample_news_articles]


@pytest.fixture
def make_article():
    from models import NewsArticle

    def _make(title, source="Test Source", url=None):
        slug = title.lower().replace(" ", "-")
        return NewsArticle(
            title=title,
            source=source,
            url=url or f"https://example.com/{slug}",
            published_at=datetime(2024, 12, 15, tzinfo=timezone.utc),
        )

    return _make


@pytest.fixture
def sample_finnhub_quote():
    from data_providers.finnhub_provider import FinnhubQuote
    return FinnhubQuote(
        symbol="RELIANCE.NS",
        current=2950.5,
        change=25.5,
        percent_change=0.87,
        previous_close=2925.0,
    )


@pytest.fixture
def mock_finnhub(sample_finnhub_quote):
    """Finnhub adapter whose quote call succeeds"""
    provider = MagicMock()
    provider.name = "Finnhub"
    provider.is_available = True
    provider.get_quote = AsyncMock(return_value=sample_finnhub_quote)
    provider.close = AsyncMock()
    return provider


@pytest.fixture
def mock_newsapi(make_article):
    provider = MagicMock()
    provider.name = "NewsAPI"
    provider.is_available = True
    provider.get_top_headlines = AsyncMock(return_value=[
        make_article("Sensex surges 500 points"),
        make_article("Rupee gains against dollar"),
    ])
    provider.search = AsyncMock(return_value=[
        make_article("SENSEX SURGES 500 POINTS", source="Other Wire"),
        make_article("RBI holds rate"),
    ])
    provider.close = AsyncMock()
    return provider


@pytest.fixture
def mock_web_search(make_article):
    provider = MagicMock()
    provider.name = "Google Custom Search"
    provider.is_available = True
    provider.search_stock_news = AsyncMock(return_value=[
        make_article("TCS wins large deal", source="moneycontrol.com"),
    ])
    provider.close = AsyncMock()
    return provider


@pytest.fixture
def mock_llm():
    provider = MagicMock()
    provider.name = "openrouter"
    provider.is_available = True
    provider.complete_json = AsyncMock(return_value=llm_reply())
    provider.close = AsyncMock()
    return provider


@pytest.fixture
def gateway(cache, mock_finnhub, mock_newsapi, mock_web_search, mock_llm):
    """Gateway wired to mocked providers"""
    from gateway import Gateway
    from market_data.quote_resolver import QuoteResolver
    from news.sentiment import SentimentOrchestrator
    from news.sources import NewsAggregator

    return Gateway(
        cache=cache,
        quotes=QuoteResolver(mock_finnhub, cache),
        news=NewsAggregator(mock_newsapi, mock_web_search, cache),
        sentiment=SentimentOrchestrator(mock_llm, cache),
        finnhub=mock_finnhub,
        newsapi=mock_newsapi,
        web_search=mock_web_search,
        llm=mock_llm,
    )


@pytest_asyncio.fixture
async def async_client(gateway):
    """Create async HTTP client for API testing"""
    from httpx import AsyncClient, ASGITransport
    from server import app, get_gateway

    app.dependency_overrides[get_gateway] = lambda: gateway
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
