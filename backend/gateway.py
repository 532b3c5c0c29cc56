"""
Gateway Services
Builds the cache, provider clients and domain components once per process
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from config import GatewaySettings
from data_providers.finnhub_provider import FinnhubProvider
from data_providers.llm_provider import ChatCompletionProvider
from market_data.quote_resolver import QuoteResolver
from news.newsapi import NewsAPISource
from news.sentiment import SentimentOrchestrator
from news.sources import NewsAggregator
from news.web_search import WebSearchProvider, create_web_search_provider
from utils.cache import CacheStore

logger = logging.getLogger(__name__)


@dataclass
class Gateway:
    """Everything the HTTP layer needs; constructed at startup, closed at shutdown"""
    cache: CacheStore
    quotes: QuoteResolver
    news: NewsAggregator
    sentiment: SentimentOrchestrator
    finnhub: Optional[FinnhubProvider] = None
    newsapi: Optional[NewsAPISource] = None
    web_search: Optional[WebSearchProvider] = None
    llm: Optional[ChatCompletionProvider] = None

    def provider_status(self) -> Dict[str, Any]:
        providers = {
            "quotes": self.finnhub,
            "news": self.newsapi,
            "web_search": self.web_search,
            "llm": self.llm,
        }
        return {
            role: {"name": p.name, "available": p.is_available}
            for role, p in providers.items()
            if p is not None
        }

    async def close(self):
        for client in (self.finnhub, self.newsapi, self.web_search, self.llm):
            if client is None:
                continue
            try:
                await client.close()
            except Exception as e:
                logger.warning(f"Failed to close {client.name}: {e}")


def build_gateway(settings: GatewaySettings, cache: Optional[CacheStore] = None) -> Gateway:
    """
    Wire providers and components from settings

    Args:
        settings: Gateway configuration
        cache: Existing store to share (a new one is created if omitted)

    Returns:
        Gateway ready to serve requests
    """
    cache = cache or CacheStore()
    timeout = settings.http_timeout_seconds

    finnhub = FinnhubProvider(api_key=settings.finnhub_api_key, timeout_seconds=timeout)
    newsapi = NewsAPISource(api_key=settings.newsapi_key, timeout_seconds=timeout)
    web_search = create_web_search_provider(
        settings.web_search_provider,
        google_api_key=settings.google_api_key,
        google_cx=settings.google_cx,
        serpapi_key=settings.serpapi_key,
        timeout_seconds=timeout
    )
    llm_key = (
        settings.openrouter_api_key if settings.llm_provider == "openrouter"
        else settings.openai_api_key
    )
    llm = ChatCompletionProvider(
        provider=settings.llm_provider,
        api_key=llm_key,
        model=settings.llm_model,
        http_referer=settings.http_referer,
        timeout_seconds=timeout
    )

    return Gateway(
        cache=cache,
        quotes=QuoteResolver(finnhub, cache, ttl=settings.quote_ttl_seconds),
        news=NewsAggregator(
            newsapi,
            web_search,
            cache,
            market_news_ttl=settings.market_news_ttl_seconds,
            cap=settings.news_cap
        ),
        sentiment=SentimentOrchestrator(
            llm,
            cache,
            ttl=settings.sentiment_ttl_seconds,
            default_mode=settings.analysis_mode
        ),
        finnhub=finnhub,
        newsapi=newsapi,
        web_search=web_search,
        llm=llm,
    )
