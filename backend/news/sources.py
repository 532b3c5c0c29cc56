"""
News Sources Aggregator
General market news and symbol news from NewsAPI and web search, merged and deduplicated
"""

import asyncio
import logging
from typing import List, Optional

from data_providers.base_provider import Degraded, attempt
from models import MarketNews, NewsArticle, utc_now
from utils.cache import CacheKeys, CacheStore, CacheTTL

from .merge import DEFAULT_NEWS_CAP, merge_articles
from .newsapi import NewsAPISource
from .web_search import WebSearchProvider

logger = logging.getLogger(__name__)

MARKET_NEWS_QUERY = '"Indian Stock Market"'


class NewsAggregator:
    """
    Aggregates news from multiple sources

    - market_news(): NewsAPI top headlines + keyword search in parallel, cached for everyone
    - symbol_news(): web search first, NewsAPI keyword search as fallback, never cached
    """

    def __init__(
        self,
        newsapi: NewsAPISource,
        web_search: Optional[WebSearchProvider],
        cache: CacheStore,
        market_news_ttl: int = CacheTTL.MARKET_NEWS,
        cap: int = DEFAULT_NEWS_CAP
    ):
        self.newsapi = newsapi
        self.web_search = web_search
        self.cache = cache
        self.market_news_ttl = market_news_ttl
        self.cap = cap

    async def market_news(self) -> MarketNews:
        """
        Fetch general Indian market news

        Returns:
            MarketNews (possibly empty, never an error)
        """
        cache_key = CacheKeys.market_news()
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("[CACHE] Serving market news")
            return cached

        logger.info("[API] Fetching General Market News...")
        headlines, keyword = await asyncio.gather(
            attempt(self.newsapi.get_top_headlines(), fallback=[], label="NewsAPI top headlines"),
            attempt(
                self.newsapi.search(MARKET_NEWS_QUERY, page_size=self.cap),
                fallback=[],
                label="NewsAPI market search"
            ),
        )

        articles = merge_articles([headlines.value, keyword.value], cap=self.cap)
        news = MarketNews(articles=tuple(articles), last_updated=utc_now())
        logger.info(f"[API] Fetched {len(articles)} market articles")

        if articles:
            self.cache.put(cache_key, news, self.market_news_ttl)
        elif isinstance(headlines, Degraded) and isinstance(keyword, Degraded):
            logger.error(
                f"All market news sources failed: {headlines.reason}; {keyword.reason}"
            )
        return news

    async def symbol_news(self, query: str, max_results: int = 5) -> List[NewsArticle]:
        """
        Fetch news for a symbol or company name

        Args:
            query: Symbol or company name
            max_results: Maximum articles

        Returns:
            Articles (empty if every source failed)
        """
        logger.info(f"[API] Fetching News for: {query}")

        if self.web_search is not None and self.web_search.is_available:
            result = await attempt(
                self.web_search.search_stock_news(query, max_results=max_results),
                fallback=[],
                label=f"{self.web_search.name} for {query}"
            )
            articles = merge_articles([result.value], cap=max_results)
            if articles:
                return articles
            logger.info(f"No usable web search results for {query}, falling back to NewsAPI")

        result = await attempt(
            self.newsapi.search(query, language=None, page_size=max_results),
            fallback=[],
            label=f"NewsAPI search for {query}"
        )
        return merge_articles([result.value], cap=max_results)
