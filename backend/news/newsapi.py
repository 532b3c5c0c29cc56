"""
NewsAPI.org Source
Top headlines and keyword search ("everything") endpoints

Free tier: 100 requests/day
Get API key at: https://newsapi.org/
"""

import logging
from typing import List, Optional

from data_providers.base_provider import BaseProvider, ProviderError
from models import NewsArticle

from .merge import from_newsapi, normalize_all

logger = logging.getLogger(__name__)


class NewsAPISource(BaseProvider):
    """NewsAPI.org integration"""

    BASE_URL = "https://newsapi.org/v2"

    def __init__(self, api_key: Optional[str] = None, timeout_seconds: float = 10.0):
        super().__init__("NewsAPI", api_key=api_key, timeout_seconds=timeout_seconds)

    def _check_availability(self) -> bool:
        return bool(self.api_key)

    async def _fetch(self, endpoint: str, params: dict) -> List[NewsArticle]:
        self.require_available()
        data = await self._get_json(
            f"{self.BASE_URL}/{endpoint}",
            params={**params, "apiKey": self.api_key}
        )

        if data.get("status") == "error":
            raise ProviderError(self.name, f"{data.get('code')}: {data.get('message')}")
        raw_articles = data.get("articles")
        if not isinstance(raw_articles, list):
            raise ProviderError(self.name, "Invalid NewsAPI response format")

        articles = normalize_all(raw_articles, from_newsapi)
        logger.info(f"NewsAPI: Fetched {len(articles)} articles from /{endpoint}")
        return articles

    async def get_top_headlines(
        self,
        category: str = "business",
        country: str = "in",
        page_size: int = 20
    ) -> List[NewsArticle]:
        """Fetch top headlines"""
        return await self._fetch("top-headlines", {
            "category": category,
            "country": country,
            "pageSize": page_size,
        })

    async def search(
        self,
        query: str,
        language: Optional[str] = "en",
        sort_by: str = "publishedAt",
        page_size: int = 10
    ) -> List[NewsArticle]:
        """
        Keyword search over all articles

        Args:
            query: Search query (stock symbol, company name, quoted phrase)
            language: Article language (None for any)
            sort_by: Sort order (publishedAt, relevancy, popularity)
            page_size: Number of results

        Returns:
            Normalized articles
        """
        params = {"q": query, "sortBy": sort_by, "pageSize": page_size}
        if language:
            params["language"] = language
        return await self._fetch("everything", params)
