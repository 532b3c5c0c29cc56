"""
Web Search Service for Stock News

Supports multiple search providers:
- Google Custom Search (API key + search engine id)
- SerpAPI Google News (paid, higher quality results)

Both return articles already mapped to NewsArticle.
"""

import logging
from abc import abstractmethod
from typing import List, Optional

from data_providers.base_provider import BaseProvider, ProviderError
from models import NewsArticle

from .merge import from_google_search, from_serpapi, normalize_all

logger = logging.getLogger(__name__)


class WebSearchProvider(BaseProvider):
    """Common interface for web search news providers"""

    @abstractmethod
    async def search_stock_news(self, query: str, max_results: int = 5) -> List[NewsArticle]:
        """Articles about a symbol or company, newest first where the provider supports it"""
        pass


class GoogleCustomSearchProvider(WebSearchProvider):
    """Google Programmable Search Engine scoped to finance news"""

    BASE_URL = "https://www.googleapis.com/customsearch/v1"

    def __init__(
        self,
        api_key: Optional[str] = None,
        cx: Optional[str] = None,
        timeout_seconds: float = 10.0
    ):
        super().__init__("Google Custom Search", api_key=api_key, timeout_seconds=timeout_seconds)
        self.cx = cx

    def _check_availability(self) -> bool:
        return bool(self.api_key and self.cx)

    async def search_stock_news(self, query: str, max_results: int = 5) -> List[NewsArticle]:
        """
        Search for news about a stock or company

        Args:
            query: Symbol or company name
            max_results: Maximum results (Google caps this at 10)

        Returns:
            Normalized articles (empty if Google had no items)
        """
        self.require_available()
        params = {
            "q": f"{query} stock news India",
            "cx": self.cx,
            "key": self.api_key,
            "num": min(max_results, 10),
            "sort": "date",
        }

        logger.info(f"[API] Google search for: {query}")
        data = await self._get_json(self.BASE_URL, params=params)

        items = data.get("items") or []
        if not isinstance(items, list):
            raise ProviderError(self.name, "unexpected items format")
        return normalize_all(items, from_google_search)


class SerpAPINewsProvider(WebSearchProvider):
    """SerpAPI google_news engine"""

    BASE_URL = "https://serpapi.com/search"

    def __init__(self, api_key: Optional[str] = None, timeout_seconds: float = 10.0):
        super().__init__("SerpAPI", api_key=api_key, timeout_seconds=timeout_seconds)

    def _check_availability(self) -> bool:
        return bool(self.api_key)

    async def search_stock_news(self, query: str, max_results: int = 5) -> List[NewsArticle]:
        """Search Google News through SerpAPI (India edition)"""
        self.require_available()
        params = {
            "engine": "google_news",
            "q": f"{query} stock news",
            "gl": "IN",
            "hl": "en",
            "api_key": self.api_key,
        }

        logger.info(f"[API] SerpAPI search for: {query}")
        data = await self._get_json(self.BASE_URL, params=params)

        if data.get("error"):
            raise ProviderError(self.name, str(data["error"]))
        items = data.get("news_results") or []
        if not isinstance(items, list):
            raise ProviderError(self.name, "unexpected news_results format")
        return normalize_all(items, from_serpapi)[:max_results]


def create_web_search_provider(
    provider: str,
    google_api_key: Optional[str] = None,
    google_cx: Optional[str] = None,
    serpapi_key: Optional[str] = None,
    timeout_seconds: float = 10.0
) -> WebSearchProvider:
    """Pick the web search adapter named in configuration"""
    if provider == "serpapi":
        return SerpAPINewsProvider(api_key=serpapi_key, timeout_seconds=timeout_seconds)
    if provider == "google":
        return GoogleCustomSearchProvider(
            api_key=google_api_key,
            cx=google_cx,
            timeout_seconds=timeout_seconds
        )
    raise ValueError(f"Unsupported web search provider: {provider}")
