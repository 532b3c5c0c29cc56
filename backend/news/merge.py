"""
News Normalization & Merge
Maps provider payloads to NewsArticle and merges sources with title deduplication
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from models import NewsArticle, is_valid_http_url

logger = logging.getLogger(__name__)

DEFAULT_NEWS_CAP = 20


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp ('Z' allowed) into an aware UTC datetime"""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def build_article(
    title: Any,
    url: Any,
    source: Any,
    published_at: Any = None,
    snippet: Any = None,
    drop_unclickable: bool = True
) -> Optional[NewsArticle]:
    """
    Build a NewsArticle, or None if the item is not usable

    Items without a title are always discarded. Items whose URL is missing or
    not a well-formed http(s) link are discarded when drop_unclickable is set and
    otherwise kept (NewsArticle.is_clickable is then False).
    """
    title = _clean(title)
    url = _clean(url) or ""
    if not title:
        return None
    if drop_unclickable and not is_valid_http_url(url):
        logger.debug(f"Discarding article with malformed URL: {url}")
        return None

    if not isinstance(published_at, datetime):
        published_at = parse_timestamp(published_at)

    return NewsArticle(
        title=title,
        source=_clean(source) or "Unknown",
        url=url,
        published_at=published_at,
        snippet=_clean(snippet),
    )


def from_newsapi(item: Dict[str, Any], drop_unclickable: bool = True) -> Optional[NewsArticle]:
    """NewsAPI /top-headlines and /everything article"""
    source = item.get("source") or {}
    return build_article(
        title=item.get("title"),
        url=item.get("url"),
        source=source.get("name") if isinstance(source, dict) else source,
        published_at=item.get("publishedAt"),
        snippet=item.get("description"),
        drop_unclickable=drop_unclickable,
    )


def from_google_search(item: Dict[str, Any], drop_unclickable: bool = True) -> Optional[NewsArticle]:
    """Google Custom Search result item"""
    published_at = None
    pagemap = item.get("pagemap") or {}
    for tags in pagemap.get("metatags") or []:
        if isinstance(tags, dict) and tags.get("article:published_time"):
            published_at = tags["article:published_time"]
            break
    return build_article(
        title=item.get("title"),
        url=item.get("link"),
        source=item.get("displayLink") or "Google News",
        published_at=published_at,
        snippet=item.get("snippet"),
        drop_unclickable=drop_unclickable,
    )


def from_serpapi(item: Dict[str, Any], drop_unclickable: bool = True) -> Optional[NewsArticle]:
    """SerpAPI google_news result"""
    source = item.get("source") or {}
    return build_article(
        title=item.get("title"),
        url=item.get("link"),
        source=source.get("name") if isinstance(source, dict) else source,
        published_at=item.get("iso_date"),
        snippet=item.get("snippet"),
        drop_unclickable=drop_unclickable,
    )


def from_client(item: Dict[str, Any]) -> Optional[NewsArticle]:
    """Article dict posted by the dashboard; missing or bad links are flagged, not dropped"""
    return build_article(
        title=item.get("title"),
        url=item.get("url") or item.get("link"),
        source=item.get("source"),
        published_at=item.get("date") or item.get("publishedAt"),
        snippet=item.get("snippet") or item.get("description"),
        drop_unclickable=False,
    )


def normalize_all(
    items: Iterable[Dict[str, Any]],
    mapper: Callable[..., Optional[NewsArticle]],
    **kwargs
) -> List[NewsArticle]:
    """Apply a provider mapper and drop unusable items"""
    articles = []
    for item in items or []:
        if not isinstance(item, dict):
            continue
        article = mapper(item, **kwargs)
        if article is not None:
            articles.append(article)
    return articles


def merge_articles(
    sources: Sequence[Iterable[NewsArticle]],
    cap: int = DEFAULT_NEWS_CAP
) -> List[NewsArticle]:
    """
    Merge article lists in priority order, deduplicating by normalized title

    Args:
        sources: Article lists, highest priority first (first source wins on collision)
        cap: Maximum number of articles returned

    Returns:
        At most cap unique articles, in source order
    """
    merged: List[NewsArticle] = []
    seen_titles = set()

    for articles in sources:
        for article in articles:
            if len(merged) >= cap:
                return merged
            key = article.dedupe_key
            if key in seen_titles:
                continue
            seen_titles.add(key)
            merged.append(article)

    return merged
