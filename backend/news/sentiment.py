"""
LLM Sentiment Analysis for Financial News
Builds prompts, calls the chat model and turns replies into SentimentResults
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from config import ANALYSIS_MODES
from data_providers.base_provider import Degraded, attempt
from data_providers.llm_provider import ChatCompletionProvider
from models import NewsArticle, RiskLevel, Sentiment, SentimentResult
from utils.cache import CacheKeys, CacheStore, CacheTTL

from .sentiment_parsing import majority_sentiment, parse_sentiment_response, sentiment_counts

logger = logging.getLogger(__name__)

SYSTEM_MESSAGE = "You are a financial analyst AI. Output valid JSON only."

UNAVAILABLE_REASON = "AI analysis unavailable. Please try again later."


def fallback_result(subject: str, article: Optional[NewsArticle] = None) -> SentimentResult:
    """Neutral placeholder used whenever the model could not be reached"""
    return SentimentResult(
        subject=subject,
        sentiment=Sentiment.NEUTRAL,
        reason=UNAVAILABLE_REASON,
        confidence=50,
        risk=RiskLevel.MODERATE,
        is_fallback=True,
        article=article,
    )


def subject_label(subjects: Sequence[str]) -> str:
    cleaned = [s.strip().upper() for s in subjects if s and s.strip()]
    return ", ".join(dict.fromkeys(cleaned))


def build_prompt(subject: str, articles: Sequence[NewsArticle]) -> str:
    """
    Sentiment prompt for one subject and one or more headlines

    Args:
        subject: Stock symbol(s), e.g. "TCS" or "TCS, INFY"
        articles: Headlines to judge

    Returns:
        Prompt text asking for a single JSON object
    """
    news_context = "\n".join(
        f"{i + 1}. {a.title} ({a.source})" for i, a in enumerate(articles)
    )

    return f"""Analyze the sentiment for the stock "{subject}" based on the following news headlines:
{news_context}

Determine if the sentiment is POSITIVE, NEGATIVE, or NEUTRAL.
Provide a confidence score (0-100%) and a short reasoning paragraph (max 2 sentences).
Also estimate a risk level (Low, Moderate, High).

Return ONLY JSON in this format:
{{
    "sentiment": "Positive/Negative/Neutral",
    "confidence": 85,
    "reason": "Analysis explanation here...",
    "risk": "Moderate"
}}"""


class SentimentOrchestrator:
    """
    Runs LLM sentiment analysis in batch or per-article (fan-out) mode

    Provider failures never escape: they become the neutral fallback result.
    """

    def __init__(
        self,
        llm: ChatCompletionProvider,
        cache: CacheStore,
        ttl: int = CacheTTL.SENTIMENT,
        default_mode: str = "per_article"
    ):
        if default_mode not in ANALYSIS_MODES:
            raise ValueError(f"Unsupported analysis mode: {default_mode}")
        self.llm = llm
        self.cache = cache
        self.ttl = ttl
        self.default_mode = default_mode

    async def _score(self, subject: str, articles: Sequence[NewsArticle]) -> SentimentResult:
        """One model call for the given headlines, cached by subject + titles"""
        cache_key = CacheKeys.sentiment(subject, [a.title for a in articles])
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(f"[CACHE] Serving sentiment for {subject}")
            return cached

        result = await attempt(
            self.llm.complete_json(SYSTEM_MESSAGE, build_prompt(subject, articles)),
            fallback=None,
            label=f"LLM sentiment for {subject}"
        )
        if isinstance(result, Degraded):
            return fallback_result(subject)

        parsed = parse_sentiment_response(result.value, subject)
        if parsed.sentiment is not Sentiment.UNKNOWN:
            self.cache.put(cache_key, parsed, self.ttl)
        return parsed

    async def analyze_batch(
        self,
        articles: Sequence[NewsArticle],
        subjects: Sequence[str]
    ) -> SentimentResult:
        """
        Single verdict for all headlines

        Args:
            articles: Articles to analyze
            subjects: Portfolio symbols

        Returns:
            SentimentResult for the whole batch
        """
        subject = subject_label(subjects)
        logger.info(f"[API] Analyzing Sentiment for {subject} ({len(articles)} headlines)...")
        return await self._score(subject, articles)

    async def analyze_articles(
        self,
        articles: Sequence[NewsArticle],
        subjects: Sequence[str]
    ) -> List[SentimentResult]:
        """
        One verdict per article, calls issued concurrently

        Returns:
            Results in input order, each carrying its article
        """
        subject = subject_label(subjects)
        logger.info(f"[API] Analyzing Sentiment for {subject} across {len(articles)} articles...")

        results = await asyncio.gather(
            *(self._score(subject, [article]) for article in articles)
        )
        return [r.with_article(a) for r, a in zip(results, articles)]

    async def analyze(
        self,
        articles: Sequence[NewsArticle],
        subjects: Sequence[str],
        mode: Optional[str] = None
    ) -> List[SentimentResult]:
        """Dispatch to per-article or batch analysis"""
        mode = mode or self.default_mode
        if mode == "batch":
            return [await self.analyze_batch(articles, subjects)]
        if mode == "per_article":
            return await self.analyze_articles(articles, subjects)
        raise ValueError(f"Unsupported analysis mode: {mode}")

    @staticmethod
    def aggregate(results: Sequence[SentimentResult]) -> Dict[str, Any]:
        """Majority-vote summary over individual verdicts"""
        sentiments = [r.sentiment for r in results]
        subject = results[0].subject if results else ""
        return {
            "subject": subject,
            "sentiment": majority_sentiment(sentiments).value,
            "counts": sentiment_counts(sentiments),
        }
