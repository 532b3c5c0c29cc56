"""
Unit Tests for Sentiment Orchestration
"""

import json
import pytest
from unittest.mock import AsyncMock


class TestPrompt:
    """Test prompt construction"""

    def test_prompt_lists_headlines(self, sample_articles):
        from news.sentiment import build_prompt

        prompt = build_prompt("TCS, INFY", sample_articles)

        assert '"TCS, INFY"' in prompt
        assert "1. Reliance Industries Reports Strong Q3 Results (Economic Times)" in prompt
        assert "3. RBI Holds Interest Rates Steady (NDTV Profit)" in prompt
        assert "Return ONLY JSON" in prompt

    def test_subject_label(self):
        from news.sentiment import subject_label
        assert subject_label(["tcs", " INFY ", "TCS", ""]) == "TCS, INFY"


class TestSentimentOrchestrator:
    """Test batch and per-article analysis"""

    @pytest.mark.asyncio
    async def test_per_article_one_result_per_article(self, cache, mock_llm, sample_articles):
        from models import Sentiment
        from news.sentiment import SentimentOrchestrator

        orchestrator = SentimentOrchestrator(mock_llm, cache)
        results = await orchestrator.analyze(sample_articles, ["TCS"], mode="per_article")

        assert len(results) == len(sample_articles)
        assert mock_llm.complete_json.await_count == 3
        assert [r.article for r in results] == sample_articles
        assert all(r.sentiment is Sentiment.POSITIVE for r in results)

    @pytest.mark.asyncio
    async def test_batch_single_call(self, cache, mock_llm, sample_articles):
        from news.sentiment import SentimentOrchestrator

        orchestrator = SentimentOrchestrator(mock_llm, cache)
        results = await orchestrator.analyze(sample_articles, ["TCS", "INFY"], mode="batch")

        assert len(results) == 1
        assert results[0].subject == "TCS, INFY"
        assert results[0].to_dict() == {
            "subject": "TCS, INFY",
            "sentiment": "Positive",
            "reason": "Strong quarterly numbers.",
            "confidence": 80,
            "risk": "Low",
        }
        mock_llm.complete_json.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_default_mode(self, cache, mock_llm, sample_articles):
        from news.sentiment import SentimentOrchestrator

        orchestrator = SentimentOrchestrator(mock_llm, cache, default_mode="batch")
        results = await orchestrator.analyze(sample_articles, ["TCS"])

        assert len(results) == 1

    def test_rejects_unknown_mode(self, cache, mock_llm):
        from news.sentiment import SentimentOrchestrator

        with pytest.raises(ValueError):
            SentimentOrchestrator(mock_llm, cache, default_mode="streaming")

    @pytest.mark.asyncio
    async def test_provider_failure_returns_fallback(self, cache, mock_llm, sample_articles):
        from data_providers.base_provider import ProviderError
        from models import RiskLevel, Sentiment
        from news.sentiment import UNAVAILABLE_REASON, SentimentOrchestrator

        mock_llm.complete_json = AsyncMock(side_effect=ProviderError("openrouter", "HTTP 401"))
        orchestrator = SentimentOrchestrator(mock_llm, cache)

        results = await orchestrator.analyze(sample_articles, ["TCS"], mode="per_article")

        assert len(results) == 3
        for result in results:
            assert result.sentiment is Sentiment.NEUTRAL
            assert result.confidence == 50
            assert result.risk is RiskLevel.MODERATE
            assert result.reason == UNAVAILABLE_REASON
            assert result.is_fallback is True
            assert result.article is not None

    @pytest.mark.asyncio
    async def test_results_cached(self, cache, mock_llm, sample_articles):
        from news.sentiment import SentimentOrchestrator

        orchestrator = SentimentOrchestrator(mock_llm, cache)
        await orchestrator.analyze(sample_articles, ["TCS"], mode="batch")
        await orchestrator.analyze(sample_articles, ["tcs"], mode="batch")

        assert mock_llm.complete_json.await_count == 1

    @pytest.mark.asyncio
    async def test_fallback_and_unknown_not_cached(self, cache, mock_llm, sample_articles):
        from data_providers.base_provider import ProviderError
        from models import Sentiment
        from news.sentiment import SentimentOrchestrator

        mock_llm.complete_json = AsyncMock(side_effect=[
            ProviderError("openrouter", "timeout"),
            "no idea",
            json.dumps({"sentiment": "Negative", "reason": "Weak guidance."}),
        ])
        orchestrator = SentimentOrchestrator(mock_llm, cache)

        first = await orchestrator.analyze_batch(sample_articles, ["TCS"])
        second = await orchestrator.analyze_batch(sample_articles, ["TCS"])
        third = await orchestrator.analyze_batch(sample_articles, ["TCS"])

        assert first.is_fallback is True
        assert second.sentiment is Sentiment.UNKNOWN
        assert third.sentiment is Sentiment.NEGATIVE
        assert mock_llm.complete_json.await_count == 3

    def test_aggregate(self):
        from models import Sentiment, SentimentResult
        from news.sentiment import SentimentOrchestrator

        results = [
            SentimentResult("TCS", Sentiment.POSITIVE, "a"),
            SentimentResult("TCS", Sentiment.POSITIVE, "b"),
            SentimentResult("TCS", Sentiment.NEGATIVE, "c"),
        ]

        aggregate = SentimentOrchestrator.aggregate(results)

        assert aggregate["subject"] == "TCS"
        assert aggregate["sentiment"] == "Positive"
        assert aggregate["counts"]["Negative"] == 1
