"""
Gateway Configuration
Provider keys, provider selection, timeouts and cache TTLs from the environment
"""

import os
import logging
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

ROOT_DIR = Path(__file__).parent

logger = logging.getLogger(__name__)

WEB_SEARCH_PROVIDERS = ("google", "serpapi")
LLM_PROVIDERS = ("openrouter", "openai")
ANALYSIS_MODES = ("per_article", "batch")

# Maps settings fields to environment variable names
ENV_VARS = {
    "finnhub_api_key": "FINNHUB_API_KEY",
    "newsapi_key": "NEWSAPI_KEY",
    "google_api_key": "GOOGLE_API_KEY",
    "google_cx": "GOOGLE_CX",
    "serpapi_key": "SERPAPI_KEY",
    "web_search_provider": "WEB_SEARCH_PROVIDER",
    "llm_provider": "LLM_PROVIDER",
    "openrouter_api_key": "OPENROUTER_API_KEY",
    "openai_api_key": "OPENAI_API_KEY",
    "llm_model": "LLM_MODEL",
    "http_referer": "HTTP_REFERER",
    "analysis_mode": "ANALYSIS_MODE",
    "http_timeout_seconds": "HTTP_TIMEOUT_SECONDS",
    "quote_ttl_seconds": "QUOTE_TTL_SECONDS",
    "market_news_ttl_seconds": "MARKET_NEWS_TTL_SECONDS",
    "sentiment_ttl_seconds": "SENTIMENT_TTL_SECONDS",
    "news_cap": "NEWS_CAP",
    "cors_origins": "CORS_ORIGINS",
    "log_level": "LOG_LEVEL",
}

SECRET_FIELDS = (
    "finnhub_api_key",
    "newsapi_key",
    "google_api_key",
    "google_cx",
    "serpapi_key",
    "openrouter_api_key",
    "openai_api_key",
)


class GatewaySettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    finnhub_api_key: Optional[str] = None
    newsapi_key: Optional[str] = None
    google_api_key: Optional[str] = None
    google_cx: Optional[str] = None
    serpapi_key: Optional[str] = None
    web_search_provider: str = "google"
    llm_provider: str = "openrouter"
    openrouter_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    llm_model: Optional[str] = None
    http_referer: str = "http://localhost:5000"
    analysis_mode: str = "per_article"
    http_timeout_seconds: float = 10.0
    quote_ttl_seconds: int = 30
    market_news_ttl_seconds: int = 900
    sentiment_ttl_seconds: int = 1800
    news_cap: int = 20
    cors_origins: str = "*"
    log_level: str = "INFO"

    @field_validator("web_search_provider", "llm_provider", "analysis_mode", "log_level", mode="before")
    @classmethod
    def normalize_choice(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("web_search_provider")
    @classmethod
    def validate_web_search_provider(cls, v):
        if v not in WEB_SEARCH_PROVIDERS:
            raise ValueError(f"web_search_provider must be one of {WEB_SEARCH_PROVIDERS}")
        return v

    @field_validator("llm_provider")
    @classmethod
    def validate_llm_provider(cls, v):
        if v not in LLM_PROVIDERS:
            raise ValueError(f"llm_provider must be one of {LLM_PROVIDERS}")
        return v

    @field_validator("analysis_mode")
    @classmethod
    def validate_analysis_mode(cls, v):
        if v not in ANALYSIS_MODES:
            raise ValueError(f"analysis_mode must be one of {ANALYSIS_MODES}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        return v.upper()

    @field_validator(
        "http_timeout_seconds",
        "quote_ttl_seconds",
        "market_news_ttl_seconds",
        "sentiment_ttl_seconds",
        "news_cap",
    )
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "GatewaySettings":
        """Build settings from the process environment (after loading .env)"""
        load_dotenv(env_file or ROOT_DIR / '.env')
        values = {}
        for field_name, env_name in ENV_VARS.items():
            raw = os.environ.get(env_name)
            if raw is not None and raw.strip() != "":
                values[field_name] = raw.strip()
        return cls(**values)

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(',') if o.strip()]

    def describe_keys(self) -> Dict[str, str]:
        """Masked presence report for provider credentials"""
        report = {}
        for field_name in SECRET_FIELDS:
            value = getattr(self, field_name)
            report[ENV_VARS[field_name]] = f"PRESENT ({len(value)} chars)" if value else "MISSING"
        return report

    def log_config_check(self) -> None:
        logger.info("--- CONFIG CHECK ---")
        for env_name, status in self.describe_keys().items():
            logger.info(f"{env_name}: {status}")
        logger.info(
            f"web search: {self.web_search_provider}, llm: {self.llm_provider}, "
            f"analysis mode: {self.analysis_mode}"
        )
