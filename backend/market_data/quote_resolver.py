"""
Quote Resolver
Symbol normalization, cached Finnhub lookups and synthetic fallback quotes
"""

import logging
import random
from typing import Optional

from data_providers.base_provider import Degraded, attempt
from data_providers.finnhub_provider import FinnhubProvider, FinnhubQuote
from models import QuoteRecord
from utils.cache import CacheKeys, CacheStore, CacheTTL

logger = logging.getLogger(__name__)


# Index aliases users type -> provider tickers (Yahoo Finance format)
INDEX_ALIASES = {
    "SENSEX": "^BSESN",
    "NIFTY 50": "^NSEI",
    "NIFTY_50": "^NSEI",
    "NIFTY": "^NSEI",
    "BANK NIFTY": "^NSEBANK",
    "BANKNIFTY": "^NSEBANK",
    "NIFTY_BANK": "^NSEBANK",
}

DEFAULT_EXCHANGE_SUFFIX = ".NS"

# Rough price levels for synthetic quotes, by provider ticker
BASE_PRICES = {
    "^BSESN": 72000.0,
    "^NSEI": 22000.0,
    "^NSEBANK": 48000.0,
    "RELIANCE.NS": 2900.0,
    "TCS.NS": 4000.0,
    "HDFCBANK.NS": 1450.0,
    "SBIN.NS": 760.0,
}
DEFAULT_BASE_PRICE = 1000.0

MAX_PRICE_JITTER = 0.02
MAX_CHANGE_PERCENT = 1.0


def normalize_symbol(symbol: str) -> str:
    """
    Map a user-supplied symbol to the provider ticker

    Args:
        symbol: e.g. "reliance", "NIFTY 50", "TCS.BO"

    Returns:
        Provider ticker, e.g. "RELIANCE.NS", "^NSEI", "TCS.BO"
    """
    cleaned = " ".join((symbol or "").split()).upper()
    if cleaned in INDEX_ALIASES:
        return INDEX_ALIASES[cleaned]
    if "." in cleaned or cleaned.startswith("^"):
        return cleaned
    return f"{cleaned}{DEFAULT_EXCHANGE_SUFFIX}"


def synthetic_quote(
    provider_symbol: str,
    display_symbol: str,
    rng: Optional[random.Random] = None
) -> QuoteRecord:
    """
    Placeholder quote near the symbol's usual price level

    Price lies within +/-2% of the base price, change percent within [-1, 1].
    """
    rng = rng or random.Random()
    base_price = BASE_PRICES.get(provider_symbol, DEFAULT_BASE_PRICE)

    direction = 1 if rng.random() > 0.5 else -1
    price = round(base_price + rng.random() * base_price * MAX_PRICE_JITTER * direction, 2)
    change_percent = round(rng.uniform(-MAX_CHANGE_PERCENT, MAX_CHANGE_PERCENT), 2)
    change_amount = round(price * change_percent / 100, 2)

    return QuoteRecord(
        symbol=provider_symbol,
        display_symbol=display_symbol,
        price=price,
        change_percent=change_percent,
        change_amount=change_amount,
        is_synthetic=True,
    )


def _quote_from_provider(quote: FinnhubQuote, display_symbol: str) -> QuoteRecord:
    change_amount = quote.change or 0.0
    change_percent = quote.percent_change

    if change_percent is None and change_amount and quote.previous_close:
        change_percent = change_amount / quote.previous_close * 100

    # amount and percent must agree in sign
    if change_percent and change_amount and (change_percent > 0) != (change_amount > 0):
        logger.warning(f"Sign mismatch for {quote.symbol}: d={change_amount}, dp={change_percent}")
        if quote.previous_close:
            change_percent = change_amount / quote.previous_close * 100
        else:
            change_percent = abs(change_percent) * (1 if change_amount > 0 else -1)

    return QuoteRecord(
        symbol=quote.symbol,
        display_symbol=display_symbol,
        price=quote.current or 0.0,
        change_percent=round(change_percent, 2) if change_percent else 0.0,
        change_amount=change_amount,
        is_synthetic=False,
    )


class QuoteResolver:
    """Resolves quotes from cache, then Finnhub, then synthetic data"""

    def __init__(
        self,
        provider: FinnhubProvider,
        cache: CacheStore,
        ttl: int = CacheTTL.QUOTE,
        rng: Optional[random.Random] = None
    ):
        self.provider = provider
        self.cache = cache
        self.ttl = ttl
        self.rng = rng or random.Random()

    async def resolve(self, symbol: str) -> QuoteRecord:
        """
        Get a quote for a user-supplied symbol; never raises for provider failures

        Args:
            symbol: Symbol as typed by the user

        Returns:
            QuoteRecord (is_synthetic=True when the provider could not be used)
        """
        display_symbol = " ".join((symbol or "").split()).upper()
        provider_symbol = normalize_symbol(symbol)
        cache_key = CacheKeys.quote(provider_symbol)

        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(f"[CACHE] Serving {display_symbol}")
            return cached.for_display(display_symbol)

        result = await attempt(
            self.provider.get_quote(provider_symbol),
            fallback=None,
            label=f"Finnhub quote {provider_symbol}"
        )

        if isinstance(result, Degraded):
            logger.info(f"[FALLBACK] Generating mock data for {display_symbol}")
            return synthetic_quote(provider_symbol, display_symbol, self.rng)

        record = _quote_from_provider(result.value, display_symbol)
        self.cache.put(cache_key, record, self.ttl)
        return record
