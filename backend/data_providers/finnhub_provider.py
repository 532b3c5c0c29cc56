"""
Finnhub Data Provider
Real-time quotes, international coverage, generous free tier (60 calls/min)
API Docs: https://finnhub.io/docs/api
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .base_provider import BaseProvider, ProviderError

logger = logging.getLogger(__name__)


class SymbolNotFound(ProviderError):
    """Finnhub answered, but with an empty quote"""


@dataclass(frozen=True)
class FinnhubQuote:
    symbol: str
    current: float
    change: Optional[float]
    percent_change: Optional[float]
    previous_close: Optional[float]


def _optional_float(data: Dict[str, Any], key: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    return float(value)


class FinnhubProvider(BaseProvider):
    """
    Finnhub quote provider
    Pros: 60 calls/min free, index and NSE/BSE coverage with Yahoo-style tickers
    Cons: Requires API key, unknown symbols come back as all-zero quotes
    """

    BASE_URL = "https://finnhub.io/api/v1"

    def __init__(self, api_key: Optional[str] = None, timeout_seconds: float = 10.0):
        super().__init__("Finnhub", api_key=api_key, timeout_seconds=timeout_seconds)

    def _check_availability(self) -> bool:
        """Check if Finnhub API key is configured"""
        return self.api_key is not None and len(self.api_key) > 0

    async def get_quote(self, symbol: str) -> FinnhubQuote:
        """
        Get current quote from Finnhub

        Args:
            symbol: Provider ticker (e.g. RELIANCE.NS, ^NSEI)

        Returns:
            FinnhubQuote

        Raises:
            SymbolNotFound: price is zero and change is null
            ProviderError: any other failure
        """
        self.require_available()

        logger.info(f"[API] Fetching Finnhub: {symbol}")
        data = await self._get_json(
            f"{self.BASE_URL}/quote",
            params={"symbol": symbol, "token": self.api_key}
        )

        if data.get("c") == 0 and data.get("d") is None:
            raise SymbolNotFound(self.name, f"symbol not found or empty: {symbol}")

        try:
            current = _optional_float(data, "c")
            if current is None:
                raise ValueError("missing current price")
            return FinnhubQuote(
                symbol=symbol,
                current=current,
                change=_optional_float(data, "d"),
                percent_change=_optional_float(data, "dp"),
                previous_close=_optional_float(data, "pc"),
            )
        except (TypeError, ValueError) as e:
            raise ProviderError(self.name, f"malformed quote for {symbol}: {e}") from e

