"""
Market Data Module
Provides quotes for Indian stocks and indices:
- Symbol/index alias normalization
- Cached provider lookups
- Synthetic fallback quotes
"""

from .quote_resolver import (
    QuoteResolver,
    normalize_symbol,
    synthetic_quote,
    INDEX_ALIASES,
    BASE_PRICES
)

__all__ = [
    'QuoteResolver',
    'normalize_symbol',
    'synthetic_quote',
    'INDEX_ALIASES',
    'BASE_PRICES'
]
