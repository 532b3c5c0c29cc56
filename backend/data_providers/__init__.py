"""
Data Providers Package
Outbound adapters for quote and language-model providers
"""

from .base_provider import BaseProvider, ProviderError, Ok, Degraded, attempt
from .finnhub_provider import FinnhubProvider, FinnhubQuote, SymbolNotFound
from .llm_provider import ChatCompletionProvider

__all__ = [
    'BaseProvider',
    'ProviderError',
    'Ok',
    'Degraded',
    'attempt',
    'FinnhubProvider',
    'FinnhubQuote',
    'SymbolNotFound',
    'ChatCompletionProvider'
]
