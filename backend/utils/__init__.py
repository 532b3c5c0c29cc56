"""
Utility Module
Common utilities for the application.
"""

from .cache import CacheStore, CacheKeys, CacheTTL

__all__ = ['CacheStore', 'CacheKeys', 'CacheTTL']
