"""
Base Data Provider Interface
Shared HTTP plumbing and the explicit Ok/Degraded result type for provider calls
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, Generic, Optional, TypeVar, Union

import aiohttp

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProviderError(Exception):
    """A provider call failed: not configured, network, non-2xx, timeout or bad payload"""

    def __init__(self, provider: str, message: str, status: Optional[int] = None):
        self.provider = provider
        self.status = status
        super().__init__(f"{provider}: {message}")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_degraded(self) -> bool:
        return False


@dataclass(frozen=True)
class Degraded(Generic[T]):
    value: T
    reason: str

    @property
    def is_degraded(self) -> bool:
        return True


ProviderResult = Union[Ok[T], Degraded[T]]


async def attempt(call: Awaitable[T], fallback: T, label: str) -> ProviderResult:
    """
    Await a provider call and turn a ProviderError into a Degraded result

    Args:
        call: Awaitable provider call
        fallback: Value carried by the Degraded branch
        label: Name used in the log line

    Returns:
        Ok(value) on success, Degraded(fallback, reason) on ProviderError
    """
    try:
        return Ok(await call)
    except ProviderError as e:
        logger.warning(f"[DEGRADED] {label}: {e}")
        return Degraded(fallback, str(e))


class BaseProvider(ABC):
    """
    Abstract base class for HTTP data providers
    Owns one aiohttp session and enforces a per-call timeout
    """

    def __init__(self, name: str, api_key: Optional[str] = None, timeout_seconds: float = 10.0):
        self.name = name
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def is_available(self) -> bool:
        return self._check_availability()

    @abstractmethod
    def _check_availability(self) -> bool:
        """
        Check if the provider can be used (credentials configured)

        Returns:
            True if provider can be used, False otherwise
        """
        pass

    def require_available(self) -> None:
        if not self.is_available:
            raise ProviderError(self.name, "not configured")

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds)
            )
        return self._session

    async def close(self):
        """Close the session"""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        GET a JSON object

        Raises:
            ProviderError: on network failure, timeout, non-2xx status or non-object body
        """
        session = await self._get_session()
        try:
            async with session.get(url, params=params, headers=headers) as response:
                if response.status < 200 or response.status >= 300:
                    body = await response.text()
                    raise ProviderError(
                        self.name,
                        f"HTTP {response.status}: {body[:200]}",
                        status=response.status
                    )
                data = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise ProviderError(self.name, f"timed out after {self.timeout_seconds}s") from e
        except aiohttp.ClientError as e:
            raise ProviderError(self.name, f"request failed: {e}") from e
        except ValueError as e:
            raise ProviderError(self.name, f"invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ProviderError(self.name, "unexpected response format")
        return data
