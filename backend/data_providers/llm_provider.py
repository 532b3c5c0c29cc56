"""
LLM Chat Completion Provider
OpenAI-compatible chat completions for OpenRouter or OpenAI through the openai SDK
"""

import logging
from typing import Dict, Optional

import openai

from .base_provider import ProviderError

logger = logging.getLogger(__name__)


class ChatCompletionProvider:
    """
    JSON-mode chat completions

    Both supported backends speak the OpenAI wire format, so the only
    difference is base URL, default model and the extra headers OpenRouter wants.
    """

    BACKENDS: Dict[str, Dict[str, Optional[str]]] = {
        "openrouter": {
            "base_url": "https://openrouter.ai/api/v1",
            "model": "anthropic/claude-3-haiku",
        },
        "openai": {
            "base_url": None,
            "model": "gpt-4o-mini",
        },
    }

    def __init__(
        self,
        provider: str = "openrouter",
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        http_referer: Optional[str] = None,
        timeout_seconds: float = 10.0
    ):
        if provider not in self.BACKENDS:
            raise ValueError(f"Unsupported LLM provider: {provider}")

        self.name = provider
        self.api_key = api_key
        self.model = model or self.BACKENDS[provider]["model"]
        self.http_referer = http_referer
        self.timeout_seconds = timeout_seconds
        self._client: Optional[openai.AsyncOpenAI] = None

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            headers = {}
            if self.name == "openrouter" and self.http_referer:
                headers["HTTP-Referer"] = self.http_referer
            self._client = openai.AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.BACKENDS[self.name]["base_url"],
                default_headers=headers or None,
                timeout=self.timeout_seconds,
                max_retries=0,
            )
        return self._client

    async def complete_json(self, system_message: str, prompt: str) -> str:
        """
        Request a JSON object completion

        Args:
            system_message: System role content
            prompt: User role content

        Returns:
            Raw message content (may still be malformed JSON)

        Raises:
            ProviderError: missing key, auth, rate limit, network, timeout or empty completion
        """
        if not self.is_available:
            raise ProviderError(self.name, "not configured")

        client = self._get_client()
        try:
            completion = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_message},
                    {"role": "user", "content": prompt}
                ],
                temperature=0.3,
                response_format={"type": "json_object"}
            )
        except openai.APIStatusError as e:
            raise ProviderError(self.name, f"HTTP {e.status_code}: {e.message}", status=e.status_code) from e
        except openai.OpenAIError as e:
            raise ProviderError(self.name, f"request failed: {e}") from e

        if not completion.choices:
            raise ProviderError(self.name, "no choices in completion")
        content = completion.choices[0].message.content
        if not content:
            raise ProviderError(self.name, "empty completion")
        return content

    async def close(self):
        if self._client is not None:
            await self._client.close()
            self._client = None
