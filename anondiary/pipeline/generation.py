"""Client for the external text-generation endpoint.

Speaks the OpenAI-compatible chat completions protocol (Groq by default).
One attempt per call, no retries; callers decide what to do on failure.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx

from ..config import Settings
from ..errors import GenerationError
from ..logging_config import get_logger

logger = get_logger("generation")

# Cap on how much of an error body is kept on the exception
MAX_ERROR_BODY = 2000


class GenerationClient:
    """Async chat-completions client.

    Usage::

        client = GenerationClient.from_settings(settings)
        text = await client.generate(prompt)
        await client.aclose()
    """

    def __init__(
        self,
        api_key: Optional[str],
        *,
        url: str,
        model: str,
        temperature: float = 0.8,
        max_tokens: int = 1800,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self.url = url
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "GenerationClient":
        return cls(
            settings.groq_api_key,
            url=settings.generation_url,
            model=settings.generation_model,
            temperature=settings.generation_temperature,
            max_tokens=settings.generation_max_tokens,
            timeout=settings.generation_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "X-Title": "/diary/",
        }

    def _payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    async def generate(self, prompt: str) -> str:
        """Send ``prompt`` as a single user message and return the completion text.

        Raises:
            GenerationError: missing credential, transport failure or timeout,
                non-success status, or a response without completion text.
        """
        if not self._api_key:
            raise GenerationError("No API key configured for the generation endpoint")

        try:
            response = await self._client.post(
                self.url, headers=self._headers(), json=self._payload(prompt)
            )
        except httpx.HTTPError as exc:
            logger.debug(f"Generation request failed: {exc}", exc_info=True)
            raise GenerationError(f"Generation request failed: {exc}") from exc

        if not response.is_success:
            body = response.text[:MAX_ERROR_BODY]
            logger.warning(f"LLM failed: {response.status_code} {body}")
            raise GenerationError(
                f"Generation endpoint returned {response.status_code}",
                status_code=response.status_code,
                body=body,
            )

        return _extract_completion(response)


def _extract_completion(response: httpx.Response) -> str:
    """Pull ``choices[0].message.content`` out of a chat completion response."""
    try:
        data = response.json()
        content = data["choices"][0]["message"]["content"]
    except (json.JSONDecodeError, KeyError, IndexError, TypeError) as exc:
        raise GenerationError(
            "Malformed generation response",
            status_code=response.status_code,
            body=response.text[:MAX_ERROR_BODY],
        ) from exc

    if not isinstance(content, str) or not content.strip():
        raise GenerationError("Generation endpoint returned an empty completion")
    return content.strip()
