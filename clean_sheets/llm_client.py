from __future__ import annotations

import logging
from typing import Any, Dict, List

import httpx
from openai import APIStatusError, AsyncOpenAI

from .config import LLMConfig


LOGGER = logging.getLogger(__name__)


class UpstreamAPIError(RuntimeError):
    """Raised when the completion API answers with a non-success status."""

    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(f"OpenRouter API error: {status_code}")
        self.status_code = status_code
        self.body = body


class LLMClient:
    """Single-shot wrapper around the OpenAI SDK pointed at OpenRouter.

    One instance serves one request: it issues exactly one completion call
    and never retries.
    """

    def __init__(
        self,
        conf: LLMConfig,
        api_key: str,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._conf = conf

        client_kwargs: Dict[str, Any] = {
            "api_key": api_key,
            "base_url": conf.base_url,
            "max_retries": 0,
        }
        if conf.request_timeout is not None:
            client_kwargs["timeout"] = conf.request_timeout
        if http_client is not None:
            client_kwargs["http_client"] = http_client

        default_headers: Dict[str, str] = {}
        if conf.http_referer:
            default_headers["HTTP-Referer"] = conf.http_referer
        if conf.x_title:
            default_headers["X-Title"] = conf.x_title
        if default_headers:
            client_kwargs["default_headers"] = default_headers

        self._client = AsyncOpenAI(**client_kwargs)

    @property
    def model_name(self) -> str:
        return self._conf.model

    async def __aenter__(self) -> "LLMClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.close()

    async def complete(self, messages: List[Dict[str, str]]) -> str:
        """Call the chat completion endpoint and return the raw message text."""

        try:
            response = await self._client.chat.completions.create(
                model=self._conf.model,
                messages=messages,
                temperature=self._conf.temperature,
                max_tokens=self._conf.max_output_tokens,
            )
        except APIStatusError as exc:
            body = exc.response.text
            LOGGER.error("OpenRouter error: %s", body)
            raise UpstreamAPIError(exc.status_code, body) from exc

        if not response.choices:
            raise RuntimeError("LLM response does not contain choices")

        return response.choices[0].message.content or ""
