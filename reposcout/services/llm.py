"""
LLM client construction and a single completion helper.

DeepSeek exposes an OpenAI-compatible API, so both providers go through
the ``openai`` SDK.  The client is built once by the request layer and
passed into the pipeline; there is no module-level singleton.
"""

from __future__ import annotations

import asyncio
from typing import Any

from openai import AsyncOpenAI

from reposcout.core.config import Settings
from reposcout.core.errors import LLMError, LLMResponseError, LLMTimeoutError
from reposcout.utils.logging import get_logger

logger = get_logger("reposcout.services.llm")

PROVIDER_DEEPSEEK = "deepseek"
PROVIDER_OPENAI = "openai"


class LLMClient:
    """
    Thin wrapper around ``AsyncOpenAI`` chat completions.

    ``complete()`` returns the message text or raises an LLMError
    subclass; it never returns an empty string.
    """

    def __init__(
        self,
        client: Any,
        *,
        model: str,
        provider: str,
        temperature: float = 0.3,
    ):
        self._client = client
        self.model = model
        self.provider = provider
        self.temperature = temperature

    @property
    def supports_json_mode(self) -> bool:
        # DeepSeek does not fully support response_format
        return self.provider == PROVIDER_OPENAI

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        timeout_s: float,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        request: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature if temperature is None else temperature,
        }
        if max_tokens is not None:
            request["max_tokens"] = max_tokens
        if self.supports_json_mode:
            request["response_format"] = {"type": "json_object"}

        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(**request),
                timeout=timeout_s,
            )
        except asyncio.TimeoutError as exc:
            raise LLMTimeoutError(f"LLM request timed out after {timeout_s:.1f}s") from exc
        except Exception as exc:
            raise LLMError(f"LLM request failed: {exc}") from exc

        if not response.choices:
            raise LLMResponseError("LLM returned no choices")
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise LLMResponseError("Empty LLM response")
        return content

    async def close(self) -> None:
        await self._client.close()


def has_llm_credentials(settings: Settings) -> bool:
    return bool(settings.deepseek_api_key or settings.openai_api_key)


def build_llm_client(settings: Settings) -> LLMClient:
    """
    Build the LLM client for the configured provider.

    Raises RuntimeError when neither DEEPSEEK_API_KEY nor OPENAI_API_KEY
    is configured.
    """
    if settings.deepseek_api_key:
        client = AsyncOpenAI(api_key=settings.deepseek_api_key, base_url=settings.deepseek_base_url)
        logger.info("LLM client initialized (provider=%s, model=%s)", PROVIDER_DEEPSEEK, settings.deepseek_model)
        return LLMClient(
            client,
            model=settings.deepseek_model,
            provider=PROVIDER_DEEPSEEK,
            temperature=settings.llm_temperature,
        )
    if settings.openai_api_key:
        client = AsyncOpenAI(api_key=settings.openai_api_key)
        logger.info("LLM client initialized (provider=%s, model=%s)", PROVIDER_OPENAI, settings.openai_model)
        return LLMClient(
            client,
            model=settings.openai_model,
            provider=PROVIDER_OPENAI,
            temperature=settings.llm_temperature,
        )
    raise RuntimeError("Missing LLM API key: set DEEPSEEK_API_KEY or OPENAI_API_KEY")
