# llm/client.py
"""
Thin async wrapper over the OpenAI chat completions API.
Every failure (missing key, timeout, API error, unparseable JSON) surfaces as
SuggestionServiceError so callers can fall back to the next tier.
"""

import json
import asyncio
from typing import Optional, Dict, Any
from loguru import logger
from openai import AsyncOpenAI, OpenAIError

from giftai.config import settings
from giftai.errors import SuggestionServiceError


class LLMClient:
    """JSON and free-text completions with a hard per-call timeout"""

    def __init__(self, api_key: str = None, model: str = None, client=None):
        self.api_key = settings.OPENAI_API_KEY if api_key is None else api_key
        self.model = model or settings.OPENAI_MODEL
        self._client = client

        if self._client is None and self.enabled:
            try:
                self._client = AsyncOpenAI(api_key=self.api_key)
                logger.info(f"LLMClient: using OpenAI ({self.model})")
            except OpenAIError as e:
                logger.warning(f"LLMClient: OpenAI init failed: {e}")

    @property
    def enabled(self) -> bool:
        if self._client is not None:
            return True
        return bool(self.api_key) and not self.api_key.startswith("sk-your")

    async def _complete(
        self,
        system: str,
        user: str,
        timeout: float,
        temperature: float,
        json_mode: bool,
        max_tokens: Optional[int] = None
    ) -> str:
        if self._client is None:
            raise SuggestionServiceError("LLM client is not configured (empty API key)")

        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        try:
            completion = await asyncio.wait_for(
                self._client.chat.completions.create(**kwargs),
                timeout=timeout
            )
        except asyncio.TimeoutError as e:
            raise SuggestionServiceError(f"LLM call timed out after {timeout:.0f}s") from e
        except Exception as e:
            # SDK raises many error types (network, auth, rate limit)
            raise SuggestionServiceError(f"LLM call failed: {e}") from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content or not content.strip():
            raise SuggestionServiceError("Empty response from LLM")
        return content.strip()

    async def complete_json(
        self,
        system: str,
        user: str,
        timeout: float = None,
        temperature: float = 0.7
    ) -> Dict[str, Any]:
        """Gets a JSON object response, parsed"""
        raw = await self._complete(
            system, user,
            timeout=timeout or settings.SUGGESTION_TIMEOUT,
            temperature=temperature,
            json_mode=True
        )
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SuggestionServiceError("LLM returned malformed JSON") from e
        if not isinstance(data, dict):
            raise SuggestionServiceError("LLM returned a non-object JSON payload")
        return data

    async def complete_text(
        self,
        system: str,
        user: str,
        timeout: float = None,
        temperature: float = 0.8,
        max_tokens: int = 150
    ) -> str:
        """Gets a normal text response"""
        return await self._complete(
            system, user,
            timeout=timeout or settings.MESSAGE_TIMEOUT,
            temperature=temperature,
            json_mode=False,
            max_tokens=max_tokens
        )
