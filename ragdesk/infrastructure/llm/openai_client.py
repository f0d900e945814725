import logging
from typing import Optional

from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
)

from ragdesk.core.exceptions import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


class OpenAIChatClient:
    """LLM client for any OpenAI-compatible chat completions API."""

    def __init__(
        self,
        base_url: str = "https://api.openai.com/v1",
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
    ):
        """Initialize client.

        Args:
            base_url: API URL.
            api_key: API key; calls fail with ConfigurationError without one.
            model: Model name.
        """
        self._api_key = api_key
        self._model = model
        self._client: Optional[AsyncOpenAI] = None
        if api_key:
            # Retries belong to callers that want them (relevance filter).
            self._client = AsyncOpenAI(base_url=base_url, api_key=api_key, max_retries=0)

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def complete_chat(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        temperature: float,
        timeout: float,
    ) -> str:
        """Run one non-streaming chat completion.

        Raises:
            ConfigurationError: No API key configured.
            UpstreamError: Timeout, connection or HTTP failure.
        """
        if self._client is None:
            raise ConfigurationError(
                "LLM is not configured. Set LLM_API_KEY to enable answer generation."
            )

        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
                timeout=timeout,
            )
        except APITimeoutError as e:
            raise UpstreamError(f"LLM call timed out after {timeout}s") from e
        except APIConnectionError as e:
            raise UpstreamError(f"LLM connection failed: {e}") from e
        except APIStatusError as e:
            raise UpstreamError(
                f"LLM call failed: HTTP {e.status_code}", status_code=e.status_code
            ) from e

        content = response.choices[0].message.content or ""
        logger.debug(f"LLM returned {len(content)} chars")
        return content
