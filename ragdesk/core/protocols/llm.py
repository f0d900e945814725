"""LLM protocol for dependency injection."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class LLMProtocol(Protocol):
    """Protocol for chat-completion client."""

    async def complete_chat(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        temperature: float,
        timeout: float,
    ) -> str:
        """Run one chat completion.

        Args:
            system_prompt: System instruction.
            user_prompt: User message.
            max_tokens: Max response tokens.
            temperature: Sampling temperature.
            timeout: Seconds before the call fails.

        Returns:
            Assistant text.

        Raises:
            ConfigurationError: Missing API key or endpoint.
            UpstreamError: Network, timeout or HTTP failure.
        """
        ...
