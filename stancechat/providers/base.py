"""Abstract base for the upstream AI model provider."""

from abc import ABC, abstractmethod

from stancechat.models import ModelResponse


class AIProvider(ABC):
    """Abstract base for AI model providers."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'anthropic')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def generate(self, system_prompt: str, content: str) -> ModelResponse:
        """Make exactly one upstream call.

        Args:
            system_prompt: The mode's system prompt.
            content: The user content (message or synthesized debate instruction).

        Returns:
            ModelResponse dataclass with the first text block and metadata.

        Raises:
            UpstreamError: On API failure, timeout, transport error or empty response.
        """
        ...
