"""Response generation: mode prompt + user content -> one upstream call, or a mock reply."""

import logging
from typing import Protocol

from stancechat.errors import API_REQUEST_FAILED, ChatError, EmptyMessageError, UpstreamError
from stancechat.models import DebateTurnRequest, DirectRequest, GenerationRequest, Mode, Speaker
from stancechat.modes import ModeRegistry
from stancechat.providers.base import AIProvider
from stancechat.validation import DEFAULT_MAX_LENGTH, parse_speaker, sanitize, validate_debate_turn

logger = logging.getLogger(__name__)


class TurnGenerator(Protocol):
    """Anything that turns a GenerationRequest into reply text (local generator or HTTP client)."""

    async def generate(self, request: GenerationRequest) -> str:
        ...


def debate_instruction(request: DebateTurnRequest) -> str:
    """User content sent upstream for a debate turn."""
    speaker = request.speaker
    return (
        f'Debate topic: "{request.topic}"\n\n'
        f"It is {speaker.value}'s turn. {speaker.value} argues {speaker.stance.value.upper()} the topic. "
        f"Write ONLY {speaker.value}'s next statement, starting with \"{speaker.value}:\", "
        f"in 2-3 complete sentences. Do not write anything for {speaker.other.value}."
    )


def build_request(
    registry: ModeRegistry,
    mode: Mode | str,
    message: str | None,
    topic: str | None = None,
    speaker: Speaker | str | None = None,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> GenerationRequest:
    """Turn loosely-typed call arguments into a tagged request.

    Debate mode with both topic and speaker becomes a DebateTurnRequest and the
    message is ignored; everything else needs a non-empty message.
    """
    resolved = registry.profile_for(mode).mode
    if resolved is Mode.DEBATE and topic is not None and speaker is not None:
        return validate_debate_turn(topic, parse_speaker(speaker), max_length)
    sanitized = sanitize(message or "", max_length)
    if not sanitized:
        raise EmptyMessageError()
    return DirectRequest(mode=resolved, message=sanitized)


class ResponseGenerator:
    """Produces reply text for a GenerationRequest.

    With no provider (no credential configured) every call returns the
    registry's deterministic mock text and touches no network.
    """

    def __init__(
        self,
        registry: ModeRegistry,
        provider: AIProvider | None = None,
        max_message_length: int = DEFAULT_MAX_LENGTH,
    ) -> None:
        self._registry = registry
        self._provider = provider
        self._max_message_length = max_message_length

    @property
    def registry(self) -> ModeRegistry:
        return self._registry

    @property
    def has_credential(self) -> bool:
        return self._provider is not None

    def _prepare(self, request: GenerationRequest) -> tuple[Mode, str]:
        if isinstance(request, DebateTurnRequest):
            return Mode.DEBATE, debate_instruction(request)
        if isinstance(request, DirectRequest):
            content = sanitize(request.message, self._max_message_length)
            if not content:
                raise EmptyMessageError()
            return request.mode, content
        raise TypeError(f"Unsupported generation request: {type(request).__name__}")

    def _mock_reply(self, request: GenerationRequest) -> str:
        if isinstance(request, DebateTurnRequest):
            return self._registry.mock_reply_for(Mode.DEBATE, request.topic, request.speaker)
        return self._registry.mock_reply_for(request.mode)

    async def generate(self, request: GenerationRequest) -> str:
        """Single attempt. Raises ValidationError, UnknownModeError or UpstreamError."""
        mode, content = self._prepare(request)
        system_prompt = self._registry.prompt_for(mode)

        if self._provider is None:
            logger.warning("API key not configured, returning mock response")
            return self._mock_reply(request)

        logger.info("Generating %s reply via %s", mode.value, self._provider.name())
        try:
            response = await self._provider.generate(system_prompt, content)
        except ChatError:
            raise
        except Exception as exc:
            logger.error("Provider %s failed: %s", self._provider.name(), exc)
            raise UpstreamError(API_REQUEST_FAILED, 500, str(exc) or type(exc).__name__) from exc
        return response.content

    async def respond(
        self,
        mode: Mode | str,
        message: str | None,
        topic: str | None = None,
        speaker: Speaker | str | None = None,
    ) -> str:
        request = build_request(self._registry, mode, message, topic, speaker, self._max_message_length)
        return await self.generate(request)
