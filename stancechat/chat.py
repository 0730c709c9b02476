"""Mode routing for single exchanges: one message in, one reply (or error turn) out."""

import logging

from stancechat.errors import user_message
from stancechat.generator import TurnGenerator
from stancechat.models import ChatTurn, Mode, Role
from stancechat.validation import DEFAULT_MAX_LENGTH, validate_chat_request

logger = logging.getLogger(__name__)


class ChatSession:
    """In-memory transcript of one user's conversation."""

    def __init__(
        self,
        generator: TurnGenerator,
        transcript: list[ChatTurn] | None = None,
        max_message_length: int = DEFAULT_MAX_LENGTH,
    ) -> None:
        self._generator = generator
        self._max_message_length = max_message_length
        self.transcript: list[ChatTurn] = transcript if transcript is not None else []

    async def send(self, message: str, mode: Mode | str) -> ChatTurn:
        """Append the user turn, generate once, append and return the reply or error turn.

        Raises:
            ValidationError: blank message or unknown mode; nothing is appended.
        """
        request = validate_chat_request({"message": message, "mode": mode}, self._max_message_length)
        self.transcript.append(ChatTurn(role=Role.USER, content=request.message))

        try:
            content = await self._generator.generate(request)
        except Exception as exc:
            logger.error("Chat request in %s mode failed: %s", request.mode.value, exc)
            reply = ChatTurn(
                role=Role.ASSISTANT,
                content=user_message(exc),
                mode=request.mode,
                is_error=True,
            )
        else:
            reply = ChatTurn(role=Role.ASSISTANT, content=content, mode=request.mode)
            logger.info("Message exchange completed in %s mode", request.mode.value)

        self.transcript.append(reply)
        return reply
