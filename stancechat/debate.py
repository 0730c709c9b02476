"""Debate orchestration: two speakers, strict alternation, one generation in flight."""

import asyncio
import logging
from collections.abc import Callable

from stancechat.errors import DebateInProgressError, MissingTopicError, user_message
from stancechat.generator import TurnGenerator
from stancechat.models import (
    ChatTurn,
    DebateSession,
    DebateState,
    DebateTurnRequest,
    Mode,
    Role,
    Speaker,
)
from stancechat.validation import DEFAULT_MAX_LENGTH, is_non_empty_string, sanitize

logger = logging.getLogger(__name__)

DEFAULT_TURN_DELAY_SEC = 1.5


class DebateOrchestrator:
    """Drives a debate between AI-1 and AI-2 on a single topic.

    State machine::

        idle --start(topic)--> active(AI-1)
        active(X) --turn appended--> active(other(X))
        active --stop--> stopped --loop boundary--> idle
        active --generation failure--> idle (after one error turn)

    Cancellation is cooperative: stop() is read once after each generation
    resolves and once after each inter-turn delay. In-flight calls are never
    aborted; a reply that lands after stop() is discarded.
    """

    def __init__(
        self,
        generator: TurnGenerator,
        transcript: list[ChatTurn] | None = None,
        turn_delay_sec: float = DEFAULT_TURN_DELAY_SEC,
        max_topic_length: int = DEFAULT_MAX_LENGTH,
        on_turn_start: Callable[[Speaker], None] | None = None,
        on_turn: Callable[[ChatTurn], None] | None = None,
    ) -> None:
        self._generator = generator
        self._transcript: list[ChatTurn] = transcript if transcript is not None else []
        self._turn_delay_sec = turn_delay_sec
        self._max_topic_length = max_topic_length
        self._on_turn_start = on_turn_start
        self._on_turn = on_turn
        self._session: DebateSession | None = None
        self._state = DebateState.IDLE
        self._running = False

    @property
    def state(self) -> DebateState:
        return self._state

    @property
    def session(self) -> DebateSession | None:
        return self._session

    @property
    def transcript(self) -> list[ChatTurn]:
        return self._transcript

    @property
    def current_speaker(self) -> Speaker:
        return self._session.current_speaker if self._session else Speaker.AI_1

    def start(self, topic: str) -> DebateSession:
        """Open a session on topic with AI-1 to speak first.

        Raises:
            MissingTopicError: topic is blank; state is left unchanged.
            DebateInProgressError: a debate is already active or settling.
        """
        if self._state is not DebateState.IDLE:
            raise DebateInProgressError()
        if not is_non_empty_string(topic):
            logger.warning("Debate start rejected: empty topic")
            raise MissingTopicError()

        self._session = DebateSession(topic=sanitize(topic, self._max_topic_length))
        self._state = DebateState.ACTIVE
        logger.info("Debate started on: %s", self._session.topic)
        return self._session

    def stop(self) -> None:
        """Request cancellation. Safe to call in any state, any number of times."""
        if self._state is DebateState.IDLE:
            logger.debug("Stop requested with no active debate")
            return
        if self._running:
            # The loop settles to idle at its next boundary.
            self._state = DebateState.STOPPED
        else:
            self._reset()
        logger.info("Debate stopped")

    def _reset(self) -> None:
        self._state = DebateState.IDLE
        if self._session is not None:
            self._session.active = False
            self._session.current_speaker = Speaker.AI_1

    def _append(self, turn: ChatTurn, produced: list[ChatTurn]) -> None:
        self._transcript.append(turn)
        produced.append(turn)
        if self._on_turn:
            self._on_turn(turn)

    async def run(self, max_turns: int | None = None) -> list[ChatTurn]:
        """Run turns until stopped, a generation fails, or max_turns succeed.

        Returns:
            The turns appended to the transcript by this run, error turn included.

        Raises:
            DebateInProgressError: another run() is already driving this session.
        """
        if self._running:
            raise DebateInProgressError()
        if self._state is not DebateState.ACTIVE or self._session is None:
            logger.debug("run() called with no active debate")
            return []

        session = self._session
        produced: list[ChatTurn] = []
        completed = 0
        self._running = True
        try:
            while self._state is DebateState.ACTIVE:
                if max_turns is not None and completed >= max_turns:
                    logger.info("Debate reached %d turns", completed)
                    break

                speaker = session.current_speaker
                if self._on_turn_start:
                    self._on_turn_start(speaker)

                request = DebateTurnRequest(topic=session.topic, speaker=speaker)
                try:
                    content = await self._generator.generate(request)
                except Exception as exc:
                    logger.error("Debate turn for %s failed: %s", speaker.value, exc)
                    self._append(
                        ChatTurn(
                            role=Role.ASSISTANT,
                            content=user_message(exc),
                            mode=Mode.DEBATE,
                            is_error=True,
                        ),
                        produced,
                    )
                    break

                if self._state is not DebateState.ACTIVE:
                    logger.info("Reply from %s arrived after stop; discarded", speaker.value)
                    break

                self._append(
                    ChatTurn(role=Role.ASSISTANT, content=content, mode=Mode.DEBATE, speaker=speaker),
                    produced,
                )
                completed += 1
                logger.info("%s spoke successfully", speaker.value)
                session.current_speaker = speaker.other

                if max_turns is not None and completed >= max_turns:
                    continue
                await asyncio.sleep(self._turn_delay_sec)
        finally:
            self._running = False
            self._reset()

        return produced

    async def debate(self, topic: str, max_turns: int | None = None) -> list[ChatTurn]:
        """start() then run()."""
        self.start(topic)
        return await self.run(max_turns=max_turns)
