"""Pure dataclasses and enums for chat turns, debate sessions and generation requests."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class Mode(str, Enum):
    CONTRARIAN = "contrarian"
    AGREEABLE = "agreeable"
    DEBATE = "debate"


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Stance(str, Enum):
    FOR = "for"
    AGAINST = "against"


class Speaker(str, Enum):
    """The two fixed debate identities. AI-1 always opens."""

    AI_1 = "AI-1"
    AI_2 = "AI-2"

    @property
    def other(self) -> "Speaker":
        return Speaker.AI_2 if self is Speaker.AI_1 else Speaker.AI_1

    @property
    def stance(self) -> Stance:
        return Stance.FOR if self is Speaker.AI_1 else Stance.AGAINST


class DebateState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    STOPPED = "stopped"  # stop requested, loop still settling


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ChatTurn:
    role: Role
    content: str
    mode: Mode | None = None
    speaker: Speaker | None = None
    timestamp: datetime = field(default_factory=_utcnow)
    is_error: bool = False


@dataclass
class DebateSession:
    topic: str
    active: bool = True
    current_speaker: Speaker = Speaker.AI_1


@dataclass(frozen=True)
class DirectRequest:
    """A single user message answered under one mode."""

    mode: Mode
    message: str

    def to_payload(self) -> dict[str, str]:
        return {"message": self.message, "mode": self.mode.value}


@dataclass(frozen=True)
class DebateTurnRequest:
    """One speaker's turn on a debate topic. Carries no user message."""

    topic: str
    speaker: Speaker

    @property
    def mode(self) -> Mode:
        return Mode.DEBATE

    def to_payload(self) -> dict[str, str]:
        return {
            "message": f"{self.speaker.value} speaks on: {self.topic}",
            "mode": Mode.DEBATE.value,
            "topic": self.topic,
            "speaker": self.speaker.value,
        }


GenerationRequest = DirectRequest | DebateTurnRequest


@dataclass
class ModelResponse:
    provider: str          # "anthropic"
    model: str             # actual model string used
    content: str
    latency_sec: float
    token_count: int | None
