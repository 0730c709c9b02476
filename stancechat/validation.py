"""Input sanitization and chat payload validation."""

from stancechat.errors import (
    INVALID_BODY,
    EmptyMessageError,
    InvalidModeError,
    InvalidSpeakerError,
    MissingTopicError,
    ValidationError,
)
from stancechat.models import DebateTurnRequest, DirectRequest, GenerationRequest, Mode, Speaker

DEFAULT_MAX_LENGTH = 1000


def sanitize(text: str, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """Trim surrounding whitespace and silently cut to max_length characters."""
    return text.strip()[:max_length]


def is_non_empty_string(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def parse_mode(value: object) -> Mode:
    if isinstance(value, Mode):
        return value
    try:
        return Mode(value)
    except ValueError as exc:
        raise InvalidModeError() from exc


def parse_speaker(value: object) -> Speaker:
    if isinstance(value, Speaker):
        return value
    try:
        return Speaker(value)
    except ValueError as exc:
        raise InvalidSpeakerError() from exc


def validate_debate_turn(topic: object, speaker: object, max_length: int = DEFAULT_MAX_LENGTH) -> DebateTurnRequest:
    """Check a debate turn: only topic and speaker matter."""
    if not is_non_empty_string(topic):
        raise MissingTopicError()
    return DebateTurnRequest(topic=sanitize(topic, max_length), speaker=parse_speaker(speaker))


def validate_chat_request(payload: object, max_length: int = DEFAULT_MAX_LENGTH) -> GenerationRequest:
    """Validate a decoded POST /chat body and return the sanitized request.

    Raises:
        ValidationError: payload is not an object.
        InvalidModeError: mode is outside the enumerated set.
        MissingTopicError / InvalidSpeakerError: malformed debate turn.
        EmptyMessageError: message missing or blank for a direct request.
    """
    if not isinstance(payload, dict):
        raise ValidationError(INVALID_BODY)

    mode = parse_mode(payload.get("mode"))
    topic = payload.get("topic")
    speaker = payload.get("speaker")

    if mode is Mode.DEBATE and (topic is not None or speaker is not None):
        return validate_debate_turn(topic, speaker, max_length)

    message = payload.get("message")
    if not is_non_empty_string(message):
        raise EmptyMessageError()
    return DirectRequest(mode=mode, message=sanitize(message, max_length))
