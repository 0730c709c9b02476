"""Error taxonomy shared by the validator, generator, orchestrator and HTTP layers."""

API_REQUEST_FAILED = "Failed to communicate with AI service"
EMPTY_UPSTREAM_RESPONSE = "No response text received from API"
INVALID_BODY = "Invalid request body"
INVALID_JSON = "Invalid JSON"
INVALID_MESSAGE = "Message content is required"
INVALID_MODE = "Invalid mode specified"
INVALID_SPEAKER = "Invalid debate speaker specified"
INTERNAL_ERROR = "An internal error occurred"
MISSING_TOPIC = "Please enter a debate topic"
NETWORK_ERROR = "Network error occurred"
NOT_FOUND = "Not found"
UPSTREAM_TIMEOUT = "AI service request timed out"


class ChatError(Exception):
    """Base for every error surfaced to a chat user or HTTP caller."""

    default_status: int = 500

    def __init__(self, message: str, status_code: int | None = None, details: str | None = None) -> None:
        self.message = message
        self.status_code = status_code if status_code is not None else self.default_status
        self.details = details
        super().__init__(message)


class ValidationError(ChatError):
    default_status = 400


class EmptyMessageError(ValidationError):
    def __init__(self, message: str = INVALID_MESSAGE) -> None:
        super().__init__(message)


class InvalidModeError(ValidationError):
    def __init__(self, message: str = INVALID_MODE) -> None:
        super().__init__(message)


class MissingTopicError(ValidationError):
    def __init__(self, message: str = MISSING_TOPIC) -> None:
        super().__init__(message)


class InvalidSpeakerError(ValidationError):
    def __init__(self, message: str = INVALID_SPEAKER) -> None:
        super().__init__(message)


class UnknownModeError(ChatError):
    """A mode outside the enumerated set reached the registry."""

    def __init__(self, mode: object) -> None:
        self.mode = mode
        super().__init__(f"Unknown mode: {mode!r}")


class UpstreamError(ChatError):
    """The AI provider call failed. Never carries a raw transport exception."""


class EmptyUpstreamResponseError(UpstreamError):
    def __init__(self) -> None:
        super().__init__(EMPTY_UPSTREAM_RESPONSE)


class ApiClientError(ChatError):
    """Raised by the HTTP client. status_code 0 means the server was unreachable."""


class DebateInProgressError(ChatError):
    default_status = 409

    def __init__(self) -> None:
        super().__init__("A debate is already in progress")


def user_message(exc: BaseException) -> str:
    """Text shown in the transcript when a turn fails."""
    if isinstance(exc, ChatError):
        if exc.status_code == 0:
            return "Unable to connect to the server. Please check if the API server is running."
        if exc.status_code == 400:
            return "Invalid request. Please try again."
    return "Sorry, I encountered an error processing your message."
