"""Async HTTP client for a running stancechat server."""

import logging

import httpx

from stancechat.errors import API_REQUEST_FAILED, INTERNAL_ERROR, NETWORK_ERROR, ApiClientError
from stancechat.models import GenerationRequest

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 60.0


class ChatClient:
    """Talks to POST /chat and GET /health.

    Implements the same generate(request) coroutine as ResponseGenerator, so a
    ChatSession or DebateOrchestrator can run against a remote server.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "ChatClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def generate(self, request: GenerationRequest) -> str:
        payload = request.to_payload()
        logger.debug("Sending chat request: mode=%s", payload["mode"])
        try:
            response = await self._client.post("/chat", json=payload)
        except httpx.HTTPError as exc:
            logger.error("Network error occurred: %s", exc)
            raise ApiClientError(NETWORK_ERROR, 0, str(exc) or type(exc).__name__) from exc

        if response.is_error:
            error, details = self._parse_error(response)
            raise ApiClientError(error, response.status_code, details)

        try:
            data = response.json()
        except ValueError as exc:
            raise ApiClientError("Invalid response format from server", response.status_code) from exc

        reply = data.get("response") if isinstance(data, dict) else None
        if not reply:
            raise ApiClientError("Invalid response format from server", response.status_code)

        logger.debug("Received response (%d chars)", len(reply))
        return reply

    @staticmethod
    def _parse_error(response: httpx.Response) -> tuple[str, str | None]:
        try:
            data = response.json()
        except ValueError:
            return INTERNAL_ERROR, f"HTTP {response.status_code}"
        if not isinstance(data, dict):
            return INTERNAL_ERROR, f"HTTP {response.status_code}"
        return str(data.get("error") or API_REQUEST_FAILED), data.get("details")

    async def health(self) -> bool:
        """True when the server answers GET /health with 2xx. Never raises."""
        try:
            response = await self._client.get("/health")
        except httpx.HTTPError as exc:
            logger.debug("Health check failed: %s", exc)
            return False
        return response.is_success
