"""Anthropic Claude provider using anthropic SDK with native async."""

import asyncio
import logging
import time

import anthropic as anthropic_sdk

from config.config_loader import UpstreamConfig
from stancechat.errors import (
    API_REQUEST_FAILED,
    UPSTREAM_TIMEOUT,
    EmptyUpstreamResponseError,
    UpstreamError,
)
from stancechat.models import ModelResponse
from stancechat.providers.base import AIProvider

logger = logging.getLogger(__name__)

_GATEWAY_TIMEOUT = 504


class AnthropicProvider(AIProvider):
    """Anthropic Messages API via anthropic SDK. One attempt per call, no SDK retries."""

    def __init__(self, config: UpstreamConfig, api_key: str) -> None:
        self._config = config
        if not api_key.strip():
            raise ValueError(f"Missing API key: {config.api_key_env}")
        self._client = anthropic_sdk.AsyncAnthropic(
            api_key=api_key,
            base_url=config.base_url,
            max_retries=0,
        )

    def name(self) -> str:
        return "anthropic"

    def model_string(self) -> str:
        return self._config.model

    async def generate(self, system_prompt: str, content: str) -> ModelResponse:
        start = time.monotonic()
        logger.debug("Sending request to Anthropic API (%d chars)", len(content))
        try:
            response = await asyncio.wait_for(
                self._client.messages.create(
                    model=self._config.model,
                    max_tokens=self._config.max_tokens,
                    system=system_prompt,
                    messages=[{"role": "user", "content": content}],
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            logger.error("Anthropic request timed out after %ss", self._config.timeout_sec)
            raise UpstreamError(
                UPSTREAM_TIMEOUT,
                _GATEWAY_TIMEOUT,
                f"Request timed out after {self._config.timeout_sec}s",
            ) from exc
        except anthropic_sdk.APIStatusError as exc:
            body = exc.response.text
            logger.error("Anthropic API error: status=%d body=%s", exc.status_code, body)
            raise UpstreamError(API_REQUEST_FAILED, exc.status_code, body) from exc
        except Exception as exc:
            logger.error("Failed to generate AI response: %s", exc)
            raise UpstreamError(API_REQUEST_FAILED, 500, str(exc) or type(exc).__name__) from exc

        latency = time.monotonic() - start

        text = next(
            (block.text for block in response.content or [] if block.type == "text"),
            None,
        )
        if not text or not text.strip():
            raise EmptyUpstreamResponseError()

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.input_tokens + response.usage.output_tokens

        logger.debug(
            "Anthropic reply: %.2fs, %s tokens, %d chars",
            latency,
            token_count,
            len(text),
        )

        return ModelResponse(
            provider=self.name(),
            model=response.model or self._config.model,
            content=text,
            latency_sec=latency,
            token_count=token_count,
        )
