"""Shared pytest fixtures."""

from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, DebateConfig, ModeConfig, ServerConfig, UpstreamConfig
from stancechat.generator import ResponseGenerator
from stancechat.models import DebateTurnRequest, GenerationRequest, ModelResponse
from stancechat.modes import ModeRegistry
from stancechat.providers.base import AIProvider


@pytest.fixture
def sample_upstream_config() -> UpstreamConfig:
    return UpstreamConfig(
        api_key_env="TEST_API_KEY",
        model="claude-test-1",
        max_tokens=300,
        timeout_sec=5,
        base_url=None,
    )


@pytest.fixture
def sample_mode_configs() -> dict[str, ModeConfig]:
    return {
        "contrarian": ModeConfig(
            name="contrarian",
            label="Contrarian",
            icon="!",
            description="Challenges",
            system_prompt="Disagree thoughtfully.",
            mock_reply="I'd challenge that assumption, but I'm not properly configured yet.",
        ),
        "agreeable": ModeConfig(
            name="agreeable",
            label="Agreeable",
            icon="+",
            description="Supports",
            system_prompt="Agree warmly.",
            mock_reply="I'd love to expand on that, but I need proper configuration first.",
        ),
        "debate": ModeConfig(
            name="debate",
            label="Debate",
            icon="*",
            description="Self-debate",
            system_prompt="Generate ONLY the specified speaker's statement.",
            mock_reply="I'd happily argue both sides.",
            mock_turn_reply='{speaker}: I would argue {stance} "{topic}".',
        ),
    }


@pytest.fixture
def sample_app_config(sample_upstream_config, sample_mode_configs) -> AppConfig:
    return AppConfig(
        server=ServerConfig(host="127.0.0.1", port=3001),
        upstream=sample_upstream_config,
        debate=DebateConfig(turn_delay_sec=0.0, max_message_length=1000),
        modes=sample_mode_configs,
        api_key=None,
    )


@pytest.fixture
def registry(sample_mode_configs) -> ModeRegistry:
    return ModeRegistry.from_config(sample_mode_configs)


@pytest.fixture
def mock_generator(registry) -> ResponseGenerator:
    """Generator with no credential: always returns mock text."""
    return ResponseGenerator(registry, provider=None)


class MockProvider(AIProvider):
    """Test double AIProvider."""

    def __init__(self, response_content: str = "Mock response") -> None:
        self._response_content = response_content
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because generate is defined in the class body below.
        self.generate = AsyncMock(  # type: ignore[assignment]
            return_value=ModelResponse(
                provider="mock",
                model="mock-model",
                content=response_content,
                latency_sec=0.1,
                token_count=10,
            )
        )

    def name(self) -> str:
        return "mock"

    def model_string(self) -> str:
        return "mock-model"

    async def generate(self, system_prompt: str, content: str) -> ModelResponse:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return ModelResponse("mock", "mock-model", self._response_content, 0.1, 10)


class ScriptedGenerator:
    """TurnGenerator double: one scripted outcome per call, in order.

    A str entry is returned, an Exception entry is raised. Once the script is
    exhausted, replies fall back to "<speaker>: statement <n>".
    """

    def __init__(self, script: list[str | Exception] | None = None) -> None:
        self._script = list(script or [])
        self.requests: list[GenerationRequest] = []

    async def generate(self, request: GenerationRequest) -> str:
        self.requests.append(request)
        if self._script:
            outcome = self._script.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        if isinstance(request, DebateTurnRequest):
            return f"{request.speaker.value}: statement {len(self.requests)}"
        return f"reply {len(self.requests)}"


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
def scripted_generator() -> ScriptedGenerator:
    return ScriptedGenerator()
