"""Process-wide service object: built once at startup, passed explicitly to every shell."""

import logging
from dataclasses import dataclass

from config.config_loader import AppConfig
from stancechat.generator import ResponseGenerator
from stancechat.modes import ModeRegistry
from stancechat.providers.anthropic import AnthropicProvider
from stancechat.providers.base import AIProvider

logger = logging.getLogger(__name__)


@dataclass
class ChatServices:
    config: AppConfig
    registry: ModeRegistry
    generator: ResponseGenerator

    @property
    def has_api_key(self) -> bool:
        return self.generator.has_credential


def _build_provider(config: AppConfig) -> AIProvider | None:
    """Return the live provider, or None to select the mock path."""
    if not config.api_key:
        return None
    return AnthropicProvider(config.upstream, config.api_key)


def build_services(config: AppConfig, provider: AIProvider | None = None) -> ChatServices:
    """Wire registry, provider and generator from config.

    An explicit provider overrides the one derived from the credential.
    """
    registry = ModeRegistry.from_config(config.modes)
    if provider is None:
        provider = _build_provider(config)
    generator = ResponseGenerator(
        registry,
        provider,
        max_message_length=config.debate.max_message_length,
    )
    logger.debug(
        "Services built: provider=%s model=%s",
        provider.name() if provider else "mock",
        config.upstream.model,
    )
    return ChatServices(config=config, registry=registry, generator=generator)
