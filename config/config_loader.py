"""Load settings.yaml into typed dataclasses. Applies environment overrides at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

_MAX_PORT = 65535


@dataclass
class ServerConfig:
    host: str
    port: int


@dataclass
class UpstreamConfig:
    api_key_env: str
    model: str
    max_tokens: int
    timeout_sec: float
    base_url: str | None = None


@dataclass
class DebateConfig:
    turn_delay_sec: float
    max_message_length: int = 1000


@dataclass
class ModeConfig:
    name: str
    label: str
    icon: str
    description: str
    system_prompt: str
    mock_reply: str
    mock_turn_reply: str | None = None  # debate only: formatted with speaker/stance/topic


@dataclass
class AppConfig:
    server: ServerConfig
    upstream: UpstreamConfig
    debate: DebateConfig
    modes: dict[str, ModeConfig] = field(default_factory=dict)
    api_key: str | None = None


def default_settings_path() -> Path:
    """Return the settings file to load: $STANCECHAT_SETTINGS or the bundled one."""
    override = os.environ.get("STANCECHAT_SETTINGS", "").strip()
    return Path(override) if override else _SETTINGS_PATH


def _int_override(env_name: str, fallback: int, minimum: int, maximum: int | None = None) -> int:
    """Read an integer from the environment, falling back on missing or invalid values."""
    raw = os.environ.get(env_name, "").strip()
    if not raw:
        return fallback
    try:
        value = int(raw)
    except ValueError:
        logger.error("Invalid %s configuration %r, using default: %d", env_name, raw, fallback)
        return fallback
    if value < minimum or (maximum is not None and value > maximum):
        logger.error("Invalid %s configuration %r, using default: %d", env_name, raw, fallback)
        return fallback
    return value


def load_config(settings_path: Path | None = None) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Environment variables PORT, HOST, ANTHROPIC_MODEL and MAX_TOKENS override
    the file. Raises FileNotFoundError if the settings file is missing.
    Logs a warning when no API key is set but does not raise: callers fall back
    to mock replies.
    """
    if settings_path is None:
        settings_path = default_settings_path()
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    server_raw = raw["server"]
    server = ServerConfig(
        host=os.environ.get("HOST", "").strip() or str(server_raw["host"]),
        port=_int_override("PORT", int(server_raw["port"]), minimum=1, maximum=_MAX_PORT),
    )

    upstream_raw = raw["upstream"]
    upstream = UpstreamConfig(
        api_key_env=str(upstream_raw["api_key_env"]),
        model=os.environ.get("ANTHROPIC_MODEL", "").strip() or str(upstream_raw["model"]),
        max_tokens=_int_override("MAX_TOKENS", int(upstream_raw["max_tokens"]), minimum=1),
        timeout_sec=float(upstream_raw["timeout_sec"]),
        base_url=upstream_raw.get("base_url"),
    )

    debate_raw = raw["debate"]
    debate = DebateConfig(
        turn_delay_sec=float(debate_raw["turn_delay_sec"]),
        max_message_length=int(debate_raw.get("max_message_length", 1000)),
    )

    modes: dict[str, ModeConfig] = {}
    for mode_name, mode_raw in raw["modes"].items():
        modes[mode_name] = ModeConfig(
            name=mode_name,
            label=str(mode_raw["label"]),
            icon=str(mode_raw.get("icon", "")),
            description=str(mode_raw.get("description", "")),
            system_prompt=str(mode_raw["system_prompt"]).strip(),
            mock_reply=str(mode_raw["mock_reply"]).strip(),
            mock_turn_reply=mode_raw.get("mock_turn_reply"),
        )

    api_key = os.environ.get(upstream.api_key_env, "").strip() or None
    if api_key is None:
        logger.warning("%s is not set - AI responses will be mocked", upstream.api_key_env)

    logger.info(
        "Configuration loaded: port=%d model=%s max_tokens=%d has_api_key=%s",
        server.port,
        upstream.model,
        upstream.max_tokens,
        api_key is not None,
    )

    return AppConfig(
        server=server,
        upstream=upstream,
        debate=debate,
        modes=modes,
        api_key=api_key,
    )
