"""Mode registry: system prompt, label and mock reply per conversation mode."""

from dataclasses import dataclass

from config.config_loader import ModeConfig
from stancechat.errors import UnknownModeError
from stancechat.models import Mode, Speaker


@dataclass(frozen=True)
class ModeProfile:
    mode: Mode
    label: str
    icon: str
    description: str
    system_prompt: str
    mock_reply: str
    mock_turn_reply: str | None = None


class ModeRegistry:
    """Read-only lookup over a fixed table covering every Mode."""

    def __init__(self, profiles: dict[Mode, ModeProfile]) -> None:
        missing = [m.value for m in Mode if m not in profiles]
        if missing:
            raise ValueError(f"Mode table is missing: {', '.join(missing)}")
        for mode, profile in profiles.items():
            if not profile.system_prompt.strip():
                raise ValueError(f"Empty system prompt for mode: {mode.value}")
        self._profiles = dict(profiles)

    @classmethod
    def from_config(cls, modes: dict[str, ModeConfig]) -> "ModeRegistry":
        profiles: dict[Mode, ModeProfile] = {}
        for name, cfg in modes.items():
            try:
                mode = Mode(name)
            except ValueError as exc:
                raise ValueError(f"Unsupported mode in settings: {name}") from exc
            profiles[mode] = ModeProfile(
                mode=mode,
                label=cfg.label,
                icon=cfg.icon,
                description=cfg.description,
                system_prompt=cfg.system_prompt,
                mock_reply=cfg.mock_reply,
                mock_turn_reply=cfg.mock_turn_reply.strip() if cfg.mock_turn_reply else None,
            )
        return cls(profiles)

    def profile_for(self, mode: Mode | str) -> ModeProfile:
        try:
            return self._profiles[Mode(mode)]
        except (ValueError, KeyError) as exc:
            raise UnknownModeError(mode) from exc

    def prompt_for(self, mode: Mode | str) -> str:
        return self.profile_for(mode).system_prompt

    def label_for(self, mode: Mode | str) -> str:
        return self.profile_for(mode).label

    def mock_reply_for(
        self,
        mode: Mode | str,
        topic: str | None = None,
        speaker: Speaker | None = None,
    ) -> str:
        """Deterministic stand-in reply used when no API key is configured.

        A debate turn (topic and speaker both given) names the speaker, its
        stance and the topic so that alternating mock turns stay distinguishable.
        """
        profile = self.profile_for(mode)
        if profile.mode is Mode.DEBATE and topic and speaker is not None and profile.mock_turn_reply:
            return profile.mock_turn_reply.format(
                speaker=speaker.value,
                stance=speaker.stance.value,
                topic=topic,
            )
        return profile.mock_reply

    def modes(self) -> list[ModeProfile]:
        return [self._profiles[m] for m in Mode]
