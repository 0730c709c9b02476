"""Rich console rendering for chat and debate turns."""

import logging

from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from stancechat.models import ChatTurn, Role, Speaker
from stancechat.modes import ModeRegistry

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

_SPEAKER_STYLES = {
    Speaker.AI_1: "cyan",
    Speaker.AI_2: "magenta",
}


def speaker_label(speaker: Speaker) -> str:
    """'AI-1 (For)' / 'AI-2 (Against)'."""
    return f"{speaker.value} ({speaker.stance.value.title()})"


def turn_label(turn: ChatTurn, registry: ModeRegistry) -> str:
    if turn.is_error:
        return "Error"
    if turn.role is Role.USER:
        return "You"
    if turn.speaker is not None:
        return speaker_label(turn.speaker)
    if turn.mode is not None:
        profile = registry.profile_for(turn.mode)
        return f"{profile.icon} {profile.label}".strip()
    return "Assistant"


def _border_style(turn: ChatTurn) -> str:
    if turn.is_error:
        return "red"
    if turn.role is Role.USER:
        return "dim"
    if turn.speaker is not None:
        return _SPEAKER_STYLES[turn.speaker]
    return "green"


def print_turn(turn: ChatTurn, registry: ModeRegistry) -> None:
    """Print a single turn as a titled panel, right-aligned for AI-2 like the chat view."""
    panel = Panel(
        Text(turn.content),
        title=f"[bold]{turn_label(turn, registry)}[/bold]",
        subtitle=turn.timestamp.astimezone().strftime("%H:%M:%S"),
        border_style=_border_style(turn),
        expand=False,
    )
    if turn.speaker is Speaker.AI_2:
        console.print(panel, justify="right")
    else:
        console.print(panel)


def print_debate_header(topic: str, turns: int | None) -> None:
    limit = f"{turns} turns" if turns else "until stopped (Ctrl-C)"
    console.print(Rule(f"[bold cyan]Debate[/bold cyan]: {topic}"))
    console.print(Text(f"{speaker_label(Speaker.AI_1)} vs {speaker_label(Speaker.AI_2)} | {limit}", style="dim"))


def print_debate_summary(turns: list[ChatTurn]) -> None:
    spoken = [t for t in turns if not t.is_error]
    failed = len(turns) - len(spoken)
    console.print(Rule("[bold green]Debate ended[/bold green]"))
    summary = f"{len(spoken)} turn(s) spoken"
    if failed:
        summary += ", stopped by error"
    console.print(Text(summary, style="dim"))
