"""Click CLI: serve the HTTP API, or chat and debate from the terminal."""

import asyncio
import logging
import signal
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import click
import uvicorn
from dotenv import load_dotenv
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import AppConfig, load_config
from stancechat.api import create_app
from stancechat.chat import ChatSession
from stancechat.client import ChatClient
from stancechat.debate import DebateOrchestrator
from stancechat.errors import ValidationError
from stancechat.generator import TurnGenerator
from stancechat.models import ChatTurn, Mode, Speaker
from stancechat.modes import ModeRegistry
from stancechat.output import console, print_debate_header, print_debate_summary, print_turn, speaker_label
from stancechat.services import build_services

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    # The SDK's HTTP client is chatty at DEBUG.
    logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def _open_generator(config: AppConfig, server_url: str | None) -> AsyncIterator[TurnGenerator]:
    """Yield a remote client when --server is given, else the local generator."""
    if server_url:
        async with ChatClient(server_url) as client:
            yield client
    else:
        yield build_services(config).generator


async def _run_chat(
    config: AppConfig,
    registry: ModeRegistry,
    message: str,
    mode: str,
    server_url: str | None,
) -> ChatTurn:
    async with _open_generator(config, server_url) as generator:
        session = ChatSession(generator, max_message_length=config.debate.max_message_length)
        with console.status(f"[bold]{registry.label_for(mode)}[/bold] is thinking..."):
            await session.send(message, mode)
    for turn in session.transcript:
        print_turn(turn, registry)
    return session.transcript[-1]


async def _run_debate(
    config: AppConfig,
    registry: ModeRegistry,
    topic: str,
    turns: int | None,
    delay: float,
    server_url: str | None,
) -> list[ChatTurn]:
    async with _open_generator(config, server_url) as generator:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Starting debate...", total=None)

            def on_turn_start(speaker: Speaker) -> None:
                progress.update(task, description=f"{speaker_label(speaker)} is speaking...")

            def on_turn(turn: ChatTurn) -> None:
                print_turn(turn, registry)

            orchestrator = DebateOrchestrator(
                generator,
                turn_delay_sec=delay,
                max_topic_length=config.debate.max_message_length,
                on_turn_start=on_turn_start,
                on_turn=on_turn,
            )
            orchestrator.start(topic)
            print_debate_header(orchestrator.session.topic, turns)

            loop = asyncio.get_running_loop()
            try:
                loop.add_signal_handler(signal.SIGINT, orchestrator.stop)
                handler_installed = True
            except (NotImplementedError, RuntimeError):
                # Windows: Ctrl-C cancels the task instead of stopping cooperatively.
                logger.debug("SIGINT handler unavailable; Ctrl-C will abort the debate")
                handler_installed = False
            try:
                produced = await orchestrator.run(max_turns=turns)
            finally:
                if handler_installed:
                    loop.remove_signal_handler(signal.SIGINT)

    print_debate_summary(produced)
    return produced


@click.group()
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.option("--settings", "settings_path", default=None, type=click.Path(exists=True, dir_okay=False),
              help="Settings YAML (default: $STANCECHAT_SETTINGS or bundled settings.yaml)")
@click.pass_context
def main(ctx: click.Context, verbose: bool, settings_path: str | None) -> None:
    """stancechat -- contrarian, agreeable and self-debating chat over the Anthropic API.

    \b
    Examples:
      stancechat serve --port 3001
      stancechat chat "Tax cuts help everyone" --mode contrarian
      stancechat debate "Remote work beats the office" --turns 6
      stancechat debate "Cities should ban cars" --server http://localhost:3001
      stancechat health --server http://localhost:3001
    """
    # Reconfigure stdout/stderr to UTF-8 on Windows so mode icons and model
    # output don't crash the ANSI render path.
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")

    load_dotenv()
    _setup_logging(verbose)

    try:
        ctx.obj = load_config(Path(settings_path) if settings_path else None)
    except FileNotFoundError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)


@main.command()
@click.option("--host", default=None, help="Bind address (default: from config / $HOST)")
@click.option("--port", default=None, type=click.IntRange(1, 65535), help="Port (default: from config / $PORT)")
@click.pass_obj
def serve(config: AppConfig, host: str | None, port: int | None) -> None:
    """Run the HTTP API (POST /chat, GET /health)."""
    services = build_services(config)
    app = create_app(services)
    effective_host = host or config.server.host
    effective_port = port or config.server.port
    logger.info("API server running on http://%s:%d", effective_host, effective_port)
    uvicorn.run(app, host=effective_host, port=effective_port, log_config=None)


@main.command()
@click.argument("message")
@click.option("--mode", default=Mode.CONTRARIAN.value, type=click.Choice([m.value for m in Mode]),
              help="Conversation mode")
@click.option("--server", "server_url", default=None, help="Use a running server instead of calling the API directly")
@click.pass_obj
def chat(config: AppConfig, message: str, mode: str, server_url: str | None) -> None:
    """Send one MESSAGE and print the reply."""
    registry = ModeRegistry.from_config(config.modes)
    try:
        reply = asyncio.run(_run_chat(config, registry, message, mode, server_url))
    except ValidationError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc.message}")
        sys.exit(1)
    if reply.is_error:
        sys.exit(1)


@main.command()
@click.argument("topic")
@click.option("--turns", default=None, type=click.IntRange(min=1), help="Stop after N turns (default: until Ctrl-C)")
@click.option("--delay", default=None, type=click.FloatRange(min=0), help="Seconds between turns (default: from config)")
@click.option("--server", "server_url", default=None, help="Use a running server instead of calling the API directly")
@click.pass_obj
def debate(config: AppConfig, topic: str, turns: int | None, delay: float | None, server_url: str | None) -> None:
    """Let AI-1 (for) and AI-2 (against) debate TOPIC."""
    registry = ModeRegistry.from_config(config.modes)
    effective_delay = delay if delay is not None else config.debate.turn_delay_sec
    try:
        produced = asyncio.run(_run_debate(config, registry, topic, turns, effective_delay, server_url))
    except ValidationError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc.message}")
        sys.exit(1)
    if any(t.is_error for t in produced):
        sys.exit(1)


@main.command()
@click.option("--server", "server_url", default=None, help="Check a running server")
@click.pass_obj
def health(config: AppConfig, server_url: str | None) -> None:
    """Report credential status, or ping a running server."""
    if server_url:
        ok = asyncio.run(_check_server(server_url))
        if ok:
            console.print(f"[green]OK  [/green] {server_url}")
        else:
            console.print(f"[red]FAIL[/red] {server_url} is not reachable")
            sys.exit(1)
        return

    if config.api_key:
        console.print(f"[green]OK  [/green] {config.upstream.api_key_env} set, model {config.upstream.model}")
    else:
        console.print(f"[yellow]MOCK[/yellow] {config.upstream.api_key_env} not set, replies will be mocked")

    registry = ModeRegistry.from_config(config.modes)
    for profile in registry.modes():
        console.print(f"  {profile.icon} [bold]{profile.label}[/bold]: {profile.description}")


async def _check_server(server_url: str) -> bool:
    async with ChatClient(server_url, timeout=10.0) as client:
        return await client.health()


if __name__ == "__main__":
    main()
