"""freedomwall CLI -- run the API and maintain the data directory."""

import os
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from freedomwall import __version__
from freedomwall.config import Settings
from freedomwall.errors import FreedomWallError

console = Console()


def _settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--data-dir",
    "-d",
    default=None,
    envvar="FREEDOMWALL_DATA_DIR",
    help="Directory holding posts.json, polls.json and banned_words.json",
)
@click.pass_context
def main(ctx: click.Context, data_dir: str | None):
    """Freedom Wall -- anonymous message wall with moderation.

    Serve the HTTP API, backfill engagement scores and manage the
    banned-word list from the command line.
    """
    settings = Settings.from_env()
    if data_dir:
        settings.data_dir = Path(data_dir)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


# ── Serve ────────────────────────────────────────────────────────────


@main.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind")
@click.option("--port", "-p", default=None, type=int, help="Port (default: $PORT or 5000)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int | None, reload: bool):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = _settings(ctx)
    os.environ["FREEDOMWALL_DATA_DIR"] = str(settings.data_dir)
    port = port or settings.port

    console.print(f"\n[bold blue]Freedom Wall[/] -- serving on http://{host}:{port}\n")
    uvicorn.run(
        "web.backend.app.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


# ── Rescore ──────────────────────────────────────────────────────────


@main.command()
@click.pass_context
def rescore(ctx: click.Context):
    """Recompute the engagement score of every stored post and poll."""
    from freedomwall.store import PollStore, PostStore

    data_dir = _settings(ctx).data_dir
    console.print(f"\n[bold blue]Freedom Wall[/] -- Rescoring: {data_dir}\n")

    posts = PostStore(data_dir).resave_all()
    polls = PollStore(data_dir).resave_all()
    console.print(f"  [green]v[/] {posts} posts rescored")
    console.print(f"  [green]v[/] {polls} polls rescored")


# ── Banned words ─────────────────────────────────────────────────────


@main.group(name="banned-words")
def banned_words():
    """Manage the banned-word list."""


@banned_words.command(name="list")
@click.option("--all", "show_all", is_flag=True, help="Include inactive words")
@click.pass_context
def list_words(ctx: click.Context, show_all: bool):
    """List banned words."""
    from freedomwall.store import BannedWordStore

    store = BannedWordStore(_settings(ctx).data_dir)
    entries = store.newest_first() if show_all else store.active()

    if not entries:
        console.print("[yellow]No banned words.[/]")
        return

    table = Table(title=f"Banned words ({len(entries)})")
    table.add_column("Word", style="cyan")
    table.add_column("Active", justify="center")
    table.add_column("Reason")
    table.add_column("Added by", style="dim")

    for entry in entries:
        active = "[green]Y[/]" if entry.is_active else "[red]N[/]"
        table.add_row(entry.word, active, entry.reason[:50], entry.added_by)

    console.print(table)


@banned_words.command(name="add")
@click.argument("word")
@click.option("--reason", "-r", default="", help="Why the word is banned")
@click.pass_context
def add_word(ctx: click.Context, word: str, reason: str):
    """Ban WORD."""
    from freedomwall.moderation.validator import validate_banned_word
    from freedomwall.store import BannedWordStore

    settings = _settings(ctx)
    try:
        normalised = validate_banned_word(word, settings.content_limits)
        entry = BannedWordStore(settings.data_dir).add(normalised, reason=reason, added_by="cli")
    except FreedomWallError as e:
        console.print(f"  [red]x[/] {e.message}")
        raise SystemExit(1)
    console.print(f"  [green]v[/] Banned: {entry.word}")


@banned_words.command(name="remove")
@click.argument("word")
@click.pass_context
def remove_word(ctx: click.Context, word: str):
    """Remove WORD from the list."""
    from freedomwall.store import BannedWordStore

    store = BannedWordStore(_settings(ctx).data_dir)
    entry = store.find_word(word)
    if entry is None or not store.delete(entry.id):
        console.print(f"  [red]x[/] Not banned: {word}")
        raise SystemExit(1)
    console.print(f"  [green]v[/] Removed: {entry.word}")


# ── Limits ───────────────────────────────────────────────────────────


@main.command()
@click.pass_context
def limits(ctx: click.Context):
    """Show the effective rate limits and content ceilings."""
    from dataclasses import asdict

    settings = _settings(ctx)

    table = Table(title="Rate limits")
    table.add_column("Action", style="cyan")
    table.add_column("Max requests", justify="right")
    table.add_column("Window (s)", justify="right")
    table.add_column("Message")
    for action, rule in sorted(settings.rate_limits.items()):
        table.add_row(action, str(rule.max_requests), f"{rule.window_seconds:g}", rule.message)
    console.print(table)

    ceilings = Table(title="Content ceilings")
    ceilings.add_column("Field", style="cyan")
    ceilings.add_column("Max length", justify="right")
    for name, value in asdict(settings.content_limits).items():
        ceilings.add_row(name, "none" if value is None else str(value))
    console.print(ceilings)


if __name__ == "__main__":
    main()
