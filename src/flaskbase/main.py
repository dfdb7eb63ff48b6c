"""
flaskbase - CLI Entry Point.

Usage:
    flaskbase health                         Check configuration and API reachability
    flaskbase session                        Show the current session
    flaskbase watch                          Print auth state changes as they happen
    flaskbase read chats --order created_at.desc --limit 5
    flaskbase --help                         Show help
"""

import asyncio
import logging
import sys

import typer
from rich.console import Console
from rich.panel import Panel

from flaskbase.models import AuthEvent, Result, Session

app = typer.Typer(
    name="flaskbase",
    help="flaskbase - Supabase-shaped client for the chat/OCR Flask API.",
    add_completion=False,
)
console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Setup logging with visible output."""
    from flaskbase.config import settings

    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    # Quiet down noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    setup_logging(verbose)


def _print_result(result: Result) -> None:
    if result.error is not None:
        console.print(f"[red]Error: {result.error}[/red]")
        raise typer.Exit(1)
    console.print_json(data=result.data)


def _parse_eq(pairs: list[str]) -> list[tuple[str, str]]:
    filters = []
    for pair in pairs:
        column, sep, value = pair.partition("=")
        if not sep or not column:
            raise typer.BadParameter(f"expected column=value, got {pair!r}", param_hint="--eq")
        filters.append((column, value))
    return filters


def _parse_range(value: str) -> tuple[int, int]:
    start, sep, end = value.partition(":")
    try:
        return int(start), int(end)
    except ValueError:
        raise typer.BadParameter(f"expected from:to, got {value!r}", param_hint="--range")


@app.command()
def version() -> None:
    """Show version information."""
    from flaskbase import __version__

    console.print(f"flaskbase version {__version__}")


@app.command()
def health() -> None:
    """Check configuration and API reachability."""
    from flaskbase.client import create_client
    from flaskbase.config import get_settings
    from flaskbase.errors import TransportError

    console.print("\n[bold]flaskbase Health Check[/bold]\n")

    settings = get_settings()
    console.print("✅ Configuration loaded")
    console.print(f"   Environment: {settings.flaskbase_env}")
    console.print(f"   API URL: {settings.flask_api_url}")
    console.print(f"   Auth poll interval: {settings.auth_poll_interval_seconds}s")

    async def _check() -> Result:
        async with create_client(settings=settings) as client:
            return await client.auth.get_session()

    result = asyncio.run(_check())
    if isinstance(result.error, TransportError):
        console.print(f"\n[red]❌ API unreachable: {result.error}[/red]")
        raise typer.Exit(1)
    if result.error is not None:
        console.print(f"⚠️  /auth/session answered with an error: {result.error}")
    else:
        session = result.data["session"]
        who = session.user.email or session.user.id if session else "signed out"
        console.print(f"✅ API reachable ({who})")

    console.print("\n[green]All checks passed![/green]")


@app.command()
def session() -> None:
    """Show the current session."""
    from flaskbase.client import create_client

    async def _fetch() -> Result:
        async with create_client() as client:
            return await client.auth.get_session()

    result = asyncio.run(_fetch())
    if result.error is not None:
        _print_result(result)
        return

    current: Session | None = result.data["session"]
    if current is None:
        console.print("[dim]Signed out[/dim]")
        return
    console.print_json(data=current.model_dump())


@app.command()
def watch() -> None:
    """Print auth state changes until interrupted."""
    from flaskbase.client import create_client

    def on_change(event: AuthEvent, current: Session | None) -> None:
        who = current.user.email or current.user.id if current else "-"
        style = "green" if event is AuthEvent.SIGNED_IN else "yellow"
        console.print(f"[{style}]{event.value}[/{style}] {who}")

    async def _watch() -> None:
        async with create_client() as client:
            subscription = client.auth.on_auth_state_change(on_change)
            try:
                await asyncio.Event().wait()
            finally:
                subscription.unsubscribe()

    console.print(Panel.fit("Watching /auth/session. [dim]Ctrl-C to stop.[/dim]", border_style="green"))
    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped.[/dim]")


@app.command()
def read(
    collection: str = typer.Argument(..., help="Collection to read, e.g. chats"),
    eq: list[str] | None = typer.Option(None, "--eq", help="Equality filter column=value (repeatable)"),
    order: str | None = typer.Option(None, "--order", help="Sort key: column or column.desc"),
    limit: int | None = typer.Option(None, "--limit", help="Max rows"),
    range_: str | None = typer.Option(None, "--range", help="Inclusive window from:to"),
    single: bool = typer.Option(False, "--single", help="Return only the first row"),
) -> None:
    """Read rows from a collection."""
    from flaskbase.client import create_client
    from flaskbase.db.rows import COLLECTIONS

    if collection not in COLLECTIONS:
        console.print(f"[dim]Note: '{collection}' is not a known collection[/dim]")

    filters = _parse_eq(eq or [])
    window = _parse_range(range_) if range_ else None

    async def _read() -> Result:
        async with create_client() as client:
            query = client.from_(collection).select("*")
            for column, value in filters:
                query = query.eq(column, value)
            if order:
                column, _, direction = order.partition(".")
                query = query.order(column, ascending=direction != "desc")
            if limit is not None:
                query = query.limit(limit)
            if window is not None:
                query = query.range(*window)
            return await (query.single() if single else query.execute())

    _print_result(asyncio.run(_read()))


if __name__ == "__main__":
    app()
