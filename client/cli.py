#!/usr/bin/env python3

from __future__ import annotations
import asyncio
import os
from contextlib import suppress
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from client.endpoint import EndpointResolver, EndpointUnavailable, create_slack_client
from client.session import SocketModeSession
from client.ws_client import TransportError, WebSocketTransport
from roulette.catalog import CatalogError, EmptySelection, SpinMode, load_catalog
from roulette.commands import SpinCommandHandler
from server.health import HealthcheckServer
from shared.log import configure_root_logging, get_logger

app = typer.Typer(help="Pizza roulette Slack bot (socket mode)")
console = Console()
logger = get_logger(__name__)


def _default_token() -> Optional[str]:
    return os.getenv("SLACK_APP_TOKEN")


def _default_health_port() -> int:
    return int(os.getenv("ROULETTE_HEALTH_PORT", "3000"))


@app.command()
def run(
    token: Optional[str] = typer.Option(_default_token(), help="App-level token (xapp-...), defaults to $SLACK_APP_TOKEN", show_default=False),
    pizzas: Optional[Path] = typer.Option(None, help="Pizza catalog YAML; bundled menu if omitted"),
    phrases: Optional[Path] = typer.Option(None, help="Phrase catalog YAML; bundled phrases if omitted"),
    health_host: str = typer.Option("127.0.0.1", help="Healthcheck bind address"),
    health_port: int = typer.Option(_default_health_port(), help="Healthcheck port"),
    no_health: bool = typer.Option(False, "--no-health", help="Do not start the healthcheck listener"),
    log_level: str = typer.Option("INFO", help="DEBUG, INFO, WARNING or ERROR"),
):
    """Connect to Slack and answer /spin-* commands until the link is disabled."""
    configure_root_logging(log_level)

    if not token:
        console.print("[red]SLACK_APP_TOKEN must be set[/]")
        raise typer.Exit(code=1)

    try:
        catalog = load_catalog(pizzas, phrases)
    except CatalogError as e:
        console.print(f"[red]Cannot load catalog[/]: {e}")
        raise typer.Exit(code=1)

    async def main_loop() -> None:
        resolver = EndpointResolver(create_slack_client(token))
        session = SocketModeSession(resolver, WebSocketTransport(), SpinCommandHandler(catalog))
        health = None if no_health else HealthcheckServer(health_host, health_port)
        health_task: Optional[asyncio.Task] = None
        try:
            if health is not None:
                await health.start()
                health_task = asyncio.create_task(health.serve_forever())
            await session.run()
        finally:
            if health_task is not None:
                health_task.cancel()
                with suppress(asyncio.CancelledError):
                    await health_task
            if health is not None:
                await health.close()
            await resolver.aclose()

    console.print(f"[bold green]Pizza roulette starting[/] with {len(catalog.pizzas)} pizzas")
    try:
        asyncio.run(main_loop())
    except (EndpointUnavailable, TransportError, EmptySelection, OSError) as e:
        logger.error("Bot stopped: %s: %s", type(e).__name__, e)
        raise typer.Exit(code=1)


@app.command()
def catalog(
    pizzas: Optional[Path] = typer.Option(None, help="Pizza catalog YAML; bundled menu if omitted"),
    phrases: Optional[Path] = typer.Option(None, help="Phrase catalog YAML; bundled phrases if omitted"),
):
    """Check that every spin mode can land on at least one pizza."""
    try:
        loaded = load_catalog(pizzas, phrases)
    except CatalogError as e:
        console.print(f"[red]Cannot load catalog[/]: {e}")
        raise typer.Exit(code=1)

    table = Table(title="Spin modes")
    table.add_column("Mode")
    table.add_column("Pizzas", justify="right")
    empty = []
    for mode in SpinMode:
        matches = [p.name for p in loaded.pizzas if mode.accepts(p)]
        if not matches:
            empty.append(mode.value)
        table.add_row(mode.value, str(len(matches)))
    console.print(table)
    console.print(f"{len(loaded.phrases)} phrases")

    if empty:
        console.print(f"[red]No pizzas for[/]: {', '.join(empty)}")
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
