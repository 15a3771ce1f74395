"""Command line entry points."""

from __future__ import annotations

import asyncio
import contextlib

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel

from askdb.app import AppContext
from askdb.config import load_settings
from askdb.errors import AskDBError, ConfigurationError
from askdb.logging_utils import configure_logging

app = typer.Typer(name="askdb", help="Answer chat messages from your database.", add_completion=False)
console = Console()


def _build_context(model: str | None, database_url: str | None) -> AppContext:
    settings = load_settings(model=model, database_url=database_url)
    configure_logging(settings.log_level)
    try:
        return AppContext.build(settings)
    except ConfigurationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc


async def _serve(context: AppContext) -> None:
    async with context:
        manager = context.session_manager()
        await manager.start()
        try:
            await manager.wait_logged_out()
            logger.warning("serve.logged_out remove the session directory and log in again")
        finally:
            await manager.stop()


@app.command()
def serve(
    model: str | None = typer.Option(None, "--model", help="Model in provider:model format"),
    database_url: str | None = typer.Option(None, "--database-url", help="SQLAlchemy async database URL"),
) -> None:
    """Answer Telegram messages until the session is logged out."""

    context = _build_context(model, database_url)
    try:
        with contextlib.suppress(KeyboardInterrupt):
            asyncio.run(_serve(context))
    except ConfigurationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc


@app.command()
def ask(
    text: str = typer.Argument(..., help="Question to answer from the database"),
    show_query: bool = typer.Option(False, "--show-query", help="Print the generated query"),
    model: str | None = typer.Option(None, "--model", help="Model in provider:model format"),
    database_url: str | None = typer.Option(None, "--database-url", help="SQLAlchemy async database URL"),
) -> None:
    """Run one question through the pipeline and print the reply."""

    context = _build_context(model, database_url)

    async def _ask() -> None:
        async with context:
            run = await context.pipeline.run(text)
        if show_query:
            rows = "failed" if run.result.failed else str(len(run.result.rows or []))
            console.print(Panel(run.query, title=f"query (rows: {rows})", expand=False))
        console.print(run.reply)

    try:
        asyncio.run(_ask())
    except AskDBError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1) from exc
