"""Shared helpers for PachiNavi CLI commands."""

from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel

console = Console()


def get_settings(ctx: click.Context):
    """Load settings once per invocation and set up logging."""
    from pachinavi.config import load_config, setup_logging

    obj = ctx.ensure_object(dict)
    if "settings" not in obj:
        try:
            settings = load_config()
        except ValueError as e:
            print_error(str(e))
            raise SystemExit(1)
        setup_logging("DEBUG" if obj.get("verbose") else settings.log_level)
        obj["settings"] = settings
    return obj["settings"]


def get_store(ctx: click.Context):
    """Get the data store instance."""
    from pachinavi.db.store import TradeDataStore

    settings = get_settings(ctx)
    db_path = ctx.obj.get("db_path")
    return TradeDataStore(Path(db_path) if db_path else settings.db_path)


def get_service(ctx: click.Context):
    """Get the lifecycle service wired to the configured store."""
    from pachinavi.services import ConfigDirectory, TradeLifecycleService

    settings = get_settings(ctx)
    return TradeLifecycleService(
        store=get_store(ctx),
        directory=ConfigDirectory(settings.companies),
        default_payment_method=settings.default_payment_method,
    )


def print_error(message: str, title: str = "Error") -> None:
    """Print an error panel."""
    console.print(Panel(
        f"[red]{message}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))
