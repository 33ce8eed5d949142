"""Main CLI entry point for PachiNavi.

This module provides the main click group and lazy loading
of command modules to keep startup fast.
"""

from typing import Optional

import click


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    Command modules are only imported when one of their
    commands is actually invoked.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the lazy group.

        Args:
            lazy_subcommands: Mapping of command names to module paths.
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List all available commands."""
        base = super().list_commands(ctx)
        lazy = list(self._lazy_subcommands.keys())
        return sorted(set(base + lazy))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, lazily loading if needed."""
        if cmd_name in self.commands:
            return self.commands[cmd_name]

        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)

        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        """Lazily load a command from its module path."""
        import importlib

        module_path = self._lazy_subcommands[cmd_name]
        module = importlib.import_module(module_path)

        cmd = None
        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if isinstance(attr, click.Command) and attr.name == cmd_name:
                cmd = attr
                break

        if cmd is None:
            raise click.ClickException(f"Could not find command '{cmd_name}' in {module_path}")

        self.add_command(cmd)
        return cmd


LAZY_SUBCOMMANDS = {
    "init": "pachinavi.cli.navi",
    "seed": "pachinavi.cli.navi",
    "list": "pachinavi.cli.navi",
    "statement": "pachinavi.cli.navi",
    "messages": "pachinavi.cli.navi",
    "approve": "pachinavi.cli.trade",
    "pay": "pachinavi.cli.trade",
    "complete": "pachinavi.cli.trade",
    "cancel": "pachinavi.cli.trade",
    "shipping": "pachinavi.cli.trade",
    "contact": "pachinavi.cli.trade",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="SQLite database file (overrides config).",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.version_option(package_name="pachinavi")
@click.pass_context
def cli(ctx: click.Context, db_path: Optional[str], verbose: bool) -> None:
    """PachiNavi - trade navigation for pachinko/pachislot machine brokers.

    Follow each trade through approval, payment, confirmation
    and completion, and inspect its settlement statement.

    \b
    Quick Start:
      pachinavi seed                          # Load demo trades
      pachinavi list --user user-a            # Trades and what to do next
      pachinavi statement T-REQ-5001 -u user-a
    """
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db_path
    ctx.obj["verbose"] = verbose


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
