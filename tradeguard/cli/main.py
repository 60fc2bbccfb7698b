"""Main CLI entry point for TradeGuard.

This module provides the main click group and lazy loading
of the command modules.
"""

import importlib

import click


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    Command modules are only imported when one of their
    commands is invoked or listed.
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
        """Load a command from its module path."""
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
    "init": "tradeguard.cli.setup",
    "rules": "tradeguard.cli.rules",
    # Trading day
    "check": "tradeguard.cli.journal",
    "add": "tradeguard.cli.journal",
    "today": "tradeguard.cli.journal",
    "delete": "tradeguard.cli.journal",
    "reset": "tradeguard.cli.journal",
    "days": "tradeguard.cli.journal",
    # Export
    "export": "tradeguard.cli.export",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="tradeguard")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output to stderr.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """TradeGuard - keep your day trading inside your own rules.

    Log each trade as you close it. TradeGuard tracks the day's P&L and
    refuses new trades once you hit your trade count or max daily loss.

    \b
    Quick Start:
      tradeguard rules set --max-trades 5     # Set your limits
      tradeguard check                        # Should I take another trade?
      tradeguard add 7203 LONG 2500 2520 100  # Log a closed trade
      tradeguard today                        # Day summary
    """
    from tradeguard.config import load_settings
    from tradeguard.logging_setup import setup_logging

    ctx.ensure_object(dict)
    settings = load_settings()
    setup_logging("DEBUG" if verbose else settings.log_level, settings.log_file)
    ctx.obj["settings"] = settings


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
