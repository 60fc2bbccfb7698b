"""Setup command for TradeGuard CLI."""

import click
from rich.panel import Panel

from tradeguard.cli.common import console


@click.command()
@click.option(
    "--force",
    is_flag=True,
    default=False,
    help="Overwrite an existing config file.",
)
def init(force: bool) -> None:
    """Create a template config file.

    \b
    Examples:
      tradeguard init          # Write ~/.config/tradeguard/config.toml
      tradeguard init --force  # Overwrite an existing config
    """
    from tradeguard.config import create_template_config, get_config_path

    config_path = get_config_path()
    if config_path.exists() and not force:
        console.print(
            f"[yellow]Config already exists at {config_path}[/yellow]\n"
            "[dim]Use --force to overwrite it.[/dim]"
        )
        return

    path = create_template_config(config_path)
    console.print(Panel(
        f"[green]Config written to[/green] {path}\n\n"
        "Edit it to change the database location, currency or logging.",
        title="[bold green]Initialized[/bold green]",
        border_style="green",
    ))
