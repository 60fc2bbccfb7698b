"""Risk rule commands for TradeGuard CLI."""

from typing import Optional

import click
from rich.table import Table

from tradeguard.cli.common import console, format_money, get_journal, get_settings
from tradeguard.models import RuleSet


def _rules_table(rules: RuleSet, currency: str) -> Table:
    """Build a table showing the rules."""
    table = Table(title="Risk Rules", show_header=True, header_style="bold cyan")
    table.add_column("Rule", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Effect", style="dim")

    table.add_row(
        "Daily max loss", format_money(rules.daily_max_loss, currency, signed=False),
        "Blocks new trades once the day's P&L is at or below this",
    )
    table.add_row(
        "Max trades", str(rules.max_trades),
        "Blocks new trades once this many are recorded",
    )
    table.add_row(
        "Stop-loss", format_money(rules.stop_loss, currency, signed=False),
        "Asks for confirmation when a trade loses this much or more",
    )
    table.add_row(
        "Take-profit", format_money(rules.take_profit, currency, signed=False),
        "Asks for confirmation when a trade makes this much or more",
    )
    return table


@click.group()
def rules() -> None:
    """View and change your risk rules.

    \b
    Examples:
      tradeguard rules show
      tradeguard rules set --daily-max-loss -20000 --max-trades 3
    """
    pass


@rules.command("show")
def show_rules() -> None:
    """Show the current risk rules."""
    settings = get_settings()
    journal = get_journal()
    console.print(_rules_table(journal.load_rules(), settings.currency))


@rules.command("set")
@click.option("--daily-max-loss", default=None, help="Max cumulative loss per day (e.g. -30000).")
@click.option("--stop-loss", default=None, help="Per-trade loss that needs confirmation (e.g. -3000).")
@click.option("--take-profit", default=None, help="Per-trade profit that needs confirmation (e.g. 10000).")
@click.option("--max-trades", default=None, help="Max trades per day (e.g. 5).")
def set_rules(
    daily_max_loss: Optional[str],
    stop_loss: Optional[str],
    take_profit: Optional[str],
    max_trades: Optional[str],
) -> None:
    """Change risk rules.

    Options left out keep their current value. A value that is not a
    number resets that rule to its default.

    \b
    Examples:
      tradeguard rules set --stop-loss -5000
      tradeguard rules set --max-trades 3 --take-profit 15000
    """
    settings = get_settings()
    journal = get_journal()
    current = journal.load_rules()

    saved = journal.save_rules(
        daily_max_loss=current.daily_max_loss if daily_max_loss is None else daily_max_loss,
        stop_loss=current.stop_loss if stop_loss is None else stop_loss,
        take_profit=current.take_profit if take_profit is None else take_profit,
        max_trades=current.max_trades if max_trades is None else max_trades,
    )

    console.print("[green]✓ Rules saved[/green]")
    console.print(_rules_table(saved, settings.currency))
