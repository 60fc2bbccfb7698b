"""Trading day commands for TradeGuard CLI.

Handles the pre-trade check, trade logging, the day view and
ledger housekeeping (delete, reset, days).
"""

from datetime import datetime
from typing import Optional

import click
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from tradeguard.cli.common import (
    console,
    format_money,
    get_journal,
    get_settings,
    parse_day,
    pnl_color,
)
from tradeguard.export import format_number
from tradeguard.prompts import AutoPrompter, ConsolePrompter, Prompter
from tradeguard.risk import SubmissionStatus, calc_pnl, evaluate


def _get_prompter(yes: bool, no: bool) -> Prompter:
    """Pick a prompter from the --yes/--no flags."""
    if yes and no:
        raise click.UsageError("--yes and --no are mutually exclusive")
    if yes or no:
        return AutoPrompter(answer=yes, console=console)
    return ConsolePrompter(console)


@click.command()
def check() -> None:
    """Check the rules before entering a trade.

    Advisory only: nothing is recorded.

    \b
    Examples:
      tradeguard check
    """
    journal = get_journal()
    result = journal.pre_check()

    if result.ok:
        console.print(Panel(
            f"[green]{result.message}[/green]",
            title="[bold green]Pre-trade Check[/bold green]",
            border_style="green",
        ))
    else:
        lines = "\n".join(f"• {r.message}" for r in result.reasons)
        console.print(Panel(
            f"[bold red]STOP recommended[/bold red]\n\n{lines}",
            title="[bold red]Pre-trade Check[/bold red]",
            border_style="red",
        ))


@click.command()
@click.argument("symbol")
@click.argument("side")
@click.argument("entry")
@click.argument("exit_price", metavar="EXIT")
@click.argument("qty")
@click.option("-n", "--note", default="", help="Note about the trade (reason, lesson).")
@click.option("-y", "--yes", is_flag=True, default=False, help="Answer yes to every confirmation.")
@click.option("--no", "no", is_flag=True, default=False, help="Answer no to every confirmation.")
def add(
    symbol: str,
    side: str,
    entry: str,
    exit_price: str,
    qty: str,
    note: str,
    yes: bool,
    no: bool,
) -> None:
    """Record a closed trade.

    SIDE is LONG or SHORT. The trade is refused if today's trade count or
    max daily loss has been reached. If its P&L crosses your stop-loss or
    take-profit guideline you will be asked to confirm.

    \b
    Examples:
      tradeguard add 7203 LONG 2500 2520 100
      tradeguard add 9984 SHORT 8000 8100 10 --note "chased the breakdown"
    """
    settings = get_settings()
    journal = get_journal()
    prompter = _get_prompter(yes, no)

    result = journal.add_trade(
        prompter,
        symbol=symbol,
        side=side,
        entry=entry,
        exit=exit_price,
        qty=qty,
        note=note,
    )

    if result.status is SubmissionStatus.RECORDED:
        stats = journal.stats()
        color = pnl_color(result.pnl)
        console.print(
            f"[green]✓ Recorded {escape(result.trade.symbol)} {result.trade.side.value}[/green] "
            f"[{color}]{format_money(result.pnl, settings.currency)}[/{color}]"
        )
        console.print(
            f"[dim]Day P&L: {format_money(stats.pnl, settings.currency)} | "
            f"Trades: {stats.n}/{journal.load_rules().max_trades}[/dim]"
        )
    elif result.status is SubmissionStatus.DECLINED:
        console.print(f"[dim]{result.message}[/dim]")
    else:
        # Rejected or blocked; the prompter has already shown why
        raise SystemExit(1)


@click.command()
@click.option("-d", "--date", "day", default=None, help="Show another day (YYYY-MM-DD).")
def today(day: Optional[str]) -> None:
    """Show the day's P&L, rule status and trades.

    Trades are listed newest first; the # column is the index used by
    the delete command.

    \b
    Examples:
      tradeguard today
      tradeguard today --date 2024-03-05
    """
    settings = get_settings()
    journal = get_journal()
    ledger = journal.load_day(parse_day(day))
    rules = journal.load_rules()
    stats = journal.stats(ledger.date)
    currency = settings.currency

    color = pnl_color(stats.pnl)
    count_color = "red" if stats.n >= rules.max_trades else "green"
    streak_color = "red" if stats.streak_loss >= 2 else "green"

    summary = (
        f"[bold]{ledger.date.isoformat()}[/bold]\n\n"
        f"P&L:         [{color}]{format_money(stats.pnl, currency)}[/{color}]\n"
        f"Trades:      [{count_color}]{stats.n}/{rules.max_trades}[/{count_color}]\n"
        f"Loss streak: [{streak_color}]{stats.streak_loss}[/{streak_color}]\n\n"
        f"[dim]Win rate {stats.win_rate}% | Avg {format_money(stats.avg, currency)} | "
        f"Wins {stats.wins} | Losses {stats.losses}[/dim]"
    )

    reasons = evaluate(rules, stats)
    if reasons:
        summary += "\n\n" + "\n".join(f"[red]• {r.message}[/red]" for r in reasons)

    console.print(Panel(summary, title="[bold cyan]Trading Day[/bold cyan]", border_style="cyan"))

    if not ledger.trades:
        console.print("[dim]No trades recorded[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Time")
    table.add_column("Symbol", style="bold")
    table.add_column("Side")
    table.add_column("Entry → Exit", justify="right")
    table.add_column("Qty", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("Note", max_width=30)

    for index in range(len(ledger.trades) - 1, -1, -1):
        trade = ledger.trades[index]
        pnl = calc_pnl(trade)
        color = pnl_color(pnl)
        side_color = "green" if trade.side.value == "LONG" else "magenta"
        table.add_row(
            str(index),
            datetime.fromtimestamp(trade.timestamp / 1000).strftime("%H:%M"),
            escape(trade.symbol),
            f"[{side_color}]{trade.side.value}[/{side_color}]",
            f"{format_number(trade.entry)} → {format_number(trade.exit)}",
            format_number(trade.qty),
            f"[{color}]{format_money(pnl, currency)}[/{color}]",
            escape(trade.note) if trade.note else "-",
        )

    console.print(table)


@click.command()
@click.argument("index", type=int)
@click.option("-d", "--date", "day", default=None, help="Delete from another day (YYYY-MM-DD).")
def delete(index: int, day: Optional[str]) -> None:
    """Delete a recorded trade.

    INDEX is the # shown by the today command (0 is the day's first trade).

    \b
    Examples:
      tradeguard delete 2
    """
    journal = get_journal()
    removed = journal.delete_trade(index, parse_day(day))

    if removed is None:
        console.print(f"[yellow]No trade with index {index}. Nothing deleted.[/yellow]")
        raise SystemExit(1)

    console.print(f"[green]✓ Deleted trade {index} ({escape(removed.symbol)} {removed.side.value})[/green]")


@click.command()
@click.option("-y", "--yes", is_flag=True, default=False, help="Skip the confirmation.")
def reset(yes: bool) -> None:
    """Delete all of today's trades.

    \b
    Examples:
      tradeguard reset        # Asks for confirmation
      tradeguard reset --yes
    """
    journal = get_journal()
    prompter = AutoPrompter(answer=True) if yes else ConsolePrompter(console)

    if journal.reset_day(prompter):
        console.print(f"[green]✓ Cleared all trades for {journal.today().isoformat()}[/green]")
    else:
        console.print("[dim]Reset cancelled.[/dim]")


@click.command()
def days() -> None:
    """List the days that have a stored ledger.

    \b
    Examples:
      tradeguard days
    """
    journal = get_journal()
    recorded = journal.recorded_days()

    if not recorded:
        console.print("[dim]No ledgers stored[/dim]")
        return

    table = Table(title="Stored Days", show_header=True, header_style="bold cyan")
    table.add_column("Date", style="bold")
    table.add_column("Trades", justify="right")

    for day in reversed(recorded):
        table.add_row(day.isoformat(), str(len(journal.load_day(day).trades)))

    console.print(table)
