"""Export command for TradeGuard CLI."""

from pathlib import Path
from typing import Optional

import click

from tradeguard.cli.common import console, get_journal, parse_day


@click.command()
@click.argument("fmt", metavar="FORMAT", type=click.Choice(["json", "csv"], case_sensitive=False))
@click.option("-d", "--date", "day", default=None, help="Export another day (YYYY-MM-DD).")
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write to a file instead of stdout.",
)
def export(fmt: str, day: Optional[str], output: Optional[Path]) -> None:
    """Export a day's trades as JSON or CSV.

    CSV rows include the computed P&L; line breaks in notes become spaces.

    \b
    Examples:
      tradeguard export json
      tradeguard export csv --output today.csv
      tradeguard export csv --date 2024-03-05
    """
    from tradeguard.export import export_csv, export_json

    journal = get_journal()
    ledger = journal.load_day(parse_day(day))
    text = export_json(ledger) if fmt.lower() == "json" else export_csv(ledger)

    if output is None:
        click.echo(text)
        return

    output.write_text(text + "\n", encoding="utf-8")
    console.print(f"[green]✓ Exported {len(ledger.trades)} trades to {output}[/green]")
