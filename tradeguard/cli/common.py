"""Helpers shared by the CLI command modules."""

from datetime import date
from typing import Optional

import click
from rich.console import Console

from tradeguard.config import Settings, load_settings
from tradeguard.journal import Journal

console = Console()


def get_settings(ctx: Optional[click.Context] = None) -> Settings:
    """Settings loaded by the root group, or freshly loaded."""
    ctx = ctx or click.get_current_context(silent=True)
    if ctx is not None:
        obj = ctx.find_root().obj or {}
        if "settings" in obj:
            return obj["settings"]
    return load_settings()


def get_journal(ctx: Optional[click.Context] = None) -> Journal:
    """Get a Journal backed by the configured SQLite store."""
    from tradeguard.db.store import SqliteStore

    settings = get_settings(ctx)
    return Journal(SqliteStore(settings.db_path))


def format_money(value: int, currency: str, signed: bool = True) -> str:
    """Format an amount like ``+¥1,500`` or ``-¥300``."""
    sign = "-" if value < 0 else ("+" if signed and value > 0 else "")
    return f"{sign}{currency}{abs(value):,}"


def pnl_color(value: int) -> str:
    return "green" if value >= 0 else "red"


def parse_day(value: Optional[str]) -> Optional[date]:
    """Parse a ``--date`` option value (YYYY-MM-DD)."""
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"'{value}' is not a date in YYYY-MM-DD format", param_hint="--date")
