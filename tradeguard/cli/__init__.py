"""CLI commands for TradeGuard.

This package provides the command-line interface for TradeGuard:
risk rules, trade logging, the day view and exports.
"""

from tradeguard.cli.main import cli, main

__all__ = ["cli", "main"]
