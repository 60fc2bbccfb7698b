"""Data models for TradeGuard."""

from tradeguard.models.trade import Side, Trade
from tradeguard.models.ledger import DailyLedger
from tradeguard.models.rules import RuleSet
from tradeguard.models.stats import Stats

__all__ = [
    "Side",
    "Trade",
    "DailyLedger",
    "RuleSet",
    "Stats",
]
