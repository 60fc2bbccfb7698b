"""TradeGuard - day-trading discipline tracker."""

__version__ = "0.1.0"
