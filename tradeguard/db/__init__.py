"""Persistence for TradeGuard."""
