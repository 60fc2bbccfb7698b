"""Exceptions raised by TradeGuard."""


class TradeGuardError(Exception):
    """Base class for TradeGuard errors."""


class InvalidTradeError(TradeGuardError):
    """Raised when user-supplied trade fields fail validation.

    The message is meant to be shown to the user as-is.
    """
