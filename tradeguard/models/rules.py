"""RuleSet data model."""

from pydantic import BaseModel, Field

DEFAULT_DAILY_MAX_LOSS = -30000
DEFAULT_STOP_LOSS = -3000
DEFAULT_TAKE_PROFIT = 10000
DEFAULT_MAX_TRADES = 5


class RuleSet(BaseModel):
    """User-defined risk limits for a trading day.

    Persisted with camelCase keys (``dailyMaxLoss``, ``stopLoss``, ...).
    """

    daily_max_loss: int = Field(
        default=DEFAULT_DAILY_MAX_LOSS, alias="dailyMaxLoss",
        description="Cumulative day P&L at or below which new trades are blocked",
    )
    stop_loss: int = Field(
        default=DEFAULT_STOP_LOSS, alias="stopLoss",
        description="Per-trade P&L at or below which the user must confirm",
    )
    take_profit: int = Field(
        default=DEFAULT_TAKE_PROFIT, alias="takeProfit",
        description="Per-trade P&L at or above which the user must confirm",
    )
    max_trades: int = Field(
        default=DEFAULT_MAX_TRADES, alias="maxTrades",
        description="Number of trades per day after which new trades are blocked",
    )

    model_config = {"frozen": True, "populate_by_name": True}

    def to_record(self) -> dict:
        """Return the persisted representation of the rules."""
        return self.model_dump(by_alias=True)
