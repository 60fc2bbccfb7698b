"""DailyLedger data model."""

from datetime import date as date_type

from pydantic import BaseModel, Field

from tradeguard.models.trade import Trade


class DailyLedger(BaseModel):
    """All trades recorded for one local calendar day, oldest first."""

    date: date_type = Field(..., description="Ledger date")
    trades: tuple[Trade, ...] = Field(default=(), description="Trades in chronological order")

    model_config = {"frozen": True}

    def append(self, trade: Trade) -> "DailyLedger":
        """Return a new ledger with ``trade`` appended."""
        return self.model_copy(update={"trades": self.trades + (trade,)})

    def without(self, index: int) -> "DailyLedger":
        """Return a new ledger with the trade at ``index`` removed."""
        trades = list(self.trades)
        del trades[index]
        return self.model_copy(update={"trades": tuple(trades)})

    def to_record(self) -> dict:
        """Return the persisted representation of the ledger."""
        return {"trades": [trade.to_record() for trade in self.trades]}
