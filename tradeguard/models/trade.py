"""Trade data model."""

from enum import Enum

from pydantic import BaseModel, Field


class Side(str, Enum):
    """Direction of a trade."""

    LONG = "LONG"
    SHORT = "SHORT"


class Trade(BaseModel):
    """Represents a closed round-trip trade logged by the user.

    Prices and quantity are kept as floats without range checks so that
    externally edited ledgers still load; input validation happens in
    ``tradeguard.risk.engine.validate_trade``.
    """

    timestamp: int = Field(..., alias="ts", description="Entry time in epoch milliseconds")
    symbol: str = Field(..., description="Trading symbol")
    side: Side = Field(..., description="Trade side (LONG/SHORT)")
    entry: float = Field(..., description="Entry price")
    exit: float = Field(..., description="Exit price")
    qty: float = Field(..., description="Quantity")
    note: str = Field(default="", description="Free-form user note")

    model_config = {"frozen": True, "populate_by_name": True}

    def to_record(self) -> dict:
        """Return the persisted representation (``ts`` instead of ``timestamp``)."""
        return self.model_dump(mode="json", by_alias=True)
