"""Stats data model."""

from pydantic import BaseModel, Field


class Stats(BaseModel):
    """Aggregate statistics for a ledger. Derived, never persisted."""

    pnl: int = Field(default=0, description="Total P&L")
    n: int = Field(default=0, ge=0, description="Number of trades")
    wins: int = Field(default=0, ge=0, description="Trades with P&L > 0")
    losses: int = Field(default=0, ge=0, description="Trades with P&L < 0")
    streak_loss: int = Field(default=0, ge=0, description="Current trailing loss streak")
    win_rate: int = Field(default=0, ge=0, le=100, description="Win rate percentage")
    avg: int = Field(default=0, description="Average P&L per trade")

    model_config = {"frozen": True}
