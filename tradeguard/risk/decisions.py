"""Decision values produced by the risk engine and the journal."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from tradeguard.models import Trade


class ReasonKind(str, Enum):
    """Kind of rule violation."""

    TRADE_COUNT_EXCEEDED = "TradeCountExceeded"
    DAILY_LOSS_LIMIT_REACHED = "DailyLossLimitReached"
    LOSS_STREAK = "LossStreak"
    STOP_LOSS_EXCEEDED = "StopLossExceeded"
    TAKE_PROFIT_EXCEEDED = "TakeProfitExceeded"


# Kinds that stop a trade from being recorded at all
HARD_BLOCK_KINDS = frozenset({
    ReasonKind.TRADE_COUNT_EXCEEDED,
    ReasonKind.DAILY_LOSS_LIMIT_REACHED,
})


class RiskReason(BaseModel):
    """A single violated rule with a user-facing message."""

    kind: ReasonKind = Field(..., description="Violation kind")
    message: str = Field(..., description="Human readable explanation")

    model_config = {"frozen": True}

    @property
    def is_hard_block(self) -> bool:
        return self.kind in HARD_BLOCK_KINDS


class PreCheckResult(BaseModel):
    """Advisory verdict on whether entering another trade is sensible."""

    ok: bool = Field(..., description="True when no rule is violated")
    reasons: tuple[RiskReason, ...] = Field(default=(), description="Violated rules")
    message: str = Field(..., description="Summary for display")

    model_config = {"frozen": True}


class SubmissionStatus(str, Enum):
    """Terminal state of a trade submission."""

    REJECTED = "rejected"
    BLOCKED = "blocked"
    DECLINED = "declined"
    RECORDED = "recorded"


class SubmissionResult(BaseModel):
    """Outcome of ``Journal.add_trade``."""

    status: SubmissionStatus = Field(..., description="Terminal state")
    message: str = Field(..., description="Summary for display")
    trade: Optional[Trade] = Field(default=None, description="Candidate trade, if it validated")
    pnl: Optional[int] = Field(default=None, description="Candidate P&L, if it validated")
    reasons: tuple[RiskReason, ...] = Field(default=(), description="Blocking or warning reasons")

    model_config = {"frozen": True}

    @property
    def recorded(self) -> bool:
        return self.status is SubmissionStatus.RECORDED
