"""Risk rules and P&L bookkeeping."""

from tradeguard.risk.decisions import (
    HARD_BLOCK_KINDS,
    PreCheckResult,
    ReasonKind,
    RiskReason,
    SubmissionResult,
    SubmissionStatus,
)
from tradeguard.risk.engine import (
    calc_pnl,
    compute_stats,
    evaluate,
    hard_blocks,
    pre_check_decision,
    round_half_up,
    to_number,
    trade_warnings,
    validate_trade,
)

__all__ = [
    "HARD_BLOCK_KINDS",
    "PreCheckResult",
    "ReasonKind",
    "RiskReason",
    "SubmissionResult",
    "SubmissionStatus",
    "calc_pnl",
    "compute_stats",
    "evaluate",
    "hard_blocks",
    "pre_check_decision",
    "round_half_up",
    "to_number",
    "trade_warnings",
    "validate_trade",
]
