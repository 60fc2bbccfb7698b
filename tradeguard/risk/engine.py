"""Pure P&L, statistics and rule-evaluation functions.

Nothing here touches storage or prompts; the journal feeds in the
current rules and ledger and turns the results into user interaction.
"""

import math
from typing import Any, Iterable, Optional

from tradeguard.errors import InvalidTradeError
from tradeguard.models import RuleSet, Side, Stats, Trade
from tradeguard.risk.decisions import (
    HARD_BLOCK_KINDS,
    PreCheckResult,
    ReasonKind,
    RiskReason,
)

# Consecutive losses from which a streak warning is raised
LOSS_STREAK_WARNING = 2

PRE_CHECK_OK_MESSAGE = (
    "OK: the rules allow another trade. "
    "Confirm your thesis, your stop and your size before entering."
)


def to_number(value: Any) -> float:
    """Coerce user or stored input to a float.

    Returns NaN for anything that is not a number or a numeric string,
    including None and blank strings.
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return math.nan
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity.

    round_half_up(2.5) == 3, round_half_up(-2.5) == -2.
    """
    floor = math.floor(value)
    return floor + 1 if value - floor >= 0.5 else floor


def calc_pnl(trade: Trade) -> int:
    """Calculate the P&L of a single trade.

    LONG trades profit when exit > entry, SHORT trades when entry > exit.
    Returns 0 if any of entry, exit or qty is not finite.
    """
    entry = to_number(trade.entry)
    exit_ = to_number(trade.exit)
    qty = to_number(trade.qty)
    if not (math.isfinite(entry) and math.isfinite(exit_) and math.isfinite(qty)):
        return 0

    diff = (exit_ - entry) if trade.side is Side.LONG else (entry - exit_)
    product = diff * qty
    if not math.isfinite(product):
        return 0
    return round_half_up(product)


def compute_stats(trades: Iterable[Trade]) -> Stats:
    """Aggregate statistics for a sequence of trades in chronological order.

    A winning trade resets the loss streak, a losing trade extends it and
    a flat (zero P&L) trade leaves it unchanged.
    """
    pnl = 0
    n = 0
    wins = 0
    losses = 0
    streak_loss = 0

    for trade in trades:
        p = calc_pnl(trade)
        pnl += p
        n += 1
        if p > 0:
            wins += 1
            streak_loss = 0
        elif p < 0:
            losses += 1
            streak_loss += 1

    win_rate = round_half_up(wins / n * 100) if n else 0
    avg = round_half_up(pnl / n) if n else 0

    return Stats(
        pnl=pnl,
        n=n,
        wins=wins,
        losses=losses,
        streak_loss=streak_loss,
        win_rate=win_rate,
        avg=avg,
    )


def evaluate(rules: RuleSet, stats: Stats) -> list[RiskReason]:
    """Evaluate day statistics against the rules.

    Returns:
        Violated rules in a fixed order: trade count, daily loss, streak.
    """
    reasons = []

    if stats.n >= rules.max_trades:
        reasons.append(RiskReason(
            kind=ReasonKind.TRADE_COUNT_EXCEEDED,
            message=f"Trade count limit reached ({stats.n}/{rules.max_trades})",
        ))
    if stats.pnl <= rules.daily_max_loss:
        reasons.append(RiskReason(
            kind=ReasonKind.DAILY_LOSS_LIMIT_REACHED,
            message=f"Daily max loss reached ({stats.pnl} <= {rules.daily_max_loss})",
        ))
    if stats.streak_loss >= LOSS_STREAK_WARNING:
        reasons.append(RiskReason(
            kind=ReasonKind.LOSS_STREAK,
            message=(
                f"Losing streak ({stats.streak_loss} in a row), "
                "watch out for revenge trading"
            ),
        ))

    return reasons


def hard_blocks(reasons: Iterable[RiskReason]) -> list[RiskReason]:
    """Filter reasons down to those that block a new trade."""
    return [r for r in reasons if r.kind in HARD_BLOCK_KINDS]


def pre_check_decision(reasons: list[RiskReason]) -> PreCheckResult:
    """Turn evaluated reasons into an advisory pre-trade verdict."""
    if reasons:
        return PreCheckResult(
            ok=False,
            reasons=tuple(reasons),
            message="STOP recommended: " + " / ".join(r.message for r in reasons),
        )
    return PreCheckResult(ok=True, reasons=(), message=PRE_CHECK_OK_MESSAGE)


def trade_warnings(rules: RuleSet, pnl: int) -> list[RiskReason]:
    """Soft warnings for a candidate trade's own P&L.

    Each warning needs explicit confirmation before the trade is recorded.
    """
    warnings = []

    if pnl <= rules.stop_loss:
        warnings.append(RiskReason(
            kind=ReasonKind.STOP_LOSS_EXCEEDED,
            message=(
                f"This trade's loss ({pnl}) is at or beyond your stop-loss "
                f"guideline ({rules.stop_loss}). Record it anyway?"
            ),
        ))
    if pnl >= rules.take_profit:
        warnings.append(RiskReason(
            kind=ReasonKind.TAKE_PROFIT_EXCEEDED,
            message=(
                f"This trade's profit ({pnl}) is at or above your take-profit "
                f"guideline ({rules.take_profit}). Record it anyway?"
            ),
        ))

    return warnings


def validate_trade(
    symbol: Any,
    side: Any,
    entry: Any,
    exit: Any,
    qty: Any,
    timestamp: int,
    note: Optional[str] = None,
) -> Trade:
    """Validate raw trade fields and build a Trade.

    Args:
        symbol: Trading symbol; surrounding whitespace is stripped.
        side: LONG or SHORT (case-insensitive) or a Side.
        entry: Entry price, number or numeric string.
        exit: Exit price, number or numeric string.
        qty: Quantity, must be > 0.
        timestamp: Epoch milliseconds to stamp the trade with.
        note: Optional note; surrounding whitespace is stripped.

    Returns:
        The validated Trade.

    Raises:
        InvalidTradeError: With a user-facing message on the first bad field.
    """
    symbol = str(symbol or "").strip()
    if not symbol:
        raise InvalidTradeError("Enter a symbol.")

    try:
        side = Side(str(side.value if isinstance(side, Side) else side).strip().upper())
    except ValueError:
        raise InvalidTradeError(f"Side must be LONG or SHORT, got {side!r}.")

    entry_value = to_number(entry)
    exit_value = to_number(exit)
    qty_value = to_number(qty)
    if not all(math.isfinite(v) for v in (entry_value, exit_value, qty_value)):
        raise InvalidTradeError("Entry, exit and quantity must be numbers.")
    if qty_value <= 0:
        raise InvalidTradeError("Quantity must be greater than zero.")

    return Trade(
        timestamp=timestamp,
        symbol=symbol,
        side=side,
        entry=entry_value,
        exit=exit_value,
        qty=qty_value,
        note=(note or "").strip(),
    )
