"""Trade journal service.

Ties the rules and daily ledgers kept in a key-value store to the risk
engine, and drives the confirm/alert prompts for trade submission.
"""

import logging
import math
from datetime import date
from typing import Any, Optional

from pydantic import ValidationError

from tradeguard.clock import Clock, SystemClock
from tradeguard.db.store import KeyValueStore, ReadStatus
from tradeguard.errors import InvalidTradeError
from tradeguard.models import DailyLedger, RuleSet, Stats, Trade
from tradeguard.models.rules import (
    DEFAULT_DAILY_MAX_LOSS,
    DEFAULT_MAX_TRADES,
    DEFAULT_STOP_LOSS,
    DEFAULT_TAKE_PROFIT,
)
from tradeguard.prompts import Prompter
from tradeguard.risk.decisions import (
    PreCheckResult,
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

logger = logging.getLogger(__name__)

RULES_KEY = "rules"
DAY_KEY_PREFIX = "day:"


def day_key(day: date) -> str:
    """Store key for a day's ledger, e.g. ``day:2024-03-05``."""
    return f"{DAY_KEY_PREFIX}{day.year:04d}-{day.month:02d}-{day.day:02d}"


def _coerce_rule(value: Any, default: int) -> int:
    """Coerce a rule field, falling back to ``default`` if it is not a finite number."""
    number = to_number(value)
    if not math.isfinite(number):
        return default
    return round_half_up(number)


class Journal:
    """Rules, daily ledgers and the trade submission flow."""

    def __init__(self, store: KeyValueStore, clock: Optional[Clock] = None):
        """Initialize the journal.

        Args:
            store: Key-value store holding rules and ledgers.
            clock: Source of "today". Defaults to the system clock.
        """
        self.store = store
        self.clock = clock or SystemClock()

    def today(self) -> date:
        """Current local date according to the journal's clock."""
        return self.clock.today()

    # ==================== Rules ====================

    def load_rules(self) -> RuleSet:
        """Load the rules, substituting defaults if absent or malformed."""
        stored = self.store.read(RULES_KEY)
        if stored.status is ReadStatus.ABSENT:
            return RuleSet()
        if stored.status is ReadStatus.CORRUPT:
            logger.warning("Stored rules are not valid JSON, using defaults: %s", stored.error)
            return RuleSet()

        value = stored.value
        if not isinstance(value, dict):
            logger.warning("Stored rules are not an object, using defaults")
            return RuleSet()
        try:
            return RuleSet(
                daily_max_loss=_coerce_rule(value.get("dailyMaxLoss"), DEFAULT_DAILY_MAX_LOSS),
                stop_loss=_coerce_rule(value.get("stopLoss"), DEFAULT_STOP_LOSS),
                take_profit=_coerce_rule(value.get("takeProfit"), DEFAULT_TAKE_PROFIT),
                max_trades=_coerce_rule(value.get("maxTrades"), DEFAULT_MAX_TRADES),
            )
        except ValidationError as e:
            logger.warning("Stored rules failed validation, using defaults: %s", e)
            return RuleSet()

    def save_rules(
        self,
        daily_max_loss: Any = None,
        stop_loss: Any = None,
        take_profit: Any = None,
        max_trades: Any = None,
    ) -> RuleSet:
        """Coerce and persist a complete rule set.

        Every field is coerced to a number; anything that isn't one falls
        back to that field's default. The previous rules are replaced.

        Returns:
            The rules as saved.
        """
        rules = RuleSet(
            daily_max_loss=_coerce_rule(daily_max_loss, DEFAULT_DAILY_MAX_LOSS),
            stop_loss=_coerce_rule(stop_loss, DEFAULT_STOP_LOSS),
            take_profit=_coerce_rule(take_profit, DEFAULT_TAKE_PROFIT),
            max_trades=_coerce_rule(max_trades, DEFAULT_MAX_TRADES),
        )
        self.store.set(RULES_KEY, rules.to_record())
        logger.info("Saved rules: %s", rules.to_record())
        return rules

    # ==================== Ledgers ====================

    def load_day(self, day: Optional[date] = None) -> DailyLedger:
        """Load a day's ledger, empty if absent or malformed.

        Individual trades that fail validation are skipped so the rest of
        the day still counts against the rules.

        Args:
            day: Ledger date. Defaults to today.
        """
        day = day or self.today()
        key = day_key(day)
        stored = self.store.read(key)
        if stored.status is ReadStatus.ABSENT:
            return DailyLedger(date=day)
        if stored.status is ReadStatus.CORRUPT:
            logger.warning("Ledger %s is not valid JSON, starting empty: %s", key, stored.error)
            return DailyLedger(date=day)

        value = stored.value
        raw_trades = (value.get("trades") or []) if isinstance(value, dict) else None
        if not isinstance(raw_trades, list):
            logger.warning("Ledger %s has no trade list, starting empty", key)
            return DailyLedger(date=day)
        trades = []
        for position, raw in enumerate(raw_trades):
            try:
                trades.append(Trade.model_validate(raw))
            except ValidationError as e:
                logger.warning("Ledger %s: skipping malformed trade %d: %s", key, position, e)
        return DailyLedger(date=day, trades=tuple(trades))

    def save_day(self, ledger: DailyLedger) -> None:
        """Persist a ledger under its date, replacing what was stored."""
        self.store.set(day_key(ledger.date), ledger.to_record())

    def delete_trade(self, index: int, day: Optional[date] = None) -> Optional[Trade]:
        """Delete the trade at ``index`` (0-based, chronological).

        An out-of-range index, including a negative one, changes nothing.

        Returns:
            The removed trade, or None if ``index`` was out of range.
        """
        ledger = self.load_day(day)
        if not 0 <= index < len(ledger.trades):
            logger.warning(
                "No trade at index %d on %s (%d trades), nothing deleted",
                index, ledger.date.isoformat(), len(ledger.trades),
            )
            return None

        removed = ledger.trades[index]
        self.save_day(ledger.without(index))
        logger.info("Deleted trade %d (%s) on %s", index, removed.symbol, ledger.date.isoformat())
        return removed

    def reset_day(self, prompter: Prompter, day: Optional[date] = None) -> bool:
        """Clear a day's ledger after confirmation.

        Returns:
            True if the ledger was cleared.
        """
        day = day or self.today()
        if not prompter.confirm(f"Delete all trades recorded on {day.isoformat()}?"):
            return False
        self.save_day(DailyLedger(date=day))
        logger.info("Reset ledger for %s", day.isoformat())
        return True

    def recorded_days(self) -> list[date]:
        """Dates that have a stored ledger, oldest first."""
        days = []
        for key in self.store.keys(DAY_KEY_PREFIX):
            try:
                days.append(date.fromisoformat(key[len(DAY_KEY_PREFIX):]))
            except ValueError:
                logger.debug("Ignoring unexpected key %r", key)
        return days

    # ==================== Risk ====================

    def stats(self, day: Optional[date] = None) -> Stats:
        """Statistics for a day's ledger."""
        return compute_stats(self.load_day(day).trades)

    def pre_check(self) -> PreCheckResult:
        """Advisory check of today's state against the rules. Never mutates."""
        reasons = evaluate(self.load_rules(), self.stats())
        return pre_check_decision(reasons)

    def add_trade(
        self,
        prompter: Prompter,
        symbol: Any,
        side: Any,
        entry: Any,
        exit: Any,
        qty: Any,
        note: Optional[str] = None,
    ) -> SubmissionResult:
        """Validate, gate and record a trade for today.

        Invalid input is rejected, a trade count or daily loss violation
        (judged on the ledger before this trade) blocks outright, and a
        trade whose own P&L crosses the stop-loss or take-profit guideline
        needs confirmation.

        Args:
            prompter: Used for alerts and confirmations.
            symbol, side, entry, exit, qty, note: Raw trade fields.

        Returns:
            SubmissionResult describing the terminal state.
        """
        try:
            trade = validate_trade(
                symbol=symbol,
                side=side,
                entry=entry,
                exit=exit,
                qty=qty,
                timestamp=self.clock.timestamp_ms(),
                note=note,
            )
        except InvalidTradeError as e:
            prompter.alert(str(e))
            return SubmissionResult(status=SubmissionStatus.REJECTED, message=str(e))

        rules = self.load_rules()
        ledger = self.load_day()
        blocks = hard_blocks(evaluate(rules, compute_stats(ledger.trades)))
        if blocks:
            message = "Do not enter: " + " / ".join(r.message for r in blocks)
            prompter.alert(message)
            logger.info("Blocked %s trade on %s: %s", trade.symbol, ledger.date, message)
            return SubmissionResult(
                status=SubmissionStatus.BLOCKED,
                message=message,
                trade=trade,
                reasons=tuple(blocks),
            )

        pnl = calc_pnl(trade)
        warnings = trade_warnings(rules, pnl)
        for warning in warnings:
            if not prompter.confirm(warning.message):
                return SubmissionResult(
                    status=SubmissionStatus.DECLINED,
                    message="Trade not recorded.",
                    trade=trade,
                    pnl=pnl,
                    reasons=tuple(warnings),
                )

        self.save_day(ledger.append(trade))
        logger.info(
            "Recorded %s %s %s -> %s x %s (pnl %d) on %s",
            trade.side.value, trade.symbol, trade.entry, trade.exit, trade.qty,
            pnl, ledger.date.isoformat(),
        )
        return SubmissionResult(
            status=SubmissionStatus.RECORDED,
            message=f"Recorded {trade.symbol} with P&L {pnl}.",
            trade=trade,
            pnl=pnl,
            reasons=tuple(warnings),
        )
