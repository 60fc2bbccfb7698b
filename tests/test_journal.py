"""Tests for the journal service: rules, ledgers and trade submission.

**Feature: trade-discipline**
"""

import json
import logging
import tempfile
from datetime import date, datetime
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradeguard.clock import FixedClock
from tradeguard.db.store import MemoryStore, SqliteStore
from tradeguard.journal import Journal, day_key
from tradeguard.models import DailyLedger, RuleSet, Side, Trade
from tradeguard.prompts import AutoPrompter
from tradeguard.risk import ReasonKind, SubmissionStatus

TODAY = date(2024, 3, 5)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 3, 5, 10, 30))


@pytest.fixture
def journal(clock: FixedClock) -> Journal:
    return Journal(MemoryStore(), clock=clock)


def add(journal: Journal, pnl: int, answer: bool = True, **overrides):
    """Submit a qty-1 LONG trade with the given P&L."""
    fields = {"symbol": "7203", "side": "LONG", "entry": 1000, "exit": 1000 + pnl, "qty": 1}
    fields.update(overrides)
    prompter = AutoPrompter(answer=answer)
    return journal.add_trade(prompter, **fields), prompter


class TestDayKey:
    def test_zero_padded(self):
        assert day_key(date(2024, 3, 5)) == "day:2024-03-05"
        assert day_key(date(2024, 12, 25)) == "day:2024-12-25"

    def test_journal_uses_clock_local_date(self, journal: Journal):
        assert journal.today() == TODAY
        add(journal, 100)
        assert journal.store.keys("day:") == ["day:2024-03-05"]


class TestRules:
    def test_defaults_when_absent(self, journal: Journal):
        assert journal.load_rules() == RuleSet(
            daily_max_loss=-30000, stop_loss=-3000, take_profit=10000, max_trades=5
        )

    def test_defaults_when_corrupt(self, journal: Journal):
        journal.store.set_raw("rules", "{{{")
        assert journal.load_rules() == RuleSet()

    def test_defaults_when_not_an_object(self, journal: Journal):
        journal.store.set("rules", [1, 2, 3])
        assert journal.load_rules() == RuleSet()

    def test_partial_stored_rules_fill_defaults(self, journal: Journal):
        journal.store.set("rules", {"maxTrades": "3", "stopLoss": "oops"})
        rules = journal.load_rules()
        assert rules.max_trades == 3
        assert rules.stop_loss == -3000
        assert rules.daily_max_loss == -30000

    def test_save_round_trip(self, journal: Journal):
        saved = journal.save_rules(-20000, -2000, 8000, 3)
        assert journal.load_rules() == saved
        assert journal.store.get("rules") == {
            "dailyMaxLoss": -20000,
            "stopLoss": -2000,
            "takeProfit": 8000,
            "maxTrades": 3,
        }

    def test_save_coerces_and_falls_back_per_field(self, journal: Journal):
        rules = journal.save_rules(daily_max_loss="abc", stop_loss="", take_profit=None, max_trades="7")
        assert rules == RuleSet(daily_max_loss=-30000, stop_loss=-3000, take_profit=10000, max_trades=7)

    def test_save_rejects_non_finite(self, journal: Journal):
        rules = journal.save_rules(daily_max_loss=float("nan"), stop_loss="inf", take_profit=1, max_trades=2)
        assert rules.daily_max_loss == -30000
        assert rules.stop_loss == -3000

    def test_save_rounds_fractional_values(self, journal: Journal):
        rules = journal.save_rules(daily_max_loss="-2500.5", stop_loss=-99.4, take_profit=10.5, max_trades=2.5)
        assert rules.daily_max_loss == -2500
        assert rules.stop_loss == -99
        assert rules.take_profit == 11
        assert rules.max_trades == 3

    def test_save_replaces_wholesale(self, journal: Journal):
        journal.save_rules(-1, -1, 1, 1)
        journal.save_rules()
        assert journal.load_rules() == RuleSet()


class TestLedgers:
    def test_absent_day_is_empty(self, journal: Journal):
        ledger = journal.load_day()
        assert ledger == DailyLedger(date=TODAY)
        assert ledger.trades == ()

    def test_corrupt_day_is_empty(self, journal: Journal, caplog):
        journal.store.set_raw("day:2024-03-05", "not json")
        with caplog.at_level(logging.WARNING, logger="tradeguard"):
            assert journal.load_day().trades == ()
        assert any(
            r.levelno == logging.WARNING and "day:2024-03-05" in r.getMessage()
            for r in caplog.records
        )

    def test_malformed_trades_are_skipped(self, journal: Journal, caplog):
        valid = {"ts": 1, "symbol": "7203", "side": "LONG", "entry": 100, "exit": 101, "qty": 1}
        journal.store.set("day:2024-03-05", {"trades": [valid, {"symbol": "X"}, 5]})

        with caplog.at_level(logging.WARNING, logger="tradeguard"):
            trades = journal.load_day().trades

        assert [t.symbol for t in trades] == ["7203"]
        assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 2

    def test_malformed_trade_does_not_wipe_day(self, journal: Journal):
        valid = {"ts": 1, "symbol": "7203", "side": "LONG", "entry": 100, "exit": 99, "qty": 1}
        journal.store.set("day:2024-03-05", {"trades": [valid, {"symbol": "X"}]})

        result, _ = add(journal, 10, symbol="6758")

        assert result.status is SubmissionStatus.RECORDED
        assert [t.symbol for t in journal.load_day().trades] == ["7203", "6758"]

    def test_skipped_trades_still_leave_valid_ones_counted(self, journal: Journal):
        journal.save_rules(max_trades=1)
        valid = {"ts": 1, "symbol": "7203", "side": "LONG", "entry": 100, "exit": 101, "qty": 1}
        journal.store.set("day:2024-03-05", {"trades": [{"bad": True}, valid]})

        result, _ = add(journal, 10)

        assert result.status is SubmissionStatus.BLOCKED

    @pytest.mark.parametrize("value", [[], "text", 5, {"trades": 5}, {"trades": "abc"}])
    def test_wrong_shape_gives_empty_day(self, journal: Journal, value):
        journal.store.set("day:2024-03-05", value)
        assert journal.load_day().trades == ()

    def test_persisted_shape(self, journal: Journal, clock: FixedClock):
        add(journal, 20, note="clean break")
        stored = journal.store.get("day:2024-03-05")
        assert stored == {
            "trades": [{
                "ts": clock.timestamp_ms(),
                "symbol": "7203",
                "side": "LONG",
                "entry": 1000.0,
                "exit": 1020.0,
                "qty": 1.0,
                "note": "clean break",
            }]
        }

    def test_loads_hand_written_ledger(self, journal: Journal):
        journal.store.set_raw("day:2024-03-05", json.dumps({"trades": [
            {"ts": 1709600523004, "symbol": "6758", "side": "SHORT",
             "entry": 3000, "exit": 2990, "qty": 100, "note": ""},
        ]}))
        ledger = journal.load_day()
        assert len(ledger.trades) == 1
        assert ledger.trades[0].side is Side.SHORT
        assert journal.stats().pnl == 1000

    def test_explicit_day(self, journal: Journal):
        other = date(2024, 3, 1)
        journal.save_day(DailyLedger(date=other, trades=(
            Trade(ts=0, symbol="X", side=Side.LONG, entry=1, exit=2, qty=1),
        )))
        assert len(journal.load_day(other).trades) == 1
        assert journal.load_day().trades == ()

    def test_day_rollover_starts_new_ledger(self, journal: Journal, clock: FixedClock):
        add(journal, 100)
        clock.advance(moment=datetime(2024, 3, 6, 9, 0))
        assert journal.load_day().trades == ()
        assert len(journal.load_day(TODAY).trades) == 1
        add(journal, 50)
        assert journal.recorded_days() == [date(2024, 3, 5), date(2024, 3, 6)]


class TestDeleteTrade:
    def test_delete_by_chronological_index(self, journal: Journal, clock: FixedClock):
        for symbol in ["A", "B", "C"]:
            add(journal, 10, symbol=symbol)
            clock.advance(seconds=60)

        removed = journal.delete_trade(1)

        assert removed.symbol == "B"
        assert [t.symbol for t in journal.load_day().trades] == ["A", "C"]

    @pytest.mark.parametrize("index", [2, 3, 100, -1])
    def test_out_of_range_is_noop(self, journal: Journal, index: int):
        add(journal, 10, symbol="A")
        add(journal, 10, symbol="B")
        before = journal.store.get_raw("day:2024-03-05")

        assert journal.delete_trade(index) is None
        assert journal.store.get_raw("day:2024-03-05") == before

    def test_delete_on_empty_day_writes_nothing(self, journal: Journal):
        assert journal.delete_trade(0) is None
        assert journal.store.keys() == []


class TestResetDay:
    def test_declined_keeps_trades(self, journal: Journal):
        add(journal, 10)
        prompter = AutoPrompter(answer=False)
        assert journal.reset_day(prompter) is False
        assert len(journal.load_day().trades) == 1
        assert len(prompter.questions) == 1

    def test_confirmed_clears_trades(self, journal: Journal):
        add(journal, 10)
        add(journal, -10)
        assert journal.reset_day(AutoPrompter(answer=True)) is True
        assert journal.load_day().trades == ()
        assert journal.stats().n == 0


class TestAddTrade:
    """
    **Feature: trade-discipline, Property 7: Trade Submission Gate**
    """

    def test_recorded(self, journal: Journal):
        result, prompter = add(journal, 500)
        assert result.status is SubmissionStatus.RECORDED
        assert result.recorded
        assert result.pnl == 500
        assert prompter.questions == []
        assert prompter.alerts == []
        assert journal.stats().pnl == 500

    @pytest.mark.parametrize(
        "overrides, fragment",
        [
            ({"symbol": "  "}, "symbol"),
            ({"entry": "abc"}, "must be numbers"),
            ({"qty": 0}, "greater than zero"),
            ({"qty": -5}, "greater than zero"),
            ({"side": "FLAT"}, "LONG or SHORT"),
        ],
    )
    def test_invalid_input_rejected(self, journal: Journal, overrides: dict, fragment: str):
        result, prompter = add(journal, 100, **overrides)
        assert result.status is SubmissionStatus.REJECTED
        assert fragment in result.message
        assert prompter.alerts == [result.message]
        assert prompter.questions == []
        assert journal.store.keys() == []

    def test_trade_count_blocks_sixth_trade(self, journal: Journal):
        for i in range(5):
            result, prompter = add(journal, -1000)
            assert result.status is SubmissionStatus.RECORDED, f"trade {i + 1}"
            assert prompter.questions == []

        result, prompter = add(journal, -1000)

        assert result.status is SubmissionStatus.BLOCKED
        assert [r.kind for r in result.reasons] == [ReasonKind.TRADE_COUNT_EXCEEDED]
        assert prompter.alerts == [result.message]
        assert len(journal.load_day().trades) == 5

    def test_daily_loss_blocks_next_trade(self, journal: Journal):
        journal.save_rules(daily_max_loss=-1000, stop_loss=-5000, take_profit=10000, max_trades=10)
        result, _ = add(journal, -1000)
        assert result.status is SubmissionStatus.RECORDED

        result, _ = add(journal, 5000)

        assert result.status is SubmissionStatus.BLOCKED
        assert [r.kind for r in result.reasons] == [ReasonKind.DAILY_LOSS_LIMIT_REACHED]
        assert journal.stats().n == 1

    def test_block_uses_state_before_candidate(self, journal: Journal):
        journal.save_rules(daily_max_loss=-1000, stop_loss=-50000, take_profit=10000, max_trades=10)
        result, _ = add(journal, -40000)
        assert result.status is SubmissionStatus.RECORDED

    def test_validation_runs_before_block(self, journal: Journal):
        journal.save_rules(max_trades=1)
        add(journal, 10)
        result, _ = add(journal, 10, qty="x")
        assert result.status is SubmissionStatus.REJECTED

    def test_loss_streak_does_not_block(self, journal: Journal):
        add(journal, -100)
        add(journal, -100)
        assert not journal.pre_check().ok

        result, prompter = add(journal, -100)
        assert result.status is SubmissionStatus.RECORDED
        assert prompter.alerts == []

    def test_stop_loss_confirmation_declined(self, journal: Journal):
        journal.save_rules(stop_loss=-100)
        prompter = AutoPrompter(answer=False)

        result = journal.add_trade(prompter, symbol="X", side="LONG", entry=100, exit=90, qty=10)

        assert result.status is SubmissionStatus.DECLINED
        assert result.pnl == -100
        assert [r.kind for r in result.reasons] == [ReasonKind.STOP_LOSS_EXCEEDED]
        assert len(prompter.questions) == 1
        assert journal.load_day().trades == ()

    def test_stop_loss_confirmation_accepted(self, journal: Journal):
        journal.save_rules(stop_loss=0)
        prompter = AutoPrompter(answer=True)

        result = journal.add_trade(prompter, symbol="X", side="LONG", entry=100, exit=90, qty=10)

        assert result.status is SubmissionStatus.RECORDED
        assert len(prompter.questions) == 1
        assert journal.stats().pnl == -100

    def test_no_confirmation_beyond_stop_loss_range(self, journal: Journal):
        journal.save_rules(stop_loss=-101)
        prompter = AutoPrompter(answer=False)

        result = journal.add_trade(prompter, symbol="X", side="LONG", entry=100, exit=90, qty=10)

        assert result.status is SubmissionStatus.RECORDED
        assert prompter.questions == []

    def test_take_profit_confirmation(self, journal: Journal):
        result, prompter = add(journal, 10000, answer=False)
        assert result.status is SubmissionStatus.DECLINED
        assert [r.kind for r in result.reasons] == [ReasonKind.TAKE_PROFIT_EXCEEDED]
        assert len(prompter.questions) == 1

        result, _ = add(journal, 10000, answer=True)
        assert result.status is SubmissionStatus.RECORDED

    def test_timestamp_from_clock(self, journal: Journal, clock: FixedClock):
        result, _ = add(journal, 1)
        assert result.trade.timestamp == clock.timestamp_ms()

    @given(pnls=st.lists(st.integers(min_value=-2999, max_value=9999), min_size=0, max_size=12))
    @settings(max_examples=50)
    def test_never_more_than_max_trades(self, pnls: list[int]):
        """
        *For any* sequence of submissions, the ledger never holds more
        than max_trades trades.
        """
        journal = Journal(MemoryStore(), clock=FixedClock(datetime(2024, 3, 5, 10, 30)))
        journal.save_rules(daily_max_loss=-10**9, max_trades=5)
        for pnl in pnls:
            add(journal, pnl)
        assert len(journal.load_day().trades) == min(len(pnls), 5)


class TestPreCheck:
    def test_ok_on_fresh_day(self, journal: Journal):
        result = journal.pre_check()
        assert result.ok
        assert result.reasons == ()

    def test_does_not_mutate(self, journal: Journal):
        add(journal, -100)
        before = {k: journal.store.get_raw(k) for k in journal.store.keys()}
        journal.pre_check()
        after = {k: journal.store.get_raw(k) for k in journal.store.keys()}
        assert before == after

    def test_reports_all_reasons(self, journal: Journal):
        journal.save_rules(daily_max_loss=-200, stop_loss=-10000, max_trades=2)
        add(journal, -100)
        add(journal, -100)

        kinds = [r.kind for r in journal.pre_check().reasons]

        assert kinds == [
            ReasonKind.TRADE_COUNT_EXCEEDED,
            ReasonKind.DAILY_LOSS_LIMIT_REACHED,
            ReasonKind.LOSS_STREAK,
        ]


class TestSqliteJournal:
    def test_trades_persist_across_instances(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "test.db"
            clock = FixedClock(datetime(2024, 3, 5, 10, 30))

            add(Journal(SqliteStore(db_path), clock=clock), 300)
            reopened = Journal(SqliteStore(db_path), clock=clock)

            assert reopened.stats().pnl == 300
            assert reopened.delete_trade(0).symbol == "7203"
            assert Journal(SqliteStore(db_path), clock=clock).stats().n == 0
