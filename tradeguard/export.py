"""JSON and CSV exports of a day's ledger."""

import csv
import io
import json
import math
import re
from datetime import datetime, timedelta, timezone

from tradeguard.models import DailyLedger
from tradeguard.risk.engine import calc_pnl

CSV_HEADER = ["ts", "symbol", "side", "entry", "exit", "qty", "pnl", "note"]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_NEWLINE = re.compile(r"\r\n|\r|\n")


def export_json(ledger: DailyLedger) -> str:
    """Pretty-printed ``{"date": ..., "trades": [...]}`` document."""
    document = {"date": ledger.date.isoformat(), **ledger.to_record()}
    return json.dumps(document, indent=2, ensure_ascii=False)


def iso_utc(timestamp_ms: int) -> str:
    """Format epoch milliseconds as ISO-8601 UTC, e.g. ``2024-03-05T01:02:03.004Z``."""
    moment = EPOCH + timedelta(milliseconds=timestamp_ms)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def format_number(value: float) -> str:
    """Render a number without a trailing ``.0`` for whole values."""
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(value)


def quote(value: object) -> str:
    """Double-quote a CSV field, doubling any embedded quotes."""
    return '"' + str(value).replace('"', '""') + '"'


def export_csv(ledger: DailyLedger) -> str:
    """CSV with one row per trade.

    Every field is quoted. Line breaks inside notes are replaced by a
    single space, so notes do not survive a round trip byte-for-byte.
    """
    rows = [CSV_HEADER]
    for trade in ledger.trades:
        rows.append([
            iso_utc(trade.timestamp),
            trade.symbol,
            trade.side.value,
            format_number(trade.entry),
            format_number(trade.exit),
            format_number(trade.qty),
            calc_pnl(trade),
            _NEWLINE.sub(" ", trade.note),
        ])
    return "\n".join(",".join(quote(v) for v in row) for row in rows)


def parse_csv(text: str) -> list[dict[str, str]]:
    """Parse text produced by ``export_csv`` back into row dicts keyed by header."""
    reader = csv.reader(io.StringIO(text))
    rows = list(reader)
    if not rows:
        return []
    header, body = rows[0], rows[1:]
    return [dict(zip(header, row)) for row in body]
