"""CSV export of the journal list.

Fields are written verbatim: embedded commas and quotes are not escaped.
"""

from app.services.journal.records import TradeRecord

CSV_FILENAME = "trade_records.csv"
CSV_HEADER = ("Date", "Symbol", "Type", "Long/Short", "Entry", "Exit", "P/L", "Rating")


class EmptyExportError(ValueError):
    """Raised when there is nothing to export."""


def _row(record: TradeRecord) -> list[str]:
    return [
        record.date,
        record.symbol,
        record.order_type,
        record.direction.value,
        record.entry,
        record.exit,
        record.profit_loss,
        str(int(record.rating)),
    ]


def build_csv(records: list[TradeRecord]) -> str:
    """Header line plus one line per record, in the order given."""
    if not records:
        raise EmptyExportError("No trade records to export")
    lines = [",".join(CSV_HEADER)]
    lines.extend(",".join(_row(r)) for r in records)
    return "".join(line + "\n" for line in lines)
