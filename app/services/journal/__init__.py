"""Trade journal documents, storage, live change feed and CSV export."""

from app.services.journal.export import EmptyExportError, build_csv
from app.services.journal.records import (
    Direction,
    Identity,
    Rating,
    TernaryFlag,
    TradeDraft,
    TradeRecord,
    empty_draft,
    sort_newest_first,
)
from app.services.journal.store import Subscription, TradeStore

__all__ = [
    "Direction",
    "EmptyExportError",
    "Identity",
    "Rating",
    "Subscription",
    "TernaryFlag",
    "TradeDraft",
    "TradeRecord",
    "TradeStore",
    "build_csv",
    "empty_draft",
    "sort_newest_first",
]
