"""Trade journal documents: draft, persisted record, and the closed enums they use.

Financial fields (prices, lot size, risk/reward, P/L) are opaque strings.
Nothing here parses or computes them.
"""

from datetime import date, datetime, timezone
from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict


class Direction(str, Enum):
    """Trade direction."""

    LONG = "Long"
    SHORT = "Short"


class TernaryFlag(str, Enum):
    """Yes / no / not answered. UNSET is distinct from NO."""

    YES = "Y"
    NO = "N"
    UNSET = ""


class Rating(IntEnum):
    """Self-assessment, 0 means unrated."""

    UNRATED = 0
    ONE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5


class TradeDraft(BaseModel):
    """Editable journal entry, not yet persisted."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    date: str = ""
    symbol: str = ""
    position: str = ""
    time: str = ""
    lot_size: str = ""
    direction: Direction = Direction.LONG
    order_type: str = ""
    strategy: str = ""
    chart_analysis: str = ""
    entry: str = ""
    stop_loss: str = ""
    exit: str = ""
    take_profit: str = ""
    risk_reward: str = ""
    profit_loss: str = ""
    reason: str = ""
    assumptions: str = ""
    discipline: TernaryFlag = TernaryFlag.UNSET
    followed_rules: TernaryFlag = TernaryFlag.UNSET
    rating: Rating = Rating.UNRATED


DRAFT_FIELDS = frozenset(TradeDraft.model_fields)


def empty_draft(today: date | None = None) -> TradeDraft:
    """Fresh draft with the date pre-filled to the local date."""
    return TradeDraft(date=(today or date.today()).isoformat())


class TradeRecord(TradeDraft):
    """Persisted journal entry. id, owner and timestamp come from the store."""

    model_config = ConfigDict(extra="ignore")

    id: str
    owner_id: str
    created_at: datetime | None = None


class Identity(BaseModel):
    """Resolved session identity."""

    uid: str
    token: str
    is_anonymous: bool = True


def _sort_key(record: TradeRecord) -> tuple[bool, datetime]:
    created = record.created_at
    if created is None:
        return (False, datetime.min.replace(tzinfo=timezone.utc))
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return (True, created)


def sort_newest_first(records: list[TradeRecord]) -> list[TradeRecord]:
    """Most recent first. Records still waiting on a server timestamp sort last."""
    return sorted(records, key=_sort_key, reverse=True)
