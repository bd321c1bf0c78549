"""SQLAlchemy models for the trade journal."""

from app.models.identity import IdentityRow
from app.models.trade_record import TradeRecordRow

__all__ = ["IdentityRow", "TradeRecordRow"]
