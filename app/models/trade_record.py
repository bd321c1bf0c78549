"""Trade record documents, scoped by tenant (app_id) and owning identity."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class TradeRecordRow(Base):
    """One journal entry. The document body is schemaless JSON."""

    __tablename__ = "trade_records"
    __table_args__ = (Index("ix_trade_records_app_owner", "app_id", "owner_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)  # store-assigned uuid4
    app_id: Mapped[str] = mapped_column(String(100), nullable=False)
    owner_id: Mapped[str] = mapped_column(String(36), nullable=False)
    document: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
