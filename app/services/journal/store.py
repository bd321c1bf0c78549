"""Trade collection store: per-owner journal documents plus live snapshots.

Documents live under ``artifacts/{app_id}/users/{owner_id}/trade_records/{id}``.
The store assigns ids and creation timestamps; clients never choose either.
Every write publishes a pulse on the owner's change-feed channel and every
live subscriber answers it by re-reading the whole collection.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, func, select

from app.models.trade_record import TradeRecordRow
from app.services.journal.feed import ChangeFeed, FeedListener, owner_channel
from app.services.journal.records import TradeDraft, TradeRecord, sort_newest_first

logger = logging.getLogger(__name__)


def document_path(app_id: str, owner_id: str, record_id: str | None = None) -> str:
    """Namespaced path of an owner's collection, or of one document in it."""
    path = f"artifacts/{app_id}/users/{owner_id}/trade_records"
    return f"{path}/{record_id}" if record_id else path


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        # SQLite drops tzinfo; everything is stored in UTC
        return value.replace(tzinfo=timezone.utc)
    return value


def _row_to_record(row: TradeRecordRow) -> TradeRecord:
    return TradeRecord(**row.document, id=row.id, owner_id=row.owner_id, created_at=_as_utc(row.created_at))


class Subscription:
    """Live query over one owner's collection.

    Iterating yields the current snapshot first, then a fresh full snapshot
    for every change the feed reports. Each snapshot is sorted newest first.
    Iteration ends once ``close()`` has been called.
    """

    def __init__(self, store: "TradeStore", owner_id: str, listener: FeedListener) -> None:
        self._store = store
        self.owner_id = owner_id
        self._listener = listener
        self._primed = False
        self._closed = False

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> list[TradeRecord]:
        if self._closed:
            raise StopAsyncIteration
        if self._primed:
            await self._listener.__anext__()
        self._primed = True
        return await self._store.list_records(self.owner_id)

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._listener.close()


class TradeStore:
    """Create, delete and watch trade records for a single tenant."""

    def __init__(self, session_factory, feed: ChangeFeed, app_id: str) -> None:
        self._session_factory = session_factory
        self._feed = feed
        self._app_id = app_id
        self._last_timestamp: datetime | None = None

    @property
    def app_id(self) -> str:
        return self._app_id

    def _server_timestamp(self, latest_stored: datetime | None = None) -> datetime:
        """Wall clock, bumped past this store's last stamp and ``latest_stored``.

        ``latest_stored`` is the newest timestamp already committed for the
        owner, possibly by another worker process.
        """
        now = datetime.now(timezone.utc)
        for floor in (self._last_timestamp, _as_utc(latest_stored)):
            if floor is not None and now <= floor:
                now = floor + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    async def list_records(self, owner_id: str) -> list[TradeRecord]:
        """Full collection for an owner. Ordering is applied here, not in SQL."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(TradeRecordRow).where(
                    TradeRecordRow.app_id == self._app_id,
                    TradeRecordRow.owner_id == owner_id,
                )
            )
            rows = result.scalars().all()
        return sort_newest_first([_row_to_record(row) for row in rows])

    async def create(self, owner_id: str, draft: TradeDraft) -> TradeRecord:
        """Persist a draft as a new record owned by ``owner_id``.

        Returns once the write is committed. Storage errors propagate.
        """
        async with self._session_factory() as session:
            latest = await session.scalar(
                select(func.max(TradeRecordRow.created_at)).where(
                    TradeRecordRow.app_id == self._app_id,
                    TradeRecordRow.owner_id == owner_id,
                )
            )
            row = TradeRecordRow(
                id=str(uuid.uuid4()),
                app_id=self._app_id,
                owner_id=owner_id,
                document=draft.model_dump(mode="json"),
                created_at=self._server_timestamp(latest),
            )
            session.add(row)
            await session.commit()

        logger.info("Created %s", document_path(self._app_id, owner_id, row.id))
        await self._notify(owner_id)
        return _row_to_record(row)

    async def delete(self, owner_id: str, record_id: str) -> bool:
        """Hard delete. Returns False when the owner has no such record."""
        async with self._session_factory() as session:
            result = await session.execute(
                delete(TradeRecordRow).where(
                    TradeRecordRow.id == record_id,
                    TradeRecordRow.app_id == self._app_id,
                    TradeRecordRow.owner_id == owner_id,
                )
            )
            await session.commit()

        if result.rowcount == 0:
            logger.warning("Delete of missing record %s", document_path(self._app_id, owner_id, record_id))
            return False

        logger.info("Deleted %s", document_path(self._app_id, owner_id, record_id))
        await self._notify(owner_id)
        return True

    async def subscribe(self, owner_id: str) -> Subscription:
        """Open a live query. The listener is attached before the first read."""
        listener = await self._feed.listen(owner_channel(self._app_id, owner_id))
        return Subscription(self, owner_id, listener)

    async def _notify(self, owner_id: str) -> None:
        # Write is already committed here
        try:
            await self._feed.publish(owner_channel(self._app_id, owner_id))
        except Exception as e:
            logger.error("Change feed publish failed for %s: %s", owner_id, e)
