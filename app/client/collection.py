"""Live trade collection: the client's view of one identity's journal.

The subscription is the only source of displayed records. ``create`` and
``delete`` wait for the backend to acknowledge and then leave ``records``
alone; the next snapshot carries the outcome.
"""

import asyncio
import logging
from typing import Callable

from app.client.backend import JournalBackend
from app.services.journal.records import Identity, TradeDraft, TradeRecord, sort_newest_first

logger = logging.getLogger(__name__)


class TradeCollection:
    """Owns at most one live subscription at a time."""

    def __init__(
        self,
        backend: JournalBackend,
        on_change: Callable[[list[TradeRecord]], None] | None = None,
    ) -> None:
        self._backend = backend
        self._on_change = on_change
        self._task: asyncio.Task | None = None
        self._identity: Identity | None = None
        self.records: list[TradeRecord] = []
        self.loading: bool = False

    @property
    def owner(self) -> str | None:
        return self._identity.uid if self._identity else None

    async def attach(self, identity: Identity | None) -> None:
        """Follow ``identity``'s collection. The previous subscription is torn down first."""
        await self.detach()
        if identity is None:
            return
        self._identity = identity
        self.loading = True
        self._task = asyncio.create_task(self._consume(identity))

    async def detach(self) -> None:
        """Stop the live subscription and clear displayed records."""
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._identity = None
        self.loading = False
        self._set_records([])

    async def close(self) -> None:
        await self.detach()

    async def _consume(self, identity: Identity) -> None:
        try:
            async for snapshot in self._backend.subscribe(identity):
                if self.owner != identity.uid:
                    # Stale delivery from an identity we already switched away from
                    break
                self.loading = False
                self._set_records(sort_newest_first(snapshot))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("Trade subscription for %s failed: %s", identity.uid, e)
        if self.owner == identity.uid:
            self.loading = False

    def _set_records(self, records: list[TradeRecord]) -> None:
        self.records = records
        if self._on_change is not None:
            self._on_change(records)

    async def create(self, draft: TradeDraft) -> bool:
        """Write a new record. Returns True once acknowledged."""
        identity = self._identity
        if identity is None:
            logger.warning("Create ignored: no signed-in identity")
            return False
        try:
            record = await self._backend.create(identity, draft)
        except Exception as e:
            logger.error("Creating trade record failed: %s", e)
            return False
        logger.info("Trade record %s created", record.id)
        return True

    async def delete(self, record_id: str, confirmed: bool) -> bool:
        """Permanently delete a record. Requires explicit user confirmation."""
        if not confirmed:
            return False
        identity = self._identity
        if identity is None:
            logger.warning("Delete ignored: no signed-in identity")
            return False
        try:
            await self._backend.delete(identity, record_id)
        except Exception as e:
            logger.error("Deleting trade record %s failed: %s", record_id, e)
            return False
        return True
