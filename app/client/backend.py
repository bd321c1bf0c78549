"""Backend capability used by the client: identity, writes, and live snapshots.

``subscribe(identity)`` returns an async iterator of full, newest-first
collection snapshots. Cancelling the consuming task (or calling ``aclose()``
on the iterator) tears the subscription down.

Two implementations: ``HttpJournalBackend`` talks to the API over HTTP and
Server-Sent Events; ``LocalJournalBackend`` drives an in-process store
directly (embedding, scripts, tests).
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator

import httpx

from app.services.identity import IdentityService
from app.services.journal.records import Identity, TradeDraft, TradeRecord
from app.services.journal.store import TradeStore

logger = logging.getLogger(__name__)


class JournalBackend(ABC):
    """Everything the client needs from a document backend."""

    @abstractmethod
    async def sign_in_anonymously(self) -> Identity: ...

    @abstractmethod
    async def sign_in_with_token(self, token: str) -> Identity: ...

    @abstractmethod
    async def create(self, identity: Identity, draft: TradeDraft) -> TradeRecord: ...

    @abstractmethod
    async def delete(self, identity: Identity, record_id: str) -> None: ...

    @abstractmethod
    def subscribe(self, identity: Identity) -> AsyncIterator[list[TradeRecord]]: ...

    async def aclose(self) -> None:
        return None


class LocalJournalBackend(JournalBackend):
    """Backend over in-process identity service and trade store."""

    def __init__(self, identities: IdentityService, store: TradeStore) -> None:
        self._identities = identities
        self._store = store

    async def sign_in_anonymously(self) -> Identity:
        return await self._identities.sign_in_anonymously()

    async def sign_in_with_token(self, token: str) -> Identity:
        return await self._identities.sign_in_with_token(token)

    async def create(self, identity: Identity, draft: TradeDraft) -> TradeRecord:
        return await self._store.create(identity.uid, draft)

    async def delete(self, identity: Identity, record_id: str) -> None:
        if not await self._store.delete(identity.uid, record_id):
            raise LookupError(f"No trade record {record_id}")

    async def subscribe(self, identity: Identity) -> AsyncIterator[list[TradeRecord]]:
        subscription = await self._store.subscribe(identity.uid)
        try:
            async for snapshot in subscription:
                yield snapshot
        finally:
            await subscription.close()


class HttpJournalBackend(JournalBackend):
    """Backend over the Trade Journal HTTP API."""

    def __init__(self, base_url: str, client: httpx.AsyncClient | None = None) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=10.0)

    @staticmethod
    def _auth(identity: Identity) -> dict[str, str]:
        return {"Authorization": f"Bearer {identity.token}"}

    @staticmethod
    def _collection(identity: Identity) -> str:
        return f"/api/users/{identity.uid}/trades"

    async def sign_in_anonymously(self) -> Identity:
        resp = await self._client.post("/api/auth/anonymous")
        resp.raise_for_status()
        return Identity.model_validate(resp.json())

    async def sign_in_with_token(self, token: str) -> Identity:
        resp = await self._client.post("/api/auth/token", json={"token": token})
        resp.raise_for_status()
        return Identity.model_validate(resp.json())

    async def create(self, identity: Identity, draft: TradeDraft) -> TradeRecord:
        resp = await self._client.post(
            self._collection(identity),
            json=draft.model_dump(mode="json"),
            headers=self._auth(identity),
        )
        resp.raise_for_status()
        return TradeRecord.model_validate(resp.json())

    async def delete(self, identity: Identity, record_id: str) -> None:
        resp = await self._client.delete(
            f"{self._collection(identity)}/{record_id}", headers=self._auth(identity)
        )
        resp.raise_for_status()

    async def subscribe(self, identity: Identity) -> AsyncIterator[list[TradeRecord]]:
        async with self._client.stream(
            "GET",
            f"{self._collection(identity)}/live",
            headers={**self._auth(identity), "Accept": "text/event-stream"},
            timeout=httpx.Timeout(10.0, read=None),
        ) as resp:
            resp.raise_for_status()
            async for line in resp.aiter_lines():
                if not line.startswith("data:"):
                    continue
                payload = json.loads(line[len("data:"):].strip())
                yield [TradeRecord.model_validate(item) for item in payload]

    async def aclose(self) -> None:
        await self._client.aclose()
