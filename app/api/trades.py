"""Trade journal API routes: list, create, delete, export, and live snapshots."""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import StreamingResponse

from app.api.auth import require_identity
from app.services.journal.export import CSV_FILENAME, EmptyExportError, build_csv
from app.services.journal.records import TradeDraft, TradeRecord
from app.services.journal.store import TradeStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/users/{uid}/trades", tags=["trades"])


def get_store(request: Request) -> TradeStore:
    return request.app.state.store


async def require_owner(uid: str, caller: str = Depends(require_identity)) -> str:
    """A collection is only visible to the identity that owns it."""
    if uid != caller:
        raise HTTPException(status_code=403, detail="Not the owner of this collection")
    return uid


def _snapshot_event(records: list[TradeRecord]) -> str:
    payload = json.dumps([r.model_dump(mode="json") for r in records])
    return f"event: snapshot\ndata: {payload}\n\n"


@router.get("", response_model=list[TradeRecord])
async def list_trades(owner: str = Depends(require_owner), store: TradeStore = Depends(get_store)):
    """Current snapshot, newest first."""
    try:
        return await store.list_records(owner)
    except Exception as e:
        logger.error("Listing trades for %s failed: %s", owner, e)
        raise HTTPException(status_code=503, detail="Trade store unavailable")


@router.post("", response_model=TradeRecord, status_code=201)
async def create_trade(
    draft: TradeDraft, owner: str = Depends(require_owner), store: TradeStore = Depends(get_store)
):
    """Persist a draft. id, owner and timestamp are assigned server-side."""
    try:
        return await store.create(owner, draft)
    except Exception as e:
        logger.error("Creating trade for %s failed: %s", owner, e)
        raise HTTPException(status_code=503, detail="Trade store unavailable")


@router.delete("/{record_id}", status_code=204)
async def delete_trade(
    record_id: str, owner: str = Depends(require_owner), store: TradeStore = Depends(get_store)
):
    """Permanently delete one record."""
    try:
        deleted = await store.delete(owner, record_id)
    except Exception as e:
        logger.error("Deleting trade %s for %s failed: %s", record_id, owner, e)
        raise HTTPException(status_code=503, detail="Trade store unavailable")
    if not deleted:
        raise HTTPException(status_code=404, detail="Not found")
    return Response(status_code=204)


@router.get("/export.csv")
async def export_trades(owner: str = Depends(require_owner), store: TradeStore = Depends(get_store)):
    """Download the journal as trade_records.csv."""
    try:
        records = await store.list_records(owner)
    except Exception as e:
        logger.error("Exporting trades for %s failed: %s", owner, e)
        raise HTTPException(status_code=503, detail="Trade store unavailable")
    try:
        content = build_csv(records)
    except EmptyExportError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
    )


@router.get("/live")
async def live_trades(
    request: Request, owner: str = Depends(require_owner), store: TradeStore = Depends(get_store)
):
    """Server-Sent Events: one full snapshot now, then one per change."""

    async def events():
        subscription = None
        try:
            subscription = await store.subscribe(owner)
            async for snapshot in subscription:
                if await request.is_disconnected():
                    break
                yield _snapshot_event(snapshot)
        except Exception as e:
            logger.error("Live subscription for %s failed: %s", owner, e)
        finally:
            if subscription is not None:
                await subscription.close()

    return StreamingResponse(
        events(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
