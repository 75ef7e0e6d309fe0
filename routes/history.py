# routes/history.py
# =============================================================================
# 🗂️ Verlauf: Liste, Filter, Export/Import, Speichern, Löschen
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field

from models.history import ColorConfig
from models.records import QRRecord, QRType
from routes.utils import get_history_store, get_renderer, serialize_item
from utils.history_store import HistoryStore, SortOrder
from utils.qr_generator import QRRenderer
from utils.qr_payload import validate_record

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/history", tags=["History"])


class HistorySaveIn(BaseModel):
    record: QRRecord
    colors: ColorConfig = Field(default_factory=ColorConfig)


def _require_storage(store: HistoryStore) -> None:
    if not store.is_available():
        raise HTTPException(status_code=503, detail="Local storage is not available")


def _require_valid(record) -> None:
    result = validate_record(record)
    if not result.valid:
        raise HTTPException(status_code=422, detail=result.error)


# ---------------------------------------------------------------------------
# 📋 Lesen
# ---------------------------------------------------------------------------
@router.get("")
def list_history(
    type: Optional[QRType] = Query(None, description="Nur Einträge dieses Typs"),
    sort: Optional[SortOrder] = Query(None, description="newest | oldest | type"),
    store: HistoryStore = Depends(get_history_store),
):
    items = store.sort(sort) if sort else store.list_items()
    if type:
        items = [item for item in items if item.type == type.value]
    return [serialize_item(item) for item in items]


@router.get("/size")
def history_size(store: HistoryStore = Depends(get_history_store)):
    return {
        "bytes": store.size_bytes(),
        "maxBytes": store.max_storage_size,
        "items": len(store.list_items()),
        "maxItems": store.max_items,
        "available": store.is_available(),
    }


@router.get("/export")
def export_history(store: HistoryStore = Depends(get_history_store)) -> Response:
    filename = f"qr-history-{datetime.now().strftime('%Y%m%d')}.json"
    return Response(
        content=store.export_json(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{item_id}")
def get_history_item(item_id: str, store: HistoryStore = Depends(get_history_store)):
    item = store.get(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="History item not found")
    return serialize_item(item)


# ---------------------------------------------------------------------------
# ✍️ Schreiben
# ---------------------------------------------------------------------------
@router.post("/import")
async def import_history(request: Request, store: HistoryStore = Depends(get_history_store)):
    """Body = exportiertes JSON-Dokument. Merge mit dem vorhandenen Verlauf."""
    _require_storage(store)
    text = (await request.body()).decode("utf-8", errors="replace")
    if not store.import_json(text):
        raise HTTPException(status_code=422, detail="Invalid history data format")
    return {"imported": True, "items": len(store.list_items())}


@router.post("", status_code=201)
async def save_history(
    body: HistorySaveIn,
    store: HistoryStore = Depends(get_history_store),
    renderer: QRRenderer = Depends(get_renderer),
):
    _require_valid(body.record)
    _require_storage(store)

    item = await store.save(body.record, body.colors, renderer)
    if item is None:
        # Speicher ist verfügbar → None heißt Duplikat (oder Quota)
        raise HTTPException(status_code=409, detail="QR code already in history or storage is full")
    return serialize_item(item)


@router.put("/{item_id}")
async def update_history(
    item_id: str,
    body: HistorySaveIn,
    store: HistoryStore = Depends(get_history_store),
    renderer: QRRenderer = Depends(get_renderer),
):
    _require_valid(body.record)
    _require_storage(store)

    if store.get(item_id) is None:
        raise HTTPException(status_code=404, detail="History item not found")

    item = await store.update(item_id, body.record, body.colors, renderer)
    if item is None:
        raise HTTPException(status_code=503, detail="History could not be updated")
    return serialize_item(item)


@router.delete("/{item_id}")
def delete_history_item(item_id: str, store: HistoryStore = Depends(get_history_store)):
    _require_storage(store)
    if not store.delete(item_id):
        raise HTTPException(status_code=404, detail="History item not found")
    return {"deleted": item_id}


@router.delete("")
def clear_history(store: HistoryStore = Depends(get_history_store)):
    _require_storage(store)
    if not store.clear():
        raise HTTPException(status_code=500, detail="History could not be cleared")
    return {"cleared": True}
