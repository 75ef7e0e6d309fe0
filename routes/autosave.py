# routes/autosave.py
# =============================================================================
# ⏱️ Auto-Save: Editor meldet Änderungen und Tab-Wechsel
# =============================================================================

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from models.history import ColorConfig
from models.records import QRRecord, QRType
from routes.utils import get_autosave, get_history_store, serialize_item
from utils.autosave import AutoSaveCoordinator
from utils.history_store import HistoryStore
from utils.qr_payload import validate_record

router = APIRouter(prefix="/api/autosave", tags=["Auto-Save"])


class ChangeIn(BaseModel):
    record: QRRecord
    colors: ColorConfig = Field(default_factory=ColorConfig)


class SwitchIn(BaseModel):
    type: QRType


def _state(coordinator: AutoSaveCoordinator) -> dict:
    return {"activeType": coordinator.active_type, "slots": coordinator.snapshot()}


@router.post("/change", status_code=202)
async def change(body: ChangeIn, coordinator: AutoSaveCoordinator = Depends(get_autosave)):
    """Nur gültige Eingaben starten den Timer (braucht die laufende Event-Loop)."""
    result = validate_record(body.record)
    if not result.valid:
        raise HTTPException(status_code=422, detail=result.error)
    coordinator.notify_change(body.record, body.colors)
    return _state(coordinator)


@router.post("/switch")
def switch(body: SwitchIn, coordinator: AutoSaveCoordinator = Depends(get_autosave)):
    coordinator.switch_type(body.type)
    return _state(coordinator)


@router.get("/slots")
def slots(coordinator: AutoSaveCoordinator = Depends(get_autosave)):
    return _state(coordinator)


@router.post("/load/{item_id}", status_code=202)
async def load(
    item_id: str,
    coordinator: AutoSaveCoordinator = Depends(get_autosave),
    store: HistoryStore = Depends(get_history_store),
):
    """Verlaufseintrag in den Editor übernehmen: Typ aktivieren, Daten wie ein Edit einplanen."""
    item = store.get(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="History item not found")
    coordinator.load_item(item)
    return {**_state(coordinator), "item": serialize_item(item)}
