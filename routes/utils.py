# routes/utils.py
# =============================================================================
# 🔧 Gemeinsame Abhängigkeiten & Serialisierung für alle Router
# =============================================================================

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict

from fastapi import Request

from database import SessionLocal
from models.history import HistoryItem
from utils.autosave import AutoSaveCoordinator
from utils.history_store import HistoryStore
from utils.qr_generator import PillowQRRenderer, QRRenderer
from utils.storage_backend import SQLAlchemyBackend

# --------------------------------------------------------------------------- #
# 🔌 Abhängigkeiten (in Tests per app.dependency_overrides ersetzbar)
# --------------------------------------------------------------------------- #

@lru_cache(maxsize=1)
def get_renderer() -> QRRenderer:
    return PillowQRRenderer()


@lru_cache(maxsize=1)
def get_history_store() -> HistoryStore:
    return HistoryStore(SQLAlchemyBackend(SessionLocal), get_renderer())


def get_autosave(request: Request) -> AutoSaveCoordinator:
    """Ein Koordinator pro App (Single-User-Betrieb)."""
    coordinator = getattr(request.app.state, "autosave", None)
    if coordinator is None:
        coordinator = AutoSaveCoordinator(get_history_store(), get_renderer())
        request.app.state.autosave = coordinator
    return coordinator


# --------------------------------------------------------------------------- #
# 🧾 Serialisierung
# --------------------------------------------------------------------------- #

def serialize_item(item: HistoryItem) -> Dict[str, Any]:
    return item.model_dump(mode="json", by_alias=True, exclude_none=True)
