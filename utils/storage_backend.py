# =============================================================================
# 💾 utils/storage_backend.py
# -----------------------------------------------------------------------------
# Austauschbare Key-Value-Backends für den Verlaufsspeicher:
#   - InMemoryBackend   → Tests / flüchtige Sessions
#   - SQLAlchemyBackend → dauerhafte Speicherung in der DB (kv_store)
# Dokumente werden immer als Ganzes gelesen und geschrieben.
# =============================================================================

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Protocol

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.kv_entry import KeyValueEntry

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Persistenz nicht verfügbar oder Schreiben fehlgeschlagen."""


class StorageQuotaExceeded(StorageError):
    """Schreiben würde das Speicherlimit des Backends überschreiten."""


class KeyValueBackend(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


# ---------------------------------------------------------------------------
# 🧠 In-Memory
# ---------------------------------------------------------------------------
class InMemoryBackend:
    """
    Dict-basiertes Backend.
    `quota_bytes` simuliert ein volles Speicherlimit (UTF-8-Größe aller Werte),
    `available=False` simuliert einen gesperrten Speicher.
    """

    def __init__(self, quota_bytes: Optional[int] = None, available: bool = True):
        self._data: Dict[str, str] = {}
        self.quota_bytes = quota_bytes
        self.available = available

    def _check_available(self) -> None:
        if not self.available:
            raise StorageError("Storage is not available")

    def get(self, key: str) -> Optional[str]:
        self._check_available()
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._check_available()
        if self.quota_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._data.items() if k != key)
            if used + len(value.encode("utf-8")) > self.quota_bytes:
                raise StorageQuotaExceeded(f"Quota of {self.quota_bytes} bytes exceeded")
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._check_available()
        self._data.pop(key, None)


# ---------------------------------------------------------------------------
# 🗄️ SQLAlchemy
# ---------------------------------------------------------------------------
class SQLAlchemyBackend:
    """Speichert jedes Dokument als eine Zeile in `kv_store`."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        try:
            with self._session_factory() as db:
                entry = db.get(KeyValueEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Read failed for '{key}': {exc}") from exc

    def set(self, key: str, value: str) -> None:
        try:
            with self._session_factory() as db:
                entry = db.get(KeyValueEntry, key)
                if entry is None:
                    db.add(KeyValueEntry(key=key, value=value))
                else:
                    entry.value = value
                db.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"Write failed for '{key}': {exc}") from exc

    def remove(self, key: str) -> None:
        try:
            with self._session_factory() as db:
                entry = db.get(KeyValueEntry, key)
                if entry is not None:
                    db.delete(entry)
                    db.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"Delete failed for '{key}': {exc}") from exc


def ensure_history_table(engine: Engine) -> None:
    """Erstellt die kv_store-Tabelle idempotent."""
    try:
        KeyValueEntry.__table__.create(bind=engine, checkfirst=True)
        logger.info("✅ kv_store-Tabelle geprüft/ergänzt.")
    except SQLAlchemyError as exc:
        logger.warning(f"⚠️ Konnte kv_store-Tabelle nicht automatisch erstellen: {exc}")
