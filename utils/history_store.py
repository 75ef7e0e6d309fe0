# =============================================================================
# 🗂️ utils/history_store.py
# -----------------------------------------------------------------------------
# Lokaler Verlauf generierter QR-Codes
# - ein versioniertes JSON-Dokument pro Speicher-Slot (lesen/ändern/schreiben
#   immer als Ganzes)
# - max. 50 Einträge, max. 5 MiB serialisiert (älteste fliegen zuerst)
# - Duplikat-Erkennung über Typ + identische Daten
# - Export/Import als JSON mit Merge
# Persistenzfehler werden an den öffentlichen Methoden abgefangen:
# Lesepfade liefern leere Defaults, Schreibpfade None/False.
# =============================================================================

from __future__ import annotations

import json
import logging
import time
import uuid
from enum import Enum
from typing import Callable, List, Optional

from models.history import (
    STORAGE_VERSION,
    ColorConfig,
    HistoryItem,
    StorageSchema,
    empty_schema,
)
from models.records import QRType, dump_record
from utils.qr_config import (
    HISTORY_MAX_ITEMS,
    HISTORY_MAX_STORAGE_SIZE,
    HISTORY_STORAGE_KEY,
    THUMBNAIL_SIZE,
)
from utils.qr_generator import QRRenderer
from utils.qr_payload import format_payload
from utils.storage_backend import KeyValueBackend, StorageError

logger = logging.getLogger(__name__)

STORAGE_KEY = HISTORY_STORAGE_KEY
MAX_ITEMS = HISTORY_MAX_ITEMS
MAX_STORAGE_SIZE = HISTORY_MAX_STORAGE_SIZE

_CHECK_KEY = "__storage_test__"


class SortOrder(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    TYPE = "type"


def now_ms() -> int:
    return int(time.time() * 1000)


def generate_history_id(timestamp: int) -> str:
    return f"{timestamp}_{uuid.uuid4().hex[:7]}"


def _type_value(qr_type) -> str:
    return qr_type.value if isinstance(qr_type, QRType) else str(qr_type)


class HistoryStore:
    """Versionierter, größenbegrenzter Verlauf über einem Key-Value-Backend."""

    def __init__(
        self,
        backend: KeyValueBackend,
        renderer: Optional[QRRenderer] = None,
        *,
        storage_key: str = STORAGE_KEY,
        max_items: int = MAX_ITEMS,
        max_storage_size: int = MAX_STORAGE_SIZE,
        thumbnail_size: int = THUMBNAIL_SIZE,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[int], str] = generate_history_id,
    ):
        self.backend = backend
        self.renderer = renderer
        self.storage_key = storage_key
        self.max_items = max_items
        self.max_storage_size = max_storage_size
        self.thumbnail_size = thumbnail_size
        self._clock = clock
        self._id_factory = id_factory

    # ------------------------------------------------------------------
    # 🔌 Speicherzugriff
    # ------------------------------------------------------------------
    def is_available(self) -> bool:
        """Schreibt und löscht einen Test-Schlüssel."""
        try:
            self.backend.set(_CHECK_KEY, _CHECK_KEY)
            self.backend.remove(_CHECK_KEY)
            return True
        except StorageError:
            return False

    def load_schema(self) -> StorageSchema:
        """Lädt das Dokument; bei Fehlern oder fremder Version → leeres Schema."""
        try:
            if not self.is_available():
                return empty_schema()

            raw = self.backend.get(self.storage_key)
            if not raw:
                return empty_schema()

            doc = json.loads(raw)
            if not isinstance(doc, dict):
                raise ValueError("History document is not an object")

            if doc.get("version") != STORAGE_VERSION:
                return self._migrate(doc)

            return StorageSchema.model_validate(doc)

        except (StorageError, ValueError) as exc:
            logger.error(f"❌ Verlauf konnte nicht geladen werden: {exc}")
            return empty_schema()

    def _write_schema(self, schema: StorageSchema) -> None:
        """Schreibt das komplette Dokument. Fehler werden an den Aufrufer gereicht."""
        if not self.is_available():
            raise StorageError("Local storage is not available")
        try:
            self.backend.set(self.storage_key, schema.to_json())
        except StorageError as exc:
            logger.error(f"❌ Verlauf konnte nicht gespeichert werden: {exc}")
            raise

    def _migrate(self, old: dict) -> StorageSchema:
        # Alte Versionen werden verworfen, nicht feldweise übertragen
        logger.warning(
            f"⚠️ Verlauf-Schema Version {old.get('version')!r} → {STORAGE_VERSION}: alte Einträge verworfen"
        )
        return empty_schema()

    def _enforce_size_limit(self, schema: StorageSchema) -> None:
        size = schema.size_bytes()
        while size > self.max_storage_size and len(schema.items) > 1:
            dropped = schema.items.pop()
            logger.info(f"🗑️ Speicherlimit erreicht, ältester Eintrag entfernt ({dropped.id})")
            size = schema.size_bytes()

    async def _thumbnail(self, record, colors: ColorConfig, renderer: Optional[QRRenderer]) -> str:
        renderer = renderer or self.renderer
        if renderer is None:
            return ""
        try:
            return await renderer.render_thumbnail(format_payload(record), colors, self.thumbnail_size)
        except Exception as exc:
            logger.warning(f"⚠️ Thumbnail-Erzeugung fehlgeschlagen: {exc}")
            return ""

    # ------------------------------------------------------------------
    # ✍️ Schreiben
    # ------------------------------------------------------------------
    async def save(self, record, colors: ColorConfig, renderer: Optional[QRRenderer] = None) -> Optional[HistoryItem]:
        """
        Legt einen neuen Eintrag vorne an.
        Gibt None zurück bei Duplikat oder Speicherfehler.
        """
        try:
            schema = self.load_schema()

            snapshot = dump_record(record)
            if any(item.type == record.type and dump_record(item.data) == snapshot for item in schema.items):
                logger.info(f"Duplikat ({record.type}) – nicht im Verlauf gespeichert")
                return None

            thumbnail = await self._thumbnail(record, colors, renderer)

            timestamp = self._clock()
            item = HistoryItem(
                id=self._id_factory(timestamp),
                timestamp=timestamp,
                type=record.type,
                data=record.model_copy(deep=True),
                colors=colors.model_copy(deep=True),
                thumbnail=thumbnail,
            )

            schema.items.insert(0, item)
            if len(schema.items) > self.max_items:
                schema.items = schema.items[: self.max_items]

            self._enforce_size_limit(schema)
            self._write_schema(schema)

            logger.info(f"✅ Verlaufseintrag gespeichert ({item.type}, id={item.id})")
            return item

        except (StorageError, ValueError) as exc:
            logger.error(f"❌ Speichern im Verlauf fehlgeschlagen: {exc}")
            return None

    async def update(
        self,
        item_id: str,
        record,
        colors: ColorConfig,
        renderer: Optional[QRRenderer] = None,
    ) -> Optional[HistoryItem]:
        """Ersetzt Daten, Farben, Thumbnail und Zeitstempel; Position und ID bleiben."""
        try:
            schema = self.load_schema()
            index = next((i for i, item in enumerate(schema.items) if item.id == item_id), None)
            if index is None:
                logger.warning(f"⚠️ Verlaufseintrag {item_id} nicht gefunden")
                return None

            thumbnail = await self._thumbnail(record, colors, renderer)

            updated = HistoryItem(
                id=item_id,
                timestamp=self._clock(),
                type=record.type,
                data=record.model_copy(deep=True),
                colors=colors.model_copy(deep=True),
                thumbnail=thumbnail,
            )
            schema.items[index] = updated
            self._write_schema(schema)

            logger.info(f"✏️ Verlaufseintrag aktualisiert ({item_id})")
            return updated

        except (StorageError, ValueError) as exc:
            logger.error(f"❌ Aktualisieren im Verlauf fehlgeschlagen: {exc}")
            return None

    def delete(self, item_id: str) -> bool:
        try:
            schema = self.load_schema()
            remaining = [item for item in schema.items if item.id != item_id]
            if len(remaining) == len(schema.items):
                return False
            schema.items = remaining
            self._write_schema(schema)
            logger.info(f"🗑️ Verlaufseintrag gelöscht ({item_id})")
            return True
        except StorageError as exc:
            logger.error(f"❌ Löschen fehlgeschlagen: {exc}")
            return False

    def clear(self) -> bool:
        try:
            self._write_schema(empty_schema())
            logger.info("🗑️ Verlauf geleert")
            return True
        except StorageError as exc:
            logger.error(f"❌ Verlauf konnte nicht geleert werden: {exc}")
            return False

    # ------------------------------------------------------------------
    # 🔍 Lesen
    # ------------------------------------------------------------------
    def list_items(self) -> List[HistoryItem]:
        return self.load_schema().items

    def get(self, item_id: str) -> Optional[HistoryItem]:
        return next((item for item in self.load_schema().items if item.id == item_id), None)

    def filter_by_type(self, qr_type) -> List[HistoryItem]:
        wanted = _type_value(qr_type)
        return [item for item in self.load_schema().items if item.type == wanted]

    def sort(self, criterion) -> List[HistoryItem]:
        items = list(self.load_schema().items)
        try:
            order = SortOrder(criterion)
        except ValueError:
            return items

        if order == SortOrder.NEWEST:
            return sorted(items, key=lambda item: item.timestamp, reverse=True)
        if order == SortOrder.OLDEST:
            return sorted(items, key=lambda item: item.timestamp)
        return sorted(items, key=lambda item: item.type)

    def size_bytes(self) -> int:
        return self.load_schema().size_bytes()

    # ------------------------------------------------------------------
    # 📤 Export / 📥 Import
    # ------------------------------------------------------------------
    def export_json(self) -> str:
        return self.load_schema().to_json(indent=2)

    def import_json(self, text: str) -> bool:
        """
        Merge-Import: alle importierten Einträge bleiben, vorhandene Einträge
        mit neuer ID kommen dazu. Danach neueste zuerst, gekappt auf max_items.
        Ungültige Daten → nichts wird verändert.
        """
        try:
            doc = json.loads(text)
            if not isinstance(doc, dict) or not doc.get("version") or not isinstance(doc.get("items"), list):
                raise ValueError("Invalid history data format")

            imported = StorageSchema.model_validate({"version": STORAGE_VERSION, "items": doc["items"]})
            existing = self.load_schema()

            imported_ids = {item.id for item in imported.items}
            merged = list(imported.items)
            merged.extend(item for item in existing.items if item.id not in imported_ids)
            merged.sort(key=lambda item: item.timestamp, reverse=True)

            schema = StorageSchema(version=STORAGE_VERSION, items=merged[: self.max_items])
            self._enforce_size_limit(schema)
            self._write_schema(schema)

            logger.info(f"📥 Verlauf importiert ({len(imported.items)} Einträge, gesamt {len(schema.items)})")
            return True

        except (StorageError, ValueError) as exc:
            logger.warning(f"⚠️ Import des Verlaufs fehlgeschlagen: {exc}")
            return False
