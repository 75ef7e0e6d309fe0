# =============================================================================
# ⏱️ utils/autosave.py
# -----------------------------------------------------------------------------
# Debounced Auto-Save in den Verlauf.
# Pro QR-Typ ein Slot: IDLE → PENDING (Timer läuft) → TRACKING (Eintrag-ID).
#   - jede Änderung bricht den laufenden Timer ab und startet ihn neu
#   - feuert der Timer: Slot mit ID → update(), sonst save() + ID merken
#   - Tab-Wechsel: ID des verlassenen Typs wird vergessen
#   - ein begonnener Schreibvorgang wird nie abgebrochen
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional, Set

from models.history import ColorConfig, HistoryItem
from models.records import QRType
from utils.history_store import HistoryStore
from utils.qr_config import AUTOSAVE_DELAY_SECONDS
from utils.qr_generator import QRRenderer

logger = logging.getLogger(__name__)


class SlotState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    TRACKING = "tracking"


@dataclass
class AutoSaveSlot:
    state: SlotState = SlotState.IDLE
    tracked_id: Optional[str] = None

    def settle(self) -> None:
        self.state = SlotState.TRACKING if self.tracked_id else SlotState.IDLE


class DelayedTask:
    """Führt `callback` nach `delay` Sekunden aus, solange nicht abgebrochen."""

    def __init__(self, delay: float, callback: Callable[[], Awaitable[None]]):
        self.delay = delay
        self._callback = callback
        self._fired = False
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        await asyncio.sleep(self.delay)
        self._fired = True
        await self._callback()

    def cancel(self) -> bool:
        """Bricht nur ab, solange der Timer noch nicht abgelaufen ist."""
        if self._fired or self._task.done():
            return False
        self._task.cancel()
        return True


def _slot_key(qr_type) -> str:
    return QRType(qr_type).value


class AutoSaveCoordinator:
    def __init__(
        self,
        store: HistoryStore,
        renderer: Optional[QRRenderer] = None,
        delay: float = AUTOSAVE_DELAY_SECONDS,
        active_type=QRType.URL,
    ):
        self.store = store
        self.renderer = renderer
        self.delay = delay
        self._active_type = _slot_key(active_type)
        self._slots: Dict[str, AutoSaveSlot] = {t.value: AutoSaveSlot() for t in QRType}
        self._timer: Optional[DelayedTask] = None
        self._pending_type: Optional[str] = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def active_type(self) -> str:
        return self._active_type

    def slot(self, qr_type) -> AutoSaveSlot:
        return self._slots[_slot_key(qr_type)]

    def tracked_id(self, qr_type) -> Optional[str]:
        return self.slot(qr_type).tracked_id

    # ------------------------------------------------------------------
    # 🔁 Ereignisse
    # ------------------------------------------------------------------
    def notify_change(self, record, colors: ColorConfig) -> None:
        """Neue (abgeschlossene) Eingabe: Timer neu starten."""
        self._cancel_timer()

        key = _slot_key(record.type)
        self._pending_type = key
        self._slots[key].state = SlotState.PENDING

        snapshot = (record.model_copy(deep=True), colors.model_copy(deep=True))
        self._timer = DelayedTask(self.delay, lambda: self._fire(*snapshot))

    def switch_type(self, new_type) -> None:
        """Tab-Wechsel: der verlassene Typ beginnt beim nächsten Edit einen neuen Eintrag."""
        leaving = self._active_type
        slot = self._slots[leaving]
        if slot.tracked_id:
            logger.debug(f"Auto-Save: Tracking für '{leaving}' beendet ({slot.tracked_id})")
            slot.tracked_id = None
            if slot.state == SlotState.TRACKING:
                slot.state = SlotState.IDLE
        self._active_type = _slot_key(new_type)

    def load_item(self, item: HistoryItem) -> None:
        """Eintrag aus dem Verlauf übernehmen: Typ aktivieren und wie ein Edit behandeln."""
        self._active_type = _slot_key(item.type)
        self.notify_change(item.data, item.colors)

    # ------------------------------------------------------------------
    # 💾 Timer / Schreiben
    # ------------------------------------------------------------------
    def _cancel_timer(self) -> None:
        if self._timer is not None and self._timer.cancel() and self._pending_type:
            self._slots[self._pending_type].settle()
        self._timer = None
        self._pending_type = None

    async def _fire(self, record, colors: ColorConfig) -> None:
        self._timer = None
        self._pending_type = None
        task = asyncio.get_running_loop().create_task(self._write(record, colors))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _write(self, record, colors: ColorConfig) -> None:
        key = _slot_key(record.type)
        slot = self._slots[key]
        existing_id = slot.tracked_id

        if existing_id:
            item = await self.store.update(existing_id, record, colors, self.renderer)
            if item:
                logger.info(f"✅ Auto-Save: Eintrag für '{key}' aktualisiert ({existing_id})")
        else:
            item = await self.store.save(record, colors, self.renderer)
            if item:
                # Tab könnte inzwischen gewechselt haben; ID gehört trotzdem zum Typ
                slot.tracked_id = item.id
                logger.info(f"✅ Auto-Save: neuer Eintrag für '{key}' ({item.id})")

        if self._pending_type != key:
            slot.settle()

    async def flush(self) -> None:
        """Wartet auf laufende Schreibvorgänge."""
        if self._inflight:
            await asyncio.gather(*list(self._inflight))

    async def close(self) -> None:
        """Unmount: Timer abbrechen (kein Teil-Schreiben), laufende Writes abschließen."""
        self._cancel_timer()
        await self.flush()

    def snapshot(self) -> Dict[str, dict]:
        return {
            key: {"state": slot.state.value, "trackedId": slot.tracked_id}
            for key, slot in self._slots.items()
        }
