# =============================================================================
# 📦 models/kv_entry.py
# -----------------------------------------------------------------------------
# Key-Value-Slot für persistente Dokumente (z. B. das Verlaufs-Schema).
# Ein Schlüssel = ein komplettes JSON-Dokument, immer als Ganzes geschrieben.
# =============================================================================

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from database import Base


def utc_now():
    """Gibt aktuelle UTC-Zeit (timezone-aware) zurück."""
    return datetime.now(timezone.utc)


class KeyValueEntry(Base):
    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )
