# =============================================================================
# 🇯🇵 utils/mecard_encoder.py
# -----------------------------------------------------------------------------
# MeCard ist die kompakte japanische Alternative zu vCard:
#   MECARD:N:Name;TEL:Phone;EMAIL:Email;URL:URL;ADR:Address;NOTE:Note;;
# Das abschließende ";;" gehört immer zum Format.
# =============================================================================

from __future__ import annotations

import logging
from typing import Dict, List

from models.records import MeCardRecord
from utils.escaping import escape_mecard_value, unescape_mecard_value

logger = logging.getLogger(__name__)

MECARD_PREFIX = "MECARD:"

# Feste Reihenfolge: (Schlüssel, Attribut)
MECARD_FIELDS = (
    ("N", "name"),
    ("TEL", "phone"),
    ("EMAIL", "email"),
    ("URL", "url"),
    ("ADR", "address"),
    ("NOTE", "note"),
)

_KEY_TO_FIELD: Dict[str, str] = {key: attr for key, attr in MECARD_FIELDS}
_KEY_TO_FIELD["MEMO"] = "note"


def encode_mecard(record: MeCardRecord) -> str:
    """
    Kodiert einen MeCard-Datensatz.
    Pflichtfelder werden hier NICHT erzwungen – das macht validate_mecard()
    bzw. der zentrale Validator vor der Payload-Erzeugung.
    """
    fields: List[str] = []
    for key, attr in MECARD_FIELDS:
        value = getattr(record, attr)
        if value:
            fields.append(f"{key}:{escape_mecard_value(value)}")
    return f"{MECARD_PREFIX}{';'.join(fields)};;"


def validate_mecard(record: MeCardRecord) -> bool:
    """Name Pflicht + mindestens ein weiteres Feld."""
    if not record.name or not record.name.strip():
        return False
    return any((record.phone, record.email, record.url, record.address, record.note))


def _split_unescaped(text: str, sep: str, maxsplit: int = -1) -> List[str]:
    parts: List[str] = []
    current: List[str] = []
    escaped = False
    for ch in text:
        if escaped:
            current.append(ch)
            escaped = False
        elif ch == "\\":
            current.append(ch)
            escaped = True
        elif ch == sep and maxsplit != 0:
            parts.append("".join(current))
            current = []
            maxsplit -= 1
        else:
            current.append(ch)
    parts.append("".join(current))
    return parts


def decode_mecard(text: str) -> MeCardRecord:
    """Liest einen MECARD-String zurück in einen Datensatz."""
    if not text.startswith(MECARD_PREFIX):
        raise ValueError("Kein MeCard-Payload (Präfix 'MECARD:' fehlt)")

    values: Dict[str, str] = {}
    for token in _split_unescaped(text[len(MECARD_PREFIX):], ";"):
        if not token:
            continue
        parts = _split_unescaped(token, ":", maxsplit=1)
        if len(parts) != 2:
            logger.debug(f"MeCard-Token ohne Schlüssel ignoriert: {token!r}")
            continue
        key, raw = parts
        attr = _KEY_TO_FIELD.get(key.upper())
        if attr is None:
            logger.debug(f"MeCard-Feld ignoriert: {key}")
            continue
        values.setdefault(attr, unescape_mecard_value(raw))

    return MeCardRecord(name=values.pop("name", ""), **values)
