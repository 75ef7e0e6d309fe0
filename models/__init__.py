# =============================================================================
# 📦 models/__init__.py
# -----------------------------------------------------------------------------
# Datensätze (pydantic) + Speicher-Slot (SQLAlchemy)
# =============================================================================

from .records import (
    QRType,
    QRRecord,
    UrlRecord,
    TextRecord,
    EmailRecord,
    PhoneRecord,
    SmsRecord,
    LocationRecord,
    VCardRecord,
    VCardPhone,
    VCardEmail,
    VCardAddress,
    VCardSocialMedia,
    MeCardRecord,
    parse_record,
    dump_record,
)
from .history import (
    STORAGE_VERSION,
    ColorConfig,
    GradientType,
    BackgroundImageConfig,
    LogoConfig,
    HistoryItem,
    StorageSchema,
    empty_schema,
)
from .kv_entry import KeyValueEntry

__all__ = [
    "QRType",
    "QRRecord",
    "UrlRecord",
    "TextRecord",
    "EmailRecord",
    "PhoneRecord",
    "SmsRecord",
    "LocationRecord",
    "VCardRecord",
    "VCardPhone",
    "VCardEmail",
    "VCardAddress",
    "VCardSocialMedia",
    "MeCardRecord",
    "parse_record",
    "dump_record",
    "STORAGE_VERSION",
    "ColorConfig",
    "GradientType",
    "BackgroundImageConfig",
    "LogoConfig",
    "HistoryItem",
    "StorageSchema",
    "empty_schema",
    "KeyValueEntry",
]
