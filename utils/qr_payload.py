# =============================================================================
# 🧾 utils/qr_payload.py
# -----------------------------------------------------------------------------
# Zentrale Payload-Erzeugung für alle QR-Typen:
#   url/text  → Rohtext
#   email     → mailto:…?subject=…&body=…
#   phone     → tel:…
#   sms       → sms:…?body=…
#   location  → geo:lat,lng
#   vcard     → vCard 3.0 (utils/vcard_encoder)
#   mecard    → MECARD:…;; (utils/mecard_encoder)
# Dazu der autoritative Validator vor Rendering/Speichern.
# =============================================================================

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from urllib.parse import quote, urlparse

from models.history import ColorConfig
from models.records import (
    EmailRecord,
    LocationRecord,
    MeCardRecord,
    PhoneRecord,
    SmsRecord,
    TextRecord,
    UrlRecord,
    VCardRecord,
)
from utils.mecard_encoder import encode_mecard
from utils.vcard_encoder import encode_vcard

logger = logging.getLogger(__name__)

# Entspricht encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")
_HIERARCHICAL_SCHEMES = {"http", "https", "ftp", "ws", "wss"}

# Ungefähre Kapazität (alphanumerisch, Version 40) je Fehlerkorrektur-Stufe
QR_CAPACITY = {
    "L": 4296,
    "M": 3391,
    "Q": 2420,
    "H": 1852,
}


class UnsupportedQRType(ValueError):
    """Unbekannter Datensatz-Typ – sollte hinter dem Validator nie auftreten."""


class QRValidationError(ValueError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {"valid": self.valid, "error": self.error} if self.error else {"valid": self.valid}


VALID = ValidationResult(valid=True)


def _invalid(reason: str) -> ValidationResult:
    return ValidationResult(valid=False, error=reason)


# ---------------------------------------------------------------------------
# 🔧 Formatierung
# ---------------------------------------------------------------------------
def encode_uri_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def format_coordinate(value: float) -> str:
    """Zahl wie in JS ausgeben: 10.0 → "10", 37.7749 → "37.7749", 1e-05 → "0.00001"."""
    if float(value).is_integer():
        return str(int(value))
    # kürzeste Darstellung, aber nie in Exponent-Schreibweise (RFC 5870)
    return format(Decimal(repr(float(value))), "f")


def format_email(record: EmailRecord) -> str:
    mailto = f"mailto:{record.email}"
    params = []
    if record.subject:
        params.append(f"subject={encode_uri_component(record.subject)}")
    if record.body:
        params.append(f"body={encode_uri_component(record.body)}")
    if params:
        mailto += "?" + "&".join(params)
    return mailto


def format_sms(record: SmsRecord) -> str:
    sms = f"sms:{record.phone}"
    if record.message:
        # '?body=' statt '&body=' – breiteste Kompatibilität (Android)
        sms += f"?body={encode_uri_component(record.message)}"
    return sms


def format_location(record: LocationRecord) -> str:
    # address ist nur informativ und landet nicht im Payload
    return f"geo:{format_coordinate(record.latitude)},{format_coordinate(record.longitude)}"


def format_payload(record) -> str:
    """Erzeugt den QR-Payload-String für einen Datensatz."""
    if isinstance(record, UrlRecord):
        return record.url
    if isinstance(record, TextRecord):
        return record.text
    if isinstance(record, EmailRecord):
        return format_email(record)
    if isinstance(record, PhoneRecord):
        return f"tel:{record.phone}"
    if isinstance(record, SmsRecord):
        return format_sms(record)
    if isinstance(record, LocationRecord):
        return format_location(record)
    if isinstance(record, VCardRecord):
        return encode_vcard(record)
    if isinstance(record, MeCardRecord):
        return encode_mecard(record)
    raise UnsupportedQRType(f"Unsupported QR type: {getattr(record, 'type', type(record).__name__)}")


# ---------------------------------------------------------------------------
# ✅ Validierung
# ---------------------------------------------------------------------------
def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.fullmatch(value))


def is_absolute_url(value: str) -> bool:
    candidate = value.strip()
    if not _SCHEME_RE.match(candidate):
        return False
    try:
        parsed = urlparse(candidate)
    except ValueError:
        return False
    if parsed.scheme.lower() in _HIERARCHICAL_SCHEMES:
        return bool(parsed.netloc) and not any(ch.isspace() for ch in parsed.netloc)
    return bool(parsed.netloc or parsed.path)


def _validate_location(record: LocationRecord) -> ValidationResult:
    if math.isnan(record.latitude):
        return _invalid("Latitude must be a number")
    if math.isnan(record.longitude):
        return _invalid("Longitude must be a number")
    if record.latitude < -90 or record.latitude > 90:
        return _invalid("Latitude must be between -90 and 90")
    if record.longitude < -180 or record.longitude > 180:
        return _invalid("Longitude must be between -180 and 180")
    return VALID


def validate_record(record) -> ValidationResult:
    """
    Autoritative Prüfung vor Payload-Erzeugung und Rendering.
    Gibt {valid, error} zurück, wirft nie.
    """
    if isinstance(record, UrlRecord):
        if _blank(record.url):
            return _invalid("URL is required")
        if not is_absolute_url(record.url):
            return _invalid("Invalid URL format")
        return VALID

    if isinstance(record, TextRecord):
        return _invalid("Text is required") if _blank(record.text) else VALID

    if isinstance(record, EmailRecord):
        if _blank(record.email) or not is_valid_email(record.email):
            return _invalid("Valid email address is required")
        return VALID

    if isinstance(record, (PhoneRecord, SmsRecord)):
        return _invalid("Phone number is required") if _blank(record.phone) else VALID

    if isinstance(record, LocationRecord):
        return _validate_location(record)

    if isinstance(record, VCardRecord):
        if _blank(record.first_name):
            return _invalid("First name is required for VCard")
        if _blank(record.last_name):
            return _invalid("Last name is required for VCard")
        return VALID

    if isinstance(record, MeCardRecord):
        return _invalid("Name is required for MeCard") if _blank(record.name) else VALID

    return _invalid(f"Unsupported QR type: {getattr(record, 'type', type(record).__name__)}")


def build_payload(record) -> str:
    """Validieren + formatieren; wirft QRValidationError bei ungültigen Daten."""
    result = validate_record(record)
    if not result.valid:
        logger.info(f"⚠️ Payload abgelehnt ({getattr(record, 'type', '?')}): {result.error}")
        raise QRValidationError(result.error or "Invalid QR data")
    return format_payload(record)


# ---------------------------------------------------------------------------
# 📏 Kapazität & Fehlerkorrektur
# ---------------------------------------------------------------------------
def estimate_qr_capacity(error_correction_level: str = "M") -> int:
    return QR_CAPACITY[error_correction_level]


def error_correction_for(colors: Optional[ColorConfig]) -> str:
    """Mit Logo hohe Fehlerkorrektur (H), sonst M."""
    return "H" if colors is not None and colors.logo else "M"
