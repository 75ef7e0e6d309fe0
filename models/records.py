# =============================================================================
# 📦 models/records.py – QR-Datensätze (Tagged Union über alle Typen)
# -----------------------------------------------------------------------------
# Jeder Datensatz beschreibt, was ein QR-Code kodieren soll.
# JSON-Felder sind camelCase (kompatibel mit exportierten Historien),
# Python-Attribute snake_case.
# =============================================================================

from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator


class QRType(str, Enum):
    URL = "url"
    TEXT = "text"
    EMAIL = "email"
    PHONE = "phone"
    SMS = "sms"
    LOCATION = "location"
    VCARD = "vcard"
    MECARD = "mecard"


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def normalize_blank(cls, data):
        # nur optionale Felder (Default None): leer nach trim -> None.
        # Der Diskriminator `type` bleibt unberührt.
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for name, field in cls.model_fields.items():
            if field.default is not None:
                continue
            for key in (name, field.alias):
                if key and key in data:
                    data[key] = _blank_to_none(data[key])
        return data


# ---------------------------------------------------------------------------
# 🔗 Einfache Typen
# ---------------------------------------------------------------------------
class UrlRecord(CamelModel):
    type: Literal["url"] = "url"
    url: str


class TextRecord(CamelModel):
    type: Literal["text"] = "text"
    text: str


class EmailRecord(CamelModel):
    type: Literal["email"] = "email"
    email: str
    subject: Optional[str] = None
    body: Optional[str] = None


class PhoneRecord(CamelModel):
    type: Literal["phone"] = "phone"
    phone: str


class SmsRecord(CamelModel):
    type: Literal["sms"] = "sms"
    phone: str
    message: Optional[str] = None


class LocationRecord(CamelModel):
    type: Literal["location"] = "location"
    latitude: float
    longitude: float
    address: Optional[str] = None


# ---------------------------------------------------------------------------
# 🪪 vCard
# ---------------------------------------------------------------------------
# Tags bleiben freie Strings: unbekannte Werte landen beim Encoder im Fallback.
PhoneType = Union[Literal["mobile", "home", "work", "fax", "other"], str]
EmailType = Union[Literal["personal", "work", "other"], str]
AddressType = Union[Literal["home", "work", "postal", "other"], str]


class VCardPhone(CamelModel):
    type: PhoneType = "mobile"
    number: str


class VCardEmail(CamelModel):
    type: EmailType = "personal"
    address: str


class VCardAddress(CamelModel):
    type: AddressType = "home"
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class VCardSocialMedia(CamelModel):
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    website: Optional[str] = None


class VCardRecord(CamelModel):
    """Kontaktdaten nach vCard 3.0 (RFC 2426)."""

    type: Literal["vcard"] = "vcard"

    # Person
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    prefix: Optional[str] = None
    suffix: Optional[str] = None
    nickname: Optional[str] = None
    birthday: Optional[str] = None  # YYYY-MM-DD
    photo: Optional[str] = None  # data URL oder reines Base64

    # Kontakt
    phones: List[VCardPhone] = Field(default_factory=list)
    emails: List[VCardEmail] = Field(default_factory=list)

    # Beruf
    organization: Optional[str] = None
    job_title: Optional[str] = None
    department: Optional[str] = None
    role: Optional[str] = None
    logo: Optional[str] = None
    work_website: Optional[str] = None

    addresses: List[VCardAddress] = Field(default_factory=list)

    social_media: Optional[VCardSocialMedia] = None
    notes: Optional[str] = None


# ---------------------------------------------------------------------------
# 🇯🇵 MeCard
# ---------------------------------------------------------------------------
class MeCardRecord(CamelModel):
    type: Literal["mecard"] = "mecard"
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    url: Optional[str] = None
    address: Optional[str] = None
    note: Optional[str] = None


QRRecord = Annotated[
    Union[
        UrlRecord,
        TextRecord,
        EmailRecord,
        PhoneRecord,
        SmsRecord,
        LocationRecord,
        VCardRecord,
        MeCardRecord,
    ],
    Field(discriminator="type"),
]

QR_RECORD_ADAPTER: TypeAdapter = TypeAdapter(QRRecord)


def parse_record(data) -> QRRecord:
    """Parst ein dict (camelCase oder snake_case) in den passenden Datensatz."""
    return QR_RECORD_ADAPTER.validate_python(data)


def dump_record(record) -> dict:
    """Serialisiert einen Datensatz so, wie er gespeichert und exportiert wird."""
    return record.model_dump(mode="json", by_alias=True, exclude_none=True)
