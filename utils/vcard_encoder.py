# =============================================================================
# 🪪 utils/vcard_encoder.py
# vCard 3.0 (RFC 2426) – Kontaktdaten → QR-Payload
# -----------------------------------------------------------------------------
# Zeilen werden mit CRLF verbunden. Strukturelle Trenner (;) in N und ADR
# bleiben roh, nur die einzelnen Komponenten werden escaped.
# =============================================================================

from __future__ import annotations

import re
from typing import Iterable, List, Optional

from models.records import VCardAddress, VCardRecord
from utils.escaping import escape_vcard_value

CRLF = "\r\n"

PHONE_TYPE_MAP = {
    "mobile": "CELL",
    "home": "HOME",
    "work": "WORK",
    "fax": "FAX",
    "other": "VOICE",
}
EMAIL_TYPE_MAP = {
    "personal": "HOME",
    "work": "WORK",
    "other": "INTERNET",
}
ADDRESS_TYPE_MAP = {
    "home": "HOME",
    "work": "WORK",
    "postal": "POSTAL",
    "other": "INTL",
}

SOCIAL_NETWORKS = ("linkedin", "twitter", "facebook", "instagram")

_DATA_URL_PREFIX = re.compile(r"^data:image/[^;]+;base64,")


def map_phone_type(tag: str) -> str:
    return PHONE_TYPE_MAP.get(tag, "VOICE")


def map_email_type(tag: str) -> str:
    return EMAIL_TYPE_MAP.get(tag, "INTERNET")


def map_address_type(tag: str) -> str:
    return ADDRESS_TYPE_MAP.get(tag, "INTL")


def strip_data_url(value: str) -> str:
    """Entfernt das `data:image/*;base64,`-Präfix, falls vorhanden."""
    return _DATA_URL_PREFIX.sub("", value, count=1)


def _structured(parts: Iterable[Optional[str]]) -> str:
    return ";".join(escape_vcard_value(p or "") for p in parts)


def _address_value(address: VCardAddress) -> str:
    # Postfach + erweiterte Adresse bleiben immer leer
    return _structured([
        "",
        "",
        address.street,
        address.city,
        address.state,
        address.postal_code,
        address.country,
    ])


def _has_address_content(address: VCardAddress) -> bool:
    return any((address.street, address.city, address.state, address.postal_code, address.country))


def encode_vcard(record: VCardRecord) -> str:
    """Erzeugt den vCard-3.0-Text für einen Kontakt."""
    lines: List[str] = ["BEGIN:VCARD", "VERSION:3.0"]

    full_name = " ".join(
        part for part in (
            record.prefix,
            record.first_name,
            record.middle_name,
            record.last_name,
            record.suffix,
        ) if part
    )
    lines.append(f"FN:{escape_vcard_value(full_name)}")
    lines.append("N:" + _structured([
        record.last_name,
        record.first_name,
        record.middle_name,
        record.prefix,
        record.suffix,
    ]))

    if record.nickname:
        lines.append(f"NICKNAME:{escape_vcard_value(record.nickname)}")
    if record.birthday:
        lines.append(f"BDAY:{record.birthday.replace('-', '')}")
    if record.photo:
        lines.append(f"PHOTO;ENCODING=b;TYPE=JPEG:{strip_data_url(record.photo)}")

    for phone in record.phones:
        if not phone.number.strip():
            continue
        lines.append(f"TEL;TYPE={map_phone_type(phone.type)}:{escape_vcard_value(phone.number)}")

    for email in record.emails:
        if not email.address.strip():
            continue
        lines.append(f"EMAIL;TYPE={map_email_type(email.type)}:{escape_vcard_value(email.address)}")

    if record.organization:
        lines.append(f"ORG:{escape_vcard_value(record.organization)}")
    if record.job_title:
        lines.append(f"TITLE:{escape_vcard_value(record.job_title)}")
    if record.department:
        lines.append(f"X-DEPARTMENT:{escape_vcard_value(record.department)}")
    if record.role:
        lines.append(f"ROLE:{escape_vcard_value(record.role)}")
    if record.logo:
        lines.append(f"LOGO;ENCODING=b;TYPE=JPEG:{strip_data_url(record.logo)}")
    if record.work_website:
        lines.append(f"URL;TYPE=WORK:{escape_vcard_value(record.work_website)}")

    for address in record.addresses:
        if not _has_address_content(address):
            continue
        lines.append(f"ADR;TYPE={map_address_type(address.type)}:{_address_value(address)}")

    social = record.social_media
    if social:
        for network in SOCIAL_NETWORKS:
            link = getattr(social, network)
            if link:
                lines.append(f"X-SOCIALPROFILE;TYPE={network}:{escape_vcard_value(link)}")
        if social.website:
            lines.append(f"URL:{escape_vcard_value(social.website)}")

    if record.notes:
        lines.append(f"NOTE:{escape_vcard_value(record.notes)}")

    lines.append("END:VCARD")
    return CRLF.join(lines)


def validate_vcard(record: VCardRecord) -> bool:
    """Vor- und Nachname sind Pflicht."""
    return bool(record.first_name and record.first_name.strip()
                and record.last_name and record.last_name.strip())


def vcard_filename(record: VCardRecord) -> str:
    """Download-Name für .vcf-Dateien, z. B. `Doe_John.vcf`."""
    stem = "_".join(p.strip() for p in (record.last_name, record.first_name) if p and p.strip())
    stem = re.sub(r"[^\w.-]+", "_", stem).strip("_") or "contact"
    return f"{stem}.vcf"
