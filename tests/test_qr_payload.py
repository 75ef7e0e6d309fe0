import math

import pytest

from models.history import ColorConfig, LogoConfig
from models.records import (
    EmailRecord,
    LocationRecord,
    MeCardRecord,
    PhoneRecord,
    SmsRecord,
    TextRecord,
    UrlRecord,
    VCardRecord,
    parse_record,
)
from utils.qr_payload import (
    QRValidationError,
    UnsupportedQRType,
    build_payload,
    encode_uri_component,
    error_correction_for,
    estimate_qr_capacity,
    format_payload,
    validate_record,
)


# ---------------------------------------------------------------------------
# 🔧 Formatierung
# ---------------------------------------------------------------------------
def test_url_and_text_pass_through():
    assert format_payload(UrlRecord(url="https://example.com/a?b=1")) == "https://example.com/a?b=1"
    assert format_payload(TextRecord(text="Hallo Welt")) == "Hallo Welt"


def test_email_with_subject_and_body():
    record = EmailRecord(email="a@b.co", subject="Hello World & more", body="Hi!")
    assert format_payload(record) == "mailto:a@b.co?subject=Hello%20World%20%26%20more&body=Hi!"


def test_email_without_params():
    assert format_payload(EmailRecord(email="a@b.co", subject="  ")) == "mailto:a@b.co"


def test_phone_and_sms():
    assert format_payload(PhoneRecord(phone="+49 30 123")) == "tel:+49 30 123"
    assert format_payload(SmsRecord(phone="+1555", message="See you at 5?")) == "sms:+1555?body=See%20you%20at%205%3F"
    assert format_payload(SmsRecord(phone="+1555")) == "sms:+1555"


def test_location_numbers_print_like_js():
    assert format_payload(LocationRecord(latitude=37.7749, longitude=-122.4194)) == "geo:37.7749,-122.4194"
    assert format_payload(LocationRecord(latitude=10.0, longitude=20, address="ignored")) == "geo:10,20"
    assert format_payload(LocationRecord(latitude=0.00001, longitude=-0.00005)) == "geo:0.00001,-0.00005"
    assert format_payload(LocationRecord(latitude=-0.0001234, longitude=1e-7)) == "geo:-0.0001234,0.0000001"


def test_encode_uri_component_keeps_unreserved_marks():
    assert encode_uri_component("a-b_c.d!e~f*g'h(i)j k/ä") == "a-b_c.d!e~f*g'h(i)j%20k%2F%C3%A4"


def test_vcard_and_mecard_dispatch():
    assert format_payload(VCardRecord(first_name="J", last_name="D")).startswith("BEGIN:VCARD\r\n")
    assert format_payload(MeCardRecord(name="J")) == "MECARD:N:J;;"


def test_unknown_record_raises():
    with pytest.raises(UnsupportedQRType):
        format_payload(object())


# ---------------------------------------------------------------------------
# ✅ Validierung
# ---------------------------------------------------------------------------
@pytest.mark.parametrize(
    "record, error",
    [
        (UrlRecord(url=""), "URL is required"),
        (UrlRecord(url="example.com"), "Invalid URL format"),
        (UrlRecord(url="https://"), "Invalid URL format"),
        (TextRecord(text="   "), "Text is required"),
        (EmailRecord(email="not-an-email"), "Valid email address is required"),
        (EmailRecord(email="a@b.com\n"), "Valid email address is required"),
        (EmailRecord(email="a b@c.de"), "Valid email address is required"),
        (PhoneRecord(phone=""), "Phone number is required"),
        (SmsRecord(phone=" "), "Phone number is required"),
        (LocationRecord(latitude=90.5, longitude=0), "Latitude must be between -90 and 90"),
        (LocationRecord(latitude=0, longitude=-180.01), "Longitude must be between -180 and 180"),
        (LocationRecord(latitude=math.nan, longitude=0), "Latitude must be a number"),
        (VCardRecord(first_name="", last_name="Doe"), "First name is required for VCard"),
        (VCardRecord(first_name="John", last_name=" "), "Last name is required for VCard"),
        (MeCardRecord(name=""), "Name is required for MeCard"),
    ],
)
def test_invalid_records(record, error):
    result = validate_record(record)
    assert not result.valid
    assert result.error == error


@pytest.mark.parametrize(
    "record",
    [
        UrlRecord(url="https://example.com"),
        UrlRecord(url="mailto:someone@example.com"),
        EmailRecord(email="a@b.co"),
        LocationRecord(latitude=90, longitude=-180),
        LocationRecord(latitude=-90, longitude=180),
        MeCardRecord(name="Jane"),
    ],
)
def test_valid_records(record):
    assert validate_record(record).to_dict() == {"valid": True}


def test_build_payload_raises_on_invalid():
    with pytest.raises(QRValidationError) as exc:
        build_payload(TextRecord(text=""))
    assert exc.value.reason == "Text is required"


def test_build_payload_formats_valid_record():
    assert build_payload(parse_record({"type": "phone", "phone": "+1"})) == "tel:+1"


# ---------------------------------------------------------------------------
# 📏 Kapazität
# ---------------------------------------------------------------------------
def test_logo_raises_error_correction():
    assert error_correction_for(None) == "M"
    assert error_correction_for(ColorConfig()) == "M"
    with_logo = ColorConfig(logo=LogoConfig(image="data:image/png;base64,AAAA"))
    assert error_correction_for(with_logo) == "H"
    assert estimate_qr_capacity("H") < estimate_qr_capacity("M")
