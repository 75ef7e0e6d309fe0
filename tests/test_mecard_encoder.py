import pytest

from models.records import MeCardRecord
from utils.mecard_encoder import decode_mecard, encode_mecard, validate_mecard


def test_name_only():
    assert encode_mecard(MeCardRecord(name="Jane Doe")) == "MECARD:N:Jane Doe;;"


def test_field_order_is_fixed():
    record = MeCardRecord(
        note="Hi",
        address="Main St 1",
        url="https://example.com",
        email="jane@example.com",
        phone="+15551234",
        name="Jane",
    )
    assert encode_mecard(record) == (
        "MECARD:N:Jane;TEL:+15551234;EMAIL:jane@example.com;"
        "URL:https\\://example.com;ADR:Main St 1;NOTE:Hi;;"
    )


def test_reserved_characters_are_escaped():
    record = MeCardRecord(name="Doe, Jane", note='say "hi"; ok')
    assert encode_mecard(record) == 'MECARD:N:Doe\\, Jane;NOTE:say \\"hi\\"\\; ok;;'


def test_blank_optional_fields_are_skipped():
    record = MeCardRecord(name="Jane", phone="   ", email="")
    assert record.phone is None
    assert encode_mecard(record) == "MECARD:N:Jane;;"


def test_encoder_does_not_enforce_name():
    assert encode_mecard(MeCardRecord(name="", phone="123")) == "MECARD:TEL:123;;"


def test_validate_requires_name_and_one_more_field():
    assert not validate_mecard(MeCardRecord(name="Jane"))
    assert not validate_mecard(MeCardRecord(name="  ", phone="1"))
    assert validate_mecard(MeCardRecord(name="Jane", note="x"))


def test_decode_restores_record():
    record = MeCardRecord(
        name="Doe; Jane",
        phone="+1",
        url="https://example.com/a?b=c",
        note="a:b,c",
    )
    assert decode_mecard(encode_mecard(record)) == record


def test_decode_accepts_memo_and_ignores_unknown_keys():
    record = decode_mecard("MECARD:N:Jane;MEMO:hello;BDAY:19900101;;")
    assert record.name == "Jane"
    assert record.note == "hello"


def test_decode_rejects_foreign_payload():
    with pytest.raises(ValueError):
        decode_mecard("BEGIN:VCARD")
