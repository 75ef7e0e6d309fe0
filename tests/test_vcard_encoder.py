from models.records import VCardRecord
from utils.vcard_encoder import (
    encode_vcard,
    map_address_type,
    map_email_type,
    map_phone_type,
    strip_data_url,
    validate_vcard,
    vcard_filename,
)


def _lines(record):
    return encode_vcard(record).split("\r\n")


def test_minimal_vcard():
    record = VCardRecord(first_name="John", last_name="Doe")
    assert encode_vcard(record) == "\r\n".join([
        "BEGIN:VCARD",
        "VERSION:3.0",
        "FN:John Doe",
        "N:Doe;John;;;",
        "END:VCARD",
    ])


def test_full_name_order_and_structured_name():
    record = VCardRecord(
        prefix="Dr.",
        first_name="Jane",
        middle_name="Q",
        last_name="Public",
        suffix="PhD",
    )
    lines = _lines(record)
    assert "FN:Dr. Jane Q Public PhD" in lines
    assert "N:Public;Jane;Q;Dr.;PhD" in lines


def test_components_are_escaped_but_separators_stay_raw():
    record = VCardRecord.model_validate({
        "firstName": "Jane",
        "lastName": "Doe; Smith",
        "addresses": [{"type": "work", "street": "1 Main St, Suite 2", "city": "Springfield"}],
    })
    lines = _lines(record)
    assert "N:Doe\\; Smith;Jane;;;" in lines
    assert "ADR;TYPE=WORK:;;1 Main St\\, Suite 2;Springfield;;;" in lines


def test_camel_case_input_and_type_mapping():
    record = VCardRecord.model_validate({
        "firstName": "John",
        "lastName": "Doe",
        "phones": [
            {"type": "mobile", "number": "+1 555"},
            {"type": "fax", "number": "+1 556"},
            {"type": "pager", "number": "+1 557"},
        ],
        "emails": [
            {"type": "work", "address": "john@work.example"},
            {"type": "personal", "address": "john@home.example"},
        ],
        "jobTitle": "Engineer",
        "workWebsite": "https://acme.example",
    })
    lines = _lines(record)
    assert "TEL;TYPE=CELL:+1 555" in lines
    assert "TEL;TYPE=FAX:+1 556" in lines
    assert "TEL;TYPE=VOICE:+1 557" in lines
    assert "EMAIL;TYPE=WORK:john@work.example" in lines
    assert "EMAIL;TYPE=HOME:john@home.example" in lines
    assert "TITLE:Engineer" in lines
    assert "URL;TYPE=WORK:https://acme.example" in lines


def test_blank_phone_email_and_empty_address_are_skipped():
    record = VCardRecord.model_validate({
        "firstName": "John",
        "lastName": "Doe",
        "phones": [{"type": "mobile", "number": "  "}],
        "emails": [{"type": "work", "address": ""}],
        "addresses": [{"type": "home", "street": "", "city": " "}],
    })
    assert not any(line.startswith(("TEL", "EMAIL", "ADR")) for line in _lines(record))


def test_birthday_photo_social_and_notes():
    record = VCardRecord.model_validate({
        "firstName": "John",
        "lastName": "Doe",
        "birthday": "1990-05-17",
        "photo": "data:image/jpeg;base64,QUJD",
        "socialMedia": {"linkedin": "https://linkedin.com/in/jd", "website": "https://jd.example"},
        "notes": "line one\nline two",
    })
    lines = _lines(record)
    assert "BDAY:19900517" in lines
    assert "PHOTO;ENCODING=b;TYPE=JPEG:QUJD" in lines
    assert "X-SOCIALPROFILE;TYPE=linkedin:https://linkedin.com/in/jd" in lines
    assert "URL:https://jd.example" in lines
    assert "NOTE:line one\\nline two" in lines
    assert lines[-1] == "END:VCARD"


def test_type_map_fallbacks():
    assert map_phone_type("work") == "WORK"
    assert map_phone_type("unknown") == "VOICE"
    assert map_email_type("unknown") == "INTERNET"
    assert map_address_type("postal") == "POSTAL"
    assert map_address_type("unknown") == "INTL"


def test_strip_data_url():
    assert strip_data_url("data:image/png;base64,AAAA") == "AAAA"
    assert strip_data_url("AAAA") == "AAAA"


def test_validate_and_filename():
    assert validate_vcard(VCardRecord(first_name="John", last_name="Doe"))
    assert not validate_vcard(VCardRecord(first_name=" ", last_name="Doe"))
    assert vcard_filename(VCardRecord(first_name="John", last_name="van Doe")) == "van_Doe_John.vcf"
