from __future__ import annotations

from decimal import Decimal

import pytest

from dynamic_qris.crc import crc16_hex
from dynamic_qris.models import REQUIRED_FIELDS, MerchantRecord, validate_merchant
from dynamic_qris.qris_codec import append_crc, build_fields, format_amount, record_from_fields, to_amount
from dynamic_qris.services.errors import ServiceError
from dynamic_qris.tlv import build_tlv, parse_tlv_map

MAI = "0014COM.GO-JEK.WWW" "0118936009143805979959" "0210G805979959" "0303UMI"
SWITCHING = "0014ID.CO.QRIS.WWW" "0215ID1024358806544" "0303UMI"


def test_from_mapping_normalises_loose_input(merchant_data: dict[str, str]) -> None:
    record = MerchantRecord.from_mapping({**merchant_data, "postal_code": None, "mcc": "", "unknown": "x", "amount": 5})
    assert record.postal_code == ""
    assert record.mcc == "0000"
    assert record.amount is None
    assert record.is_dynamic is False
    assert record.merchant_name == "Kodingin Digital Nusantara"


def test_validate_merchant_names_first_missing_field(merchant_data: dict[str, str]) -> None:
    validate_merchant(MerchantRecord.from_mapping(merchant_data))

    for name in REQUIRED_FIELDS:
        record = MerchantRecord.from_mapping({**merchant_data, name: ""})
        with pytest.raises(ServiceError) as exc_info:
            validate_merchant(record)
        assert exc_info.value.code == "ERR_INVALID_ARGUMENT"
        assert exc_info.value.field == name
        assert name in exc_info.value.message


def test_optional_fields_are_not_required(merchant_data: dict[str, str]) -> None:
    trimmed = {k: v for k, v in merchant_data.items() if k not in {"terminal_id", "postal_code", "mcc"}}
    validate_merchant(MerchantRecord.from_mapping(trimmed))


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        (50000, "50000.00"),
        (Decimal("12.345"), "12.35"),
        ("0.5", "0.50"),
        (10.1, "10.10"),
        ("1E3", "1000.00"),
    ],
)
def test_format_amount_uses_two_fraction_digits(amount, expected: str) -> None:
    assert format_amount(to_amount(amount)) == expected


@pytest.mark.parametrize("amount", ["abc", "NaN", float("inf")])
def test_to_amount_rejects_non_numbers(amount) -> None:
    with pytest.raises(ServiceError) as exc_info:
        to_amount(amount)
    assert exc_info.value.code == "ERR_INVALID_ARGUMENT"


def test_to_amount_keeps_exact_decimal_value() -> None:
    assert to_amount(10.1) == Decimal("10.1")
    assert to_amount(Decimal("12.345")) == Decimal("12.345")


def test_format_amount_rejects_amount_beyond_decimal_precision() -> None:
    with pytest.raises(ServiceError):
        format_amount(Decimal("1E+30"))


def test_build_fields_static_layout(merchant_data: dict[str, str]) -> None:
    record = MerchantRecord.from_mapping(merchant_data)
    body = build_tlv(build_fields(record))
    assert body == (
        "000201"
        "010212"
        f"2661{MAI}"
        f"5144{SWITCHING}"
        "52045411"
        "5303360"
        "5802ID"
        "5926Kodingin Digital Nusantara"
        "6005NGAWI"
        "610563281"
    )


def test_build_fields_dynamic_layout_places_amount_before_country(merchant_data: dict[str, str]) -> None:
    record = MerchantRecord.from_mapping({**merchant_data, "invoice_id": "INV001"})
    tags = [item.tag for item in build_fields(record, Decimal("50000"))]
    assert tags == ["00", "01", "26", "51", "52", "53", "54", "58", "59", "60", "61", "62"]
    body = build_tlv(build_fields(record, Decimal("50000")))
    assert "010211" in body
    assert "5303360540850000.005802ID" in body
    assert body.endswith("62100106INV001")


def test_build_fields_skips_absent_optional_fields(merchant_data: dict[str, str]) -> None:
    trimmed = {k: v for k, v in merchant_data.items() if k not in {"terminal_id", "postal_code", "mcc"}}
    items = build_fields(MerchantRecord.from_mapping(trimmed))
    tags = [item.tag for item in items]
    assert "61" not in tags
    assert "62" not in tags
    assert dict((item.tag, item.value) for item in items)["52"] == "0000"
    assert "02" not in parse_tlv_map(items[2].value)


def test_build_fields_rejects_oversized_merchant_name(merchant_data: dict[str, str]) -> None:
    record = MerchantRecord.from_mapping({**merchant_data, "merchant_name": "N" * 100})
    with pytest.raises(ServiceError):
        build_tlv(build_fields(record))


def test_append_crc_covers_crc_header() -> None:
    encoded = append_crc("000201010212")
    assert encoded.crc == crc16_hex("0002010102126304")
    assert encoded.payload == f"0002010102126304{encoded.crc}"


def test_record_from_fields_defaults_absent_fields() -> None:
    assert record_from_fields({}) == MerchantRecord()
    assert record_from_fields({}).mcc == "0000"


def test_record_from_fields_reads_nested_groups() -> None:
    parsed = {
        "01": "11",
        "26": MAI,
        "51": SWITCHING,
        "52": "5411",
        "54": "15000.50",
        "59": "Toko",
        "60": "NGAWI",
        "62": "0106INV001",
    }
    record = record_from_fields(parsed)
    assert record.acquirer_domain == "COM.GO-JEK.WWW"
    assert record.mpan == "936009143805979959"
    assert record.terminal_id == "G805979959"
    assert record.merchant_category == "UMI"
    assert record.nmid == "ID1024358806544"
    assert record.invoice_id == "INV001"
    assert record.amount == Decimal("15000.50")
    assert record.is_dynamic is True


def test_record_from_fields_tolerates_garbage_amount() -> None:
    assert record_from_fields({"54": "12,5"}).amount is None
