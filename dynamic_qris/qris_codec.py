"""QRIS field assembly and extraction on top of the TLV codec."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Mapping

from .crc import crc16_hex
from .models import (
    COUNTRY_CODE,
    CURRENCY_IDR,
    DEFAULT_MCC,
    PAYLOAD_FORMAT_INDICATOR,
    SWITCHING_DOMAIN,
    AdditionalDataTag,
    EmvTag,
    MerchantAccountTag,
    MerchantRecord,
    PointOfInitiation,
    SwitchingTag,
)
from .services.errors import err_invalid_argument
from .tlv import TLVItem, build_tlv, parse_tlv_map

CRC_HEADER = f"{EmvTag.CRC.value}04"
CRC_FIELD_WIDTH = len(CRC_HEADER) + 4
_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class EncodedPayload:
    payload: str
    crc: str


Amount = Decimal | int | float | str


def to_amount(amount: Amount) -> Decimal:
    """Coerce caller input to a finite ``Decimal``."""

    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise err_invalid_argument(f"Amount {amount!r} is not a number") from exc
    if not value.is_finite():
        raise err_invalid_argument(f"Amount {amount!r} is not a finite number")
    return value


def format_amount(amount: Decimal) -> str:
    """Render an amount with exactly two fractional digits and a dot separator."""

    try:
        return str(amount.quantize(_CENTS, rounding=ROUND_HALF_UP))
    except InvalidOperation as exc:
        raise err_invalid_argument(f"Amount {amount!r} is too large") from exc


def merchant_account_items(record: MerchantRecord) -> Iterable[TLVItem]:
    yield TLVItem(tag=MerchantAccountTag.ACQUIRER_DOMAIN.value, value=record.acquirer_domain)
    yield TLVItem(tag=MerchantAccountTag.MPAN.value, value=record.mpan)
    if record.terminal_id:
        yield TLVItem(tag=MerchantAccountTag.TERMINAL_ID.value, value=record.terminal_id)
    yield TLVItem(tag=MerchantAccountTag.MERCHANT_CATEGORY.value, value=record.merchant_category)


def switching_items(record: MerchantRecord) -> Iterable[TLVItem]:
    yield TLVItem(tag=SwitchingTag.SWITCHING_DOMAIN.value, value=SWITCHING_DOMAIN)
    yield TLVItem(tag=SwitchingTag.NMID.value, value=record.nmid)
    yield TLVItem(tag=SwitchingTag.MERCHANT_CATEGORY.value, value=record.merchant_category)


def build_fields(record: MerchantRecord, amount: Decimal | None = None) -> list[TLVItem]:
    """Return the top-level fields in wire order, without the trailing CRC.

    Some verifiers are order sensitive, so the sequence below is fixed.
    """

    mode = PointOfInitiation.STATIC if amount is None else PointOfInitiation.DYNAMIC
    items = [
        TLVItem(tag=EmvTag.PAYLOAD_FORMAT.value, value=PAYLOAD_FORMAT_INDICATOR),
        TLVItem(tag=EmvTag.POINT_OF_INITIATION.value, value=mode.value),
        TLVItem(tag=EmvTag.MERCHANT_ACCOUNT_INFO.value, value=build_tlv(merchant_account_items(record))),
        TLVItem(tag=EmvTag.SWITCHING.value, value=build_tlv(switching_items(record))),
        TLVItem(tag=EmvTag.MERCHANT_CATEGORY_CODE.value, value=record.mcc or DEFAULT_MCC),
        TLVItem(tag=EmvTag.TRANSACTION_CURRENCY.value, value=CURRENCY_IDR),
    ]
    if amount is not None:
        items.append(TLVItem(tag=EmvTag.TRANSACTION_AMOUNT.value, value=format_amount(amount)))
    items.append(TLVItem(tag=EmvTag.COUNTRY_CODE.value, value=COUNTRY_CODE))
    items.append(TLVItem(tag=EmvTag.MERCHANT_NAME.value, value=record.merchant_name))
    items.append(TLVItem(tag=EmvTag.MERCHANT_CITY.value, value=record.merchant_city))
    if record.postal_code:
        items.append(TLVItem(tag=EmvTag.POSTAL_CODE.value, value=record.postal_code))
    if record.invoice_id:
        additional = TLVItem(tag=AdditionalDataTag.INVOICE_ID.value, value=record.invoice_id)
        items.append(TLVItem(tag=EmvTag.ADDITIONAL_DATA.value, value=additional.serialize()))
    return items


def append_crc(payload_no_crc: str) -> EncodedPayload:
    """Append Tag 63; the CRC covers the payload plus the ``6304`` header."""

    crc = crc16_hex(f"{payload_no_crc}{CRC_HEADER}")
    return EncodedPayload(payload=f"{payload_no_crc}{CRC_HEADER}{crc}", crc=crc)


def _parse_amount(raw: str | None) -> Decimal | None:
    if raw is None:
        return None
    try:
        value = Decimal(raw)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def record_from_fields(parsed: Mapping[str, str]) -> MerchantRecord:
    """Map parsed top-level tags back to a merchant record, defaulting absent fields."""

    account = parse_tlv_map(parsed.get(EmvTag.MERCHANT_ACCOUNT_INFO.value, ""))
    switching = parse_tlv_map(parsed.get(EmvTag.SWITCHING.value, ""))
    additional = parse_tlv_map(parsed.get(EmvTag.ADDITIONAL_DATA.value, ""))

    return MerchantRecord(
        acquirer_domain=account.get(MerchantAccountTag.ACQUIRER_DOMAIN.value, ""),
        mpan=account.get(MerchantAccountTag.MPAN.value, ""),
        terminal_id=account.get(MerchantAccountTag.TERMINAL_ID.value, ""),
        merchant_category=account.get(MerchantAccountTag.MERCHANT_CATEGORY.value, ""),
        nmid=switching.get(SwitchingTag.NMID.value, ""),
        mcc=parsed.get(EmvTag.MERCHANT_CATEGORY_CODE.value, DEFAULT_MCC),
        merchant_name=parsed.get(EmvTag.MERCHANT_NAME.value, ""),
        merchant_city=parsed.get(EmvTag.MERCHANT_CITY.value, ""),
        postal_code=parsed.get(EmvTag.POSTAL_CODE.value, ""),
        invoice_id=additional.get(AdditionalDataTag.INVOICE_ID.value, ""),
        amount=_parse_amount(parsed.get(EmvTag.TRANSACTION_AMOUNT.value)),
        is_dynamic=parsed.get(EmvTag.POINT_OF_INITIATION.value, "") == PointOfInitiation.DYNAMIC.value,
    )
