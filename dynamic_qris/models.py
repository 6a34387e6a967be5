"""Merchant data model and EMV tag tables for QRIS payloads."""
from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, fields
from decimal import Decimal
from typing import Any, Mapping

from .services.errors import err_missing_field

PAYLOAD_FORMAT_INDICATOR = "01"
CURRENCY_IDR = "360"
COUNTRY_CODE = "ID"
SWITCHING_DOMAIN = "ID.CO.QRIS.WWW"
DEFAULT_MCC = "0000"


class EmvTag(str, enum.Enum):
    PAYLOAD_FORMAT = "00"
    POINT_OF_INITIATION = "01"
    MERCHANT_ACCOUNT_INFO = "26"
    SWITCHING = "51"
    MERCHANT_CATEGORY_CODE = "52"
    TRANSACTION_CURRENCY = "53"
    TRANSACTION_AMOUNT = "54"
    COUNTRY_CODE = "58"
    MERCHANT_NAME = "59"
    MERCHANT_CITY = "60"
    POSTAL_CODE = "61"
    ADDITIONAL_DATA = "62"
    CRC = "63"


class MerchantAccountTag(str, enum.Enum):
    ACQUIRER_DOMAIN = "00"
    MPAN = "01"
    TERMINAL_ID = "02"
    MERCHANT_CATEGORY = "03"


class SwitchingTag(str, enum.Enum):
    SWITCHING_DOMAIN = "00"
    NMID = "02"
    MERCHANT_CATEGORY = "03"


class AdditionalDataTag(str, enum.Enum):
    INVOICE_ID = "01"


class PointOfInitiation(str, enum.Enum):
    DYNAMIC = "11"
    STATIC = "12"


REQUIRED_FIELDS: tuple[str, ...] = (
    "acquirer_domain",
    "mpan",
    "merchant_category",
    "nmid",
    "merchant_name",
    "merchant_city",
)


@dataclass(frozen=True)
class MerchantRecord:
    """Merchant identity plus the transaction fields carried by a QRIS payload.

    ``amount`` and ``is_dynamic`` are populated when a payload is decoded. The
    encoder ignores both: the initiation mode always follows the amount handed
    to the generator.
    """

    acquirer_domain: str = ""
    mpan: str = ""
    merchant_category: str = ""
    nmid: str = ""
    merchant_name: str = ""
    merchant_city: str = ""
    terminal_id: str = ""
    mcc: str = DEFAULT_MCC
    postal_code: str = ""
    invoice_id: str = ""
    amount: Decimal | None = None
    is_dynamic: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "MerchantRecord":
        """Build a record from loose key/value merchant data, ignoring unknown keys."""

        known = {f.name for f in fields(cls)} - {"amount", "is_dynamic"}
        values = {key: "" if data[key] is None else str(data[key]) for key in known if key in data}
        if not values.get("mcc"):
            values["mcc"] = DEFAULT_MCC
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def validate_merchant(record: MerchantRecord) -> None:
    """Raise ``ERR_INVALID_ARGUMENT`` naming the first empty required field."""

    for name in REQUIRED_FIELDS:
        if not getattr(record, name):
            raise err_missing_field(name)
