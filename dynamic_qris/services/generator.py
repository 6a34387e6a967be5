"""QRIS generation, parsing and static-to-dynamic conversion services."""
from __future__ import annotations

import logging
import random
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Mapping

from ..config import settings
from ..crc import crc16_hex
from ..models import EmvTag, MerchantRecord, validate_merchant
from ..qris_codec import (
    CRC_FIELD_WIDTH,
    CRC_HEADER,
    Amount,
    append_crc,
    build_fields,
    record_from_fields,
    to_amount,
)
from ..tlv import build_tlv, parse_tlv_map
from .errors import err_invalid_argument, err_invalid_format

logger = logging.getLogger("dynamic_qris.generator")


class QrisGenerator:
    """Build, read and verify QRIS payload strings.

    The only state kept between calls is the most recently generated payload,
    exposed through :attr:`last_generated_qris`.
    """

    def __init__(
        self,
        *,
        invoice_prefix: str | None = None,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
    ):
        self.invoice_prefix = settings.invoice_prefix if invoice_prefix is None else invoice_prefix
        self._clock = clock or datetime.now
        self._rng = rng or random.Random()
        self._last_qris = ""

    @property
    def last_generated_qris(self) -> str:
        return self._last_qris

    def get_last_generated_qris(self) -> str:
        """Return the last generated payload, or an empty string if none yet."""

        return self._last_qris

    def generate_invoice_id(self) -> str:
        """Timestamp based invoice id: prefix, ``YYYYmmddHHMMSS`` and a 3-digit random suffix."""

        stamp = self._clock().strftime("%Y%m%d%H%M%S")
        return f"{self.invoice_prefix}{stamp}{self._rng.randint(0, 999):03d}"

    def generate(self, merchant_data: MerchantRecord | Mapping[str, Any], amount: Amount | None = None) -> str:
        record = merchant_data if isinstance(merchant_data, MerchantRecord) else MerchantRecord.from_mapping(merchant_data)
        validate_merchant(record)

        value = None if amount is None else to_amount(amount)
        if value is not None and not record.invoice_id:
            record = replace(record, invoice_id=self.generate_invoice_id())

        encoded = append_crc(build_tlv(build_fields(record, value)))
        self._last_qris = encoded.payload
        logger.info(
            "qris generated",
            extra={
                "mode": "static" if value is None else "dynamic",
                "nmid": record.nmid,
                "invoice_id": record.invoice_id or None,
                "crc": encoded.crc,
            },
        )
        return encoded.payload

    def parse(self, payload: str) -> dict[str, str]:
        """Parse a payload into a tag -> value mapping; only empty input is rejected."""

        if not payload:
            raise err_invalid_format("QRIS string must not be empty")
        return parse_tlv_map(payload)

    def extract_merchant(self, payload: str) -> MerchantRecord:
        return record_from_fields(self.parse(payload))

    def convert_to_dynamic(self, static_payload: str, amount: Amount, new_invoice_id: str | None = None) -> str:
        """Re-issue a static QRIS as a dynamic one bound to ``amount``.

        Invoice id precedence: ``new_invoice_id`` when given (even empty), else
        the id carried by the static payload. An empty id is replaced by a
        freshly generated one.
        """

        value = to_amount(amount)
        if value <= 0:
            raise err_invalid_argument("Amount must be greater than 0")

        record = self.extract_merchant(static_payload)
        if record.is_dynamic:
            raise err_invalid_argument("QRIS is already dynamic")

        invoice_id = new_invoice_id if new_invoice_id is not None else record.invoice_id
        logger.info("converting static qris", extra={"nmid": record.nmid, "invoice_id": invoice_id})
        return self.generate(replace(record, invoice_id=invoice_id), value)

    def validate_qris(self, payload: str) -> bool:
        """Check the trailing CRC of ``payload``. Never raises; malformed input is ``False``."""

        try:
            provided = self.parse(payload).get(EmvTag.CRC.value)
            if provided is None:
                return False
            expected = crc16_hex(f"{payload[:-CRC_FIELD_WIDTH]}{CRC_HEADER}")
            return provided.upper() == expected
        except Exception:
            logger.debug("qris validation failed", exc_info=True)
            return False
