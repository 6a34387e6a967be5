"""Pydantic schemas for API contracts."""
from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from .models import DEFAULT_MCC, MerchantRecord


class MerchantFields(BaseModel):
    # Required fields are checked by the generator so the error names the field.
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


class GenerateQRRequest(BaseModel):
    merchant: MerchantFields
    amount: Decimal | None = Field(default=None, description="Omit for a static QRIS")


class GenerateQRResponse(BaseModel):
    payload: str
    crc: str
    is_dynamic: bool


class PayloadRequest(BaseModel):
    payload: str = Field(description="Raw QRIS payload string")


class ParseResponse(BaseModel):
    tags: dict[str, str]


class MerchantResponse(MerchantFields):
    amount: Decimal | None = None
    is_dynamic: bool = False

    @classmethod
    def from_record(cls, record: MerchantRecord) -> "MerchantResponse":
        return cls(**record.to_dict())


class ConvertRequest(BaseModel):
    payload: str = Field(description="Static QRIS payload string")
    amount: Decimal
    invoice_id: str | None = None


class ValidateResponse(BaseModel):
    valid: bool


class LastGeneratedResponse(BaseModel):
    payload: str
