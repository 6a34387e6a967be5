"""Shared service error definitions."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class ServiceError(Exception):
    code: str
    message: str
    status_code: int = 400
    field: str | None = None

    def __str__(self) -> str:  # noqa: D401 override
        return f"{self.code}: {self.message}"


def err_invalid_argument(message: str | None = None, *, field: str | None = None) -> ServiceError:
    return ServiceError(
        code="ERR_INVALID_ARGUMENT",
        message=message or "Invalid argument",
        status_code=422,
        field=field,
    )


def err_missing_field(field: str) -> ServiceError:
    return err_invalid_argument(f"Field '{field}' is required and must not be empty", field=field)


def err_invalid_format(message: str | None = None) -> ServiceError:
    return ServiceError(code="ERR_INVALID_FORMAT", message=message or "Invalid QRIS payload", status_code=400)
