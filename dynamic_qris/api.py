"""FastAPI application exposing the QRIS codec."""
from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from .config import DEFAULT_API_KEY, settings
from .logging_conf import configure_logging
from .middleware import RequestLoggingMiddleware
from .monitoring import metrics_payload, record_payload_generated, record_service_error, record_validation
from .schemas import (
    ConvertRequest,
    GenerateQRRequest,
    GenerateQRResponse,
    LastGeneratedResponse,
    MerchantResponse,
    ParseResponse,
    PayloadRequest,
    ValidateResponse,
)
from .services.errors import ServiceError
from .services.generator import QrisGenerator

app = FastAPI(title="dynamic-qris", version="0.1.0")
app.add_middleware(RequestLoggingMiddleware)

logger = logging.getLogger("dynamic_qris.api")


@lru_cache(maxsize=1)
def get_generator() -> QrisGenerator:
    """Process-wide generator shared by every request."""

    return QrisGenerator()


def _warn_insecure_defaults() -> None:
    if settings.api_key == DEFAULT_API_KEY:
        logger.warning(
            "api key menggunakan nilai default",
            extra={"config_key": "api_key"},
        )


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    _warn_insecure_defaults()


async def require_api_key(x_api_key: str = Header(...)) -> None:
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    route = request.scope.get("route")
    route_path = route.path if route else request.url.path
    logger.warning(
        "service error",
        extra={"code": exc.code, "field": exc.field, "path": route_path, "method": request.method},
    )
    record_service_error(exc.code, route_path)
    content = {"code": exc.code, "message": exc.message}
    if exc.field:
        content["field"] = exc.field
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    route = request.scope.get("route")
    route_path = route.path if route else request.url.path
    logger.exception(
        "unhandled exception",
        extra={"path": route_path, "method": request.method},
    )
    return JSONResponse(status_code=500, content={"code": "ERR_INTERNAL", "message": "Internal server error"})


@app.get("/health", tags=["system"])
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metrics", tags=["system"])
async def metrics() -> Response:
    payload, content_type = metrics_payload()
    return Response(content=payload, media_type=content_type)


@app.post("/v1/qris", response_model=GenerateQRResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
def generate_qris(payload: GenerateQRRequest, generator: QrisGenerator = Depends(get_generator)) -> GenerateQRResponse:
    qris = generator.generate(payload.merchant.model_dump(), payload.amount)
    is_dynamic = payload.amount is not None
    record_payload_generated(is_dynamic)
    return GenerateQRResponse(payload=qris, crc=qris[-4:], is_dynamic=is_dynamic)


@app.post("/v1/qris/parse", response_model=ParseResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
def parse_qris(payload: PayloadRequest, generator: QrisGenerator = Depends(get_generator)) -> ParseResponse:
    return ParseResponse(tags=generator.parse(payload.payload))


@app.post("/v1/qris/merchant", response_model=MerchantResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
def extract_merchant(payload: PayloadRequest, generator: QrisGenerator = Depends(get_generator)) -> MerchantResponse:
    return MerchantResponse.from_record(generator.extract_merchant(payload.payload))


@app.post("/v1/qris/convert", response_model=GenerateQRResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
def convert_qris(payload: ConvertRequest, generator: QrisGenerator = Depends(get_generator)) -> GenerateQRResponse:
    qris = generator.convert_to_dynamic(payload.payload, payload.amount, payload.invoice_id)
    record_payload_generated(True)
    return GenerateQRResponse(payload=qris, crc=qris[-4:], is_dynamic=True)


@app.post("/v1/qris/validate", response_model=ValidateResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
def validate_qris(payload: PayloadRequest, generator: QrisGenerator = Depends(get_generator)) -> ValidateResponse:
    valid = generator.validate_qris(payload.payload)
    record_validation(valid)
    return ValidateResponse(valid=valid)


@app.get("/v1/qris/last", response_model=LastGeneratedResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
def last_generated(generator: QrisGenerator = Depends(get_generator)) -> LastGeneratedResponse:
    return LastGeneratedResponse(payload=generator.get_last_generated_qris())
