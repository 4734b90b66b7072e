import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from utils.errors import AppError

logger = logging.getLogger(__name__)


def _now_iso():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _error_body(code: str, message: str, details=None):
    body = {
        "success": False,
        "error": {"code": code, "message": message},
        "generated_at": _now_iso(),
    }
    if details is not None:
        body["error"]["details"] = details
    return body


def add_error_handlers(app: FastAPI):
    # ✅ 서비스 계층 도메인 예외 (NotFound / BadRequest / Conflict / Forbidden)
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        logger.info(f"{request.method} {request.url.path} → {exc.status_code} {exc.code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.code, exc.message))

    # ✅ 요청 바디/쿼리 검증 실패 (pydantic)
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content=_error_body("VALIDATION_ERROR", "Validation failed", jsonable_encoder(exc.errors())),
        )

    # ✅ DB 제약조건 위반 (unique 등)
    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning(f"DB 제약조건 위반: {request.method} {request.url.path} - {exc.orig}")
        return JSONResponse(status_code=409, content=_error_body("CONFLICT", "Database constraint violated"))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"처리되지 않은 예외: {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content=_error_body("INTERNAL_ERROR", str(exc)))
