"""
===============================================================================
TARJETA CRC — fisca/api/exception_handlers.py (Manejo Centralizado de Excepciones)
===============================================================================

Responsabilidades:
  - Traducir FiscaError (y derivadas) a respuestas HTTP RFC7807.
  - Distinguir 401 (sin actor) de 403 (sin capability / fuera de scope).
  - Centralizar logging de errores con request_id + error_id.
  - Evitar filtrar detalles internos en errores no controlados.

Colaboradores:
  - crosscutting.error_responses: AppHTTPException, ErrorCode, app_exception_handler
  - crosscutting.exceptions: FiscaError y derivadas
  - crosscutting.config.get_settings (nivel de detalle en 500)
===============================================================================
"""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
)
from ..crosscutting.exceptions import (
    ConflictError,
    DatabaseError,
    FiscaError,
    Forbidden,
    IntegrityViolation,
    NotFound,
    Unauthenticated,
    UnknownTargetError,
)
from ..crosscutting.logger import logger


def _request_id_from(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


async def _handle_fisca_error(
    request: Request,
    *,
    exc: FiscaError,
    code: ErrorCode,
    status_code: int,
    details: dict[str, Any] | None = None,
    log_level: str = "warning",
) -> JSONResponse:
    """Helper común para errores tipados del core."""
    request_id = _request_id_from(request)

    getattr(logger, log_level)(
        "Error de acceso" if status_code < 500 else "Error de servicio",
        extra={
            "code": code.value,
            "error_code": exc.error_code,
            "error_id": exc.error_id,
            "message": exc.message,
            "request_id": request_id,
        },
    )

    errors: list[dict[str, Any]] = []
    if details:
        errors.append(details)
    errors.append({"error_id": exc.error_id})

    app_exc = AppHTTPException(
        status_code=status_code,
        code=code,
        detail=exc.message,
        errors=errors,
    )
    return await app_exception_handler(request, app_exc)


async def unauthenticated_handler(
    request: Request, exc: Unauthenticated
) -> JSONResponse:
    return await _handle_fisca_error(
        request, exc=exc, code=ErrorCode.UNAUTHORIZED, status_code=401
    )


async def forbidden_handler(request: Request, exc: Forbidden) -> JSONResponse:
    details: dict[str, Any] = {"reason": exc.reason.value}
    if exc.capability:
        details["capability"] = exc.capability
    return await _handle_fisca_error(
        request,
        exc=exc,
        code=ErrorCode.FORBIDDEN,
        status_code=403,
        details=details,
    )


async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return await _handle_fisca_error(
        request, exc=exc, code=ErrorCode.NOT_FOUND, status_code=404
    )


async def integrity_error_handler(
    request: Request, exc: IntegrityViolation
) -> JSONResponse:
    # R: target territorial inexistente es input inválido, no conflicto.
    if isinstance(exc, UnknownTargetError):
        return await _handle_fisca_error(
            request,
            exc=exc,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=422,
            details={"violation": exc.error_code},
        )

    details: dict[str, Any] = {"violation": exc.error_code}
    if isinstance(exc, ConflictError) and exc.field:
        details["field"] = exc.field
    return await _handle_fisca_error(
        request,
        exc=exc,
        code=ErrorCode.CONFLICT,
        status_code=409,
        details=details,
    )


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    return await _handle_fisca_error(
        request,
        exc=exc,
        code=ErrorCode.DATABASE_ERROR,
        status_code=503,
        log_level="error",
    )


async def fisca_error_handler(request: Request, exc: FiscaError) -> JSONResponse:
    # R: Errores base: tratamos como INTERNAL_ERROR por defecto.
    return await _handle_fisca_error(
        request,
        exc=exc,
        code=ErrorCode.INTERNAL_ERROR,
        status_code=500,
        log_level="error",
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler para excepciones no tipadas.

    - Log completo (stacktrace).
    - Respuesta genérica en producción.
    """
    request_id = _request_id_from(request)
    settings = get_settings()

    logger.error(
        "Excepción no controlada",
        exc_info=True,
        extra={"request_id": request_id, "error": str(exc)},
    )

    detail = str(exc) if not settings.is_production() else "Error interno."

    app_exc = AppHTTPException(
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR,
        detail=detail,
    )
    return await app_exception_handler(request, app_exc)


def register_exception_handlers(app) -> None:
    """
    Registra handlers en la app FastAPI.

    Starlette resuelve por MRO, así que las subclases ganan sobre FiscaError
    y Exception queda como fallback.
    """
    app.add_exception_handler(Unauthenticated, unauthenticated_handler)
    app.add_exception_handler(Forbidden, forbidden_handler)
    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(IntegrityViolation, integrity_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(FiscaError, fisca_error_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
