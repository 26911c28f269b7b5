"""
===============================================================================
TARJETA CRC — error_mapping.py (UseCase Error -> HTTP RFC7807)
===============================================================================

Responsabilidades:
  - Traducir AccessError de casos de uso a HTTP Exceptions RFC7807.
  - Centralizar el mapeo para evitar duplicación en routers.
  - Mantener el core libre de HTTP.

Reglas:
  - UNAUTHENTICATED -> 401; FORBIDDEN -> 403 con errors=[{"reason": ...}].
  - CONFLICT lleva violation (CYCLE, DUPLICATE_EDGE, CONFLICT) y field.
  - Código desconocido -> 422 (fallback seguro).

Colaboradores:
  - application.usecases.access (AccessError, AccessErrorCode)
  - crosscutting.error_responses (validation_error, forbidden, etc.)
===============================================================================
"""

from __future__ import annotations

from typing import Any

from fisca.application.usecases.access import AccessError, AccessErrorCode
from fisca.crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    conflict,
    forbidden,
    unauthorized,
    validation_error,
)


def _violation_details(error: AccessError) -> list[dict[str, Any]] | None:
    if not error.violation:
        return None
    details: dict[str, Any] = {"violation": error.violation}
    if error.field:
        details["field"] = error.field
    return [details]


def raise_access_error(error: AccessError) -> None:
    """Traduce AccessError -> HTTP (siempre levanta)."""
    if error.code == AccessErrorCode.UNAUTHENTICATED:
        raise unauthorized(error.message)
    if error.code == AccessErrorCode.FORBIDDEN:
        raise forbidden(
            error.message, reason=error.reason.value if error.reason else None
        )
    if error.code == AccessErrorCode.NOT_FOUND:
        # R: el mensaje ya viene armado desde NotFound(resource, id).
        raise AppHTTPException(404, ErrorCode.NOT_FOUND, error.message)
    if error.code == AccessErrorCode.CONFLICT:
        raise conflict(error.message, _violation_details(error))
    if error.code == AccessErrorCode.VALIDATION_ERROR:
        raise validation_error(error.message, _violation_details(error))

    raise validation_error(error.message)
