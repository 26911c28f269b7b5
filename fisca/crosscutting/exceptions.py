"""
===============================================================================
MÓDULO: Excepciones tipadas (control de acceso + integridad)
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- error_code estable
- error_id para correlación con logs
- message "humana" (sin filtrar credenciales ni datos personales)

Taxonomía
---------
- Unauthenticated: no hay actor válido (desconocido o inactivo).
- Forbidden: actor válido sin capability o sin scope. `reason` distingue
  ambas causas para que el caller muestre mensajes distintos.
- NotFound: entidad referenciada inexistente.
- IntegrityViolation: CycleError / DuplicateEdgeError / UnknownTargetError /
  ConflictError. Se levantan ANTES de cualquier escritura.
- DatabaseError: falla del adaptador de persistencia.

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  FiscaError + subclases

Responsabilidades:
  - Estandarizar errores internos que luego se mapean a HTTP
  - Generar error_id para rastreo

Colaboradores:
  - api/exception_handlers.py (mapea a AppHTTPException)
  - application.usecases.* (traduce a resultados tipados)
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import uuid4


@dataclass(frozen=True)
class ErrorResponse:
    """Estructura mínima para responder errores de forma consistente."""

    error_code: str
    message: str
    error_id: str

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "error_id": self.error_id,
        }


class DenialReason(str, Enum):
    """Causa de un Forbidden: falta la capability o el target está fuera de scope."""

    CAPABILITY = "capability"
    SCOPE = "scope"


class FiscaError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      FiscaError

    Responsabilidades:
      - Base para errores internos del sistema
      - Proveer error_code + error_id + message

    Colaboradores:
      - api/exception_handlers.py
    ----------------------------------------------------------------------------
    """

    error_code: str = "FISCA_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.error_code, message=self.message, error_id=self.error_id
        )


class Unauthenticated(FiscaError):
    """No hay actor válido para el request."""

    error_code: str = "UNAUTHENTICATED"


class Forbidden(FiscaError):
    """Actor válido sin capability o sin scope sobre el target."""

    error_code: str = "FORBIDDEN"

    def __init__(
        self,
        message: str,
        *,
        reason: DenialReason,
        capability: str | None = None,
        error_id: str | None = None,
    ):
        super().__init__(message, error_id=error_id)
        self.reason = reason
        self.capability = capability


class NotFound(FiscaError):
    """Entidad referenciada inexistente."""

    error_code: str = "NOT_FOUND"

    def __init__(self, resource: str, identifier: object):
        super().__init__(f"{resource} '{identifier}' no encontrado")
        self.resource = resource
        self.identifier = identifier


class IntegrityViolation(FiscaError):
    """Base de violaciones de integridad detectadas por el guard."""

    error_code: str = "INTEGRITY_ERROR"


class CycleError(IntegrityViolation):
    """La mutación crearía un ciclo (creadores o afiliados)."""

    error_code: str = "CYCLE"


class DuplicateEdgeError(IntegrityViolation):
    """La arista de afiliados ya existe."""

    error_code: str = "DUPLICATE_EDGE"


class UnknownTargetError(IntegrityViolation):
    """El grant apunta a un nodo territorial inexistente (o a un nivel inválido)."""

    error_code: str = "UNKNOWN_TARGET"


class ConflictError(IntegrityViolation):
    """Colisión de unicidad (DNI / teléfono ya registrados)."""

    error_code: str = "CONFLICT"

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class DatabaseError(FiscaError):
    """Errores de DB (conexión, query, timeout, pool)."""

    error_code: str = "DATABASE_ERROR"
