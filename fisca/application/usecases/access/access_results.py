"""
===============================================================================
ACCESS USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Name:
    Access Use Case Results

Business Goal:
    Proveer modelos compartidos de resultados y errores para los casos de uso
    de acceso, usuarios y afiliados, con un contrato estable para:
      - actor no autenticado
      - rechazo por capability o por scope (distinguibles)
      - violaciones de integridad (ciclos, aristas duplicadas, targets)
      - recursos no encontrados y conflictos de unicidad

Why (Context / Intención):
    - Los use cases devuelven resultados tipados en lugar de lanzar
      excepciones hacia afuera; la capa HTTP mapea code -> status.
    - Las excepciones del core (FiscaError) se traducen en UN lugar.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Component:
    access_results models (module)

Responsibilities:
    - Definir AccessErrorCode (categorías estables).
    - Representar AccessError (code + message + reason/violation/field).
    - Traducir FiscaError -> AccessError (access_error_from).
    - Representar resultados de Resolve/Authorize/Grant/Revoke/Prune/List.

Collaborators:
    - crosscutting.exceptions (taxonomía interna)
    - identity.access_resolver.ResolvedContext
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from ....crosscutting.exceptions import (
    ConflictError,
    CycleError,
    DenialReason,
    DuplicateEdgeError,
    FiscaError,
    Forbidden,
    NotFound,
    Unauthenticated,
    UnknownTargetError,
)
from ....domain.entities import TerritorialNode, UserAccessGrant
from ....identity.access_resolver import ResolvedContext


class AccessErrorCode(str, Enum):
    """
    Códigos:
      - VALIDATION_ERROR: input inválido (nivel desconocido, target inexistente).
      - UNAUTHENTICATED: actor desconocido o inactivo.
      - FORBIDDEN: sin capability o fuera de scope (ver AccessError.reason).
      - NOT_FOUND: entidad referenciada inexistente.
      - CONFLICT: ciclo, arista duplicada o DNI/teléfono repetido
        (ver AccessError.violation).
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"


@dataclass(frozen=True)
class AccessError:
    """
    Error de caso de uso.

    Campos:
      - code: categoría estable
      - message: descripción humana
      - reason: causa de FORBIDDEN (capability / scope)
      - violation: error_code del guard (CYCLE, DUPLICATE_EDGE, ...)
      - field: campo en conflicto (dni / telefono)
    """

    code: AccessErrorCode
    message: str
    reason: DenialReason | None = None
    violation: str | None = None
    field: str | None = None


def access_error_from(exc: FiscaError) -> AccessError:
    """Traduce la taxonomía interna al contrato de resultados."""
    if isinstance(exc, Unauthenticated):
        return AccessError(code=AccessErrorCode.UNAUTHENTICATED, message=exc.message)
    if isinstance(exc, Forbidden):
        return AccessError(
            code=AccessErrorCode.FORBIDDEN, message=exc.message, reason=exc.reason
        )
    if isinstance(exc, NotFound):
        return AccessError(code=AccessErrorCode.NOT_FOUND, message=exc.message)
    if isinstance(exc, UnknownTargetError):
        return AccessError(
            code=AccessErrorCode.VALIDATION_ERROR,
            message=exc.message,
            violation=exc.error_code,
        )
    if isinstance(exc, ConflictError):
        return AccessError(
            code=AccessErrorCode.CONFLICT,
            message=exc.message,
            violation=exc.error_code,
            field=exc.field,
        )
    if isinstance(exc, (CycleError, DuplicateEdgeError)):
        return AccessError(
            code=AccessErrorCode.CONFLICT,
            message=exc.message,
            violation=exc.error_code,
        )
    raise exc


def not_found_error(resource: str, identifier: object) -> AccessError:
    return access_error_from(NotFound(resource, identifier))


@dataclass
class ResolveAccessResult:
    """Éxito: context != None."""

    context: ResolvedContext | None = None
    error: AccessError | None = None


@dataclass
class AuthorizeResult:
    """
    allowed=False con error FORBIDDEN lleva la causa en error.reason;
    con error UNAUTHENTICATED no hubo actor válido.
    """

    allowed: bool = False
    error: AccessError | None = None


@dataclass
class GrantResult:
    grant: UserAccessGrant | None = None
    error: AccessError | None = None


@dataclass
class RevokeResult:
    revoked: int = 0
    error: AccessError | None = None


@dataclass
class PruneResult:
    """orphans: nodos cuyo padre ya no existe (se reportan, no se borran)."""

    removed: List[UserAccessGrant] = field(default_factory=list)
    orphans: List[TerritorialNode] = field(default_factory=list)
    error: AccessError | None = None


@dataclass
class AccessibleEntitiesResult:
    """
    ids=None significa sin restricción (acceso total);
    lista vacía significa nada visible.
    """

    ids: List[int] | None = None
    error: AccessError | None = None
