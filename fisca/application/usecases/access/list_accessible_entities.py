"""
===============================================================================
USE CASE: List Accessible Entities
===============================================================================

Ids visibles de un nivel territorial para filtrar queries de listado.

Reglas:
  - Capability <entidad>.read del nivel pedido.
  - Acceso total -> ids=None (sin filtro).
  - Sin grants -> lista vacía (fail-closed).
===============================================================================
"""

from __future__ import annotations

from types import MappingProxyType

from ....application.access_session import AccessSession
from ....crosscutting.exceptions import Forbidden, Unauthenticated
from ....domain.entities import TerritorialLevel
from ....identity.rbac import Permission
from .access_results import (
    AccessError,
    AccessErrorCode,
    AccessibleEntitiesResult,
    access_error_from,
)

_READ_CAPABILITY = MappingProxyType(
    {
        TerritorialLevel.LOCALIDAD: Permission.LOCALIDADES_READ.value,
        TerritorialLevel.CIRCUITO: Permission.CIRCUITOS_READ.value,
        TerritorialLevel.ESCUELA: Permission.ESCUELAS_READ.value,
        TerritorialLevel.MESA: Permission.MESAS_READ.value,
    }
)


class ListAccessibleEntitiesUseCase:
    def execute(
        self, session: AccessSession, actor_id: int, level: str | TerritorialLevel
    ) -> AccessibleEntitiesResult:
        parsed = TerritorialLevel.parse(level)
        if parsed is None:
            return AccessibleEntitiesResult(
                error=AccessError(
                    code=AccessErrorCode.VALIDATION_ERROR,
                    message=f"Nivel territorial desconocido: {level!r}",
                )
            )

        try:
            session.require(actor_id, _READ_CAPABILITY[parsed])
        except (Unauthenticated, Forbidden) as exc:
            return AccessibleEntitiesResult(error=access_error_from(exc))

        ids = session.visible_ids(actor_id, parsed)
        return AccessibleEntitiesResult(ids=None if ids is None else sorted(ids))
