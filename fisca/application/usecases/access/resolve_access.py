"""
===============================================================================
USE CASE: Resolve Access
===============================================================================

Resuelve el contexto de acceso del actor (permisos del rol + raíces de scope).

Reglas:
  - Actor desconocido o inactivo -> UNAUTHENTICATED.
  - Rol ausente/inactivo -> permisos vacíos (fail-closed).
  - Grants colgantes se saltean; duplicados se deduplican.
===============================================================================
"""

from __future__ import annotations

from ....application.access_session import AccessSession
from ....crosscutting.exceptions import Unauthenticated
from .access_results import ResolveAccessResult, access_error_from


class ResolveAccessUseCase:
    """Resolve(actorID) -> ResolvedContext."""

    def execute(self, session: AccessSession, actor_id: int) -> ResolveAccessResult:
        try:
            ctx = session.resolve(actor_id)
        except Unauthenticated as exc:
            return ResolveAccessResult(error=access_error_from(exc))
        return ResolveAccessResult(context=ctx)
