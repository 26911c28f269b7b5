"""
===============================================================================
USE CASE: Prune Dangling Grants
===============================================================================

Borra en cascada los grants cuyo target territorial ya no existe (o cuyo
access_type es inválido). Se ejecuta después de borrar nodos del territorio.
Reporta además los nodos territoriales huérfanos que quedaron tras el borrado.

Reglas:
  - Operación global: requiere users.update y acceso total.
  - Los huérfanos se loguean como warning; no se borran.
===============================================================================
"""

from __future__ import annotations

from ....application.access_session import AccessSession
from ....crosscutting.exceptions import DenialReason, Forbidden, Unauthenticated
from ....crosscutting.logger import logger
from ....domain.integrity import find_dangling_grants
from ....domain.repositories import GrantRepository
from ....identity.rbac import Permission
from .access_results import AccessError, AccessErrorCode, PruneResult, access_error_from


class PruneDanglingGrantsUseCase:
    def __init__(self, grant_repository: GrantRepository) -> None:
        self._grants = grant_repository

    def execute(self, session: AccessSession, actor_id: int) -> PruneResult:
        try:
            ctx = session.require(actor_id, Permission.USERS_UPDATE.value)
        except (Unauthenticated, Forbidden) as exc:
            return PruneResult(error=access_error_from(exc))

        if not ctx.full_access:
            return PruneResult(
                error=AccessError(
                    code=AccessErrorCode.FORBIDDEN,
                    message="Solo un rol de acceso total puede depurar accesos",
                    reason=DenialReason.SCOPE,
                )
            )

        dangling = find_dangling_grants(self._grants.list_all_grants(), session.hierarchy)
        if dangling:
            self._grants.delete_grants(dangling)
            logger.info(
                "Grants colgantes eliminados",
                extra={"actor_id": actor_id, "removed": len(dangling)},
            )
        orphans = session.hierarchy.find_orphans()
        if orphans:
            logger.warning(
                "Nodos territoriales huérfanos",
                extra={
                    "actor_id": actor_id,
                    "orphans": [f"{n.level.value}:{n.id}" for n in orphans],
                },
            )
        return PruneResult(removed=dangling, orphans=orphans)
