"""
===============================================================================
USE CASE: Add Affiliate Member
===============================================================================

Agrega la arista from -> to (to pasa a ser miembro de from).

Reglas:
  - Capability affiliates.update.
  - Ambos afiliados existen.
  - Sin acceso total, from debe ser visible para el actor.
  - Guard: arista duplicada o ciclo -> CONFLICT (violation DUPLICATE_EDGE / CYCLE).
===============================================================================
"""

from __future__ import annotations

from ....application.access_session import AccessSession
from ....crosscutting.exceptions import CycleError, DuplicateEdgeError
from ....crosscutting.logger import logger
from ....domain.entities import AffiliateEdge
from ....domain.integrity import validate_affiliate_edge
from ....domain.repositories import AffiliateRepository
from ....identity.rbac import Permission
from ..access.access_results import access_error_from, not_found_error
from .affiliate_access import (
    out_of_scope_error,
    require_affiliate_capability,
    visible_affiliate_ids,
)
from .affiliate_results import AffiliateEdgeResult


class AddAffiliateMemberUseCase:
    def __init__(self, affiliate_repository: AffiliateRepository) -> None:
        self._affiliates = affiliate_repository

    def execute(
        self,
        session: AccessSession,
        actor_id: int,
        *,
        from_id: int,
        to_id: int,
    ) -> AffiliateEdgeResult:
        ctx, error = require_affiliate_capability(
            session, actor_id, Permission.AFFILIATES_UPDATE.value
        )
        if error is not None:
            return AffiliateEdgeResult(error=error)

        for affiliate_id in (from_id, to_id):
            if self._affiliates.get_affiliate(affiliate_id) is None:
                return AffiliateEdgeResult(error=not_found_error("Afiliado", affiliate_id))

        graph = self._affiliates.load_affiliate_graph()
        visible = visible_affiliate_ids(ctx, graph, self._affiliates)
        if visible is not None and from_id not in visible:
            return AffiliateEdgeResult(error=out_of_scope_error(from_id))

        try:
            validate_affiliate_edge(from_id, to_id, graph)
        except (CycleError, DuplicateEdgeError) as exc:
            return AffiliateEdgeResult(error=access_error_from(exc))

        edge = AffiliateEdge(from_affiliate_id=from_id, to_affiliate_id=to_id)
        self._affiliates.add_member(edge)
        logger.info(
            "Miembro de afiliado agregado",
            extra={"actor_id": actor_id, "from_id": from_id, "to_id": to_id},
        )
        return AffiliateEdgeResult(edge=edge)
