"""
===============================================================================
USE CASE: Remove Affiliate Member
===============================================================================

Quita la arista from -> to. Si no existía -> NOT_FOUND (no silencioso).
===============================================================================
"""

from __future__ import annotations

from ....application.access_session import AccessSession
from ....crosscutting.logger import logger
from ....domain.entities import AffiliateEdge
from ....domain.repositories import AffiliateRepository
from ....identity.rbac import Permission
from ..access.access_results import AccessError, AccessErrorCode
from .affiliate_access import (
    out_of_scope_error,
    require_affiliate_capability,
    visible_affiliate_ids,
)
from .affiliate_results import AffiliateRemoveResult


class RemoveAffiliateMemberUseCase:
    def __init__(self, affiliate_repository: AffiliateRepository) -> None:
        self._affiliates = affiliate_repository

    def execute(
        self,
        session: AccessSession,
        actor_id: int,
        *,
        from_id: int,
        to_id: int,
    ) -> AffiliateRemoveResult:
        ctx, error = require_affiliate_capability(
            session, actor_id, Permission.AFFILIATES_UPDATE.value
        )
        if error is not None:
            return AffiliateRemoveResult(error=error)

        graph = self._affiliates.load_affiliate_graph()
        visible = visible_affiliate_ids(ctx, graph, self._affiliates)
        if visible is not None and from_id not in visible:
            return AffiliateRemoveResult(error=out_of_scope_error(from_id))

        removed = self._affiliates.remove_member(
            AffiliateEdge(from_affiliate_id=from_id, to_affiliate_id=to_id)
        )
        if not removed:
            return AffiliateRemoveResult(
                error=AccessError(
                    code=AccessErrorCode.NOT_FOUND,
                    message=f"El afiliado {to_id} no es miembro de {from_id}",
                )
            )

        logger.info(
            "Miembro de afiliado quitado",
            extra={"actor_id": actor_id, "from_id": from_id, "to_id": to_id},
        )
        return AffiliateRemoveResult(removed=True)
