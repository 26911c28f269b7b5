"""
===============================================================================
USE CASE: List Visible Affiliates
===============================================================================

Afiliados visibles para el actor: los suyos + sus miembros transitivos.
Acceso total ve todos. Capability affiliates.read.
===============================================================================
"""

from __future__ import annotations

from ....application.access_session import AccessSession
from ....domain.repositories import AffiliateRepository
from ....identity.rbac import Permission
from .affiliate_access import require_affiliate_capability, visible_affiliate_ids
from .affiliate_results import AffiliateListResult


class ListVisibleAffiliatesUseCase:
    def __init__(self, affiliate_repository: AffiliateRepository) -> None:
        self._affiliates = affiliate_repository

    def execute(self, session: AccessSession, actor_id: int) -> AffiliateListResult:
        ctx, error = require_affiliate_capability(
            session, actor_id, Permission.AFFILIATES_READ.value
        )
        if error is not None:
            return AffiliateListResult(error=error)

        affiliates = self._affiliates.list_affiliates()
        visible = visible_affiliate_ids(
            ctx, self._affiliates.load_affiliate_graph(), self._affiliates
        )
        if visible is None:
            return AffiliateListResult(affiliates=affiliates)
        return AffiliateListResult(affiliates=[a for a in affiliates if a.id in visible])
