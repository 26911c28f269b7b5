"""
===============================================================================
AFFILIATE ACCESS HELPERS
===============================================================================

Resolución compartida para los casos de uso de afiliados: capability del
actor + visibilidad por membresía (el actor ve sus afiliados y todo lo que
contienen transitivamente; acceso total ve todo).

Retorna (ResolvedContext | None, AccessError | None) como contrato estable.
===============================================================================
"""

from __future__ import annotations

from typing import Optional, Tuple

from ....application.access_session import AccessSession
from ....crosscutting.exceptions import DenialReason, Forbidden, Unauthenticated
from ....domain.affiliates import AffiliateGraph
from ....domain.repositories import AffiliateRepository
from ....identity.access_resolver import ResolvedContext
from ..access.access_results import AccessError, AccessErrorCode, access_error_from


def require_affiliate_capability(
    session: AccessSession, actor_id: int, capability: str
) -> Tuple[Optional[ResolvedContext], Optional[AccessError]]:
    try:
        return session.require(actor_id, capability), None
    except (Unauthenticated, Forbidden) as exc:
        return None, access_error_from(exc)


def visible_affiliate_ids(
    ctx: ResolvedContext,
    graph: AffiliateGraph,
    affiliates: AffiliateRepository,
) -> Optional[frozenset[int]]:
    """None = sin restricción (acceso total)."""
    if ctx.full_access:
        return None
    return graph.visible_affiliates(affiliates.list_user_affiliate_ids(ctx.actor_id))


def out_of_scope_error(affiliate_id: int) -> AccessError:
    return AccessError(
        code=AccessErrorCode.FORBIDDEN,
        message=f"El afiliado {affiliate_id} está fuera de tu alcance",
        reason=DenialReason.SCOPE,
    )
