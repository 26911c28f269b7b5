"""
===============================================================================
USE CASE: Authorize Action
===============================================================================

Authorize(actor, capability, target): capability del rol Y target dentro del
scope (o sin target, o acceso total).

Reglas:
  - Actor inválido -> UNAUTHENTICATED.
  - Sin capability -> FORBIDDEN reason=capability.
  - Target fuera de scope -> FORBIDDEN reason=scope.
===============================================================================
"""

from __future__ import annotations

from typing import Optional

from ....application.access_session import AccessSession
from ....crosscutting.exceptions import Forbidden, Unauthenticated
from ....identity.access_resolver import Target
from .access_results import AuthorizeResult, access_error_from


class AuthorizeActionUseCase:
    """Evalúa una acción y devuelve la decisión con su causa."""

    def execute(
        self,
        session: AccessSession,
        actor_id: int,
        capability: str,
        target: Optional[Target] = None,
    ) -> AuthorizeResult:
        try:
            session.require(actor_id, capability, target)
        except (Unauthenticated, Forbidden) as exc:
            return AuthorizeResult(allowed=False, error=access_error_from(exc))
        return AuthorizeResult(allowed=True)
