"""
===============================================================================
USE CASE: List Available Roles
===============================================================================

Roles que el actor puede asignar al crear usuarios (jerarquía de roles).
Un rol de acceso total sin entrada en la jerarquía ve todos los roles que
no son de acceso total.
===============================================================================
"""

from __future__ import annotations

from ....application.access_session import AccessSession
from ....crosscutting.exceptions import Unauthenticated
from ....domain.repositories import RoleRepository
from ....identity.rbac import available_roles_for_creation, is_full_access_role
from ..access.access_results import access_error_from
from .user_results import RoleListResult


class ListAvailableRolesUseCase:
    def __init__(self, role_repository: RoleRepository) -> None:
        self._roles = role_repository

    def execute(self, session: AccessSession, actor_id: int) -> RoleListResult:
        try:
            ctx = session.resolve(actor_id)
        except Unauthenticated as exc:
            return RoleListResult(error=access_error_from(exc))

        allowed = set(available_roles_for_creation(ctx.role_name))
        roles = [r for r in self._roles.list_roles() if r.is_active]
        if ctx.full_access and not allowed:
            return RoleListResult(
                roles=[r for r in roles if not is_full_access_role(r.name)]
            )
        return RoleListResult(roles=[r for r in roles if r.name in allowed])
