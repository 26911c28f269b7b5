"""
===============================================================================
USE CASE: Grant Territorial Access
===============================================================================

Otorga a un usuario un grant (access_type, target_id) sobre el territorio.
Idempotente: un grant repetido no se duplica.

Reglas:
  - Actor con capability users.create.
  - El usuario destino debe existir y ser gestionable por el actor.
  - El target debe existir (guard: UnknownTargetError -> VALIDATION_ERROR).
  - Sin acceso total, el target debe estar dentro del scope del actor:
    nadie delega territorio que no tiene.
===============================================================================
"""

from __future__ import annotations

from ....application.access_session import AccessSession
from ....crosscutting.exceptions import (
    DenialReason,
    Forbidden,
    Unauthenticated,
    UnknownTargetError,
)
from ....crosscutting.logger import logger
from ....domain.entities import ScopeRef, UserAccessGrant
from ....domain.integrity import validate_access_grant
from ....domain.repositories import GrantRepository, UserRepository
from ....identity.rbac import Permission
from ....identity.user_policy import UserAction, can_manage_user
from .access_results import (
    AccessError,
    AccessErrorCode,
    GrantResult,
    access_error_from,
    not_found_error,
)


class GrantAccessUseCase:
    """Otorga acceso territorial a un usuario."""

    def __init__(
        self,
        grant_repository: GrantRepository,
        user_repository: UserRepository,
    ) -> None:
        self._grants = grant_repository
        self._users = user_repository

    def execute(
        self,
        session: AccessSession,
        actor_id: int,
        *,
        user_id: int,
        access_type: str,
        target_id: int,
    ) -> GrantResult:
        """
        Pasos:
          1. Capability users.create.
          2. Usuario destino existe y es gestionable.
          3. Guard: target existente.
          4. Scope del actor sobre el target.
          5. Insert idempotente.
        """
        capability = Permission.USERS_CREATE.value
        try:
            ctx = session.require(actor_id, capability)
        except (Unauthenticated, Forbidden) as exc:
            return GrantResult(error=access_error_from(exc))

        target_user = self._users.get_user(user_id)
        if target_user is None:
            return GrantResult(error=not_found_error("Usuario", user_id))
        if not can_manage_user(ctx, target_user, UserAction.UPDATE):
            return GrantResult(
                error=AccessError(
                    code=AccessErrorCode.FORBIDDEN,
                    message="No podés asignar accesos a este usuario",
                    reason=DenialReason.SCOPE,
                )
            )

        try:
            level = validate_access_grant(access_type, target_id, session.hierarchy)
            session.require(actor_id, capability, ScopeRef(level, target_id))
        except (UnknownTargetError, Forbidden) as exc:
            return GrantResult(error=access_error_from(exc))

        grant = self._grants.add_grant(
            UserAccessGrant(user_id=user_id, access_type=level.value, target_id=target_id)
        )
        logger.info(
            "Acceso territorial otorgado",
            extra={
                "actor_id": actor_id,
                "user_id": user_id,
                "access_type": level.value,
                "target_id": target_id,
            },
        )
        return GrantResult(grant=grant)
