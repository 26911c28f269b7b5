"""
===============================================================================
USE CASE: Revoke Territorial Access
===============================================================================

Revoca grants de un usuario: todos, los de un nivel, o uno puntual.

Reglas:
  - Actor con capability users.update sobre un usuario gestionable.
  - access_type desconocido -> VALIDATION_ERROR.
  - target_id sin access_type -> VALIDATION_ERROR.
  - Si no se borró nada -> NOT_FOUND (no silencioso).
===============================================================================
"""

from __future__ import annotations

from typing import Optional

from ....application.access_session import AccessSession
from ....crosscutting.exceptions import DenialReason, Forbidden, Unauthenticated
from ....crosscutting.logger import logger
from ....domain.entities import TerritorialLevel
from ....domain.repositories import GrantRepository, UserRepository
from ....identity.rbac import Permission
from ....identity.user_policy import UserAction, can_manage_user
from .access_results import (
    AccessError,
    AccessErrorCode,
    RevokeResult,
    access_error_from,
    not_found_error,
)


class RevokeAccessUseCase:
    """Revoca acceso territorial de un usuario."""

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
        access_type: Optional[str] = None,
        target_id: Optional[int] = None,
    ) -> RevokeResult:
        try:
            ctx = session.require(actor_id, Permission.USERS_UPDATE.value)
        except (Unauthenticated, Forbidden) as exc:
            return RevokeResult(error=access_error_from(exc))

        target_user = self._users.get_user(user_id)
        if target_user is None:
            return RevokeResult(error=not_found_error("Usuario", user_id))
        if not can_manage_user(ctx, target_user, UserAction.UPDATE):
            return RevokeResult(
                error=AccessError(
                    code=AccessErrorCode.FORBIDDEN,
                    message="No podés quitar accesos a este usuario",
                    reason=DenialReason.SCOPE,
                )
            )

        # R: los ids son por tabla; un target_id sin nivel cruzaría niveles.
        if target_id is not None and access_type is None:
            return RevokeResult(
                error=AccessError(
                    code=AccessErrorCode.VALIDATION_ERROR,
                    message="target_id requiere access_type",
                )
            )

        level: TerritorialLevel | None = None
        if access_type is not None:
            level = TerritorialLevel.parse(access_type)
            if level is None:
                return RevokeResult(
                    error=AccessError(
                        code=AccessErrorCode.VALIDATION_ERROR,
                        message=f"Tipo de acceso desconocido: {access_type!r}",
                    )
                )

        removed = self._grants.revoke_grant(
            user_id, access_type=level, target_id=target_id
        )
        if removed == 0:
            return RevokeResult(
                error=AccessError(
                    code=AccessErrorCode.NOT_FOUND,
                    message="No se encontraron accesos para revocar",
                )
            )

        logger.info(
            "Acceso territorial revocado",
            extra={
                "actor_id": actor_id,
                "user_id": user_id,
                "access_type": level.value if level else None,
                "target_id": target_id,
                "removed": removed,
            },
        )
        return RevokeResult(revoked=removed)
