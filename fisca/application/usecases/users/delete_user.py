"""
===============================================================================
USE CASE: Delete User
===============================================================================

Reglas:
  - Capability users.delete.
  - Nadie puede borrar su propia cuenta (VALIDATION_ERROR).
  - Puede borrar: acceso total o el creador del usuario.
===============================================================================
"""

from __future__ import annotations

from ....application.access_session import AccessSession
from ....crosscutting.exceptions import DenialReason, Forbidden, Unauthenticated
from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from ....identity.rbac import Permission
from ....identity.user_policy import UserAction, can_manage_user
from ..access.access_results import (
    AccessError,
    AccessErrorCode,
    access_error_from,
    not_found_error,
)
from .user_results import DeleteUserResult


class DeleteUserUseCase:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    def execute(
        self, session: AccessSession, actor_id: int, user_id: int
    ) -> DeleteUserResult:
        try:
            ctx = session.require(actor_id, Permission.USERS_DELETE.value)
        except (Unauthenticated, Forbidden) as exc:
            return DeleteUserResult(error=access_error_from(exc))

        if user_id == actor_id:
            return DeleteUserResult(
                error=AccessError(
                    code=AccessErrorCode.VALIDATION_ERROR,
                    message="No podés eliminar tu propia cuenta",
                )
            )

        user = self._users.get_user(user_id)
        if user is None:
            return DeleteUserResult(error=not_found_error("Usuario", user_id))

        if not can_manage_user(ctx, user, UserAction.DELETE):
            return DeleteUserResult(
                error=AccessError(
                    code=AccessErrorCode.FORBIDDEN,
                    message="Solo el creador del usuario puede eliminarlo",
                    reason=DenialReason.SCOPE,
                )
            )

        deleted = self._users.delete_user(user_id)
        if deleted:
            logger.info("Usuario eliminado", extra={"actor_id": actor_id, "user_id": user_id})
        return DeleteUserResult(deleted=deleted)
