"""
===============================================================================
USE CASE: Reassign Creator
===============================================================================

Cambia el created_by de un usuario existente (reorganizar la pirámide).

Reglas:
  - Capability users.update sobre un usuario gestionable.
  - El nuevo creador debe existir (None = el usuario pasa a ser raíz).
  - Guard: el nuevo creador no puede ser el propio usuario ni alguien
    creado (directa o indirectamente) por él -> CONFLICT violation=CYCLE.
===============================================================================
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ....application.access_session import AccessSession
from ....crosscutting.exceptions import (
    CycleError,
    DenialReason,
    Forbidden,
    Unauthenticated,
)
from ....crosscutting.logger import logger
from ....domain.integrity import validate_creator_assignment
from ....domain.repositories import UserRepository
from ....identity.rbac import Permission
from ....identity.user_policy import UserAction, can_manage_user
from ..access.access_results import (
    AccessError,
    AccessErrorCode,
    access_error_from,
    not_found_error,
)
from .user_results import UserResult


class ReassignCreatorUseCase:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    def execute(
        self,
        session: AccessSession,
        actor_id: int,
        *,
        user_id: int,
        creator_id: Optional[int],
    ) -> UserResult:
        try:
            ctx = session.require(actor_id, Permission.USERS_UPDATE.value)
        except (Unauthenticated, Forbidden) as exc:
            return UserResult(error=access_error_from(exc))

        user = self._users.get_user(user_id)
        if user is None:
            return UserResult(error=not_found_error("Usuario", user_id))
        if creator_id is not None and self._users.get_user(creator_id) is None:
            return UserResult(error=not_found_error("Usuario", creator_id))

        if not can_manage_user(ctx, user, UserAction.UPDATE):
            return UserResult(
                error=AccessError(
                    code=AccessErrorCode.FORBIDDEN,
                    message="No podés reasignar a este usuario",
                    reason=DenialReason.SCOPE,
                )
            )

        try:
            validate_creator_assignment(
                user_id, creator_id, self._users.load_creator_forest()
            )
        except CycleError as exc:
            return UserResult(error=access_error_from(exc))

        updated = self._users.update_user(replace(user, created_by=creator_id))
        logger.info(
            "Creador reasignado",
            extra={"actor_id": actor_id, "user_id": user_id, "creator_id": creator_id},
        )
        return UserResult(user=updated)
