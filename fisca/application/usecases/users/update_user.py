"""
===============================================================================
USE CASE: Update User
===============================================================================

Edición de datos de un usuario.

Reglas:
  - Capability users.update.
  - Puede editar: acceso total, roles editores (USER_EDITOR_ROLES) o el
    creador del usuario.
  - Cambio de rol: el rol nuevo debe existir y respetar la jerarquía.
  - DNI/teléfono únicos contra el resto de los usuarios.
===============================================================================
"""

from __future__ import annotations

from dataclasses import replace

from ....application.access_session import AccessSession
from ....crosscutting.exceptions import (
    ConflictError,
    DenialReason,
    Forbidden,
    Unauthenticated,
)
from ....crosscutting.logger import logger
from ....domain.integrity import validate_unique_user_fields
from ....domain.repositories import RoleRepository, UserRepository
from ....identity.rbac import Permission
from ....identity.user_policy import UserAction, can_assign_role, can_manage_user
from ..access.access_results import (
    AccessError,
    AccessErrorCode,
    access_error_from,
    not_found_error,
)
from .user_results import UpdateUserInput, UserResult


class UpdateUserUseCase:
    def __init__(
        self,
        user_repository: UserRepository,
        role_repository: RoleRepository,
    ) -> None:
        self._users = user_repository
        self._roles = role_repository

    def execute(
        self,
        session: AccessSession,
        actor_id: int,
        user_id: int,
        data: UpdateUserInput,
    ) -> UserResult:
        try:
            ctx = session.require(actor_id, Permission.USERS_UPDATE.value)
        except (Unauthenticated, Forbidden) as exc:
            return UserResult(error=access_error_from(exc))

        user = self._users.get_user(user_id)
        if user is None:
            return UserResult(error=not_found_error("Usuario", user_id))

        if not can_manage_user(ctx, user, UserAction.UPDATE):
            return UserResult(
                error=AccessError(
                    code=AccessErrorCode.FORBIDDEN,
                    message="Solo el creador del usuario puede editarlo",
                    reason=DenialReason.SCOPE,
                )
            )

        changes: dict = {}
        if data.role_name is not None:
            role = self._roles.get_role_by_name(data.role_name.strip().lower())
            if role is None or not role.is_active:
                return UserResult(
                    error=AccessError(
                        code=AccessErrorCode.VALIDATION_ERROR,
                        message=f"Rol inválido: {data.role_name!r}",
                    )
                )
            if role.id != user.role_id and not can_assign_role(ctx, role.name):
                return UserResult(
                    error=AccessError(
                        code=AccessErrorCode.FORBIDDEN,
                        message=f"Tu rol no puede asignar el rol '{role.name}'",
                        reason=DenialReason.CAPABILITY,
                    )
                )
            changes["role_id"] = role.id

        try:
            validate_unique_user_fields(
                dni=data.dni,
                telefono=data.telefono,
                existing_users=self._users.list_users(),
                exclude_user_id=user_id,
            )
        except ConflictError as exc:
            return UserResult(error=access_error_from(exc))

        if data.email is not None:
            email = data.email.strip().lower()
            if not email:
                return UserResult(
                    error=AccessError(
                        code=AccessErrorCode.VALIDATION_ERROR,
                        message="El email no puede quedar vacío",
                    )
                )
            changes["email"] = email
        for name in ("dni", "telefono", "first_name", "last_name", "status"):
            value = getattr(data, name)
            if value is not None:
                changes[name] = value

        updated = self._users.update_user(replace(user, **changes)) if changes else user
        logger.info(
            "Usuario actualizado",
            extra={"actor_id": actor_id, "user_id": user_id, "fields": sorted(changes)},
        )
        return UserResult(user=updated)
