"""
===============================================================================
USE CASE: Create User
===============================================================================

Alta de un usuario creado por el actor (created_by = actor).

Reglas:
  - Capability users.create.
  - Jerarquía de roles: solo se crean roles inferiores al propio
    (acceso total crea cualquiera).
  - DNI y teléfono únicos (CONFLICT con field).
  - Un usuario nuevo no puede cerrar un ciclo de creadores: todavía no es
    ancestro de nadie.
===============================================================================
"""

from __future__ import annotations

from ....application.access_session import AccessSession
from ....crosscutting.exceptions import (
    ConflictError,
    DenialReason,
    Forbidden,
    Unauthenticated,
)
from ....crosscutting.logger import logger
from ....domain.entities import User
from ....domain.integrity import validate_unique_user_fields
from ....domain.repositories import RoleRepository, UserRepository
from ....identity.rbac import Permission
from ....identity.user_policy import can_assign_role
from ..access.access_results import (
    AccessError,
    AccessErrorCode,
    access_error_from,
)
from .user_results import CreateUserInput, UserResult


class CreateUserUseCase:
    def __init__(
        self,
        user_repository: UserRepository,
        role_repository: RoleRepository,
    ) -> None:
        self._users = user_repository
        self._roles = role_repository

    def execute(
        self, session: AccessSession, actor_id: int, data: CreateUserInput
    ) -> UserResult:
        try:
            ctx = session.require(actor_id, Permission.USERS_CREATE.value)
        except (Unauthenticated, Forbidden) as exc:
            return UserResult(error=access_error_from(exc))

        email = (data.email or "").strip().lower()
        if not email:
            return UserResult(
                error=AccessError(
                    code=AccessErrorCode.VALIDATION_ERROR,
                    message="El email es obligatorio",
                )
            )

        role = self._roles.get_role_by_name((data.role_name or "").strip().lower())
        if role is None or not role.is_active:
            return UserResult(
                error=AccessError(
                    code=AccessErrorCode.VALIDATION_ERROR,
                    message=f"Rol inválido: {data.role_name!r}",
                )
            )

        if not can_assign_role(ctx, role.name):
            return UserResult(
                error=AccessError(
                    code=AccessErrorCode.FORBIDDEN,
                    message=f"Tu rol no puede crear usuarios con rol '{role.name}'",
                    reason=DenialReason.CAPABILITY,
                )
            )

        try:
            validate_unique_user_fields(
                dni=data.dni,
                telefono=data.telefono,
                existing_users=self._users.list_users(),
            )
        except ConflictError as exc:
            return UserResult(error=access_error_from(exc))

        user = self._users.create_user(
            User(
                id=0,
                email=email,
                role_id=role.id,
                created_by=actor_id,
                dni=data.dni,
                telefono=data.telefono,
                first_name=data.first_name,
                last_name=data.last_name,
                password_hash=data.password_hash,
            )
        )
        logger.info(
            "Usuario creado",
            extra={"actor_id": actor_id, "user_id": user.id, "role": role.name},
        )
        return UserResult(user=user)
