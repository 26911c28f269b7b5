"""
===============================================================================
TARJETA CRC — identity/user_policy.py
===============================================================================

Módulo:
    Política de gestión de usuarios (crear / editar / borrar)

Responsabilidades:
    - Decidir si un actor puede crear un usuario con un rol dado.
    - Decidir si un actor puede editar o borrar a otro usuario.

Colaboradores:
    - identity.access_resolver.ResolvedContext
    - identity.rbac: can_create_role / roles de acceso total
    - crosscutting.config: USER_EDITOR_ROLES
    - application.usecases.users

Reglas:
    - Acceso total puede editar y borrar a cualquiera.
    - Roles editores (USER_EDITOR_ROLES) pueden editar a cualquiera.
    - Si no, solo el creador del usuario puede editarlo o borrarlo.
    - Nadie puede borrar su propia cuenta.
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from ..domain.entities import User
from .access_resolver import ResolvedContext
from .rbac import can_create_role


class UserAction(str, Enum):
    UPDATE = "update"
    DELETE = "delete"


def _editor_roles(editor_roles: Iterable[str] | None) -> frozenset[str]:
    if editor_roles is not None:
        return frozenset(r.strip().lower() for r in editor_roles)
    from ..crosscutting.config import get_settings

    return frozenset(get_settings().get_user_editor_roles())


def can_assign_role(ctx: ResolvedContext, target_role: str) -> bool:
    """Crear usuarios con target_role (jerarquía de roles)."""
    if ctx.full_access:
        return True
    return can_create_role(ctx.role_name, target_role)


def can_manage_user(
    ctx: ResolvedContext,
    target: User,
    action: UserAction,
    *,
    editor_roles: Iterable[str] | None = None,
) -> bool:
    if action == UserAction.DELETE and target.id == ctx.actor_id:
        return False

    if ctx.full_access:
        return True

    if (
        action == UserAction.UPDATE
        and ctx.role_name is not None
        and ctx.role_name.lower() in _editor_roles(editor_roles)
    ):
        return True

    return _is_creator(ctx.actor_id, target.created_by)


def _is_creator(actor_id: int, created_by: Optional[int]) -> bool:
    return created_by is not None and created_by == actor_id
