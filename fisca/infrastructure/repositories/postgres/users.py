"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/users.py
============================================================
Class: PostgresRoleRepository, PostgresUserRepository

Responsibilities:
  - LoadActorContext: usuario + rol + permisos en UNA query (joins
    users -> roles -> role_permissions -> permissions).
  - CRUD de usuarios y snapshot del bosque created_by.
  - Catálogo de roles con sus permisos.

Collaborators:
  - PostgresRepository (helpers de SQL)
  - domain.entities: User, Role, ActorContext, EntityStatus
  - domain.user_hierarchy.CreatorForest

Constraints / Notes:
  - Repositorio puro: NO decide RBAC.
  - Retorna None cuando no existe el recurso.
  - Un permiso borrado no aparece en el join: contribución vacía.
============================================================
"""

from __future__ import annotations

from typing import List, Optional

from ....crosscutting.exceptions import DatabaseError
from ....domain.entities import ActorContext, EntityStatus, Role, User
from ....domain.user_hierarchy import CreatorForest
from .base import PostgresRepository

# R: Lista explícita de columnas para mantener el contrato estable con migraciones.
_USER_COLUMNS = (
    "id, email, role_id, status, created_by, dni, telefono, "
    "first_name, last_name, password"
)


def _status(raw: object) -> EntityStatus:
    try:
        return EntityStatus(str(raw))
    except ValueError as exc:
        raise DatabaseError(f"Estado inválido en DB: {raw!r}") from exc


def _row_to_user(row: tuple) -> User:
    return User(
        id=row[0],
        email=row[1],
        role_id=row[2],
        status=_status(row[3]),
        created_by=row[4],
        dni=row[5],
        telefono=row[6],
        first_name=row[7] or "",
        last_name=row[8] or "",
        password_hash=row[9] or "",
    )


class PostgresRoleRepository(PostgresRepository):
    _SQL_ROLE_BASE = """
        SELECT r.id, r.name, r.display_name, r.status, r.description,
               COALESCE(array_agg(p.name) FILTER (WHERE p.name IS NOT NULL), '{}')
        FROM roles r
        LEFT JOIN role_permissions rp ON rp.role_id = r.id
        LEFT JOIN permissions p ON p.id = rp.permission_id
    """
    _SQL_GET_ROLE = _SQL_ROLE_BASE + " WHERE r.id = %s GROUP BY r.id"
    _SQL_GET_ROLE_BY_NAME = _SQL_ROLE_BASE + " WHERE r.name = %s GROUP BY r.id"
    _SQL_LIST_ROLES = _SQL_ROLE_BASE + " GROUP BY r.id ORDER BY r.id ASC"

    @staticmethod
    def _row_to_role(row: tuple) -> Role:
        return Role(
            id=row[0],
            name=row[1],
            display_name=row[2] or "",
            status=_status(row[3]),
            description=row[4] or "",
            permissions=frozenset(row[5] or ()),
        )

    def get_role(self, role_id: int) -> Optional[Role]:
        row = self._fetchone(
            query=self._SQL_GET_ROLE,
            params=[role_id],
            context_msg="PostgresRoleRepository: Failed to get role",
            extra={"role_id": role_id},
        )
        return self._row_to_role(row) if row else None

    def get_role_by_name(self, name: str) -> Optional[Role]:
        row = self._fetchone(
            query=self._SQL_GET_ROLE_BY_NAME,
            params=[name],
            context_msg="PostgresRoleRepository: Failed to get role by name",
            extra={"role": name},
        )
        return self._row_to_role(row) if row else None

    def list_roles(self) -> List[Role]:
        rows = self._fetchall(
            query=self._SQL_LIST_ROLES,
            params=[],
            context_msg="PostgresRoleRepository: Failed to list roles",
            extra={},
        )
        return [self._row_to_role(row) for row in rows]


class PostgresUserRepository(PostgresRepository):
    _SQL_LOAD_ACTOR = """
        SELECT u.id, u.status, r.name, r.status,
               COALESCE(array_agg(p.name) FILTER (WHERE p.name IS NOT NULL), '{}')
        FROM users u
        LEFT JOIN roles r ON r.id = u.role_id
        LEFT JOIN role_permissions rp ON rp.role_id = r.id
        LEFT JOIN permissions p ON p.id = rp.permission_id
        WHERE u.id = %s
        GROUP BY u.id, r.id
    """
    _SQL_GET_USER = f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s"
    _SQL_LIST_USERS = f"SELECT {_USER_COLUMNS} FROM users ORDER BY id ASC"
    _SQL_INSERT_USER = f"""
        INSERT INTO users (email, role_id, status, created_by, dni, telefono,
                           first_name, last_name, password)
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
        RETURNING {_USER_COLUMNS}
    """
    _SQL_UPDATE_USER = f"""
        UPDATE users
        SET email = %s, role_id = %s, status = %s, created_by = %s, dni = %s,
            telefono = %s, first_name = %s, last_name = %s, updated_at = NOW()
        WHERE id = %s
        RETURNING {_USER_COLUMNS}
    """
    _SQL_DELETE_USER = "DELETE FROM users WHERE id = %s"
    _SQL_CREATOR_LINKS = "SELECT id, created_by FROM users"

    def load_actor_context(self, user_id: int) -> Optional[ActorContext]:
        row = self._fetchone(
            query=self._SQL_LOAD_ACTOR,
            params=[user_id],
            context_msg="PostgresUserRepository: Failed to load actor context",
            extra={"user_id": user_id},
        )
        if row is None:
            return None
        role_name = row[2]
        return ActorContext(
            user_id=row[0],
            status=_status(row[1]),
            role_name=role_name,
            role_status=_status(row[3]) if role_name is not None else None,
            permissions=tuple(sorted(row[4] or ())),
        )

    def get_user(self, user_id: int) -> Optional[User]:
        row = self._fetchone(
            query=self._SQL_GET_USER,
            params=[user_id],
            context_msg="PostgresUserRepository: Failed to get user",
            extra={"user_id": user_id},
        )
        return _row_to_user(row) if row else None

    def list_users(self) -> List[User]:
        rows = self._fetchall(
            query=self._SQL_LIST_USERS,
            params=[],
            context_msg="PostgresUserRepository: Failed to list users",
            extra={},
        )
        return [_row_to_user(row) for row in rows]

    def create_user(self, user: User) -> User:
        row = self._fetchone(
            query=self._SQL_INSERT_USER,
            params=[
                user.email,
                user.role_id,
                user.status.value,
                user.created_by,
                user.dni,
                user.telefono,
                user.first_name,
                user.last_name,
                user.password_hash,
            ],
            context_msg="PostgresUserRepository: Failed to create user",
            extra={"email": user.email},
        )
        if row is None:  # pragma: no cover
            raise DatabaseError("Unexpected: RETURNING clause returned no rows")
        return _row_to_user(row)

    def update_user(self, user: User) -> User:
        row = self._fetchone(
            query=self._SQL_UPDATE_USER,
            params=[
                user.email,
                user.role_id,
                user.status.value,
                user.created_by,
                user.dni,
                user.telefono,
                user.first_name,
                user.last_name,
                user.id,
            ],
            context_msg="PostgresUserRepository: Failed to update user",
            extra={"user_id": user.id},
        )
        if row is None:
            raise DatabaseError(f"Usuario {user.id} no existe")
        return _row_to_user(row)

    def delete_user(self, user_id: int) -> bool:
        removed = self._execute(
            query=self._SQL_DELETE_USER,
            params=[user_id],
            context_msg="PostgresUserRepository: Failed to delete user",
            extra={"user_id": user_id},
        )
        return removed > 0

    def load_creator_forest(self) -> CreatorForest:
        rows = self._fetchall(
            query=self._SQL_CREATOR_LINKS,
            params=[],
            context_msg="PostgresUserRepository: Failed to load creator links",
            extra={},
        )
        return CreatorForest({row[0]: row[1] for row in rows})
