"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/users.py
============================================================
Class: InMemoryRoleRepository, InMemoryUserRepository

Responsibilities:
  - Almacenar roles y usuarios en memoria (tests / local dev).
  - Implementar LoadActorContext (usuario + rol + permisos).
  - Exponer el bosque de creadores (created_by) como snapshot.

Collaborators:
  - domain.repositories: RoleRepository, UserRepository, ActorRepository
  - domain.user_hierarchy.CreatorForest

Constraints / Notes:
  - Thread-safe: Lock protege los diccionarios internos.
  - Repo puro: NO decide RBAC, sólo persiste/retorna datos.
  - Ids autoincrementales (replica el serial de Postgres).
  - Borrar un usuario deja en NULL el created_by de los usuarios que creó
    (replica ON DELETE SET NULL).
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from threading import Lock
from typing import Dict, Iterable, List, Optional

from ....domain.entities import ActorContext, Role, User
from ....domain.repositories import ActorRepository, RoleRepository, UserRepository
from ....domain.user_hierarchy import CreatorForest


class InMemoryRoleRepository(RoleRepository):
    def __init__(self, roles: Iterable[Role] = ()) -> None:
        self._lock = Lock()
        self._roles: Dict[int, Role] = {r.id: r for r in roles}

    def get_role(self, role_id: int) -> Optional[Role]:
        with self._lock:
            return self._roles.get(role_id)

    def get_role_by_name(self, name: str) -> Optional[Role]:
        with self._lock:
            for role in self._roles.values():
                if role.name == name:
                    return role
        return None

    def list_roles(self) -> List[Role]:
        with self._lock:
            return sorted(self._roles.values(), key=lambda r: r.id)

    def save_role(self, role: Role) -> Role:
        with self._lock:
            self._roles[role.id] = role
            return role


class InMemoryUserRepository(UserRepository, ActorRepository):
    """
    Modelo mental:
    - _users actúa como tabla users (id -> User).
    - El rol se resuelve contra el RoleRepository al cargar el actor.
    """

    def __init__(
        self, role_repository: RoleRepository, users: Iterable[User] = ()
    ) -> None:
        self._lock = Lock()
        self._roles = role_repository
        self._users: Dict[int, User] = {u.id: u for u in users}
        self._next_id = max(self._users, default=0) + 1

    # =========================================================
    # ActorRepository
    # =========================================================
    def load_actor_context(self, user_id: int) -> Optional[ActorContext]:
        user = self.get_user(user_id)
        if user is None:
            return None

        role = self._roles.get_role(user.role_id) if user.role_id is not None else None
        if role is None:
            return ActorContext(user_id=user.id, status=user.status)
        return ActorContext(
            user_id=user.id,
            status=user.status,
            role_name=role.name,
            role_status=role.status,
            permissions=tuple(sorted(role.permissions)),
        )

    # =========================================================
    # UserRepository
    # =========================================================
    def get_user(self, user_id: int) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def list_users(self) -> List[User]:
        with self._lock:
            return sorted(self._users.values(), key=lambda u: u.id)

    def create_user(self, user: User) -> User:
        with self._lock:
            if user.id == 0:
                user = replace(user, id=self._next_id)
            self._users[user.id] = user
            self._next_id = max(self._next_id, user.id + 1)
            return user

    def update_user(self, user: User) -> User:
        with self._lock:
            self._users[user.id] = user
            return user

    def delete_user(self, user_id: int) -> bool:
        with self._lock:
            if self._users.pop(user_id, None) is None:
                return False
            for uid, other in list(self._users.items()):
                if other.created_by == user_id:
                    self._users[uid] = replace(other, created_by=None)
            return True

    def load_creator_forest(self) -> CreatorForest:
        with self._lock:
            return CreatorForest({u.id: u.created_by for u in self._users.values()})
