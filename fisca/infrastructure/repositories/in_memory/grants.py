"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/grants.py
============================================================
Class: InMemoryGrantRepository

Responsibilities:
  - Almacenar grants territoriales (user_access) en memoria.
  - Insert idempotente: el mismo (user, access_type, target) no se duplica.
  - Revocar por usuario / nivel / target y borrar grants puntuales.

Constraints / Notes:
  - Thread-safe: Lock protege la lista interna.
  - Copias defensivas en las lecturas.
  - Orden por inserción (estable para tests).
  - load_raw permite sembrar datos "históricos" (duplicados, colgantes)
    tal como podrían existir en el store.
============================================================
"""

from __future__ import annotations

from threading import Lock
from typing import Iterable, List, Optional

from ....domain.entities import TerritorialLevel, UserAccessGrant
from ....domain.repositories import GrantRepository


def _key(grant: UserAccessGrant) -> tuple[int, str, int]:
    return (grant.user_id, grant.access_type, grant.target_id)


class InMemoryGrantRepository(GrantRepository):
    def __init__(self, grants: Iterable[UserAccessGrant] = ()) -> None:
        self._lock = Lock()
        self._grants: List[UserAccessGrant] = []
        self.load_raw(grants)

    def load_raw(self, grants: Iterable[UserAccessGrant]) -> None:
        """Inserta filas tal cual (sin dedupe), como datos preexistentes."""
        with self._lock:
            self._grants.extend(grants)

    def list_grants(self, user_id: int) -> List[UserAccessGrant]:
        with self._lock:
            return [g for g in self._grants if g.user_id == user_id]

    def list_all_grants(self) -> List[UserAccessGrant]:
        with self._lock:
            return list(self._grants)

    def add_grant(self, grant: UserAccessGrant) -> UserAccessGrant:
        with self._lock:
            for existing in self._grants:
                if _key(existing) == _key(grant) and existing.is_active:
                    return existing
            self._grants.append(grant)
            return grant

    def revoke_grant(
        self,
        user_id: int,
        *,
        access_type: Optional[TerritorialLevel] = None,
        target_id: Optional[int] = None,
    ) -> int:
        if target_id is not None and access_type is None:
            raise ValueError("target_id requiere access_type")

        def matches(g: UserAccessGrant) -> bool:
            if g.user_id != user_id:
                return False
            if access_type is not None and g.access_type != access_type.value:
                return False
            return target_id is None or g.target_id == target_id

        with self._lock:
            kept = [g for g in self._grants if not matches(g)]
            removed = len(self._grants) - len(kept)
            self._grants = kept
            return removed

    def delete_grants(self, grants: List[UserAccessGrant]) -> int:
        doomed = {_key(g) for g in grants}
        with self._lock:
            kept = [g for g in self._grants if _key(g) not in doomed]
            removed = len(self._grants) - len(kept)
            self._grants = kept
            return removed
