"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/grants.py
============================================================
Class: PostgresGrantRepository

Responsibilities:
  - LoadGrants(userID) sobre la tabla user_access.
  - Insert idempotente (ON CONFLICT DO NOTHING sobre
    (user_id, access_type, target_id)).
  - Revocar / borrar grants puntuales.

Constraints / Notes:
  - El motor filtra por status; acá se devuelven todas las filas.
  - delete_grants corre en UNA transacción (todo o nada).
============================================================
"""

from __future__ import annotations

from typing import List, Optional

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....domain.entities import EntityStatus, TerritorialLevel, UserAccessGrant
from .base import PostgresRepository

_GRANT_COLUMNS = "user_id, access_type, target_id, status"


def _row_to_grant(row: tuple) -> UserAccessGrant:
    try:
        status = EntityStatus(str(row[3]))
    except ValueError:
        # R: status desconocido = no activo (fail-closed).
        status = EntityStatus.INACTIVE
    return UserAccessGrant(
        user_id=row[0], access_type=row[1], target_id=row[2], status=status
    )


class PostgresGrantRepository(PostgresRepository):
    _SQL_LIST_GRANTS = f"""
        SELECT {_GRANT_COLUMNS}
        FROM user_access
        WHERE user_id = %s
        ORDER BY id ASC
    """
    _SQL_LIST_ALL = f"SELECT {_GRANT_COLUMNS} FROM user_access ORDER BY id ASC"
    _SQL_INSERT = f"""
        INSERT INTO user_access (user_id, access_type, target_id, status)
        VALUES (%s, %s, %s, %s)
        ON CONFLICT (user_id, access_type, target_id) DO NOTHING
    """
    _SQL_REVOKE = """
        DELETE FROM user_access
        WHERE user_id = %s
          AND (%s::text IS NULL OR access_type = %s)
          AND (%s::int IS NULL OR target_id = %s)
    """
    _SQL_DELETE_ONE = """
        DELETE FROM user_access
        WHERE user_id = %s AND access_type = %s AND target_id = %s
    """

    def list_grants(self, user_id: int) -> List[UserAccessGrant]:
        rows = self._fetchall(
            query=self._SQL_LIST_GRANTS,
            params=[user_id],
            context_msg="PostgresGrantRepository: Failed to list grants",
            extra={"user_id": user_id},
        )
        return [_row_to_grant(row) for row in rows]

    def list_all_grants(self) -> List[UserAccessGrant]:
        rows = self._fetchall(
            query=self._SQL_LIST_ALL,
            params=[],
            context_msg="PostgresGrantRepository: Failed to list all grants",
            extra={},
        )
        return [_row_to_grant(row) for row in rows]

    def add_grant(self, grant: UserAccessGrant) -> UserAccessGrant:
        self._execute(
            query=self._SQL_INSERT,
            params=[grant.user_id, grant.access_type, grant.target_id, grant.status.value],
            context_msg="PostgresGrantRepository: Failed to add grant",
            extra={"user_id": grant.user_id, "access_type": grant.access_type},
        )
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
        level = access_type.value if access_type is not None else None
        return self._execute(
            query=self._SQL_REVOKE,
            params=[user_id, level, level, target_id, target_id],
            context_msg="PostgresGrantRepository: Failed to revoke grants",
            extra={"user_id": user_id, "access_type": level, "target_id": target_id},
        )

    def delete_grants(self, grants: List[UserAccessGrant]) -> int:
        if not grants:
            return 0
        removed = 0
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                with conn.transaction():
                    for g in grants:
                        result = conn.execute(
                            self._SQL_DELETE_ONE, (g.user_id, g.access_type, g.target_id)
                        )
                        removed += result.rowcount or 0
        except Exception as exc:
            logger.exception(
                "PostgresGrantRepository: Failed to delete grants",
                extra={"error": str(exc), "count": len(grants)},
            )
            raise DatabaseError(f"Failed to delete grants: {exc}") from exc
        return removed
