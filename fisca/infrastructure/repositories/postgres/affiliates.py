"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/affiliates.py
============================================================
Class: PostgresAffiliateRepository

Responsibilities:
  - Afiliados (tabla affiliates), aristas (affiliate_members) y
    pertenencia de usuarios (user_affiliates).
  - Construir AffiliateGraph desde UNA lista de aristas.

Constraints / Notes:
  - ON CONFLICT DO NOTHING replica el PK compuesto de la arista.
  - El guard valida ciclos ANTES de llamar a add_member.
============================================================
"""

from __future__ import annotations

from typing import List, Optional

from ....crosscutting.exceptions import DatabaseError
from ....domain.affiliates import AffiliateGraph
from ....domain.entities import Affiliate, AffiliateEdge, EntityStatus
from .base import PostgresRepository


def _row_to_affiliate(row: tuple) -> Affiliate:
    try:
        status = EntityStatus(str(row[2]))
    except ValueError as exc:
        raise DatabaseError(f"Estado inválido en DB: {row[2]!r}") from exc
    return Affiliate(id=row[0], name=row[1], status=status)


class PostgresAffiliateRepository(PostgresRepository):
    _SQL_GET = "SELECT id, name, status FROM affiliates WHERE id = %s"
    _SQL_LIST = "SELECT id, name, status FROM affiliates ORDER BY id ASC"
    _SQL_EDGES = """
        SELECT from_affiliate_id, to_affiliate_id
        FROM affiliate_members
        ORDER BY from_affiliate_id ASC, to_affiliate_id ASC
    """
    _SQL_ADD_MEMBER = """
        INSERT INTO affiliate_members (from_affiliate_id, to_affiliate_id)
        VALUES (%s, %s)
        ON CONFLICT (from_affiliate_id, to_affiliate_id) DO NOTHING
    """
    _SQL_REMOVE_MEMBER = """
        DELETE FROM affiliate_members
        WHERE from_affiliate_id = %s AND to_affiliate_id = %s
    """
    _SQL_USER_AFFILIATES = """
        SELECT affiliate_id FROM user_affiliates
        WHERE user_id = %s
        ORDER BY affiliate_id ASC
    """

    def get_affiliate(self, affiliate_id: int) -> Optional[Affiliate]:
        row = self._fetchone(
            query=self._SQL_GET,
            params=[affiliate_id],
            context_msg="PostgresAffiliateRepository: Failed to get affiliate",
            extra={"affiliate_id": affiliate_id},
        )
        return _row_to_affiliate(row) if row else None

    def list_affiliates(self) -> List[Affiliate]:
        rows = self._fetchall(
            query=self._SQL_LIST,
            params=[],
            context_msg="PostgresAffiliateRepository: Failed to list affiliates",
            extra={},
        )
        return [_row_to_affiliate(row) for row in rows]

    def load_affiliate_graph(self) -> AffiliateGraph:
        rows = self._fetchall(
            query=self._SQL_EDGES,
            params=[],
            context_msg="PostgresAffiliateRepository: Failed to load affiliate edges",
            extra={},
        )
        return AffiliateGraph(AffiliateEdge(row[0], row[1]) for row in rows)

    def add_member(self, edge: AffiliateEdge) -> None:
        self._execute(
            query=self._SQL_ADD_MEMBER,
            params=[edge.from_affiliate_id, edge.to_affiliate_id],
            context_msg="PostgresAffiliateRepository: Failed to add member",
            extra={"from_id": edge.from_affiliate_id, "to_id": edge.to_affiliate_id},
        )

    def remove_member(self, edge: AffiliateEdge) -> bool:
        removed = self._execute(
            query=self._SQL_REMOVE_MEMBER,
            params=[edge.from_affiliate_id, edge.to_affiliate_id],
            context_msg="PostgresAffiliateRepository: Failed to remove member",
            extra={"from_id": edge.from_affiliate_id, "to_id": edge.to_affiliate_id},
        )
        return removed > 0

    def list_user_affiliate_ids(self, user_id: int) -> List[int]:
        rows = self._fetchall(
            query=self._SQL_USER_AFFILIATES,
            params=[user_id],
            context_msg="PostgresAffiliateRepository: Failed to list user affiliates",
            extra={"user_id": user_id},
        )
        return [row[0] for row in rows]
