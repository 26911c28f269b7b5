"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/territory.py
============================================================
Class: PostgresHierarchyRepository

Responsibilities:
  - LoadHierarchySnapshot: leer localidades, circuitos, escuelas y mesas
    (id + parent_id + nombre) y construir el snapshot inmutable.
  - Lookup de ciudadanos (mesa asignada).

Constraints / Notes:
  - Las cuatro lecturas corren en UNA conexión y UNA transacción de solo
    lectura para obtener un snapshot consistente.
============================================================
"""

from __future__ import annotations

from typing import List, Optional

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....domain.entities import Ciudadano
from ....domain.territory import HierarchySnapshot
from .base import PostgresRepository

_CIUDADANO_COLUMNS = "id, dni, mesa_id, nombre, apellido"


def _row_to_ciudadano(row: tuple) -> Ciudadano:
    return Ciudadano(
        id=row[0], dni=row[1], mesa_id=row[2], nombre=row[3] or "", apellido=row[4] or ""
    )


class PostgresHierarchyRepository(PostgresRepository):
    _SQL_LOCALIDADES = "SELECT id, nombre FROM localidades"
    _SQL_CIRCUITOS = "SELECT id, localidad_id, nombre FROM circuitos"
    _SQL_ESCUELAS = "SELECT id, circuito_id, nombre FROM escuelas"
    _SQL_MESAS = "SELECT id, escuela_id, CAST(numero AS text) FROM mesas"
    _SQL_GET_CIUDADANO = f"SELECT {_CIUDADANO_COLUMNS} FROM ciudadanos WHERE id = %s"
    _SQL_LIST_CIUDADANOS = f"SELECT {_CIUDADANO_COLUMNS} FROM ciudadanos ORDER BY id ASC"

    def load_hierarchy_snapshot(self) -> HierarchySnapshot:
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                with conn.transaction():
                    localidades = conn.execute(self._SQL_LOCALIDADES).fetchall()
                    circuitos = conn.execute(self._SQL_CIRCUITOS).fetchall()
                    escuelas = conn.execute(self._SQL_ESCUELAS).fetchall()
                    mesas = conn.execute(self._SQL_MESAS).fetchall()
        except Exception as exc:
            logger.exception(
                "PostgresHierarchyRepository: Failed to load hierarchy snapshot",
                extra={"error": str(exc)},
            )
            raise DatabaseError(f"Failed to load hierarchy snapshot: {exc}") from exc

        return HierarchySnapshot.from_rows(
            localidades=[(r[0], r[1] or "") for r in localidades],
            circuitos=[(r[0], r[1], r[2] or "") for r in circuitos],
            escuelas=[(r[0], r[1], r[2] or "") for r in escuelas],
            mesas=[(r[0], r[1], r[2] or "") for r in mesas],
        )

    def get_ciudadano(self, ciudadano_id: int) -> Optional[Ciudadano]:
        row = self._fetchone(
            query=self._SQL_GET_CIUDADANO,
            params=[ciudadano_id],
            context_msg="PostgresHierarchyRepository: Failed to get ciudadano",
            extra={"ciudadano_id": ciudadano_id},
        )
        return _row_to_ciudadano(row) if row else None

    def list_ciudadanos(self) -> List[Ciudadano]:
        rows = self._fetchall(
            query=self._SQL_LIST_CIUDADANOS,
            params=[],
            context_msg="PostgresHierarchyRepository: Failed to list ciudadanos",
            extra={},
        )
        return [_row_to_ciudadano(row) for row in rows]
