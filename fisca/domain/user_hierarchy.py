"""
===============================================================================
TARJETA CRC — domain/user_hierarchy.py
===============================================================================

Módulo:
    Bosque de creadores (estructura piramidal de usuarios)

Responsabilidades:
    - Indexar user_id -> created_by y su inverso (usuarios creados).
    - Caminar la cadena de creadores con cota = tamaño de la población.
    - Calcular "mi equipo" (descendientes) y el nivel jerárquico.

Colaboradores:
    - domain.integrity.validate_creator_assignment
    - application.usecases.users (ListTeamUseCase, ReassignCreatorUseCase)

Notas:
    - Los datos pueden venir corruptos (ciclos): toda caminata está acotada
      y usa visitados.
===============================================================================
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterator, Mapping, Optional


class CreatorForest:
    """Snapshot inmutable de la relación created_by."""

    __slots__ = ("_creator_of", "_created")

    def __init__(self, creator_of: Mapping[int, Optional[int]]) -> None:
        created: dict[int, list[int]] = defaultdict(list)
        for user_id, creator_id in creator_of.items():
            if creator_id is not None:
                created[creator_id].append(user_id)

        self._creator_of: dict[int, Optional[int]] = dict(creator_of)
        self._created = {k: tuple(sorted(v)) for k, v in created.items()}

    @property
    def population(self) -> int:
        return len(self._creator_of)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._creator_of

    def created_by(self, user_id: int) -> Optional[int]:
        return self._creator_of.get(user_id)

    def creator_chain(self, user_id: int) -> Iterator[int]:
        """
        Ancestros de user_id (creador, creador del creador, ...).

        La cota de iteraciones es la población: con datos corruptos la
        caminata termina igual.
        """
        current = self._creator_of.get(user_id)
        steps = 0
        limit = self.population
        while current is not None and steps < limit:
            yield current
            current = self._creator_of.get(current)
            steps += 1

    def direct_reports(self, user_id: int) -> tuple[int, ...]:
        return self._created.get(user_id, ())

    def descendants(self, user_id: int) -> list[int]:
        """Usuarios creados directa o indirectamente (BFS, orden por nivel)."""
        seen: set[int] = {user_id}
        ordered: list[int] = []
        queue = list(self.direct_reports(user_id))
        while queue:
            current = queue.pop(0)
            if current in seen:
                continue
            seen.add(current)
            ordered.append(current)
            queue.extend(self.direct_reports(current))
        return ordered

    def hierarchy_level(self, user_id: int) -> int:
        """0 = raíz (sin creador), 1 = creado por una raíz, etc."""
        return sum(1 for _ in self.creator_chain(user_id))
