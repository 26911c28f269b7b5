"""
===============================================================================
TARJETA CRC — domain/affiliates.py
===============================================================================

Módulo:
    Grafo de afiliados (members / parent_affiliates)

Responsabilidades:
    - Mantener UNA lista de aristas como fuente de verdad.
    - Derivar índices forward (members) y reverse (parent_affiliates).
    - Calcular clausuras transitivas y detectar ciclos potenciales.
    - Propagar visibilidad de membresía: un usuario de X ve X y todo lo que
      X contiene transitivamente.

Colaboradores:
    - domain.entities.AffiliateEdge
    - domain.integrity.validate_affiliate_edge
    - application.usecases.affiliates

Notas:
    - Inmutable: agregar/quitar aristas es responsabilidad del store;
      el grafo se reconstruye desde el snapshot.
    - Las caminatas usan conjunto de visitados: terminan aunque el store
      tenga un ciclo corrupto.
===============================================================================
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Mapping

from .entities import AffiliateEdge


def _walk(start: int, adjacency: Mapping[int, tuple[int, ...]]) -> frozenset[int]:
    seen: set[int] = set()
    frontier = list(adjacency.get(start, ()))
    while frontier:
        current = frontier.pop()
        if current in seen:
            continue
        seen.add(current)
        frontier.extend(adjacency.get(current, ()))
    return frozenset(seen)


class AffiliateGraph:
    """Grafo dirigido from -> to ("to es miembro de from")."""

    __slots__ = ("_edges", "_members", "_parents")

    def __init__(self, edges: Iterable[AffiliateEdge] = ()) -> None:
        # R: dedupe preservando orden; el PK compuesto del store ya lo garantiza.
        unique = tuple(dict.fromkeys(edges))

        forward: dict[int, list[int]] = defaultdict(list)
        reverse: dict[int, list[int]] = defaultdict(list)
        for edge in unique:
            forward[edge.from_affiliate_id].append(edge.to_affiliate_id)
            reverse[edge.to_affiliate_id].append(edge.from_affiliate_id)

        self._edges: tuple[AffiliateEdge, ...] = unique
        self._members = {k: tuple(v) for k, v in forward.items()}
        self._parents = {k: tuple(v) for k, v in reverse.items()}

    @property
    def edges(self) -> tuple[AffiliateEdge, ...]:
        return self._edges

    def has_edge(self, from_id: int, to_id: int) -> bool:
        return to_id in self._members.get(from_id, ())

    def members(self, affiliate_id: int) -> tuple[int, ...]:
        """Afiliados contenidos directamente."""
        return self._members.get(affiliate_id, ())

    def parent_affiliates(self, affiliate_id: int) -> tuple[int, ...]:
        """Afiliados que contienen directamente a affiliate_id."""
        return self._parents.get(affiliate_id, ())

    def member_closure(self, affiliate_id: int) -> frozenset[int]:
        """Miembros transitivos (sin incluir al propio afiliado salvo ciclo)."""
        return _walk(affiliate_id, self._members)

    def parent_closure(self, affiliate_id: int) -> frozenset[int]:
        """Contenedores transitivos."""
        return _walk(affiliate_id, self._parents)

    def would_create_cycle(self, from_id: int, to_id: int) -> bool:
        """True si agregar from -> to cerraría un ciclo."""
        if from_id == to_id:
            return True
        return from_id in self.member_closure(to_id)

    def visible_affiliates(self, user_affiliate_ids: Iterable[int]) -> frozenset[int]:
        """Afiliados del usuario + todo lo que contienen transitivamente."""
        visible: set[int] = set()
        for affiliate_id in user_affiliate_ids:
            visible.add(affiliate_id)
            visible |= self.member_closure(affiliate_id)
        return frozenset(visible)

    def can_access_affiliate(
        self, user_affiliate_ids: Iterable[int], affiliate_id: int
    ) -> bool:
        return affiliate_id in self.visible_affiliates(user_affiliate_ids)
