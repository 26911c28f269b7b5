"""
===============================================================================
TARJETA CRC — domain/territorial_team.py
===============================================================================

Módulo:
    Equipo territorial (jerarquía derivada de los grants, no de created_by)

Responsabilidades:
    - A partir de las raíces de scope del actor, ubicar superiores, pares y
      subordinados por rol y territorio.
    - Deduplicar por categoría y excluir al propio actor.
    - Calcular el nivel territorial del actor (4 = localidad ... 1 = mesa).

Colaboradores:
    - domain.territory.HierarchySnapshot (ancestros y subárboles)
    - application.usecases.users.ListTerritorialTeamUseCase

Reglas (por nivel de cada raíz del actor):
    - mesa:      superiores fiscal_general (escuela), responsable_circuito
                 (circuito), responsable_localidad (localidad); pares
                 fiscal_mesa de la misma escuela; sin subordinados.
    - escuela:   superiores responsable_circuito y responsable_localidad;
                 pares fiscal_general de la escuela; subordinados fiscal_mesa.
    - circuito:  superior responsable_localidad; pares responsable_circuito
                 de la localidad; subordinados fiscal_general y fiscal_mesa.
    - localidad: sin superiores; pares todos los responsable_localidad;
                 subordinados responsable_circuito, fiscal_general, fiscal_mesa.
    - Un usuario "está en" un área si alguno de sus grants cae en el subárbol.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from .entities import ScopeRef, TerritorialLevel
from .territory import HierarchySnapshot

L = TerritorialLevel

# (rol buscado, nivel del área relativa a la raíz; None = todo el territorio)
_Rule = tuple[str, Optional[TerritorialLevel]]

_SUPERIORS: Mapping[TerritorialLevel, tuple[_Rule, ...]] = {
    L.MESA: (
        ("fiscal_general", L.ESCUELA),
        ("responsable_circuito", L.CIRCUITO),
        ("responsable_localidad", L.LOCALIDAD),
    ),
    L.ESCUELA: (
        ("responsable_circuito", L.CIRCUITO),
        ("responsable_localidad", L.LOCALIDAD),
    ),
    L.CIRCUITO: (("responsable_localidad", L.LOCALIDAD),),
    L.LOCALIDAD: (),
}

_SIBLINGS: Mapping[TerritorialLevel, tuple[_Rule, ...]] = {
    L.MESA: (("fiscal_mesa", L.ESCUELA),),
    L.ESCUELA: (("fiscal_general", L.ESCUELA),),
    L.CIRCUITO: (("responsable_circuito", L.LOCALIDAD),),
    L.LOCALIDAD: (("responsable_localidad", None),),
}

_SUBORDINATES: Mapping[TerritorialLevel, tuple[_Rule, ...]] = {
    L.LOCALIDAD: (
        ("responsable_circuito", L.LOCALIDAD),
        ("fiscal_general", L.LOCALIDAD),
        ("fiscal_mesa", L.LOCALIDAD),
    ),
    L.CIRCUITO: (
        ("fiscal_general", L.CIRCUITO),
        ("fiscal_mesa", L.CIRCUITO),
    ),
    L.ESCUELA: (("fiscal_mesa", L.ESCUELA),),
    L.MESA: (),
}


@dataclass(frozen=True, slots=True)
class TerritorialMember:
    """Usuario activo con su rol y las raíces de sus grants válidos."""

    user_id: int
    role_name: Optional[str]
    roots: frozenset[ScopeRef]


@dataclass(frozen=True, slots=True)
class TerritorialTeam:
    superiors: tuple[int, ...] = ()
    siblings: tuple[int, ...] = ()
    subordinates: tuple[int, ...] = ()
    level: int = 0

    @property
    def total(self) -> int:
        return len(self.superiors) + len(self.siblings) + len(self.subordinates)


def territorial_level(roots: Iterable[ScopeRef]) -> int:
    """4 = localidad, 3 = circuito, 2 = escuela, 1 = mesa, 0 = sin grants."""
    depths = [ref.level.depth for ref in roots]
    if not depths:
        return 0
    return len(L) - min(depths)


class _TeamBuilder:
    def __init__(
        self, members: Iterable[TerritorialMember], hierarchy: HierarchySnapshot
    ) -> None:
        self._members = sorted(members, key=lambda m: m.user_id)
        self._hierarchy = hierarchy
        self._subtrees: dict[ScopeRef, frozenset[ScopeRef]] = {}

    def _area(self, root: ScopeRef, level: TerritorialLevel) -> Optional[ScopeRef]:
        for ref in self._hierarchy.ancestors(root):
            if ref.level == level:
                return ref
        return None

    def _subtree(self, area: ScopeRef) -> frozenset[ScopeRef]:
        if area not in self._subtrees:
            self._subtrees[area] = self._hierarchy.subtree(area)
        return self._subtrees[area]

    def _matches(self, role_name: str, area: Optional[ScopeRef]) -> list[int]:
        subtree = self._subtree(area) if area is not None else None
        return [
            m.user_id
            for m in self._members
            if m.role_name == role_name
            and m.roots
            and (subtree is None or not m.roots.isdisjoint(subtree))
        ]

    def collect(
        self,
        actor_id: int,
        roots: list[ScopeRef],
        rules: Mapping[TerritorialLevel, tuple[_Rule, ...]],
    ) -> tuple[int, ...]:
        found: dict[int, None] = {}
        for root in roots:
            for role_name, area_level in rules[root.level]:
                if area_level is None:
                    area = None
                else:
                    area = self._area(root, area_level)
                    if area is None:
                        # R: raíz huérfana; no hay área que consultar.
                        continue
                for user_id in self._matches(role_name, area):
                    if user_id != actor_id:
                        found.setdefault(user_id, None)
        return tuple(found)


def build_territorial_team(
    actor_id: int,
    actor_roots: Iterable[ScopeRef],
    members: Iterable[TerritorialMember],
    hierarchy: HierarchySnapshot,
) -> TerritorialTeam:
    """Superiores, pares y subordinados del actor según sus raíces de scope."""
    roots = sorted(set(actor_roots), key=lambda r: (r.level.depth, r.id))
    if not roots:
        return TerritorialTeam()

    builder = _TeamBuilder(members, hierarchy)
    return TerritorialTeam(
        superiors=builder.collect(actor_id, roots, _SUPERIORS),
        siblings=builder.collect(actor_id, roots, _SIBLINGS),
        subordinates=builder.collect(actor_id, roots, _SUBORDINATES),
        level=territorial_level(roots),
    )
