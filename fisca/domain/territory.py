"""
===============================================================================
TARJETA CRC — domain/territory.py
===============================================================================

Módulo:
    Snapshot del bosque territorial (Localidad -> Circuito -> Escuela -> Mesa)

Responsabilidades:
    - Indexar nodos por (nivel, id) con punteros a padre e hijos.
    - Responder ParentOf / ancestros / descendientes / subárbol.
    - Reportar huérfanos (padre inexistente) para auditoría de integridad.

Colaboradores:
    - domain.entities: TerritorialNode, TerritorialLevel, ScopeRef
    - identity.access_resolver: caminata de ancestros y expansión de scope
    - domain.integrity: existencia de targets de grants

Notas:
    - Inmutable: se construye una vez por request y no se muta.
    - La caminata de ancestros está acotada por la cantidad de niveles,
      así que datos corruptos no pueden colgarla.
===============================================================================
"""

from __future__ import annotations

from collections import defaultdict
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from .entities import ScopeRef, TerritorialLevel, TerritorialNode

_MAX_DEPTH = len(TerritorialLevel)


class HierarchySnapshot:
    """
    Vista indexada e inmutable del bosque territorial.

    Modelo mental:
      - _nodes: ScopeRef -> TerritorialNode
      - _children: ScopeRef(padre) -> tuple[ScopeRef(hijo), ...]
    """

    __slots__ = ("_nodes", "_children")

    def __init__(self, nodes: Iterable[TerritorialNode] = ()) -> None:
        by_ref: dict[ScopeRef, TerritorialNode] = {}
        for node in nodes:
            by_ref[node.ref] = node

        children: dict[ScopeRef, list[ScopeRef]] = defaultdict(list)
        for ref, node in by_ref.items():
            parent = node.parent_ref
            if parent is not None and parent in by_ref:
                children[parent].append(ref)

        self._nodes: Mapping[ScopeRef, TerritorialNode] = MappingProxyType(by_ref)
        self._children: Mapping[ScopeRef, tuple[ScopeRef, ...]] = MappingProxyType(
            {parent: tuple(sorted(kids)) for parent, kids in children.items()}
        )

    @classmethod
    def from_rows(
        cls,
        *,
        localidades: Iterable[tuple[int, str]] = (),
        circuitos: Iterable[tuple[int, int, str]] = (),
        escuelas: Iterable[tuple[int, int, str]] = (),
        mesas: Iterable[tuple[int, int, str]] = (),
    ) -> "HierarchySnapshot":
        """
        Construye el snapshot desde filas planas.

        Formato:
          - localidades: (id, name)
          - resto: (id, parent_id, name)
        """
        nodes: list[TerritorialNode] = [
            TerritorialNode(TerritorialLevel.LOCALIDAD, lid, None, name)
            for lid, name in localidades
        ]
        for level, rows in (
            (TerritorialLevel.CIRCUITO, circuitos),
            (TerritorialLevel.ESCUELA, escuelas),
            (TerritorialLevel.MESA, mesas),
        ):
            nodes.extend(
                TerritorialNode(level, node_id, parent_id, name)
                for node_id, parent_id, name in rows
            )
        return cls(nodes)

    # =========================================================
    # Lookups
    # =========================================================
    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, ref: object) -> bool:
        return ref in self._nodes

    def nodes(self, level: TerritorialLevel | None = None) -> Iterator[TerritorialNode]:
        for node in self._nodes.values():
            if level is None or node.level == level:
                yield node

    def get(self, level: TerritorialLevel, node_id: int) -> Optional[TerritorialNode]:
        return self._nodes.get(ScopeRef(level, node_id))

    def exists(self, level: TerritorialLevel, node_id: int) -> bool:
        return ScopeRef(level, node_id) in self._nodes

    def parent_of(self, level: TerritorialLevel, node_id: int) -> Optional[ScopeRef]:
        """
        Contrato ParentOf(level, id).

        Devuelve None si el nodo no existe, es raíz, o su padre no está en
        el snapshot (huérfano).
        """
        node = self._nodes.get(ScopeRef(level, node_id))
        if node is None:
            return None
        parent = node.parent_ref
        if parent is None or parent not in self._nodes:
            return None
        return parent

    def ancestors(self, ref: ScopeRef) -> Iterator[ScopeRef]:
        """
        Cadena ref -> padre -> abuelo ... (incluye ref).

        Un nodo ausente del snapshot produce solo a sí mismo.
        """
        current: Optional[ScopeRef] = ref
        steps = 0
        while current is not None and steps < _MAX_DEPTH:
            yield current
            current = self.parent_of(current.level, current.id)
            steps += 1

    def children(self, ref: ScopeRef) -> tuple[ScopeRef, ...]:
        return self._children.get(ref, ())

    def subtree(self, root: ScopeRef) -> frozenset[ScopeRef]:
        """Todos los nodos del subárbol con raíz en root (incluida)."""
        if root not in self._nodes:
            return frozenset()
        collected: set[ScopeRef] = set()
        frontier = [root]
        while frontier:
            ref = frontier.pop()
            if ref in collected:
                continue
            collected.add(ref)
            frontier.extend(self._children.get(ref, ()))
        return frozenset(collected)

    def descendants(
        self, root: ScopeRef, level: TerritorialLevel | None = None
    ) -> frozenset[ScopeRef]:
        """Descendientes estrictos de root, opcionalmente filtrados por nivel."""
        return frozenset(
            ref
            for ref in self.subtree(root)
            if ref != root and (level is None or ref.level == level)
        )

    # =========================================================
    # Integridad
    # =========================================================
    def find_orphans(self) -> list[TerritorialNode]:
        """
        Nodos no-raíz cuyo padre falta en el snapshot.

        Orden determinístico (nivel, id) para reportes estables.
        """
        orphans = [
            node
            for node in self._nodes.values()
            if node.level != TerritorialLevel.LOCALIDAD
            and (node.parent_ref is None or node.parent_ref not in self._nodes)
        ]
        orphans.sort(key=lambda n: (n.level.depth, n.id))
        return orphans
