"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/territory.py
============================================================
Class: InMemoryHierarchyRepository

Responsibilities:
  - Almacenar el bosque territorial y los ciudadanos en memoria.
  - Producir HierarchySnapshot inmutables (LoadHierarchySnapshot).
  - Permitir borrar nodos para ejercitar la limpieza de grants colgantes.

Constraints / Notes:
  - Thread-safe: Lock protege los diccionarios internos.
  - Borrar un nodo NO borra a sus hijos (quedan huérfanos, visibles con
    HierarchySnapshot.find_orphans).
============================================================
"""

from __future__ import annotations

from threading import Lock
from typing import Dict, Iterable, List, Optional

from ....domain.entities import Ciudadano, ScopeRef, TerritorialLevel, TerritorialNode
from ....domain.repositories import HierarchyRepository
from ....domain.territory import HierarchySnapshot


class InMemoryHierarchyRepository(HierarchyRepository):
    def __init__(
        self,
        nodes: Iterable[TerritorialNode] = (),
        ciudadanos: Iterable[Ciudadano] = (),
    ) -> None:
        self._lock = Lock()
        self._nodes: Dict[ScopeRef, TerritorialNode] = {n.ref: n for n in nodes}
        self._ciudadanos: Dict[int, Ciudadano] = {c.id: c for c in ciudadanos}

    def add_node(self, node: TerritorialNode) -> TerritorialNode:
        with self._lock:
            self._nodes[node.ref] = node
            return node

    def delete_node(self, level: TerritorialLevel, node_id: int) -> bool:
        with self._lock:
            return self._nodes.pop(ScopeRef(level, node_id), None) is not None

    def add_ciudadano(self, ciudadano: Ciudadano) -> Ciudadano:
        with self._lock:
            self._ciudadanos[ciudadano.id] = ciudadano
            return ciudadano

    def load_hierarchy_snapshot(self) -> HierarchySnapshot:
        with self._lock:
            return HierarchySnapshot(list(self._nodes.values()))

    def get_ciudadano(self, ciudadano_id: int) -> Optional[Ciudadano]:
        with self._lock:
            return self._ciudadanos.get(ciudadano_id)

    def list_ciudadanos(self) -> List[Ciudadano]:
        with self._lock:
            return sorted(self._ciudadanos.values(), key=lambda c: c.id)
