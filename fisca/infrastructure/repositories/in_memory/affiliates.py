"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/affiliates.py
============================================================
Class: InMemoryAffiliateRepository

Responsibilities:
  - Almacenar afiliados, aristas de membresía (affiliate_members) y
    pertenencia usuario-afiliado en memoria.
  - Producir AffiliateGraph desde UNA lista de aristas.

Constraints / Notes:
  - Thread-safe: Lock protege el estado interno.
  - Dedupe de aristas (replica el PK compuesto de Postgres).
  - No valida ciclos: eso lo hace el guard antes de escribir.
============================================================
"""

from __future__ import annotations

from threading import Lock
from typing import Dict, Iterable, List, Optional

from ....domain.affiliates import AffiliateGraph
from ....domain.entities import Affiliate, AffiliateEdge, UserAffiliate
from ....domain.repositories import AffiliateRepository


class InMemoryAffiliateRepository(AffiliateRepository):
    def __init__(
        self,
        affiliates: Iterable[Affiliate] = (),
        edges: Iterable[AffiliateEdge] = (),
        memberships: Iterable[UserAffiliate] = (),
    ) -> None:
        self._lock = Lock()
        self._affiliates: Dict[int, Affiliate] = {a.id: a for a in affiliates}
        self._edges: List[AffiliateEdge] = list(dict.fromkeys(edges))
        self._memberships: List[UserAffiliate] = list(dict.fromkeys(memberships))

    def add_affiliate(self, affiliate: Affiliate) -> Affiliate:
        with self._lock:
            self._affiliates[affiliate.id] = affiliate
            return affiliate

    def add_user_affiliate(self, membership: UserAffiliate) -> None:
        with self._lock:
            if membership not in self._memberships:
                self._memberships.append(membership)

    def get_affiliate(self, affiliate_id: int) -> Optional[Affiliate]:
        with self._lock:
            return self._affiliates.get(affiliate_id)

    def list_affiliates(self) -> List[Affiliate]:
        with self._lock:
            return sorted(self._affiliates.values(), key=lambda a: a.id)

    def load_affiliate_graph(self) -> AffiliateGraph:
        with self._lock:
            return AffiliateGraph(list(self._edges))

    def add_member(self, edge: AffiliateEdge) -> None:
        with self._lock:
            if edge not in self._edges:
                self._edges.append(edge)

    def remove_member(self, edge: AffiliateEdge) -> bool:
        with self._lock:
            if edge not in self._edges:
                return False
            self._edges.remove(edge)
            return True

    def list_user_affiliate_ids(self, user_id: int) -> List[int]:
        with self._lock:
            return [m.affiliate_id for m in self._memberships if m.user_id == user_id]
