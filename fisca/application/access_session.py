"""
===============================================================================
TARJETA CRC — application/access_session.py
===============================================================================

Módulo:
    Sesión de acceso por request (cache de ResolvedContext + snapshot)

Responsabilidades:
    - Cargar el snapshot territorial UNA vez por request (lazy).
    - Memoizar ResolvedContext por actor durante el request.
    - Exponer resolve / authorize / require / visible_ids sobre los puertos.

Colaboradores:
    - domain.repositories: ActorRepository, GrantRepository, HierarchyRepository
    - identity.access_resolver: núcleo puro

Notas:
    - Vida = un request. Nunca se comparte entre requests: grants y roles
      pueden cambiar entre requests y la sesión no tiene invalidación.
    - La dependency de FastAPI la guarda en request.state.
===============================================================================
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..domain.entities import Ciudadano, TerritorialLevel
from ..domain.repositories import ActorRepository, GrantRepository, HierarchyRepository
from ..domain.territory import HierarchySnapshot
from ..identity import access_resolver
from ..identity.access_resolver import AuthorizationDecision, ResolvedContext, Target


class AccessSession:
    """Fachada request-scoped sobre el motor de acceso."""

    def __init__(
        self,
        *,
        actor_repository: ActorRepository,
        grant_repository: GrantRepository,
        hierarchy_repository: HierarchyRepository,
        full_access_roles: Iterable[str] | None = None,
    ) -> None:
        self._actors = actor_repository
        self._grants = grant_repository
        self._hierarchy_repo = hierarchy_repository
        self._full_access_roles = (
            tuple(full_access_roles) if full_access_roles is not None else None
        )
        self._hierarchy: Optional[HierarchySnapshot] = None
        self._contexts: dict[int, ResolvedContext] = {}

    @property
    def hierarchy(self) -> HierarchySnapshot:
        if self._hierarchy is None:
            self._hierarchy = self._hierarchy_repo.load_hierarchy_snapshot()
        return self._hierarchy

    def resolve(self, actor_id: int) -> ResolvedContext:
        """Resolve(actorID); levanta Unauthenticated si el actor no es válido."""
        cached = self._contexts.get(actor_id)
        if cached is not None:
            return cached

        actor = self._actors.load_actor_context(actor_id)
        grants = self._grants.list_grants(actor_id) if actor is not None else []
        ctx = access_resolver.resolve(
            actor,
            grants,
            self.hierarchy,
            full_access_roles=self._full_access_roles,
        )
        self._contexts[actor_id] = ctx
        return ctx

    def evaluate(
        self, actor_id: int, capability: str, target: Optional[Target] = None
    ) -> AuthorizationDecision:
        ctx = self.resolve(actor_id)
        return access_resolver.evaluate(ctx, capability, target, self.hierarchy)

    def authorize(
        self, actor_id: int, capability: str, target: Optional[Target] = None
    ) -> bool:
        return self.evaluate(actor_id, capability, target).allowed

    def require(
        self, actor_id: int, capability: str, target: Optional[Target] = None
    ) -> ResolvedContext:
        """Levanta Forbidden (con reason) o devuelve el contexto resuelto."""
        ctx = self.resolve(actor_id)
        access_resolver.require(ctx, capability, target, self.hierarchy)
        return ctx

    def visible_ids(
        self, actor_id: int, level: TerritorialLevel
    ) -> Optional[frozenset[int]]:
        return access_resolver.visible_ids(self.resolve(actor_id), level, self.hierarchy)

    def filter_ciudadanos(
        self, actor_id: int, ciudadanos: Iterable[Ciudadano]
    ) -> list[Ciudadano]:
        return access_resolver.filter_ciudadanos(
            self.resolve(actor_id), ciudadanos, self.hierarchy
        )
