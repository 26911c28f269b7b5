"""
===============================================================================
TARJETA CRC — identity/access_resolver.py
===============================================================================

Módulo:
    Motor de resolución de acceso (capability x scope territorial)

Responsabilidades:
    - Resolver el contexto efectivo del actor: permisos del rol + raíces de
      scope (grants activos y válidos, deduplicados).
    - Decidir si el actor puede ejercer una capability sobre un target,
      caminando la cadena de ancestros del target.
    - Distinguir la causa de un rechazo (capability vs scope).
    - Calcular los ids visibles por nivel para filtrar queries.

Colaboradores:
    - domain.entities: ActorContext, UserAccessGrant, ScopeRef, Ciudadano
    - domain.territory.HierarchySnapshot: ancestros / descendientes
    - identity.rbac.is_full_access_role: excepción explícita de acceso total
    - crosscutting.exceptions: Unauthenticated / Forbidden

Contrato:
    - Funciones puras sobre el snapshot recibido: mismos inputs, mismo
      ResolvedContext. Sin estado global (el actor se pasa explícito).
    - Fail-closed: sin rol activo no hay permisos; sin grants no hay scope.
    - Un grant histórico colgante (target borrado, nivel desconocido,
      inactivo) se saltea con WARNING; nunca rompe la resolución.
    - Propagación estrictamente hacia abajo: un grant no da acceso a los
      ancestros de su target.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from ..crosscutting.exceptions import DenialReason, Forbidden, Unauthenticated
from ..crosscutting.logger import logger
from ..domain.entities import (
    ActorContext,
    Ciudadano,
    ScopeRef,
    TerritorialLevel,
    UserAccessGrant,
)
from ..domain.territory import HierarchySnapshot
from .rbac import is_full_access_role

Target = Union[ScopeRef, Ciudadano]


@dataclass(frozen=True, slots=True)
class ResolvedContext:
    """
    Contexto de acceso resuelto para un request.

    - permissions: capabilities del rol (vacío si no hay rol activo).
    - scopes: raíces de subárbol otorgadas (vacío para acceso total).
    - full_access: rol nombrado como acceso total; saltea el chequeo de scope.
    """

    actor_id: int
    role_name: Optional[str]
    permissions: frozenset[str]
    scopes: frozenset[ScopeRef]
    full_access: bool = False

    def has_capability(self, capability: str) -> bool:
        return capability in self.permissions


@dataclass(frozen=True, slots=True)
class AuthorizationDecision:
    """Resultado de evaluate(): allowed + causa del rechazo (si lo hubo)."""

    allowed: bool
    reason: Optional[DenialReason] = None

    def __bool__(self) -> bool:
        return self.allowed


_ALLOW = AuthorizationDecision(allowed=True)
_DENY_CAPABILITY = AuthorizationDecision(allowed=False, reason=DenialReason.CAPABILITY)
_DENY_SCOPE = AuthorizationDecision(allowed=False, reason=DenialReason.SCOPE)


def _target_ref(target: Target) -> ScopeRef:
    if isinstance(target, Ciudadano):
        return target.scope_target
    return target


def _scope_roots(
    actor_id: int, grants: Iterable[UserAccessGrant], hierarchy: HierarchySnapshot
) -> frozenset[ScopeRef]:
    roots: set[ScopeRef] = set()
    for grant in grants:
        if not grant.is_active:
            continue
        level = grant.level
        if level is None or not hierarchy.exists(level, grant.target_id):
            logger.warning(
                "Grant colgante salteado",
                extra={
                    "actor_id": actor_id,
                    "access_type": grant.access_type,
                    "target_id": grant.target_id,
                },
            )
            continue
        roots.add(ScopeRef(level, grant.target_id))
    return frozenset(roots)


def resolve(
    actor: Optional[ActorContext],
    grants: Iterable[UserAccessGrant],
    hierarchy: HierarchySnapshot,
    *,
    full_access_roles: Iterable[str] | None = None,
) -> ResolvedContext:
    """
    Resolve(actor) -> ResolvedContext.

    Raises:
        Unauthenticated: actor desconocido (None) o inactivo.
    """
    if actor is None:
        raise Unauthenticated("Actor desconocido")
    if not actor.is_active:
        raise Unauthenticated(f"Usuario {actor.user_id} inactivo")

    if actor.has_active_role:
        permissions = frozenset(actor.permissions)
        full_access = is_full_access_role(actor.role_name, full_access_roles)
    else:
        permissions = frozenset()
        full_access = False

    # R: el acceso total no se deriva de grants; las raíces no se necesitan.
    scopes = frozenset() if full_access else _scope_roots(actor.user_id, grants, hierarchy)

    ctx = ResolvedContext(
        actor_id=actor.user_id,
        role_name=actor.role_name if actor.has_active_role else None,
        permissions=permissions,
        scopes=scopes,
        full_access=full_access,
    )
    logger.debug(
        "Contexto de acceso resuelto",
        extra={
            "actor_id": ctx.actor_id,
            "role": ctx.role_name,
            "permissions_count": len(ctx.permissions),
            "scopes": sorted(str(s) for s in ctx.scopes),
            "full_access": ctx.full_access,
        },
    )
    return ctx


def in_scope(ctx: ResolvedContext, target: Target, hierarchy: HierarchySnapshot) -> bool:
    """True si el target es una raíz de scope o desciende de alguna."""
    if ctx.full_access:
        return True
    if not ctx.scopes:
        return False
    for ref in hierarchy.ancestors(_target_ref(target)):
        if ref in ctx.scopes:
            return True
    return False


def evaluate(
    ctx: ResolvedContext,
    capability: str,
    target: Optional[Target] = None,
    hierarchy: Optional[HierarchySnapshot] = None,
) -> AuthorizationDecision:
    """
    Authorize(ctx, capability, target) con la causa del rechazo.

    Orden: capability primero, después scope (solo si hay target).
    """
    if not ctx.has_capability(capability):
        decision = _DENY_CAPABILITY
    elif target is None or ctx.full_access:
        return _ALLOW
    elif hierarchy is not None and in_scope(ctx, target, hierarchy):
        return _ALLOW
    elif hierarchy is None and _target_ref(target) in ctx.scopes:
        return _ALLOW
    else:
        decision = _DENY_SCOPE

    logger.warning(
        "Acceso denegado",
        extra={
            "actor_id": ctx.actor_id,
            "capability": capability,
            "target": str(_target_ref(target)) if target is not None else None,
            "reason": decision.reason.value if decision.reason else None,
        },
    )
    return decision


def authorize(
    ctx: ResolvedContext,
    capability: str,
    target: Optional[Target] = None,
    hierarchy: Optional[HierarchySnapshot] = None,
) -> bool:
    return evaluate(ctx, capability, target, hierarchy).allowed


def require(
    ctx: ResolvedContext,
    capability: str,
    target: Optional[Target] = None,
    hierarchy: Optional[HierarchySnapshot] = None,
) -> None:
    """
    Igual que authorize pero levanta Forbidden con la causa.

    Raises:
        Forbidden: reason=CAPABILITY o reason=SCOPE.
    """
    decision = evaluate(ctx, capability, target, hierarchy)
    if decision.allowed:
        return
    if decision.reason == DenialReason.CAPABILITY:
        message = f"Falta el permiso '{capability}'"
    else:
        message = "El recurso está fuera de tu alcance territorial"
    raise Forbidden(message, reason=decision.reason, capability=capability)


# =========================================================
# Filtrado de queries (ids visibles por nivel)
# =========================================================
def visible_ids(
    ctx: ResolvedContext, level: TerritorialLevel, hierarchy: HierarchySnapshot
) -> Optional[frozenset[int]]:
    """
    Ids del nivel pedido cubiertos por el scope.

    None = sin restricción (acceso total). frozenset() = nada visible.
    """
    if ctx.full_access:
        return None

    ids: set[int] = set()
    for root in ctx.scopes:
        if root.level == level:
            ids.add(root.id)
        elif root.level.depth < level.depth:
            ids.update(ref.id for ref in hierarchy.descendants(root, level))
    return frozenset(ids)


def visible_mesa_ids(
    ctx: ResolvedContext, hierarchy: HierarchySnapshot
) -> Optional[frozenset[int]]:
    return visible_ids(ctx, TerritorialLevel.MESA, hierarchy)


def filter_ciudadanos(
    ctx: ResolvedContext,
    ciudadanos: Iterable[Ciudadano],
    hierarchy: HierarchySnapshot,
) -> list[Ciudadano]:
    """Ciudadanos cuya mesa está dentro del scope (todos para acceso total)."""
    mesa_ids = visible_mesa_ids(ctx, hierarchy)
    if mesa_ids is None:
        return list(ciudadanos)
    return [c for c in ciudadanos if c.mesa_id in mesa_ids]
