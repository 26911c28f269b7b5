"""
Name: Access Resolution Engine Tests

Responsibilities:
  - Validate Resolve: permissions = role permissions, grants -> scope roots
  - Validate Authorize: capability first, then downward scope propagation
  - Validate denial reasons, monotonicity, idempotence and fail-closed rules
  - Validate visible ids / ciudadano filtering used by listings
"""

import logging

import pytest

from fisca.crosscutting.exceptions import DenialReason, Forbidden, Unauthenticated
from fisca.domain.entities import (
    ActorContext,
    Ciudadano,
    EntityStatus,
    ScopeRef,
    TerritorialLevel,
    UserAccessGrant,
)
from fisca.identity.access_resolver import (
    authorize,
    evaluate,
    filter_ciudadanos,
    in_scope,
    require,
    resolve,
    visible_ids,
    visible_mesa_ids,
)
from fisca.identity.rbac import default_role_permissions

pytestmark = pytest.mark.unit

L = TerritorialLevel
FULL = ("admin",)

ALL_TARGETS = [
    ScopeRef(L.LOCALIDAD, 1),
    ScopeRef(L.LOCALIDAD, 2),
    ScopeRef(L.CIRCUITO, 10),
    ScopeRef(L.CIRCUITO, 20),
    ScopeRef(L.CIRCUITO, 30),
    ScopeRef(L.ESCUELA, 100),
    ScopeRef(L.ESCUELA, 200),
    ScopeRef(L.ESCUELA, 300),
    ScopeRef(L.MESA, 1000),
    ScopeRef(L.MESA, 2000),
    ScopeRef(L.MESA, 3000),
]


def _actor(
    role: str | None = "fiscal_mesa",
    *,
    user_id: int = 7,
    status: EntityStatus = EntityStatus.ACTIVE,
    role_status: EntityStatus = EntityStatus.ACTIVE,
    permissions: tuple[str, ...] | None = None,
) -> ActorContext:
    if permissions is None:
        permissions = tuple(sorted(default_role_permissions(role))) if role else ()
    return ActorContext(
        user_id=user_id,
        status=status,
        role_name=role,
        role_status=role_status if role else None,
        permissions=permissions,
    )


def _grant(level: TerritorialLevel | str, target_id: int, **kwargs) -> UserAccessGrant:
    access_type = level.value if isinstance(level, TerritorialLevel) else level
    return UserAccessGrant(user_id=7, access_type=access_type, target_id=target_id, **kwargs)


# =============================================================================
# Resolve
# =============================================================================


def test_permissions_equal_role_permissions(hierarchy):
    actor = _actor("responsable_circuito")
    ctx = resolve(actor, [], hierarchy, full_access_roles=FULL)

    assert ctx.permissions == frozenset(actor.permissions)
    assert ctx.role_name == "responsable_circuito"
    assert ctx.full_access is False


def test_scope_roots_are_deduplicated(hierarchy):
    once = resolve(_actor(), [_grant(L.MESA, 1000)], hierarchy, full_access_roles=FULL)
    twice = resolve(
        _actor(),
        [_grant(L.MESA, 1000), _grant(L.MESA, 1000)],
        hierarchy,
        full_access_roles=FULL,
    )
    assert once.scopes == twice.scopes == frozenset({ScopeRef(L.MESA, 1000)})


def test_resolve_is_idempotent(hierarchy):
    actor = _actor()
    grants = [_grant(L.CIRCUITO, 10), _grant(L.ESCUELA, 300)]

    first = resolve(actor, grants, hierarchy, full_access_roles=FULL)
    second = resolve(actor, grants, hierarchy, full_access_roles=FULL)

    assert first == second


def test_unknown_actor_is_unauthenticated(hierarchy):
    with pytest.raises(Unauthenticated):
        resolve(None, [], hierarchy, full_access_roles=FULL)


def test_inactive_actor_is_unauthenticated(hierarchy):
    with pytest.raises(Unauthenticated):
        resolve(_actor(status=EntityStatus.INACTIVE), [], hierarchy, full_access_roles=FULL)


@pytest.mark.parametrize(
    "actor",
    [
        _actor(None),
        _actor("admin", role_status=EntityStatus.INACTIVE),
    ],
    ids=["no-role", "inactive-role"],
)
def test_missing_or_inactive_role_has_no_permissions(hierarchy, actor):
    ctx = resolve(actor, [_grant(L.LOCALIDAD, 1)], hierarchy, full_access_roles=FULL)

    assert ctx.permissions == frozenset()
    assert ctx.full_access is False
    assert not authorize(ctx, "ciudadanos.read", ScopeRef(L.MESA, 1000), hierarchy)


def test_dangling_and_inactive_grants_are_skipped(hierarchy, caplog):
    grants = [
        _grant(L.CIRCUITO, 10),
        _grant(L.MESA, 9999),
        _grant("seccion", 1),
        _grant(L.LOCALIDAD, 2, status=EntityStatus.INACTIVE),
    ]
    with caplog.at_level(logging.WARNING, logger="fisca"):
        ctx = resolve(_actor(), grants, hierarchy, full_access_roles=FULL)

    assert ctx.scopes == frozenset({ScopeRef(L.CIRCUITO, 10)})
    assert sum("Grant colgante" in r.getMessage() for r in caplog.records) == 2


def test_full_access_role_has_no_scope_roots(hierarchy):
    ctx = resolve(_actor("admin"), [_grant(L.MESA, 1000)], hierarchy, full_access_roles=FULL)
    assert ctx.full_access is True
    assert ctx.scopes == frozenset()


# =============================================================================
# Authorize
# =============================================================================


def test_juan_perez_scenario(hierarchy, juan_perez):
    """Circuito grant on C1 + ciudadanos.update: M1 yes, mesa of another circuito no."""
    actor = _actor(permissions=("ciudadanos.update",))
    ctx = resolve(actor, [_grant("circuito", 10)], hierarchy, full_access_roles=FULL)

    juans_mesa = ScopeRef(L.MESA, juan_perez.mesa_id)
    other_mesa = ScopeRef(L.MESA, 2000)
    assert hierarchy.parent_of(L.CIRCUITO, 20) == hierarchy.parent_of(L.CIRCUITO, 10)

    assert authorize(ctx, "ciudadanos.update", juans_mesa, hierarchy) is True
    assert authorize(ctx, "ciudadanos.update", juan_perez, hierarchy) is True
    assert authorize(ctx, "ciudadanos.update", other_mesa, hierarchy) is False


def test_zero_grants_denies_every_territorial_target(hierarchy):
    ctx = resolve(_actor("jefe_campana"), [], hierarchy, full_access_roles=FULL)

    for target in ALL_TARGETS:
        capability = f"{_entity(target.level)}.read"
        assert ctx.has_capability(capability)
        assert authorize(ctx, capability, target, hierarchy) is False


def test_adding_grants_never_revokes_access(hierarchy):
    actor = _actor()
    base = [_grant(L.ESCUELA, 100)]
    more = base + [_grant(L.LOCALIDAD, 2), _grant(L.MESA, 2000)]

    ctx_base = resolve(actor, base, hierarchy, full_access_roles=FULL)
    ctx_more = resolve(actor, more, hierarchy, full_access_roles=FULL)

    for target in ALL_TARGETS:
        if authorize(ctx_base, "mesas.read", target, hierarchy):
            assert authorize(ctx_more, "mesas.read", target, hierarchy)


def test_propagation_is_strictly_downward(hierarchy):
    ctx = resolve(_actor(), [_grant(L.ESCUELA, 100)], hierarchy, full_access_roles=FULL)

    assert in_scope(ctx, ScopeRef(L.ESCUELA, 100), hierarchy)
    assert in_scope(ctx, ScopeRef(L.MESA, 1000), hierarchy)
    assert not in_scope(ctx, ScopeRef(L.CIRCUITO, 10), hierarchy)
    assert not in_scope(ctx, ScopeRef(L.LOCALIDAD, 1), hierarchy)


def test_capability_failure_reason(hierarchy):
    ctx = resolve(_actor(), [_grant(L.MESA, 1000)], hierarchy, full_access_roles=FULL)
    decision = evaluate(ctx, "mesas.delete", ScopeRef(L.MESA, 1000), hierarchy)

    assert not decision
    assert decision.reason == DenialReason.CAPABILITY


def test_scope_failure_reason(hierarchy):
    ctx = resolve(_actor(), [_grant(L.MESA, 1000)], hierarchy, full_access_roles=FULL)
    decision = evaluate(ctx, "mesas.read", ScopeRef(L.MESA, 3000), hierarchy)

    assert decision.allowed is False
    assert decision.reason == DenialReason.SCOPE


def test_capability_is_checked_before_scope(hierarchy):
    ctx = resolve(_actor(), [], hierarchy, full_access_roles=FULL)
    decision = evaluate(ctx, "mesas.delete", ScopeRef(L.MESA, 3000), hierarchy)
    assert decision.reason == DenialReason.CAPABILITY


def test_no_target_checks_capability_only(hierarchy):
    ctx = resolve(_actor(), [], hierarchy, full_access_roles=FULL)
    assert authorize(ctx, "mesas.read")
    assert not authorize(ctx, "mesas.delete")


def test_admin_bypasses_scope_but_not_capability(hierarchy):
    ctx = resolve(
        _actor("admin", permissions=("mesas.read",)), [], hierarchy, full_access_roles=FULL
    )

    for target in ALL_TARGETS:
        if target.level == L.MESA:
            assert authorize(ctx, "mesas.read", target, hierarchy)
    assert evaluate(ctx, "mesas.delete", ScopeRef(L.MESA, 1000), hierarchy).reason == (
        DenialReason.CAPABILITY
    )


def test_without_hierarchy_only_exact_roots_match(hierarchy):
    ctx = resolve(_actor(), [_grant(L.ESCUELA, 100)], hierarchy, full_access_roles=FULL)
    assert authorize(ctx, "escuelas.read", ScopeRef(L.ESCUELA, 100))
    assert not authorize(ctx, "mesas.read", ScopeRef(L.MESA, 1000))


def test_require_raises_forbidden_with_reason(hierarchy):
    ctx = resolve(_actor(), [_grant(L.MESA, 1000)], hierarchy, full_access_roles=FULL)

    with pytest.raises(Forbidden) as exc:
        require(ctx, "mesas.read", ScopeRef(L.MESA, 2000), hierarchy)
    assert exc.value.reason == DenialReason.SCOPE

    with pytest.raises(Forbidden) as exc:
        require(ctx, "users.delete", None, hierarchy)
    assert exc.value.reason == DenialReason.CAPABILITY
    assert exc.value.capability == "users.delete"

    require(ctx, "mesas.read", ScopeRef(L.MESA, 1000), hierarchy)


def test_denial_is_logged(hierarchy, caplog):
    ctx = resolve(_actor(), [], hierarchy, full_access_roles=FULL)
    with caplog.at_level(logging.WARNING, logger="fisca"):
        evaluate(ctx, "mesas.read", ScopeRef(L.MESA, 1000), hierarchy)

    records = [r for r in caplog.records if r.getMessage() == "Acceso denegado"]
    assert len(records) == 1
    assert records[0].reason == "scope"
    assert records[0].target == "mesa:1000"


# =============================================================================
# Query filtering
# =============================================================================


def test_visible_ids_expand_higher_roots(hierarchy):
    ctx = resolve(
        _actor(),
        [_grant(L.CIRCUITO, 10), _grant(L.MESA, 3000)],
        hierarchy,
        full_access_roles=FULL,
    )

    assert visible_ids(ctx, L.MESA, hierarchy) == frozenset({1000, 3000})
    assert visible_ids(ctx, L.CIRCUITO, hierarchy) == frozenset({10})
    # R: un grant de mesa no da visibilidad hacia arriba.
    assert visible_ids(ctx, L.ESCUELA, hierarchy) == frozenset({100})
    assert visible_ids(ctx, L.LOCALIDAD, hierarchy) == frozenset()


def test_visible_ids_unrestricted_for_full_access(hierarchy):
    ctx = resolve(_actor("admin"), [], hierarchy, full_access_roles=FULL)
    assert visible_mesa_ids(ctx, hierarchy) is None


def test_filter_ciudadanos(hierarchy, juan_perez):
    others = [
        Ciudadano(id=2, dni="2", mesa_id=2000),
        Ciudadano(id=3, dni="3", mesa_id=3000),
    ]
    ctx = resolve(_actor(), [_grant(L.CIRCUITO, 10)], hierarchy, full_access_roles=FULL)
    assert filter_ciudadanos(ctx, [juan_perez, *others], hierarchy) == [juan_perez]

    admin = resolve(_actor("admin"), [], hierarchy, full_access_roles=FULL)
    assert len(filter_ciudadanos(admin, [juan_perez, *others], hierarchy)) == 3


def _entity(level: TerritorialLevel) -> str:
    return {
        L.LOCALIDAD: "localidades",
        L.CIRCUITO: "circuitos",
        L.ESCUELA: "escuelas",
        L.MESA: "mesas",
    }[level]
