"""
Name: User Management Policy Tests

Responsibilities:
  - Validate who can update / delete a user (creator, editor roles, full access)
  - Validate role assignment against the creation hierarchy
"""

import pytest

from fisca.domain.entities import User
from fisca.identity.access_resolver import ResolvedContext
from fisca.identity.user_policy import UserAction, can_assign_role, can_manage_user

pytestmark = pytest.mark.unit


def _ctx(actor_id: int, role: str | None, *, full_access: bool = False) -> ResolvedContext:
    return ResolvedContext(
        actor_id=actor_id,
        role_name=role,
        permissions=frozenset(),
        scopes=frozenset(),
        full_access=full_access,
    )


def _user(user_id: int, created_by: int | None) -> User:
    return User(id=user_id, email=f"{user_id}@x", role_id=7, created_by=created_by)


def test_creator_can_update_and_delete():
    ctx = _ctx(5, "fiscal_general")
    target = _user(9, created_by=5)
    assert can_manage_user(ctx, target, UserAction.UPDATE, editor_roles=())
    assert can_manage_user(ctx, target, UserAction.DELETE, editor_roles=())


def test_non_creator_is_denied():
    ctx = _ctx(5, "fiscal_general")
    target = _user(9, created_by=6)
    assert not can_manage_user(ctx, target, UserAction.UPDATE, editor_roles=())
    assert not can_manage_user(ctx, target, UserAction.DELETE, editor_roles=())


def test_editor_role_updates_anyone_but_only_deletes_own():
    ctx = _ctx(5, "responsable_localidad")
    target = _user(9, created_by=6)
    editors = ("responsable_localidad",)
    assert can_manage_user(ctx, target, UserAction.UPDATE, editor_roles=editors)
    assert not can_manage_user(ctx, target, UserAction.DELETE, editor_roles=editors)


def test_editor_roles_default_from_settings():
    ctx = _ctx(5, "responsable_localidad")
    assert can_manage_user(ctx, _user(9, created_by=None), UserAction.UPDATE)


def test_full_access_manages_anyone_except_deleting_self():
    ctx = _ctx(1, "admin", full_access=True)
    assert can_manage_user(ctx, _user(9, created_by=None), UserAction.DELETE)
    assert can_manage_user(ctx, _user(1, created_by=None), UserAction.UPDATE)
    assert not can_manage_user(ctx, _user(1, created_by=None), UserAction.DELETE)


def test_can_assign_role():
    assert can_assign_role(_ctx(1, "admin", full_access=True), "jefe_campana")
    assert can_assign_role(_ctx(5, "fiscal_general"), "fiscal_mesa")
    assert not can_assign_role(_ctx(5, "fiscal_general"), "responsable_circuito")
    assert not can_assign_role(_ctx(5, None), "fiscal_mesa")
