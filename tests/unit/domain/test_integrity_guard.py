"""
Name: Hierarchy Integrity Guard Tests

Responsibilities:
  - Validate creator cycle rejection (A -> B -> C)
  - Validate affiliate edge duplicate / cycle rejection
  - Validate grant targets, dangling detection and unique user fields
"""

import pytest

from fisca.crosscutting.exceptions import (
    ConflictError,
    CycleError,
    DuplicateEdgeError,
    IntegrityViolation,
    UnknownTargetError,
)
from fisca.domain.affiliates import AffiliateGraph
from fisca.domain.entities import AffiliateEdge, TerritorialLevel, User, UserAccessGrant
from fisca.domain.integrity import (
    find_dangling_grants,
    validate_access_grant,
    validate_affiliate_edge,
    validate_creator_assignment,
    validate_unique_user_fields,
)
from fisca.domain.user_hierarchy import CreatorForest

pytestmark = pytest.mark.unit

A, B, C = 1, 2, 3


# =============================================================================
# Creator assignment
# =============================================================================


def test_creator_chain_cycle_is_rejected():
    # R: A creó a B, B creó a C.
    creators = CreatorForest({A: None, B: A, C: B})

    with pytest.raises(CycleError):
        validate_creator_assignment(A, C, creators)


def test_self_creator_is_rejected():
    with pytest.raises(CycleError):
        validate_creator_assignment(A, A, CreatorForest({A: None}))


def test_valid_creator_assignments_pass():
    creators = CreatorForest({A: None, B: A, C: B})
    validate_creator_assignment(C, A, creators)
    validate_creator_assignment(99, C, creators)
    validate_creator_assignment(B, None, creators)


def test_cycle_error_is_integrity_violation():
    assert issubclass(CycleError, IntegrityViolation)
    assert CycleError("x").error_code == "CYCLE"


# =============================================================================
# Affiliate edges
# =============================================================================


def test_reverse_affiliate_edge_is_a_cycle():
    graph = AffiliateGraph([AffiliateEdge(10, 20)])

    with pytest.raises(CycleError):
        validate_affiliate_edge(20, 10, graph)


def test_transitive_affiliate_cycle_is_rejected():
    graph = AffiliateGraph([AffiliateEdge(1, 2), AffiliateEdge(2, 3)])
    with pytest.raises(CycleError):
        validate_affiliate_edge(3, 1, graph)


def test_affiliate_self_edge_is_a_cycle():
    with pytest.raises(CycleError):
        validate_affiliate_edge(5, 5, AffiliateGraph())


def test_duplicate_affiliate_edge_is_rejected():
    graph = AffiliateGraph([AffiliateEdge(1, 2)])
    with pytest.raises(DuplicateEdgeError) as exc:
        validate_affiliate_edge(1, 2, graph)
    assert exc.value.error_code == "DUPLICATE_EDGE"


def test_new_affiliate_edge_passes():
    graph = AffiliateGraph([AffiliateEdge(1, 2)])
    validate_affiliate_edge(1, 3, graph)
    validate_affiliate_edge(3, 2, graph)


# =============================================================================
# Grants
# =============================================================================


def test_grant_to_existing_target_returns_level(hierarchy):
    assert validate_access_grant("circuito", 10, hierarchy) == TerritorialLevel.CIRCUITO
    assert validate_access_grant(TerritorialLevel.MESA, 1000, hierarchy) == TerritorialLevel.MESA


@pytest.mark.parametrize(
    "access_type, target_id",
    [("circuito", 999), ("mesa", 10), ("seccion", 1), ("", 1)],
)
def test_grant_to_unknown_target_is_rejected(hierarchy, access_type, target_id):
    with pytest.raises(UnknownTargetError):
        validate_access_grant(access_type, target_id, hierarchy)


def test_find_dangling_grants(hierarchy):
    ok = UserAccessGrant(user_id=7, access_type="escuela", target_id=100)
    gone = UserAccessGrant(user_id=7, access_type="escuela", target_id=555)
    bad_level = UserAccessGrant(user_id=7, access_type="seccion", target_id=1)

    assert find_dangling_grants([ok, gone, bad_level], hierarchy) == [gone, bad_level]


# =============================================================================
# Unique user fields
# =============================================================================


def _users() -> list[User]:
    return [
        User(id=1, email="a@x", role_id=1, dni="111", telefono="555-1"),
        User(id=2, email="b@x", role_id=1, dni="222", telefono=None),
    ]


def test_duplicate_dni_is_conflict():
    with pytest.raises(ConflictError) as exc:
        validate_unique_user_fields(dni="111", telefono=None, existing_users=_users())
    assert exc.value.field == "dni"


def test_duplicate_phone_is_conflict():
    with pytest.raises(ConflictError) as exc:
        validate_unique_user_fields(dni=None, telefono="555-1", existing_users=_users())
    assert exc.value.field == "telefono"


def test_same_user_is_excluded_on_update():
    validate_unique_user_fields(
        dni="111", telefono="555-1", existing_users=_users(), exclude_user_id=1
    )


def test_empty_fields_never_conflict():
    validate_unique_user_fields(dni="", telefono=None, existing_users=_users())
