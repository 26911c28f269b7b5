"""
Name: Affiliate Use Case Tests

Responsibilities:
  - Validate add / remove member edges with guard checks
  - Validate membership-based visibility for non full-access actors
"""

import pytest

from fisca.application.usecases.access import AccessErrorCode
from fisca.application.usecases.affiliates import (
    AddAffiliateMemberUseCase,
    ListVisibleAffiliatesUseCase,
    RemoveAffiliateMemberUseCase,
)
from fisca.crosscutting.exceptions import DenialReason
from fisca.domain.entities import AffiliateEdge, Role, UserAffiliate

pytestmark = pytest.mark.unit

ADMIN_ID = 1
COORD_ID = 5  # miembro del afiliado 2
READER_ID = 6  # fiscal_mesa, sin affiliates.update


@pytest.fixture
def graph_world(world):
    world.roles.save_role(
        Role(
            id=9,
            name="coordinador",
            permissions=frozenset({"affiliates.read", "affiliates.update"}),
        )
    )
    world.add_user(COORD_ID, "coordinador")
    world.add_user(READER_ID, "fiscal_mesa")
    world.affiliates.add_member(AffiliateEdge(1, 2))
    world.affiliates.add_member(AffiliateEdge(2, 3))
    world.affiliates.add_user_affiliate(UserAffiliate(user_id=COORD_ID, affiliate_id=2))
    return world


def _add(world) -> AddAffiliateMemberUseCase:
    return AddAffiliateMemberUseCase(affiliate_repository=world.affiliates)


def _remove(world) -> RemoveAffiliateMemberUseCase:
    return RemoveAffiliateMemberUseCase(affiliate_repository=world.affiliates)


def test_add_member(graph_world):
    result = _add(graph_world).execute(graph_world.session(), ADMIN_ID, from_id=3, to_id=4)

    assert result.error is None
    assert result.edge == AffiliateEdge(3, 4)
    assert graph_world.affiliates.load_affiliate_graph().has_edge(3, 4)


def test_add_member_closing_a_cycle_is_conflict(graph_world):
    result = _add(graph_world).execute(graph_world.session(), ADMIN_ID, from_id=3, to_id=1)

    assert result.error.code == AccessErrorCode.CONFLICT
    assert result.error.violation == "CYCLE"
    assert not graph_world.affiliates.load_affiliate_graph().has_edge(3, 1)


def test_add_duplicate_member_is_conflict(graph_world):
    result = _add(graph_world).execute(graph_world.session(), ADMIN_ID, from_id=1, to_id=2)
    assert result.error.code == AccessErrorCode.CONFLICT
    assert result.error.violation == "DUPLICATE_EDGE"


def test_add_member_unknown_affiliate(graph_world):
    result = _add(graph_world).execute(graph_world.session(), ADMIN_ID, from_id=1, to_id=99)
    assert result.error.code == AccessErrorCode.NOT_FOUND


def test_add_member_inside_own_affiliates(graph_world):
    result = _add(graph_world).execute(graph_world.session(), COORD_ID, from_id=3, to_id=4)
    assert result.error is None


def test_add_member_outside_own_affiliates_is_scope_denial(graph_world):
    result = _add(graph_world).execute(graph_world.session(), COORD_ID, from_id=1, to_id=4)
    assert result.error.code == AccessErrorCode.FORBIDDEN
    assert result.error.reason == DenialReason.SCOPE


def test_add_member_without_capability(graph_world):
    result = _add(graph_world).execute(graph_world.session(), READER_ID, from_id=3, to_id=4)
    assert result.error.code == AccessErrorCode.FORBIDDEN
    assert result.error.reason == DenialReason.CAPABILITY


def test_remove_member(graph_world):
    result = _remove(graph_world).execute(graph_world.session(), COORD_ID, from_id=2, to_id=3)
    assert result.error is None
    assert result.removed is True

    again = _remove(graph_world).execute(graph_world.session(), COORD_ID, from_id=2, to_id=3)
    assert again.error.code == AccessErrorCode.NOT_FOUND


def test_list_visible_affiliates(graph_world):
    uc = ListVisibleAffiliatesUseCase(affiliate_repository=graph_world.affiliates)

    coord = uc.execute(graph_world.session(), COORD_ID)
    assert [a.id for a in coord.affiliates] == [2, 3]

    admin = uc.execute(graph_world.session(), ADMIN_ID)
    assert [a.id for a in admin.affiliates] == [1, 2, 3, 4, 5]

    # R: fiscal_mesa lee afiliados pero no pertenece a ninguno.
    reader = uc.execute(graph_world.session(), READER_ID)
    assert reader.error is None
    assert reader.affiliates == []
