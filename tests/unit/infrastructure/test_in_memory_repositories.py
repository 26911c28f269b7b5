"""
Name: In-Memory Repository Tests

Responsibilities:
  - Validate LoadActorContext joins user + role
  - Validate idempotent grant insert and revoke filters
  - Validate SET NULL semantics when a creator is deleted
"""

import pytest

from fisca.domain.entities import (
    Affiliate,
    AffiliateEdge,
    Ciudadano,
    EntityStatus,
    Role,
    TerritorialLevel,
    TerritorialNode,
    User,
    UserAccessGrant,
    UserAffiliate,
)
from fisca.infrastructure.repositories.in_memory import (
    InMemoryAffiliateRepository,
    InMemoryGrantRepository,
    InMemoryHierarchyRepository,
    InMemoryRoleRepository,
    InMemoryUserRepository,
)

pytestmark = pytest.mark.unit

L = TerritorialLevel


@pytest.fixture
def roles() -> InMemoryRoleRepository:
    return InMemoryRoleRepository(
        [
            Role(id=1, name="admin", permissions=frozenset({"users.read"})),
            Role(id=2, name="viejo", status=EntityStatus.INACTIVE),
        ]
    )


def test_load_actor_context(roles):
    users = InMemoryUserRepository(roles, [User(id=1, email="a@x", role_id=1)])

    actor = users.load_actor_context(1)
    assert actor.role_name == "admin"
    assert actor.permissions == ("users.read",)
    assert actor.has_active_role
    assert users.load_actor_context(99) is None


def test_load_actor_context_without_role(roles):
    users = InMemoryUserRepository(
        roles,
        [User(id=1, email="a@x", role_id=None), User(id=2, email="b@x", role_id=2)],
    )
    assert users.load_actor_context(1).role_name is None
    assert not users.load_actor_context(2).has_active_role


def test_create_assigns_ids_and_delete_sets_creator_null(roles):
    users = InMemoryUserRepository(roles, [User(id=1, email="a@x", role_id=1)])

    child = users.create_user(User(id=0, email="b@x", role_id=1, created_by=1))
    assert child.id == 2

    assert users.delete_user(1) is True
    assert users.get_user(child.id).created_by is None
    assert users.delete_user(1) is False
    assert users.load_creator_forest().population == 1


def test_add_grant_is_idempotent():
    repo = InMemoryGrantRepository()
    grant = UserAccessGrant(user_id=1, access_type="mesa", target_id=1000)

    repo.add_grant(grant)
    repo.add_grant(grant)

    assert repo.list_grants(1) == [grant]


def test_load_raw_keeps_historical_duplicates():
    grant = UserAccessGrant(user_id=1, access_type="mesa", target_id=1000)
    repo = InMemoryGrantRepository([grant, grant])
    assert len(repo.list_all_grants()) == 2


def test_revoke_filters():
    repo = InMemoryGrantRepository(
        [
            UserAccessGrant(1, "mesa", 1000),
            UserAccessGrant(1, "mesa", 2000),
            UserAccessGrant(1, "escuela", 100),
            UserAccessGrant(2, "mesa", 1000),
        ]
    )

    assert repo.revoke_grant(1, access_type=L.MESA, target_id=1000) == 1
    assert repo.revoke_grant(1, access_type=L.MESA) == 1
    assert repo.revoke_grant(1) == 1
    assert repo.revoke_grant(1) == 0
    assert repo.list_grants(2) == [UserAccessGrant(2, "mesa", 1000)]


def test_revoke_by_target_id_without_level_is_rejected():
    repo = InMemoryGrantRepository(
        [UserAccessGrant(1, "localidad", 1), UserAccessGrant(1, "mesa", 1)]
    )

    with pytest.raises(ValueError):
        repo.revoke_grant(1, target_id=1)
    assert len(repo.list_all_grants()) == 2


def test_delete_grants():
    keep = UserAccessGrant(1, "mesa", 1000)
    gone = UserAccessGrant(1, "mesa", 2000)
    repo = InMemoryGrantRepository([keep, gone])

    assert repo.delete_grants([gone]) == 1
    assert repo.list_all_grants() == [keep]


def test_hierarchy_snapshot_reflects_node_changes():
    repo = InMemoryHierarchyRepository([TerritorialNode(L.LOCALIDAD, 1, None)])
    repo.add_node(TerritorialNode(L.CIRCUITO, 10, 1))

    snapshot = repo.load_hierarchy_snapshot()
    assert snapshot.exists(L.CIRCUITO, 10)

    assert repo.delete_node(L.CIRCUITO, 10) is True
    # R: el snapshot ya tomado es inmutable.
    assert snapshot.exists(L.CIRCUITO, 10)
    assert not repo.load_hierarchy_snapshot().exists(L.CIRCUITO, 10)


def test_ciudadano_lookup():
    repo = InMemoryHierarchyRepository()
    repo.add_ciudadano(Ciudadano(id=2, dni="2", mesa_id=1000))
    repo.add_ciudadano(Ciudadano(id=1, dni="1", mesa_id=2000))

    assert repo.get_ciudadano(1).mesa_id == 2000
    assert repo.get_ciudadano(3) is None
    assert [c.id for c in repo.list_ciudadanos()] == [1, 2]


def test_affiliate_memberships():
    repo = InMemoryAffiliateRepository(edges=[AffiliateEdge(1, 2), AffiliateEdge(1, 2)])
    repo.add_affiliate(Affiliate(id=2, name="B"))
    repo.add_affiliate(Affiliate(id=1, name="A"))
    repo.add_user_affiliate(UserAffiliate(user_id=7, affiliate_id=2))
    repo.add_user_affiliate(UserAffiliate(user_id=7, affiliate_id=2))

    assert [a.id for a in repo.list_affiliates()] == [1, 2]
    assert repo.list_user_affiliate_ids(7) == [2]
    assert repo.load_affiliate_graph().edges == (AffiliateEdge(1, 2),)
    assert repo.remove_member(AffiliateEdge(1, 2)) is True
    assert repo.remove_member(AffiliateEdge(1, 2)) is False
