"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define the record-store contracts the access core consumes (ports):
  LoadActorContext, LoadGrants, LoadHierarchySnapshot, plus the writes the
  use cases perform after the integrity guard approved them.
- Keep the domain independent from infrastructure (PostgreSQL, in-memory).

Collaborators
- domain.entities / territory / affiliates / user_hierarchy
- infrastructure.repositories: postgres + in_memory implementations

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- Implementations MUST match method signatures exactly.
- Writes MUST run inside the store's transaction; the guard's checks are only
  valid against a snapshot read under the same isolation.

Notes
- We use typing.Protocol for structural subtyping ("duck typing").
- Outputs are concrete lists/tuples for predictable iteration.
"""

from typing import List, Optional, Protocol

from .affiliates import AffiliateGraph
from .entities import (
    ActorContext,
    Affiliate,
    AffiliateEdge,
    Ciudadano,
    Role,
    TerritorialLevel,
    User,
    UserAccessGrant,
)
from .territory import HierarchySnapshot
from .user_hierarchy import CreatorForest


class ActorRepository(Protocol):
    """R: LoadActorContext(userID) -> {role, permissions[], status}."""

    def load_actor_context(self, user_id: int) -> Optional[ActorContext]:
        """R: None when no such user (callers map it to NotFound/Unauthenticated)."""
        ...


class UserRepository(Protocol):
    """R: User records and the created_by forest."""

    def get_user(self, user_id: int) -> Optional[User]:
        ...

    def list_users(self) -> List[User]:
        ...

    def create_user(self, user: User) -> User:
        """R: Persist a new user; the store assigns the id when user.id == 0."""
        ...

    def update_user(self, user: User) -> User:
        ...

    def delete_user(self, user_id: int) -> bool:
        ...

    def load_creator_forest(self) -> CreatorForest:
        """R: Snapshot of user_id -> created_by for every user."""
        ...


class RoleRepository(Protocol):
    """R: Role catalog with assigned permission names."""

    def get_role(self, role_id: int) -> Optional[Role]:
        ...

    def get_role_by_name(self, name: str) -> Optional[Role]:
        ...

    def list_roles(self) -> List[Role]:
        ...


class GrantRepository(Protocol):
    """R: LoadGrants(userID) and grant mutations."""

    def list_grants(self, user_id: int) -> List[UserAccessGrant]:
        ...

    def add_grant(self, grant: UserAccessGrant) -> UserAccessGrant:
        """R: Idempotent insert (an identical grant is not duplicated)."""
        ...

    def revoke_grant(
        self,
        user_id: int,
        *,
        access_type: TerritorialLevel | None = None,
        target_id: int | None = None,
    ) -> int:
        """R: Delete matching grants; returns the number of rows removed.

        target_id without access_type raises ValueError (ids are per level).
        """
        ...

    def delete_grants(self, grants: List[UserAccessGrant]) -> int:
        """R: Delete exactly these grants (cascade after a node is removed)."""
        ...

    def list_all_grants(self) -> List[UserAccessGrant]:
        ...


class HierarchyRepository(Protocol):
    """R: LoadHierarchySnapshot() + Ciudadano lookup."""

    def load_hierarchy_snapshot(self) -> HierarchySnapshot:
        ...

    def get_ciudadano(self, ciudadano_id: int) -> Optional[Ciudadano]:
        ...

    def list_ciudadanos(self) -> List[Ciudadano]:
        ...


class AffiliateRepository(Protocol):
    """R: Affiliate nodes, member edges and user membership."""

    def get_affiliate(self, affiliate_id: int) -> Optional[Affiliate]:
        ...

    def list_affiliates(self) -> List[Affiliate]:
        ...

    def load_affiliate_graph(self) -> AffiliateGraph:
        ...

    def add_member(self, edge: AffiliateEdge) -> None:
        ...

    def remove_member(self, edge: AffiliateEdge) -> bool:
        ...

    def list_user_affiliate_ids(self, user_id: int) -> List[int]:
        ...
