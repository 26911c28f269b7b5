"""
===============================================================================
USE CASE: List Territorial Team
===============================================================================

Equipo según el territorio (no según created_by): superiores, pares y
subordinados del actor derivados de los grants activos de cada usuario.

Reglas:
  - Capability users.read.
  - Solo cuentan usuarios activos y grants activos cuyo target existe.
  - Sin grants propios -> listas vacías y level 0.
  - affiliate_id opcional: restringe los candidatos a miembros de esa agrupación.
===============================================================================
"""

from __future__ import annotations

from typing import Dict, List, Optional, Set

from ....application.access_session import AccessSession
from ....crosscutting.exceptions import Forbidden, Unauthenticated
from ....domain.entities import ScopeRef, User
from ....domain.repositories import (
    AffiliateRepository,
    GrantRepository,
    RoleRepository,
    UserRepository,
)
from ....domain.territorial_team import TerritorialMember, build_territorial_team
from ....domain.territory import HierarchySnapshot
from ....identity.rbac import Permission
from ..access.access_results import access_error_from
from .user_results import TerritorialTeamResult


class ListTerritorialTeamUseCase:
    def __init__(
        self,
        user_repository: UserRepository,
        role_repository: RoleRepository,
        grant_repository: GrantRepository,
        affiliate_repository: AffiliateRepository,
    ) -> None:
        self._users = user_repository
        self._roles = role_repository
        self._grants = grant_repository
        self._affiliates = affiliate_repository

    def _roots_by_user(self, hierarchy: HierarchySnapshot) -> Dict[int, Set[ScopeRef]]:
        roots: Dict[int, Set[ScopeRef]] = {}
        for grant in self._grants.list_all_grants():
            if not grant.is_active:
                continue
            level = grant.level
            if level is None or not hierarchy.exists(level, grant.target_id):
                continue
            roots.setdefault(grant.user_id, set()).add(ScopeRef(level, grant.target_id))
        return roots

    def execute(
        self,
        session: AccessSession,
        actor_id: int,
        *,
        affiliate_id: Optional[int] = None,
    ) -> TerritorialTeamResult:
        try:
            session.require(actor_id, Permission.USERS_READ.value)
        except (Unauthenticated, Forbidden) as exc:
            return TerritorialTeamResult(error=access_error_from(exc))

        hierarchy = session.hierarchy
        roots = self._roots_by_user(hierarchy)
        actor_roots = roots.get(actor_id, set())
        if not actor_roots:
            return TerritorialTeamResult()

        role_names = {role.id: role.name for role in self._roles.list_roles()}
        users: Dict[int, User] = {u.id: u for u in self._users.list_users() if u.is_active}
        if affiliate_id is not None:
            users = {
                uid: u
                for uid, u in users.items()
                if affiliate_id in self._affiliates.list_user_affiliate_ids(uid)
            }

        members = [
            TerritorialMember(
                user_id=uid,
                role_name=role_names.get(user.role_id),
                roots=frozenset(roots.get(uid, ())),
            )
            for uid, user in users.items()
        ]
        team = build_territorial_team(actor_id, actor_roots, members, hierarchy)

        def _users(ids) -> List[User]:
            return [users[uid] for uid in ids]

        return TerritorialTeamResult(
            superiors=_users(team.superiors),
            siblings=_users(team.siblings),
            subordinates=_users(team.subordinates),
            level=team.level,
        )
