"""
===============================================================================
USE CASE: List Team
===============================================================================

"Mi equipo": usuarios creados por el actor directa o indirectamente, con su
profundidad relativa en la pirámide.

Reglas:
  - Capability users.read.
  - Orden BFS (primero los creados directamente).
===============================================================================
"""

from __future__ import annotations

from ....application.access_session import AccessSession
from ....crosscutting.exceptions import Forbidden, Unauthenticated
from ....domain.repositories import UserRepository
from ....identity.rbac import Permission
from ..access.access_results import access_error_from
from .user_results import TeamMember, TeamResult


class ListTeamUseCase:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    def execute(self, session: AccessSession, actor_id: int) -> TeamResult:
        try:
            session.require(actor_id, Permission.USERS_READ.value)
        except (Unauthenticated, Forbidden) as exc:
            return TeamResult(error=access_error_from(exc))

        forest = self._users.load_creator_forest()
        base_level = forest.hierarchy_level(actor_id)
        users = {u.id: u for u in self._users.list_users()}

        members = [
            TeamMember(user=users[uid], depth=forest.hierarchy_level(uid) - base_level)
            for uid in forest.descendants(actor_id)
            if uid in users
        ]
        return TeamResult(members=members)
