"""
===============================================================================
USER USE CASES PACKAGE (Public API / Exports)
===============================================================================

Gestión de usuarios sobre la pirámide de creadores.
===============================================================================
"""

from __future__ import annotations

from .create_user import CreateUserUseCase
from .delete_user import DeleteUserUseCase
from .list_available_roles import ListAvailableRolesUseCase
from .list_team import ListTeamUseCase
from .list_territorial_team import ListTerritorialTeamUseCase
from .reassign_creator import ReassignCreatorUseCase
from .update_user import UpdateUserUseCase
from .user_results import (
    CreateUserInput,
    DeleteUserResult,
    RoleListResult,
    TeamMember,
    TeamResult,
    TerritorialTeamResult,
    UpdateUserInput,
    UserResult,
)

__all__ = [
    "CreateUserUseCase",
    "UpdateUserUseCase",
    "DeleteUserUseCase",
    "ReassignCreatorUseCase",
    "ListTeamUseCase",
    "ListTerritorialTeamUseCase",
    "ListAvailableRolesUseCase",
    "CreateUserInput",
    "UpdateUserInput",
    "UserResult",
    "DeleteUserResult",
    "TeamMember",
    "TeamResult",
    "TerritorialTeamResult",
    "RoleListResult",
]
