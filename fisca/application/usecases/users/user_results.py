"""
===============================================================================
USER USE CASE RESULTS
===============================================================================

Resultados tipados de los casos de uso de usuarios (alta, edición, baja,
reasignación de creador, equipo, equipo territorial, roles disponibles).
Los errores reutilizan AccessError / AccessErrorCode.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ....domain.entities import EntityStatus, Role, User
from ..access.access_results import AccessError


@dataclass(frozen=True)
class CreateUserInput:
    email: str
    role_name: str
    dni: Optional[str] = None
    telefono: Optional[str] = None
    first_name: str = ""
    last_name: str = ""
    password_hash: str = field(default="", repr=False)


@dataclass(frozen=True)
class UpdateUserInput:
    """None = no tocar el campo."""

    email: Optional[str] = None
    role_name: Optional[str] = None
    dni: Optional[str] = None
    telefono: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    status: Optional[EntityStatus] = None


@dataclass
class UserResult:
    user: User | None = None
    error: AccessError | None = None


@dataclass
class DeleteUserResult:
    deleted: bool = False
    error: AccessError | None = None


@dataclass(frozen=True)
class TeamMember:
    """depth: 1 = creado por el actor, 2 = creado por alguien del nivel 1..."""

    user: User
    depth: int


@dataclass
class TeamResult:
    members: List[TeamMember] = field(default_factory=list)
    error: AccessError | None = None

    @property
    def total(self) -> int:
        return len(self.members)


@dataclass
class TerritorialTeamResult:
    """level: 4 = localidad, 3 = circuito, 2 = escuela, 1 = mesa, 0 = sin grants."""

    superiors: List[User] = field(default_factory=list)
    siblings: List[User] = field(default_factory=list)
    subordinates: List[User] = field(default_factory=list)
    level: int = 0
    error: AccessError | None = None

    @property
    def total(self) -> int:
        return len(self.superiors) + len(self.siblings) + len(self.subordinates)


@dataclass
class RoleListResult:
    roles: List[Role] = field(default_factory=list)
    error: AccessError | None = None
