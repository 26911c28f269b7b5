"""
===============================================================================
USE CASE: List Ciudadanos (filtrado por scope)
===============================================================================

Lista los ciudadanos cuyas mesas caen dentro del scope del actor.

Reglas:
  - Capability ciudadanos.read.
  - Acceso total ve todo; sin grants no ve nada.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ....application.access_session import AccessSession
from ....crosscutting.exceptions import Forbidden, Unauthenticated
from ....domain.entities import Ciudadano
from ....domain.repositories import HierarchyRepository
from ....identity.rbac import Permission
from .access_results import AccessError, access_error_from


@dataclass
class CiudadanoListResult:
    ciudadanos: List[Ciudadano] = field(default_factory=list)
    error: AccessError | None = None


class ListCiudadanosUseCase:
    def __init__(self, hierarchy_repository: HierarchyRepository) -> None:
        self._hierarchy = hierarchy_repository

    def execute(self, session: AccessSession, actor_id: int) -> CiudadanoListResult:
        try:
            session.require(actor_id, Permission.CIUDADANOS_READ.value)
        except (Unauthenticated, Forbidden) as exc:
            return CiudadanoListResult(error=access_error_from(exc))

        visible = session.filter_ciudadanos(actor_id, self._hierarchy.list_ciudadanos())
        return CiudadanoListResult(ciudadanos=visible)
