"""
===============================================================================
ACCESS USE CASES PACKAGE (Public API / Exports)
===============================================================================

Casos de uso del motor de acceso: resolución, autorización, grants
territoriales y listados filtrados por scope.
===============================================================================
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Use Cases
# -----------------------------------------------------------------------------
from .authorize_action import AuthorizeActionUseCase
from .grant_access import GrantAccessUseCase
from .list_accessible_entities import ListAccessibleEntitiesUseCase
from .list_ciudadanos import CiudadanoListResult, ListCiudadanosUseCase
from .prune_dangling_grants import PruneDanglingGrantsUseCase
from .resolve_access import ResolveAccessUseCase
from .revoke_access import RevokeAccessUseCase

# -----------------------------------------------------------------------------
# DTOs / Result models
# -----------------------------------------------------------------------------
from .access_results import (
    AccessError,
    AccessErrorCode,
    AccessibleEntitiesResult,
    AuthorizeResult,
    GrantResult,
    PruneResult,
    ResolveAccessResult,
    RevokeResult,
    access_error_from,
)

__all__ = [
    # Use Cases
    "ResolveAccessUseCase",
    "AuthorizeActionUseCase",
    "GrantAccessUseCase",
    "RevokeAccessUseCase",
    "PruneDanglingGrantsUseCase",
    "ListAccessibleEntitiesUseCase",
    "ListCiudadanosUseCase",
    # DTOs / Result models
    "AccessError",
    "AccessErrorCode",
    "AccessibleEntitiesResult",
    "AuthorizeResult",
    "CiudadanoListResult",
    "GrantResult",
    "PruneResult",
    "ResolveAccessResult",
    "RevokeResult",
    "access_error_from",
]
