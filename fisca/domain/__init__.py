"""
===============================================================================
TARJETA CRC — domain/__init__.py
===============================================================================

Módulo:
    Exportaciones de la Capa de Dominio (API pública del dominio)

Responsabilidades:
    - Centralizar exports para imports limpios en application/interfaces.
    - Exponer el guard de integridad como funciones puras.

Reglas:
    - Solo re-exporta contratos/entidades del dominio.
    - No importar infraestructura aquí.
===============================================================================
"""

from .affiliates import AffiliateGraph
from .entities import (
    ActorContext,
    Affiliate,
    AffiliateEdge,
    Ciudadano,
    EntityStatus,
    PermissionDefinition,
    Role,
    ScopeRef,
    TerritorialLevel,
    TerritorialNode,
    User,
    UserAccessGrant,
    UserAffiliate,
)
from .integrity import (
    find_dangling_grants,
    validate_access_grant,
    validate_affiliate_edge,
    validate_creator_assignment,
    validate_unique_user_fields,
)
from .repositories import (
    ActorRepository,
    AffiliateRepository,
    GrantRepository,
    HierarchyRepository,
    RoleRepository,
    UserRepository,
)
from .territory import HierarchySnapshot
from .user_hierarchy import CreatorForest

__all__ = [
    # Entities
    "ActorContext",
    "Affiliate",
    "AffiliateEdge",
    "Ciudadano",
    "EntityStatus",
    "PermissionDefinition",
    "Role",
    "ScopeRef",
    "TerritorialLevel",
    "TerritorialNode",
    "User",
    "UserAccessGrant",
    "UserAffiliate",
    # Snapshots
    "AffiliateGraph",
    "CreatorForest",
    "HierarchySnapshot",
    # Integrity guard
    "find_dangling_grants",
    "validate_access_grant",
    "validate_affiliate_edge",
    "validate_creator_assignment",
    "validate_unique_user_fields",
    # Repositories
    "ActorRepository",
    "AffiliateRepository",
    "GrantRepository",
    "HierarchyRepository",
    "RoleRepository",
    "UserRepository",
]
