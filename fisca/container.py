"""
===============================================================================
TARJETA CRC — fisca/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer repositorios (in-memory o PostgreSQL) según Settings.
  - Exponer factories para FastAPI (Depends) y para scripts.
  - Mantener singletons con caching (lru_cache).
  - Crear una AccessSession NUEVA por request.

Colaboradores:
  - fisca.crosscutting.config.get_settings
  - fisca.domain.repositories.* (puertos)
  - fisca.infrastructure.* (implementaciones)
  - fisca.application.usecases.* (casos de uso)

Notas:
  - Este archivo NO contiene lógica de negocio.
  - Este archivo NO depende de FastAPI.
  - Sin DATABASE_URL se usan stores in-memory con los roles por defecto.
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from .application.access_session import AccessSession
from .application.usecases.access import (
    AuthorizeActionUseCase,
    GrantAccessUseCase,
    ListAccessibleEntitiesUseCase,
    ListCiudadanosUseCase,
    PruneDanglingGrantsUseCase,
    ResolveAccessUseCase,
    RevokeAccessUseCase,
)
from .application.usecases.affiliates import (
    AddAffiliateMemberUseCase,
    ListVisibleAffiliatesUseCase,
    RemoveAffiliateMemberUseCase,
)
from .application.usecases.users import (
    CreateUserUseCase,
    DeleteUserUseCase,
    ListAvailableRolesUseCase,
    ListTeamUseCase,
    ListTerritorialTeamUseCase,
    ReassignCreatorUseCase,
    UpdateUserUseCase,
)
from .crosscutting.config import get_settings
from .domain.repositories import (
    AffiliateRepository,
    GrantRepository,
    HierarchyRepository,
    RoleRepository,
    UserRepository,
)
from .identity.rbac import build_default_roles
from .infrastructure.db.pool import close_pool, init_pool
from .infrastructure.repositories.in_memory import (
    InMemoryAffiliateRepository,
    InMemoryGrantRepository,
    InMemoryHierarchyRepository,
    InMemoryRoleRepository,
    InMemoryUserRepository,
)
from .infrastructure.repositories.postgres import (
    PostgresAffiliateRepository,
    PostgresGrantRepository,
    PostgresHierarchyRepository,
    PostgresRoleRepository,
    PostgresUserRepository,
)


def _use_database() -> bool:
    return get_settings().uses_database()


# =============================================================================
# Ciclo de vida de la DB
# =============================================================================


def init_database() -> None:
    """Inicializa el pool si hay DATABASE_URL (no-op en modo in-memory)."""
    settings = get_settings()
    if not settings.uses_database():
        return
    init_pool(
        settings.database_url,
        settings.db_pool_min_size,
        settings.db_pool_max_size,
    )


def shutdown_database() -> None:
    close_pool()


# =============================================================================
# Repositorios (singletons)
# =============================================================================


@lru_cache(maxsize=1)
def get_role_repository() -> RoleRepository:
    """Catálogo de roles (in-memory con roles por defecto; Postgres en runtime)."""
    if _use_database():
        return PostgresRoleRepository()
    return InMemoryRoleRepository(build_default_roles())


@lru_cache(maxsize=1)
def get_user_repository() -> UserRepository:
    """Usuarios + LoadActorContext."""
    if _use_database():
        return PostgresUserRepository()
    return InMemoryUserRepository(get_role_repository())


@lru_cache(maxsize=1)
def get_grant_repository() -> GrantRepository:
    if _use_database():
        return PostgresGrantRepository()
    return InMemoryGrantRepository()


@lru_cache(maxsize=1)
def get_hierarchy_repository() -> HierarchyRepository:
    if _use_database():
        return PostgresHierarchyRepository()
    return InMemoryHierarchyRepository()


@lru_cache(maxsize=1)
def get_affiliate_repository() -> AffiliateRepository:
    if _use_database():
        return PostgresAffiliateRepository()
    return InMemoryAffiliateRepository()


# =============================================================================
# Sesión de acceso (factory por request)
# =============================================================================


def new_access_session() -> AccessSession:
    """Una sesión por request: nunca se cachea entre requests."""
    return AccessSession(
        actor_repository=get_user_repository(),
        grant_repository=get_grant_repository(),
        hierarchy_repository=get_hierarchy_repository(),
        full_access_roles=get_settings().get_full_access_roles(),
    )


# =============================================================================
# Casos de uso (factory por request)
# =============================================================================


def get_resolve_access_use_case() -> ResolveAccessUseCase:
    return ResolveAccessUseCase()


def get_authorize_action_use_case() -> AuthorizeActionUseCase:
    return AuthorizeActionUseCase()


def get_grant_access_use_case() -> GrantAccessUseCase:
    return GrantAccessUseCase(
        grant_repository=get_grant_repository(),
        user_repository=get_user_repository(),
    )


def get_revoke_access_use_case() -> RevokeAccessUseCase:
    return RevokeAccessUseCase(
        grant_repository=get_grant_repository(),
        user_repository=get_user_repository(),
    )


def get_prune_dangling_grants_use_case() -> PruneDanglingGrantsUseCase:
    return PruneDanglingGrantsUseCase(grant_repository=get_grant_repository())


def get_list_accessible_entities_use_case() -> ListAccessibleEntitiesUseCase:
    return ListAccessibleEntitiesUseCase()


def get_list_ciudadanos_use_case() -> ListCiudadanosUseCase:
    return ListCiudadanosUseCase(hierarchy_repository=get_hierarchy_repository())


def get_create_user_use_case() -> CreateUserUseCase:
    return CreateUserUseCase(
        user_repository=get_user_repository(),
        role_repository=get_role_repository(),
    )


def get_update_user_use_case() -> UpdateUserUseCase:
    return UpdateUserUseCase(
        user_repository=get_user_repository(),
        role_repository=get_role_repository(),
    )


def get_delete_user_use_case() -> DeleteUserUseCase:
    return DeleteUserUseCase(user_repository=get_user_repository())


def get_reassign_creator_use_case() -> ReassignCreatorUseCase:
    return ReassignCreatorUseCase(user_repository=get_user_repository())


def get_list_team_use_case() -> ListTeamUseCase:
    return ListTeamUseCase(user_repository=get_user_repository())


def get_list_territorial_team_use_case() -> ListTerritorialTeamUseCase:
    return ListTerritorialTeamUseCase(
        user_repository=get_user_repository(),
        role_repository=get_role_repository(),
        grant_repository=get_grant_repository(),
        affiliate_repository=get_affiliate_repository(),
    )


def get_list_available_roles_use_case() -> ListAvailableRolesUseCase:
    return ListAvailableRolesUseCase(role_repository=get_role_repository())


def get_add_affiliate_member_use_case() -> AddAffiliateMemberUseCase:
    return AddAffiliateMemberUseCase(affiliate_repository=get_affiliate_repository())


def get_remove_affiliate_member_use_case() -> RemoveAffiliateMemberUseCase:
    return RemoveAffiliateMemberUseCase(affiliate_repository=get_affiliate_repository())


def get_list_visible_affiliates_use_case() -> ListVisibleAffiliatesUseCase:
    return ListVisibleAffiliatesUseCase(affiliate_repository=get_affiliate_repository())


def clear_container_cache() -> None:
    """Limpia singletons (tests)."""
    for factory in (
        get_role_repository,
        get_user_repository,
        get_grant_repository,
        get_hierarchy_repository,
        get_affiliate_repository,
    ):
        factory.cache_clear()
