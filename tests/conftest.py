"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure test environment (no .env, caches cleared per test)
  - Provide a seeded territorial forest (L1 > C1 > E1 > M1, etc.)
  - Provide in-memory repositories and AccessSession factories

Collaborators:
  - pytest: Test framework
  - fisca.infrastructure.repositories.in_memory: stores under test
  - fisca.identity.rbac: default roles

Notes:
  - Fixtures are auto-discovered by pytest
  - Territory ids: localidades 1..2, circuitos 10/20/30, escuelas 100/200/300,
    mesas 1000/2000/3000
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("APP_ENV", "test")

from fisca.crosscutting import config as fisca_config  # noqa: E402

fisca_config.Settings.model_config["env_file"] = None

from fisca import container  # noqa: E402
from fisca.application.access_session import AccessSession  # noqa: E402
from fisca.domain.entities import (  # noqa: E402
    Affiliate,
    Ciudadano,
    EntityStatus,
    TerritorialLevel,
    TerritorialNode,
    User,
    UserAccessGrant,
)
from fisca.domain.territory import HierarchySnapshot  # noqa: E402
from fisca.identity.rbac import build_default_roles, clear_role_hierarchy_cache  # noqa: E402
from fisca.infrastructure.repositories.in_memory import (  # noqa: E402
    InMemoryAffiliateRepository,
    InMemoryGrantRepository,
    InMemoryHierarchyRepository,
    InMemoryRoleRepository,
    InMemoryUserRepository,
)

L = TerritorialLevel

L1, L2 = 1, 2
C1, C2, C3 = 10, 20, 30
E1, E2, E3 = 100, 200, 300
M1, M2, M3 = 1000, 2000, 3000

ADMIN_ID = 1


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


@pytest.fixture(autouse=True)
def _reset_caches():
    """R: Settings / role hierarchy / container singletons are per test."""
    fisca_config.get_settings.cache_clear()
    clear_role_hierarchy_cache()
    container.clear_container_cache()
    yield
    fisca_config.get_settings.cache_clear()
    clear_role_hierarchy_cache()
    container.clear_container_cache()


# ============================================================================
# Territory
# ============================================================================


def _territory_nodes() -> list[TerritorialNode]:
    return [
        TerritorialNode(L.LOCALIDAD, L1, None, "Capital"),
        TerritorialNode(L.LOCALIDAD, L2, None, "Norte"),
        TerritorialNode(L.CIRCUITO, C1, L1, "Circuito 1"),
        TerritorialNode(L.CIRCUITO, C2, L1, "Circuito 2"),
        TerritorialNode(L.CIRCUITO, C3, L2, "Circuito 3"),
        TerritorialNode(L.ESCUELA, E1, C1, "Escuela 1"),
        TerritorialNode(L.ESCUELA, E2, C2, "Escuela 2"),
        TerritorialNode(L.ESCUELA, E3, C3, "Escuela 3"),
        TerritorialNode(L.MESA, M1, E1, "1"),
        TerritorialNode(L.MESA, M2, E2, "2"),
        TerritorialNode(L.MESA, M3, E3, "3"),
    ]


def _ciudadanos() -> list[Ciudadano]:
    return [
        Ciudadano(id=1, dni="30111222", mesa_id=M1, nombre="Juan", apellido="Pérez"),
        Ciudadano(id=2, dni="30222333", mesa_id=M2, nombre="Ana", apellido="Gómez"),
        Ciudadano(id=3, dni="30333444", mesa_id=M3, nombre="Luis", apellido="Díaz"),
    ]


@pytest.fixture
def territory_nodes() -> list[TerritorialNode]:
    return _territory_nodes()


@pytest.fixture
def hierarchy() -> HierarchySnapshot:
    """R: Two localidades; L1 has two circuitos, L2 one."""
    return HierarchySnapshot(_territory_nodes())


@pytest.fixture
def juan_perez() -> Ciudadano:
    return _ciudadanos()[0]


# ============================================================================
# In-memory world
# ============================================================================


@dataclass
class AccessWorld:
    """R: Bundle of seeded in-memory stores plus helpers to build scenarios."""

    roles: InMemoryRoleRepository
    users: InMemoryUserRepository
    grants: InMemoryGrantRepository
    territory: InMemoryHierarchyRepository
    affiliates: InMemoryAffiliateRepository

    def session(self) -> AccessSession:
        return AccessSession(
            actor_repository=self.users,
            grant_repository=self.grants,
            hierarchy_repository=self.territory,
            full_access_roles=("admin",),
        )

    def role_id(self, role_name: str) -> int:
        role = self.roles.get_role_by_name(role_name)
        assert role is not None, role_name
        return role.id

    def add_user(
        self,
        user_id: int,
        role_name: str | None,
        *,
        created_by: int | None = ADMIN_ID,
        status: EntityStatus = EntityStatus.ACTIVE,
        dni: str | None = None,
        telefono: str | None = None,
    ) -> User:
        return self.users.create_user(
            User(
                id=user_id,
                email=f"user{user_id}@fisca.test",
                role_id=self.role_id(role_name) if role_name else None,
                status=status,
                created_by=created_by,
                dni=dni,
                telefono=telefono,
            )
        )

    def grant(self, user_id: int, level: TerritorialLevel, target_id: int) -> None:
        self.grants.add_grant(
            UserAccessGrant(user_id=user_id, access_type=level.value, target_id=target_id)
        )


@pytest.fixture
def world() -> AccessWorld:
    """
    R: Seeded stores.

    Users:
      - 1: admin (root of the creator forest)
    """
    roles = InMemoryRoleRepository(build_default_roles())
    users = InMemoryUserRepository(roles)
    w = AccessWorld(
        roles=roles,
        users=users,
        grants=InMemoryGrantRepository(),
        territory=InMemoryHierarchyRepository(_territory_nodes(), _ciudadanos()),
        affiliates=InMemoryAffiliateRepository(
            [Affiliate(id=i, name=f"Afiliado {i}") for i in range(1, 6)]
        ),
    )
    w.add_user(ADMIN_ID, "admin", created_by=None)
    return w
