"""
===============================================================================
TARJETA CRC — identity/rbac.py
===============================================================================

Módulo:
    Catálogo de permisos, roles por defecto y jerarquía de creación de roles

Responsabilidades:
    - Definir el catálogo de capabilities ("entidad.acción").
    - Definir los roles por defecto con sus permisos (seed del sistema).
    - Definir qué roles puede crear cada rol (estructura piramidal).
    - Cargar ROLE_HIERARCHY_CONFIG (JSON) y cachear la jerarquía efectiva.
    - Identificar roles de acceso total (excepción explícita y nombrada).

Colaboradores:
    - crosscutting.config: full_access_roles / role_hierarchy_config.
    - crosscutting.logger: logs estructurados.
    - identity.access_resolver: bypass de scope para roles de acceso total.
    - identity.user_policy: can_create_role.

Notas de diseño:
    - El acceso total es una lista explícita de nombres de rol: nunca se
      infiere de la cantidad de grants que acumula un usuario.
    - Las capabilities en runtime son strings (el catálogo real vive en el
      store); el Enum documenta las conocidas y alimenta el seed.
===============================================================================
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Mapping

from ..crosscutting.logger import logger
from ..domain.entities import PermissionDefinition, Role

# ---------------------------------------------------------------------------
# Permisos (lenguaje ubicuo para autorización)
# ---------------------------------------------------------------------------

_ENTITIES: tuple[str, ...] = (
    "users",
    "affiliates",
    "localidades",
    "circuitos",
    "escuelas",
    "mesas",
    "ciudadanos",
    "roles",
    "permissions",
)
_ACTIONS: tuple[str, ...] = ("create", "read", "update", "delete")


class Permission(str, Enum):
    """Capabilities conocidas del sistema."""

    USERS_CREATE = "users.create"
    USERS_READ = "users.read"
    USERS_UPDATE = "users.update"
    USERS_DELETE = "users.delete"

    AFFILIATES_CREATE = "affiliates.create"
    AFFILIATES_READ = "affiliates.read"
    AFFILIATES_UPDATE = "affiliates.update"
    AFFILIATES_DELETE = "affiliates.delete"

    LOCALIDADES_CREATE = "localidades.create"
    LOCALIDADES_READ = "localidades.read"
    LOCALIDADES_UPDATE = "localidades.update"
    LOCALIDADES_DELETE = "localidades.delete"

    CIRCUITOS_CREATE = "circuitos.create"
    CIRCUITOS_READ = "circuitos.read"
    CIRCUITOS_UPDATE = "circuitos.update"
    CIRCUITOS_DELETE = "circuitos.delete"

    ESCUELAS_CREATE = "escuelas.create"
    ESCUELAS_READ = "escuelas.read"
    ESCUELAS_UPDATE = "escuelas.update"
    ESCUELAS_DELETE = "escuelas.delete"

    MESAS_CREATE = "mesas.create"
    MESAS_READ = "mesas.read"
    MESAS_UPDATE = "mesas.update"
    MESAS_DELETE = "mesas.delete"

    CIUDADANOS_CREATE = "ciudadanos.create"
    CIUDADANOS_READ = "ciudadanos.read"
    CIUDADANOS_UPDATE = "ciudadanos.update"
    CIUDADANOS_DELETE = "ciudadanos.delete"

    ROLES_CREATE = "roles.create"
    ROLES_READ = "roles.read"
    ROLES_UPDATE = "roles.update"
    ROLES_DELETE = "roles.delete"

    PERMISSIONS_CREATE = "permissions.create"
    PERMISSIONS_READ = "permissions.read"
    PERMISSIONS_UPDATE = "permissions.update"
    PERMISSIONS_DELETE = "permissions.delete"


def role_creation_permission(role_name: str) -> str:
    """Capability para crear usuarios con un rol puntual (users.create.<rol>)."""
    return f"users.create.{role_name}"


# ---------------------------------------------------------------------------
# Jerarquía de creación (cada rol crea solo roles inferiores)
# ---------------------------------------------------------------------------

DEFAULT_ROLE_HIERARCHY: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "admin": (
            "jefe_campana",
            "responsable_localidad",
            "responsable_seccion",
            "responsable_circuito",
            "fiscal_general",
            "fiscal_mesa",
            "logistica",
        ),
        "jefe_campana": (
            "responsable_localidad",
            "responsable_seccion",
            "responsable_circuito",
            "fiscal_general",
            "fiscal_mesa",
            "logistica",
        ),
        "responsable_localidad": (
            "responsable_seccion",
            "responsable_circuito",
            "fiscal_general",
            "fiscal_mesa",
            "logistica",
        ),
        "responsable_seccion": (
            "responsable_circuito",
            "fiscal_general",
            "fiscal_mesa",
            "logistica",
        ),
        "responsable_circuito": ("fiscal_general", "fiscal_mesa", "logistica"),
        "fiscal_general": ("fiscal_mesa", "logistica"),
        "fiscal_mesa": (),
        "logistica": (),
    }
)

_CREATABLE_ROLES: tuple[str, ...] = DEFAULT_ROLE_HIERARCHY["admin"]


@dataclass(frozen=True, slots=True)
class RoleSpec:
    """Definición de seed de un rol (nombre + display + descripción)."""

    name: str
    display_name: str
    description: str = ""


DEFAULT_ROLE_SPECS: tuple[RoleSpec, ...] = (
    RoleSpec("admin", "Admin", "Acceso completo a todo el sistema."),
    RoleSpec("jefe_campana", "Jefe de Campaña", "Lee todo; crea usuarios con roles inferiores."),
    RoleSpec("responsable_localidad", "Responsable de Localidad", "Crea usuarios con roles inferiores."),
    RoleSpec("responsable_seccion", "Responsable de Sección", "Crea usuarios con roles inferiores."),
    RoleSpec("responsable_circuito", "Responsable de Circuito", "Crea usuarios con roles inferiores."),
    RoleSpec("fiscal_general", "Fiscal General", "Crea usuarios con roles inferiores."),
    RoleSpec("fiscal_mesa", "Fiscal de Mesa", "Lectura básica."),
    RoleSpec("logistica", "Logística", "Rol para personal de logística."),
)

# R: fiscal_mesa puede actualizar ciudadanos de sus mesas (migración 003 del sistema).
_EXTRA_ROLE_PERMISSIONS: Mapping[str, frozenset[str]] = MappingProxyType(
    {"fiscal_mesa": frozenset({Permission.CIUDADANOS_UPDATE.value})}
)


def permission_catalog() -> list[PermissionDefinition]:
    """Catálogo completo: CRUD por entidad + users.create.<rol>."""
    catalog = [
        PermissionDefinition(
            name=f"{entity}.{action}",
            display_name=f"{action.title()} {entity.title()}",
            entity=entity,
            action=action,
        )
        for entity in _ENTITIES
        for action in _ACTIONS
    ]
    catalog.extend(
        PermissionDefinition(
            name=role_creation_permission(role_name),
            display_name=f"Create Users with {role_name} Role",
            entity="users",
            action="create",
        )
        for role_name in _CREATABLE_ROLES
    )
    return catalog


def default_role_permissions(role_name: str) -> frozenset[str]:
    """
    Permisos por defecto de un rol (seed).

    Regla:
      - admin: todo el catálogo.
      - resto: todas las lecturas + users.create(.<rol>) para los roles que
        puede crear + extras puntuales.
    """
    catalog = permission_catalog()
    if role_name == "admin":
        return frozenset(p.name for p in catalog)

    perms = {p.name for p in catalog if p.action == "read"}
    creatable = DEFAULT_ROLE_HIERARCHY.get(role_name, ())
    if creatable:
        perms.add(Permission.USERS_CREATE.value)
        perms.update(role_creation_permission(r) for r in creatable)
    perms |= _EXTRA_ROLE_PERMISSIONS.get(role_name, frozenset())
    return frozenset(perms)


def build_default_roles() -> list[Role]:
    """Roles por defecto con ids 1..N en orden de seed."""
    return [
        Role(
            id=index,
            name=spec.name,
            display_name=spec.display_name,
            permissions=default_role_permissions(spec.name),
            description=spec.description,
        )
        for index, spec in enumerate(DEFAULT_ROLE_SPECS, start=1)
    ]


# ---------------------------------------------------------------------------
# Parsing de configuración (cacheado)
# ---------------------------------------------------------------------------


def _parse_role_list(values: object) -> tuple[str, ...]:
    """Parsea lista de strings a tupla de roles de manera defensiva."""
    if not isinstance(values, list):
        return ()
    parsed: list[str] = []
    for v in values:
        if not isinstance(v, str) or not v.strip():
            continue
        name = v.strip().lower()
        if name not in parsed:
            parsed.append(name)
    return tuple(parsed)


@lru_cache(maxsize=1)
def _parse_role_hierarchy() -> Mapping[str, tuple[str, ...]]:
    """Jerarquía por defecto + overrides desde ROLE_HIERARCHY_CONFIG."""
    from ..crosscutting.config import get_settings

    raw = (get_settings().role_hierarchy_config or "").strip()
    if not raw:
        return DEFAULT_ROLE_HIERARCHY

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("ROLE_HIERARCHY_CONFIG inválido (JSON)", extra={"error": str(exc)})
        return DEFAULT_ROLE_HIERARCHY

    if not isinstance(data, dict):
        logger.warning("ROLE_HIERARCHY_CONFIG inválido (shape)")
        return DEFAULT_ROLE_HIERARCHY

    hierarchy: dict[str, tuple[str, ...]] = dict(DEFAULT_ROLE_HIERARCHY)
    for role_name, creatable in data.items():
        if not isinstance(role_name, str) or not role_name.strip():
            continue
        hierarchy[role_name.strip().lower()] = _parse_role_list(creatable)

    return MappingProxyType(hierarchy)


def get_role_hierarchy() -> Mapping[str, tuple[str, ...]]:
    """Devuelve la jerarquía de creación efectiva (cacheada)."""
    return _parse_role_hierarchy()


def clear_role_hierarchy_cache() -> None:
    """Limpia cache (tests / hot-reload local)."""
    _parse_role_hierarchy.cache_clear()


def full_access_roles() -> frozenset[str]:
    """Roles nombrados explícitamente como de acceso total."""
    from ..crosscutting.config import get_settings

    return frozenset(get_settings().get_full_access_roles())


def is_full_access_role(
    role_name: str | None, roles: Iterable[str] | None = None
) -> bool:
    if not role_name:
        return False
    allowed = frozenset(roles) if roles is not None else full_access_roles()
    return role_name.strip().lower() in allowed


def available_roles_for_creation(role_name: str | None) -> tuple[str, ...]:
    """Roles que un rol puede crear (vacío si no puede crear usuarios)."""
    if not role_name:
        return ()
    return get_role_hierarchy().get(role_name.strip().lower(), ())


def can_create_role(creator_role: str | None, target_role: str) -> bool:
    """True si creator_role puede crear usuarios con target_role."""
    if is_full_access_role(creator_role):
        return True
    return target_role.strip().lower() in available_roles_for_creation(creator_role)
