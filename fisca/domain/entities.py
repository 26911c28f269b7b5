"""
===============================================================================
TARJETA CRC — domain/entities.py
===============================================================================

Módulo:
    Entidades del Dominio (usuarios, roles, afiliados, territorio, grants)

Responsabilidades:
    - Definir estructuras centrales del negocio (sin infraestructura).
    - Brindar helpers mínimos para invariantes simples (estado activo, nivel).
    - Mantener tipos claros para el motor de acceso, el guard y los repositorios.

Colaboradores:
    - domain.territory / domain.affiliates / domain.user_hierarchy: snapshots.
    - domain.repositories: persisten/recuperan estas entidades.
    - identity.access_resolver: consume ActorContext y UserAccessGrant.

Principios:
    - Sin dependencias a DB/FastAPI.
    - Inmutables (frozen): el core opera sobre copias por request.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class EntityStatus(str, Enum):
    """Estado de usuarios, roles, afiliados y grants (soft-retire)."""

    ACTIVE = "active"
    INACTIVE = "inactive"


# ---------------------------------------------------------------------------
# Territorio: Localidad -> Circuito -> Escuela -> Mesa
# ---------------------------------------------------------------------------


class TerritorialLevel(str, Enum):
    """Niveles del bosque territorial, ordenados de raíz a hoja."""

    LOCALIDAD = "localidad"
    CIRCUITO = "circuito"
    ESCUELA = "escuela"
    MESA = "mesa"

    @property
    def depth(self) -> int:
        return _LEVEL_ORDER.index(self)

    @property
    def parent_level(self) -> Optional["TerritorialLevel"]:
        idx = self.depth
        return _LEVEL_ORDER[idx - 1] if idx > 0 else None

    @property
    def child_level(self) -> Optional["TerritorialLevel"]:
        idx = self.depth
        return _LEVEL_ORDER[idx + 1] if idx + 1 < len(_LEVEL_ORDER) else None

    @classmethod
    def parse(cls, raw: object) -> Optional["TerritorialLevel"]:
        """Parsea un access_type; devuelve None si no es un nivel conocido."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


_LEVEL_ORDER: tuple[TerritorialLevel, ...] = (
    TerritorialLevel.LOCALIDAD,
    TerritorialLevel.CIRCUITO,
    TerritorialLevel.ESCUELA,
    TerritorialLevel.MESA,
)


@dataclass(frozen=True, slots=True, order=True)
class ScopeRef:
    """Referencia a un nodo territorial (nivel + id)."""

    level: TerritorialLevel
    id: int

    def __str__(self) -> str:
        return f"{self.level.value}:{self.id}"


@dataclass(frozen=True, slots=True)
class TerritorialNode:
    """
    Nodo del bosque territorial.

    Regla:
      - Localidad no tiene padre (parent_id=None).
      - El resto referencia exactamente un padre del nivel superior.
    """

    level: TerritorialLevel
    id: int
    parent_id: Optional[int] = None
    name: str = ""

    @property
    def ref(self) -> ScopeRef:
        return ScopeRef(self.level, self.id)

    @property
    def parent_ref(self) -> Optional[ScopeRef]:
        parent_level = self.level.parent_level
        if parent_level is None or self.parent_id is None:
            return None
        return ScopeRef(parent_level, self.parent_id)


@dataclass(frozen=True, slots=True)
class Ciudadano:
    """Ciudadano asignado a exactamente una Mesa; DNI único."""

    id: int
    dni: str
    mesa_id: int
    nombre: str = ""
    apellido: str = ""

    @property
    def scope_target(self) -> ScopeRef:
        return ScopeRef(TerritorialLevel.MESA, self.mesa_id)


@dataclass(frozen=True, slots=True)
class UserAccessGrant:
    """
    Grant territorial: (user, access_type, target_id).

    Nota:
      - access_type se guarda como string (tal cual viene del store);
        el motor lo parsea y saltea valores desconocidos.
    """

    user_id: int
    access_type: str
    target_id: int
    status: EntityStatus = EntityStatus.ACTIVE

    @property
    def level(self) -> Optional[TerritorialLevel]:
        return TerritorialLevel.parse(self.access_type)

    @property
    def is_active(self) -> bool:
        return self.status == EntityStatus.ACTIVE


# ---------------------------------------------------------------------------
# Roles / permisos / usuarios
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PermissionDefinition:
    """Fila del catálogo de permisos (capability con nombre único)."""

    name: str
    display_name: str = ""
    entity: str = ""
    action: str = ""


@dataclass(frozen=True, slots=True)
class Role:
    """Rol: nombre + bolsa de capabilities (orden irrelevante)."""

    id: int
    name: str
    display_name: str = ""
    permissions: frozenset[str] = field(default_factory=frozenset)
    status: EntityStatus = EntityStatus.ACTIVE
    description: str = ""

    @property
    def is_active(self) -> bool:
        return self.status == EntityStatus.ACTIVE


@dataclass(frozen=True, slots=True)
class User:
    """
    Usuario administrativo.

    created_by forma un bosque (cada usuario tiene a lo sumo un creador).
    """

    id: int
    email: str
    role_id: Optional[int]
    status: EntityStatus = EntityStatus.ACTIVE
    created_by: Optional[int] = None
    dni: Optional[str] = None
    telefono: Optional[str] = None
    first_name: str = ""
    last_name: str = ""
    password_hash: str = field(default="", repr=False)

    @property
    def is_active(self) -> bool:
        return self.status == EntityStatus.ACTIVE


@dataclass(frozen=True, slots=True)
class ActorContext:
    """
    Vista del actor que devuelve LoadActorContext.

    role_name/role_status son None cuando el usuario no tiene rol
    (o el rol fue borrado).
    """

    user_id: int
    status: EntityStatus
    role_name: Optional[str] = None
    role_status: Optional[EntityStatus] = None
    permissions: tuple[str, ...] = ()

    @property
    def is_active(self) -> bool:
        return self.status == EntityStatus.ACTIVE

    @property
    def has_active_role(self) -> bool:
        return self.role_name is not None and self.role_status == EntityStatus.ACTIVE


# ---------------------------------------------------------------------------
# Afiliados
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Affiliate:
    """Organización afiliada."""

    id: int
    name: str
    status: EntityStatus = EntityStatus.ACTIVE


@dataclass(frozen=True, slots=True)
class AffiliateEdge:
    """Arista "to es miembro de from" (tabla affiliate_members)."""

    from_affiliate_id: int
    to_affiliate_id: int


@dataclass(frozen=True, slots=True)
class UserAffiliate:
    """Pertenencia de un usuario a un afiliado."""

    user_id: int
    affiliate_id: int
