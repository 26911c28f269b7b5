"""
===============================================================================
TARJETA CRC — domain/integrity.py
===============================================================================

Módulo:
    Guard de integridad jerárquica (validaciones previas a escribir)

Responsabilidades:
    - Rechazar ciclos en la cadena de creadores (created_by).
    - Rechazar ciclos y aristas duplicadas en el grafo de afiliados.
    - Rechazar grants nuevos que apunten a nodos territoriales inexistentes.
    - Detectar grants colgantes (target borrado) para revalidar/cascadear.
    - Rechazar DNI/teléfono duplicados al crear/editar usuarios.

Colaboradores:
    - domain.user_hierarchy.CreatorForest
    - domain.affiliates.AffiliateGraph
    - domain.territory.HierarchySnapshot
    - crosscutting.exceptions (CycleError, DuplicateEdgeError, ...)
    - application.usecases.*: llaman al guard dentro de la transacción del store

Contrato:
    - Funciones puras: sin I/O, operan sobre el snapshot recibido.
    - Válido SOLO contra un snapshot tomado con aislamiento adecuado: dos
      inserciones concurrentes validadas contra snapshots previos podrían
      cerrar un ciclo entre ambas. Serializar las escrituras es tarea del
      store (insert transaccional).
    - Asimetría intencional: un grant histórico colgante se SALTEA al resolver;
      un grant NUEVO colgante se RECHAZA acá.
===============================================================================
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..crosscutting.exceptions import (
    ConflictError,
    CycleError,
    DuplicateEdgeError,
    UnknownTargetError,
)
from .affiliates import AffiliateGraph
from .entities import TerritorialLevel, User, UserAccessGrant
from .territory import HierarchySnapshot
from .user_hierarchy import CreatorForest


def validate_creator_assignment(
    user_id: int, creator_id: Optional[int], creators: CreatorForest
) -> None:
    """
    Valida asignar creator_id como creador de user_id.

    Raises:
        CycleError: si creator_id == user_id o si user_id ya es ancestro
            de creator_id (solo posible al editar un usuario existente).
    """
    if creator_id is None:
        return

    if creator_id == user_id:
        raise CycleError(f"El usuario {user_id} no puede ser su propio creador")

    for ancestor in creators.creator_chain(creator_id):
        if ancestor == user_id:
            raise CycleError(
                f"Asignar {creator_id} como creador de {user_id} crearía un ciclo"
            )


def validate_affiliate_edge(from_id: int, to_id: int, graph: AffiliateGraph) -> None:
    """
    Valida agregar la arista from -> to (to pasa a ser miembro de from).

    Raises:
        DuplicateEdgeError: la arista exacta ya existe.
        CycleError: from ya está en la clausura de miembros de to
            (incluye el caso from == to).
    """
    if graph.has_edge(from_id, to_id):
        raise DuplicateEdgeError(
            f"El afiliado {to_id} ya es miembro de {from_id}"
        )
    if graph.would_create_cycle(from_id, to_id):
        raise CycleError(
            f"Agregar {to_id} como miembro de {from_id} crearía un ciclo"
        )


def validate_access_grant(
    access_type: str | TerritorialLevel, target_id: int, hierarchy: HierarchySnapshot
) -> TerritorialLevel:
    """
    Valida un grant nuevo y devuelve el nivel parseado.

    Raises:
        UnknownTargetError: nivel desconocido o nodo inexistente.
    """
    level = TerritorialLevel.parse(access_type)
    if level is None:
        raise UnknownTargetError(f"Tipo de acceso desconocido: {access_type!r}")
    if not hierarchy.exists(level, target_id):
        raise UnknownTargetError(f"No existe {level.value} con id {target_id}")
    return level


def find_dangling_grants(
    grants: Iterable[UserAccessGrant], hierarchy: HierarchySnapshot
) -> list[UserAccessGrant]:
    """Grants cuyo nivel es inválido o cuyo target ya no existe."""
    dangling: list[UserAccessGrant] = []
    for grant in grants:
        level = grant.level
        if level is None or not hierarchy.exists(level, grant.target_id):
            dangling.append(grant)
    return dangling


def validate_unique_user_fields(
    *,
    dni: Optional[str],
    telefono: Optional[str],
    existing_users: Iterable[User],
    exclude_user_id: Optional[int] = None,
) -> None:
    """
    Rechaza DNI o teléfono ya registrados por OTRO usuario.

    Raises:
        ConflictError: con field="dni" o field="telefono".
    """
    wanted_dni = (dni or "").strip()
    wanted_phone = str(telefono or "").strip()
    if not wanted_dni and not wanted_phone:
        return

    for user in existing_users:
        if exclude_user_id is not None and user.id == exclude_user_id:
            continue
        if wanted_dni and (user.dni or "").strip() == wanted_dni:
            raise ConflictError(
                "El DNI ya está registrado en el sistema", field="dni"
            )
        if wanted_phone and str(user.telefono or "").strip() == wanted_phone:
            raise ConflictError(
                "El número de teléfono ya está registrado en el sistema",
                field="telefono",
            )
