"""
Identity: catálogo de permisos y roles, motor de resolución de acceso y
política de gestión de usuarios.
"""

from .access_resolver import (
    AuthorizationDecision,
    ResolvedContext,
    authorize,
    evaluate,
    filter_ciudadanos,
    in_scope,
    require,
    resolve,
    visible_ids,
    visible_mesa_ids,
)

__all__ = [
    "AuthorizationDecision",
    "ResolvedContext",
    "authorize",
    "evaluate",
    "filter_ciudadanos",
    "in_scope",
    "require",
    "resolve",
    "visible_ids",
    "visible_mesa_ids",
]
