"""
===============================================================================
TARJETA CRC — dependencies.py (Dependencias FastAPI de acceso)
===============================================================================

Responsabilidades:
  - Exponer la AccessSession del request (una por request, en request.state).
  - Leer el actor autenticado desde request.state (lo setea el middleware de
    autenticación, fuera de este paquete).
  - Proveer require_capability(): guardia declarativa capability + scope.

Colaboradores:
  - fisca.container.new_access_session
  - fisca.application.access_session.AccessSession
  - fisca.crosscutting.error_responses (unauthorized / forbidden)
  - fisca.context (actor_id para logs)
===============================================================================
"""

from __future__ import annotations

from typing import Callable, Optional

from fastapi import Request

from fisca import container
from fisca.application.access_session import AccessSession
from fisca.context import set_actor_context, set_request_context
from fisca.crosscutting.error_responses import forbidden, unauthorized
from fisca.crosscutting.exceptions import Forbidden, Unauthenticated
from fisca.crosscutting.logger import logger
from fisca.identity.access_resolver import ResolvedContext, Target

TargetResolver = Callable[[Request], Optional[Target]]


def get_access_session(request: Request) -> AccessSession:
    """AccessSession request-scoped (se crea la primera vez que se pide)."""
    session = getattr(request.state, "access_session", None)
    if session is None:
        session = container.new_access_session()
        request.state.access_session = session
    return session


def get_actor_id(request: Request) -> int:
    """Actor autenticado del request; 401 si no hay."""
    actor_id = getattr(request.state, "actor_id", None)
    if actor_id is None:
        logger.warning(
            "Auth falló: request sin actor", extra={"path": request.url.path}
        )
        raise unauthorized()
    set_request_context(
        request_id=getattr(request.state, "request_id", "") or "",
        method=request.method,
        path=request.url.path,
    )
    set_actor_context(actor_id)
    return int(actor_id)


def require_capability(
    capability: str, target_resolver: TargetResolver | None = None
) -> Callable:
    """
    Dependency FastAPI: requiere capability (y scope si hay target).

    target_resolver recibe el Request y devuelve el ScopeRef / Ciudadano a
    chequear (o None para chequear solo la capability). Devuelve el
    ResolvedContext para que el router filtre listados.
    """

    async def dependency(request: Request) -> ResolvedContext:
        actor_id = get_actor_id(request)
        session = get_access_session(request)
        target = target_resolver(request) if target_resolver else None
        try:
            return session.require(actor_id, capability, target)
        except Unauthenticated as exc:
            raise unauthorized(exc.message) from exc
        except Forbidden as exc:
            raise forbidden(exc.message, reason=exc.reason.value) from exc

    # R: anotación útil para tests/introspección.
    dependency._required_capability = capability
    return dependency
