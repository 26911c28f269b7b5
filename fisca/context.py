"""
===============================================================================
TARJETA CRC — fisca/context.py (Contexto por request para logs)
===============================================================================

Responsabilidades:
  - Mantener contexto "request-scoped" usando ContextVars (async-safe).
  - Permitir correlación de logs sin pasar parámetros por todo el stack.
  - Proveer helpers mínimos: set_*(), get_context_dict(), clear_context().

Colaboradores:
  - interfaces.api.http.dependencies: setea request_id/actor_id al resolver acceso.
  - crosscutting.logger: enriquece logs leyendo get_context_dict().

Restricciones:
  - Solo para observabilidad. La autorización NUNCA lee el actor desde acá:
    el actor se pasa explícito a cada resolución (ver identity.access_resolver).
  - Solo tipos primitivos (str). Defaults vacíos ("") para simplificar JSON.
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Final

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
actor_id_var: ContextVar[str] = ContextVar("actor_id", default="")
http_method_var: ContextVar[str] = ContextVar("http_method", default="")
http_path_var: ContextVar[str] = ContextVar("http_path", default="")

_CTX_REQUEST_ID: Final[str] = "request_id"
_CTX_ACTOR_ID: Final[str] = "actor_id"
_CTX_METHOD: Final[str] = "method"
_CTX_PATH: Final[str] = "path"


def set_request_context(
    *, request_id: str = "", method: str = "", path: str = ""
) -> None:
    """
    Setea el contexto mínimo del request.

    Regla:
      - Strings vacíos significan "no disponible".
    """
    request_id_var.set(request_id or "")
    http_method_var.set(method or "")
    http_path_var.set(path or "")


def set_actor_context(actor_id: int | str | None) -> None:
    """Registra el actor del request (solo para correlación de logs)."""
    actor_id_var.set("" if actor_id is None else str(actor_id))


def get_context_dict() -> dict[str, str]:
    """Devuelve el contexto actual como dict, omitiendo claves vacías."""
    ctx: dict[str, str] = {}

    if val := request_id_var.get():
        ctx[_CTX_REQUEST_ID] = val
    if val := actor_id_var.get():
        ctx[_CTX_ACTOR_ID] = val
    if val := http_method_var.get():
        ctx[_CTX_METHOD] = val
    if val := http_path_var.get():
        ctx[_CTX_PATH] = val

    return ctx


def clear_context() -> None:
    """
    Limpia el contexto al final del request.

    Importante:
      - Evita "filtración de contexto" entre requests cuando hay workers async.
    """
    request_id_var.set("")
    actor_id_var.set("")
    http_method_var.set("")
    http_path_var.set("")
