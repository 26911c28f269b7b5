"""
===============================================================================
APPLICATION LAYER (Public API / Exports)
===============================================================================

Expone la sesión de acceso por request. Los casos de uso se importan desde
`usecases/` subdirectories.
===============================================================================
"""

from .access_session import AccessSession

__all__ = ["AccessSession"]
