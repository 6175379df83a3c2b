"""
Módulo Permissions - Verificación de privilegios
"""

import os

from styx.core.errors import PreconditionError


def is_root() -> bool:
    return os.geteuid() == 0


def require_root() -> None:
    """Lanza PreconditionError si el proceso no corre como root."""
    if not is_root():
        raise PreconditionError("Se requieren permisos de root (ejecuta con sudo)")
