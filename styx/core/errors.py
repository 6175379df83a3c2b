"""
Errores de styx.

El core solo define excepciones; la CLI se encarga del formato de salida
y del código de salida.
"""

from typing import List, Optional


class StyxError(Exception):
    """Error base de styx."""
    pass


class ConfigError(StyxError):
    """Error del almacén de configuración (archivo faltante, formato inválido)."""
    pass


class PreconditionError(StyxError):
    """
    Precondición fatal: sin root, variable requerida vacía o herramienta ausente.
    Se lanza antes de cualquier mutación del host.
    """

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        super().__init__(message)
        self.missing = list(missing or [])


class ResourceApplyError(StyxError):
    """Falló el create/update de un recurso gestionado."""

    def __init__(self, resource: str, reason: str):
        super().__init__(f"{resource}: {reason}")
        self.resource = resource
        self.reason = reason


class ProbeTimeoutError(StyxError):
    """El agente agotó los intentos de sondeo sin respuesta de la API."""
    pass


class MutationError(StyxError):
    """La API rechazó el reemplazo de credenciales."""
    pass
