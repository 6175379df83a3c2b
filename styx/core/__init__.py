"""
Core: lógica de convergencia.

ENFORCEMENT:
- Este paquete NO debe importar: styx.cli ni styx.providers (implementaciones).
- Los providers y la CLI importan desde core; nunca al revés.
"""

from styx.core.errors import (
    StyxError,
    ConfigError,
    PreconditionError,
    ResourceApplyError,
    ProbeTimeoutError,
    MutationError,
)

__all__ = [
    "StyxError",
    "ConfigError",
    "PreconditionError",
    "ResourceApplyError",
    "ProbeTimeoutError",
    "MutationError",
]
