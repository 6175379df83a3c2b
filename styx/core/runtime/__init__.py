"""
Runtime: rutas del host y contratos de estado de los recursos gestionados.
"""

from styx.core.runtime.resolver import state_root, env_file_path
from styx.core.runtime.state import (
    Action,
    ApplyResult,
    ManagedResource,
    Observation,
    ResourceState,
    decide_action,
)

__all__ = [
    "state_root",
    "env_file_path",
    "Action",
    "ApplyResult",
    "ManagedResource",
    "Observation",
    "ResourceState",
    "decide_action",
]
