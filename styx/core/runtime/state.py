"""
Contratos de estado de los recursos gestionados.

Un ManagedResource se calcula una vez por ejecución y se aplica como mucho
una vez; la acción es función pura de (contenido deseado, estado actual).
"""

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ResourceState(str, Enum):
    ABSENT = "absent"
    PRESENT_STALE = "present-stale"
    PRESENT_CURRENT = "present-current"


class Action(str, Enum):
    SKIP = "skip"
    CREATE = "create"
    UPDATE = "update"


_ACTIONS = {
    ResourceState.ABSENT: Action.CREATE,
    ResourceState.PRESENT_STALE: Action.UPDATE,
    ResourceState.PRESENT_CURRENT: Action.SKIP,
}


def decide_action(state: ResourceState) -> Action:
    """absent → create, present-stale → update, present-current → skip."""
    return _ACTIONS[ResourceState(state)]


def fingerprint(content: Optional[str]) -> Optional[str]:
    """SHA-256 del contenido normalizado (sin espacios finales por línea)."""
    if content is None:
        return None
    normalized = "\n".join(line.rstrip() for line in content.strip().splitlines())
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class Observation:
    """Lo que un provider ve del artefacto real en el host."""
    exists: bool
    content: Optional[str] = None
    # False si el servicio que depende del artefacto no está activo/habilitado
    healthy: bool = True
    detail: str = ""


@dataclass(frozen=True)
class ManagedResource:
    name: str
    provider: str
    desired_content: str
    current_state: ResourceState
    target_action: Action
    detail: str = ""

    @property
    def desired_fingerprint(self) -> str:
        return fingerprint(self.desired_content)


@dataclass
class ApplyResult:
    """Resultado de aplicar un recurso."""
    resource: str
    action: Action
    success: bool
    message: str = ""
    # True si el stack del proxy se arrancó o reinició como efecto del apply
    started_stack: bool = field(default=False)
