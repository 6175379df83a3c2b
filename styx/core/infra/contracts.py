"""
Contratos que deben implementar los providers de infraestructura.

El core solo define interfaces; la implementación vive en styx/providers/*.
Cada provider gestiona un único recurso y lo expone como capacidad
{observe, apply} para que el planner pueda probarse con providers falsos.
"""

from typing import TYPE_CHECKING, List, Protocol

from styx.core.runtime.state import ApplyResult, ManagedResource, Observation

if TYPE_CHECKING:
    from styx.core.project.models import StyxConfig


class PlanResult:
    """Resultado de un plan (qué se aplicaría) sin ejecutar."""
    def __init__(self, resources: List[ManagedResource], summary: str = ""):
        self.resources = resources
        self.summary = summary

    @property
    def pending(self) -> List[ManagedResource]:
        """Recursos con acción distinta de skip."""
        return [r for r in self.resources if r.target_action.value != "skip"]


class ProviderContract(Protocol):
    """
    Contrato mínimo de un provider.
    No decide nada; observa el artefacto real y aplica el contenido deseado.
    """
    @property
    def name(self) -> str:
        """Nombre del recurso gestionado (ej: wireguard, compose)."""
        ...

    def desired(self, config: "StyxConfig") -> str:
        """Contenido deseado del artefacto derivado de la configuración."""
        ...

    def observe(self) -> Observation:
        """Estado real del artefacto en el host."""
        ...

    def apply(self, resource: ManagedResource) -> ApplyResult:
        """Aplica create/update. Lanza ResourceApplyError si falla."""
        ...
