"""
Planificación y aplicación de la convergencia.

- plan_resources(): clasifica cada recurso (create/update/skip) sin ejecutar nada.
- apply_plan(): aplica en orden de dependencias fijo; se detiene en el primer fallo.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from styx.core.errors import PreconditionError, ResourceApplyError
from styx.core.infra.contracts import PlanResult, ProviderContract
from styx.core.project.models import StyxConfig
from styx.core.runtime.fingerprints import FingerprintStore
from styx.core.runtime.state import (
    Action,
    ApplyResult,
    ManagedResource,
    Observation,
    ResourceState,
    decide_action,
    fingerprint,
)

logger = logging.getLogger("styx")


# Orden topológico fijo: VPN antes que el firewall que referencia wg0,
# compose antes que la unidad que lo levanta.
RESOURCE_ORDER = [
    "wireguard",
    "ip-forwarding",
    "firewall",
    "container-network",
    "compose",
    "proxy-unit",
]


def classify(desired_content: str, observation: Observation) -> ResourceState:
    """Fingerprint check: estado actual del artefacto frente al contenido deseado."""
    if not observation.exists:
        return ResourceState.ABSENT
    if not observation.healthy:
        return ResourceState.PRESENT_STALE
    if fingerprint(observation.content) != fingerprint(desired_content):
        return ResourceState.PRESENT_STALE
    return ResourceState.PRESENT_CURRENT


def _ordered(providers: Mapping[str, ProviderContract]) -> List[ProviderContract]:
    unknown = sorted(set(providers) - set(RESOURCE_ORDER))
    if unknown:
        raise PreconditionError(f"Recursos desconocidos: {', '.join(unknown)}")
    absent = [name for name in RESOURCE_ORDER if name not in providers]
    if absent:
        raise PreconditionError(f"Sin provider para: {', '.join(absent)}", missing=absent)
    return [providers[name] for name in RESOURCE_ORDER]


def plan_resources(config: StyxConfig, providers: Mapping[str, ProviderContract]) -> PlanResult:
    """Calcula el ManagedResource de cada recurso (sin ejecutar)."""
    resources: List[ManagedResource] = []
    for provider in _ordered(providers):
        desired = provider.desired(config)
        observation = provider.observe()
        state = classify(desired, observation)
        resources.append(ManagedResource(
            name=provider.name,
            provider=type(provider).__name__,
            desired_content=desired,
            current_state=state,
            target_action=decide_action(state),
            detail=observation.detail,
        ))
        logger.debug("%s: %s → %s", provider.name, state.value, decide_action(state).value)

    pending = sum(1 for r in resources if r.target_action != Action.SKIP)
    return PlanResult(resources, summary=f"{pending} de {len(resources)} recursos con cambios")


@dataclass
class ApplyReport:
    """Resultado de aplicar un plan completo."""
    results: List[ApplyResult] = field(default_factory=list)
    failed: Optional[ResourceApplyError] = None

    @property
    def success(self) -> bool:
        return self.failed is None

    @property
    def changed(self) -> List[str]:
        return [r.resource for r in self.results if r.action != Action.SKIP and r.success]

    @property
    def started_stack(self) -> bool:
        return any(r.started_stack for r in self.results)


def apply_plan(
    plan: PlanResult,
    providers: Mapping[str, ProviderContract],
    fingerprints: Optional[FingerprintStore] = None,
) -> ApplyReport:
    """
    Aplica cada recurso en orden. Un fallo detiene los pasos restantes;
    lo ya aplicado no se revierte y nada se reintenta.
    """
    report = ApplyReport()
    for resource in plan.resources:
        if resource.target_action == Action.SKIP:
            logger.info("%s: al día, sin cambios", resource.name)
            report.results.append(ApplyResult(resource.name, Action.SKIP, True, "sin cambios"))
            continue

        logger.info("%s: %s", resource.name, resource.target_action.value)
        try:
            result = providers[resource.name].apply(resource)
        except ResourceApplyError as e:
            logger.error("%s: falló el %s: %s", resource.name, resource.target_action.value, e.reason)
            report.failed = e
            return report

        report.results.append(result)
        if fingerprints is not None:
            fingerprints.record(resource.name, resource.desired_fingerprint)
    return report
