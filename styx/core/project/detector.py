"""
Detección de drift: artefactos modificados a mano desde el último apply.

Compara el fingerprint registrado en el último apply con el del artefacto real.
"""

from typing import Any, List, Mapping

from styx.core.infra.contracts import ProviderContract
from styx.core.runtime.fingerprints import FingerprintStore
from styx.core.runtime.state import fingerprint


class StateDiff:
    """Diferencia entre el último estado aplicado y el real."""
    def __init__(
        self,
        resource_id: str,
        field: str,
        desired: Any,
        actual: Any,
        severity: str = "warning"
    ):
        self.resource_id = resource_id
        self.field = field
        self.desired = desired
        self.actual = actual
        self.severity = severity  # "error", "warning", "info"


def detect_drift(
    providers: Mapping[str, ProviderContract],
    fingerprints: FingerprintStore,
) -> List[StateDiff]:
    recorded = fingerprints.load()
    diffs: List[StateDiff] = []
    for name, provider in providers.items():
        entry = recorded.get(name)
        recorded_fp = entry.get("fingerprint") if isinstance(entry, dict) else None
        observation = provider.observe()
        if not recorded_fp:
            diffs.append(StateDiff(name, "fingerprint", "aplicado", "nunca aplicado", "info"))
            continue
        if not observation.exists:
            diffs.append(StateDiff(name, "artifact", "exists", "missing", "error"))
            continue
        actual = fingerprint(observation.content)
        if actual != recorded_fp:
            diffs.append(StateDiff(name, "fingerprint", recorded_fp[:12], (actual or "")[:12], "warning"))
        if not observation.healthy:
            diffs.append(StateDiff(name, "service", "active", observation.detail or "inactive", "error"))
    return diffs
