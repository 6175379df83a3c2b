"""
Contratos y base para providers (wireguard, sysctl, ufw, podman, systemd).

El core no depende de ningún provider concreto.
"""

from styx.core.infra.contracts import ProviderContract, PlanResult

__all__ = ["ProviderContract", "PlanResult"]
