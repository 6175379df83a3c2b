"""
Provider sysctl: reenvío de paquetes IPv4/IPv6.
"""

from pathlib import Path
from typing import Optional

from styx.core.infra.base import BaseProvider
from styx.core.project.models import StyxConfig
from styx.core.runtime.state import ApplyResult, ManagedResource, Observation
from styx.core.tools import CommandRunner
from styx.templates import generate_sysctl_forwarding


class IpForwardingProvider(BaseProvider):

    name = "ip-forwarding"

    def __init__(self, root: Path = Path("/"), runner: Optional[CommandRunner] = None):
        super().__init__(runner)
        self.path = root / "etc/sysctl.d/99-ip-forward.conf"

    def desired(self, config: StyxConfig) -> str:
        return generate_sysctl_forwarding()

    def observe(self) -> Observation:
        if not self.path.exists():
            return Observation(exists=False)
        success, stdout, _ = self.runner(["sysctl", "-n", "net.ipv4.ip_forward"], timeout=10)
        forwarding = success and stdout.strip() == "1"
        return Observation(
            exists=True,
            content=self.read_artifact(),
            healthy=forwarding,
            detail="" if forwarding else "net.ipv4.ip_forward=0 en el kernel",
        )

    def apply(self, resource: ManagedResource) -> ApplyResult:
        self.write_artifact(resource.desired_content)
        self.run(["sysctl", "-p", str(self.path)])
        return ApplyResult(resource.name, resource.target_action, True, "sysctl aplicado")
