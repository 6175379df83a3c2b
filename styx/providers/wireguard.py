"""
Provider WireGuard: /etc/wireguard/<iface>.conf y wg-quick@<iface>.
"""

from pathlib import Path
from typing import Optional

from styx.core.infra.base import BaseProvider
from styx.core.project.models import StyxConfig
from styx.core.runtime.state import ApplyResult, ManagedResource, Observation
from styx.core.tools import CommandRunner
from styx.providers.systemd import start_or_restart, unit_is_active, unit_is_enabled
from styx.templates import generate_wireguard_config


class WireGuardProvider(BaseProvider):

    name = "wireguard"
    mode = 0o600

    def __init__(self, interface: str = "wg0", root: Path = Path("/"), runner: Optional[CommandRunner] = None):
        super().__init__(runner)
        self.path = root / "etc/wireguard" / f"{interface}.conf"
        self.unit = f"wg-quick@{interface}"

    def desired(self, config: StyxConfig) -> str:
        return generate_wireguard_config(config)

    def observe(self) -> Observation:
        if not self.path.exists():
            return Observation(exists=False)
        active = unit_is_active(self, self.unit)
        return Observation(
            exists=True,
            content=self.read_artifact(),
            healthy=active,
            detail="" if active else f"{self.unit} inactivo",
        )

    def apply(self, resource: ManagedResource) -> ApplyResult:
        self.write_artifact(resource.desired_content)
        if not unit_is_enabled(self, self.unit):
            self.run(["systemctl", "enable", self.unit])
        verb = start_or_restart(self, self.unit)
        return ApplyResult(resource.name, resource.target_action, True, f"{self.unit} {verb}")
