"""
Provider systemd: unidad que supervisa el stack del proxy.
También expone helpers de consulta/arranque usados por otros providers.
"""

import logging
from pathlib import Path
from typing import Optional

from styx.core.errors import ResourceApplyError
from styx.core.infra.base import BaseProvider
from styx.core.project.models import StyxConfig
from styx.core.runtime.state import ApplyResult, ManagedResource, Observation
from styx.core.tools import CommandRunner
from styx.templates import NPM_UNIT, generate_proxy_unit

logger = logging.getLogger("styx")


def unit_is_active(provider: BaseProvider, unit: str) -> bool:
    return provider.check(["systemctl", "is-active", "--quiet", unit])


def unit_is_enabled(provider: BaseProvider, unit: str) -> bool:
    return provider.check(["systemctl", "is-enabled", "--quiet", unit])


def start_or_restart(provider: BaseProvider, unit: str) -> str:
    """Arranca la unidad, o la reinicia si ya estaba activa. Devuelve el verbo usado."""
    if unit_is_active(provider, unit):
        logger.info("%s: reiniciando %s para aplicar la nueva configuración", provider.name, unit)
        provider.run(["systemctl", "restart", unit])
        return "reiniciado"
    logger.info("%s: arrancando %s", provider.name, unit)
    provider.run(["systemctl", "start", unit])
    return "arrancado"


class ProxyUnitProvider(BaseProvider):
    """nginx-proxy-manager.service: habilitado y activo."""

    name = "proxy-unit"

    def __init__(
        self,
        root: Path = Path("/"),
        compose_bin: str = "/usr/local/bin/podman-compose",
        npm_home: Path = Path("/opt/npm"),
        runner: Optional[CommandRunner] = None,
    ):
        super().__init__(runner)
        self.path = root / "etc/systemd/system" / f"{NPM_UNIT}.service"
        self.compose_bin = compose_bin
        self.npm_home = npm_home

    def desired(self, config: StyxConfig) -> str:
        return generate_proxy_unit(self.compose_bin, str(self.npm_home))

    def observe(self) -> Observation:
        if not self.path.exists():
            return Observation(exists=False)
        enabled = unit_is_enabled(self, NPM_UNIT)
        active = unit_is_active(self, NPM_UNIT)
        detail = "" if enabled and active else f"enabled={enabled} active={active}"
        return Observation(exists=True, content=self.read_artifact(), healthy=enabled and active, detail=detail)

    def apply(self, resource: ManagedResource) -> ApplyResult:
        self.write_artifact(resource.desired_content)
        self.run(["systemctl", "daemon-reload"])
        if not unit_is_enabled(self, NPM_UNIT):
            self.run(["systemctl", "enable", NPM_UNIT])
        verb = start_or_restart(self, NPM_UNIT)
        if not unit_is_active(self, NPM_UNIT):
            raise ResourceApplyError(self.name, f"{NPM_UNIT} no quedó activo tras el arranque")
        return ApplyResult(resource.name, resource.target_action, True, f"{NPM_UNIT} {verb}", started_stack=True)
