"""
Providers podman: red de contenedores y definición del stack (compose).
"""

import logging
from pathlib import Path
from typing import Optional

from styx.core.errors import ResourceApplyError
from styx.core.infra.base import BaseProvider
from styx.core.project.models import StyxConfig
from styx.core.runtime.state import ApplyResult, ManagedResource, Observation
from styx.core.tools import CommandRunner
from styx.providers.systemd import unit_is_active
from styx.templates import NPM_NETWORK, NPM_UNIT, generate_compose

logger = logging.getLogger("styx")


class ContainerNetworkProvider(BaseProvider):
    """Red podman compartida por el proxy y la base de datos."""

    name = "container-network"

    def __init__(self, network: str = NPM_NETWORK, runner: Optional[CommandRunner] = None):
        super().__init__(runner)
        self.network = network

    def desired(self, config: StyxConfig) -> str:
        return self.network

    def observe(self) -> Observation:
        if not self.check(["podman", "network", "exists", self.network]):
            return Observation(exists=False)
        return Observation(exists=True, content=self.network)

    def apply(self, resource: ManagedResource) -> ApplyResult:
        self.run(["podman", "network", "create", self.network])
        return ApplyResult(resource.name, resource.target_action, True, f"red {self.network} creada")


class ComposeProvider(BaseProvider):
    """
    /opt/npm/docker-compose.yml y sus directorios de datos.

    Si el stack ya corre bajo su unidad, un cambio del compose reinicia la unidad.
    """

    name = "compose"

    def __init__(self, npm_home: Path = Path("/opt/npm"), runner: Optional[CommandRunner] = None):
        super().__init__(runner)
        self.npm_home = npm_home
        self.path = npm_home / "docker-compose.yml"

    def desired(self, config: StyxConfig) -> str:
        return generate_compose(config)

    def apply(self, resource: ManagedResource) -> ApplyResult:
        for sub in ("data", "letsencrypt"):
            try:
                (self.npm_home / sub).mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ResourceApplyError(self.name, f"no se pudo crear {self.npm_home / sub}: {e}") from e

        self.write_artifact(resource.desired_content)

        if unit_is_active(self, NPM_UNIT):
            logger.info("%s: configuración actualizada, reiniciando %s", self.name, NPM_UNIT)
            self.run(["systemctl", "restart", NPM_UNIT], timeout=300)
            return ApplyResult(resource.name, resource.target_action, True, f"{NPM_UNIT} reiniciado", started_stack=True)
        return ApplyResult(resource.name, resource.target_action, True, f"{self.path} escrito")
