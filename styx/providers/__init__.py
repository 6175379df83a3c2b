"""
Providers de infraestructura: uno por herramienta del host.

build_providers() arma el mapa recurso → provider que consume el planner.
"""

from pathlib import Path
from typing import Dict, Optional

from styx.core.infra.contracts import ProviderContract
from styx.core.project.models import StyxConfig
from styx.core.runtime.resolver import NPM_HOME
from styx.core.tools import CommandRunner, run_command, which
from styx.providers.podman import ComposeProvider, ContainerNetworkProvider
from styx.providers.sysctl import IpForwardingProvider
from styx.providers.systemd import ProxyUnitProvider
from styx.providers.ufw import FirewallProvider
from styx.providers.wireguard import WireGuardProvider

DEFAULT_COMPOSE_BIN = "/usr/local/bin/podman-compose"


def build_providers(
    config: StyxConfig,
    runner: Optional[CommandRunner] = None,
    root: Path = Path("/"),
    compose_bin: Optional[str] = None,
) -> Dict[str, ProviderContract]:
    """
    Providers reales del host. `root` permite apuntar a un árbol alternativo
    (tests, chroot); los comandos siguen pasando por `runner`.
    """
    runner = runner or run_command
    npm_home = root / NPM_HOME.relative_to("/")
    compose_bin = compose_bin or which("podman-compose") or DEFAULT_COMPOSE_BIN
    providers = [
        WireGuardProvider(interface=config.wg_interface, root=root, runner=runner),
        IpForwardingProvider(root=root, runner=runner),
        FirewallProvider(root=root, runner=runner),
        ContainerNetworkProvider(runner=runner),
        ComposeProvider(npm_home=npm_home, runner=runner),
        ProxyUnitProvider(root=root, compose_bin=compose_bin, npm_home=npm_home, runner=runner),
    ]
    return {provider.name: provider for provider in providers}


__all__ = [
    "build_providers",
    "WireGuardProvider",
    "IpForwardingProvider",
    "FirewallProvider",
    "ContainerNetworkProvider",
    "ComposeProvider",
    "ProxyUnitProvider",
]
