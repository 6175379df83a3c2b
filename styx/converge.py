"""
Orquestación de una ejecución de `styx setup`.

    precondiciones → configuración → clave privada → plan → apply → agente

Todo es síncrono salvo el agente de credenciales, que se lanza aparte.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from styx.core.doctor import REQUIRED_TOOLS, require_tools
from styx.core.infra.contracts import PlanResult, ProviderContract
from styx.core.permissions import require_root
from styx.core.project.models import StyxConfig
from styx.core.project.planner import ApplyReport, apply_plan, plan_resources
from styx.core.runtime.fingerprints import FingerprintStore
from styx.core.runtime.resolver import state_root
from styx.core.tools import CommandRunner, run_command, which
from styx.providers import build_providers
from styx.store import EnvStore, ensure_private_key, wg_genkey

logger = logging.getLogger("styx")

ProviderFactory = Callable[[StyxConfig, CommandRunner], Dict[str, ProviderContract]]


@dataclass
class ConvergeResult:
    config: StyxConfig
    plan: PlanResult
    report: ApplyReport

    @property
    def success(self) -> bool:
        return self.report.success


class Provisioner:
    """
    Una ejecución de convergencia sobre un único host.

    Las dependencias del host (comandos, providers, generador de claves,
    comprobación de root) se inyectan para poder probarlo sin tocar el sistema.
    """

    def __init__(
        self,
        env_file: Path,
        state_dir: Optional[Path] = None,
        runner: Optional[CommandRunner] = None,
        provider_factory: Optional[ProviderFactory] = None,
        keygen: Optional[Callable[[], str]] = None,
        check_root: Callable[[], None] = require_root,
        tool_lookup: Callable[[str], Optional[str]] = which,
        required_tools: Optional[List[str]] = None,
    ):
        self.store = EnvStore(env_file)
        self.fingerprints = FingerprintStore(state_dir or state_root())
        self.runner = runner or run_command
        self.provider_factory = provider_factory or (lambda config, runner: build_providers(config, runner))
        self.keygen = keygen or (lambda: wg_genkey(self.runner))
        self.check_root = check_root
        self.tool_lookup = tool_lookup
        self.required_tools = REQUIRED_TOOLS if required_tools is None else required_tools

    def preflight(self) -> StyxConfig:
        """Precondiciones fatales; nada se ha mutado si esto lanza."""
        self.check_root()
        logger.info("Cargando variables de entorno desde %s", self.store.path)
        config = self.store.load_config()
        require_tools(self.required_tools, self.tool_lookup)
        return config

    def plan(self, config: StyxConfig) -> PlanResult:
        providers = self.provider_factory(config, self.runner)
        return plan_resources(config, providers)

    def run(self) -> ConvergeResult:
        config = self.preflight()
        config = ensure_private_key(self.store, config, self.keygen)

        providers = self.provider_factory(config, self.runner)
        plan = plan_resources(config, providers)
        logger.info("Plan: %s", plan.summary)

        report = apply_plan(plan, providers, self.fingerprints)
        return ConvergeResult(config, plan, report)
