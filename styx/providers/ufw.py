"""
Provider ufw: bloque NAT/forward gestionado en before.rules y política de forward.

El bloque va entre marcadores y se reemplaza en sitio; nunca se añade dos veces.
"""

import re
from pathlib import Path
from typing import Optional

from styx.core.errors import ConfigError, ResourceApplyError
from styx.core.infra.base import BaseProvider
from styx.core.project.models import StyxConfig
from styx.core.runtime.state import ApplyResult, ManagedResource, Observation
from styx.core.tools import CommandRunner
from styx.templates import UFW_BLOCK_BEGIN, UFW_BLOCK_END, UFW_FORWARD_POLICY, generate_ufw_block

_BLOCK_RE = re.compile(
    re.escape(UFW_BLOCK_BEGIN) + r".*?" + re.escape(UFW_BLOCK_END) + r"\n?",
    re.DOTALL,
)
_POLICY_RE = re.compile(r"^DEFAULT_FORWARD_POLICY=.*$", re.MULTILINE)


def extract_block(text: str) -> Optional[str]:
    """Bloque gestionado (marcadores incluidos) o None."""
    match = _BLOCK_RE.search(text)
    return match.group(0) if match else None


def replace_block(text: str, block: str) -> str:
    """Reemplaza el bloque gestionado o lo añade al final."""
    if not block.endswith("\n"):
        block += "\n"
    if _BLOCK_RE.search(text):
        return _BLOCK_RE.sub(lambda _: block, text, count=1)
    separator = "" if not text or text.endswith("\n\n") else ("\n" if text.endswith("\n") else "\n\n")
    return f"{text}{separator}{block}"


def set_forward_policy(text: str) -> str:
    """Fija DEFAULT_FORWARD_POLICY="DROP" (equivalente al sed del original)."""
    if _POLICY_RE.search(text):
        return _POLICY_RE.sub(UFW_FORWARD_POLICY, text, count=1)
    separator = "" if not text or text.endswith("\n") else "\n"
    return f"{text}{separator}{UFW_FORWARD_POLICY}\n"


class FirewallProvider(BaseProvider):

    name = "firewall"

    def __init__(self, root: Path = Path("/"), runner: Optional[CommandRunner] = None):
        super().__init__(runner)
        self.path = root / "etc/ufw/before.rules"
        self.defaults_path = root / "etc/default/ufw"

    def desired(self, config: StyxConfig) -> str:
        return generate_ufw_block(config) + UFW_FORWARD_POLICY + "\n"

    def _current_policy(self) -> str:
        if not self.defaults_path.exists():
            return ""
        match = _POLICY_RE.search(self.read_artifact(self.defaults_path))
        return match.group(0) + "\n" if match else ""

    def observe(self) -> Observation:
        if not self.path.exists():
            return Observation(exists=False)
        block = extract_block(self.read_artifact())
        if block is None:
            return Observation(exists=False, detail="bloque styx ausente")
        return Observation(exists=True, content=block + self._current_policy())

    def apply(self, resource: ManagedResource) -> ApplyResult:
        block = extract_block(resource.desired_content)
        if block is None:
            raise ResourceApplyError(self.name, "contenido deseado sin bloque gestionado")

        try:
            current = self.read_artifact() if self.path.exists() else ""
            defaults = self.read_artifact(self.defaults_path) if self.defaults_path.exists() else ""
        except ConfigError as e:
            raise ResourceApplyError(self.name, str(e)) from e

        self.write_artifact(replace_block(current, block))
        self.write_artifact(set_forward_policy(defaults), path=self.defaults_path)

        self.run(["ufw", "reload"])
        return ApplyResult(resource.name, resource.target_action, True, "ufw recargado")
