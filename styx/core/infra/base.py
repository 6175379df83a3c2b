"""
Base para providers: escritura de artefactos y ejecución de comandos.

Los providers pueden heredar de aquí o implementar solo el contrato (Protocol).
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from styx.core.errors import ConfigError, ResourceApplyError
from styx.core.project.models import StyxConfig
from styx.core.runtime.state import ApplyResult, ManagedResource, Observation
from styx.core.tools import CommandRunner, run_command

logger = logging.getLogger("styx")


class BaseProvider:
    """Base opcional para providers de un único archivo."""

    name: str = "base"
    path: Optional[Path] = None
    mode: Optional[int] = None

    def __init__(self, runner: Optional[CommandRunner] = None):
        self.runner = runner or run_command

    def desired(self, config: StyxConfig) -> str:
        raise NotImplementedError

    def observe(self) -> Observation:
        """Por defecto: contenido del archivo gestionado."""
        if self.path is None or not self.path.exists():
            return Observation(exists=False)
        return Observation(exists=True, content=self.read_artifact())

    def apply(self, resource: ManagedResource) -> ApplyResult:
        """Por defecto: escribe el archivo y no toca servicios."""
        self.write_artifact(resource.desired_content)
        return ApplyResult(resource.name, resource.target_action, True, f"{self.path} escrito")

    def read_artifact(self, path: Optional[Path] = None) -> str:
        """Contenido actual del artefacto; un archivo ilegible es un ConfigError."""
        target = path or self.path
        try:
            return target.read_text()
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"{self.name}: no se pudo leer {target}: {e}") from e

    def write_artifact(self, content: str, path: Optional[Path] = None) -> None:
        target = path or self.path
        if target is None:
            raise ResourceApplyError(self.name, "provider sin ruta de artefacto")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
            if self.mode is not None:
                os.chmod(target, self.mode)
        except OSError as e:
            raise ResourceApplyError(self.name, f"no se pudo escribir {target}: {e}") from e
        logger.info("%s: %s escrito", self.name, target)

    def run(self, command: List[str], cwd: Optional[Path] = None, timeout: int = 120) -> str:
        """Ejecuta un comando; cualquier fallo es un ResourceApplyError del recurso."""
        success, stdout, stderr = self.runner(command, cwd=cwd, timeout=timeout)
        if not success:
            reason = (stderr or stdout or "sin salida").strip()
            raise ResourceApplyError(self.name, f"'{' '.join(command)}' falló: {reason}")
        return stdout

    def check(self, command: List[str], cwd: Optional[Path] = None) -> bool:
        """Ejecuta un comando de consulta; solo importa el código de salida."""
        success, _, _ = self.runner(command, cwd=cwd, timeout=30)
        return success
