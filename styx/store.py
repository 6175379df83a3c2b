"""
Almacén de configuración key=value (/root/styx_env.sh).

Se lee una vez al inicio; solo WG_PRIVATE_KEY se escribe de vuelta, y solo
si estaba vacía. Sin bloqueo: invocaciones concurrentes no están soportadas.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Dict, Optional

from dotenv import dotenv_values, set_key

from styx.core.errors import ConfigError, PreconditionError
from styx.core.project.models import StyxConfig
from styx.core.project.validator import build_config
from styx.core.tools import CommandRunner, run_command
from styx.templates import generate_env_template

logger = logging.getLogger("styx")

PRIVATE_KEY = "WG_PRIVATE_KEY"


class EnvStore:
    """Lectura y escritura del archivo de entorno con python-dotenv."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Dict[str, Optional[str]]:
        if not self.exists():
            raise PreconditionError(
                f"Archivo de entorno no encontrado: {self.path}. "
                "Créalo con 'styx init-env' y completa las variables requeridas",
                missing=[str(self.path)],
            )
        try:
            return dict(dotenv_values(self.path))
        except OSError as e:
            raise ConfigError(f"No se pudo leer {self.path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        """Escribe `export KEY='value'` reemplazando la línea existente."""
        success, _, _ = set_key(str(self.path), key, value, quote_mode="always", export=True)
        if not success:
            raise ConfigError(f"No se pudo escribir {key} en {self.path}")

    def load_config(self) -> StyxConfig:
        return build_config(self.load())

    def write_template(self, overwrite: bool = False) -> bool:
        """Crea el archivo desde la plantilla (0600). False si ya existía."""
        if self.exists() and not overwrite:
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(generate_env_template())
        os.chmod(self.path, 0o600)
        return True


def wg_genkey(runner: Optional[CommandRunner] = None) -> str:
    """Genera una clave privada con `wg genkey`."""
    runner = runner or run_command
    success, stdout, stderr = runner(["wg", "genkey"], timeout=10)
    key = stdout.strip()
    if not success or not key:
        raise PreconditionError(f"No se pudo generar la clave WireGuard: {stderr.strip() or 'salida vacía'}")
    return key


def ensure_private_key(
    store: EnvStore,
    config: StyxConfig,
    keygen: Callable[[], str] = wg_genkey,
) -> StyxConfig:
    """
    Devuelve la configuración con clave privada. Si faltaba, la genera una vez
    y la persiste en el almacén antes de usarla.
    """
    if config.wg_private_key:
        return config

    logger.info("Generando clave privada WireGuard")
    private_key = keygen()
    store.set(PRIVATE_KEY, private_key)
    logger.info("Clave privada WireGuard generada y guardada en %s", store.path)
    return config.with_private_key(private_key)
