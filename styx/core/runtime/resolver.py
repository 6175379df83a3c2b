"""
Resolución de rutas del host.

- state_root(): directorio de estado de styx (/var/lib/styx).
- env_file_path(): almacén de configuración key=value (/root/styx_env.sh).
- credentials_marker(): marca del último reemplazo de credenciales con éxito.

Las dos primeras se pueden sobreescribir por variable de entorno (útil en tests y en hosts
que no son el bastión).
"""

import os
from pathlib import Path
from typing import Optional


# Ruta canónica del estado (fingerprints del último apply)
STYX_STATE_ROOT = Path("/var/lib/styx")

# Almacén de configuración que deja cloud-init
STYX_ENV_FILE = Path("/root/styx_env.sh")

# Marca de provisión completada
SETUP_COMPLETE_MARKER = Path("/root/styx_setup_complete")

# Directorio del stack del proxy
NPM_HOME = Path("/opt/npm")

# Log propio del agente de credenciales
HANDSHAKE_LOG = NPM_HOME / "update_credentials.log"


def state_root() -> Path:
    """Directorio raíz del estado de styx; STYX_STATE_ROOT lo sobreescribe."""
    explicit = os.environ.get("STYX_STATE_ROOT", "").strip()
    if explicit:
        return Path(explicit).expanduser()
    return STYX_STATE_ROOT


def env_file_path(explicit: Optional[Path] = None) -> Path:
    """
    Ruta del almacén de configuración.
    Resolución: argumento explícito → STYX_ENV_FILE → /root/styx_env.sh.
    """
    if explicit is not None:
        return Path(explicit).expanduser()
    from_env = os.environ.get("STYX_ENV_FILE", "").strip()
    if from_env:
        return Path(from_env).expanduser()
    return STYX_ENV_FILE


def credentials_marker() -> Path:
    """Marca de credenciales del proxy ya reemplazadas por el agente."""
    return state_root() / "credentials_replaced"
