"""
Módulo Tools - Utilidades compartidas (comandos del sistema, enmascarado)
"""

import logging
import re
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

logger = logging.getLogger("styx")

# (command, cwd=..., timeout=...) -> (success, stdout, stderr)
CommandRunner = Callable[..., Tuple[bool, str, str]]


def run_command(
    command: List[str],
    cwd: Optional[Path] = None,
    timeout: int = 120,
    capture_output: bool = True,
) -> Tuple[bool, str, str]:
    """
    Ejecuta un comando del sistema sin lanzar excepciones

    Args:
        command: Lista con comando y argumentos
        cwd: Directorio de trabajo
        timeout: Timeout en segundos
        capture_output: Si capturar stdout/stderr

    Returns:
        Tuple (success, stdout, stderr)
    """
    logger.debug("$ %s", " ".join(command))
    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            capture_output=capture_output,
            text=True,
            timeout=timeout,
            check=False,
        )
        return result.returncode == 0, result.stdout or "", result.stderr or ""
    except subprocess.TimeoutExpired:
        return False, "", f"Timeout ({timeout}s) ejecutando: {' '.join(command)}"
    except FileNotFoundError:
        return False, "", f"Comando no encontrado: {command[0]}"
    except OSError as e:
        return False, "", str(e)


def which(tool_name: str) -> Optional[str]:
    """Ruta absoluta de una herramienta o None si no está en PATH."""
    return shutil.which(tool_name)


def mask_secrets(text: str, secrets: Iterable[str], mask_char: str = "*") -> str:
    """
    Enmascara valores sensibles conocidos (contraseñas, claves) en un texto.

    Además de los valores explícitos, oculta cualquier campo "password" de un JSON.
    """
    for secret in secrets:
        if secret:
            text = text.replace(secret, mask_char * 8)
    return re.sub(
        r'("password"\s*:\s*")([^"]*)(")',
        lambda m: m.group(1) + mask_char * 8 + m.group(3),
        text,
    )
