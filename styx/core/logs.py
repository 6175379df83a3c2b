"""
Configuración de logging: consola con Rich y, opcionalmente, archivo.

El run principal escribe en el logger "styx"; el agente de credenciales en
"styx.bootstrap" con su propio archivo (no propaga a la consola del run).
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    verbose: bool = False,
    log_file: Optional[Path] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Configura el logger "styx" con handler Rich (timestamp incluido)."""
    logger = logging.getLogger("styx")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=False,
        log_time_format=f"[{DATE_FORMAT}]",
    )
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(rich_handler)

    if log_file is not None:
        logger.addHandler(_file_handler(log_file))

    return logger


def agent_logger(log_file: Optional[Path] = None) -> logging.Logger:
    """Logger del agente de credenciales con su propio sumidero."""
    logger = logging.getLogger("styx.bootstrap")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    if log_file is not None:
        logger.addHandler(_file_handler(log_file))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(handler)
    return logger


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    return handler
