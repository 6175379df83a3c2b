"""
Ejecución del agente de credenciales fuera del flujo principal.

Dos formas:
- HandshakeTask: hilo con su propio Future dentro del proceso; el run
  principal lo espera con join() (`styx setup --wait`).
- spawn_detached_handshake: proceso `styx credentials` en su propia sesión,
  que sobrevive a la salida de `styx setup` (por defecto).
"""

import logging
import subprocess
import sys
import threading
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Callable, List, Optional

from styx.bootstrap.agent import AgentState, CredentialAgent

logger = logging.getLogger("styx")


class HandshakeTask:

    def __init__(self, agent: CredentialAgent):
        self.agent = agent
        self.future: "Future[AgentState]" = Future()
        self._thread = threading.Thread(target=self._run, name="styx-handshake", daemon=True)

    def start(self) -> "HandshakeTask":
        self._thread.start()
        return self

    def _run(self) -> None:
        if not self.future.set_running_or_notify_cancel():
            return
        try:
            self.future.set_result(self.agent.run())
        except Exception as e:
            self.future.set_exception(e)

    @property
    def done(self) -> bool:
        return self.future.done()

    def join(self, timeout: Optional[float] = None) -> Optional[AgentState]:
        """Estado final del agente, o None si no terminó dentro del timeout."""
        try:
            return self.future.result(timeout=timeout)
        except FutureTimeoutError:
            return None


def launch_handshake(agent: CredentialAgent) -> HandshakeTask:
    """Lanza el agente en un hilo y devuelve su handle."""
    return HandshakeTask(agent).start()


def handshake_command(
    env_file: Path,
    attempts: int,
    delay: float,
    log_file: Path,
    api_url: Optional[str] = None,
) -> List[str]:
    command = [
        sys.executable, "-m", "styx", "credentials",
        "--env-file", str(env_file),
        "--attempts", str(attempts),
        "--delay", str(delay),
        "--agent-log", str(log_file),
    ]
    if api_url:
        command += ["--api-url", api_url]
    return command


def spawn_detached_handshake(
    command: List[str],
    popen: Callable[..., subprocess.Popen] = subprocess.Popen,
) -> int:
    """
    Lanza el agente como proceso independiente y devuelve su PID.

    Sesión propia y sin stdio heredado: ni la salida de `styx setup` ni el
    cierre de su terminal lo interrumpen. Su resultado queda en su log.
    """
    process = popen(
        command,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
        close_fds=True,
    )
    logger.info("Agente de credenciales en segundo plano (pid=%s)", process.pid)
    return process.pid
