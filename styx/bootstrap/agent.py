"""
Agente de credenciales del proxy (bootstrap handshake).

Sondea la API de administración hasta que responde (intentos acotados) y
reemplaza una única vez la identidad por defecto del administrador.

    Polling → Ready → Mutating → Succeeded | MutationFailed
    Polling → Exhausted
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

import requests

from styx.core.errors import MutationError, ProbeTimeoutError
from styx.core.tools import mask_secrets

DEFAULT_API_URL = "http://127.0.0.1:81"
READINESS_PATH = "/api/tokens"
ADMIN_USER_PATH = "/api/users/1"

# Identidad de fábrica de Nginx Proxy Manager
FACTORY_EMAIL = "admin@example.com"
FACTORY_PASSWORD = "changeme"

DEFAULT_MAX_ATTEMPTS = 30
DEFAULT_DELAY = 10.0


class AttemptOutcome(str, Enum):
    PENDING = "pending"
    READY = "ready"
    EXHAUSTED = "exhausted"


class AgentState(str, Enum):
    POLLING = "polling"
    READY = "ready"
    MUTATING = "mutating"
    SUCCEEDED = "succeeded"
    MUTATION_FAILED = "mutation-failed"
    EXHAUSTED = "exhausted"


TERMINAL_STATES = {AgentState.SUCCEEDED, AgentState.MUTATION_FAILED, AgentState.EXHAUSTED}


@dataclass
class HandshakeAttempt:
    """Contador de sondeos; avanza de forma monótona hasta ready o exhausted."""
    max_attempts: int
    delay: float
    attempt_number: int = 0
    outcome: AttemptOutcome = AttemptOutcome.PENDING

    @property
    def terminal(self) -> bool:
        return self.outcome != AttemptOutcome.PENDING

    def advance(self) -> int:
        if self.terminal:
            raise RuntimeError(f"Intento ya terminado: {self.outcome.value}")
        self.attempt_number += 1
        return self.attempt_number

    def mark_ready(self) -> None:
        self.outcome = AttemptOutcome.READY

    def mark_exhausted(self) -> None:
        self.outcome = AttemptOutcome.EXHAUSTED


class CredentialAgent:
    """Reemplaza las credenciales por defecto del administrador del proxy."""

    def __init__(
        self,
        email: str,
        password: str,
        api_url: str = DEFAULT_API_URL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        delay: float = DEFAULT_DELAY,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
        timeout: float = 5.0,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts debe ser >= 1")
        self.email = email
        self.password = password
        self.api_url = api_url.rstrip("/")
        self.max_attempts = max_attempts
        self.delay = delay
        self.session = session or requests.Session()
        self.sleep = sleep
        self.logger = logger or logging.getLogger("styx.bootstrap")
        self.timeout = timeout
        self.state = AgentState.POLLING
        self._mutated = False

    def probe(self) -> bool:
        """Cualquier respuesta HTTP cuenta como lista; errores de red no."""
        try:
            self.session.get(f"{self.api_url}{READINESS_PATH}", timeout=self.timeout)
            return True
        except requests.RequestException:
            return False

    def wait_until_ready(self) -> HandshakeAttempt:
        """Sondeo secuencial; lanza ProbeTimeoutError al agotar los intentos."""
        attempt = HandshakeAttempt(self.max_attempts, self.delay)
        self.logger.info("Esperando a que la API de Nginx Proxy Manager esté disponible...")
        while True:
            number = attempt.advance()
            if self.probe():
                attempt.mark_ready()
                self.state = AgentState.READY
                return attempt
            if number >= attempt.max_attempts:
                attempt.mark_exhausted()
                self.state = AgentState.EXHAUSTED
                raise ProbeTimeoutError(
                    f"La API no respondió tras {attempt.max_attempts} intentos"
                )
            self.logger.info("Intento %d/%d - API no disponible, esperando...", number, attempt.max_attempts)
            self.sleep(attempt.delay)

    def _login(self) -> str:
        """Token de la identidad de fábrica (no muta nada)."""
        try:
            response = self.session.post(
                f"{self.api_url}{READINESS_PATH}",
                json={"identity": FACTORY_EMAIL, "secret": FACTORY_PASSWORD},
                timeout=self.timeout,
            )
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            raise MutationError(f"No se pudo autenticar con la identidad por defecto: {e}") from e
        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            raise MutationError(f"Login rechazado: {str(body)[:200]}")
        return token

    def payload(self) -> Dict[str, Any]:
        return {
            "email": self.email,
            "name": "Styx Admin",
            "nickname": "admin",
            "password": self.password,
            "roles": ["admin"],
        }

    def replace_credentials(self) -> Dict[str, Any]:
        """
        Una única escritura autenticada. Nunca se reintenta, ni siquiera si falla.
        """
        if self._mutated:
            raise MutationError("El reemplazo de credenciales ya se intentó en esta ejecución")
        self.state = AgentState.MUTATING
        self._mutated = True

        token = self._login()
        try:
            response = self.session.put(
                f"{self.api_url}{ADMIN_USER_PATH}",
                json=self.payload(),
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout,
            )
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            raise MutationError(f"Fallo al actualizar credenciales: {e}") from e

        if not isinstance(body, dict) or "id" not in body:
            text = mask_secrets(str(body), [self.password, token])
            raise MutationError(f"Fallo al actualizar credenciales. Respuesta: {text[:300]}")
        return body

    def run(self) -> AgentState:
        """Ejecuta el handshake completo. No lanza: el resultado queda en el log."""
        try:
            self.wait_until_ready()
        except ProbeTimeoutError as e:
            self.logger.error("ERROR: %s", e)
            return self.state

        self.logger.info("API disponible, actualizando credenciales...")
        try:
            self.replace_credentials()
        except MutationError as e:
            self.state = AgentState.MUTATION_FAILED
            self.logger.error("%s", e)
            return self.state

        self.state = AgentState.SUCCEEDED
        self.logger.info("Credenciales actualizadas correctamente")
        return self.state
