"""
Bootstrap: agente de credenciales del proxy y su ejecución en segundo plano.
"""

from styx.bootstrap.agent import AgentState, AttemptOutcome, CredentialAgent, HandshakeAttempt
from styx.bootstrap.task import HandshakeTask, handshake_command, launch_handshake, spawn_detached_handshake

__all__ = [
    "AgentState",
    "AttemptOutcome",
    "CredentialAgent",
    "HandshakeAttempt",
    "HandshakeTask",
    "handshake_command",
    "launch_handshake",
    "spawn_detached_handshake",
]
