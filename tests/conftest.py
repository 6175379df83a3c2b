"""Shared fixtures: a fake host command runner and example configuration."""

from pathlib import Path
from typing import List, Optional

import pytest

from styx.converge import Provisioner
from styx.core.project.models import StyxConfig
from styx.providers import build_providers

EXAMPLE_ENV = """# Wireguard configuration
export WG_PRIVATE_KEY=""
export WG_CLIENT_IP="10.0.0.2"
export WG_PEER_PUBLIC_KEY="ABC"
export WG_ALLOWED_IPS="10.0.0.0/24"

export DOMAIN_NAME="example.com"

export NPM_ADMIN_EMAIL="a@b.com"
export NPM_ADMIN_PASSWORD="secret123"
export NPM_DATABASE_PASSWORD="dbpass"
"""

QUERY_PREFIXES = [
    ["systemctl", "is-active"],
    ["systemctl", "is-enabled"],
    ["podman", "network", "exists"],
    ["sysctl", "-n"],
]


class FakeHost:
    """Command runner that keeps just enough host state for the providers."""

    def __init__(self):
        self.commands: List[List[str]] = []
        self.active = set()
        self.enabled = set()
        self.networks = set()
        self.ip_forward = "0"
        self.fail_on: Optional[List[str]] = None

    def __call__(self, command, cwd=None, timeout=120):
        command = list(command)
        self.commands.append(command)
        if self.fail_on and command[:len(self.fail_on)] == self.fail_on:
            return False, "", "boom"

        head = command[:2]
        if head == ["systemctl", "is-active"]:
            return command[-1] in self.active, "", ""
        if head == ["systemctl", "is-enabled"]:
            return command[-1] in self.enabled, "", ""
        if head == ["systemctl", "enable"]:
            self.enabled.add(command[-1])
        elif head in (["systemctl", "start"], ["systemctl", "restart"]):
            self.active.add(command[-1])
        elif command[:3] == ["podman", "network", "exists"]:
            return command[-1] in self.networks, "", ""
        elif command[:3] == ["podman", "network", "create"]:
            self.networks.add(command[-1])
        elif command[:2] == ["sysctl", "-p"]:
            self.ip_forward = "1"
        elif command[:2] == ["sysctl", "-n"]:
            return True, self.ip_forward + "\n", ""
        elif command == ["wg", "genkey"]:
            return True, "GENERATEDKEY=\n", ""
        return True, "", ""

    def mutations(self) -> List[List[str]]:
        return [
            c for c in self.commands
            if not any(c[:len(prefix)] == prefix for prefix in QUERY_PREFIXES)
        ]


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def env_file(tmp_path):
    path = tmp_path / "styx_env.sh"
    path.write_text(EXAMPLE_ENV)
    return path


@pytest.fixture
def root(tmp_path):
    path = tmp_path / "root"
    path.mkdir()
    return path


@pytest.fixture
def config():
    return StyxConfig(
        WG_PRIVATE_KEY="PRIVKEY",
        WG_CLIENT_IP="10.0.0.2",
        WG_PEER_PUBLIC_KEY="ABC",
        WG_ALLOWED_IPS="10.0.0.0/24",
        DOMAIN_NAME="example.com",
        NPM_ADMIN_EMAIL="a@b.com",
        NPM_ADMIN_PASSWORD="secret123",
        NPM_DATABASE_PASSWORD="dbpass",
    )


@pytest.fixture
def make_provisioner(env_file, root, host, tmp_path):
    """Provisioner wired to the fake host and a temporary filesystem root."""

    def factory(keygen=None, tool_lookup=None) -> Provisioner:
        return Provisioner(
            env_file,
            state_dir=tmp_path / "state",
            runner=host,
            provider_factory=lambda cfg, runner: build_providers(
                cfg, runner, root=root, compose_bin="/usr/bin/podman-compose"
            ),
            keygen=keygen or (lambda: "GENERATEDKEY="),
            check_root=lambda: None,
            tool_lookup=tool_lookup or (lambda tool: f"/usr/bin/{tool}"),
        )

    return factory
