"""
Generación del seed cloud-init del bastión.

El seed instala paquetes, crea el usuario administrador, fija el firewall
base, deja la plantilla del almacén de configuración y ejecuta `styx setup`.
"""

import shlex
from typing import Any, Dict, List, Optional

import yaml

from styx.templates import generate_env_template


BASE_PACKAGES = [
    "wireguard",
    "podman",
    "podman-compose",
    "python3-pip",
    "fail2ban",
    "ufw",
    "curl",
    "ca-certificates",
]

# (puerto/protocolo, comentario)
BASE_FIREWALL_RULES = [
    ("22/tcp", "SSH"),
    ("80/tcp", "HTTP - Nginx Proxy Manager"),
    ("443/tcp", "HTTPS - Nginx Proxy Manager"),
    ("51820/udp", "WireGuard"),
]


class _LiteralDumper(yaml.SafeDumper):
    """Dumper que emite strings multilínea como bloque literal (|)."""


def _str_representer(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_LiteralDumper.add_representer(str, _str_representer)


def firewall_script(extra_ports: Optional[List[str]] = None) -> str:
    lines = [
        "ufw default deny incoming",
        "ufw default allow outgoing",
    ]
    for port, comment in BASE_FIREWALL_RULES:
        lines.append(f"ufw allow {port}  # {comment}")
    for port in extra_ports or []:
        lines.append(f"ufw allow {port}")
    lines.append("ufw --force enable")
    return "\n".join(lines) + "\n"


def build_cloud_config(
    ssh_public_key: str,
    package_spec: str,
    hostname: str = "styx",
    admin_user: str = "styx-admin",
    timezone: str = "America/Chicago",
    extra_ports: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Documento cloud-config como diccionario.

    package_spec es lo que recibe `pip3 install` (URL git, ruta a wheel o
    requisito); no hay valor por defecto para no instalar otro paquete
    homónimo del índice.
    """
    if not ssh_public_key.strip():
        raise ValueError("Se requiere una clave SSH pública para el usuario administrador")
    if not package_spec.strip():
        raise ValueError("Se requiere el origen del paquete styx (URL git o wheel)")

    return {
        "hostname": hostname,
        "preserve_hostname": False,
        "package_update": True,
        "package_upgrade": True,
        "packages": list(BASE_PACKAGES),
        "ssh_pwauth": False,
        "users": [{
            "name": admin_user,
            "groups": "sudo",
            "shell": "/bin/bash",
            "sudo": ["ALL=(ALL) ALL"],
            "lock_passwd": True,
            "ssh_authorized_keys": [ssh_public_key.strip()],
        }],
        "timezone": timezone,
        "write_files": [{
            "path": "/root/styx_env.sh.template",
            "content": generate_env_template(),
            "permissions": "0600",
        }],
        "runcmd": [
            firewall_script(extra_ports),
            "systemctl enable --now fail2ban",
            f"pip3 install --break-system-packages {shlex.quote(package_spec.strip())}",
            "cp -n /root/styx_env.sh.template /root/styx_env.sh",
            "styx setup",
        ],
    }


def render_cloud_init(ssh_public_key: str, package_spec: str, **kwargs: Any) -> str:
    """Seed listo para usar como user-data (#cloud-config + YAML)."""
    document = build_cloud_config(ssh_public_key, package_spec, **kwargs)
    body = yaml.dump(document, Dumper=_LiteralDumper, sort_keys=False, default_flow_style=False)
    return "#cloud-config\n" + body
