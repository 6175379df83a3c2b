"""
Generadores de los artefactos del bastión (WireGuard, sysctl, ufw, compose, systemd)
"""

from styx.core.project.models import StyxConfig


UFW_BLOCK_BEGIN = "# BEGIN styx"
UFW_BLOCK_END = "# END styx"

UFW_FORWARD_POLICY = 'DEFAULT_FORWARD_POLICY="DROP"'

NPM_NETWORK = "npm-network"
NPM_UNIT = "nginx-proxy-manager"
NPM_CONTAINER = "nginx-proxy-manager"


def generate_wireguard_config(config: StyxConfig) -> str:
    """
    Genera wg0.conf: interfaz del bastión y un único peer
    """
    return f"""[Interface]
PrivateKey = {config.wg_private_key}
Address = {config.wg_client_ip}/24
ListenPort = {config.wg_listen_port}

[Peer]
PublicKey = {config.wg_peer_public_key}
AllowedIPs = {config.wg_allowed_ips}
PersistentKeepalive = {config.wg_keepalive}
"""


def generate_sysctl_forwarding() -> str:
    return """net.ipv4.ip_forward=1
net.ipv6.conf.default.forwarding=1
net.ipv6.conf.all.forwarding=1
"""


def generate_ufw_block(config: StyxConfig) -> str:
    """
    Bloque gestionado de /etc/ufw/before.rules (NAT + forward solo para el túnel).
    Va delimitado por marcadores para reemplazarlo en sitio.
    """
    iface = config.wg_interface
    return f"""{UFW_BLOCK_BEGIN}
# NAT table rules
*nat
:POSTROUTING ACCEPT [0:0]
:PREROUTING ACCEPT [0:0]

# Forward traffic only from WireGuard subnet through {config.public_interface}
-A POSTROUTING -s {config.wg_allowed_ips} -o {config.public_interface} -j MASQUERADE

COMMIT

# Filter table rules for WireGuard
*filter
:ufw-before-input ACCEPT [0:0]
:ufw-before-output ACCEPT [0:0]
:ufw-before-forward ACCEPT [0:0]

# Forward only WireGuard traffic
-A ufw-before-forward -i {iface} -j ACCEPT
-A ufw-before-forward -o {iface} -j ACCEPT

# Ensure VPN traffic is allowed
-A ufw-before-input -i {iface} -j ACCEPT
-A ufw-before-output -o {iface} -j ACCEPT

COMMIT
{UFW_BLOCK_END}
"""


def generate_compose(config: StyxConfig) -> str:
    """
    docker-compose.yml del stack: Nginx Proxy Manager + MariaDB en npm-network
    """
    db_password = config.npm_database_password
    return f"""services:
  nginx:
    image: 'jc21/nginx-proxy-manager:latest'
    container_name: {NPM_CONTAINER}
    restart: unless-stopped
    ports:
      - '80:80'
      - '81:81'
      - '443:443'
    volumes:
      - ./data:/data
      - ./letsencrypt:/etc/letsencrypt
    environment:
      DB_MYSQL_HOST: "db"
      DB_MYSQL_PORT: 3306
      DB_MYSQL_USER: "npm"
      DB_MYSQL_PASSWORD: "{db_password}"
      DB_MYSQL_NAME: "npm"
    depends_on:
      - db

  db:
    image: 'jc21/mariadb-aria:latest'
    container_name: {NPM_CONTAINER}-db
    restart: unless-stopped
    environment:
      MYSQL_ROOT_PASSWORD: "{db_password}"
      MYSQL_DATABASE: "npm"
      MYSQL_USER: "npm"
      MYSQL_PASSWORD: "{db_password}"
      MARIADB_AUTO_UPGRADE: "1"
    volumes:
      - ./data/mysql:/var/lib/mysql

networks:
  default:
    name: {NPM_NETWORK}
    external: true
"""


def generate_proxy_unit(compose_bin: str, working_directory: str = "/opt/npm") -> str:
    """
    Unidad systemd que supervisa el stack (up/down de podman-compose)
    """
    return f"""[Unit]
Description=Nginx Proxy Manager
After=network.target podman.service
Requires=podman.service

[Service]
WorkingDirectory={working_directory}
ExecStart={compose_bin} up
ExecStop={compose_bin} down
Type=simple
Restart=always
RestartSec=10
StandardOutput=journal
StandardError=journal

[Install]
WantedBy=multi-user.target
"""


def generate_env_template() -> str:
    """
    Plantilla del almacén de configuración (/root/styx_env.sh)
    """
    return """# ===== IMPORTANT =====
# Replace all empty values and example values below with your actual configuration
# before running `styx setup`
# =====================

# Wireguard configuration
# WG_PRIVATE_KEY will be auto-generated if left empty
export WG_PRIVATE_KEY=""
# Example: 10.0.0.2
export WG_CLIENT_IP=""
# Public key from your WireGuard server
export WG_PEER_PUBLIC_KEY=""
# Subnet to route through the VPN, example: 10.0.0.0/24
export WG_ALLOWED_IPS=""

# Domain configuration
export DOMAIN_NAME="example.com"

# Nginx Proxy Manager configuration
# Admin email for NPM login
export NPM_ADMIN_EMAIL=""
# Strong password for NPM admin account (min 8 chars)
export NPM_ADMIN_PASSWORD=""
# Strong password for NPM database (different from admin password)
export NPM_DATABASE_PASSWORD=""
"""
