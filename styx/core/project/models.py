"""
Modelo de configuración (inmutable, agnóstico de CLI y filesystem).

Los alias son las claves del almacén key=value (/root/styx_env.sh).
"""

from typing import Optional

from pydantic import BaseModel, Field


class StyxConfig(BaseModel):
    wg_private_key: Optional[str] = Field(None, alias="WG_PRIVATE_KEY", description="Clave privada WireGuard (se genera si falta)")
    wg_client_ip: str = Field(..., alias="WG_CLIENT_IP", description="IP del bastión dentro del túnel")
    wg_peer_public_key: str = Field(..., alias="WG_PEER_PUBLIC_KEY", description="Clave pública del peer")
    wg_allowed_ips: str = Field(..., alias="WG_ALLOWED_IPS", description="Subred enrutada por el túnel")
    domain_name: str = Field(..., alias="DOMAIN_NAME")
    npm_admin_email: str = Field(..., alias="NPM_ADMIN_EMAIL")
    npm_admin_password: str = Field(..., alias="NPM_ADMIN_PASSWORD")
    npm_database_password: str = Field(..., alias="NPM_DATABASE_PASSWORD")

    wg_interface: str = Field("wg0", alias="WG_INTERFACE")
    wg_listen_port: int = Field(51820, alias="WG_LISTEN_PORT")
    wg_keepalive: int = Field(25, alias="WG_KEEPALIVE")
    public_interface: str = Field("eth0", alias="PUBLIC_INTERFACE")

    class Config:
        frozen = True
        populate_by_name = True
        extra = "ignore"

    def with_private_key(self, private_key: str) -> "StyxConfig":
        """Copia con la clave privada resuelta; el original no cambia."""
        return self.model_copy(update={"wg_private_key": private_key})

    def secrets(self) -> list:
        """Valores que nunca deben aparecer en claro en un log."""
        return [
            self.wg_private_key or "",
            self.npm_admin_password,
            self.npm_database_password,
        ]
