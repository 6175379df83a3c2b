"""
Validación del almacén de configuración (lógica pura).

Fail-fast: todas las claves requeridas deben estar no vacías antes de
cualquier mutación del host.
"""

from typing import Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from styx.core.errors import PreconditionError
from styx.core.project.models import StyxConfig


REQUIRED_KEYS = [
    "WG_PEER_PUBLIC_KEY",
    "WG_CLIENT_IP",
    "WG_ALLOWED_IPS",
    "DOMAIN_NAME",
    "NPM_ADMIN_EMAIL",
    "NPM_ADMIN_PASSWORD",
    "NPM_DATABASE_PASSWORD",
]


def missing_required(values: Mapping[str, Optional[str]]) -> List[str]:
    """Claves requeridas ausentes o vacías, en el orden de REQUIRED_KEYS."""
    return [key for key in REQUIRED_KEYS if not (values.get(key) or "").strip()]


def build_config(values: Mapping[str, Optional[str]]) -> StyxConfig:
    """
    Construye StyxConfig desde el almacén.
    Lanza PreconditionError listando todas las claves faltantes o inválidas.
    """
    missing = missing_required(values)
    if missing:
        raise PreconditionError(
            f"Variables requeridas sin valor: {', '.join(missing)}", missing=missing
        )

    # Vacío equivale a ausente: las opcionales toman su valor por defecto
    cleaned: Dict[str, str] = {
        key: value.strip() for key, value in values.items() if value is not None and value.strip()
    }
    try:
        return StyxConfig(**cleaned)
    except PydanticValidationError as e:
        fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise PreconditionError(
            f"Configuración inválida: {', '.join(fields)}", missing=fields
        ) from e
