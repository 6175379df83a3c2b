"""
Almacén de fingerprints del último estado aplicado.

Un JSON bajo state_root(): {recurso: {"fingerprint": sha256, "applied_at": iso}}.
Lo escribe el apply; lo lee `styx status` para reportar drift.

Es informativo: la clasificación de recursos nunca depende de él, así que un
archivo ilegible o no escribible se registra como warning y el run sigue.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger("styx")


class FingerprintStore:
    """Fingerprints persistidos por recurso."""

    FILENAME = "fingerprints.json"

    def __init__(self, root: Path):
        self.path = Path(root) / self.FILENAME

    def load(self) -> Dict[str, Dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except (OSError, ValueError) as e:
            logger.warning("Fingerprints ilegibles en %s, se ignoran: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, resource: str) -> Optional[str]:
        entry = self.load().get(resource)
        return entry.get("fingerprint") if isinstance(entry, dict) else None

    def record(self, resource: str, fingerprint: str) -> bool:
        """Registra el fingerprint aplicado; False si no se pudo escribir."""
        data = self.load()
        data[resource] = {
            "fingerprint": fingerprint,
            "applied_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n")
        except OSError as e:
            logger.warning("No se pudo registrar el fingerprint de %s en %s: %s", resource, self.path, e)
            return False
        return True
