"""Bot keystore -- the JSON credentials file issued for a bot account."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from ..errors import KeystoreError

logger = logging.getLogger(__name__)

_REQUIRED = ("client_id", "access_token")


@dataclass(frozen=True)
class Keystore:
    client_id: str
    # Pre-issued bearer token; the only credential REST and relay calls use.
    access_token: str
    # Kept from the issued keystore file but unused: requests are not signed.
    session_id: str = ""
    private_key: str = ""
    pin_token: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Keystore:
        if not isinstance(raw, dict):
            raise KeystoreError("keystore must be a JSON object")
        missing = [k for k in _REQUIRED if not raw.get(k)]
        if missing:
            raise KeystoreError(f"keystore is missing: {', '.join(missing)}")
        known = {f.name for f in fields(cls)}
        return cls(**{k: str(v) for k, v in raw.items() if k in known})

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def load_keystore(path: Path | str) -> Keystore:
    """Read and validate a keystore file.

    Raises :class:`KeystoreError` for a missing file, invalid JSON or
    missing required fields.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text())
    except FileNotFoundError as exc:
        raise KeystoreError(f"keystore not found: {path}") from exc
    except (json.JSONDecodeError, OSError) as exc:
        raise KeystoreError(f"failed to read keystore {path}: {exc}") from exc
    keystore = Keystore.from_dict(raw)
    logger.info("[keystore.load] loaded client_id=%s from %s", keystore.client_id, path)
    return keystore
