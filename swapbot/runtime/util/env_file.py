"""Read-only ``.env`` file loader."""

from __future__ import annotations

import threading
from pathlib import Path


class EnvFile:
    """Parses a simple ``KEY=VALUE`` file, re-reading it on every lookup.

    Blank lines and ``#`` comments are skipped, a leading ``export`` is
    accepted so the same file can be sourced from a shell, and matching
    quotes around values are removed.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def read(self, key: str) -> str:
        """Return the value for *key*, or ``""`` if absent."""
        return self.read_all().get(key, "")

    def read_all(self) -> dict[str, str]:
        with self._lock:
            if not self.path.exists():
                return {}
            text = self.path.read_text()
        result: dict[str, str] = {}
        for line in text.splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            if line.startswith("export "):
                line = line[len("export "):]
            key, _, value = line.partition("=")
            result[key.strip()] = _unquote(value.strip())
        return result


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value
