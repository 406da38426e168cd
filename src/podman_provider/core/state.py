"""State store - persisted observed state for the local runner.

The state file is JSON:

    {
      "format_version": 1,
      "resources": {
        "db_password": {
          "type": "podman_secret",
          "schema_version": 1,
          "attributes": {"id": "...", "name": "db-password", ...}
        }
      }
    }

Attributes include secret payloads in plaintext, so the file is written with
mode 0600.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from podman_provider.core.exceptions import StateFileError

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
STATE_PATH_ENV = "PODMAN_PROVIDER_STATE"
DEFAULT_STATE_FILE = "podman-provider.state.json"


def default_state_path() -> Path:
    """State path from PODMAN_PROVIDER_STATE, else ./podman-provider.state.json."""
    return Path(os.environ.get(STATE_PATH_ENV, DEFAULT_STATE_FILE))


class StateEntry:
    """Persisted state of one resource instance."""

    def __init__(self, type: str, schema_version: int, attributes: dict[str, Any]):
        self.type = type
        self.schema_version = schema_version
        self.attributes = attributes

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "schema_version": self.schema_version,
            "attributes": self.attributes,
        }


class StateStore:
    """JSON file backed state, keyed by resource address."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._entries: Optional[dict[str, StateEntry]] = None

    def load(self) -> dict[str, StateEntry]:
        """Load entries from disk; a missing file is an empty state.

        Raises:
            StateFileError: If the file is unreadable or has an unknown format
        """
        if self._entries is not None:
            return self._entries

        if not self.path.exists():
            self._entries = {}
            return self._entries

        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StateFileError(f"Cannot read state file {self.path}: {e}") from e

        format_version = data.get("format_version")
        if format_version != FORMAT_VERSION:
            raise StateFileError(
                f"Unsupported state format version {format_version!r} in {self.path}"
            )

        self._entries = {
            address: StateEntry(
                type=entry["type"],
                schema_version=entry.get("schema_version", 0),
                attributes=entry.get("attributes", {}),
            )
            for address, entry in data.get("resources", {}).items()
        }
        return self._entries

    def get(self, address: str) -> Optional[StateEntry]:
        return self.load().get(address)

    def addresses(self) -> list[str]:
        return sorted(self.load())

    def set(self, address: str, entry: StateEntry) -> None:
        self.load()[address] = entry
        self.save()

    def remove(self, address: str) -> None:
        if self.load().pop(address, None) is not None:
            self.save()

    def save(self) -> None:
        """Write all entries atomically with owner-only permissions."""
        data = {
            "format_version": FORMAT_VERSION,
            "resources": {address: entry.to_dict() for address, entry in sorted(self.load().items())},
        }

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StateFileError(f"Cannot write state file {self.path}: {e}") from e

        logger.debug(f"Saved {len(data['resources'])} resource(s) to {self.path}")
