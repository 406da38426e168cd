"""Manifest YAML - the desired configuration fed to the local runner.

Example manifest:
    provider:
      endpoint: unix:///run/user/1000/podman/podman.sock

    resources:
      db_password:
        type: podman_secret
        name: db-password
        secret: "{{ env_var('DB_PASSWORD') }}"
        labels:
          app: db
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from podman_provider.config.loader import ConfigLoader
from podman_provider.core.models import ProviderConfig

DEFAULT_RESOURCE_TYPE = "podman_secret"


class Manifest(BaseModel):
    """Provider block plus resources keyed by address."""

    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    resources: dict[str, dict[str, Any]] = Field(default_factory=dict)

    class Config:
        extra = "forbid"

    def resource_type(self, address: str) -> str:
        return self.resources[address].get("type", DEFAULT_RESOURCE_TYPE)

    def resource_config(self, address: str) -> dict[str, Any]:
        """Resource attributes without the ``type`` selector."""
        return {k: v for k, v in self.resources[address].items() if k != "type"}


def load_manifest(path: Path, runtime_vars: dict[str, str] | None = None) -> Manifest:
    """Read, render and validate a manifest file.

    Raises:
        FileNotFoundError: If the manifest does not exist
        KeyError: If a template references an unset variable
        pydantic.ValidationError: If the manifest structure is invalid
    """
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    rendered = ConfigLoader(runtime_vars=runtime_vars).render_dict(raw)
    return Manifest.model_validate(rendered)
