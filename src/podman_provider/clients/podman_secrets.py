"""Podman secret client adapter.

Wraps podman-py so the reconciler only ever deals with ``SecretRecord`` and
provider exceptions.
"""

import json
import logging
from typing import Optional

import requests
from podman import PodmanClient
from podman.errors import APIError, NotFound

from podman_provider.contracts.secret_client import SecretClientPlugin, SecretRecord
from podman_provider.core.exceptions import RemoteOperationError, SecretNotFoundError

logger = logging.getLogger(__name__)


class PodmanSecretClient(SecretClientPlugin):
    """Secret client backed by the libpod REST API.

    Secret creation goes through the raw API client because the high level
    ``SecretsManager.create`` does not forward labels or driver options.

    Example:
        >>> client = PodmanSecretClient(PodmanClient(base_url="unix:///run/podman/podman.sock"))
        >>> secret_id = client.create("db-password", b"hunter2", labels={"app": "db"})
    """

    def __init__(self, client: PodmanClient):
        self._client = client

    def create(
        self,
        name: str,
        payload: bytes,
        driver: Optional[str] = None,
        driver_opts: Optional[dict[str, str]] = None,
        labels: Optional[dict[str, str]] = None,
    ) -> str:
        """Create a secret via POST /secrets/create."""
        params = {"name": name}
        if driver is not None:
            params["driver"] = driver
        if driver_opts is not None:
            params["driveropts"] = json.dumps(driver_opts)
        if labels is not None:
            params["labels"] = json.dumps(labels)

        try:
            response = self._client.api.post("/secrets/create", params=params, data=payload)
            response.raise_for_status()
            secret_id = response.json()["ID"]
        except (APIError, requests.exceptions.RequestException) as e:
            raise RemoteOperationError("create secret", _message(e)) from e
        except (KeyError, ValueError) as e:
            raise RemoteOperationError("create secret", f"unexpected response from Podman: {e}") from e

        logger.debug(f"Created secret '{name}' with id {secret_id}")
        return secret_id

    def list(self, filters: Optional[dict[str, list[str]]] = None) -> list[SecretRecord]:
        """List secrets, optionally filtered (e.g. {"id": [secret_id]})."""
        try:
            secrets = self._client.secrets.list(filters=filters)
        except (APIError, requests.exceptions.RequestException) as e:
            raise RemoteOperationError("list secrets", _message(e)) from e

        return [SecretRecord.from_api(secret.attrs) for secret in secrets]

    def remove(self, secret_id: str) -> None:
        """Remove a secret by id."""
        try:
            self._client.secrets.remove(secret_id)
        except NotFound as e:
            raise SecretNotFoundError("remove secret", _message(e)) from e
        except (APIError, requests.exceptions.RequestException) as e:
            raise RemoteOperationError("remove secret", _message(e)) from e


def _message(error: Exception) -> str:
    explanation = getattr(error, "explanation", None)
    return str(explanation or error)
