"""Connection resolution - derive the Podman endpoint and open a client."""

import logging
import os
from typing import Mapping, Optional

import requests
from podman import PodmanClient
from podman.errors import APIError

from podman_provider.core.exceptions import ConfigurationError, PodmanConnectionError

logger = logging.getLogger(__name__)

RUNTIME_DIR_ENV = "XDG_RUNTIME_DIR"
SOCKET_SUFFIX = "podman/podman.sock"


def resolve_endpoint(endpoint: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> str:
    """Resolve the Podman API endpoint.

    An explicit endpoint always wins. Otherwise the rootless user socket under
    ``$XDG_RUNTIME_DIR`` is used.

    Args:
        endpoint: Explicitly configured endpoint, if any
        environ: Environment to read from (default: os.environ)

    Returns:
        Endpoint URL, e.g. "unix:///run/user/1000/podman/podman.sock"

    Raises:
        ConfigurationError: If no endpoint is configured and XDG_RUNTIME_DIR is unset
    """
    if endpoint:
        return endpoint

    environ = os.environ if environ is None else environ
    runtime_dir = environ.get(RUNTIME_DIR_ENV)
    if not runtime_dir:
        raise ConfigurationError(
            f"Default endpoint cannot be used: {RUNTIME_DIR_ENV} env var isn't set. "
            "Set it or configure 'endpoint' explicitly."
        )

    return f"unix://{runtime_dir.rstrip('/')}/{SOCKET_SUFFIX}"


def connect(endpoint: str, timeout: Optional[int] = None) -> PodmanClient:
    """Open a client for the endpoint and verify that Podman answers.

    Raises:
        PodmanConnectionError: If the service cannot be reached
    """
    kwargs = {"base_url": endpoint}
    if timeout is not None:
        kwargs["timeout"] = timeout

    try:
        client = PodmanClient(**kwargs)
    except ValueError as e:
        raise PodmanConnectionError(f"Failed to connect to podman socket {endpoint}: {e}") from e

    try:
        reachable = client.ping()
    except (APIError, requests.exceptions.RequestException) as e:
        client.close()
        raise PodmanConnectionError(f"Failed to connect to podman socket {endpoint}: {e}") from e

    if not reachable:
        client.close()
        raise PodmanConnectionError(f"Failed to connect to podman socket {endpoint}: ping failed")

    logger.info(f"Connected to Podman at {endpoint}")
    return client
