"""Podman provider - configure phase and resource catalogue."""

import logging
from typing import Optional

from pydantic import BaseModel

from podman_provider import __version__
from podman_provider.clients.podman_secrets import PodmanSecretClient
from podman_provider.contracts.resource import ResourcePlugin
from podman_provider.core.connection import connect, resolve_endpoint
from podman_provider.core.context import ProviderContext
from podman_provider.core.models import ProviderConfig
from podman_provider.core.registry import RESOURCE_GROUP, MissingResourceError, PluginRegistry
from podman_provider.core.schema import PROVIDER_SCHEMA, ProviderSchema

logger = logging.getLogger(__name__)

TYPE_NAME = "podman"


class ProviderMetadata(BaseModel):
    type_name: str
    version: str


class PodmanProvider:
    """Entry point the host uses to configure the provider and reach its resources.

    ``version`` is the release version, "dev" for local builds and "test" in
    acceptance tests.

    Example:
        >>> provider = PodmanProvider()
        >>> context = provider.configure(ProviderConfig())
        >>> secrets = provider.resource("podman_secret", context)
    """

    def __init__(self, version: str = __version__, registry: Optional[PluginRegistry] = None):
        self.version = version
        self.registry = registry or PluginRegistry()

    def metadata(self) -> ProviderMetadata:
        return ProviderMetadata(type_name=TYPE_NAME, version=self.version)

    def schema(self) -> ProviderSchema:
        return PROVIDER_SCHEMA

    def configure(self, config: ProviderConfig) -> ProviderContext:
        """Resolve the endpoint and open the shared connection.

        Raises:
            ConfigurationError: If no endpoint can be derived
            PodmanConnectionError: If Podman cannot be reached
        """
        endpoint = resolve_endpoint(config.endpoint)
        client = connect(endpoint, timeout=config.timeout)
        return ProviderContext(client=PodmanSecretClient(client), endpoint=endpoint)

    def resources(self) -> dict[str, type[ResourcePlugin]]:
        """Installed resource types keyed by full type name (e.g. "podman_secret")."""
        result = {}
        for name in self.registry.list_group(RESOURCE_GROUP):
            resource_class = self.registry.get(RESOURCE_GROUP, name)
            result[f"{TYPE_NAME}_{resource_class.type_suffix}"] = resource_class
        return result

    def resource(self, type_name: str, context: ProviderContext) -> ResourcePlugin:
        """Instantiate a resource type bound to the shared context.

        Raises:
            MissingResourceError: If the type is not installed
        """
        resources = self.resources()
        if type_name not in resources:
            raise MissingResourceError(RESOURCE_GROUP, type_name)
        return resources[type_name](context)
