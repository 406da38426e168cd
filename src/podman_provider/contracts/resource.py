"""Resource plugin contract - the lifecycle a host drives for each resource type.

Resource plugins are discovered through the ``podman_provider.resources``
entry-point group and instantiated with the ``ProviderContext`` produced by
the provider's configure phase.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from podman_provider.core.context import ProviderContext
from podman_provider.core.schema import ResourceSchema


class ResourcePlugin(ABC):
    """Abstract base class for resource types managed by the provider.

    Lifecycle:
        1. __init__(context) - Instantiated once configure() produced a context
        2. create() - Desired configuration -> new remote object + state
        3. read() - Prior state -> refreshed state, or None if the object is gone
        4. update() - Desired configuration + prior state -> new state
        5. delete() - Prior state -> remote object removed
        6. import_state() - Remote id -> minimal state, completed by read()

    Implementations must be stateless apart from the shared context so the
    host can drive several resource instances concurrently.

    Example:
        >>> resource = registry.get("podman_provider.resources", "secret")(context)
        >>> state = resource.create(config)
        >>> state = resource.read(state)
        >>> resource.delete(state)
    """

    #: Suffix appended to the provider type name, e.g. "secret" -> "podman_secret"
    type_suffix: str = ""

    def __init__(self, context: ProviderContext):
        self.context = context

    def metadata(self, provider_type_name: str) -> str:
        """Return the full resource type name."""
        return f"{provider_type_name}_{self.type_suffix}"

    @classmethod
    @abstractmethod
    def schema(cls) -> ResourceSchema:
        """Declare the resource attributes."""
        ...

    @abstractmethod
    def create(self, config: Any) -> Any:
        """Create the remote object and return its state."""
        ...

    @abstractmethod
    def read(self, prior: Any) -> Optional[Any]:
        """Refresh state from the remote object.

        Returns:
            Refreshed state, or None when the remote object no longer exists
        """
        ...

    @abstractmethod
    def update(self, config: Any, prior: Any) -> Any:
        """Apply configuration changes that do not require replacement."""
        ...

    @abstractmethod
    def delete(self, prior: Any) -> None:
        """Remove the remote object. Removing an already absent object succeeds."""
        ...

    @abstractmethod
    def import_state(self, resource_id: str) -> Any:
        """Seed state for an existing remote object from its id."""
        ...

    @abstractmethod
    def plan(self, config: Optional[Any], prior: Optional[Any]) -> Any:
        """Compare configuration with state and return the required action."""
        ...

    @abstractmethod
    def parse_config(self, raw: dict[str, Any]) -> Any:
        """Validate raw configuration into the resource's config model.

        Raises:
            pydantic.ValidationError: If the configuration violates the schema
        """
        ...

    @abstractmethod
    def parse_state(self, attributes: dict[str, Any]) -> Any:
        """Build the resource's state model from persisted attributes."""
        ...

    @abstractmethod
    def dump_state(self, state: Any) -> dict[str, Any]:
        """Flatten a state model into persisted attributes."""
        ...

    def upgrade_state(self, attributes: dict[str, Any], from_version: int) -> dict[str, Any]:
        """Upgrade persisted attributes written by an older schema version.

        Note:
            Default implementation returns the attributes unchanged.
        """
        return attributes
