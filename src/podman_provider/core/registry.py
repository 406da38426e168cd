"""Plugin registry for discovering resource types via entry_points."""

from importlib.metadata import entry_points
from typing import Any

from podman_provider.core.exceptions import ProviderError

RESOURCE_GROUP = "podman_provider.resources"


class MissingResourceError(ProviderError):
    """Raised when a requested resource type is not installed."""

    def __init__(self, group: str, name: str):
        self.group = group
        self.name = name
        super().__init__(
            f"No resource type '{name}' found in group '{group}'. "
            f"Installed: {', '.join(PluginRegistry().list_group(group)) or '(none)'}"
        )


class PluginRegistry:
    """Registry for discovering provider plugins.

    Plugins are discovered via Python entry_points mechanism. Each package
    declares its resource types in pyproject.toml:

    [project.entry-points."podman_provider.resources"]
    secret = "podman_provider.resources.secret:SecretResource"

    Unlike instances, resource classes are cached: a resource needs the
    provider context to be instantiated.
    """

    def __init__(self):
        self._cache: dict[tuple[str, str], Any] = {}

    def get(self, group: str, name: str) -> Any:
        """Load a plugin class by group and name.

        Args:
            group: Plugin group (e.g., "podman_provider.resources")
            name: Plugin name (e.g., "secret")

        Returns:
            Plugin class

        Raises:
            MissingResourceError: If plugin not found

        Examples:
            >>> registry = PluginRegistry()
            >>> SecretResource = registry.get("podman_provider.resources", "secret")
        """
        cache_key = (group, name)
        if cache_key in self._cache:
            return self._cache[cache_key]

        plugin_ep = None
        for ep in entry_points(group=group):
            if ep.name == name:
                plugin_ep = ep
                break

        if plugin_ep is None:
            raise MissingResourceError(group, name)

        plugin_class = plugin_ep.load()
        self._cache[cache_key] = plugin_class

        return plugin_class

    def list_group(self, group: str) -> list[str]:
        """List all plugin names in a group."""
        return sorted(ep.name for ep in entry_points(group=group))

    def has_plugin(self, group: str, name: str) -> bool:
        """Check if a plugin is installed without loading it."""
        return any(ep.name == name for ep in entry_points(group=group))

    def clear_cache(self):
        """Clear the plugin class cache.

        Useful for testing or when plugins need to be reloaded.
        """
        self._cache.clear()
