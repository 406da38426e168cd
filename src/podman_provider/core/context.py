"""Provider context - handed from the configure phase to every resource."""

from podman_provider.contracts.secret_client import SecretClientPlugin


class ProviderContext:
    """Shared, read-only state produced by ``PodmanProvider.configure()``.

    The same context is passed by reference to every resource instance; it
    holds the live client and nothing that changes per resource.
    """

    def __init__(self, client: SecretClientPlugin, endpoint: str):
        self.client = client
        self.endpoint = endpoint

    def __repr__(self) -> str:
        return f"ProviderContext(endpoint={self.endpoint!r})"
